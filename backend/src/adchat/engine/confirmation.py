"""
Human-readable confirmation prompts for pending mutating actions.

Every template describes exactly what will run if the user says yes, with
budgets converted from minor units and enums rendered in plain language.
"""

from __future__ import annotations

import json
from collections.abc import Callable, Mapping
from decimal import Decimal
from typing import Any

from ..domain.models import PendingAction

CONFIRM_HINT = "Say **yes** to confirm or **no** to cancel."

_OBJECTIVES = {
    "OUTCOME_AWARENESS": "Get people to notice your brand",
    "OUTCOME_ENGAGEMENT": "Get more engagement",
    "OUTCOME_LEADS": "Collect leads",
    "OUTCOME_SALES": "Get sales",
    "OUTCOME_TRAFFIC": "Get website visits",
    "OUTCOME_APP_PROMOTION": "Get app installs",
}

_OPTIMIZATION_GOALS = {
    "LINK_CLICKS": "Get clicks to your website",
    "LANDING_PAGE_VIEWS": "Get people to view your page",
    "IMPRESSIONS": "Show your ad to as many people as possible",
    "REACH": "Reach as many unique people as possible",
    "CONVERSIONS": "Get sales or sign-ups",
    "LEAD_GENERATION": "Collect leads",
    "APP_INSTALLS": "Get app installs",
    "VALUE": "Maximize your return on ad spend",
}

_AUDIENCE_TYPES = {
    "CUSTOM": "Customer list",
    "WEBSITE": "Website visitors",
    "APP": "App users",
    "ENGAGEMENT": "People who engaged with you",
}


def format_money(minor_units: Any) -> str:
    """``5000`` -> ``$50``; ``1250`` -> ``$12.50``."""
    amount = Decimal(str(minor_units)) / 100
    if amount == amount.to_integral_value():
        return f"${int(amount):,}"
    return f"${amount:,.2f}"


def format_status(status: Any, *, creating: bool = True) -> str:
    if status == "ACTIVE":
        return "Will start running right away" if creating else "Turn ON"
    if status == "PAUSED":
        return "Paused (you can turn it on later)" if creating else "Pause"
    return str(status)


def format_objective(objective: Any) -> str:
    return _OBJECTIVES.get(str(objective), str(objective))


def format_optimization_goal(goal: Any) -> str:
    return _OPTIMIZATION_GOALS.get(str(goal), str(goal))


def format_lookalike_ratio(ratio: Any) -> str:
    value = float(ratio)
    if value <= 0.01:
        closeness = "very similar"
    elif value <= 0.05:
        closeness = "similar"
    else:
        closeness = "broader reach"
    return f"{round(value * 100)}% ({closeness})"


def format_updates(updates: Mapping[str, Any]) -> str:
    lines: list[str] = []
    for key, value in updates.items():
        if key == "status":
            lines.append(f"• Status: {format_status(value, creating=False)}")
        elif key in ("daily_budget", "dailyBudget"):
            lines.append(f"• Daily budget: {format_money(value)}")
        elif key in ("lifetime_budget", "lifetimeBudget"):
            lines.append(f"• Total budget: {format_money(value)}")
        elif key in ("bid_amount", "bidAmount"):
            lines.append(f"• Bid amount: {format_money(value)}")
        elif key == "name":
            lines.append(f'• Name: "{value}"')
        else:
            lines.append(f"• {key}: {value}")
    return "\n".join(lines) if lines else "• (no changes given)"


def _create_campaign(args: Mapping[str, Any]) -> str:
    budget = args.get("dailyBudget")
    budget_text = f"{format_money(budget)} per day" if budget else "no budget yet"
    return (
        "🚀 Ready to create your new campaign!\n\n"
        "Here's what I'll set up:\n"
        f'• Name: "{args.get("name")}"\n'
        f"• Goal: {format_objective(args.get('objective'))}\n"
        f"• Budget: {budget_text}\n"
        f"• Status: {format_status(args.get('status', 'PAUSED'))}\n\n"
        f"Should I create this? {CONFIRM_HINT}"
    )


def _update(label: str) -> Callable[[Mapping[str, Any]], str]:
    def render(args: Mapping[str, Any]) -> str:
        return (
            f"✏️ I'll make these changes to your {label}:\n\n"
            f"{format_updates(args.get('updates') or {})}\n\n"
            f"Sound good? {CONFIRM_HINT}"
        )

    return render


def _delete(label: str, consequence: str) -> Callable[[Mapping[str, Any]], str]:
    def render(args: Mapping[str, Any]) -> str:
        return (
            f"⚠️ Just to be sure - you want me to delete this {label}?\n\n"
            f"{consequence}\n\n"
            f"{CONFIRM_HINT}"
        )

    return render


def _create_ad_set(args: Mapping[str, Any]) -> str:
    targeting = args.get("targeting") or {}
    countries = (targeting.get("geo_locations") or {}).get("countries") or []
    lines = [
        "🎯 Ready to set up your ad targeting!\n",
        f'• Name: "{args.get("name")}"',
        f"• Budget: {format_money(args.get('dailyBudget', 0))} per day",
        f"• Goal: {format_optimization_goal(args.get('optimizationGoal'))}",
    ]
    if countries:
        lines.append(f"• Countries: {', '.join(countries)}")
    if targeting.get("age_min") or targeting.get("age_max"):
        lines.append(
            f"• Ages: {targeting.get('age_min', 18)}-{targeting.get('age_max', 65)}"
        )
    lines.append(f"• Status: {format_status(args.get('status', 'PAUSED'))}")
    return "\n".join(lines) + f"\n\nShould I create this? {CONFIRM_HINT}"


def _create_ad(args: Mapping[str, Any]) -> str:
    lines = ["📢 Ready to create your ad!\n", f'• Name: "{args.get("name")}"']
    if args.get("headline"):
        lines.append(f'• Headline: "{args["headline"]}"')
    if args.get("message"):
        lines.append(f'• Text: "{args["message"]}"')
    if args.get("link"):
        lines.append(f"• Link: {args['link']}")
    lines.append(f"• Status: {format_status(args.get('status', 'PAUSED'))}")
    return "\n".join(lines) + f"\n\nShould I create this ad? {CONFIRM_HINT}"


def _create_custom_audience(args: Mapping[str, Any]) -> str:
    subtype = args.get("subtype")
    return (
        "👥 I'll create a new audience for you!\n\n"
        f'• Name: "{args.get("name")}"\n'
        f"• Type: {_AUDIENCE_TYPES.get(str(subtype), subtype)}\n\n"
        f"Ready to create? {CONFIRM_HINT}"
    )


def _create_lookalike_audience(args: Mapping[str, Any]) -> str:
    return (
        "👥 I'll find people similar to your existing audience!\n\n"
        f'• Name: "{args.get("name")}"\n'
        f"• Country: {args.get('country')}\n"
        f"• Size: {format_lookalike_ratio(args.get('ratio', 0.01))}\n\n"
        f"Ready to create? {CONFIRM_HINT}"
    )


def _generic(tool_name: str, args: Mapping[str, Any]) -> str:
    dump = json.dumps(dict(args), indent=2, ensure_ascii=False, default=str)
    return (
        f"I'm ready to run {tool_name}. Here's what I'll send:\n\n"
        f"```json\n{dump}\n```\n\n"
        f"Should I go ahead? {CONFIRM_HINT}"
    )


_TEMPLATES: dict[str, Callable[[Mapping[str, Any]], str]] = {
    "create_campaign": _create_campaign,
    "update_campaign": _update("campaign"),
    "delete_campaign": _delete(
        "campaign", "Once deleted, it's gone forever and can't be recovered."
    ),
    "create_ad_set": _create_ad_set,
    "update_ad_set": _update("ad targeting"),
    "delete_ad_set": _delete(
        "ad set", "This will delete the targeting group and ALL ads in it."
    ),
    "create_ad": _create_ad,
    "update_ad": _update("ad"),
    "delete_ad": _delete("ad", "This will permanently delete your ad."),
    "create_custom_audience": _create_custom_audience,
    "create_lookalike_audience": _create_lookalike_audience,
}


def build_confirmation_message(action: PendingAction) -> str:
    template = _TEMPLATES.get(action.tool_name)
    if template is None:
        return _generic(action.tool_name, action.arguments)
    return template(action.arguments)
