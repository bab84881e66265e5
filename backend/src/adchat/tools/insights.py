from __future__ import annotations

from typing import Any, Literal

from pydantic import Field

from ..deps import Deps
from ._common import INSIGHT_FIELDS, DatePreset, ToolArgs, data_of, resolve_account_id
from .registry import ToolDefinition

ACCOUNT_INSIGHT_FIELDS = (
    INSIGHT_FIELDS + ",action_values,purchase_roas,website_purchase_roas"
)
CAMPAIGN_INSIGHT_FIELDS = INSIGHT_FIELDS + ",action_values,purchase_roas"

AccountDatePreset = Literal[
    "today",
    "yesterday",
    "last_7d",
    "last_14d",
    "last_30d",
    "this_month",
    "last_month",
]


class AccountInsightsArgs(ToolArgs):
    account_id: str | None = Field(
        default=None,
        description="The ad account ID, with or without the 'act_' prefix.",
    )
    date_preset: AccountDatePreset = "last_7d"
    breakdowns: (
        list[Literal["age", "gender", "country", "placement", "device_platform"]]
        | None
    ) = None


class CampaignInsightsArgs(ToolArgs):
    campaign_id: str = Field(description="The campaign ID")
    date_preset: DatePreset = "last_7d"
    breakdowns: list[Literal["age", "gender", "country", "placement"]] | None = None


class AdSetInsightsArgs(ToolArgs):
    ad_set_id: str = Field(description="The ad set ID")
    date_preset: DatePreset = "last_7d"


class AdInsightsArgs(ToolArgs):
    ad_id: str = Field(description="The ad ID")
    date_preset: DatePreset = "last_7d"


def _params(
    fields: str, date_preset: str, breakdowns: list[str] | None = None
) -> dict[str, Any]:
    params: dict[str, Any] = {"fields": fields, "date_preset": date_preset}
    if breakdowns:
        params["breakdowns"] = ",".join(breakdowns)
    return params


async def get_account_insights(deps: Deps, args: AccountInsightsArgs) -> Any:
    account_id = resolve_account_id(deps, args.account_id)
    response = await deps.ads.get(
        f"/{account_id}/insights",
        _params(ACCOUNT_INSIGHT_FIELDS, args.date_preset, args.breakdowns),
    )
    return data_of(response)


async def get_campaign_insights(deps: Deps, args: CampaignInsightsArgs) -> Any:
    response = await deps.ads.get(
        f"/{args.campaign_id}/insights",
        _params(CAMPAIGN_INSIGHT_FIELDS, args.date_preset, args.breakdowns),
    )
    return data_of(response)


async def get_ad_set_insights(deps: Deps, args: AdSetInsightsArgs) -> Any:
    response = await deps.ads.get(
        f"/{args.ad_set_id}/insights", _params(INSIGHT_FIELDS, args.date_preset)
    )
    return data_of(response)


async def get_ad_insights(deps: Deps, args: AdInsightsArgs) -> Any:
    response = await deps.ads.get(
        f"/{args.ad_id}/insights", _params(INSIGHT_FIELDS, args.date_preset)
    )
    return data_of(response)


INSIGHT_TOOLS = [
    ToolDefinition(
        name="get_account_insights",
        description=(
            "Get performance insights for an ad account. Returns spend, "
            "impressions, clicks, CTR, CPC, conversions, ROAS."
        ),
        args_model=AccountInsightsArgs,
        handler=get_account_insights,
    ),
    ToolDefinition(
        name="get_campaign_insights",
        description="Get performance insights for a specific campaign",
        args_model=CampaignInsightsArgs,
        handler=get_campaign_insights,
    ),
    ToolDefinition(
        name="get_ad_set_insights",
        description="Get performance insights for a specific ad set",
        args_model=AdSetInsightsArgs,
        handler=get_ad_set_insights,
    ),
    ToolDefinition(
        name="get_ad_insights",
        description="Get performance insights for a specific ad",
        args_model=AdInsightsArgs,
        handler=get_ad_insights,
    ),
]
