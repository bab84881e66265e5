"""
Dangerous-action gate.

The taxonomy is a closed, hand-maintained list of operation names. It is not
derived from tool metadata: registering a new mutating tool requires adding its
name here, otherwise the registry refuses to build.
"""

from __future__ import annotations

from collections.abc import Iterable

from ..domain.models import ToolCall

DANGEROUS_TOOL_NAMES: frozenset[str] = frozenset(
    {
        "create_campaign",
        "update_campaign",
        "delete_campaign",
        "create_ad_set",
        "update_ad_set",
        "delete_ad_set",
        "create_ad",
        "update_ad",
        "delete_ad",
        "create_custom_audience",
        "create_lookalike_audience",
    }
)


def is_dangerous(tool_name: str) -> bool:
    return tool_name in DANGEROUS_TOOL_NAMES


def first_dangerous_call(tool_calls: Iterable[ToolCall]) -> ToolCall | None:
    for call in tool_calls:
        if is_dangerous(call.name):
            return call
    return None
