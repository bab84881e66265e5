from __future__ import annotations

from ..engine.gate import DANGEROUS_TOOL_NAMES
from ._common import format_tool_result, normalize_account_id
from .accounts import ACCOUNT_TOOLS
from .ad_sets import AD_SET_TOOLS
from .ads import AD_TOOLS
from .audiences import AUDIENCE_TOOLS
from .campaigns import CAMPAIGN_TOOLS
from .insights import INSIGHT_TOOLS
from .registry import ToolBinding, ToolDefinition, ToolRegistry
from .targeting import TARGETING_TOOLS

# Read tools bound to the model by default, to keep inference latency low.
CORE_TOOL_NAMES = frozenset(
    {
        "get_ad_accounts",
        "get_campaigns",
        "get_campaign",
        "get_account_insights",
        "get_campaign_insights",
        "get_ad_sets",
        "get_ads",
    }
)


def build_registry() -> ToolRegistry:
    return ToolRegistry(
        [
            *ACCOUNT_TOOLS,
            *CAMPAIGN_TOOLS,
            *AD_SET_TOOLS,
            *AD_TOOLS,
            *AUDIENCE_TOOLS,
            *TARGETING_TOOLS,
            *INSIGHT_TOOLS,
        ],
        dangerous=DANGEROUS_TOOL_NAMES,
    )


__all__ = [
    "CORE_TOOL_NAMES",
    "ToolBinding",
    "ToolDefinition",
    "ToolRegistry",
    "build_registry",
    "format_tool_result",
    "normalize_account_id",
]
