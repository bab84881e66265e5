from __future__ import annotations

import json
from typing import Any

from pydantic import Field

from ..deps import Deps
from ._common import ToolArgs, data_of, resolve_account_id
from .registry import ToolDefinition


class SearchArgs(ToolArgs):
    query: str = Field(description="Keyword to search (e.g., 'fitness', 'New York')")


class ReachEstimateArgs(ToolArgs):
    account_id: str | None = Field(default=None, description="The ad account ID")
    countries: list[str] = Field(description="Country codes (e.g., ['US', 'CA'])")
    age_min: int = Field(default=18, ge=13, le=65)
    age_max: int = Field(default=65, ge=13, le=65)
    genders: list[int] | None = Field(
        default=None, description="1=male, 2=female, omit for both"
    )


async def search_interests(deps: Deps, args: SearchArgs) -> Any:
    response = await deps.ads.get(
        "/search", {"type": "adinterest", "q": args.query, "limit": 50}
    )
    return data_of(response)


async def search_locations(deps: Deps, args: SearchArgs) -> Any:
    response = await deps.ads.get(
        "/search", {"type": "adgeolocation", "q": args.query, "limit": 50}
    )
    return data_of(response)


async def get_reach_estimate(deps: Deps, args: ReachEstimateArgs) -> Any:
    account_id = resolve_account_id(deps, args.account_id)
    targeting: dict[str, Any] = {
        "geo_locations": {"countries": args.countries},
        "age_min": args.age_min,
        "age_max": args.age_max,
    }
    if args.genders:
        targeting["genders"] = args.genders
    response = await deps.ads.get(
        f"/{account_id}/reachestimate", {"targeting_spec": json.dumps(targeting)}
    )
    return data_of(response)


TARGETING_TOOLS = [
    ToolDefinition(
        name="search_interests",
        description=(
            "Search for targeting interests by keyword. Returns interest IDs you "
            "can use in ad sets."
        ),
        args_model=SearchArgs,
        handler=search_interests,
    ),
    ToolDefinition(
        name="search_locations",
        description=(
            "Search for geo-targeting locations by name. Returns location keys "
            "for targeting."
        ),
        args_model=SearchArgs,
        handler=search_locations,
    ),
    ToolDefinition(
        name="get_reach_estimate",
        description="Estimate audience size for a targeting specification",
        args_model=ReachEstimateArgs,
        handler=get_reach_estimate,
    ),
]
