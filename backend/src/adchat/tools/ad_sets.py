from __future__ import annotations

import json
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from ..deps import Deps
from ._common import Status, ToolArgs, UpdateFields, data_of, resolve_account_id
from .registry import ToolDefinition

AD_SET_FIELDS = (
    "id,name,status,daily_budget,lifetime_budget,targeting,optimization_goal,"
    "billing_event,bid_amount,start_time,end_time,budget_remaining,attribution_spec"
)

OptimizationGoal = Literal[
    "LINK_CLICKS",
    "LANDING_PAGE_VIEWS",
    "IMPRESSIONS",
    "REACH",
    "CONVERSIONS",
    "LEAD_GENERATION",
    "APP_INSTALLS",
]
BillingEvent = Literal["IMPRESSIONS", "LINK_CLICKS", "APP_INSTALLS"]


class GeoLocations(BaseModel):
    model_config = ConfigDict(extra="ignore")

    countries: list[str] | None = None


class Targeting(BaseModel):
    model_config = ConfigDict(extra="ignore")

    geo_locations: GeoLocations | None = None
    age_min: int | None = Field(default=None, ge=13, le=65)
    age_max: int | None = Field(default=None, ge=13, le=65)
    genders: list[int] | None = Field(default=None, description="1=male, 2=female")


class AdSetIdArgs(ToolArgs):
    ad_set_id: str = Field(description="The ad set ID")


class CampaignAdSetsArgs(ToolArgs):
    campaign_id: str = Field(description="The campaign ID")


class CreateAdSetArgs(ToolArgs):
    account_id: str | None = Field(default=None, description="The ad account ID")
    name: str = Field(description="Ad set name")
    campaign_id: str = Field(description="Parent campaign ID")
    daily_budget: int = Field(ge=0, description="Daily budget in cents")
    optimization_goal: OptimizationGoal = Field(description="What to optimize for")
    billing_event: BillingEvent = Field(description="When to charge")
    targeting: Targeting = Field(description="Targeting specification")
    status: Status = "PAUSED"


class AdSetUpdates(UpdateFields):
    name: str | None = None
    status: Status | None = None
    daily_budget: int | None = Field(default=None, ge=0)
    bid_amount: int | None = Field(default=None, ge=0)


class UpdateAdSetArgs(ToolArgs):
    ad_set_id: str = Field(description="The ad set ID")
    updates: AdSetUpdates


async def get_ad_sets(deps: Deps, args: CampaignAdSetsArgs) -> Any:
    response = await deps.ads.get(
        f"/{args.campaign_id}/adsets", {"fields": AD_SET_FIELDS, "limit": 100}
    )
    return data_of(response)


async def get_ad_set(deps: Deps, args: AdSetIdArgs) -> Any:
    return await deps.ads.get(f"/{args.ad_set_id}", {"fields": AD_SET_FIELDS})


async def create_ad_set(deps: Deps, args: CreateAdSetArgs) -> Any:
    account_id = resolve_account_id(deps, args.account_id)
    params = {
        "name": args.name,
        "campaign_id": args.campaign_id,
        "daily_budget": args.daily_budget,
        "optimization_goal": args.optimization_goal,
        "billing_event": args.billing_event,
        "targeting": json.dumps(args.targeting.model_dump(exclude_none=True)),
        "status": args.status,
    }
    return await deps.ads.post(f"/{account_id}/adsets", params)


async def update_ad_set(deps: Deps, args: UpdateAdSetArgs) -> Any:
    return await deps.ads.post(
        f"/{args.ad_set_id}", args.updates.model_dump(exclude_none=True)
    )


async def delete_ad_set(deps: Deps, args: AdSetIdArgs) -> Any:
    return await deps.ads.delete(f"/{args.ad_set_id}")


AD_SET_TOOLS = [
    ToolDefinition(
        name="get_ad_sets",
        description="Get all ad sets for a specific campaign",
        args_model=CampaignAdSetsArgs,
        handler=get_ad_sets,
    ),
    ToolDefinition(
        name="get_ad_set",
        description="Get details of a specific ad set including targeting",
        args_model=AdSetIdArgs,
        handler=get_ad_set,
    ),
    ToolDefinition(
        name="create_ad_set",
        description=(
            "Create a new ad set with targeting. Creates a live ad set; the user "
            "is asked to confirm before it runs."
        ),
        args_model=CreateAdSetArgs,
        handler=create_ad_set,
        mutating=True,
    ),
    ToolDefinition(
        name="update_ad_set",
        description=(
            "Update an ad set. Modifies a live ad set; the user is asked to "
            "confirm before it runs."
        ),
        args_model=UpdateAdSetArgs,
        handler=update_ad_set,
        mutating=True,
    ),
    ToolDefinition(
        name="delete_ad_set",
        description=(
            "Delete an ad set and every ad in it. The user is asked to confirm "
            "before it runs."
        ),
        args_model=AdSetIdArgs,
        handler=delete_ad_set,
        mutating=True,
    ),
]
