from __future__ import annotations

from typing import Any, Literal

from pydantic import Field

from ..deps import Deps
from ._common import Status, ToolArgs, UpdateFields, data_of, drop_none, resolve_account_id
from .registry import ToolDefinition

CAMPAIGN_FIELDS = (
    "id,name,objective,status,daily_budget,lifetime_budget,start_time,stop_time,"
    "created_time,updated_time,budget_remaining,buying_type,special_ad_categories"
)

Objective = Literal[
    "OUTCOME_AWARENESS",
    "OUTCOME_ENGAGEMENT",
    "OUTCOME_LEADS",
    "OUTCOME_SALES",
    "OUTCOME_TRAFFIC",
    "OUTCOME_APP_PROMOTION",
]
BidStrategy = Literal[
    "LOWEST_COST_WITHOUT_CAP",
    "LOWEST_COST_WITH_BID_CAP",
    "COST_CAP",
]


class GetCampaignsArgs(ToolArgs):
    account_id: str | None = Field(
        default=None,
        description="The ad account ID, with or without the 'act_' prefix.",
    )


class CampaignIdArgs(ToolArgs):
    campaign_id: str = Field(description="The campaign ID")


class CreateCampaignArgs(ToolArgs):
    account_id: str | None = Field(default=None, description="The ad account ID")
    name: str = Field(description="Campaign name")
    objective: Objective = Field(description="Campaign objective")
    status: Status = Field(default="PAUSED", description="Initial status")
    daily_budget: int | None = Field(
        default=None,
        ge=0,
        description="Daily budget in cents (e.g., 5000 = $50)",
    )
    bid_strategy: BidStrategy | None = Field(default=None, description="Bid strategy")


class CampaignUpdates(UpdateFields):
    name: str | None = Field(default=None, description="New campaign name")
    status: Status | None = Field(default=None, description="Campaign status")
    daily_budget: int | None = Field(
        default=None, ge=0, description="Daily budget in cents"
    )


class UpdateCampaignArgs(ToolArgs):
    campaign_id: str = Field(description="The campaign ID to update")
    updates: CampaignUpdates = Field(description="Updates to apply")


async def get_campaigns(deps: Deps, args: GetCampaignsArgs) -> Any:
    account_id = resolve_account_id(deps, args.account_id)
    response = await deps.ads.get(
        f"/{account_id}/campaigns", {"fields": CAMPAIGN_FIELDS, "limit": 100}
    )
    return data_of(response)


async def get_campaign(deps: Deps, args: CampaignIdArgs) -> Any:
    return await deps.ads.get(f"/{args.campaign_id}", {"fields": CAMPAIGN_FIELDS})


async def create_campaign(deps: Deps, args: CreateCampaignArgs) -> Any:
    account_id = resolve_account_id(deps, args.account_id)
    params = drop_none(
        {
            "name": args.name,
            "objective": args.objective,
            "status": args.status,
            "daily_budget": args.daily_budget,
            "bid_strategy": args.bid_strategy,
            "special_ad_categories": [],
        }
    )
    return await deps.ads.post(f"/{account_id}/campaigns", params)


async def update_campaign(deps: Deps, args: UpdateCampaignArgs) -> Any:
    return await deps.ads.post(
        f"/{args.campaign_id}", args.updates.model_dump(exclude_none=True)
    )


async def delete_campaign(deps: Deps, args: CampaignIdArgs) -> Any:
    return await deps.ads.delete(f"/{args.campaign_id}")


CAMPAIGN_TOOLS = [
    ToolDefinition(
        name="get_campaigns",
        description=(
            "Get all campaigns for a specific ad account. Returns campaign ID, "
            "name, objective, status, budget, and dates."
        ),
        args_model=GetCampaignsArgs,
        handler=get_campaigns,
    ),
    ToolDefinition(
        name="get_campaign",
        description="Get details of a specific campaign",
        args_model=CampaignIdArgs,
        handler=get_campaign,
    ),
    ToolDefinition(
        name="create_campaign",
        description=(
            "Create a new campaign. Creates a live campaign; the user is asked "
            "to confirm before it runs."
        ),
        args_model=CreateCampaignArgs,
        handler=create_campaign,
        mutating=True,
    ),
    ToolDefinition(
        name="update_campaign",
        description=(
            "Update a campaign's settings. Modifies a live campaign; the user is "
            "asked to confirm before it runs."
        ),
        args_model=UpdateCampaignArgs,
        handler=update_campaign,
        mutating=True,
    ),
    ToolDefinition(
        name="delete_campaign",
        description=(
            "Delete a campaign permanently. The user is asked to confirm before "
            "it runs."
        ),
        args_model=CampaignIdArgs,
        handler=delete_campaign,
        mutating=True,
    ),
]
