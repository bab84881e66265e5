from __future__ import annotations

from typing import Any

from pydantic import Field

from ..deps import Deps
from ._common import NoArgs, ToolArgs, data_of, normalize_account_id, resolve_account_id
from .registry import ToolDefinition

ACCOUNT_FIELDS = (
    "id,account_id,name,currency,timezone_name,account_status,amount_spent,"
    "balance,spend_cap,min_daily_budget,business"
)


class AccountIdArgs(ToolArgs):
    account_id: str = Field(description="The ad account ID (e.g., act_123456789)")


class OptionalAccountArgs(ToolArgs):
    account_id: str | None = Field(default=None, description="The ad account ID")


async def get_ad_accounts(deps: Deps, args: NoArgs) -> Any:
    response = await deps.ads.get("/me/adaccounts", {"fields": ACCOUNT_FIELDS})
    return data_of(response)


async def get_ad_account(deps: Deps, args: AccountIdArgs) -> Any:
    account_id = normalize_account_id(args.account_id)
    return await deps.ads.get(f"/{account_id}", {"fields": ACCOUNT_FIELDS})


async def get_pages(deps: Deps, args: NoArgs) -> Any:
    response = await deps.ads.get("/me/accounts", {"fields": "id,name"})
    return data_of(response)


async def get_pixels(deps: Deps, args: OptionalAccountArgs) -> Any:
    account_id = resolve_account_id(deps, args.account_id)
    response = await deps.ads.get(
        f"/{account_id}/adspixels", {"fields": "id,name,code,last_fired_time"}
    )
    return data_of(response)


async def get_ad_images(deps: Deps, args: OptionalAccountArgs) -> Any:
    account_id = resolve_account_id(deps, args.account_id)
    response = await deps.ads.get(
        f"/{account_id}/adimages",
        {"fields": "hash,name,url,width,height", "limit": 100},
    )
    return data_of(response)


async def get_ad_videos(deps: Deps, args: OptionalAccountArgs) -> Any:
    account_id = resolve_account_id(deps, args.account_id)
    response = await deps.ads.get(
        f"/{account_id}/advideos",
        {"fields": "id,title,source,thumbnails,length", "limit": 100},
    )
    return data_of(response)


ACCOUNT_TOOLS = [
    ToolDefinition(
        name="get_ad_accounts",
        description=(
            "Get all Meta Ad accounts the user has access to. Returns account ID, "
            "name, currency, status, spend, and balance."
        ),
        args_model=NoArgs,
        handler=get_ad_accounts,
    ),
    ToolDefinition(
        name="get_ad_account",
        description="Get details of a specific ad account",
        args_model=AccountIdArgs,
        handler=get_ad_account,
    ),
    ToolDefinition(
        name="get_pages",
        description="Get Facebook Pages the user manages. Needed for creating ads.",
        args_model=NoArgs,
        handler=get_pages,
    ),
    ToolDefinition(
        name="get_pixels",
        description="Get Meta Pixels for an ad account. Used for conversion tracking.",
        args_model=OptionalAccountArgs,
        handler=get_pixels,
    ),
    ToolDefinition(
        name="get_ad_images",
        description="Get all uploaded images for an ad account",
        args_model=OptionalAccountArgs,
        handler=get_ad_images,
    ),
    ToolDefinition(
        name="get_ad_videos",
        description="Get all uploaded videos for an ad account",
        args_model=OptionalAccountArgs,
        handler=get_ad_videos,
    ),
]
