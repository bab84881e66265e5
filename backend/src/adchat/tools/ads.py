from __future__ import annotations

import json
from typing import Any, Literal

from pydantic import Field

from ..deps import Deps
from ._common import Status, ToolArgs, UpdateFields, data_of, resolve_account_id
from .registry import ToolDefinition

AD_FIELDS = (
    "id,name,status,"
    "creative{id,name,body,title,image_url,video_id,call_to_action_type,link_url},"
    "tracking_specs,conversion_specs"
)

CallToAction = Literal[
    "LEARN_MORE",
    "SHOP_NOW",
    "SIGN_UP",
    "SUBSCRIBE",
    "CONTACT_US",
    "DOWNLOAD",
    "GET_OFFER",
    "GET_QUOTE",
    "BOOK_NOW",
    "APPLY_NOW",
]


class AdIdArgs(ToolArgs):
    ad_id: str = Field(description="The ad ID")


class AdSetAdsArgs(ToolArgs):
    ad_set_id: str = Field(description="The ad set ID")


class CreateAdArgs(ToolArgs):
    account_id: str | None = Field(default=None, description="The ad account ID")
    name: str = Field(description="Ad name")
    ad_set_id: str = Field(description="Parent ad set ID")
    creative_id: str | None = Field(
        default=None, description="Existing creative ID to use"
    )
    page_id: str | None = Field(
        default=None, description="Facebook Page ID (required for inline creative)"
    )
    link: str | None = Field(
        default=None, description="Destination URL (required for inline creative)"
    )
    message: str | None = Field(
        default=None,
        description="Primary text / post copy (required for inline creative)",
    )
    headline: str | None = Field(default=None, description="Ad headline")
    description: str | None = Field(default=None, description="Ad description")
    call_to_action: CallToAction | None = Field(
        default=None, description="CTA button type"
    )
    status: Status = "PAUSED"


class AdUpdates(UpdateFields):
    name: str | None = None
    status: Status | None = None


class UpdateAdArgs(ToolArgs):
    ad_id: str = Field(description="The ad ID")
    updates: AdUpdates


def build_creative(args: CreateAdArgs) -> dict[str, Any] | None:
    """Existing creative reference, or an inline link-post spec, or ``None``."""
    if args.creative_id:
        return {"creative_id": args.creative_id}
    if not (args.page_id and args.link and args.message):
        return None
    link_data: dict[str, Any] = {"link": args.link, "message": args.message}
    if args.headline:
        link_data["name"] = args.headline
    if args.description:
        link_data["description"] = args.description
    if args.call_to_action:
        link_data["call_to_action"] = {
            "type": args.call_to_action,
            "value": {"link": args.link},
        }
    return {"object_story_spec": {"page_id": args.page_id, "link_data": link_data}}


async def get_ads(deps: Deps, args: AdSetAdsArgs) -> Any:
    response = await deps.ads.get(
        f"/{args.ad_set_id}/ads", {"fields": AD_FIELDS, "limit": 100}
    )
    return data_of(response)


async def get_ad(deps: Deps, args: AdIdArgs) -> Any:
    return await deps.ads.get(f"/{args.ad_id}", {"fields": AD_FIELDS})


async def create_ad(deps: Deps, args: CreateAdArgs) -> Any:
    creative = build_creative(args)
    if creative is None:
        raise ValueError("Must provide either creativeId OR (pageId + link + message)")
    account_id = resolve_account_id(deps, args.account_id)
    params = {
        "name": args.name,
        "adset_id": args.ad_set_id,
        "status": args.status,
        "creative": json.dumps(creative),
    }
    return await deps.ads.post(f"/{account_id}/ads", params)


async def update_ad(deps: Deps, args: UpdateAdArgs) -> Any:
    return await deps.ads.post(
        f"/{args.ad_id}", args.updates.model_dump(exclude_none=True)
    )


async def delete_ad(deps: Deps, args: AdIdArgs) -> Any:
    return await deps.ads.delete(f"/{args.ad_id}")


AD_TOOLS = [
    ToolDefinition(
        name="get_ads",
        description="Get all ads for a specific ad set",
        args_model=AdSetAdsArgs,
        handler=get_ads,
    ),
    ToolDefinition(
        name="get_ad",
        description="Get details of a specific ad including creative",
        args_model=AdIdArgs,
        handler=get_ad,
    ),
    ToolDefinition(
        name="create_ad",
        description=(
            "Create a new ad. Requires either an existing creative ID or page + "
            "link + message to create inline. The user is asked to confirm "
            "before it runs."
        ),
        args_model=CreateAdArgs,
        handler=create_ad,
        mutating=True,
    ),
    ToolDefinition(
        name="update_ad",
        description="Update an ad. The user is asked to confirm before it runs.",
        args_model=UpdateAdArgs,
        handler=update_ad,
        mutating=True,
    ),
    ToolDefinition(
        name="delete_ad",
        description=(
            "Delete an ad permanently. The user is asked to confirm before it runs."
        ),
        args_model=AdIdArgs,
        handler=delete_ad,
        mutating=True,
    ),
]
