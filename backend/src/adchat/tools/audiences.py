from __future__ import annotations

import json
from typing import Any, Literal

from pydantic import Field

from ..deps import Deps
from ._common import ToolArgs, data_of, drop_none, resolve_account_id
from .registry import ToolDefinition

AUDIENCE_FIELDS = "id,name,subtype,approximate_count,description,data_source"


class AccountArgs(ToolArgs):
    account_id: str | None = Field(default=None, description="The ad account ID")


class CreateCustomAudienceArgs(ToolArgs):
    account_id: str | None = Field(default=None, description="The ad account ID")
    name: str = Field(description="Audience name")
    subtype: Literal["CUSTOM", "WEBSITE", "APP", "ENGAGEMENT"] = Field(
        description="Audience type"
    )
    description: str | None = None


class CreateLookalikeAudienceArgs(ToolArgs):
    account_id: str | None = Field(default=None, description="The ad account ID")
    name: str = Field(description="Lookalike audience name")
    source_audience_id: str = Field(description="Source custom audience ID")
    country: str = Field(description="Country code (e.g., US)")
    ratio: float = Field(
        ge=0.01, le=0.20, description="Lookalike size (0.01=1% to 0.20=20%)"
    )


async def get_custom_audiences(deps: Deps, args: AccountArgs) -> Any:
    account_id = resolve_account_id(deps, args.account_id)
    response = await deps.ads.get(
        f"/{account_id}/customaudiences", {"fields": AUDIENCE_FIELDS, "limit": 100}
    )
    return data_of(response)


async def create_custom_audience(deps: Deps, args: CreateCustomAudienceArgs) -> Any:
    account_id = resolve_account_id(deps, args.account_id)
    params = drop_none(
        {
            "name": args.name,
            "subtype": args.subtype,
            "description": args.description,
        }
    )
    return await deps.ads.post(f"/{account_id}/customaudiences", params)


async def create_lookalike_audience(
    deps: Deps, args: CreateLookalikeAudienceArgs
) -> Any:
    account_id = resolve_account_id(deps, args.account_id)
    spec = {"country": args.country, "ratio": args.ratio, "type": "similarity"}
    params = {
        "name": args.name,
        "subtype": "LOOKALIKE",
        "origin_audience_id": args.source_audience_id,
        "lookalike_spec": json.dumps(spec),
    }
    return await deps.ads.post(f"/{account_id}/customaudiences", params)


AUDIENCE_TOOLS = [
    ToolDefinition(
        name="get_custom_audiences",
        description="Get all custom audiences for an ad account",
        args_model=AccountArgs,
        handler=get_custom_audiences,
    ),
    ToolDefinition(
        name="create_custom_audience",
        description=(
            "Create a custom audience. The user is asked to confirm before it runs."
        ),
        args_model=CreateCustomAudienceArgs,
        handler=create_custom_audience,
        mutating=True,
    ),
    ToolDefinition(
        name="create_lookalike_audience",
        description=(
            "Create a lookalike audience from an existing audience. The user is "
            "asked to confirm before it runs."
        ),
        args_model=CreateLookalikeAudienceArgs,
        handler=create_lookalike_audience,
        mutating=True,
    ),
]
