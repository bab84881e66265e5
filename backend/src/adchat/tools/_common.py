from __future__ import annotations

import json
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, model_validator
from pydantic.alias_generators import to_camel

from ..deps import Deps

Status = Literal["ACTIVE", "PAUSED"]
DatePreset = Literal["today", "yesterday", "last_7d", "last_14d", "last_30d"]

INSIGHT_FIELDS = (
    "date_start,date_stop,impressions,clicks,spend,cpm,cpc,ctr,reach,frequency,"
    "conversions,cost_per_conversion,actions"
)


class ToolArgs(BaseModel):
    """Base for tool argument contracts: snake_case in Python, camelCase on the wire."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class NoArgs(ToolArgs):
    pass


class UpdateFields(BaseModel):
    """Partial update of a live object; at least one field must be given."""

    model_config = ConfigDict(extra="ignore")

    @model_validator(mode="after")
    def _require_a_change(self) -> UpdateFields:
        if not self.model_dump(exclude_none=True):
            raise ValueError("updates must change at least one field")
        return self


def normalize_account_id(account_id: str) -> str:
    account_id = account_id.strip()
    return account_id if account_id.startswith("act_") else f"act_{account_id}"


def resolve_account_id(deps: Deps, account_id: str | None) -> str:
    value = account_id or deps.ad_account_id
    if not value:
        raise ValueError(
            "No ad account id given and none is linked to this conversation. "
            "Call get_ad_accounts first."
        )
    return normalize_account_id(value)


def data_of(response: Any) -> Any:
    """Unwrap the ``data`` envelope of Graph list responses."""
    if isinstance(response, dict) and "data" in response:
        return response["data"]
    return response


def format_tool_result(value: Any) -> str:
    if isinstance(value, str):
        return value
    return json.dumps(value, ensure_ascii=False, indent=2, default=str)


def drop_none(values: dict[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in values.items() if value is not None}
