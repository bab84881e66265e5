"""
Request parsing for the chat endpoint.
"""

from __future__ import annotations

from collections.abc import Mapping

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

USER_ID_HEADER = "x-user-id"
AD_ACCOUNT_HEADER = "x-ad-account-id"


class ChatRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    message: str
    conversation_id: str | None = Field(default=None, alias="conversationId")

    @field_validator("message")
    @classmethod
    def _message_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Message required")
        return value

    @field_validator("conversation_id")
    @classmethod
    def _blank_is_new(cls, value: str | None) -> str | None:
        return value or None


class RequestError(ValueError):
    def __init__(self, status_code: int, detail: str) -> None:
        super().__init__(detail)
        self.status_code = status_code
        self.detail = detail


def parse_chat_request(body: object) -> ChatRequest:
    if not isinstance(body, dict):
        raise RequestError(400, "Message required")
    try:
        return ChatRequest.model_validate(body)
    except ValidationError as exc:
        raise RequestError(400, "Message required") from exc


def bearer_token(headers: Mapping[str, str]) -> str | None:
    value = headers.get("authorization", "")
    scheme, _, token = value.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def account_headers(headers: Mapping[str, str]) -> tuple[str, str | None, str]:
    """``(user_id, ad_account_id, access_token)`` from the request headers."""
    user_id = (headers.get(USER_ID_HEADER) or "").strip()
    token = bearer_token(headers)
    if not user_id or not token:
        raise RequestError(401, "Unauthorized")
    ad_account_id = (headers.get(AD_ACCOUNT_HEADER) or "").strip() or None
    return user_id, ad_account_id, token
