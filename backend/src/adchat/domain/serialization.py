"""
Explicit (de)serialization of thread state at the storage boundary.

Messages are tagged by ``role``; nothing outside this module inspects raw
dictionaries.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from .models import (
    AssistantMessage,
    Message,
    PendingAction,
    SystemMessage,
    ThreadState,
    ToolCall,
    ToolMessage,
    UserMessage,
)

SCHEMA_VERSION = 1


class SerializationError(ValueError):
    pass


def tool_call_to_dict(call: ToolCall) -> dict[str, Any]:
    return {"id": call.id, "name": call.name, "arguments": dict(call.arguments)}


def tool_call_from_dict(data: dict[str, Any]) -> ToolCall:
    return ToolCall(
        id=data["id"],
        name=data["name"],
        arguments=dict(data.get("arguments") or {}),
    )


def message_to_dict(message: Message) -> dict[str, Any]:
    if isinstance(message, AssistantMessage):
        return {
            "role": "assistant",
            "content": message.content,
            "tool_calls": [tool_call_to_dict(tc) for tc in message.tool_calls],
        }
    if isinstance(message, ToolMessage):
        return {
            "role": "tool",
            "tool_call_id": message.tool_call_id,
            "name": message.name,
            "content": message.content,
            "is_error": message.is_error,
        }
    if isinstance(message, (UserMessage, SystemMessage)):
        return {"role": message.role, "content": message.content}
    raise SerializationError(f"Unsupported message type: {type(message).__name__}")


def message_from_dict(data: dict[str, Any]) -> Message:
    role = data.get("role")
    if role == "user":
        return UserMessage(content=data["content"])
    if role == "system":
        return SystemMessage(content=data["content"])
    if role == "assistant":
        return AssistantMessage(
            content=data.get("content") or "",
            tool_calls=tuple(
                tool_call_from_dict(tc) for tc in data.get("tool_calls") or []
            ),
        )
    if role == "tool":
        return ToolMessage(
            tool_call_id=data["tool_call_id"],
            name=data["name"],
            content=data["content"],
            is_error=bool(data.get("is_error", False)),
        )
    raise SerializationError(f"Unknown message role: {role!r}")


def pending_action_to_dict(action: PendingAction) -> dict[str, Any]:
    return {
        "tool_name": action.tool_name,
        "tool_call_id": action.tool_call_id,
        "arguments": action.arguments,
        "original_message": message_to_dict(action.original_message),
        "created_at": action.created_at.isoformat(),
    }


def pending_action_from_dict(data: dict[str, Any]) -> PendingAction:
    original = message_from_dict(data["original_message"])
    if not isinstance(original, AssistantMessage):
        raise SerializationError("PendingAction.original_message must be assistant")
    return PendingAction(
        tool_name=data["tool_name"],
        tool_call_id=data["tool_call_id"],
        arguments=dict(data.get("arguments") or {}),
        original_message=original,
        created_at=datetime.fromisoformat(data["created_at"]),
    )


def thread_state_to_dict(state: ThreadState) -> dict[str, Any]:
    return {
        "version": SCHEMA_VERSION,
        "thread_id": state.thread_id,
        "user_id": state.user_id,
        "ad_account_id": state.ad_account_id,
        "messages": [message_to_dict(m) for m in state.messages],
        "pending_action": (
            pending_action_to_dict(state.pending_action)
            if state.pending_action is not None
            else None
        ),
    }


def thread_state_from_dict(data: dict[str, Any]) -> ThreadState:
    version = data.get("version", SCHEMA_VERSION)
    if version != SCHEMA_VERSION:
        raise SerializationError(f"Unsupported thread state version: {version}")
    pending = data.get("pending_action")
    return ThreadState(
        thread_id=data["thread_id"],
        user_id=data.get("user_id"),
        ad_account_id=data.get("ad_account_id"),
        messages=[message_from_dict(m) for m in data.get("messages") or []],
        pending_action=pending_action_from_dict(pending) if pending else None,
    )
