"""Domain models for thread state, messages and pending actions."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Literal, Union

from .errors import PendingActionConflict


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class ToolCall:
    id: str
    name: str
    arguments: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class UserMessage:
    content: str
    role: Literal["user"] = "user"


@dataclass(frozen=True)
class SystemMessage:
    content: str
    role: Literal["system"] = "system"


@dataclass(frozen=True)
class AssistantMessage:
    content: str = ""
    tool_calls: tuple[ToolCall, ...] = ()
    role: Literal["assistant"] = "assistant"

    @property
    def has_tool_calls(self) -> bool:
        return bool(self.tool_calls)


@dataclass(frozen=True)
class ToolMessage:
    tool_call_id: str
    name: str
    content: str
    is_error: bool = False
    role: Literal["tool"] = "tool"


Message = Union[UserMessage, SystemMessage, AssistantMessage, ToolMessage]


@dataclass(frozen=True)
class PendingAction:
    tool_name: str
    tool_call_id: str
    arguments: dict[str, Any]
    original_message: AssistantMessage
    created_at: datetime = field(default_factory=_utcnow)


@dataclass
class ThreadState:
    thread_id: str
    user_id: str | None = None
    ad_account_id: str | None = None
    messages: list[Message] = field(default_factory=list)
    pending_action: PendingAction | None = None

    @property
    def awaiting_confirmation(self) -> bool:
        return self.pending_action is not None

    @property
    def last_message(self) -> Message | None:
        return self.messages[-1] if self.messages else None

    def append(self, *messages: Message) -> None:
        self.messages.extend(messages)

    def set_pending(self, action: PendingAction) -> None:
        if self.pending_action is not None:
            raise PendingActionConflict(
                self.thread_id, self.pending_action.tool_name, action.tool_name
            )
        self.pending_action = action

    def clear_pending(self) -> PendingAction | None:
        action = self.pending_action
        self.pending_action = None
        return action
