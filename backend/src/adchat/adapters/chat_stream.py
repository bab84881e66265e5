"""
Chat stream event models and SSE helpers.

Wire format: one ``data: {json}\\n\\n`` frame per event. A stream starts with
``conversationId``, carries zero or more ``text`` events and ends with exactly
one ``done`` or ``error``.
"""

from __future__ import annotations

import json
from collections.abc import AsyncIterator
from typing import Literal

from pydantic import BaseModel

from ..engine.events import TextDelta, ThreadAssigned, TurnComplete, TurnEvent, TurnFailed


class ConversationIdEvent(BaseModel):
    type: Literal["conversationId"] = "conversationId"
    value: str


class TextEvent(BaseModel):
    type: Literal["text"] = "text"
    value: str


class DoneEvent(BaseModel):
    type: Literal["done"] = "done"
    value: str = ""


class ErrorEvent(BaseModel):
    type: Literal["error"] = "error"
    value: str


StreamEvent = ConversationIdEvent | TextEvent | DoneEvent | ErrorEvent


def to_stream_event(event: TurnEvent) -> StreamEvent:
    if isinstance(event, ThreadAssigned):
        return ConversationIdEvent(value=event.thread_id)
    if isinstance(event, TextDelta):
        return TextEvent(value=event.text)
    if isinstance(event, TurnComplete):
        return DoneEvent()
    if isinstance(event, TurnFailed):
        return ErrorEvent(value=event.message)
    raise TypeError(f"Unsupported turn event: {event!r}")


def encode_event(event: StreamEvent) -> str:
    payload = json.dumps(event.model_dump(), ensure_ascii=False)
    return f"data: {payload}\n\n"


async def encode_turn(events: AsyncIterator[TurnEvent]) -> AsyncIterator[bytes]:
    async for event in events:
        yield encode_event(to_stream_event(event)).encode("utf-8")


def sse_headers() -> dict[str, str]:
    """Standard SSE response headers."""
    return {
        "Content-Type": "text/event-stream",
        "Cache-Control": "no-cache",
        "Connection": "keep-alive",
    }
