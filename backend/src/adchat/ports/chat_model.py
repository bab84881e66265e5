"""
Port definition for streaming language-model calls.
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Sequence
from dataclasses import dataclass
from typing import Any, Protocol

from ..domain.models import Message, ToolCall


@dataclass(frozen=True)
class ToolDeclaration:
    name: str
    description: str
    parameters: dict[str, Any]


@dataclass(frozen=True)
class ModelChunk:
    """One increment of model output: text delta and/or completed tool calls."""

    text: str = ""
    tool_calls: tuple[ToolCall, ...] = ()


class ChatModelPort(Protocol):
    model_name: str

    def stream(
        self,
        *,
        system_instruction: str | None,
        messages: Sequence[Message],
        tools: Sequence[ToolDeclaration],
    ) -> AsyncIterator[ModelChunk]: ...


__all__ = ["ChatModelPort", "ModelChunk", "ToolDeclaration"]
