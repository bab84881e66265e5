from __future__ import annotations

from typing import Literal

from ..domain.models import AssistantMessage, ThreadState

Route = Literal["confirm", "tools", "end"]


def route(state: ThreadState) -> Route:
    """Next step after a model or tool step."""
    if state.pending_action is not None:
        return "confirm"
    last = state.last_message
    if isinstance(last, AssistantMessage) and last.has_tool_calls:
        return "tools"
    return "end"
