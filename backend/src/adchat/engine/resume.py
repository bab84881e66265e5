"""
Resolution of a pending mutating action from the user's next message.

The model is bypassed entirely: an exact affirmative reply executes the stored
call with its stored arguments, anything else cancels it.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Iterable

from ..deps import Deps
from ..domain.errors import ConfirmedActionFailure, UnknownToolFailure
from ..domain.models import AssistantMessage, PendingAction, ThreadState, UserMessage
from ..logging import get_logger
from ..tools import ToolRegistry, format_tool_result

logger = get_logger(__name__)

CANCELLED_REPLY = "✅ Action cancelled. How else can I help you?"
NOT_SAVED_REPLY = (
    "❌ **Your reply could not be saved,** so nothing was changed. Please try again."
)


def is_affirmative(message: str, affirmatives: Iterable[str]) -> bool:
    """Exact, case-insensitive match after trimming whitespace."""
    reply = message.strip().lower()
    return any(reply == word.strip().lower() for word in affirmatives)


def format_success(result: object) -> str:
    return f"✅ **Action completed!**\n\nResult:\n```json\n{format_tool_result(result)}\n```"


def format_failure(failure: ConfirmedActionFailure) -> str:
    return f"❌ **Action failed:**\n\n{failure}"


async def execute_confirmed(
    action: PendingAction, *, registry: ToolRegistry, deps: Deps
) -> str:
    try:
        tool = registry.require(action.tool_name)
    except UnknownToolFailure as exc:
        logger.error("confirmed_action.unknown_tool", tool=action.tool_name)
        return f"❌ Error: {exc}"

    try:
        result = await tool.invoke(action.arguments, deps)
    except Exception as exc:
        failure = ConfirmedActionFailure(action.tool_name, str(exc))
        logger.warning("confirmed_action.failed", tool=action.tool_name, error=str(exc))
        return format_failure(failure)

    logger.info("confirmed_action.executed", tool=action.tool_name)
    return format_success(result)


async def resolve_pending(
    state: ThreadState,
    message: str,
    *,
    registry: ToolRegistry,
    deps: Deps,
    affirmatives: Iterable[str],
    checkpoint: Callable[[ThreadState], Awaitable[None]] | None = None,
) -> str:
    """Confirm or cancel the pending action; the action is always cleared.

    ``checkpoint`` stores the thread with the action cleared before anything
    runs, so a stored thread never offers an action again once it has run.
    If the checkpoint fails nothing is executed.
    """
    action = state.clear_pending()
    if action is None:
        raise ValueError(f"Thread {state.thread_id} has no pending action.")

    state.append(UserMessage(content=message))
    confirmed = is_affirmative(message, affirmatives)
    logger.info("pending_action.resolved", tool=action.tool_name, confirmed=confirmed)
    if not await _checkpoint(state, action, checkpoint):
        reply = NOT_SAVED_REPLY
    elif confirmed:
        reply = await execute_confirmed(action, registry=registry, deps=deps)
    else:
        reply = CANCELLED_REPLY

    state.append(AssistantMessage(content=reply))
    return reply


async def _checkpoint(
    state: ThreadState,
    action: PendingAction,
    checkpoint: Callable[[ThreadState], Awaitable[None]] | None,
) -> bool:
    if checkpoint is None:
        return True
    try:
        await checkpoint(state)
    except Exception as exc:
        logger.error(
            "pending_action.checkpoint_failed",
            tool=action.tool_name,
            thread_id=state.thread_id,
            error=str(exc),
        )
        return False
    return True
