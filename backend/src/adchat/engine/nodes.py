"""
Graph nodes: model invocation (with the dangerous-action gate), tool
execution and confirmation.

Nodes only ever append to ``state.messages``.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator

from ..deps import Deps
from ..domain.errors import InvalidToolArguments, ModelInvocationFailure
from ..domain.models import (
    AssistantMessage,
    PendingAction,
    SystemMessage,
    ThreadState,
    ToolCall,
    ToolMessage,
)
from ..logging import get_logger
from ..ports import ChatModelPort
from ..tools import ToolBinding, ToolRegistry, format_tool_result
from .confirmation import build_confirmation_message
from .events import TextDelta
from .gate import first_dangerous_call, is_dangerous
from .prompts import build_system_prompt

logger = get_logger(__name__)

AWAITING_CONFIRMATION_RESULT = "Awaiting user confirmation."


def model_failure_text(exc: BaseException) -> str:
    detail = str(exc) or type(exc).__name__
    return f"Sorry, I had trouble processing that: {detail}"


def _skipped_result(dangerous_tool: str, reason: str) -> str:
    return (
        f"Not executed: {dangerous_tool} in the same request {reason}. "
        "Request this again separately."
    )


def _gate_results(
    tool_calls: list[ToolCall],
    dangerous: ToolCall,
    *,
    dangerous_result: str,
    reason: str,
    failed: bool = False,
) -> list[ToolMessage]:
    """One result per call of a gated response; none of them was executed."""
    results = []
    for call in tool_calls:
        if call.id == dangerous.id:
            content, is_error = dangerous_result, failed
        else:
            content, is_error = _skipped_result(dangerous.name, reason), True
        results.append(
            ToolMessage(
                tool_call_id=call.id, name=call.name, content=content, is_error=is_error
            )
        )
    return results


async def call_model(
    state: ThreadState,
    *,
    model: ChatModelPort,
    registry: ToolRegistry,
    binding: ToolBinding,
    timeout: float,
) -> AsyncIterator[TextDelta]:
    """Run one model call, streaming text deltas, then append its message.

    A dangerous tool call is never executed here: the first one becomes the
    thread's pending action and every call of the response receives a
    placeholder result. If its arguments are invalid there is no pending
    action and every call receives an error result instead.
    """
    system_instruction = None
    if not any(isinstance(m, SystemMessage) for m in state.messages):
        system_instruction = build_system_prompt(state.ad_account_id)

    text_parts: list[str] = []
    tool_calls: list[ToolCall] = []
    # The timeout bounds the model stream only, not the consumer.
    queue: asyncio.Queue[str | None] = asyncio.Queue()

    async def pump() -> None:
        try:
            async with asyncio.timeout(timeout):
                async for chunk in model.stream(
                    system_instruction=system_instruction,
                    messages=list(state.messages),
                    tools=binding.declarations,
                ):
                    if chunk.text:
                        queue.put_nowait(chunk.text)
                    tool_calls.extend(chunk.tool_calls)
        finally:
            queue.put_nowait(None)

    task = asyncio.create_task(pump())
    try:
        while (delta := await queue.get()) is not None:
            text_parts.append(delta)
            yield TextDelta(delta)
        await task
    except Exception as exc:
        failure = ModelInvocationFailure(model_failure_text(exc))
        logger.warning(
            "model.failed",
            error=str(exc),
            error_type=type(exc).__name__,
            streamed_chars=sum(len(p) for p in text_parts),
        )
        if text_parts:
            state.append(AssistantMessage(content="".join(text_parts)))
        state.append(AssistantMessage(content=str(failure)))
        yield TextDelta(str(failure))
        return
    finally:
        if not task.done():
            task.cancel()

    message = AssistantMessage(content="".join(text_parts), tool_calls=tuple(tool_calls))
    logger.info("model.responded", chars=len(message.content), tool_calls=len(tool_calls))

    dangerous = first_dangerous_call(tool_calls)
    if dangerous is None:
        if message.content or message.has_tool_calls:
            state.append(message)
        return

    tool = registry.get(dangerous.name)
    arguments = dict(dangerous.arguments)
    if tool is not None:
        try:
            arguments = tool.normalize(dangerous.arguments)
        except InvalidToolArguments as exc:
            # No pending action and nothing runs; the model sees the error next.
            logger.info("gate.invalid_arguments", tool=dangerous.name, error=str(exc))
            state.append(
                message,
                *_gate_results(
                    tool_calls,
                    dangerous,
                    dangerous_result=f"Error: {exc}",
                    reason="had invalid arguments",
                    failed=True,
                ),
            )
            return

    state.set_pending(
        PendingAction(
            tool_name=dangerous.name,
            tool_call_id=dangerous.id,
            arguments=arguments,
            original_message=message,
        )
    )
    placeholders = _gate_results(
        tool_calls,
        dangerous,
        dangerous_result=AWAITING_CONFIRMATION_RESULT,
        reason="is awaiting user confirmation",
    )
    state.append(message, *placeholders)
    logger.info(
        "gate.pending_action",
        tool=dangerous.name,
        tool_call_id=dangerous.id,
        dropped=len(tool_calls) - 1,
    )


async def execute_tools(
    state: ThreadState,
    *,
    registry: ToolRegistry,
    binding: ToolBinding,
    deps: Deps,
) -> list[ToolMessage]:
    """Execute the read tool calls of the last assistant message, in order."""
    last = state.last_message
    if not isinstance(last, AssistantMessage) or not last.has_tool_calls:
        return []

    results: list[ToolMessage] = []
    for call in last.tool_calls:
        results.append(await _execute_one(call, registry=registry, binding=binding, deps=deps))
    state.append(*results)
    return results


async def _execute_one(
    call: ToolCall,
    *,
    registry: ToolRegistry,
    binding: ToolBinding,
    deps: Deps,
) -> ToolMessage:
    def error(content: str) -> ToolMessage:
        return ToolMessage(
            tool_call_id=call.id, name=call.name, content=content, is_error=True
        )

    tool = registry.get(call.name)
    if tool is None:
        return error(f"Error: Unknown tool '{call.name}'")

    try:
        if call.name not in binding.executable:
            tool.validate(call.arguments)
            if is_dangerous(call.name) or tool.mutating:
                return error(
                    f"Error: {call.name} changes live data and must be confirmed "
                    "by the user; it was not executed."
                )
            return error(f"Error: {call.name} is not available right now.")

        result = await tool.invoke(call.arguments, deps)
    except InvalidToolArguments as exc:
        return error(f"Error: {exc}")
    except Exception as exc:
        logger.warning("tool.failed", tool=call.name, error=str(exc))
        return error(f"Error executing {call.name}: {exc}")

    logger.info("tool.executed", tool=call.name, tool_call_id=call.id)
    return ToolMessage(tool_call_id=call.id, name=call.name, content=format_tool_result(result))


def confirm(state: ThreadState) -> str | None:
    """Append the confirmation prompt for the pending action; nothing runs."""
    if state.pending_action is None:
        return None
    content = build_confirmation_message(state.pending_action)
    state.append(AssistantMessage(content=content))
    return content
