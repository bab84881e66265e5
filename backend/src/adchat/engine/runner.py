"""
Conversation engine: one call per user message.

A thread awaiting confirmation takes the resume path and returns a single
direct reply. Every other message runs a streamed turn through the graph
``agent -> route -> (tools -> agent)* | confirm -> end`` and persists the
thread state before signalling completion.
"""

from __future__ import annotations

import asyncio
import uuid
from collections.abc import AsyncIterator
from dataclasses import dataclass

from ..deps import Deps
from ..domain.models import AssistantMessage, ThreadState, ToolMessage, UserMessage
from ..logging import get_logger
from ..ports import AdsApiPort, ChatModelPort, ThreadStorePort
from ..settings import Settings
from ..tools import CORE_TOOL_NAMES, ToolRegistry
from .events import TextDelta, ThreadAssigned, TurnComplete, TurnEvent, TurnFailed
from .nodes import call_model, confirm, execute_tools
from .quick_replies import quick_reply
from .resume import resolve_pending
from .routing import route

logger = get_logger(__name__)

EMPTY_RESPONSE_FALLBACK = (
    "I processed your request but didn't generate a response. Please try again."
)


def _hop_limit_text(hops: int) -> str:
    return (
        f"I stopped after {hops} rounds of lookups without finishing. "
        "Could you narrow the question down a bit?"
    )


@dataclass(frozen=True)
class AccountContext:
    """Who is asking, resolved by the HTTP layer before the engine runs."""

    user_id: str
    ad_account_id: str | None
    ads: AdsApiPort


@dataclass(frozen=True)
class DirectReply:
    thread_id: str
    content: str


@dataclass(frozen=True)
class StreamedTurn:
    thread_id: str
    events: AsyncIterator[TurnEvent]


class ChatEngine:
    def __init__(
        self,
        *,
        model: ChatModelPort,
        store: ThreadStorePort,
        registry: ToolRegistry,
        settings: Settings,
    ) -> None:
        self.model = model
        self.store = store
        self.registry = registry
        self.settings = settings
        self.binding = registry.binding(
            read_names=CORE_TOOL_NAMES if settings.core_tools_only else None,
            advertise_writes=settings.advertise_write_tools,
        )

    async def load_state(self, thread_id: str) -> ThreadState | None:
        """Load a thread, treating a slow store as an unknown thread."""
        try:
            return await asyncio.wait_for(
                self.store.load(thread_id),
                timeout=self.settings.state_load_timeout_seconds,
            )
        except TimeoutError:
            logger.warning(
                "thread_state.load_timeout",
                thread_id=thread_id,
                timeout=self.settings.state_load_timeout_seconds,
            )
            return None

    async def handle(
        self,
        message: str,
        *,
        thread_id: str | None,
        account: AccountContext,
    ) -> DirectReply | StreamedTurn:
        state = await self.load_state(thread_id) if thread_id else None
        if state is None:
            state = ThreadState(
                thread_id=thread_id or uuid.uuid4().hex,
                user_id=account.user_id,
                ad_account_id=account.ad_account_id,
            )
            logger.info("thread.started", thread_id=state.thread_id)
        else:
            self._check_account(state, account)

        deps = Deps(
            thread_id=state.thread_id,
            user_id=state.user_id or account.user_id,
            ad_account_id=state.ad_account_id,
            ads=account.ads,
        )

        if state.pending_action is not None:
            return await self._resume(state, message, deps)

        return StreamedTurn(
            thread_id=state.thread_id,
            events=self._run_turn(state, message, deps),
        )

    async def _resume(self, state: ThreadState, message: str, deps: Deps) -> DirectReply:
        content = await resolve_pending(
            state,
            message,
            registry=self.registry,
            deps=deps,
            affirmatives=self.settings.affirmative_replies,
            checkpoint=self.store.save,
        )
        try:
            await self.store.save(state)
        except Exception:
            # Anything executed ran after the cleared thread was stored.
            logger.exception("resume.save_failed", thread_id=state.thread_id)
        return DirectReply(thread_id=state.thread_id, content=content)

    async def clear_thread(self, thread_id: str) -> bool:
        deleted = await self.store.delete(thread_id)
        logger.info("thread.cleared", thread_id=thread_id, deleted=deleted)
        return deleted

    def _check_account(self, state: ThreadState, account: AccountContext) -> None:
        # Account context is fixed once a thread exists.
        if state.user_id is None:
            state.user_id = account.user_id
        if state.ad_account_id is None:
            state.ad_account_id = account.ad_account_id
        if account.user_id != state.user_id or (
            account.ad_account_id and account.ad_account_id != state.ad_account_id
        ):
            logger.warning(
                "thread.account_mismatch",
                thread_id=state.thread_id,
                stored_ad_account_id=state.ad_account_id,
                request_ad_account_id=account.ad_account_id,
            )

    async def _run_turn(
        self, state: ThreadState, message: str, deps: Deps
    ) -> AsyncIterator[TurnEvent]:
        yield ThreadAssigned(state.thread_id)
        try:
            state.append(UserMessage(content=message))
            canned = quick_reply(message) if self.settings.quick_replies_enabled else None
            if canned is not None:
                state.append(AssistantMessage(content=canned))
                yield TextDelta(canned)
            else:
                async for delta in self._run_graph(state, deps):
                    yield delta
            await self.store.save(state)
        except Exception as exc:
            logger.exception("turn.failed", thread_id=state.thread_id)
            yield TurnFailed(str(exc) or type(exc).__name__)
            return
        logger.info(
            "turn.completed",
            thread_id=state.thread_id,
            messages=len(state.messages),
            awaiting_confirmation=state.awaiting_confirmation,
        )
        yield TurnComplete()

    async def _run_graph(
        self, state: ThreadState, deps: Deps
    ) -> AsyncIterator[TextDelta]:
        streamed = False
        hops = 0
        while True:
            before = len(state.messages)
            async for delta in call_model(
                state,
                model=self.model,
                registry=self.registry,
                binding=self.binding,
                timeout=self.settings.model_timeout_seconds,
            ):
                streamed = True
                yield delta

            step = route(state)
            if step == "confirm":
                content = confirm(state)
                if content:
                    yield TextDelta(f"\n\n{content}" if streamed else content)
                    streamed = True
                return
            if step == "tools":
                await execute_tools(
                    state, registry=self.registry, binding=self.binding, deps=deps
                )
            elif not (
                len(state.messages) > before and isinstance(state.last_message, ToolMessage)
            ):
                break
            # Results are in; the model answers them on the next pass.
            hops += 1
            if hops >= self.settings.max_tool_hops:
                logger.warning("turn.hop_limit", thread_id=state.thread_id, hops=hops)
                content = _hop_limit_text(hops)
                state.append(AssistantMessage(content=content))
                yield TextDelta(content)
                return

        if not streamed:
            state.append(AssistantMessage(content=EMPTY_RESPONSE_FALLBACK))
            yield TextDelta(EMPTY_RESPONSE_FALLBACK)
