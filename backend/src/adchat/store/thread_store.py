"""
Thread state store backends and factory.
"""

from __future__ import annotations

import copy
from typing import Any

from google.adk.sessions.base_session_service import BaseSessionService
from google.adk.sessions.in_memory_session_service import InMemorySessionService

from ..domain.models import ThreadState
from ..domain.serialization import thread_state_from_dict, thread_state_to_dict
from ..logging import get_logger
from ..ports import ThreadStorePort
from ..settings import get_settings

logger = get_logger(__name__)


class InMemoryThreadStore(ThreadStorePort):
    """Process-local store; keeps serialized snapshots so loads never alias."""

    def __init__(self) -> None:
        self._threads: dict[str, dict[str, Any]] = {}

    async def load(self, thread_id: str) -> ThreadState | None:
        data = self._threads.get(thread_id)
        if data is None:
            return None
        return thread_state_from_dict(data)

    async def save(self, state: ThreadState) -> None:
        self._threads[state.thread_id] = copy.deepcopy(thread_state_to_dict(state))

    async def delete(self, thread_id: str) -> bool:
        return self._threads.pop(thread_id, None) is not None


class AdkSessionThreadStore(ThreadStorePort):
    """Store thread state inside an ADK session, one session per thread.

    The serialized state lives under a single session-state key. A save
    recreates the session with the new snapshot, so no event history builds up.
    """

    STATE_KEY = "adchat_thread"

    def __init__(
        self,
        session_service: BaseSessionService,
        *,
        app_name: str,
        user_id: str,
    ) -> None:
        self.session_service = session_service
        self.app_name = app_name
        self.user_id = user_id

    async def load(self, thread_id: str) -> ThreadState | None:
        session = await self.session_service.get_session(
            app_name=self.app_name,
            user_id=self.user_id,
            session_id=thread_id,
        )
        if session is None:
            return None
        data = session.state.get(self.STATE_KEY)
        if not data:
            return None
        return thread_state_from_dict(data)

    async def save(self, state: ThreadState) -> None:
        data = thread_state_to_dict(state)
        session = await self.session_service.get_session(
            app_name=self.app_name,
            user_id=self.user_id,
            session_id=state.thread_id,
        )
        if session is not None:
            await self.session_service.delete_session(
                app_name=self.app_name,
                user_id=self.user_id,
                session_id=state.thread_id,
            )
        await self.session_service.create_session(
            app_name=self.app_name,
            user_id=self.user_id,
            session_id=state.thread_id,
            state={self.STATE_KEY: data},
        )

    async def delete(self, thread_id: str) -> bool:
        session = await self.session_service.get_session(
            app_name=self.app_name,
            user_id=self.user_id,
            session_id=thread_id,
        )
        if session is None:
            return False
        await self.session_service.delete_session(
            app_name=self.app_name,
            user_id=self.user_id,
            session_id=thread_id,
        )
        return True


_thread_store: ThreadStorePort | None = None


def get_thread_store() -> ThreadStorePort:
    """Get or create the configured thread store."""
    global _thread_store
    if _thread_store is not None:
        return _thread_store

    settings = get_settings()
    backend = settings.thread_store_backend
    if backend == "memory":
        _thread_store = InMemoryThreadStore()
    elif backend == "adk":
        _thread_store = AdkSessionThreadStore(
            InMemorySessionService(),
            app_name=settings.adk_app_name,
            user_id=settings.adk_user_id,
        )
    else:
        raise RuntimeError(
            f"Unsupported thread store backend: {backend}. Use 'memory' or 'adk'."
        )
    logger.info("thread_store.configured", backend=backend)
    return _thread_store
