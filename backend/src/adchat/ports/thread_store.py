"""
Port definition for per-thread state storage.

Stores are read-then-replaced wholesale: ``save`` overwrites the whole state
of a thread, concurrent writers resolve as last-writer-wins.
"""

from __future__ import annotations

from typing import Protocol

from ..domain.models import ThreadState


class ThreadStorePort(Protocol):
    async def load(self, thread_id: str) -> ThreadState | None: ...

    async def save(self, state: ThreadState) -> None: ...

    async def delete(self, thread_id: str) -> bool: ...


__all__ = ["ThreadState", "ThreadStorePort"]
