"""
Port definition for the ads API client.

The engine only knows the tool contracts; tools translate them into Graph-style
paths and parameters through this thin CRUD surface.
"""

from __future__ import annotations

from typing import Any, Protocol


class AdsApiError(Exception):
    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class AdsApiPort(Protocol):
    async def get(self, path: str, params: dict[str, Any] | None = None) -> Any: ...

    async def post(self, path: str, params: dict[str, Any] | None = None) -> Any: ...

    async def delete(self, path: str) -> Any: ...


__all__ = ["AdsApiError", "AdsApiPort"]
