"""
Meta Graph API binding of the ads API port.
"""

from __future__ import annotations

import json
from typing import Any

import httpx

from ..logging import get_logger
from ..ports import AdsApiError, AdsApiPort
from ..settings import Settings

logger = get_logger(__name__)


def _encode_param(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list)):
        return json.dumps(value)
    return str(value)


class MetaGraphClient(AdsApiPort):
    """GET/POST/DELETE against the Graph API with a per-request access token."""

    def __init__(
        self,
        access_token: str,
        *,
        base_url: str = "https://graph.facebook.com",
        api_version: str = "v21.0",
        timeout: float = 15.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.access_token = access_token
        self.base_url = f"{base_url.rstrip('/')}/{api_version}"
        self.timeout = timeout
        self._transport = transport

    @classmethod
    def from_settings(cls, access_token: str, settings: Settings) -> MetaGraphClient:
        return cls(
            access_token,
            base_url=settings.meta_api_base_url,
            api_version=settings.meta_api_version,
            timeout=settings.meta_timeout_seconds,
        )

    async def get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        return await self._request("GET", path, params)

    async def post(self, path: str, params: dict[str, Any] | None = None) -> Any:
        return await self._request("POST", path, params)

    async def delete(self, path: str) -> Any:
        return await self._request("DELETE", path)

    async def _request(
        self, method: str, path: str, params: dict[str, Any] | None = None
    ) -> Any:
        query = {key: _encode_param(value) for key, value in (params or {}).items()}
        try:
            async with httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                headers={"Authorization": f"Bearer {self.access_token}"},
                transport=self._transport,
            ) as client:
                response = await client.request(method, path, params=query)
        except httpx.TimeoutException as exc:
            raise AdsApiError(
                f"Meta API request timed out after {self.timeout:g} seconds"
            ) from exc
        except httpx.HTTPError as exc:
            raise AdsApiError(f"Meta API request failed: {exc}") from exc

        if response.is_error:
            raise AdsApiError(
                _error_message(response), status_code=response.status_code
            )
        logger.debug("meta_api.ok", method=method, path=path)
        return response.json()


def _error_message(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        payload = None
    if isinstance(payload, dict):
        error = payload.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
    return f"Meta API error: {response.status_code}"
