"""Shared fakes and fixtures for the engine and HTTP tests."""

from __future__ import annotations

from collections.abc import AsyncIterator, Sequence
from dataclasses import dataclass, field
from typing import Any

import pytest

from adchat.domain.models import Message, ToolCall
from adchat.engine.runner import AccountContext, ChatEngine
from adchat.ports import AdsApiError, ModelChunk, ToolDeclaration
from adchat.settings import Settings
from adchat.store import InMemoryThreadStore
from adchat.tools import build_registry


def text(value: str) -> ModelChunk:
    return ModelChunk(text=value)


def call(name: str, /, call_id: str = "call_1", **arguments: Any) -> ModelChunk:
    return ModelChunk(tool_calls=(ToolCall(id=call_id, name=name, arguments=arguments),))


@dataclass
class ModelInvocation:
    system_instruction: str | None
    messages: list[Message]
    tools: list[ToolDeclaration]


class ScriptedModel:
    """Chat model that replays one scripted response per invocation.

    A script entry is a list of chunks, or an exception to raise before any
    output.
    """

    model_name = "scripted-model"

    def __init__(self, *responses: list[ModelChunk] | BaseException) -> None:
        self.responses = list(responses)
        self.invocations: list[ModelInvocation] = []

    def script(self, *responses: list[ModelChunk] | BaseException) -> None:
        self.responses.extend(responses)

    async def stream(
        self,
        *,
        system_instruction: str | None,
        messages: Sequence[Message],
        tools: Sequence[ToolDeclaration],
    ) -> AsyncIterator[ModelChunk]:
        self.invocations.append(
            ModelInvocation(system_instruction, list(messages), list(tools))
        )
        if not self.responses:
            raise AssertionError("ScriptedModel ran out of responses")
        response = self.responses.pop(0)
        if isinstance(response, BaseException):
            raise response
        for chunk in response:
            yield chunk


@dataclass
class FakeAds:
    """Ads API fake recording every request."""

    responses: dict[tuple[str, str], Any] = field(default_factory=dict)
    errors: dict[tuple[str, str], str] = field(default_factory=dict)
    calls: list[tuple[str, str, dict[str, Any] | None]] = field(default_factory=list)

    async def _handle(self, method: str, path: str, params: dict[str, Any] | None) -> Any:
        self.calls.append((method, path, params))
        if (method, path) in self.errors:
            raise AdsApiError(self.errors[(method, path)], status_code=400)
        return self.responses.get((method, path), {"data": []})

    async def get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        return await self._handle("GET", path, params)

    async def post(self, path: str, params: dict[str, Any] | None = None) -> Any:
        return await self._handle("POST", path, params)

    async def delete(self, path: str) -> Any:
        return await self._handle("DELETE", path, None)

    @property
    def writes(self) -> list[tuple[str, str, dict[str, Any] | None]]:
        return [c for c in self.calls if c[0] in ("POST", "DELETE")]


@pytest.fixture
def settings() -> Settings:
    return Settings(
        llm_model="scripted-model",
        model_timeout_seconds=2.0,
        state_load_timeout_seconds=0.5,
        max_tool_hops=4,
    )


@pytest.fixture
def registry():
    return build_registry()


@pytest.fixture
def store() -> InMemoryThreadStore:
    return InMemoryThreadStore()


@pytest.fixture
def model() -> ScriptedModel:
    return ScriptedModel()


@pytest.fixture
def ads() -> FakeAds:
    return FakeAds()


@pytest.fixture
def account(ads: FakeAds) -> AccountContext:
    return AccountContext(user_id="user-1", ad_account_id="act_123", ads=ads)


@pytest.fixture
def engine(model, store, registry, settings) -> ChatEngine:
    return ChatEngine(model=model, store=store, registry=registry, settings=settings)
