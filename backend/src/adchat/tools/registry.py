"""
Tool definitions and the static tool registry.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ValidationError

from ..deps import Deps
from ..domain.errors import InvalidToolArguments, UnknownToolFailure
from ..ports import ToolDeclaration

Handler = Callable[[Deps, Any], Awaitable[Any]]


def _format_validation_error(exc: ValidationError) -> str:
    problems = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"]) or "arguments"
        problems.append(f"{location}: {error['msg']}")
    return "Invalid arguments - " + "; ".join(problems)


def _inline_schema(schema: dict[str, Any]) -> dict[str, Any]:
    """Resolve local ``$ref`` pointers and drop titles for function declarations."""
    defs = schema.get("$defs", {})

    def resolve(node: Any) -> Any:
        if isinstance(node, dict):
            all_of = node.get("allOf")
            if isinstance(all_of, list) and len(all_of) == 1:
                rest = {k: v for k, v in node.items() if k != "allOf"}
                return resolve({**all_of[0], **rest})
            ref = node.get("$ref")
            if isinstance(ref, str) and ref.startswith("#/$defs/"):
                target = defs[ref.removeprefix("#/$defs/")]
                merged = {**target, **{k: v for k, v in node.items() if k != "$ref"}}
                return resolve(merged)
            return {
                key: resolve(value)
                for key, value in node.items()
                if key not in ("$defs", "title")
            }
        if isinstance(node, list):
            return [resolve(item) for item in node]
        return node

    return resolve(schema)


@dataclass(frozen=True)
class ToolDefinition:
    name: str
    description: str
    args_model: type[BaseModel]
    handler: Handler
    mutating: bool = False

    def validate(self, arguments: Mapping[str, Any]) -> BaseModel:
        try:
            return self.args_model.model_validate(dict(arguments))
        except ValidationError as exc:
            raise InvalidToolArguments(self.name, _format_validation_error(exc)) from exc

    def normalize(self, arguments: Mapping[str, Any]) -> dict[str, Any]:
        """Validated arguments in wire form, defaults applied."""
        return self.validate(arguments).model_dump(
            mode="json", by_alias=True, exclude_none=True
        )

    async def invoke(self, arguments: Mapping[str, Any], deps: Deps) -> Any:
        return await self.handler(deps, self.validate(arguments))

    def declaration(self) -> ToolDeclaration:
        return ToolDeclaration(
            name=self.name,
            description=self.description,
            parameters=_inline_schema(
                self.args_model.model_json_schema(by_alias=True)
            ),
        )


@dataclass(frozen=True)
class ToolBinding:
    """Tools exposed to one model invocation.

    ``executable`` names may run from model output; ``declarations`` is what the
    model sees, which can include request-only mutating tools.
    """

    executable: frozenset[str]
    declarations: tuple[ToolDeclaration, ...]


class ToolRegistry:
    def __init__(
        self,
        tools: Iterable[ToolDefinition],
        *,
        dangerous: frozenset[str],
    ) -> None:
        self._tools: dict[str, ToolDefinition] = {}
        for tool in tools:
            if tool.name in self._tools:
                raise ValueError(f"Duplicate tool name: {tool.name}")
            if tool.mutating and tool.name not in dangerous:
                raise ValueError(
                    f"Mutating tool {tool.name} is missing from the dangerous "
                    "tool taxonomy."
                )
            self._tools[tool.name] = tool
        self.dangerous = dangerous

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)

    def get(self, name: str) -> ToolDefinition | None:
        return self._tools.get(name)

    def require(self, name: str) -> ToolDefinition:
        tool = self._tools.get(name)
        if tool is None:
            raise UnknownToolFailure(name)
        return tool

    @property
    def read_tools(self) -> list[ToolDefinition]:
        return [
            t
            for t in self._tools.values()
            if not t.mutating and t.name not in self.dangerous
        ]

    @property
    def write_tools(self) -> list[ToolDefinition]:
        return [
            t for t in self._tools.values() if t.mutating or t.name in self.dangerous
        ]

    def binding(
        self,
        *,
        read_names: Iterable[str] | None = None,
        advertise_writes: bool = True,
    ) -> ToolBinding:
        wanted = set(read_names) if read_names is not None else None
        readable = [
            t for t in self.read_tools if wanted is None or t.name in wanted
        ]
        declarations = [t.declaration() for t in readable]
        if advertise_writes:
            declarations.extend(t.declaration() for t in self.write_tools)
        return ToolBinding(
            executable=frozenset(t.name for t in readable),
            declarations=tuple(declarations),
        )
