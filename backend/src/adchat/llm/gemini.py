"""
Gemini binding of the chat model port (google-genai).
"""

from __future__ import annotations

import uuid
from collections.abc import AsyncIterator, Sequence

from google import genai
from google.genai import types

from ..domain.models import (
    AssistantMessage,
    Message,
    SystemMessage,
    ToolCall,
    ToolMessage,
    UserMessage,
)
from ..logging import get_logger
from ..ports import ChatModelPort, ModelChunk, ToolDeclaration
from ..settings import Settings
from .google_credentials import setup_google_credentials

logger = get_logger(__name__)


def _function_call_part(call: ToolCall) -> types.Part:
    return types.Part(
        function_call=types.FunctionCall(
            id=call.id, name=call.name, args=dict(call.arguments)
        )
    )


def _function_response_part(message: ToolMessage) -> types.Part:
    key = "error" if message.is_error else "output"
    return types.Part(
        function_response=types.FunctionResponse(
            id=message.tool_call_id,
            name=message.name,
            response={key: message.content},
        )
    )


def to_contents(messages: Sequence[Message]) -> tuple[list[str], list[types.Content]]:
    """Split history into system texts and Gemini contents.

    Consecutive contents with the same role are merged, so the function
    responses of one model turn travel together.
    """
    system: list[str] = []
    contents: list[types.Content] = []

    def add(role: str, parts: list[types.Part]) -> None:
        if not parts:
            return
        if contents and contents[-1].role == role:
            contents[-1].parts = [*(contents[-1].parts or []), *parts]
        else:
            contents.append(types.Content(role=role, parts=parts))

    for message in messages:
        if isinstance(message, SystemMessage):
            system.append(message.content)
        elif isinstance(message, UserMessage):
            add("user", [types.Part(text=message.content)])
        elif isinstance(message, AssistantMessage):
            parts = [types.Part(text=message.content)] if message.content else []
            parts.extend(_function_call_part(call) for call in message.tool_calls)
            add("model", parts)
        elif isinstance(message, ToolMessage):
            add("user", [_function_response_part(message)])
    return system, contents


def to_tools(declarations: Sequence[ToolDeclaration]) -> list[types.Tool] | None:
    if not declarations:
        return None
    return [
        types.Tool(
            function_declarations=[
                types.FunctionDeclaration(
                    name=d.name,
                    description=d.description,
                    parameters_json_schema=d.parameters,
                )
                for d in declarations
            ]
        )
    ]


class GeminiChatModel(ChatModelPort):
    def __init__(
        self,
        client: genai.Client,
        *,
        model_name: str,
        temperature: float | None = None,
    ) -> None:
        self.client = client
        self.model_name = model_name
        self.temperature = temperature

    @classmethod
    def from_settings(cls, settings: Settings) -> GeminiChatModel:
        if settings.google_use_vertex:
            vertex = setup_google_credentials()
            client = genai.Client(
                vertexai=True,
                project=vertex.project,
                location=vertex.location,
                credentials=vertex.credentials,
            )
        else:
            client = genai.Client(api_key=settings.google_api_key)
        logger.info(
            "llm.configured", model=settings.llm_model, vertex=settings.google_use_vertex
        )
        return cls(
            client,
            model_name=settings.llm_model,
            temperature=settings.llm_temperature,
        )

    async def stream(
        self,
        *,
        system_instruction: str | None,
        messages: Sequence[Message],
        tools: Sequence[ToolDeclaration],
    ) -> AsyncIterator[ModelChunk]:
        history_system, contents = to_contents(messages)
        instructions = [*history_system, *([system_instruction] if system_instruction else [])]
        config = types.GenerateContentConfig(
            system_instruction="\n\n".join(instructions) or None,
            temperature=self.temperature,
            tools=to_tools(tools),
            automatic_function_calling=types.AutomaticFunctionCallingConfig(disable=True),
        )

        response_stream = await self.client.aio.models.generate_content_stream(
            model=self.model_name,
            contents=contents,
            config=config,
        )
        async for response in response_stream:
            if not response.candidates:
                continue
            content = response.candidates[0].content
            if content is None or not content.parts:
                continue
            for part in content.parts:
                if part.text and not part.thought:
                    yield ModelChunk(text=part.text)
                if part.function_call and part.function_call.name:
                    call = part.function_call
                    yield ModelChunk(
                        tool_calls=(
                            ToolCall(
                                id=call.id or f"call_{uuid.uuid4().hex[:12]}",
                                name=call.name,
                                arguments=dict(call.args or {}),
                            ),
                        )
                    )
