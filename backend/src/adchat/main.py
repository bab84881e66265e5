"""
FastAPI application for the ads chat backend.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from functools import lru_cache

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response, StreamingResponse
from structlog.contextvars import bound_contextvars

from .adapters.chat_request import RequestError, account_headers, parse_chat_request
from .adapters.chat_stream import encode_turn, sse_headers
from .adapters.meta_graph import MetaGraphClient
from .engine.runner import AccountContext, ChatEngine, DirectReply, StreamedTurn
from .llm.gemini import GeminiChatModel
from .logging import configure_logging, get_logger
from .settings import get_settings
from .store import get_thread_store
from .tools import build_registry

settings = get_settings()
configure_logging()
logger = get_logger(__name__)

app = FastAPI(
    title="Ads Chat",
    description="Conversational assistant for ad accounts with confirmation-gated writes",
    version="0.1.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@lru_cache
def get_engine() -> ChatEngine:
    return ChatEngine(
        model=GeminiChatModel.from_settings(settings),
        store=get_thread_store(),
        registry=build_registry(),
        settings=settings,
    )


def get_account(request: Request) -> AccountContext:
    try:
        user_id, ad_account_id, token = account_headers(request.headers)
    except RequestError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.detail) from exc
    return AccountContext(
        user_id=user_id,
        ad_account_id=ad_account_id,
        ads=MetaGraphClient.from_settings(token, settings),
    )


@app.post("/api/chat")
async def chat(
    request: Request,
    engine: ChatEngine = Depends(get_engine),
    account: AccountContext = Depends(get_account),
) -> Response:
    try:
        body = await request.json()
    except ValueError:
        body = None
    try:
        chat_request = parse_chat_request(body)
    except RequestError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.detail) from exc

    with bound_contextvars(thread_id=chat_request.conversation_id, user_id=account.user_id):
        result = await engine.handle(
            chat_request.message,
            thread_id=chat_request.conversation_id,
            account=account,
        )

    if isinstance(result, DirectReply):
        return JSONResponse({"content": result.content})

    return StreamingResponse(_stream(result, account.user_id), headers=sse_headers())


async def _stream(turn: StreamedTurn, user_id: str) -> AsyncIterator[bytes]:
    with bound_contextvars(thread_id=turn.thread_id, user_id=user_id):
        async for chunk in encode_turn(turn.events):
            yield chunk


@app.delete("/api/threads/{thread_id}")
async def clear_thread(
    thread_id: str,
    engine: ChatEngine = Depends(get_engine),
    account: AccountContext = Depends(get_account),
) -> dict:
    with bound_contextvars(thread_id=thread_id, user_id=account.user_id):
        deleted = await engine.clear_thread(thread_id)
    if not deleted:
        raise HTTPException(status_code=404, detail="Thread not found")
    return {"status": "ok", "threadId": thread_id}


@app.get("/health")
async def health() -> dict:
    """Health check endpoint."""
    return {
        "status": "ok",
        "model": settings.llm_model,
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
