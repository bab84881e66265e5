from .ads_api import AdsApiError, AdsApiPort
from .chat_model import ChatModelPort, ModelChunk, ToolDeclaration
from .thread_store import ThreadState, ThreadStorePort

__all__ = [
    "AdsApiError",
    "AdsApiPort",
    "ChatModelPort",
    "ModelChunk",
    "ThreadState",
    "ThreadStorePort",
    "ToolDeclaration",
]
