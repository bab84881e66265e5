from .thread_store import AdkSessionThreadStore, InMemoryThreadStore, get_thread_store

__all__ = [
    "AdkSessionThreadStore",
    "InMemoryThreadStore",
    "get_thread_store",
]
