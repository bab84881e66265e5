"""Error taxonomy for the chat engine."""

from __future__ import annotations


class AdChatError(Exception):
    """Base class for engine errors."""


class ModelInvocationFailure(AdChatError):
    """The language model call failed or timed out."""


class ToolExecutionFailure(AdChatError):
    def __init__(self, tool_name: str, message: str) -> None:
        super().__init__(message)
        self.tool_name = tool_name


class ConfirmedActionFailure(ToolExecutionFailure):
    """A confirmed mutating action failed while executing."""


class UnknownToolFailure(AdChatError):
    def __init__(self, tool_name: str) -> None:
        super().__init__(f'Tool "{tool_name}" not found.')
        self.tool_name = tool_name


class InvalidToolArguments(ToolExecutionFailure):
    """Tool arguments did not satisfy the declared schema."""


class PendingActionConflict(AdChatError):
    def __init__(self, thread_id: str, existing: str, incoming: str) -> None:
        super().__init__(
            f"Thread {thread_id} already awaits confirmation of {existing}; "
            f"refusing to queue {incoming}."
        )
        self.thread_id = thread_id
        self.existing = existing
        self.incoming = incoming
