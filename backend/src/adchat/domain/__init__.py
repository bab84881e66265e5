from .errors import (
    AdChatError,
    ConfirmedActionFailure,
    InvalidToolArguments,
    ModelInvocationFailure,
    PendingActionConflict,
    ToolExecutionFailure,
    UnknownToolFailure,
)
from .models import (
    AssistantMessage,
    Message,
    PendingAction,
    SystemMessage,
    ThreadState,
    ToolCall,
    ToolMessage,
    UserMessage,
)

__all__ = [
    "AdChatError",
    "AssistantMessage",
    "ConfirmedActionFailure",
    "InvalidToolArguments",
    "Message",
    "ModelInvocationFailure",
    "PendingAction",
    "PendingActionConflict",
    "SystemMessage",
    "ThreadState",
    "ToolCall",
    "ToolExecutionFailure",
    "ToolMessage",
    "UnknownToolFailure",
    "UserMessage",
]
