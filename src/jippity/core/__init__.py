"""Session core: state machine, queue, actions and invocation."""

from .actions import ActionRegistry, RegistrationReport
from .handler import Broadcaster, SessionHandler
from .invocation import ActionSelected, CompletionClient, CompletionInvoker, Spoke
from .queue import MessageQueue
from .state import (
    AwaitingStartup,
    Exiting,
    ForcedActionContext,
    Idle,
    PendingAction,
    PendingForcedAction,
    SessionState,
    Thinking,
)

__all__ = [
    "ActionRegistry",
    "ActionSelected",
    "AwaitingStartup",
    "Broadcaster",
    "CompletionClient",
    "CompletionInvoker",
    "Exiting",
    "ForcedActionContext",
    "Idle",
    "MessageQueue",
    "PendingAction",
    "PendingForcedAction",
    "RegistrationReport",
    "SessionHandler",
    "SessionState",
    "Spoke",
    "Thinking",
]
