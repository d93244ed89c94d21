"""Game API protocol: message models, codec, and schema checks."""

from .codec import decode, decode_payload, encode
from .messages import (
    Action,
    ActionData,
    ActionMessage,
    ActionResultMessage,
    ContextMessage,
    ForceActionData,
    ForceActionMessage,
    Message,
    RegisterActionsMessage,
    StartupMessage,
    UnregisterActionsMessage,
)
from .schema import validate_action_schema

__all__ = [
    "Action",
    "ActionData",
    "ActionMessage",
    "ActionResultMessage",
    "ContextMessage",
    "ForceActionData",
    "ForceActionMessage",
    "Message",
    "RegisterActionsMessage",
    "StartupMessage",
    "UnregisterActionsMessage",
    "decode",
    "decode_payload",
    "encode",
    "validate_action_schema",
]
