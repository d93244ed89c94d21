"""Game API message models.

Every message is a JSON object whose ``command`` property selects the variant.
All inbound variants carry the ``game`` name; the outbound ``action`` message
does not.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictStr


class _Strict(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True, populate_by_name=True)


class Action(_Strict):
    """A registrable command the model can execute whenever it wants."""

    name: StrictStr
    description: StrictStr
    # "schema" would shadow a BaseModel attribute
    schema_: dict[str, Any] | None = Field(default=None, alias="schema")


class StartupMessage(_Strict):
    """Sent by the game as soon as it starts; clears all registered actions."""

    command: Literal["startup"]
    game: StrictStr


class ContextData(_Strict):
    message: StrictStr
    silent: StrictBool


class ContextMessage(_Strict):
    """Tells the model what is happening in the game."""

    command: Literal["context"]
    game: StrictStr
    data: ContextData


class RegisterActionsData(_Strict):
    actions: list[Action]


class RegisterActionsMessage(_Strict):
    command: Literal["actions/register"]
    game: StrictStr
    data: RegisterActionsData


class UnregisterActionsData(_Strict):
    action_names: list[StrictStr]


class UnregisterActionsMessage(_Strict):
    command: Literal["actions/unregister"]
    game: StrictStr
    data: UnregisterActionsData


class ForceActionData(_Strict):
    state: StrictStr | None = None
    query: StrictStr
    ephemeral_context: StrictBool | None = None
    action_names: list[StrictStr]


class ForceActionMessage(_Strict):
    """Forces the model to execute one of the listed actions as soon as possible.

    Only one forced action can be outstanding at a time.
    """

    command: Literal["actions/force"]
    game: StrictStr
    data: ForceActionData


class ActionResultData(_Strict):
    id: StrictStr
    success: StrictBool
    message: StrictStr | None = None


class ActionResultMessage(_Strict):
    """Sent by the game once an action has been validated.

    The model waits for this message before it can continue.
    """

    command: Literal["action/result"]
    game: StrictStr
    data: ActionResultData


class ActionData(_Strict):
    id: StrictStr
    name: StrictStr
    # JSON-stringified arguments exactly as produced by the model
    data: StrictStr | None = None


class ActionMessage(_Strict):
    """Sent to the game when the model tries to execute an action."""

    command: Literal["action"] = "action"
    data: ActionData


type Message = (
    StartupMessage
    | ContextMessage
    | RegisterActionsMessage
    | UnregisterActionsMessage
    | ForceActionMessage
    | ActionResultMessage
    | ActionMessage
)

MESSAGE_TYPES: dict[str, type[BaseModel]] = {
    "startup": StartupMessage,
    "context": ContextMessage,
    "actions/register": RegisterActionsMessage,
    "actions/unregister": UnregisterActionsMessage,
    "actions/force": ForceActionMessage,
    "action/result": ActionResultMessage,
    "action": ActionMessage,
}
