"""Session lifecycle states.

Exactly one state is current at any time and it is replaced, never mutated.
The pending action lives inside the pending states, so "no action pending" and
"action pending with this id" cannot both be true.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar

from jippity.protocol.messages import ActionMessage, ForceActionData


@dataclass(frozen=True)
class ForcedActionContext:
    """The force request behind an outstanding invocation or action.

    Kept so the forced action can be retried if it fails.
    """

    query: str
    action_names: tuple[str, ...]
    state: str | None = None
    ephemeral_context: bool = False

    @classmethod
    def from_data(cls, data: ForceActionData, action_names: tuple[str, ...] | None = None) -> ForcedActionContext:
        return cls(
            query=data.query,
            action_names=action_names if action_names is not None else tuple(dict.fromkeys(data.action_names)),
            state=data.state,
            ephemeral_context=bool(data.ephemeral_context),
        )


@dataclass(frozen=True)
class AwaitingStartup:
    """Waiting for the game to send "startup"."""

    id: ClassVar[str] = "state/waiting-for-game-startup"


@dataclass(frozen=True)
class Idle:
    """Free to invoke the model."""

    id: ClassVar[str] = "state/idle"


@dataclass(frozen=True)
class Thinking:
    """A completion request is in flight."""

    id: ClassVar[str] = "state/thinking"

    forced: ForcedActionContext | None = None


@dataclass(frozen=True)
class PendingAction:
    """An action was sent to the game and its result has not arrived."""

    id: ClassVar[str] = "state/pending-action"

    action: ActionMessage

    @property
    def action_id(self) -> str:
        return self.action.data.id


@dataclass(frozen=True)
class PendingForcedAction:
    """Like ``PendingAction``, for an action the game forced."""

    id: ClassVar[str] = "state/pending-forced-action"

    action: ActionMessage
    forced: ForcedActionContext

    @property
    def action_id(self) -> str:
        return self.action.data.id


@dataclass(frozen=True)
class Exiting:
    """Terminal state; the run loop stops."""

    id: ClassVar[str] = "state/exiting"

    reason: str = ""


type SessionState = AwaitingStartup | Idle | Thinking | PendingAction | PendingForcedAction | Exiting


def is_pending(state: SessionState) -> bool:
    return isinstance(state, (PendingAction, PendingForcedAction))


def describe(state: SessionState) -> str:
    if isinstance(state, (PendingAction, PendingForcedAction)):
        return f"{state.id}(action_id={state.action_id})"
    if isinstance(state, Exiting) and state.reason:
        return f"{state.id}(reason={state.reason})"
    return state.id
