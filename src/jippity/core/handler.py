"""Session state machine.

The handler owns the game identity, the registered actions, the tape, the
pending-message queue and the current state. It runs on one event loop:
``receive`` never suspends, and at most one invocation task exists at a time.
"""

from __future__ import annotations

import asyncio
from contextvars import ContextVar
from typing import Protocol

from loguru import logger

from jippity.core.actions import ActionRegistry, SchemaValidator
from jippity.core.invocation import ActionSelected, CompletionClient, CompletionInvoker, InvocationOutcome
from jippity.core.prompt import DEFAULT_SYSTEM_PROMPT, forced_action_prompt, game_started
from jippity.core.queue import MessageQueue
from jippity.core.state import (
    AwaitingStartup,
    Exiting,
    ForcedActionContext,
    Idle,
    PendingAction,
    PendingForcedAction,
    SessionState,
    Thinking,
    describe,
    is_pending,
)
from jippity.errors import DecodeError, InvocationFailure, OrderingViolation, ProtocolError
from jippity.protocol.codec import decode
from jippity.protocol.messages import (
    ActionMessage,
    ActionResultMessage,
    ContextMessage,
    ForceActionMessage,
    Message,
    RegisterActionsMessage,
    StartupMessage,
    UnregisterActionsMessage,
)
from jippity.protocol.schema import validate_action_schema
from jippity.tape.service import TapeService
from jippity.tape.store import TapeStore

# Commands handled right away while an action result is outstanding
PENDING_IMMEDIATE_COMMANDS = frozenset({"action/result", "actions/register", "actions/unregister"})

_game_context: ContextVar[str] = ContextVar("game")


def current_game() -> str:
    """Get the game of the session handling the current message."""
    return _game_context.get("-")


class Broadcaster(Protocol):
    """Sends an outbound message to every connected game, best effort."""

    def broadcast(self, message: ActionMessage) -> None: ...


class SessionHandler:
    """Drive one game session between the game clients and the model."""

    def __init__(
        self,
        client: CompletionClient,
        broadcaster: Broadcaster,
        *,
        system_prompt: str = DEFAULT_SYSTEM_PROMPT,
        store: TapeStore | None = None,
        validate_schema: SchemaValidator = validate_action_schema,
        retry_failed_forced_actions: bool = False,
    ) -> None:
        self.game: str | None = None
        self.actions = ActionRegistry(validate_schema=validate_schema)
        self.tape = TapeService(system_prompt, store=store)
        self.queue = MessageQueue()
        self._state: SessionState = AwaitingStartup()
        self._invoker = CompletionInvoker(client)
        self._broadcaster = broadcaster
        self._retry_failed_forced_actions = retry_failed_forced_actions
        self._inflight: asyncio.Task[None] | None = None
        self._exited = asyncio.Event()

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def pending_action(self) -> ActionMessage | None:
        if isinstance(self._state, (PendingAction, PendingForcedAction)):
            return self._state.action
        return None

    @property
    def exiting(self) -> bool:
        return isinstance(self._state, Exiting)

    # ------------------------------------------------------------------
    # Inbound
    # ------------------------------------------------------------------

    def receive(self, raw: str) -> None:
        """Decode one text frame and dispatch it."""
        try:
            message = decode(raw)
        except DecodeError as exc:
            logger.error("session.receive.invalid error={}", exc)
            return
        self.dispatch(message)

    def dispatch(self, message: Message) -> None:
        """Handle the message now, queue it, or reject it, depending on the state."""
        _game_context.set(self.game or "-")
        state = self._state
        try:
            if isinstance(state, Exiting):
                logger.debug("session.receive.ignored command={} state={}", message.command, state.id)
                return
            if isinstance(message, ActionMessage):
                raise OrderingViolation('The "action" command is sent to the game, not received from it')
            self._check_game(message)

            if isinstance(state, AwaitingStartup):
                if not isinstance(message, StartupMessage):
                    raise OrderingViolation(f'Received "{message.command}" before "startup"')
                self.handle(message)
            elif isinstance(state, Thinking):
                if isinstance(message, ForceActionMessage) and state.forced is not None:
                    raise OrderingViolation("A forced action is already in progress")
                self._enqueue(message)
            elif isinstance(state, (PendingAction, PendingForcedAction)):
                if message.command in PENDING_IMMEDIATE_COMMANDS:
                    self.handle(message)
                elif isinstance(message, ForceActionMessage) and isinstance(state, PendingForcedAction):
                    raise OrderingViolation("A forced action is already pending")
                else:
                    self._enqueue(message)
            else:
                self.handle(message)
        except ProtocolError as exc:
            logger.error(
                "session.message.rejected command={} state={} error={}",
                message.command,
                describe(state),
                exc,
            )

    def handle(self, message: Message) -> None:
        """Apply the transition rule for one message.

        Raises:
            OrderingViolation: the message is not allowed in the current state.
        """
        if isinstance(message, StartupMessage):
            self._startup(message)
        elif isinstance(message, RegisterActionsMessage):
            self.actions.register(message.data.actions)
        elif isinstance(message, UnregisterActionsMessage):
            self.actions.unregister(message.data.action_names)
        elif isinstance(message, ContextMessage):
            self._add_context(message)
        elif isinstance(message, ForceActionMessage):
            self._force_action(message)
        elif isinstance(message, ActionResultMessage):
            self._add_action_result(message)
        else:
            raise OrderingViolation(f'Cannot handle "{message.command}"')

    def drain(self) -> int:
        """Replay queued messages while the session stays idle."""
        processed = 0
        while isinstance(self._state, Idle) and self.queue:
            message = self.queue.poll()
            if message is None:
                break
            processed += 1
            logger.debug("session.queue.replay command={} remaining={}", message.command, len(self.queue))
            try:
                self.handle(message)
            except ProtocolError as exc:
                logger.error("session.queue.rejected command={} error={}", message.command, exc)
        return processed

    def nudge(self) -> bool:
        """Let the model think unprompted; only when idle with nothing queued."""
        if not isinstance(self._state, Idle) or self.queue:
            return False
        logger.debug("session.idle.nudge")
        self._begin_thinking()
        return True

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def settle(self) -> None:
        """Wait until no invocation is in flight."""
        while self._inflight is not None and not self._inflight.done():
            await self._inflight

    async def wait_exited(self) -> str:
        await self._exited.wait()
        state = self._state
        return state.reason if isinstance(state, Exiting) else ""

    def stop(self, reason: str) -> None:
        if self.exiting:
            return
        self._exit(reason)
        if self._inflight is not None and not self._inflight.done():
            self._inflight.cancel()

    # ------------------------------------------------------------------
    # Transition rules
    # ------------------------------------------------------------------

    def _startup(self, message: StartupMessage) -> None:
        if not isinstance(self._state, (AwaitingStartup, Idle)):
            raise OrderingViolation(f'Cannot handle "startup" in {describe(self._state)}')
        self.game = message.game
        _game_context.set(message.game)
        self.actions.clear()
        self.tape.record_user_message(game_started(message.game))
        self._transition(Idle())
        logger.info('session.startup game="{}" actions=cleared', message.game)
        self._begin_thinking()

    def _add_context(self, message: ContextMessage) -> None:
        if is_pending(self._state):
            raise OrderingViolation("Received a context message while waiting for an action result")
        self._require_idle(message)
        self.tape.record_user_message(message.data.message)
        if not message.data.silent:
            self._begin_thinking()

    def _force_action(self, message: ForceActionMessage) -> None:
        if isinstance(self._state, PendingForcedAction):
            raise OrderingViolation("A forced action is already pending")
        self._require_idle(message)
        requested = tuple(dict.fromkeys(message.data.action_names))
        known = tuple(name for name in requested if name in self.actions)
        if not known:
            raise OrderingViolation(f"None of the forced actions are registered: {list(requested)}")
        if len(known) != len(requested):
            logger.warning(
                "session.force.unknown_actions names={}",
                [name for name in requested if name not in known],
            )
        forced = ForcedActionContext.from_data(message.data, known)
        self.tape.record_user_message(forced_action_prompt(forced, "before-result"))
        logger.info("session.force actions={} ephemeral={}", list(known), forced.ephemeral_context)
        self._begin_thinking(forced)

    def _add_action_result(self, message: ActionResultMessage) -> None:
        state = self._state
        if not isinstance(state, (PendingAction, PendingForcedAction)):
            raise OrderingViolation("Received an action result when there is no pending action")
        if state.action_id != message.data.id:
            raise OrderingViolation(
                f"Action result id {message.data.id!r} doesn't match the pending action {state.action_id!r}"
            )

        self.tape.record_action_result(message.data.id, success=message.data.success, message=message.data.message)
        self._transition(Idle())
        logger.info("session.action.result id={} success={}", message.data.id, message.data.success)

        if isinstance(state, PendingForcedAction) and not message.data.success:
            retry = self._forced_retry(state.forced)
            if retry is not None:
                self.tape.record_user_message(forced_action_prompt(retry, "after-result"))
                logger.info("session.force.retry actions={}", list(retry.action_names))
                self._begin_thinking(retry)
                return
        self._begin_thinking()

    def _forced_retry(self, forced: ForcedActionContext) -> ForcedActionContext | None:
        if not self._retry_failed_forced_actions:
            logger.warning("session.force.failed retry=disabled actions={}", list(forced.action_names))
            return None
        known = tuple(name for name in forced.action_names if name in self.actions)
        if not known:
            logger.warning("session.force.retry_skipped reason=actions_unregistered")
            return None
        return ForcedActionContext(
            query=forced.query,
            action_names=known,
            state=forced.state,
            ephemeral_context=forced.ephemeral_context,
        )

    # ------------------------------------------------------------------
    # Invocation
    # ------------------------------------------------------------------

    def _begin_thinking(self, forced: ForcedActionContext | None = None) -> None:
        if not isinstance(self._state, Idle):
            raise OrderingViolation(f"Cannot start thinking from {describe(self._state)}")
        self._transition(Thinking(forced=forced))
        self._inflight = asyncio.create_task(self._think(forced), name="jippity-invocation")

    async def _think(self, forced: ForcedActionContext | None) -> None:
        _game_context.set(self.game or "-")
        try:
            outcome = await self._invoker.invoke(self.tape, self.actions, forced)
        except InvocationFailure as exc:
            logger.error("session.invocation.failed error={}", exc)
            self._exit(f"Unusable completion: {exc}")
            return
        except Exception as exc:
            logger.exception("session.invocation.error")
            self._exit(f"Error calling the completion service: {exc}")
            return

        if not isinstance(self._state, Thinking):
            logger.warning("session.invocation.stale state={}", describe(self._state))
            return
        self._apply(outcome, forced)
        self.drain()

    def _apply(self, outcome: InvocationOutcome, forced: ForcedActionContext | None) -> None:
        if isinstance(outcome, ActionSelected):
            self._select(outcome, forced)
        else:
            logger.info("session.says text={}", outcome.text)
            self.tape.record_assistant_message(outcome.text)
            self._transition(Idle())

    def _select(self, outcome: ActionSelected, forced: ForcedActionContext | None) -> None:
        self.tape.record_assistant_message(outcome.text, outcome.tool_call)
        if forced is not None:
            self._transition(PendingForcedAction(action=outcome.action, forced=forced))
        else:
            self._transition(PendingAction(action=outcome.action))
        data = outcome.action.data
        logger.info("session.action name={} id={} data={}", data.name, data.id, data.data)
        try:
            self._broadcaster.broadcast(outcome.action)
        except Exception:
            logger.exception("session.broadcast.error id={}", outcome.action.data.id)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _transition(self, state: SessionState) -> None:
        previous = self._state
        self._state = state
        logger.debug("session.state from={} to={}", describe(previous), describe(state))

    def _exit(self, reason: str) -> None:
        self._transition(Exiting(reason=reason))
        logger.error("session.exiting reason={}", reason)
        self._exited.set()

    def _enqueue(self, message: Message) -> None:
        self.queue.offer(message)
        logger.debug(
            'session.queue.offer command="{}" state={} size={}',
            message.command,
            self._state.id,
            len(self.queue),
        )

    def _require_idle(self, message: Message) -> None:
        if not isinstance(self._state, Idle):
            raise OrderingViolation(f'Cannot handle "{message.command}" in {describe(self._state)}')

    def _check_game(self, message: Message) -> None:
        game = getattr(message, "game", None)
        if self.game is not None and game is not None and game != self.game and not isinstance(message, StartupMessage):
            logger.warning('session.game.mismatch expected="{}" got="{}"', self.game, game)
