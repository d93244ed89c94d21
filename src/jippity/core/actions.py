"""Registry of the actions the game currently offers."""

from __future__ import annotations

import builtins
from collections.abc import Callable, Iterable
from dataclasses import dataclass

from loguru import logger
from openai.types.chat import ChatCompletionToolParam

from jippity.errors import DuplicateAction, RegistrationError
from jippity.protocol.messages import Action
from jippity.protocol.schema import validate_action_schema

SchemaValidator = Callable[[Action], None]


@dataclass(frozen=True)
class RegistrationReport:
    """Outcome of registering one batch of actions."""

    accepted: list[str]
    rejected: list[RegistrationError]

    @property
    def total(self) -> int:
        return len(self.accepted) + len(self.rejected)


class ActionRegistry:
    """Live action set, keyed by name, in registration order."""

    def __init__(self, *, validate_schema: SchemaValidator = validate_action_schema) -> None:
        self._actions: dict[str, Action] = {}
        self._validate_schema = validate_schema

    def register(self, actions: Iterable[Action]) -> RegistrationReport:
        """Register a batch; bad entries are skipped without affecting the rest."""
        accepted: builtins.list[str] = []
        rejected: builtins.list[RegistrationError] = []
        for action in actions:
            try:
                self._register_one(action)
            except RegistrationError as exc:
                rejected.append(exc)
                if isinstance(exc, DuplicateAction):
                    logger.warning("actions.register.duplicate name={}", action.name)
                else:
                    logger.error("actions.register.invalid name={} reason={}", action.name, exc.reason)
                continue
            accepted.append(action.name)

        report = RegistrationReport(accepted=accepted, rejected=rejected)
        if accepted or not rejected:
            logger.info("actions.register accepted={} total={}", len(accepted), report.total)
        else:
            logger.error("actions.register.failed total={}", report.total)
        return report

    def unregister(self, names: Iterable[str]) -> builtins.list[str]:
        """Remove the named actions; names that are not registered are ignored."""
        removed = [name for name in dict.fromkeys(names) if self._actions.pop(name, None) is not None]
        logger.info("actions.unregister removed={}", removed)
        return removed

    def clear(self) -> None:
        self._actions.clear()

    def has(self, name: str) -> bool:
        return name in self._actions

    def get(self, name: str) -> Action | None:
        return self._actions.get(name)

    def names(self) -> builtins.list[str]:
        return list(self._actions)

    def list(self) -> builtins.list[Action]:
        return list(self._actions.values())

    def model_tools(self, only: Iterable[str] | None = None) -> builtins.list[ChatCompletionToolParam]:
        """Describe the actions as completion-service function tools.

        When ``only`` is given, the result is restricted to those names, in that order.
        """
        if only is None:
            selected = self.list()
        else:
            selected = [self._actions[name] for name in dict.fromkeys(only) if name in self._actions]
        return [to_tool(action) for action in selected]

    def __len__(self) -> int:
        return len(self._actions)

    def __contains__(self, name: object) -> bool:
        return name in self._actions

    def _register_one(self, action: Action) -> None:
        if action.name in self._actions:
            raise DuplicateAction(action.name)
        self._validate_schema(action)
        self._actions[action.name] = action


def to_tool(action: Action) -> ChatCompletionToolParam:
    return {
        "type": "function",
        "function": {
            "name": action.name,
            "description": action.description,
            "parameters": dict(action.schema_ or {}),
        },
    }
