from jippity.core.actions import ActionRegistry, to_tool
from jippity.errors import DuplicateAction, InvalidActionSchema
from jippity.protocol.messages import Action


def _action(name: str, schema: dict | None = None) -> Action:
    return Action(name=name, description=f"{name} description", schema=schema)


def test_register_accepts_valid_actions() -> None:
    registry = ActionRegistry()
    report = registry.register([_action("jump"), _action("move", {"type": "object"})])

    assert report.accepted == ["jump", "move"]
    assert report.rejected == []
    assert registry.names() == ["jump", "move"]
    assert "jump" in registry
    assert registry.has("move")


def test_duplicate_is_skipped_without_affecting_batch() -> None:
    registry = ActionRegistry()
    registry.register([_action("jump")])
    report = registry.register([_action("jump", {"type": "object"}), _action("duck")])

    assert report.accepted == ["duck"]
    assert len(report.rejected) == 1
    assert isinstance(report.rejected[0], DuplicateAction)
    assert report.total == 2
    # the first registration wins
    assert registry.get("jump") == _action("jump")


def test_duplicate_within_one_batch() -> None:
    registry = ActionRegistry()
    report = registry.register([_action("jump"), _action("jump")])
    assert report.accepted == ["jump"]
    assert len(registry) == 1


def test_invalid_schema_is_rejected_per_action() -> None:
    registry = ActionRegistry()
    report = registry.register([_action("bad", {"type": 12}), _action("good")])

    assert report.accepted == ["good"]
    assert isinstance(report.rejected[0], InvalidActionSchema)
    assert report.rejected[0].action_name == "bad"
    assert registry.names() == ["good"]


def test_custom_schema_validator() -> None:
    def reject_all(action: Action) -> None:
        raise InvalidActionSchema(action.name, "nope")

    registry = ActionRegistry(validate_schema=reject_all)
    report = registry.register([_action("jump")])
    assert report.accepted == []
    assert len(registry) == 0


def test_unregister_ignores_unknown_names() -> None:
    registry = ActionRegistry()
    registry.register([_action("jump"), _action("duck")])

    assert registry.unregister(["jump", "fly", "jump"]) == ["jump"]
    assert registry.unregister(["fly"]) == []
    assert registry.names() == ["duck"]


def test_register_logs_summary(monkeypatch) -> None:
    logs: list[str] = []

    def _capture(message: str, *args: object) -> None:
        logs.append(message)

    monkeypatch.setattr("jippity.core.actions.logger.info", _capture)
    monkeypatch.setattr("jippity.core.actions.logger.warning", _capture)
    monkeypatch.setattr("jippity.core.actions.logger.error", _capture)

    registry = ActionRegistry()
    registry.register([_action("jump")])
    registry.register([_action("jump")])

    assert logs == [
        "actions.register accepted={} total={}",
        "actions.register.duplicate name={}",
        "actions.register.failed total={}",
    ]


def test_model_tools_default_to_empty_parameters() -> None:
    assert to_tool(_action("jump")) == {
        "type": "function",
        "function": {"name": "jump", "description": "jump description", "parameters": {}},
    }


def test_model_tools_restricted_and_ordered() -> None:
    registry = ActionRegistry()
    registry.register([_action("a"), _action("b"), _action("c")])

    assert [tool["function"]["name"] for tool in registry.model_tools()] == ["a", "b", "c"]
    assert [tool["function"]["name"] for tool in registry.model_tools(["c", "a", "zzz"])] == ["c", "a"]
    assert registry.model_tools([]) == []


def test_clear_removes_everything() -> None:
    registry = ActionRegistry()
    registry.register([_action("a"), _action("b")])
    registry.clear()
    assert len(registry) == 0
    assert registry.list() == []
