from jippity.core.prompt import DEFAULT_SYSTEM_PROMPT, forced_action_prompt, game_started
from jippity.core.state import ForcedActionContext


def test_game_started() -> None:
    assert game_started("Zomboid") == "You are now playing Zomboid"


def test_system_prompt_introduces_jippity() -> None:
    assert DEFAULT_SYSTEM_PROMPT.startswith("You are Jippity")


def test_forced_prompt_includes_query_and_state_first_time() -> None:
    forced = ForcedActionContext(query="Pick a card", action_names=("play", "pass"), state="Hand: 3 cards")
    assert forced_action_prompt(forced, "before-result") == (
        "Pick a card\n\nGame state: Hand: 3 cards\n\nYou must use one of the following tools: play, pass"
    )


def test_forced_prompt_without_state() -> None:
    forced = ForcedActionContext(query="Pick a card", action_names=("play",))
    assert forced_action_prompt(forced, "before-result") == (
        "Pick a card\n\nYou must use one of the following tools: play"
    )


def test_forced_prompt_after_result_is_directive_only() -> None:
    forced = ForcedActionContext(query="Pick a card", action_names=("play",), state="s")
    assert forced_action_prompt(forced, "after-result") == "You must use one of the following tools: play"


def test_forced_prompt_after_result_repeats_ephemeral_context() -> None:
    forced = ForcedActionContext(query="Pick a card", action_names=("play",), state="s", ephemeral_context=True)
    assert forced_action_prompt(forced, "after-result").startswith("Pick a card\n\nGame state: s\n\n")
