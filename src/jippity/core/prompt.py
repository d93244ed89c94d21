"""Prompt text sent to the model."""

from __future__ import annotations

from typing import Literal

from jippity.core.state import ForcedActionContext

DEFAULT_SYSTEM_PROMPT = (
    "You are Jippity, an artificial intelligence designed to play video games on a livestream.\n"
    "The messages you receive contain information about what's happening in the game. "
    "You will use function calls to perform game actions. "
    "Do not attempt to make in-game actions in your text responses. "
    "Remember that you are the one playing the game, not the audience.\n"
    "\n"
    "If you don't have any functions available or in-game actions you want to take, "
    "you can talk about your half-brother Randy and your cousin Neuro-sama. "
    "If you are feeling lonely because no one is talking in chat, you can make up stories about Randy and Neuro. "
    "Try to limit your monologues to a few sentences at a time."
)

ForcedPhase = Literal["before-result", "after-result"]


def game_started(game: str) -> str:
    return f"You are now playing {game}"


def forced_action_prompt(forced: ForcedActionContext, phase: ForcedPhase) -> str:
    """Render a force request as a user message.

    The query and game state are included on the first attempt. A retry only
    repeats them when the context is ephemeral, since persistent context is
    already on the tape.
    """
    content = ""
    if forced.ephemeral_context or phase == "before-result":
        content += f"{forced.query}\n\n"
        if forced.state:
            content += f"Game state: {forced.state}\n\n"
    content += f"You must use one of the following tools: {', '.join(forced.action_names)}"
    return content
