"""Third-party service integrations."""

from jippity.integrations.openai_client import OpenAICompletionClient, to_completion

__all__ = ["OpenAICompletionClient", "to_completion"]
