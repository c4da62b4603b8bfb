from __future__ import annotations

from reviewdesk_core.providers.anthropic import AnthropicTitleSuggester
from reviewdesk_core.providers.base import BaseTitleSuggester
from reviewdesk_core.providers.openai import OpenAITitleSuggester


def get_suggester(config: dict) -> BaseTitleSuggester:
    model = config["model"]
    if model == "anthropic":
        return AnthropicTitleSuggester(api_key=config["anthropic_api_key"])
    if model == "openai":
        return OpenAITitleSuggester(api_key=config["openai_api_key"])
    raise ValueError(f"Unknown model provider: {model!r}. Choose 'anthropic' or 'openai'.")
