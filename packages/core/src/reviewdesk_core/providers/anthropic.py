from __future__ import annotations

from reviewdesk_core.providers.base import BaseTitleSuggester


class AnthropicTitleSuggester(BaseTitleSuggester):
    MODEL = "claude-sonnet-4-20250514"
    # Higher than a reviewer would use: title ideas benefit from variety.
    TEMPERATURE = 0.7

    def __init__(self, api_key: str):
        try:
            from anthropic import Anthropic
        except ImportError:
            raise ImportError(
                "The 'anthropic' package is required for this provider. "
                "Install it with: pip install 'reviewdesk[anthropic]'"
            )
        self.client = Anthropic(api_key=api_key)

    def _call_api(self, prompt: str) -> str:
        # Imported inside the method because the anthropic package is optional;
        # __init__ already validated it is installed before we reach here.
        from anthropic.types import TextBlock

        response = self.client.messages.create(
            model=self.MODEL,
            messages=[{"role": "user", "content": prompt}],
            temperature=self.TEMPERATURE,
            max_tokens=self.MAX_TOKENS,
        )
        text_blocks = [block.text for block in response.content if isinstance(block, TextBlock)]
        return "".join(text_blocks).strip()
