"""Base title suggester implementing the Template Method pattern.

All providers share the same algorithm:
    suggest() → _build_prompt()
              → _call_with_retry() → _call_api()   ← only this differs per provider
              → _parse()

Subclasses implement two things only:
  - __init__: validate and store the SDK client
  - _call_api: make one raw API call and return the text response

Suggestions are a convenience for the reviewer, never part of the
workflow: every failure degrades to an empty list.
"""

from __future__ import annotations

import json
import logging
import re
import time
from abc import ABC, abstractmethod

logger = logging.getLogger(__name__)

_MAX_RETRIES = 3
_MAX_TOKENS = 1024

# The first JSON array in the response, even when wrapped in prose or fences.
_JSON_ARRAY = re.compile(r"\[.*\]", re.DOTALL)


class BaseTitleSuggester(ABC):
    MAX_RETRIES: int = _MAX_RETRIES
    MAX_TOKENS: int = _MAX_TOKENS

    # ------------------------------------------------------------------ #
    # Public interface                                                     #
    # ------------------------------------------------------------------ #

    def suggest(self, current_title: str, keywords: list[str], count: int = 3) -> list[str]:
        """Return up to count alternative titles for current_title."""
        if count <= 0:
            return []
        raw = self._call_with_retry(self._build_prompt(current_title, keywords, count))
        if raw is None:
            return []
        return self._parse(raw)[:count]

    # ------------------------------------------------------------------ #
    # Abstract: implement in each provider                                #
    # ------------------------------------------------------------------ #

    @abstractmethod
    def _call_api(self, prompt: str) -> str:
        """Make a single API call and return the raw text response.

        Should raise on failure; _call_with_retry handles retries and logging.
        """

    # ------------------------------------------------------------------ #
    # Shared implementations                                               #
    # ------------------------------------------------------------------ #

    def _call_with_retry(self, prompt: str) -> str | None:
        """Retry _call_api up to MAX_RETRIES times with exponential backoff."""
        for attempt in range(self.MAX_RETRIES):
            try:
                return self._call_api(prompt)
            except Exception as e:
                if attempt == self.MAX_RETRIES - 1:
                    logger.error(
                        "%s API failed after %d attempts: %s",
                        self.__class__.__name__,
                        self.MAX_RETRIES,
                        e,
                    )
                    return None
                delay = 2**attempt
                logger.warning(
                    "%s API error (attempt %d/%d): %s. Retrying in %ds...",
                    self.__class__.__name__,
                    attempt + 1,
                    self.MAX_RETRIES,
                    e,
                    delay,
                )
                time.sleep(delay)

    def _build_prompt(self, current_title: str, keywords: list[str], count: int) -> str:
        return f"""Act as a professional SEO copywriter for a content agency.
The current title is: "{current_title}".
The target keywords are: {", ".join(keywords) or "none given"}.

Please generate {count} alternative, high-converting blog post titles based on this context.
Return ONLY the titles as a simple JSON array of strings. Do not include markdown formatting."""

    def _parse(self, raw: str) -> list[str]:
        match = _JSON_ARRAY.search(raw or "")
        if not match:
            logger.warning("%s: no JSON array in response: %s", self.__class__.__name__, (raw or "")[:200])
            return []
        try:
            titles = json.loads(match.group(0))
        except json.JSONDecodeError:
            logger.warning("%s: failed to parse response as JSON: %s", self.__class__.__name__, raw[:200])
            return []
        if not isinstance(titles, list):
            return []
        return [t.strip() for t in titles if isinstance(t, str) and t.strip()]
