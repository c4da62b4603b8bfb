"""Abstract store interface.

The review portal keeps articles, drafts, edit suggestions and the contact
directory in a hosted store. reviewdesk_core depends on BaseStore, not on
a concrete backend, so SQLite, the Gist document store and the in-memory
store are interchangeable without touching workflow code.
"""

from __future__ import annotations

import dataclasses
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from reviewdesk_store.models import (
        Article,
        Campaign,
        Contact,
        DraftKey,
        EditSuggestion,
        ReviewDraft,
    )

# Article attributes a caller may change through update_article.
UPDATABLE_ARTICLE_FIELDS = frozenset(
    {
        "title",
        "status",
        "proposed_titles",
        "selected_title",
        "outline_sections",
        "outline_content",
        "draft_blocks",
        "draft_content",
        "client_comments",
        "revision_history",
        "revision_round",
        "last_updated",
    }
)


class StoreError(Exception):
    """A storage call failed (network, constraint violation, corrupt data)."""


class StaleWriteError(StoreError):
    """A conditional write found the row changed since it was read."""

    def __init__(self, article_id: str, expected: dict, actual: dict):
        self.article_id = article_id
        self.expected = expected
        self.actual = actual
        super().__init__(f"Article {article_id} changed concurrently (expected {expected}, found {actual})")


def apply_article_update(article: Article, fields: dict, expected: dict | None = None) -> Article:
    """Return a copy of article with fields applied, enforcing the expected values.

    Shared by every backend so the compare-and-set rules are identical:
    each key of ``expected`` must match the current attribute, otherwise
    StaleWriteError is raised and nothing is applied.
    """
    unknown = set(fields) - UPDATABLE_ARTICLE_FIELDS
    if unknown:
        raise StoreError(f"Cannot update article field(s): {', '.join(sorted(unknown))}")
    if expected:
        actual = {key: getattr(article, key, None) for key in expected}
        if any(str(actual[key]) != str(value) for key, value in expected.items()):
            raise StaleWriteError(article.id, dict(expected), actual)
    return dataclasses.replace(article, **fields)


class BaseStore(ABC):
    """Pluggable persistence layer for the review workflow.

    Implementations raise StoreError on any failed call and never swallow
    errors: whether a failure is fatal is the workflow engine's decision.
    Lookups that naturally may find nothing return None or an empty list.
    """

    # ------------------------------------------------------------------ #
    # Articles                                                             #
    # ------------------------------------------------------------------ #

    @abstractmethod
    def get_article(self, article_id: str) -> Article | None:
        """Return the article or None if it does not exist."""

    @abstractmethod
    def update_article(self, article_id: str, fields: dict, expected: dict | None = None) -> Article:
        """Apply all fields in one write and return the updated article.

        When ``expected`` is given the write lands only if the stored row
        still holds those values; otherwise StaleWriteError is raised.
        Raises StoreError if the article does not exist.
        """

    @abstractmethod
    def insert_articles(self, articles: list[Article]) -> None:
        """Insert all articles or none of them."""

    @abstractmethod
    def delete_article(self, article_id: str) -> bool:
        """Delete an article. Returns False if it did not exist."""

    @abstractmethod
    def list_articles(self, campaign_id: str | None = None, statuses: list[str] | None = None) -> list[Article]:
        """Return matching articles, most recently updated first."""

    # ------------------------------------------------------------------ #
    # Review drafts                                                        #
    # ------------------------------------------------------------------ #

    @abstractmethod
    def upsert_draft(self, draft: ReviewDraft) -> None:
        """Insert or overwrite the draft for draft.key. Last write wins."""

    @abstractmethod
    def get_draft(self, key: DraftKey) -> ReviewDraft | None:
        """Return the draft for key or None."""

    @abstractmethod
    def delete_draft(self, key: DraftKey) -> bool:
        """Delete the draft for key. Returns False if there was none."""

    @abstractmethod
    def list_drafts(self, article_id: str | None = None, updated_since: str | None = None) -> list[ReviewDraft]:
        """Return drafts, most recently updated first.

        ``updated_since`` is an ISO-8601 timestamp; only drafts updated
        strictly after it are returned.
        """

    # ------------------------------------------------------------------ #
    # Edit suggestions                                                     #
    # ------------------------------------------------------------------ #

    @abstractmethod
    def insert_edits(self, edits: list[EditSuggestion]) -> None:
        """Persist edit suggestions. Each must carry article_id and edit_type."""

    @abstractmethod
    def list_edits(
        self, article_id: str, edit_type: str | None = None, status: str | None = None
    ) -> list[EditSuggestion]:
        """Return an article's edit suggestions, oldest first."""

    # ------------------------------------------------------------------ #
    # Contacts and campaigns                                               #
    # ------------------------------------------------------------------ #

    @abstractmethod
    def get_contact(self, email: str) -> Contact | None:
        """Return the contact for a (normalised) email, including its client name."""

    @abstractmethod
    def get_campaign(self, campaign_id: str) -> Campaign | None:
        """Return the campaign or None."""

    @abstractmethod
    def get_client_name(self, client_id: str) -> str | None:
        """Return the display name of a client organisation or None."""

    @abstractmethod
    def campaign_client_ids(self, campaign_id: str) -> list[str]:
        """Return the ids of the clients associated with a campaign."""

    @abstractmethod
    def add_contact(self, contact: Contact) -> None:
        """Insert or replace a contact (and its client) in the directory."""

    @abstractmethod
    def add_campaign(self, campaign: Campaign, client_ids: list[str] | None = None) -> None:
        """Insert or replace a campaign and its client associations."""

    def resolve_contact_name(self, email: str) -> str | None:
        contact = self.get_contact(email)
        return contact.name if contact else None

    def close(self) -> None:
        """Release any resources held by the store (connections, file handles).

        Optional; subclasses that need cleanup should override this.
        Default is a no-op so callers can always call close() safely.
        """
