"""In-memory store — process-local backend for embedding and tests.

Records are deep-copied on the way in and out so callers can never mutate
stored state through a reference they hold, which keeps the behaviour
indistinguishable from a real database round-trip.
"""

from __future__ import annotations

import copy
import threading
from typing import TYPE_CHECKING

from reviewdesk_store.base import BaseStore, StoreError, apply_article_update
from reviewdesk_store.models import DraftKey, normalize_email, parse_timestamp

if TYPE_CHECKING:
    from reviewdesk_store.models import Article, Campaign, Contact, EditSuggestion, ReviewDraft


def _recency(article: Article) -> str:
    return article.last_updated or article.created_at


class MemoryStore(BaseStore):
    """Keeps every collection in dicts guarded by a single lock."""

    def __init__(self):
        self._lock = threading.Lock()
        self._articles: dict[str, Article] = {}
        self._drafts: dict[DraftKey, ReviewDraft] = {}
        self._edits: list[EditSuggestion] = []
        self._contacts: dict[str, Contact] = {}
        self._campaigns: dict[str, Campaign] = {}
        self._campaign_clients: dict[str, list[str]] = {}
        self._clients: dict[str, str] = {}

    # Articles

    def get_article(self, article_id: str) -> Article | None:
        with self._lock:
            return copy.deepcopy(self._articles.get(article_id))

    def update_article(self, article_id: str, fields: dict, expected: dict | None = None) -> Article:
        with self._lock:
            current = self._articles.get(article_id)
            if current is None:
                raise StoreError(f"Article {article_id} not found")
            updated = apply_article_update(current, copy.deepcopy(fields), expected)
            self._articles[article_id] = updated
            return copy.deepcopy(updated)

    def insert_articles(self, articles: list[Article]) -> None:
        with self._lock:
            clashes = [a.id for a in articles if a.id in self._articles]
            if clashes:
                raise StoreError(f"Duplicate article id(s): {', '.join(clashes)}")
            for article in articles:
                self._articles[article.id] = copy.deepcopy(article)

    def delete_article(self, article_id: str) -> bool:
        with self._lock:
            return self._articles.pop(article_id, None) is not None

    def list_articles(self, campaign_id: str | None = None, statuses: list[str] | None = None) -> list[Article]:
        wanted = {str(s) for s in statuses} if statuses is not None else None
        with self._lock:
            results = [
                a
                for a in self._articles.values()
                if (campaign_id is None or a.campaign_id == campaign_id) and (wanted is None or str(a.status) in wanted)
            ]
            results.sort(key=_recency, reverse=True)
            return copy.deepcopy(results)

    # Drafts

    def upsert_draft(self, draft: ReviewDraft) -> None:
        stored = copy.deepcopy(draft)
        stored.contact_email = draft.key.contact_email
        with self._lock:
            self._drafts[draft.key] = stored

    def get_draft(self, key: DraftKey) -> ReviewDraft | None:
        with self._lock:
            return copy.deepcopy(self._drafts.get(DraftKey.of(*key)))

    def delete_draft(self, key: DraftKey) -> bool:
        with self._lock:
            return self._drafts.pop(DraftKey.of(*key), None) is not None

    def list_drafts(self, article_id: str | None = None, updated_since: str | None = None) -> list[ReviewDraft]:
        since = parse_timestamp(updated_since) if updated_since else None
        with self._lock:
            results = [
                d
                for d in self._drafts.values()
                if (article_id is None or d.article_id == article_id)
                and (since is None or parse_timestamp(d.updated_at) > since)
            ]
            results.sort(key=lambda d: parse_timestamp(d.updated_at), reverse=True)
            return copy.deepcopy(results)

    # Edits

    def insert_edits(self, edits: list[EditSuggestion]) -> None:
        missing = [e.id for e in edits if not e.article_id or not e.edit_type]
        if missing:
            raise StoreError(f"Edit suggestion(s) missing article_id/edit_type: {', '.join(missing)}")
        with self._lock:
            self._edits.extend(copy.deepcopy(edits))

    def list_edits(
        self, article_id: str, edit_type: str | None = None, status: str | None = None
    ) -> list[EditSuggestion]:
        with self._lock:
            results = [
                e
                for e in self._edits
                if e.article_id == article_id
                and (edit_type is None or e.edit_type == str(edit_type))
                and (status is None or e.status == str(status))
            ]
            results.sort(key=lambda e: e.timestamp)
            return copy.deepcopy(results)

    # Contacts and campaigns

    def get_contact(self, email: str) -> Contact | None:
        with self._lock:
            contact = copy.deepcopy(self._contacts.get(normalize_email(email)))
            if contact is not None:
                contact.client_name = self._clients.get(contact.client_id, contact.client_name)
            return contact

    def get_campaign(self, campaign_id: str) -> Campaign | None:
        with self._lock:
            return copy.deepcopy(self._campaigns.get(campaign_id))

    def get_client_name(self, client_id: str) -> str | None:
        with self._lock:
            return self._clients.get(client_id)

    def campaign_client_ids(self, campaign_id: str) -> list[str]:
        with self._lock:
            return list(self._campaign_clients.get(campaign_id, []))

    def add_contact(self, contact: Contact) -> None:
        stored = copy.deepcopy(contact)
        stored.email = normalize_email(stored.email)
        with self._lock:
            self._contacts[stored.email] = stored
            if stored.client_name:
                self._clients[stored.client_id] = stored.client_name

    def add_campaign(self, campaign: Campaign, client_ids: list[str] | None = None) -> None:
        with self._lock:
            self._campaigns[campaign.id] = copy.deepcopy(campaign)
            if client_ids is not None:
                self._campaign_clients[campaign.id] = list(client_ids)
