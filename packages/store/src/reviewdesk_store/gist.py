"""GistStore — zero-infrastructure shared portal store via GitHub Gist.

Why Gist as the shared store:
- Zero infra: no DB to provision, no server to maintain.
- Built-in access control: whoever can read the Gist can run the portal
  against it; the agency keeps the token.
- One JSON document: the whole portal state is readable and diffable in
  the Gist revision history, which doubles as an audit log.

Data format: a single JSON file named `reviewdesk_portal.json` inside the
Gist holding one object with the collections `articles`, `drafts`,
`edits`, `contacts`, `clients`, `campaigns` and `campaign_clients`.

Every write is read-modify-write of the whole document. The Gist API has
no compare-and-set, so conditional article updates re-read the document
immediately before writing and abort if the row moved on.
"""

from __future__ import annotations

import json
import logging

from reviewdesk_store.base import BaseStore, StoreError, apply_article_update
from reviewdesk_store.models import (
    Article,
    Campaign,
    Contact,
    DraftKey,
    EditSuggestion,
    ReviewDraft,
    normalize_email,
    parse_timestamp,
)

logger = logging.getLogger(__name__)

_GIST_FILENAME = "reviewdesk_portal.json"


def _empty_document() -> dict:
    return {
        "articles": {},
        "drafts": [],
        "edits": [],
        "contacts": {},
        "clients": {},
        "campaigns": {},
        "campaign_clients": {},
    }


def _draft_matches(d: dict, key: DraftKey) -> bool:
    return (d.get("article_id"), normalize_email(d.get("contact_email", "")), d.get("review_type")) == tuple(key)


class GistStore(BaseStore):
    """Stores the portal as one JSON document in a GitHub Gist.

    Suitable for a handful of campaigns and reviewers; every call fetches
    the full document. For busier portals switch to SQLiteStore.

    The Gist ID is stored in .reviewdesk.yml under `gist_id`. Running
    `reviewdesk init` creates the Gist and writes the ID automatically.
    """

    def __init__(self, gist_id: str, token: str):
        try:
            from github import Github
        except ImportError:
            raise ImportError("PyGithub is required for GistStore. Install reviewdesk with its default dependencies.")
        self._gist_id = gist_id
        self._gh = Github(token)

    @staticmethod
    def empty_document() -> dict:
        """The document a freshly created portal Gist starts with."""
        return _empty_document()

    def _get_gist(self):
        return self._gh.get_gist(self._gist_id)

    def _load(self) -> tuple[object, dict]:
        """Fetch the Gist and its parsed document. Raises StoreError on any failure."""
        try:
            gist = self._get_gist()
            file_obj = gist.files.get(_GIST_FILENAME)
        except Exception as e:
            raise StoreError(f"Could not read Gist {self._gist_id} ({type(e).__name__}: {e})") from e
        if file_obj is None:
            return gist, _empty_document()
        try:
            document = json.loads(file_obj.content) or {}
        except (json.JSONDecodeError, AttributeError, TypeError) as e:
            raise StoreError(f"Gist {self._gist_id} does not hold a valid portal document: {e}") from e
        for name, empty in _empty_document().items():
            document.setdefault(name, empty)
        return gist, document

    def _save(self, gist, document: dict) -> None:
        try:
            gist.edit(files={_GIST_FILENAME: {"content": json.dumps(document, indent=2)}})
        except Exception as e:
            raise StoreError(f"Could not write Gist {self._gist_id} ({type(e).__name__}: {e})") from e

    def _read(self) -> dict:
        return self._load()[1]

    # ------------------------------------------------------------------ #
    # Articles                                                             #
    # ------------------------------------------------------------------ #

    def get_article(self, article_id: str) -> Article | None:
        data = self._read()["articles"].get(article_id)
        return Article.from_dict(data) if data else None

    def update_article(self, article_id: str, fields: dict, expected: dict | None = None) -> Article:
        # Re-read right before the write so the expected check sees the
        # latest revision of the document.
        gist, document = self._load()
        data = document["articles"].get(article_id)
        if data is None:
            raise StoreError(f"Article {article_id} not found")
        updated = apply_article_update(Article.from_dict(data), fields, expected)
        document["articles"][article_id] = updated.to_dict()
        self._save(gist, document)
        logger.debug("Updated article %s in Gist %s", article_id, self._gist_id)
        return updated

    def insert_articles(self, articles: list[Article]) -> None:
        gist, document = self._load()
        clashes = [a.id for a in articles if a.id in document["articles"]]
        if clashes:
            raise StoreError(f"Duplicate article id(s): {', '.join(clashes)}")
        for article in articles:
            document["articles"][article.id] = article.to_dict()
        # A single edit() call carries every new article, so the insert is all-or-nothing.
        self._save(gist, document)

    def delete_article(self, article_id: str) -> bool:
        gist, document = self._load()
        if document["articles"].pop(article_id, None) is None:
            return False
        self._save(gist, document)
        return True

    def list_articles(self, campaign_id: str | None = None, statuses: list[str] | None = None) -> list[Article]:
        wanted = {str(s) for s in statuses} if statuses is not None else None
        results = [
            Article.from_dict(d)
            for d in self._read()["articles"].values()
            if (campaign_id is None or d.get("campaign_id") == campaign_id)
            and (wanted is None or d.get("status") in wanted)
        ]
        results.sort(key=lambda a: a.last_updated or a.created_at, reverse=True)
        return results

    # ------------------------------------------------------------------ #
    # Drafts                                                               #
    # ------------------------------------------------------------------ #

    def upsert_draft(self, draft: ReviewDraft) -> None:
        gist, document = self._load()
        key = draft.key
        row = draft.to_dict()
        row["contact_email"] = key.contact_email
        document["drafts"] = [d for d in document["drafts"] if not _draft_matches(d, key)]
        document["drafts"].append(row)
        self._save(gist, document)

    def get_draft(self, key: DraftKey) -> ReviewDraft | None:
        key = DraftKey.of(*key)
        for d in self._read()["drafts"]:
            if _draft_matches(d, key):
                return ReviewDraft.from_dict(d)
        return None

    def delete_draft(self, key: DraftKey) -> bool:
        key = DraftKey.of(*key)
        gist, document = self._load()
        remaining = [d for d in document["drafts"] if not _draft_matches(d, key)]
        if len(remaining) == len(document["drafts"]):
            return False
        document["drafts"] = remaining
        self._save(gist, document)
        return True

    def list_drafts(self, article_id: str | None = None, updated_since: str | None = None) -> list[ReviewDraft]:
        since = parse_timestamp(updated_since) if updated_since else None
        results = [
            ReviewDraft.from_dict(d)
            for d in self._read()["drafts"]
            if (article_id is None or d.get("article_id") == article_id)
            and (since is None or parse_timestamp(d["updated_at"]) > since)
        ]
        results.sort(key=lambda d: parse_timestamp(d.updated_at), reverse=True)
        return results

    # ------------------------------------------------------------------ #
    # Edits                                                                #
    # ------------------------------------------------------------------ #

    def insert_edits(self, edits: list[EditSuggestion]) -> None:
        missing = [e.id for e in edits if not e.article_id or not e.edit_type]
        if missing:
            raise StoreError(f"Edit suggestion(s) missing article_id/edit_type: {', '.join(missing)}")
        gist, document = self._load()
        document["edits"].extend(e.to_dict() for e in edits)
        self._save(gist, document)

    def list_edits(
        self, article_id: str, edit_type: str | None = None, status: str | None = None
    ) -> list[EditSuggestion]:
        results = [
            EditSuggestion.from_dict(e)
            for e in self._read()["edits"]
            if e.get("article_id") == article_id
            and (edit_type is None or e.get("edit_type") == str(edit_type))
            and (status is None or e.get("status") == str(status))
        ]
        results.sort(key=lambda e: e.timestamp)
        return results

    # ------------------------------------------------------------------ #
    # Contacts and campaigns                                               #
    # ------------------------------------------------------------------ #

    def get_contact(self, email: str) -> Contact | None:
        document = self._read()
        data = document["contacts"].get(normalize_email(email))
        if data is None:
            return None
        contact = Contact.from_dict(data)
        contact.client_name = document["clients"].get(contact.client_id, contact.client_name)
        return contact

    def get_campaign(self, campaign_id: str) -> Campaign | None:
        data = self._read()["campaigns"].get(campaign_id)
        return Campaign.from_dict(data) if data else None

    def get_client_name(self, client_id: str) -> str | None:
        return self._read()["clients"].get(client_id)

    def campaign_client_ids(self, campaign_id: str) -> list[str]:
        return list(self._read()["campaign_clients"].get(campaign_id, []))

    def add_contact(self, contact: Contact) -> None:
        gist, document = self._load()
        row = contact.to_dict()
        row["email"] = normalize_email(contact.email)
        document["contacts"][row["email"]] = row
        if contact.client_name:
            document["clients"][contact.client_id] = contact.client_name
        self._save(gist, document)

    def add_campaign(self, campaign: Campaign, client_ids: list[str] | None = None) -> None:
        gist, document = self._load()
        document["campaigns"][campaign.id] = campaign.to_dict()
        if client_ids is not None:
            document["campaign_clients"][campaign.id] = list(client_ids)
        self._save(gist, document)
