"""SQLiteStore — local file-based store, the default backend.

Why SQLite as the default:
- Batteries included: ships with Python, no extra dependencies.
- Real transactions: BEGIN IMMEDIATE gives the conditional article update
  a consistent snapshot, so two reviewers racing on one article cannot
  both land a submission.
- One file per portal, easy to copy between environments.

Schema:
  articles          — indexed columns plus the full record as JSON in `data`
  review_drafts     — one row per (article, contact, review type)
  client_edits      — edit suggestions, one row each
  contacts/clients  — the email allow-list directory
  campaigns/campaign_clients — which clients may review which campaign
"""

from __future__ import annotations

import json
import logging
import sqlite3
from contextlib import contextmanager

from reviewdesk_store.base import BaseStore, StoreError, apply_article_update
from reviewdesk_store.models import (
    Article,
    Campaign,
    Comment,
    Contact,
    DraftKey,
    EditSuggestion,
    ReviewDraft,
    normalize_email,
    parse_timestamp,
)

logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS articles (
    id              TEXT PRIMARY KEY,
    campaign_id     TEXT NOT NULL,
    status          TEXT NOT NULL,
    revision_round  INTEGER DEFAULT 1,
    created_at      TEXT,
    last_updated    TEXT,
    data            TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_articles_campaign ON articles (campaign_id);
CREATE INDEX IF NOT EXISTS idx_articles_status   ON articles (status);

CREATE TABLE IF NOT EXISTS review_drafts (
    id               INTEGER PRIMARY KEY AUTOINCREMENT,
    article_id       TEXT NOT NULL,
    contact_email    TEXT NOT NULL,
    review_type      TEXT NOT NULL,
    draft_edits      TEXT DEFAULT '[]',
    draft_comments   TEXT DEFAULT '[]',
    draft_selections TEXT DEFAULT '{}',
    general_comments TEXT,
    updated_at       TEXT NOT NULL,
    UNIQUE (article_id, contact_email, review_type)
);
CREATE INDEX IF NOT EXISTS idx_review_drafts_article ON review_drafts (article_id);

CREATE TABLE IF NOT EXISTS client_edits (
    id                TEXT PRIMARY KEY,
    article_id        TEXT NOT NULL,
    contact_email     TEXT NOT NULL,
    contact_name      TEXT NOT NULL,
    edit_type         TEXT NOT NULL CHECK (edit_type IN ('outline', 'content')),
    target_id         TEXT NOT NULL,
    action_type       TEXT NOT NULL CHECK (action_type IN ('modify', 'delete', 'add')),
    original_content  TEXT,
    suggested_content TEXT,
    status            TEXT DEFAULT 'pending' CHECK (status IN ('pending', 'accepted', 'rejected')),
    created_at        TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_client_edits_article ON client_edits (article_id, edit_type);

CREATE TABLE IF NOT EXISTS clients (
    id   TEXT PRIMARY KEY,
    name TEXT
);

CREATE TABLE IF NOT EXISTS contacts (
    id        TEXT PRIMARY KEY,
    email     TEXT NOT NULL UNIQUE,
    name      TEXT,
    client_id TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS campaigns (
    id             TEXT PRIMARY KEY,
    name           TEXT,
    strategy_goals TEXT
);

CREATE TABLE IF NOT EXISTS campaign_clients (
    campaign_id TEXT NOT NULL,
    client_id   TEXT NOT NULL,
    UNIQUE (campaign_id, client_id)
);
"""


def _dumps(value) -> str | None:
    return json.dumps(value) if value is not None else None


def _loads(text: str | None, default=None):
    if text is None:
        return default
    return json.loads(text)


class SQLiteStore(BaseStore):
    """Stores the portal in a local SQLite database file.

    The database file path defaults to `.reviewdesk.db` in the current
    working directory. Configure via .reviewdesk.yml: `store_path: /path/to/portal.db`.
    """

    def __init__(self, db_path: str = ".reviewdesk.db"):
        try:
            # Autocommit mode: transactions are opened explicitly in _transaction.
            self._conn = sqlite3.connect(db_path, isolation_level=None)
            self._conn.row_factory = sqlite3.Row
            self._conn.executescript(_SCHEMA)
        except sqlite3.Error as e:
            raise StoreError(f"Could not open SQLite store at {db_path}: {e}") from e

    @contextmanager
    def _transaction(self, immediate: bool = False):
        try:
            self._conn.execute("BEGIN IMMEDIATE" if immediate else "BEGIN")
            try:
                yield self._conn
            except BaseException:
                self._conn.execute("ROLLBACK")
                raise
            self._conn.execute("COMMIT")
        except sqlite3.Error as e:
            raise StoreError(f"SQLite error: {e}") from e

    @contextmanager
    def _reading(self):
        try:
            yield self._conn
        except sqlite3.Error as e:
            raise StoreError(f"SQLite error: {e}") from e

    # ------------------------------------------------------------------ #
    # Articles                                                             #
    # ------------------------------------------------------------------ #

    def get_article(self, article_id: str) -> Article | None:
        with self._reading() as conn:
            row = conn.execute("SELECT data FROM articles WHERE id=?", (article_id,)).fetchone()
        return Article.from_dict(json.loads(row["data"])) if row else None

    def update_article(self, article_id: str, fields: dict, expected: dict | None = None) -> Article:
        with self._transaction(immediate=True) as conn:
            row = conn.execute("SELECT data FROM articles WHERE id=?", (article_id,)).fetchone()
            if row is None:
                raise StoreError(f"Article {article_id} not found")
            updated = apply_article_update(Article.from_dict(json.loads(row["data"])), fields, expected)
            self._write_article(conn, updated, replace=True)
        logger.debug("Updated article %s fields=%s", article_id, sorted(fields))
        return updated

    def insert_articles(self, articles: list[Article]) -> None:
        with self._transaction() as conn:
            for article in articles:
                self._write_article(conn, article, replace=False)

    def delete_article(self, article_id: str) -> bool:
        with self._transaction() as conn:
            cursor = conn.execute("DELETE FROM articles WHERE id=?", (article_id,))
        return cursor.rowcount > 0

    def list_articles(self, campaign_id: str | None = None, statuses: list[str] | None = None) -> list[Article]:
        clauses: list[str] = []
        params: list = []
        if campaign_id is not None:
            clauses.append("campaign_id=?")
            params.append(campaign_id)
        if statuses is not None:
            if not statuses:
                return []
            clauses.append(f"status IN ({', '.join('?' for _ in statuses)})")
            params.extend(str(s) for s in statuses)
        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        with self._reading() as conn:
            rows = conn.execute(
                f"SELECT data FROM articles {where} ORDER BY COALESCE(last_updated, created_at) DESC",
                params,
            ).fetchall()
        return [Article.from_dict(json.loads(r["data"])) for r in rows]

    @staticmethod
    def _write_article(conn: sqlite3.Connection, article: Article, replace: bool) -> None:
        verb = "INSERT OR REPLACE" if replace else "INSERT"
        conn.execute(
            f"""
            {verb} INTO articles (id, campaign_id, status, revision_round, created_at, last_updated, data)
            VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            (
                article.id,
                article.campaign_id,
                str(article.status),
                article.revision_round,
                article.created_at,
                article.last_updated,
                json.dumps(article.to_dict()),
            ),
        )

    # ------------------------------------------------------------------ #
    # Drafts                                                               #
    # ------------------------------------------------------------------ #

    def upsert_draft(self, draft: ReviewDraft) -> None:
        key = draft.key
        with self._transaction() as conn:
            conn.execute(
                """
                INSERT INTO review_drafts
                  (article_id, contact_email, review_type, draft_edits, draft_comments,
                   draft_selections, general_comments, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT (article_id, contact_email, review_type) DO UPDATE SET
                  draft_edits=excluded.draft_edits,
                  draft_comments=excluded.draft_comments,
                  draft_selections=excluded.draft_selections,
                  general_comments=excluded.general_comments,
                  updated_at=excluded.updated_at
                """,
                (
                    key.article_id,
                    key.contact_email,
                    key.review_type,
                    json.dumps([e.to_dict() for e in draft.edits]),
                    json.dumps([c.to_dict() for c in draft.comments]),
                    json.dumps(draft.selections),
                    draft.general_comment,
                    draft.updated_at,
                ),
            )

    def get_draft(self, key: DraftKey) -> ReviewDraft | None:
        key = DraftKey.of(*key)
        with self._reading() as conn:
            row = conn.execute(
                "SELECT * FROM review_drafts WHERE article_id=? AND contact_email=? AND review_type=?",
                tuple(key),
            ).fetchone()
        return self._row_to_draft(row) if row else None

    def delete_draft(self, key: DraftKey) -> bool:
        key = DraftKey.of(*key)
        with self._transaction() as conn:
            cursor = conn.execute(
                "DELETE FROM review_drafts WHERE article_id=? AND contact_email=? AND review_type=?",
                tuple(key),
            )
        return cursor.rowcount > 0

    def list_drafts(self, article_id: str | None = None, updated_since: str | None = None) -> list[ReviewDraft]:
        clauses: list[str] = []
        params: list = []
        if article_id is not None:
            clauses.append("article_id=?")
            params.append(article_id)
        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        with self._reading() as conn:
            rows = conn.execute(f"SELECT * FROM review_drafts {where}", params).fetchall()
        drafts = [self._row_to_draft(r) for r in rows]
        # Offsets vary between writers; compare instants, not text.
        if updated_since is not None:
            since = parse_timestamp(updated_since)
            drafts = [d for d in drafts if parse_timestamp(d.updated_at) > since]
        drafts.sort(key=lambda d: parse_timestamp(d.updated_at), reverse=True)
        return drafts

    @staticmethod
    def _row_to_draft(row: sqlite3.Row) -> ReviewDraft:
        return ReviewDraft(
            article_id=row["article_id"],
            contact_email=row["contact_email"],
            review_type=row["review_type"],
            edits=[EditSuggestion.from_dict(e) for e in _loads(row["draft_edits"], [])],
            comments=[Comment.from_dict(c) for c in _loads(row["draft_comments"], [])],
            selections=_loads(row["draft_selections"], {}),
            general_comment=row["general_comments"] or "",
            updated_at=row["updated_at"],
        )

    # ------------------------------------------------------------------ #
    # Edits                                                                #
    # ------------------------------------------------------------------ #

    def insert_edits(self, edits: list[EditSuggestion]) -> None:
        with self._transaction() as conn:
            for edit in edits:
                if not edit.article_id or not edit.edit_type:
                    raise StoreError(f"Edit suggestion {edit.id} is missing article_id/edit_type")
                conn.execute(
                    """
                    INSERT INTO client_edits
                      (id, article_id, contact_email, contact_name, edit_type, target_id,
                       action_type, original_content, suggested_content, status, created_at)
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        edit.id,
                        edit.article_id,
                        edit.author_email,
                        edit.author,
                        edit.edit_type,
                        edit.target_id,
                        edit.action_type,
                        _dumps(edit.original_content),
                        _dumps(edit.suggested_content),
                        edit.status,
                        edit.timestamp,
                    ),
                )

    def list_edits(
        self, article_id: str, edit_type: str | None = None, status: str | None = None
    ) -> list[EditSuggestion]:
        query = "SELECT * FROM client_edits WHERE article_id=?"
        params: list = [article_id]
        if edit_type is not None:
            query += " AND edit_type=?"
            params.append(str(edit_type))
        if status is not None:
            query += " AND status=?"
            params.append(str(status))
        with self._reading() as conn:
            rows = conn.execute(query + " ORDER BY created_at", params).fetchall()
        return [
            EditSuggestion(
                id=r["id"],
                target_id=r["target_id"],
                action_type=r["action_type"],
                original_content=_loads(r["original_content"]),
                suggested_content=_loads(r["suggested_content"]),
                author=r["contact_name"],
                author_email=r["contact_email"],
                timestamp=r["created_at"],
                status=r["status"],
                article_id=r["article_id"],
                edit_type=r["edit_type"],
            )
            for r in rows
        ]

    # ------------------------------------------------------------------ #
    # Contacts and campaigns                                               #
    # ------------------------------------------------------------------ #

    def get_contact(self, email: str) -> Contact | None:
        with self._reading() as conn:
            row = conn.execute(
                """
                SELECT c.id, c.email, c.name, c.client_id, cl.name AS client_name
                FROM contacts c LEFT JOIN clients cl ON cl.id = c.client_id
                WHERE c.email=?
                """,
                (normalize_email(email),),
            ).fetchone()
        if row is None:
            return None
        return Contact(
            id=row["id"],
            email=row["email"],
            name=row["name"] or "",
            client_id=row["client_id"],
            client_name=row["client_name"] or "",
        )

    def get_campaign(self, campaign_id: str) -> Campaign | None:
        with self._reading() as conn:
            row = conn.execute("SELECT * FROM campaigns WHERE id=?", (campaign_id,)).fetchone()
        if row is None:
            return None
        return Campaign(id=row["id"], name=row["name"] or "", strategy_goals=row["strategy_goals"] or "")

    def get_client_name(self, client_id: str) -> str | None:
        with self._reading() as conn:
            row = conn.execute("SELECT name FROM clients WHERE id=?", (client_id,)).fetchone()
        return row["name"] if row else None

    def campaign_client_ids(self, campaign_id: str) -> list[str]:
        with self._reading() as conn:
            rows = conn.execute(
                "SELECT client_id FROM campaign_clients WHERE campaign_id=? ORDER BY client_id", (campaign_id,)
            ).fetchall()
        return [r["client_id"] for r in rows]

    def add_contact(self, contact: Contact) -> None:
        with self._transaction() as conn:
            conn.execute(
                "INSERT OR REPLACE INTO contacts (id, email, name, client_id) VALUES (?, ?, ?, ?)",
                (contact.id, normalize_email(contact.email), contact.name, contact.client_id),
            )
            if contact.client_name:
                conn.execute(
                    "INSERT OR REPLACE INTO clients (id, name) VALUES (?, ?)",
                    (contact.client_id, contact.client_name),
                )

    def add_campaign(self, campaign: Campaign, client_ids: list[str] | None = None) -> None:
        with self._transaction() as conn:
            conn.execute(
                "INSERT OR REPLACE INTO campaigns (id, name, strategy_goals) VALUES (?, ?, ?)",
                (campaign.id, campaign.name, campaign.strategy_goals),
            )
            if client_ids is not None:
                conn.execute("DELETE FROM campaign_clients WHERE campaign_id=?", (campaign.id,))
                conn.executemany(
                    "INSERT INTO campaign_clients (campaign_id, client_id) VALUES (?, ?)",
                    [(campaign.id, client_id) for client_id in client_ids],
                )

    def close(self) -> None:
        self._conn.close()
