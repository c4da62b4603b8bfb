"""Review portal data models.

Decoupled from reviewdesk_core so any backend can persist them without
knowing the workflow rules. Every record serialises to a JSON-compatible
dict with snake_case keys; the SQLite and Gist backends store exactly
these dicts.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import NamedTuple


def utcnow_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 timestamp, treating naive values as UTC."""
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def new_id(prefix: str = "") -> str:
    return f"{prefix}{uuid.uuid4().hex}" if prefix else str(uuid.uuid4())


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


@dataclass
class Section:
    """One outline entry. Position in the outline list is document order."""

    id: str
    level: str  # "H1" | "H2" | "H3"
    title: str
    description: str | None = None
    word_count_estimate: int | None = None

    def to_dict(self) -> dict:
        d = {"id": self.id, "level": self.level, "title": self.title}
        if self.description is not None:
            d["description"] = self.description
        if self.word_count_estimate is not None:
            d["word_count_estimate"] = self.word_count_estimate
        return d

    @classmethod
    def from_dict(cls, d: dict) -> Section:
        return cls(
            id=d.get("id", ""),
            level=d.get("level", "H2"),
            title=d.get("title", ""),
            description=d.get("description"),
            word_count_estimate=d.get("word_count_estimate", d.get("wordCountEstimate")),
        )


@dataclass
class Block:
    """One content block of a draft."""

    id: str
    type: str  # "header" | "paragraph" | "quote" | "image"
    content: str

    def to_dict(self) -> dict:
        return {"id": self.id, "type": self.type, "content": self.content}

    @classmethod
    def from_dict(cls, d: dict) -> Block:
        return cls(id=d.get("id", ""), type=d.get("type", "paragraph"), content=d.get("content", ""))


@dataclass
class EditSuggestion:
    """A proposed add/modify/delete against an outline section or content block.

    original_content is the snapshot the reviewer started from (None for
    "add"); suggested_content is the proposed value (None for "delete").
    Both are stored as plain dicts so outline and content edits share one
    shape.
    """

    id: str
    target_id: str
    action_type: str  # "add" | "modify" | "delete"
    original_content: dict | None
    suggested_content: dict | None
    author: str
    author_email: str
    timestamp: str
    status: str = "pending"  # "pending" | "accepted" | "rejected"
    article_id: str | None = None
    edit_type: str | None = None  # "outline" | "content"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "target_id": self.target_id,
            "action_type": self.action_type,
            "original_content": self.original_content,
            "suggested_content": self.suggested_content,
            "author": self.author,
            "author_email": self.author_email,
            "timestamp": self.timestamp,
            "status": self.status,
            "article_id": self.article_id,
            "edit_type": self.edit_type,
        }

    @classmethod
    def from_dict(cls, d: dict) -> EditSuggestion:
        return cls(
            id=d.get("id", ""),
            target_id=d.get("target_id", ""),
            action_type=d.get("action_type", "modify"),
            original_content=d.get("original_content"),
            suggested_content=d.get("suggested_content"),
            author=d.get("author", ""),
            author_email=d.get("author_email", ""),
            timestamp=d.get("timestamp", ""),
            status=d.get("status", "pending"),
            article_id=d.get("article_id"),
            edit_type=d.get("edit_type"),
        )


@dataclass
class Comment:
    """A reviewer note attached to a section or block. Never mutates the target."""

    id: str
    target_id: str
    author: str
    text: str
    timestamp: str
    resolved: bool = False

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "target_id": self.target_id,
            "author": self.author,
            "text": self.text,
            "timestamp": self.timestamp,
            "resolved": self.resolved,
        }

    @classmethod
    def from_dict(cls, d: dict) -> Comment:
        return cls(
            id=d.get("id", ""),
            target_id=d.get("target_id", ""),
            author=d.get("author", ""),
            text=d.get("text", ""),
            timestamp=d.get("timestamp", ""),
            resolved=bool(d.get("resolved", False)),
        )


@dataclass
class TargetComment:
    """The per-target comment shape recorded in submitted feedback."""

    target_id: str
    text: str

    def to_dict(self) -> dict:
        return {"target_id": self.target_id, "text": self.text}

    @classmethod
    def from_dict(cls, d: dict) -> TargetComment:
        return cls(target_id=d.get("target_id", ""), text=d.get("text", ""))


@dataclass
class TitleChoice:
    """A proposed title as the client saw it, possibly with edited text and a note."""

    id: str
    text: str
    notes: str | None = None

    def to_dict(self) -> dict:
        return {"id": self.id, "text": self.text, "notes": self.notes}

    @classmethod
    def from_dict(cls, d: dict) -> TitleChoice:
        return cls(id=d.get("id", ""), text=d.get("text", ""), notes=d.get("notes"))


@dataclass
class ReviewFeedback:
    """The payload attached to an Article when a review round is submitted.

    archived_at is only set on the copies kept in Article.revision_history.
    """

    action: str  # "approved" | "revision_requested" | "rejected"
    timestamp: str
    round: int
    reviewer: str = "client"
    comments: list[TargetComment] = field(default_factory=list)
    general_comment: str | None = None
    edits: list[EditSuggestion] = field(default_factory=list)
    reject_reason: str | None = None
    approved_titles: list[TitleChoice] = field(default_factory=list)
    title_notes: dict[str, str] = field(default_factory=dict)
    archived_at: str | None = None

    def to_dict(self) -> dict:
        d = {
            "action": self.action,
            "reviewer": self.reviewer,
            "timestamp": self.timestamp,
            "round": self.round,
            "comments": [c.to_dict() for c in self.comments],
            "general_comment": self.general_comment,
            "edits": [e.to_dict() for e in self.edits],
            "reject_reason": self.reject_reason,
            "approved_titles": [t.to_dict() for t in self.approved_titles],
            "title_notes": dict(self.title_notes),
        }
        if self.archived_at is not None:
            d["archived_at"] = self.archived_at
        return d

    @classmethod
    def from_dict(cls, d: dict) -> ReviewFeedback:
        return cls(
            action=d.get("action", ""),
            reviewer=d.get("reviewer", "client"),
            timestamp=d.get("timestamp", ""),
            round=d.get("round") or 0,
            comments=[TargetComment.from_dict(c) for c in d.get("comments") or []],
            general_comment=d.get("general_comment"),
            edits=[EditSuggestion.from_dict(e) for e in d.get("edits") or []],
            reject_reason=d.get("reject_reason"),
            approved_titles=[TitleChoice.from_dict(t) for t in d.get("approved_titles") or []],
            title_notes=dict(d.get("title_notes") or {}),
            archived_at=d.get("archived_at"),
        )


@dataclass
class Article:
    """The unit of review.

    Outline and content are held either as structured lists or as legacy
    markdown text; readers prefer the structured form when present.
    """

    id: str
    campaign_id: str
    title: str
    status: str
    proposed_titles: list[str] = field(default_factory=list)
    selected_title: str | None = None
    outline_sections: list[Section] | None = None
    outline_content: str | None = None
    draft_blocks: list[Block] | None = None
    draft_content: str | None = None
    client_comments: ReviewFeedback | None = None
    revision_history: list[ReviewFeedback] = field(default_factory=list)
    revision_round: int = 1
    created_at: str = field(default_factory=utcnow_iso)
    last_updated: str | None = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "campaign_id": self.campaign_id,
            "title": self.title,
            "status": str(self.status),
            "proposed_titles": list(self.proposed_titles),
            "selected_title": self.selected_title,
            "outline_sections": (
                [s.to_dict() for s in self.outline_sections] if self.outline_sections is not None else None
            ),
            "outline_content": self.outline_content,
            "draft_blocks": [b.to_dict() for b in self.draft_blocks] if self.draft_blocks is not None else None,
            "draft_content": self.draft_content,
            "client_comments": self.client_comments.to_dict() if self.client_comments is not None else None,
            "revision_history": [f.to_dict() for f in self.revision_history],
            "revision_round": self.revision_round,
            "created_at": self.created_at,
            "last_updated": self.last_updated,
        }

    @classmethod
    def from_dict(cls, d: dict) -> Article:
        sections = d.get("outline_sections")
        blocks = d.get("draft_blocks")
        comments = d.get("client_comments")
        return cls(
            id=d.get("id", ""),
            campaign_id=d.get("campaign_id", ""),
            title=d.get("title", ""),
            status=d.get("status", ""),
            proposed_titles=list(d.get("proposed_titles") or []),
            selected_title=d.get("selected_title"),
            outline_sections=[Section.from_dict(s) for s in sections] if sections is not None else None,
            outline_content=d.get("outline_content"),
            draft_blocks=[Block.from_dict(b) for b in blocks] if blocks is not None else None,
            draft_content=d.get("draft_content"),
            client_comments=ReviewFeedback.from_dict(comments) if comments else None,
            revision_history=[ReviewFeedback.from_dict(f) for f in d.get("revision_history") or []],
            revision_round=d.get("revision_round") or 1,
            created_at=d.get("created_at") or utcnow_iso(),
            last_updated=d.get("last_updated"),
        )


class DraftKey(NamedTuple):
    """Natural key of a ReviewDraft: at most one live draft per triple."""

    article_id: str
    contact_email: str
    review_type: str

    @classmethod
    def of(cls, article_id: str, contact_email: str, review_type: str) -> DraftKey:
        return cls(article_id, normalize_email(contact_email), str(review_type))


@dataclass
class ReviewDraft:
    """Unsubmitted reviewer state, upserted on every autosave."""

    article_id: str
    contact_email: str
    review_type: str  # "title" | "outline" | "content"
    edits: list[EditSuggestion] = field(default_factory=list)
    comments: list[Comment] = field(default_factory=list)
    selections: dict = field(default_factory=dict)
    general_comment: str = ""
    updated_at: str = field(default_factory=utcnow_iso)

    @property
    def key(self) -> DraftKey:
        return DraftKey.of(self.article_id, self.contact_email, self.review_type)

    def to_dict(self) -> dict:
        return {
            "article_id": self.article_id,
            "contact_email": self.contact_email,
            "review_type": str(self.review_type),
            "edits": [e.to_dict() for e in self.edits],
            "comments": [c.to_dict() for c in self.comments],
            "selections": dict(self.selections),
            "general_comment": self.general_comment,
            "updated_at": self.updated_at,
        }

    @classmethod
    def from_dict(cls, d: dict) -> ReviewDraft:
        return cls(
            article_id=d.get("article_id", ""),
            contact_email=d.get("contact_email", ""),
            review_type=d.get("review_type", ""),
            edits=[EditSuggestion.from_dict(e) for e in d.get("edits") or []],
            comments=[Comment.from_dict(c) for c in d.get("comments") or []],
            selections=dict(d.get("selections") or {}),
            # NULL general comments from older rows read as empty text.
            general_comment=d.get("general_comment") or "",
            updated_at=d.get("updated_at") or "",
        )


@dataclass
class ActiveReviewer:
    """Derived view: someone whose draft was touched inside the activity window."""

    contact_email: str
    contact_name: str
    review_type: str
    last_active: str


@dataclass
class Contact:
    """A client-side person allowed to review, looked up by email."""

    id: str
    email: str
    name: str
    client_id: str
    client_name: str = ""

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "email": self.email,
            "name": self.name,
            "client_id": self.client_id,
            "client_name": self.client_name,
        }

    @classmethod
    def from_dict(cls, d: dict) -> Contact:
        return cls(
            id=d.get("id", ""),
            email=normalize_email(d.get("email", "")),
            name=d.get("name", ""),
            client_id=d.get("client_id", ""),
            client_name=d.get("client_name", ""),
        )


@dataclass
class Campaign:
    id: str
    name: str
    strategy_goals: str = ""

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name, "strategy_goals": self.strategy_goals}

    @classmethod
    def from_dict(cls, d: dict) -> Campaign:
        return cls(id=d.get("id", ""), name=d.get("name", ""), strategy_goals=d.get("strategy_goals") or "")
