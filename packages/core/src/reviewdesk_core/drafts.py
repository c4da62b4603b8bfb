"""Resumable reviewer drafts.

One live draft per (article, reviewer email, review type). The presentation
layer autosaves on an interval; every save overwrites the previous row and
refreshes updated_at, so repeated saves never accumulate duplicates.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone

from reviewdesk_core.errors import ValidationError, returns_result
from reviewdesk_core.status import ReviewType, parse_review_type
from reviewdesk_store.base import BaseStore
from reviewdesk_store.models import Comment, DraftKey, EditSuggestion, ReviewDraft, parse_timestamp, utcnow_iso

logger = logging.getLogger(__name__)

DEFAULT_RETENTION_DAYS = 30


def draft_key(article_id: str, reviewer_email: str, review_type: ReviewType | str) -> DraftKey:
    """Validate and normalise the natural key of a draft."""
    if not article_id:
        raise ValidationError("An article id is required")
    if not (reviewer_email or "").strip():
        raise ValidationError("A reviewer email is required", article_id=article_id)
    return DraftKey.of(article_id, reviewer_email, parse_review_type(review_type))


@returns_result
def save_draft(
    store: BaseStore,
    article_id: str,
    reviewer_email: str,
    review_type: ReviewType | str,
    edits: list[EditSuggestion] | None = None,
    comments: list[Comment] | None = None,
    selections: dict | None = None,
    general_comment: str = "",
    now: str | None = None,
) -> ReviewDraft:
    key = draft_key(article_id, reviewer_email, review_type)
    draft = ReviewDraft(
        article_id=key.article_id,
        contact_email=key.contact_email,
        review_type=key.review_type,
        edits=list(edits or []),
        comments=list(comments or []),
        selections=dict(selections or {}),
        general_comment=general_comment or "",
        updated_at=now or utcnow_iso(),
    )
    store.upsert_draft(draft)
    logger.info("Saved %s draft for %s on %s", key.review_type, key.contact_email, key.article_id)
    return draft


@returns_result
def load_draft(
    store: BaseStore, article_id: str, reviewer_email: str, review_type: ReviewType | str
) -> ReviewDraft | None:
    """Return the stored draft, or None when the reviewer has not saved one."""
    return store.get_draft(draft_key(article_id, reviewer_email, review_type))


@returns_result
def delete_draft(store: BaseStore, article_id: str, reviewer_email: str, review_type: ReviewType | str) -> bool:
    """Delete a draft. Idempotent: returns False when there was nothing to delete."""
    deleted = store.delete_draft(draft_key(article_id, reviewer_email, review_type))
    logger.debug("Draft %s/%s/%s deleted=%s", article_id, reviewer_email, review_type, deleted)
    return deleted


@returns_result
def prune_drafts(store: BaseStore, older_than_days: int = DEFAULT_RETENTION_DAYS, now: datetime | None = None) -> int:
    """Delete drafts untouched for longer than the retention window. Returns the count."""
    if older_than_days < 0:
        raise ValidationError("Retention must be zero or more days", older_than_days=older_than_days)
    cutoff = (now or datetime.now(timezone.utc)) - timedelta(days=older_than_days)
    pruned = 0
    for draft in store.list_drafts():
        if draft.updated_at and parse_timestamp(draft.updated_at) < cutoff:
            if store.delete_draft(draft.key):
                pruned += 1
    logger.info("Pruned %d draft(s) older than %d day(s)", pruned, older_than_days)
    return pruned
