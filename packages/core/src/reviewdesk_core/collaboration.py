"""Who else is reviewing: derived from recent draft activity."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone

from reviewdesk_core.errors import returns_result
from reviewdesk_store.base import BaseStore
from reviewdesk_store.models import ActiveReviewer, normalize_email, parse_timestamp

logger = logging.getLogger(__name__)

ACTIVE_WINDOW_HOURS = 24


@returns_result
def get_active_reviewers(
    store: BaseStore,
    article_id: str,
    window_hours: int = ACTIVE_WINDOW_HOURS,
    exclude_email: str | None = None,
    now: datetime | None = None,
) -> list[ActiveReviewer]:
    """Return reviewers whose draft on article_id changed inside the window.

    One entry per (email, review type), most recent first. Names come from
    the contact directory and fall back to the raw email. A missing entry
    only means the reviewer has no fresh draft, not that they are idle.
    """
    since = (now or datetime.now(timezone.utc)) - timedelta(hours=window_hours)
    excluded = normalize_email(exclude_email) if exclude_email else None

    drafts = sorted(
        store.list_drafts(article_id=article_id, updated_since=since.isoformat()),
        key=lambda d: parse_timestamp(d.updated_at),
        reverse=True,
    )

    names: dict[str, str] = {}
    seen: set[tuple[str, str]] = set()
    active: list[ActiveReviewer] = []
    for draft in drafts:
        email = normalize_email(draft.contact_email)
        if email == excluded or (email, draft.review_type) in seen:
            continue
        seen.add((email, draft.review_type))
        if email not in names:
            names[email] = store.resolve_contact_name(email) or email
        active.append(
            ActiveReviewer(
                contact_email=email,
                contact_name=names[email],
                review_type=draft.review_type,
                last_active=draft.updated_at,
            )
        )
    logger.debug("%d active reviewer(s) on %s", len(active), article_id)
    return active
