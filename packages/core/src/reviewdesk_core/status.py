"""Article lifecycle: the status enumeration and its legal transitions.

Three parallel phase tracks (titles, outline, draft content) plus the
terminal PUBLISHED state:

    NEEDS_TITLES → AWAITING_REVIEW_TITLES → TITLES_APPROVED | NEEDS_TITLES_REVISION
    NEEDS_TITLES_REVISION → AWAITING_REVIEW_TITLES
    TITLES_APPROVED → NEEDS_OUTLINE → AWAITING_REVIEW_OUTLINE → OUTLINE_APPROVED | NEEDS_OUTLINE_REVISION
    NEEDS_OUTLINE_REVISION → AWAITING_REVIEW_OUTLINE
    OUTLINE_APPROVED → NEEDS_DRAFT → AWAITING_REVIEW_DRAFT → DRAFT_APPROVED | NEEDS_DRAFT_REVISION
    NEEDS_DRAFT_REVISION → AWAITING_REVIEW_DRAFT
    DRAFT_APPROVED → PUBLISHED

Only the AWAITING_REVIEW_* states are actionable by the client; every
other state belongs to the agency or is terminal. NEEDS_REVISION is a
deprecated catch-all kept so old rows still load; it is never written.
"""

from __future__ import annotations

from enum import StrEnum
from typing import NamedTuple

from reviewdesk_core.errors import ValidationError


class ArticleStatus(StrEnum):
    # Title phase
    NEEDS_TITLES = "NEEDS_TITLES"
    AWAITING_REVIEW_TITLES = "AWAITING_REVIEW_TITLES"
    TITLES_APPROVED = "TITLES_APPROVED"
    NEEDS_TITLES_REVISION = "NEEDS_TITLES_REVISION"

    # Outline phase
    NEEDS_OUTLINE = "NEEDS_OUTLINE"
    AWAITING_REVIEW_OUTLINE = "AWAITING_REVIEW_OUTLINE"
    OUTLINE_APPROVED = "OUTLINE_APPROVED"
    NEEDS_OUTLINE_REVISION = "NEEDS_OUTLINE_REVISION"

    # Draft phase
    NEEDS_DRAFT = "NEEDS_DRAFT"
    AWAITING_REVIEW_DRAFT = "AWAITING_REVIEW_DRAFT"
    DRAFT_APPROVED = "DRAFT_APPROVED"
    NEEDS_DRAFT_REVISION = "NEEDS_DRAFT_REVISION"

    PUBLISHED = "PUBLISHED"

    # Deprecated: read-only compatibility with pre-existing data.
    NEEDS_REVISION = "NEEDS_REVISION"


class ReviewType(StrEnum):
    TITLE = "title"
    OUTLINE = "outline"
    CONTENT = "content"


class TaskType(StrEnum):
    """The review phase a status belongs to, as the reviewer UI renders it."""

    TITLE_REVIEW = "TITLE_REVIEW"
    OUTLINE_REVIEW = "OUTLINE_REVIEW"
    CONTENT_REVIEW = "CONTENT_REVIEW"


class ApprovalState(StrEnum):
    PENDING = "pending"
    APPROVED = "approved"
    CHANGES_REQUESTED = "changes_requested"


class PhaseView(NamedTuple):
    task_type: TaskType
    approval_state: ApprovalState


VALID_TRANSITIONS: dict[ArticleStatus, frozenset[ArticleStatus]] = {
    ArticleStatus.NEEDS_TITLES: frozenset({ArticleStatus.AWAITING_REVIEW_TITLES}),
    ArticleStatus.AWAITING_REVIEW_TITLES: frozenset(
        {ArticleStatus.TITLES_APPROVED, ArticleStatus.NEEDS_TITLES_REVISION}
    ),
    ArticleStatus.NEEDS_TITLES_REVISION: frozenset({ArticleStatus.AWAITING_REVIEW_TITLES}),
    ArticleStatus.TITLES_APPROVED: frozenset({ArticleStatus.NEEDS_OUTLINE}),
    ArticleStatus.NEEDS_OUTLINE: frozenset({ArticleStatus.AWAITING_REVIEW_OUTLINE}),
    ArticleStatus.AWAITING_REVIEW_OUTLINE: frozenset(
        {ArticleStatus.OUTLINE_APPROVED, ArticleStatus.NEEDS_OUTLINE_REVISION}
    ),
    ArticleStatus.NEEDS_OUTLINE_REVISION: frozenset({ArticleStatus.AWAITING_REVIEW_OUTLINE}),
    ArticleStatus.OUTLINE_APPROVED: frozenset({ArticleStatus.NEEDS_DRAFT}),
    ArticleStatus.NEEDS_DRAFT: frozenset({ArticleStatus.AWAITING_REVIEW_DRAFT}),
    ArticleStatus.AWAITING_REVIEW_DRAFT: frozenset({ArticleStatus.DRAFT_APPROVED, ArticleStatus.NEEDS_DRAFT_REVISION}),
    ArticleStatus.NEEDS_DRAFT_REVISION: frozenset({ArticleStatus.AWAITING_REVIEW_DRAFT}),
    ArticleStatus.DRAFT_APPROVED: frozenset({ArticleStatus.PUBLISHED}),
    ArticleStatus.PUBLISHED: frozenset(),
    ArticleStatus.NEEDS_REVISION: frozenset(),
}

AWAITING_REVIEW: dict[ReviewType, ArticleStatus] = {
    ReviewType.TITLE: ArticleStatus.AWAITING_REVIEW_TITLES,
    ReviewType.OUTLINE: ArticleStatus.AWAITING_REVIEW_OUTLINE,
    ReviewType.CONTENT: ArticleStatus.AWAITING_REVIEW_DRAFT,
}

# (approved, changes requested) targets for each review type.
_REVIEW_OUTCOMES: dict[ReviewType, tuple[ArticleStatus, ArticleStatus]] = {
    ReviewType.TITLE: (ArticleStatus.TITLES_APPROVED, ArticleStatus.NEEDS_TITLES_REVISION),
    ReviewType.OUTLINE: (ArticleStatus.OUTLINE_APPROVED, ArticleStatus.NEEDS_OUTLINE_REVISION),
    ReviewType.CONTENT: (ArticleStatus.DRAFT_APPROVED, ArticleStatus.NEEDS_DRAFT_REVISION),
}

_PHASE_VIEWS: dict[ArticleStatus, PhaseView] = {
    ArticleStatus.NEEDS_TITLES: PhaseView(TaskType.TITLE_REVIEW, ApprovalState.PENDING),
    ArticleStatus.AWAITING_REVIEW_TITLES: PhaseView(TaskType.TITLE_REVIEW, ApprovalState.PENDING),
    ArticleStatus.TITLES_APPROVED: PhaseView(TaskType.TITLE_REVIEW, ApprovalState.APPROVED),
    ArticleStatus.NEEDS_OUTLINE: PhaseView(TaskType.TITLE_REVIEW, ApprovalState.APPROVED),
    ArticleStatus.NEEDS_TITLES_REVISION: PhaseView(TaskType.TITLE_REVIEW, ApprovalState.CHANGES_REQUESTED),
    ArticleStatus.AWAITING_REVIEW_OUTLINE: PhaseView(TaskType.OUTLINE_REVIEW, ApprovalState.PENDING),
    ArticleStatus.OUTLINE_APPROVED: PhaseView(TaskType.OUTLINE_REVIEW, ApprovalState.APPROVED),
    ArticleStatus.NEEDS_DRAFT: PhaseView(TaskType.OUTLINE_REVIEW, ApprovalState.APPROVED),
    ArticleStatus.NEEDS_OUTLINE_REVISION: PhaseView(TaskType.OUTLINE_REVIEW, ApprovalState.CHANGES_REQUESTED),
    ArticleStatus.AWAITING_REVIEW_DRAFT: PhaseView(TaskType.CONTENT_REVIEW, ApprovalState.PENDING),
    ArticleStatus.DRAFT_APPROVED: PhaseView(TaskType.CONTENT_REVIEW, ApprovalState.APPROVED),
    ArticleStatus.PUBLISHED: PhaseView(TaskType.CONTENT_REVIEW, ApprovalState.APPROVED),
    ArticleStatus.NEEDS_DRAFT_REVISION: PhaseView(TaskType.CONTENT_REVIEW, ApprovalState.CHANGES_REQUESTED),
    ArticleStatus.NEEDS_REVISION: PhaseView(TaskType.CONTENT_REVIEW, ApprovalState.CHANGES_REQUESTED),
}


def phase_view(status: ArticleStatus | str) -> PhaseView:
    """Return the (task type, approval state) the reviewer UI shows for a status.

    Total over ArticleStatus. Raises ValueError for strings that are not a
    status at all.
    """
    return _PHASE_VIEWS[ArticleStatus(status)]


def is_client_actionable(status: ArticleStatus | str) -> bool:
    return ArticleStatus(status) in AWAITING_REVIEW.values()


def can_transition(current: ArticleStatus | str, target: ArticleStatus | str) -> bool:
    return ArticleStatus(target) in VALID_TRANSITIONS[ArticleStatus(current)]


def ensure_transition(current: ArticleStatus | str, target: ArticleStatus | str) -> ArticleStatus:
    """Return target as an ArticleStatus if current → target is legal, else raise ValidationError."""
    target = ArticleStatus(target)
    if target is ArticleStatus.NEEDS_REVISION:
        raise ValidationError("NEEDS_REVISION is deprecated and must not be written", target=str(target))
    if not can_transition(current, target):
        raise ValidationError(
            f"Illegal status transition {current} → {target}",
            current=str(current),
            target=str(target),
        )
    return target


def review_outcome(review_type: ReviewType | str, approved: bool) -> ArticleStatus:
    """Status an article moves to when a review of review_type is submitted."""
    approved_status, revision_status = _REVIEW_OUTCOMES[ReviewType(review_type)]
    return approved_status if approved else revision_status


def parse_review_type(value: ReviewType | str) -> ReviewType:
    """Coerce caller input to a ReviewType, raising ValidationError for unknown values."""
    try:
        return ReviewType(value)
    except ValueError:
        raise ValidationError(
            f"Unknown review type {value!r}. Choose one of: {', '.join(t.value for t in ReviewType)}",
            review_type=str(value),
        )
