"""Review submission engine.

submit_review turns a reviewer's decision into one atomic change on the
article:

    gather pending edits → archive the previous feedback into history
    → build the new feedback for round N+1 → advance the status
    → clear the reviewer's draft (best effort)

The article write is conditional on the status and round read at the
start, so two reviewers racing on the same article cannot both land:
the second one gets a conflict and is asked to reload.

Title approval is the one branching case. Every approved title becomes a
new article in NEEDS_OUTLINE and the original is deleted. The original
is first claimed with the same conditional write (status moves to
TITLES_APPROVED) so a racing approval cannot fan out twice; if creating
the new articles fails the claim is rolled back. A failed delete of the
original after the new articles exist is logged and reported as an
orphan, not as a failure.
"""

from __future__ import annotations

import copy
import dataclasses
import logging
from dataclasses import dataclass, field
from enum import StrEnum

from reviewdesk_core.access import Reviewer, ensure_access
from reviewdesk_core.edits import EditStatus
from reviewdesk_core.errors import ConflictError, NotFoundError, ValidationError, returns_result
from reviewdesk_core.status import (
    AWAITING_REVIEW,
    ArticleStatus,
    ReviewType,
    ensure_transition,
    parse_review_type,
    review_outcome,
)
from reviewdesk_store.base import BaseStore, StoreError
from reviewdesk_store.models import (
    Article,
    DraftKey,
    EditSuggestion,
    ReviewFeedback,
    TargetComment,
    TitleChoice,
    new_id,
    utcnow_iso,
)

logger = logging.getLogger(__name__)


class FeedbackAction(StrEnum):
    APPROVED = "approved"
    REVISION_REQUESTED = "revision_requested"
    REJECTED = "rejected"


@dataclass
class ReviewDecision:
    """What the reviewer decided.

    Outline and content reviews are approve / request changes. Title
    reviews either approve a non-empty list of titles or reject them all
    with a reason.
    """

    approved: bool
    titles: list[TitleChoice] = field(default_factory=list)
    reason: str | None = None

    @classmethod
    def approve(cls) -> ReviewDecision:
        return cls(approved=True)

    @classmethod
    def request_changes(cls) -> ReviewDecision:
        return cls(approved=False)

    @classmethod
    def approve_titles(cls, titles: list[TitleChoice]) -> ReviewDecision:
        return cls(approved=True, titles=list(titles))

    @classmethod
    def reject_titles(cls, reason: str) -> ReviewDecision:
        return cls(approved=False, reason=reason)


@dataclass
class SubmissionOutcome:
    article_ids: list[str]
    status: ArticleStatus
    feedback: ReviewFeedback
    orphaned_article_id: str | None = None
    draft_cleared: bool = True


# ------------------------------------------------------------------ #
# Validation                                                           #
# ------------------------------------------------------------------ #


def _validate(review_type: ReviewType, decision: ReviewDecision, reviewer: Reviewer) -> None:
    """Reject structurally invalid requests before any store call."""
    if not reviewer.email:
        raise ValidationError("A reviewer email is required")

    if review_type is not ReviewType.TITLE:
        if decision.titles:
            raise ValidationError(f"Titles cannot be approved in a {review_type} review")
        return

    if not decision.approved:
        if not (decision.reason or "").strip():
            raise ValidationError("A reason is required when rejecting titles")
        if decision.titles:
            raise ValidationError("Rejected title reviews cannot carry approved titles")
        return

    if not decision.titles:
        raise ValidationError("Select at least one title to approve")
    ids = [t.id for t in decision.titles]
    if len(set(ids)) != len(ids):
        raise ValidationError("Each title can only be approved once", title_ids=ids)
    blank = [t.id for t in decision.titles if not t.text.strip()]
    if blank:
        raise ValidationError("Approved titles cannot be empty", title_ids=blank)


def _coerce_comments(comments: list[TargetComment | dict] | None) -> list[TargetComment]:
    coerced = []
    for c in comments or []:
        comment = c if isinstance(c, TargetComment) else TargetComment.from_dict(c)
        if not comment.target_id:
            raise ValidationError("Every comment needs a target id", text=comment.text)
        coerced.append(comment)
    return coerced


# ------------------------------------------------------------------ #
# Round bookkeeping                                                    #
# ------------------------------------------------------------------ #


def archive_previous(article: Article, archived_at: str) -> tuple[list[ReviewFeedback], int]:
    """Return (extended history, new round) for the next submission on article.

    The current feedback, if any, is appended to a copy of the history with
    archived_at set and its round preserved. Feedback from older rows that
    never recorded a round is numbered by its position in the history. The
    new round is always one past the length of the returned history.
    """
    history = copy.deepcopy(article.revision_history)
    previous = article.client_comments
    if previous is None:
        return history, len(history) + 1
    previous_round = previous.round or len(history) + 1
    history.append(dataclasses.replace(copy.deepcopy(previous), round=previous_round, archived_at=archived_at))
    return history, previous_round + 1


def _action(review_type: ReviewType, decision: ReviewDecision) -> FeedbackAction:
    if decision.approved:
        return FeedbackAction.APPROVED
    if review_type is ReviewType.TITLE:
        return FeedbackAction.REJECTED
    return FeedbackAction.REVISION_REQUESTED


def _title_notes(titles: list[TitleChoice]) -> dict[str, str]:
    return {t.id: t.notes for t in titles if t.notes}


# ------------------------------------------------------------------ #
# Public entry point                                                   #
# ------------------------------------------------------------------ #


@returns_result
def submit_review(
    store: BaseStore,
    article_id: str,
    review_type: ReviewType | str,
    decision: ReviewDecision,
    reviewer: Reviewer,
    target_comments: list[TargetComment | dict] | None = None,
    general_comment: str | None = None,
    reviewer_tag: str = "client",
    check_access: bool = True,
    now: str | None = None,
) -> SubmissionOutcome:
    """Record a review decision on an article and advance its status."""
    review_type = parse_review_type(review_type)
    _validate(review_type, decision, reviewer)
    comments = _coerce_comments(target_comments)
    timestamp = now or utcnow_iso()

    article = store.get_article(article_id)
    if article is None:
        raise NotFoundError(f"Article {article_id} not found", article_id=article_id)
    if check_access:
        ensure_access(store, reviewer.email, article.campaign_id)

    awaiting = AWAITING_REVIEW[review_type]
    if article.status != awaiting:
        raise ConflictError(
            f"Article {article_id} is {article.status}, not awaiting {review_type} review. Please reload.",
            article_id=article_id,
            status=str(article.status),
            reviewer=reviewer.email,
        )

    edits: list[EditSuggestion] = []
    if review_type is not ReviewType.TITLE:
        edits = store.list_edits(article_id, edit_type=str(review_type), status=str(EditStatus.PENDING))

    history, new_round = archive_previous(article, timestamp)
    feedback = ReviewFeedback(
        action=str(_action(review_type, decision)),
        reviewer=reviewer_tag,
        timestamp=timestamp,
        round=new_round,
        comments=comments,
        general_comment=general_comment or None,
        edits=edits,
        reject_reason=decision.reason if review_type is ReviewType.TITLE and not decision.approved else None,
        approved_titles=list(decision.titles),
        title_notes=_title_notes(decision.titles),
    )
    target = ensure_transition(article.status, review_outcome(review_type, decision.approved))
    expected = {"status": article.status, "revision_round": article.revision_round}
    fields = {
        "status": target,
        "client_comments": feedback,
        "revision_history": history,
        "revision_round": new_round,
        "last_updated": timestamp,
    }

    if review_type is ReviewType.TITLE and decision.approved:
        outcome = _fan_out_titles(store, article, fields, expected, feedback, timestamp)
    else:
        store.update_article(article_id, fields, expected=expected)
        outcome = SubmissionOutcome(article_ids=[article_id], status=target, feedback=feedback)

    outcome.draft_cleared = _clear_draft(store, DraftKey.of(article_id, reviewer.email, review_type))
    logger.info(
        "%s review of %s submitted by %s: %s (round %d)",
        review_type,
        article_id,
        reviewer.email,
        outcome.status,
        new_round,
    )
    return outcome


def _fan_out_titles(
    store: BaseStore,
    article: Article,
    fields: dict,
    expected: dict,
    feedback: ReviewFeedback,
    timestamp: str,
) -> SubmissionOutcome:
    next_status = ensure_transition(fields["status"], ArticleStatus.NEEDS_OUTLINE)
    children = [
        Article(
            id=new_id(),
            campaign_id=article.campaign_id,
            title=choice.text,
            status=next_status,
            proposed_titles=list(article.proposed_titles),
            selected_title=choice.text,
            client_comments=dataclasses.replace(
                feedback, approved_titles=[choice], title_notes=_title_notes([choice])
            ),
            revision_history=copy.deepcopy(fields["revision_history"]),
            revision_round=fields["revision_round"],
            created_at=timestamp,
            last_updated=timestamp,
        )
        for choice in feedback.approved_titles
    ]

    # Claim the original so a concurrent approval of the same article fails.
    store.update_article(article.id, fields, expected=expected)
    try:
        store.insert_articles(children)
    except StoreError:
        _release_claim(store, article, fields["status"])
        raise

    orphaned = None
    try:
        store.delete_article(article.id)
    except StoreError as e:
        orphaned = article.id
        logger.warning(
            "Created %d article(s) from %s but could not delete the original; it needs cleanup: %s",
            len(children),
            article.id,
            e,
        )
    return SubmissionOutcome(
        article_ids=[c.id for c in children],
        status=next_status,
        feedback=feedback,
        orphaned_article_id=orphaned,
    )


def _release_claim(store: BaseStore, article: Article, claimed_status: ArticleStatus) -> None:
    restore = {
        "status": article.status,
        "client_comments": article.client_comments,
        "revision_history": article.revision_history,
        "revision_round": article.revision_round,
        "last_updated": article.last_updated,
    }
    try:
        store.update_article(article.id, restore, expected={"status": claimed_status})
    except StoreError as e:
        logger.error("Could not restore article %s after a failed title approval: %s", article.id, e)


def _clear_draft(store: BaseStore, key: DraftKey) -> bool:
    try:
        store.delete_draft(key)
    except StoreError as e:
        logger.warning("Review submitted but draft %s/%s/%s was not deleted: %s", *key, e)
        return False
    return True
