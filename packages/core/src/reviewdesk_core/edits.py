"""Edit suggestions: construction, conflict detection, merging and persistence.

detect_conflict and merge_edits are pure. create_edit persists nothing but
validates caller input, so like the store-backed functions it returns a Result.
"""

from __future__ import annotations

import dataclasses
import logging
from enum import StrEnum
from typing import NamedTuple

from reviewdesk_core.access import Reviewer
from reviewdesk_core.errors import NotFoundError, ValidationError, returns_result
from reviewdesk_core.status import ReviewType, parse_review_type
from reviewdesk_store.base import BaseStore
from reviewdesk_store.models import EditSuggestion, new_id, normalize_email, utcnow_iso

logger = logging.getLogger(__name__)


class ActionType(StrEnum):
    ADD = "add"
    MODIFY = "modify"
    DELETE = "delete"


class EditStatus(StrEnum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


# Edits only exist for structured review phases; titles are chosen, not edited.
EDITABLE_REVIEW_TYPES = frozenset({ReviewType.OUTLINE, ReviewType.CONTENT})


class EditConflict(NamedTuple):
    local: EditSuggestion
    remote: EditSuggestion


class MergeResult(NamedTuple):
    merged: list[EditSuggestion]
    conflicts: list[EditConflict]


class PendingEditSummary(NamedTuple):
    count: int
    authors: list[str]


def _parse_action(value: ActionType | str) -> ActionType:
    try:
        return ActionType(value)
    except ValueError:
        raise ValidationError(
            f"Unknown edit action {value!r}. Choose one of: {', '.join(a.value for a in ActionType)}",
            action_type=str(value),
        )


@returns_result
def create_edit(
    target_id: str,
    action_type: ActionType | str,
    original: dict | None,
    suggested: dict | None,
    author: Reviewer,
    now: str | None = None,
) -> EditSuggestion:
    """Build a fresh pending suggestion. Nothing is persisted.

    Adds always get a freshly minted synthetic target id unless one is
    given, so two adds can never collide.
    """
    action = _parse_action(action_type)
    if action is ActionType.ADD:
        original = None
        target_id = target_id or new_id("new-")
    elif action is ActionType.DELETE:
        suggested = None
    return EditSuggestion(
        id=new_id("edit-"),
        target_id=target_id,
        action_type=str(action),
        original_content=original,
        suggested_content=suggested,
        author=author.display_name,
        author_email=author.email,
        timestamp=now or utcnow_iso(),
        status=str(EditStatus.PENDING),
    )


def detect_conflict(a: EditSuggestion, b: EditSuggestion) -> bool:
    """Return True when two suggestions cannot both be applied to their target.

    Symmetric in its arguments.
    """
    if a.target_id != b.target_id:
        return False
    actions = {a.action_type, b.action_type}
    if actions == {ActionType.MODIFY}:
        # Different baselines mean one reviewer worked from a stale snapshot.
        return a.original_content != b.original_content
    if actions == {ActionType.MODIFY, ActionType.DELETE}:
        return True
    return False


def merge_edits(local: list[EditSuggestion], remote: list[EditSuggestion]) -> MergeResult:
    """One-sided merge of remote edits into the local set.

    Local edits are kept verbatim. A remote edit that conflicts with any
    local edit is recorded in conflicts and left out; otherwise it is
    appended unless an edit with the same id is already merged.
    """
    merged = list(local)
    seen_ids = {e.id for e in merged}
    conflicts: list[EditConflict] = []
    for candidate in remote:
        clashes = [EditConflict(mine, candidate) for mine in local if detect_conflict(mine, candidate)]
        if clashes:
            conflicts.extend(clashes)
            continue
        if candidate.id in seen_ids:
            continue
        merged.append(candidate)
        seen_ids.add(candidate.id)
    return MergeResult(merged, conflicts)


def _editable_type(edit_type: ReviewType | str) -> ReviewType:
    review_type = parse_review_type(edit_type)
    if review_type not in EDITABLE_REVIEW_TYPES:
        raise ValidationError(f"Edit suggestions are not supported for {review_type} review", edit_type=str(edit_type))
    return review_type


@returns_result
def submit_edit_suggestions(
    store: BaseStore,
    article_id: str,
    author: Reviewer,
    edits: list[EditSuggestion],
    edit_type: ReviewType | str,
) -> list[EditSuggestion]:
    """Persist a reviewer's edits as pending rows so the next submission picks them up."""
    review_type = _editable_type(edit_type)
    if not edits:
        return []
    if store.get_article(article_id) is None:
        raise NotFoundError(f"Article {article_id} not found", article_id=article_id)

    # Resubmitting the same draft must not store its edits twice.
    known = {e.id for e in store.list_edits(article_id)}
    rows = [
        dataclasses.replace(
            edit,
            article_id=article_id,
            edit_type=str(review_type),
            author=author.display_name,
            author_email=author.email,
            status=str(EditStatus.PENDING),
        )
        for edit in edits
        if edit.id not in known
    ]
    if rows:
        store.insert_edits(rows)
    logger.info("Stored %d %s edit(s) on %s from %s", len(rows), review_type, article_id, author.email)
    return rows


@returns_result
def load_edit_suggestions(
    store: BaseStore, article_id: str, edit_type: ReviewType | str, status: EditStatus | str | None = None
) -> list[EditSuggestion]:
    review_type = _editable_type(edit_type)
    return store.list_edits(article_id, edit_type=str(review_type), status=str(status) if status else None)


@returns_result
def pending_edit_summary(
    store: BaseStore, article_id: str, edit_type: ReviewType | str, exclude_email: str | None = None
) -> PendingEditSummary:
    """Count pending edits left by other reviewers and list their names."""
    review_type = _editable_type(edit_type)
    excluded = normalize_email(exclude_email) if exclude_email else None
    others = [
        e
        for e in store.list_edits(article_id, edit_type=str(review_type), status=str(EditStatus.PENDING))
        if excluded is None or normalize_email(e.author_email) != excluded
    ]
    authors: list[str] = []
    for edit in others:
        name = edit.author or edit.author_email
        if name not in authors:
            authors.append(name)
    return PendingEditSummary(len(others), authors)
