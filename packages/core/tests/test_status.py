"""Tests for the article lifecycle table."""

import pytest

from reviewdesk_core.errors import ErrorKind, ValidationError
from reviewdesk_core.status import (
    AWAITING_REVIEW,
    VALID_TRANSITIONS,
    ApprovalState,
    ArticleStatus,
    ReviewType,
    TaskType,
    can_transition,
    ensure_transition,
    is_client_actionable,
    parse_review_type,
    phase_view,
    review_outcome,
)


class TestPhaseView:
    @pytest.mark.parametrize("status", list(ArticleStatus))
    def test_every_status_maps_to_exactly_one_view(self, status):
        view = phase_view(status)
        assert isinstance(view.task_type, TaskType)
        assert isinstance(view.approval_state, ApprovalState)

    @pytest.mark.parametrize(
        "status, task_type, state",
        [
            ("AWAITING_REVIEW_TITLES", TaskType.TITLE_REVIEW, ApprovalState.PENDING),
            ("NEEDS_OUTLINE", TaskType.TITLE_REVIEW, ApprovalState.APPROVED),
            ("NEEDS_OUTLINE_REVISION", TaskType.OUTLINE_REVIEW, ApprovalState.CHANGES_REQUESTED),
            ("NEEDS_DRAFT", TaskType.OUTLINE_REVIEW, ApprovalState.APPROVED),
            ("PUBLISHED", TaskType.CONTENT_REVIEW, ApprovalState.APPROVED),
            ("NEEDS_REVISION", TaskType.CONTENT_REVIEW, ApprovalState.CHANGES_REQUESTED),
        ],
    )
    def test_known_mappings(self, status, task_type, state):
        assert phase_view(status) == (task_type, state)

    def test_unknown_status_string_raises(self):
        with pytest.raises(ValueError):
            phase_view("ARCHIVED")


class TestTransitions:
    def test_table_covers_every_status(self):
        assert set(VALID_TRANSITIONS) == set(ArticleStatus)

    def test_only_awaiting_states_are_client_actionable(self):
        actionable = {s for s in ArticleStatus if is_client_actionable(s)}
        assert actionable == set(AWAITING_REVIEW.values())

    def test_published_is_terminal(self):
        assert not any(can_transition(ArticleStatus.PUBLISHED, s) for s in ArticleStatus)

    def test_revision_returns_to_awaiting(self):
        assert can_transition("NEEDS_OUTLINE_REVISION", "AWAITING_REVIEW_OUTLINE")
        assert not can_transition("NEEDS_OUTLINE_REVISION", "OUTLINE_APPROVED")

    def test_ensure_transition_rejects_illegal_move(self):
        with pytest.raises(ValidationError) as exc:
            ensure_transition("NEEDS_TITLES", "PUBLISHED")
        assert exc.value.kind == ErrorKind.VALIDATION

    def test_deprecated_status_is_never_written(self):
        with pytest.raises(ValidationError, match="deprecated"):
            ensure_transition("AWAITING_REVIEW_DRAFT", "NEEDS_REVISION")

    @pytest.mark.parametrize(
        "review_type, approved, expected",
        [
            ("title", True, ArticleStatus.TITLES_APPROVED),
            ("title", False, ArticleStatus.NEEDS_TITLES_REVISION),
            ("outline", True, ArticleStatus.OUTLINE_APPROVED),
            ("outline", False, ArticleStatus.NEEDS_OUTLINE_REVISION),
            ("content", True, ArticleStatus.DRAFT_APPROVED),
            ("content", False, ArticleStatus.NEEDS_DRAFT_REVISION),
        ],
    )
    def test_review_outcomes_are_legal_transitions(self, review_type, approved, expected):
        outcome = review_outcome(review_type, approved)
        assert outcome == expected
        assert can_transition(AWAITING_REVIEW[ReviewType(review_type)], outcome)


class TestParseReviewType:
    def test_accepts_known_values(self):
        assert parse_review_type("content") is ReviewType.CONTENT

    def test_unknown_value_is_a_validation_error(self):
        with pytest.raises(ValidationError, match="Unknown review type"):
            parse_review_type("draft")
