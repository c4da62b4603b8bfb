"""Tests for campaign info and the review task queue."""

from reviewdesk_core.campaign import (
    get_campaign_info,
    list_completed_tasks,
    list_pending_tasks,
    split_keywords,
    to_review_task,
)
from reviewdesk_core.errors import ErrorKind
from reviewdesk_core.status import ApprovalState, TaskType
from reviewdesk_store.models import Article, Campaign


def test_split_keywords_trims_and_drops_blanks():
    assert split_keywords(" tax filing, ,refunds ,") == ["tax filing", "refunds"]
    assert split_keywords("") == []


class TestCampaignInfo:
    def test_includes_client_name_and_keywords(self, store):
        info = get_campaign_info(store, "camp1").value
        assert info.name == "Spring Tax Push"
        assert info.client_name == "Acme Corp"
        assert info.keywords == ["tax filing", "refunds"]

    def test_campaign_without_known_client(self, store):
        store.add_campaign(Campaign(id="camp2", name="Orphan"), client_ids=["nobody"])
        assert get_campaign_info(store, "camp2").value.client_name == "Unknown Client"

    def test_missing_campaign_is_not_found(self, store):
        assert get_campaign_info(store, "ghost").failure.kind == ErrorKind.NOT_FOUND


class TestTaskLists:
    def test_pending_lists_awaiting_articles_newest_first(self, store, add_article):
        add_article("t1", status="AWAITING_REVIEW_TITLES", created_at="2026-03-01T00:00:00+00:00")
        add_article("o1", status="AWAITING_REVIEW_OUTLINE", created_at="2026-03-03T00:00:00+00:00")
        add_article("d1", status="NEEDS_DRAFT", created_at="2026-03-04T00:00:00+00:00")
        add_article("x1", status="AWAITING_REVIEW_DRAFT", campaign_id="camp2")

        tasks = list_pending_tasks(store, "camp1").value

        assert [t.id for t in tasks] == ["o1", "t1"]
        assert tasks[0].task_type is TaskType.OUTLINE_REVIEW
        assert tasks[0].keywords == ["tax filing", "refunds"]

    def test_completed_includes_revisions_and_approvals(self, store, add_article):
        add_article("a1", status="NEEDS_OUTLINE_REVISION")
        add_article("a2", status="PUBLISHED")
        add_article("a3", status="AWAITING_REVIEW_DRAFT")

        tasks = list_completed_tasks(store, "camp1").value

        assert {t.id for t in tasks} == {"a1", "a2"}
        states = {t.id: t.approval_state for t in tasks}
        assert states == {"a1": ApprovalState.CHANGES_REQUESTED, "a2": ApprovalState.APPROVED}

    def test_unknown_campaign_fails(self, store):
        assert list_pending_tasks(store, "ghost").failure.kind == ErrorKind.NOT_FOUND


class TestToReviewTask:
    def _article(self, status, **kwargs):
        return Article(id="a", campaign_id="camp1", title="How to file taxes", status=status, **kwargs)

    def test_title_options_are_numbered_and_marked(self):
        article = self._article("AWAITING_REVIEW_TITLES", proposed_titles=["A", "B"], selected_title="B")
        task = to_review_task(article)
        assert [(o.id, o.text, o.is_selected) for o in task.titles] == [("title-1", "A", False), ("title-2", "B", True)]
        assert task.name == "B"

    def test_legacy_outline_markdown_is_parsed(self):
        article = self._article("AWAITING_REVIEW_OUTLINE", outline_content="# Intro\n## Deadlines\nnotes")
        task = to_review_task(article)
        assert [s.title for s in task.outline] == ["Intro", "Deadlines"]

    def test_structured_content_wins_over_markdown(self, add_article):
        article = add_article(status="AWAITING_REVIEW_DRAFT", draft_content="# Ignored")
        task = to_review_task(article)
        assert [b.id for b in task.content] == ["b3"]

    def test_due_date_prefers_last_updated(self):
        article = self._article("NEEDS_DRAFT", last_updated="2026-03-05T00:00:00+00:00")
        assert to_review_task(article).due_date == "2026-03-05T00:00:00+00:00"
