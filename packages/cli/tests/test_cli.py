"""Tests for the CLI entry point."""

from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import yaml
from click.testing import CliRunner

from reviewdesk_cli.cli import _build_store, main
from reviewdesk_core.access import Reviewer
from reviewdesk_core.drafts import load_draft, save_draft
from reviewdesk_core.edits import create_edit, submit_edit_suggestions
from reviewdesk_core.providers.base import BaseTitleSuggester
from reviewdesk_store.base import StoreError
from reviewdesk_store.gist import GistStore
from reviewdesk_store.memory import MemoryStore
from reviewdesk_store.models import Article, Block, Campaign, Comment, Contact, Section
from reviewdesk_store.sqlite import SQLiteStore


def _make_config(store="memory", model="anthropic", anthropic_key="ant", openai_key=None):
    return {
        "store": store,
        "store_path": ".reviewdesk.db",
        "gist_id": None,
        "github_token": None,
        "model": model,
        "anthropic_api_key": anthropic_key,
        "openai_api_key": openai_key,
        "reviewer_tag": "client",
        "active_window_hours": 24,
        "draft_retention_days": 30,
        "suggestion_count": 3,
    }


def _make_store():
    store = MemoryStore()
    store.add_campaign(
        Campaign(id="camp1", name="Spring Tax Push", strategy_goals="tax filing, refunds"),
        client_ids=["acme"],
    )
    store.add_contact(Contact(id="ct1", email="jane@acme.com", name="Jane Doe", client_id="acme", client_name="Acme"))
    store.add_contact(Contact(id="ct2", email="raj@acme.com", name="Raj Patel", client_id="acme", client_name="Acme"))
    store.add_contact(Contact(id="ct3", email="eve@globex.com", name="Eve", client_id="globex", client_name="Globex"))
    store.insert_articles(
        [
            Article(
                id="art-titles",
                campaign_id="camp1",
                title="How to file taxes",
                status="AWAITING_REVIEW_TITLES",
                proposed_titles=["Tax Tips", "Filing Made Easy", "Refund Guide"],
            ),
            Article(
                id="art-outline",
                campaign_id="camp1",
                title="Deductions explained",
                status="AWAITING_REVIEW_OUTLINE",
                outline_sections=[
                    Section(id="h1-1", level="H1", title="Deductions", word_count_estimate=200),
                    Section(id="h2-1", level="H2", title="Home office", word_count_estimate=150),
                ],
            ),
            Article(
                id="art-draft",
                campaign_id="camp1",
                title="Refunds in 2026",
                status="AWAITING_REVIEW_DRAFT",
                draft_blocks=[
                    Block(id="b1", type="header", content="Refunds in 2026"),
                    Block(id="b2", type="paragraph", content="File early."),
                ],
            ),
        ]
    )
    return store


def _patch_common(mocker, store=None, config=None, token="tok"):
    """Patch load_config, resolve_github_token, and _build_store for most tests."""
    cfg = config or _make_config()
    store = store if store is not None else _make_store()
    mocker.patch("reviewdesk_core.config.load_config", return_value=cfg)
    mocker.patch("reviewdesk_cli.auth.resolve_github_token", return_value=token)
    mocker.patch("reviewdesk_cli.cli._build_store", return_value=store)
    return cfg, store


def _invoke(args, **kwargs):
    return CliRunner().invoke(main, args, **kwargs)


# ---------------------------------------------------------------------------
# review
# ---------------------------------------------------------------------------


class TestReviewCommand:
    def test_title_approval_creates_one_article_per_title(self, mocker):
        _, store = _patch_common(mocker)

        result = _invoke(
            ["review", "art-titles", "--email", "jane@acme.com", "--approve", "--title", "1", "--title", "Refund Guide"]
        )

        assert result.exit_code == 0, result.output
        assert "Review submitted" in result.output
        assert store.get_article("art-titles") is None
        created = store.list_articles(statuses=["NEEDS_OUTLINE"])
        assert sorted(a.selected_title for a in created) == ["Refund Guide", "Tax Tips"]

    def test_title_notes_are_recorded(self, mocker):
        _, store = _patch_common(mocker)
        result = _invoke(
            ["review", "art-titles", "--email", "jane@acme.com", "--approve", "--title", "title-2"]
            + ["--note", "title-2=shorter"]
        )
        assert result.exit_code == 0, result.output
        (child,) = store.list_articles(statuses=["NEEDS_OUTLINE"])
        assert child.client_comments.title_notes == {"title-2": "shorter"}

    def test_unknown_title_is_rejected(self, mocker):
        _patch_common(mocker)
        result = _invoke(["review", "art-titles", "--email", "jane@acme.com", "--approve", "--title", "Nope"])
        assert result.exit_code == 2
        assert "not one of the proposed titles" in result.output

    def test_reject_titles_with_reason(self, mocker):
        _, store = _patch_common(mocker)
        result = _invoke(["review", "art-titles", "--email", "jane@acme.com", "--reject", "Too generic"])
        assert result.exit_code == 0, result.output
        article = store.get_article("art-titles")
        assert article.status == "NEEDS_TITLES_REVISION"
        assert article.client_comments.reject_reason == "Too generic"

    def test_outline_changes_with_comments(self, mocker):
        _, store = _patch_common(mocker)

        result = _invoke(
            [
                "review",
                "art-outline",
                "--email",
                "jane@acme.com",
                "--request-changes",
                "--comment",
                "h2-1=too vague",
                "--general",
                "needs more data",
            ]
        )

        assert result.exit_code == 0, result.output
        article = store.get_article("art-outline")
        assert article.status == "NEEDS_OUTLINE_REVISION"
        assert article.revision_round == 1
        assert article.client_comments.comments[0].text == "too vague"
        assert article.client_comments.general_comment == "needs more data"

    def test_saved_draft_is_folded_in_and_cleared(self, mocker):
        _, store = _patch_common(mocker)
        jane = Reviewer(email="jane@acme.com", name="Jane Doe")
        save_draft(
            store,
            "art-draft",
            "jane@acme.com",
            "content",
            edits=[create_edit("b2", "modify", {"content": "File early."}, {"content": "In February."}, jane).value],
            comments=[Comment(id="c1", target_id="b1", author="Jane Doe", text="punchier", timestamp="t")],
            general_comment="almost there",
        )

        result = _invoke(["review", "art-draft", "--email", "jane@acme.com", "--approve"])

        assert result.exit_code == 0, result.output
        feedback = store.get_article("art-draft").client_comments
        assert [e.target_id for e in feedback.edits] == ["b2"]
        assert [c.text for c in feedback.comments] == ["punchier"]
        assert feedback.general_comment == "almost there"
        assert load_draft(store, "art-draft", "jane@acme.com", "content").value is None

    def test_unlisted_reviewer_is_denied(self, mocker):
        _, store = _patch_common(mocker)
        result = _invoke(["review", "art-outline", "--email", "eve@globex.com", "--approve"])
        assert result.exit_code == 1
        assert "Access denied" in result.output
        assert store.get_article("art-outline").status == "AWAITING_REVIEW_OUTLINE"

    def test_exactly_one_decision_required(self, mocker):
        _patch_common(mocker)
        result = _invoke(["review", "art-outline", "--email", "jane@acme.com", "--approve", "--request-changes"])
        assert result.exit_code == 2
        assert "exactly one" in result.output

    def test_titles_only_apply_to_title_reviews(self, mocker):
        _patch_common(mocker)
        result = _invoke(["review", "art-outline", "--email", "jane@acme.com", "--approve", "--title", "1"])
        assert result.exit_code == 2

    def test_malformed_comment_is_rejected(self, mocker):
        _patch_common(mocker)
        result = _invoke(["review", "art-outline", "--email", "jane@acme.com", "--approve", "--comment", "no-equals"])
        assert result.exit_code == 2
        assert "KEY=TEXT" in result.output

    def test_article_not_awaiting_review(self, mocker):
        _, store = _patch_common(mocker)
        store.update_article("art-outline", {"status": "OUTLINE_APPROVED"})
        result = _invoke(["review", "art-outline", "--email", "jane@acme.com", "--approve"])
        assert result.exit_code == 1
        assert "not awaiting client review" in result.output

    def test_explicit_type_mismatch_is_a_conflict(self, mocker):
        _patch_common(mocker)
        result = _invoke(["review", "art-outline", "--email", "jane@acme.com", "--type", "content", "--approve"])
        assert result.exit_code == 1
        assert "Conflict" in result.output

    def test_store_failure_on_lookup_is_reported_not_raised(self, mocker):
        _, store = _patch_common(mocker)
        mocker.patch.object(store, "get_article", side_effect=StoreError("database is locked"))
        result = _invoke(["review", "art-outline", "--email", "jane@acme.com", "--approve"])
        assert result.exit_code == 1
        assert "Store failure: database is locked" in result.output
        assert isinstance(result.exception, SystemExit)


# ---------------------------------------------------------------------------
# Read-only views
# ---------------------------------------------------------------------------


class TestViews:
    def test_queue_lists_pending_tasks(self, mocker):
        _patch_common(mocker)
        result = _invoke(["queue", "--campaign", "camp1"])
        assert result.exit_code == 0, result.output
        assert "Pending Tasks" in result.output

    def test_queue_without_completed_tasks(self, mocker):
        _patch_common(mocker)
        result = _invoke(["queue", "--campaign", "camp1", "--completed"])
        assert result.exit_code == 0, result.output
        assert "No completed tasks" in result.output

    def test_queue_unknown_campaign(self, mocker):
        _patch_common(mocker)
        result = _invoke(["queue", "--campaign", "ghost"])
        assert result.exit_code == 1
        assert "Not found" in result.output

    def test_show_outline(self, mocker):
        _patch_common(mocker)
        result = _invoke(["show", "art-outline"])
        assert result.exit_code == 0, result.output
        assert "Home office" in result.output

    def test_show_exports_content(self, mocker, tmp_path):
        _patch_common(mocker)
        result = _invoke(["show", "art-draft", "--export", str(tmp_path)])
        assert result.exit_code == 0, result.output
        exported = tmp_path / "Refunds_in_2026_approved.md"
        assert exported.read_text() == "# Refunds in 2026\n\nFile early.\n\n"

    def test_show_missing_article(self, mocker):
        _patch_common(mocker)
        result = _invoke(["show", "ghost"])
        assert result.exit_code == 1
        assert "not found" in result.output

    def test_history_before_and_after_a_review(self, mocker):
        _patch_common(mocker)
        assert "No review rounds recorded yet" in _invoke(["history", "art-outline"]).output

        _invoke(["review", "art-outline", "--email", "jane@acme.com", "--request-changes"])
        result = _invoke(["history", "art-outline"])

        assert result.exit_code == 0, result.output
        assert "Review History" in result.output

    def test_reviewers_shows_drafts_and_pending_edits(self, mocker):
        _, store = _patch_common(mocker)
        raj = Reviewer(email="raj@acme.com", name="Raj Patel")
        save_draft(store, "art-outline", "raj@acme.com", "outline")
        edit = create_edit("h2-1", "delete", {"title": "Home office"}, None, raj).value
        submit_edit_suggestions(store, "art-outline", raj, [edit], "outline")

        result = _invoke(["reviewers", "art-outline", "--exclude", "jane@acme.com"])

        assert result.exit_code == 0, result.output
        assert "Raj Patel" in result.output
        assert "1 pending outline edit(s)" in result.output

    def test_reviewers_when_nobody_is_active(self, mocker):
        _patch_common(mocker)
        result = _invoke(["reviewers", "art-outline"])
        assert result.exit_code == 0, result.output
        assert "Nobody else" in result.output

    def test_stats(self, mocker):
        _patch_common(mocker)
        result = _invoke(["stats", "--campaign", "camp1"])
        assert result.exit_code == 0, result.output
        assert "Spring Tax Push" in result.output
        assert "Status Breakdown" in result.output

    def test_stats_store_failure_is_reported_not_raised(self, mocker):
        _, store = _patch_common(mocker)
        mocker.patch.object(store, "list_articles", side_effect=StoreError("Gist unreachable"))
        result = _invoke(["stats", "--campaign", "camp1"])
        assert result.exit_code == 1
        assert "Store failure: Gist unreachable" in result.output

    def test_history_store_failure_is_reported_not_raised(self, mocker):
        _, store = _patch_common(mocker)
        mocker.patch.object(store, "get_article", side_effect=StoreError("database is locked"))
        result = _invoke(["history", "art-outline"])
        assert result.exit_code == 1
        assert "Store failure" in result.output


# ---------------------------------------------------------------------------
# Maintenance and AI
# ---------------------------------------------------------------------------


class TestMaintenanceCommands:
    def test_prune_drafts_uses_configured_retention(self, mocker):
        _, store = _patch_common(mocker, config={**_make_config(), "draft_retention_days": 7})
        old = (datetime.now(timezone.utc) - timedelta(days=10)).isoformat()
        save_draft(store, "art-outline", "jane@acme.com", "outline", now=old)
        save_draft(store, "art-outline", "raj@acme.com", "outline")

        result = _invoke(["prune-drafts"])

        assert result.exit_code == 0, result.output
        assert "Pruned 1 draft(s) older than 7 day(s)" in result.output
        assert len(store.list_drafts()) == 1

    def test_load_bootstraps_a_portal(self, mocker, tmp_path):
        store = MemoryStore()
        _patch_common(mocker, store=store)
        portal = tmp_path / "portal.yml"
        portal.write_text(
            yaml.dump(
                {
                    "campaigns": [{"id": "spring", "name": "Spring", "strategy_goals": "tax", "clients": ["acme"]}],
                    "contacts": [
                        {"email": "Jane@Acme.com", "name": "Jane", "client_id": "acme", "client_name": "Acme"}
                    ],
                    "articles": [
                        {
                            "id": "a1",
                            "campaign_id": "spring",
                            "title": "Working title",
                            "status": "AWAITING_REVIEW_OUTLINE",
                            "outline_content": "# Intro\n## Details",
                        }
                    ],
                }
            )
        )

        result = _invoke(["load", str(portal)])

        assert result.exit_code == 0, result.output
        assert store.campaign_client_ids("spring") == ["acme"]
        assert store.get_contact("jane@acme.com").client_name == "Acme"
        assert store.get_article("a1").outline_content == "# Intro\n## Details"

    def test_load_rejects_deprecated_status(self, mocker, tmp_path):
        store = MemoryStore()
        _patch_common(mocker, store=store)
        portal = tmp_path / "portal.yml"
        portal.write_text(yaml.dump({"articles": [{"campaign_id": "spring", "status": "NEEDS_REVISION"}]}))

        result = _invoke(["load", str(portal)])

        assert result.exit_code == 1
        assert "deprecated" in result.output
        assert store.list_articles() == []

    def test_suggest_titles_requires_api_key(self, mocker):
        _patch_common(mocker, config=_make_config(anthropic_key=None))
        result = _invoke(["suggest-titles", "art-outline"])
        assert result.exit_code != 0
        assert "ANTHROPIC_API_KEY" in result.output

    def test_suggest_titles_prints_suggestions(self, mocker):
        _patch_common(mocker)
        suggester = MagicMock(spec=BaseTitleSuggester)
        suggester.suggest.return_value = ["Deductions, Demystified", "Keep More of Your Money"]
        mocker.patch("reviewdesk_cli.commands.suggest.get_suggester", return_value=suggester)

        result = _invoke(["suggest-titles", "art-outline", "--count", "2"])

        assert result.exit_code == 0, result.output
        assert "Deductions, Demystified" in result.output
        suggester.suggest.assert_called_once_with("Deductions explained", ["tax filing", "refunds"], 2)


class TestInitCommand:
    def test_writes_sqlite_config(self, mocker, tmp_path):
        _patch_common(mocker)
        cfg = tmp_path / ".reviewdesk.yml"

        result = _invoke(["--config", str(cfg), "init"], input="openai\nsqlite\nportal.db\nacme\n")

        assert result.exit_code == 0, result.output
        assert yaml.safe_load(cfg.read_text()) == {
            "model": "openai",
            "store": "sqlite",
            "store_path": "portal.db",
            "reviewer_tag": "acme",
        }

    def test_gist_creation_failure_still_writes_config(self, mocker, tmp_path):
        _patch_common(mocker)
        mocker.patch("reviewdesk_cli.commands.init._create_portal_gist", return_value=None)
        cfg = tmp_path / ".reviewdesk.yml"

        result = _invoke(["--config", str(cfg), "init"], input="anthropic\ngist\nclient\n")

        assert result.exit_code == 0, result.output
        assert "add gist_id manually" in result.output
        assert yaml.safe_load(cfg.read_text()) == {"model": "anthropic", "store": "gist"}


# ---------------------------------------------------------------------------
# Store selection
# ---------------------------------------------------------------------------


class TestBuildStore:
    def test_defaults_to_sqlite(self, tmp_path):
        store = _build_store({"store_path": str(tmp_path / "portal.db")})
        assert isinstance(store, SQLiteStore)
        store.close()

    def test_memory_store(self):
        assert isinstance(_build_store({"store": "memory"}), MemoryStore)

    def test_gist_store_with_credentials(self):
        assert isinstance(_build_store({"store": "gist", "gist_id": "abc", "github_token": "tok"}), GistStore)

    def test_gist_without_token_falls_back_to_sqlite(self, tmp_path):
        store = _build_store({"store": "gist", "gist_id": "abc", "store_path": str(tmp_path / "portal.db")})
        assert isinstance(store, SQLiteStore)
        store.close()

    def test_token_resolved_only_for_gist(self, mocker):
        mocker.patch("reviewdesk_core.config.load_config", return_value=_make_config())
        resolve = mocker.patch("reviewdesk_cli.auth.resolve_github_token", return_value="tok")
        mocker.patch("reviewdesk_cli.cli._build_store", return_value=_make_store())

        _invoke(["queue", "--campaign", "camp1"])

        resolve.assert_not_called()
