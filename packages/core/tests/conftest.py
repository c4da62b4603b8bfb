"""Shared fixtures: a MemoryStore seeded with one campaign and its contacts."""

from __future__ import annotations

import pytest

from reviewdesk_core.access import Reviewer
from reviewdesk_store.memory import MemoryStore
from reviewdesk_store.models import Article, Block, Campaign, Contact, Section


@pytest.fixture
def store():
    s = MemoryStore()
    s.add_campaign(
        Campaign(id="camp1", name="Spring Tax Push", strategy_goals="tax filing, refunds"),
        client_ids=["acme"],
    )
    s.add_contact(Contact(id="ct1", email="jane@acme.com", name="Jane Doe", client_id="acme", client_name="Acme Corp"))
    s.add_contact(Contact(id="ct2", email="raj@acme.com", name="Raj Patel", client_id="acme", client_name="Acme Corp"))
    s.add_contact(Contact(id="ct3", email="eve@globex.com", name="Eve", client_id="globex", client_name="Globex"))
    return s


@pytest.fixture
def jane():
    return Reviewer(email="Jane@Acme.com", name="Jane Doe")


@pytest.fixture
def raj():
    return Reviewer(email="raj@acme.com", name="Raj Patel")


@pytest.fixture
def add_article(store):
    """Insert an article into the store and return it."""

    def _add(article_id="art1", status="AWAITING_REVIEW_OUTLINE", **kwargs) -> Article:
        kwargs.setdefault("campaign_id", "camp1")
        kwargs.setdefault("title", "How to file taxes")
        kwargs.setdefault("proposed_titles", ["Tax Tips", "Filing Made Easy", "Refund Guide"])
        kwargs.setdefault(
            "outline_sections",
            [
                Section(id="h1-1", level="H1", title="Filing taxes", word_count_estimate=200),
                Section(id="h2-1", level="H2", title="Deadlines", word_count_estimate=150),
            ],
        )
        kwargs.setdefault("draft_blocks", [Block(id="b3", type="paragraph", content="foo")])
        kwargs.setdefault("created_at", "2026-03-01T12:00:00+00:00")
        article = Article(id=article_id, status=status, **kwargs)
        store.insert_articles([article])
        return article

    return _add
