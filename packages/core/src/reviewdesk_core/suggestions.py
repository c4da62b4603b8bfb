"""AI title alternatives for an article, seeded with its campaign keywords."""

from __future__ import annotations

import logging

from reviewdesk_core.campaign import split_keywords
from reviewdesk_core.errors import NotFoundError, returns_result
from reviewdesk_core.providers.base import BaseTitleSuggester
from reviewdesk_store.base import BaseStore

logger = logging.getLogger(__name__)


@returns_result
def suggest_titles(store: BaseStore, suggester: BaseTitleSuggester, article_id: str, count: int = 3) -> list[str]:
    article = store.get_article(article_id)
    if article is None:
        raise NotFoundError(f"Article {article_id} not found", article_id=article_id)
    campaign = store.get_campaign(article.campaign_id)
    keywords = split_keywords(campaign.strategy_goals) if campaign else []
    titles = suggester.suggest(article.selected_title or article.title, keywords, count)
    logger.info("Got %d title suggestion(s) for %s", len(titles), article_id)
    return titles
