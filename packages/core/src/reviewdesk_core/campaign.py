"""Campaign-level views: what a reviewer sees in their queue."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from reviewdesk_core.errors import NotFoundError, returns_result
from reviewdesk_core.status import ApprovalState, ArticleStatus, TaskType, phase_view
from reviewdesk_core.utils.markdown import parse_content, parse_outline
from reviewdesk_store.base import BaseStore
from reviewdesk_store.models import Article, Block, ReviewFeedback, Section

logger = logging.getLogger(__name__)


def split_keywords(strategy_goals: str) -> list[str]:
    return [k.strip() for k in (strategy_goals or "").split(",") if k.strip()]


PENDING_STATUSES = [
    ArticleStatus.AWAITING_REVIEW_TITLES,
    ArticleStatus.AWAITING_REVIEW_OUTLINE,
    ArticleStatus.AWAITING_REVIEW_DRAFT,
]

COMPLETED_STATUSES = [
    ArticleStatus.TITLES_APPROVED,
    ArticleStatus.NEEDS_OUTLINE,
    ArticleStatus.OUTLINE_APPROVED,
    ArticleStatus.NEEDS_DRAFT,
    ArticleStatus.DRAFT_APPROVED,
    ArticleStatus.PUBLISHED,
    ArticleStatus.NEEDS_TITLES_REVISION,
    ArticleStatus.NEEDS_OUTLINE_REVISION,
    ArticleStatus.NEEDS_DRAFT_REVISION,
    ArticleStatus.NEEDS_REVISION,
]


@dataclass
class CampaignInfo:
    id: str
    name: str
    client_name: str
    strategy_goals: str

    @property
    def keywords(self) -> list[str]:
        return split_keywords(self.strategy_goals)


@dataclass
class TitleOption:
    id: str
    text: str
    is_selected: bool = False


@dataclass
class ReviewTask:
    """An article projected into the shape the reviewer UI renders."""

    id: str
    task_type: TaskType
    approval_state: ApprovalState
    status: ArticleStatus
    name: str
    due_date: str
    revision_round: int = 1
    strategy_goal: str = ""
    keywords: list[str] = field(default_factory=list)
    titles: list[TitleOption] = field(default_factory=list)
    outline: list[Section] = field(default_factory=list)
    content: list[Block] = field(default_factory=list)
    feedback: ReviewFeedback | None = None


def to_review_task(article: Article, campaign: CampaignInfo | None = None) -> ReviewTask:
    view = phase_view(article.status)
    task = ReviewTask(
        id=article.id,
        task_type=view.task_type,
        approval_state=view.approval_state,
        status=ArticleStatus(article.status),
        name=article.selected_title or article.title,
        due_date=article.last_updated or article.created_at,
        revision_round=article.revision_round,
        strategy_goal=campaign.strategy_goals if campaign else "",
        keywords=campaign.keywords if campaign else [],
        feedback=article.client_comments,
    )
    if view.task_type is TaskType.TITLE_REVIEW:
        task.titles = [
            TitleOption(id=f"title-{i}", text=text, is_selected=article.selected_title == text)
            for i, text in enumerate(article.proposed_titles, start=1)
        ]
    elif view.task_type is TaskType.OUTLINE_REVIEW:
        # Structured sections win; legacy markdown is parsed on the fly.
        task.outline = list(article.outline_sections or []) or parse_outline(article.outline_content or "")
    else:
        task.content = list(article.draft_blocks or []) or parse_content(article.draft_content or "")
    return task


def _campaign_info(store: BaseStore, campaign_id: str) -> CampaignInfo:
    campaign = store.get_campaign(campaign_id)
    if campaign is None:
        raise NotFoundError(f"Campaign {campaign_id} not found", campaign_id=campaign_id)
    client_names = [
        name for name in (store.get_client_name(cid) for cid in store.campaign_client_ids(campaign_id)) if name
    ]
    return CampaignInfo(
        id=campaign.id,
        name=campaign.name,
        client_name=", ".join(client_names) or "Unknown Client",
        strategy_goals=campaign.strategy_goals or "",
    )


@returns_result
def get_campaign_info(store: BaseStore, campaign_id: str) -> CampaignInfo:
    return _campaign_info(store, campaign_id)


def _tasks(store: BaseStore, campaign_id: str, statuses: list[ArticleStatus]) -> list[ReviewTask]:
    info = _campaign_info(store, campaign_id)
    articles = store.list_articles(campaign_id=campaign_id, statuses=[str(s) for s in statuses])
    logger.debug("%d article(s) in campaign %s matched %d status(es)", len(articles), campaign_id, len(statuses))
    return [to_review_task(a, info) for a in articles]


@returns_result
def list_pending_tasks(store: BaseStore, campaign_id: str) -> list[ReviewTask]:
    """Articles in the campaign awaiting the client, most recently updated first."""
    return _tasks(store, campaign_id, PENDING_STATUSES)


@returns_result
def list_completed_tasks(store: BaseStore, campaign_id: str) -> list[ReviewTask]:
    """Articles the client has already acted on or that moved past review."""
    return _tasks(store, campaign_id, COMPLETED_STATUSES)
