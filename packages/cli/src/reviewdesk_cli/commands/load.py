"""load command — bootstrap a portal from a YAML file.

The agency side owns campaigns, the contact allow-list and article
creation; this command is how those records get into the store.

Expected layout:

    campaigns:
      - id: spring
        name: Spring Tax Campaign
        strategy_goals: "tax deductions, small business"
        clients: [acme]
    contacts:
      - email: jane@acme.com
        name: Jane Doe
        client_id: acme
        client_name: Acme Corp
    articles:
      - id: art1
        campaign_id: spring
        title: Working title
        status: AWAITING_REVIEW_TITLES
        proposed_titles: [A, B, C]
        outline_content: "# Heading"
"""

from __future__ import annotations

import click
import yaml
from rich.console import Console

from reviewdesk_cli.output import get_store
from reviewdesk_core.status import ArticleStatus
from reviewdesk_store.base import StoreError
from reviewdesk_store.models import Article, Campaign, Contact, new_id

console = Console()


def _article(raw: dict) -> Article:
    if not raw.get("campaign_id"):
        raise click.ClickException(f"Article {raw.get('title', '?')!r} has no campaign_id")
    status = raw.get("status", ArticleStatus.NEEDS_TITLES)
    try:
        status = ArticleStatus(status)
    except ValueError:
        raise click.ClickException(f"Unknown article status {status!r}")
    if status is ArticleStatus.NEEDS_REVISION:
        raise click.ClickException("NEEDS_REVISION is deprecated; use the phase-specific revision status")
    return Article.from_dict({**raw, "id": raw.get("id") or new_id(), "status": str(status)})


@click.command("load")
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
@click.pass_context
def load_cmd(ctx, path: str):
    """Load campaigns, contacts and articles from a YAML file."""
    store = get_store(ctx)
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise click.ClickException(f"{path} must contain a YAML mapping")

    articles = [_article(a) for a in data.get("articles") or []]

    try:
        for raw in data.get("campaigns") or []:
            store.add_campaign(
                Campaign(id=raw["id"], name=raw.get("name", raw["id"]), strategy_goals=raw.get("strategy_goals") or ""),
                client_ids=raw.get("clients"),
            )
        for raw in data.get("contacts") or []:
            store.add_contact(Contact.from_dict({**raw, "id": raw.get("id") or new_id()}))
        if articles:
            store.insert_articles(articles)
    except (KeyError, StoreError) as e:
        raise click.ClickException(f"Could not load {path}: {e}")

    console.print(
        f"[green]Loaded {len(data.get('campaigns') or [])} campaign(s), "
        f"{len(data.get('contacts') or [])} contact(s) and {len(articles)} article(s).[/green]"
    )
