"""stats command — where a campaign's articles stand."""

from __future__ import annotations

from collections import Counter

import click
from rich.console import Console
from rich.table import Table

from reviewdesk_cli.output import APPROVAL_STYLE, get_store, store_errors, styled, unwrap
from reviewdesk_core.campaign import PENDING_STATUSES, get_campaign_info
from reviewdesk_core.edits import load_edit_suggestions
from reviewdesk_core.status import ArticleStatus, ReviewType, phase_view

console = Console()


@click.command("stats")
@click.option("--campaign", "campaign_id", required=True, help="Campaign id.")
@click.pass_context
def stats_cmd(ctx, campaign_id: str):
    """Show the status breakdown of a campaign and the edits awaiting the agency.

    Useful for spotting phases where articles pile up and reviewers whose
    suggestions have not been worked in yet.
    """
    store = get_store(ctx)
    info = unwrap(get_campaign_info(store, campaign_id))
    with store_errors():
        articles = store.list_articles(campaign_id=campaign_id)
    if not articles:
        console.print(f"[yellow]No articles in {info.name}.[/yellow]")
        return

    status_counter: Counter[str] = Counter(str(a.status) for a in articles)
    rounds = [a.revision_round for a in articles]

    # --- Summary ---
    console.print(f"\n[bold]Stats for [cyan]{info.name}[/cyan][/bold]")
    console.print(f"  Articles:        {len(articles)}")
    console.print(f"  Awaiting client: {sum(status_counter[str(s)] for s in PENDING_STATUSES)}")
    console.print(f"  Avg round:       {sum(rounds) / len(rounds):.1f}")

    # --- Status breakdown ---
    status_table = Table(title="Status Breakdown", show_header=True)
    status_table.add_column("Status", style="bold")
    status_table.add_column("Phase")
    status_table.add_column("Count", justify="right")
    for status in ArticleStatus:
        count = status_counter.get(str(status), 0)
        if not count:
            continue
        view = phase_view(status)
        status_table.add_row(
            styled(status, APPROVAL_STYLE[view.approval_state]),
            view.task_type,
            str(count),
        )
    console.print(status_table)

    # --- Pending edits per author ---
    author_counter: Counter[str] = Counter()
    for article in articles:
        for edit_type in (ReviewType.OUTLINE, ReviewType.CONTENT):
            edits = unwrap(load_edit_suggestions(store, article.id, edit_type, status="pending"))
            author_counter.update(e.author or e.author_email for e in edits)
    if author_counter:
        edit_table = Table(title="Pending Edit Suggestions", show_header=True)
        edit_table.add_column("Reviewer")
        edit_table.add_column("Edits", justify="right")
        for author, count in author_counter.most_common():
            edit_table.add_row(author, str(count))
        console.print(edit_table)
