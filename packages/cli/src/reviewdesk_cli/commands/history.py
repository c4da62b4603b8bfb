"""history command — the review rounds of an article."""

from __future__ import annotations

import click
from rich.console import Console
from rich.table import Table

from reviewdesk_cli.output import fetch_article, get_store, short_time, styled

console = Console()

_ACTION_STYLE = {
    "approved": "green",
    "revision_requested": "yellow",
    "rejected": "red",
}


@click.command("history")
@click.argument("article_id")
@click.pass_context
def history_cmd(ctx, article_id: str):
    """Show archived and current feedback rounds for an article, oldest first."""
    store = get_store(ctx)
    article = fetch_article(store, article_id)

    rounds = list(article.revision_history)
    if article.client_comments:
        rounds.append(article.client_comments)
    if not rounds:
        console.print("[yellow]No review rounds recorded yet.[/yellow]")
        return

    table = Table(title=f"Review History — {article.selected_title or article.title}", header_style="bold cyan")
    table.add_column("Round", justify="right", width=6)
    table.add_column("Action", width=20)
    table.add_column("Reviewer", width=10)
    table.add_column("Comments", justify="right", width=9)
    table.add_column("Edits", justify="right", width=6)
    table.add_column("General comment", max_width=40)
    table.add_column("Submitted", width=20)
    table.add_column("Archived", width=20)

    for feedback in rounds:
        table.add_row(
            str(feedback.round),
            styled(feedback.action, _ACTION_STYLE.get(feedback.action, "white")),
            feedback.reviewer,
            str(len(feedback.comments)),
            str(len(feedback.edits)),
            (feedback.general_comment or feedback.reject_reason or "")[:40],
            short_time(feedback.timestamp),
            short_time(feedback.archived_at) or "[bold]current[/bold]",
        )

    console.print(table)
