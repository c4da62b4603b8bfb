"""reviewers command — who else has a fresh draft on an article."""

from __future__ import annotations

import click
from rich.console import Console
from rich.table import Table

from reviewdesk_cli.output import get_config, get_store, short_time, unwrap
from reviewdesk_core.collaboration import get_active_reviewers
from reviewdesk_core.edits import pending_edit_summary
from reviewdesk_core.status import ReviewType

console = Console()


@click.command("reviewers")
@click.argument("article_id")
@click.option("--exclude", "exclude_email", default=None, help="Leave this reviewer (usually yourself) out.")
@click.pass_context
def reviewers_cmd(ctx, article_id: str, exclude_email: str | None):
    """List reviewers active on an article within the activity window."""
    store = get_store(ctx)
    hours = int(get_config(ctx).get("active_window_hours", 24))
    active = unwrap(get_active_reviewers(store, article_id, window_hours=hours, exclude_email=exclude_email))

    if not active:
        console.print(f"[dim]Nobody else has worked on {article_id} in the last {hours}h.[/dim]")
    else:
        table = Table(title=f"Active Reviewers — {article_id}", header_style="bold cyan")
        table.add_column("Name")
        table.add_column("Email", style="dim")
        table.add_column("Reviewing", width=10)
        table.add_column("Last active", width=20)
        for reviewer in active:
            table.add_row(
                reviewer.contact_name,
                reviewer.contact_email,
                reviewer.review_type,
                short_time(reviewer.last_active),
            )
        console.print(table)

    for edit_type in (ReviewType.OUTLINE, ReviewType.CONTENT):
        summary = unwrap(pending_edit_summary(store, article_id, edit_type, exclude_email=exclude_email))
        if summary.count:
            console.print(
                f"[yellow]{summary.count} pending {edit_type} edit(s) from {', '.join(summary.authors)}[/yellow]"
            )
