"""queue command — the review tasks of a campaign."""

from __future__ import annotations

import click
from rich.console import Console
from rich.table import Table

from reviewdesk_cli.output import APPROVAL_STYLE, get_store, short_time, styled, unwrap
from reviewdesk_core.campaign import get_campaign_info, list_completed_tasks, list_pending_tasks

console = Console()


@click.command("queue")
@click.option("--campaign", "campaign_id", required=True, help="Campaign id.")
@click.option("--completed", is_flag=True, help="Show reviewed and in-progress articles instead of pending ones.")
@click.pass_context
def queue_cmd(ctx, campaign_id: str, completed: bool):
    """List articles awaiting client review (or already reviewed)."""
    store = get_store(ctx)
    info = unwrap(get_campaign_info(store, campaign_id))
    lister = list_completed_tasks if completed else list_pending_tasks
    tasks = unwrap(lister(store, campaign_id))

    if not tasks:
        console.print(f"[yellow]No {'completed' if completed else 'pending'} tasks in {info.name}.[/yellow]")
        return

    kind = "Completed" if completed else "Pending"
    table = Table(
        title=f"{kind} Tasks — {info.name} ({info.client_name})",
        show_header=True,
        header_style="bold cyan",
    )
    table.add_column("Article", style="dim")
    table.add_column("Name", max_width=50)
    table.add_column("Phase", width=16)
    table.add_column("State", width=18)
    table.add_column("Round", justify="right", width=6)
    table.add_column("Updated", width=20)

    for task in tasks:
        table.add_row(
            task.id,
            task.name,
            task.task_type,
            styled(task.approval_state, APPROVAL_STYLE[task.approval_state]),
            str(task.revision_round),
            short_time(task.due_date),
        )

    console.print(table)
