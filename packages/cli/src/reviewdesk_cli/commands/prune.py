"""prune-drafts command — delete drafts nobody has touched in a while."""

from __future__ import annotations

import click
from rich.console import Console

from reviewdesk_cli.output import get_config, get_store, unwrap
from reviewdesk_core.drafts import prune_drafts

console = Console()


@click.command("prune-drafts")
@click.option("--days", type=int, default=None, help="Retention window in days. Overrides config file.")
@click.pass_context
def prune_drafts_cmd(ctx, days: int | None):
    """Delete review drafts older than the retention window."""
    store = get_store(ctx)
    if days is None:
        days = int(get_config(ctx).get("draft_retention_days", 30))
    pruned = unwrap(prune_drafts(store, older_than_days=days))
    console.print(f"[green]Pruned {pruned} draft(s) older than {days} day(s).[/green]")
