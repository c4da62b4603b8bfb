"""CLI entry point for reviewdesk.

Commands:
  init            — interactive setup wizard writing .reviewdesk.yml
  load            — bootstrap campaigns, contacts and articles from YAML
  queue           — pending (or completed) review tasks of a campaign
  show            — one article with its current feedback
  review          — submit a title, outline or content review
  history         — archived review rounds of an article
  reviewers       — who else is reviewing an article right now
  prune-drafts    — delete abandoned drafts
  suggest-titles  — AI alternatives for an article's title
  stats           — status breakdown and pending edits for a campaign
"""

from __future__ import annotations

import importlib.metadata
import logging

import click
from rich.console import Console
from rich.logging import RichHandler

from reviewdesk_cli.commands.history import history_cmd
from reviewdesk_cli.commands.init import init_cmd
from reviewdesk_cli.commands.load import load_cmd
from reviewdesk_cli.commands.prune import prune_drafts_cmd
from reviewdesk_cli.commands.queue import queue_cmd
from reviewdesk_cli.commands.review import review_cmd
from reviewdesk_cli.commands.reviewers import reviewers_cmd
from reviewdesk_cli.commands.show import show_cmd
from reviewdesk_cli.commands.stats import stats_cmd
from reviewdesk_cli.commands.suggest import suggest_titles_cmd

console = Console()


def _configure_logging(verbose: bool) -> None:
    root = logging.getLogger()
    root.setLevel(logging.DEBUG if verbose else logging.WARNING)
    if not any(isinstance(h, RichHandler) for h in root.handlers):
        root.addHandler(RichHandler(console=Console(stderr=True), show_path=False))


def _build_store(config: dict):
    """Instantiate the configured store from .reviewdesk.yml settings.

    Store selection hierarchy:
      store: gist   → GistStore   (requires gist_id and github_token)
      store: memory → MemoryStore (process-local, nothing survives the command)
      (default)     → SQLiteStore (store_path or .reviewdesk.db)

    This factory lives in cli.py so neither reviewdesk_core nor
    reviewdesk_store know about the CLI config format.
    """
    from reviewdesk_store.sqlite import SQLiteStore

    store_type = config.get("store", "sqlite")

    if store_type == "gist":
        from reviewdesk_store.gist import GistStore

        gist_id = config.get("gist_id")
        token = config.get("github_token")
        if gist_id and token:
            return GistStore(gist_id=gist_id, token=token)
        console.print("[yellow]GistStore requires gist_id and a GitHub token. Falling back to SQLite.[/yellow]")

    if store_type == "memory":
        from reviewdesk_store.memory import MemoryStore

        return MemoryStore()

    return SQLiteStore(db_path=config.get("store_path") or ".reviewdesk.db")


@click.group()
@click.version_option(
    version=importlib.metadata.version("reviewdesk"),
    prog_name="reviewdesk",
)
@click.option(
    "--config",
    "config_path",
    default=None,
    help="Path to the configuration file.  [default: .reviewdesk.yml]",
    envvar="REVIEWDESK_CONFIG",
)
@click.option("--verbose", "-v", is_flag=True, help="Log store and workflow activity to stderr.")
@click.pass_context
def main(ctx: click.Context, config_path: str | None, verbose: bool):
    """Client review portal for titles, outlines and drafts."""
    from reviewdesk_cli.auth import resolve_github_token
    from reviewdesk_core.config import load_config, resolve_config_path

    _configure_logging(verbose)
    ctx.ensure_object(dict)

    config = load_config(resolve_config_path(config_path))

    if config.get("store") == "gist":
        token = resolve_github_token()
        if token:
            config["github_token"] = token

    store = _build_store(config)
    ctx.obj["store"] = store
    ctx.obj["config"] = config
    ctx.call_on_close(store.close)


main.add_command(init_cmd)
main.add_command(load_cmd)
main.add_command(queue_cmd)
main.add_command(show_cmd)
main.add_command(review_cmd)
main.add_command(history_cmd)
main.add_command(reviewers_cmd)
main.add_command(prune_drafts_cmd)
main.add_command(suggest_titles_cmd)
main.add_command(stats_cmd)
