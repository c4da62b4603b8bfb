"""suggest-titles command — AI alternatives for an article's title."""

from __future__ import annotations

import click
from rich.console import Console

from reviewdesk_cli.output import get_config, get_store, unwrap
from reviewdesk_core.providers.factory import get_suggester
from reviewdesk_core.suggestions import suggest_titles

console = Console()


@click.command("suggest-titles")
@click.argument("article_id")
@click.option("--count", type=int, default=None, help="How many titles to ask for. Overrides config file.")
@click.option(
    "--model",
    type=click.Choice(["anthropic", "openai"]),
    default=None,
    help="AI model provider. Overrides config file.",
)
@click.pass_context
def suggest_titles_cmd(ctx, article_id: str, count: int | None, model: str | None):
    """Suggest alternative SEO titles using the campaign's keywords."""
    store = get_store(ctx)
    config = dict(get_config(ctx))
    if model:
        config["model"] = model

    if config.get("model") == "anthropic" and not config.get("anthropic_api_key"):
        raise click.UsageError("ANTHROPIC_API_KEY environment variable is not set.")
    if config.get("model") == "openai" and not config.get("openai_api_key"):
        raise click.UsageError("OPENAI_API_KEY environment variable is not set.")

    try:
        suggester = get_suggester(config)
    except (ImportError, ValueError) as e:
        raise click.UsageError(str(e))

    count = count or int(config.get("suggestion_count", 3))
    titles = unwrap(suggest_titles(store, suggester, article_id, count=count))
    if not titles:
        console.print("[yellow]No suggestions returned.[/yellow]")
        return
    for i, title in enumerate(titles, start=1):
        console.print(f"  [bold]{i}.[/bold] {title}")
