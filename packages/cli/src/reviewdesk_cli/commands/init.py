"""init command — interactive setup wizard for a new portal.

Writes .reviewdesk.yml and, for the Gist backend, creates the private
Gist holding the shared portal document so nobody has to touch the
GitHub API by hand.
"""

from __future__ import annotations

import json
import logging
import os
import subprocess
import tempfile
from pathlib import Path

import click
import yaml
from rich.console import Console

console = Console()
logger = logging.getLogger(__name__)

_GIST_FILENAME = "reviewdesk_portal.json"


@click.command("init")
@click.option("--name", "portal_name", default=None, help="Portal name used in the Gist description.")
@click.pass_context
def init_cmd(ctx, portal_name: str | None):
    """Set up reviewdesk for an agency.

    Creates .reviewdesk.yml and optionally a shared GitHub Gist that holds
    the whole portal.
    """
    console.print("\n[bold cyan]reviewdesk init[/bold cyan] — portal setup wizard\n")

    # --- Choose provider for title suggestions ---
    provider = click.prompt(
        "AI provider for title suggestions",
        type=click.Choice(["anthropic", "openai"]),
        default="anthropic",
    )

    # --- Choose store backend ---
    console.print("\nPortal store:")
    console.print("  [bold]sqlite[/bold]  — local SQLite file (default)")
    console.print("  [bold]gist[/bold]    — shared GitHub Gist, zero infrastructure")
    console.print("  [bold]memory[/bold]  — nothing persisted (demos and tests)")
    store_type = click.prompt(
        "Store backend",
        type=click.Choice(["sqlite", "gist", "memory"]),
        default="sqlite",
    )

    config: dict = {"model": provider, "store": store_type}

    if store_type == "sqlite":
        db_path = click.prompt("SQLite database path", default=".reviewdesk.db")
        if db_path != ".reviewdesk.db":
            config["store_path"] = db_path
        console.print(f"[green]SQLite store configured at {db_path}[/green]")

    elif store_type == "gist":
        console.print(
            "\n[yellow]Note:[/yellow] the Gist store requires a token with [bold]gist[/bold] scope "
            "(GITHUB_TOKEN or a `gh auth login` session)."
        )
        gist_id = _create_portal_gist(portal_name or Path.cwd().name)
        if gist_id:
            console.print(f"[green]Created portal Gist: {gist_id}[/green]")
            config["gist_id"] = gist_id
        else:
            console.print("[yellow]Gist creation failed — add gist_id manually to .reviewdesk.yml[/yellow]")

    reviewer_tag = click.prompt("Reviewer tag recorded on feedback", default="client")
    if reviewer_tag != "client":
        config["reviewer_tag"] = reviewer_tag

    config_path = _config_path(ctx)
    _write_config(config_path, config)
    console.print(f"[green]Wrote {config_path}[/green]")

    console.print("\n[bold green]Setup complete![/bold green]")
    console.print("Load campaigns and articles with: [bold]reviewdesk load portal.yml[/bold]")


def _config_path(ctx: click.Context) -> Path:
    from reviewdesk_core.config import resolve_config_path

    parent = ctx.parent.params.get("config_path") if ctx.parent else None
    return Path(resolve_config_path(parent))


def _create_portal_gist(portal_name: str) -> str | None:
    """Create a private Gist holding an empty portal document and return its ID."""
    from reviewdesk_store.gist import GistStore

    tmp_dir = tempfile.mkdtemp(prefix="reviewdesk_")
    # gh names Gist files after their path, so the file gets its final name up front.
    named_path = os.path.join(tmp_dir, _GIST_FILENAME)
    try:
        with open(named_path, "w") as f:
            json.dump(GistStore.empty_document(), f, indent=2)
        result = subprocess.run(
            [
                "gh",
                "gist",
                "create",
                "--public=false",
                "--desc",
                f"reviewdesk portal for {portal_name}",
                named_path,
            ],
            capture_output=True,
            text=True,
            timeout=15,
        )
    except (FileNotFoundError, subprocess.TimeoutExpired) as e:
        logger.warning("Could not run gh gist create: %s", e)
        return None
    finally:
        if os.path.exists(named_path):
            os.unlink(named_path)
        os.rmdir(tmp_dir)

    if result.returncode == 0:
        gist_url = result.stdout.strip()
        return gist_url.rstrip("/").split("/")[-1]
    logger.warning("gh gist create failed: %s", result.stderr.strip())
    return None


def _write_config(path: Path, config: dict) -> None:
    """Write or update the config file, preserving any existing keys."""
    existing: dict = {}
    if path.exists():
        existing = yaml.safe_load(path.read_text()) or {}
    existing.update(config)
    path.write_text(yaml.dump(existing, default_flow_style=False, sort_keys=False))
