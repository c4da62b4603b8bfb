"""show command — one article as the reviewer sees it."""

from __future__ import annotations

from pathlib import Path

import click
from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel

from reviewdesk_cli.output import APPROVAL_STYLE, fetch_article, get_store, styled
from reviewdesk_core.campaign import to_review_task
from reviewdesk_core.status import TaskType
from reviewdesk_core.utils.markdown import blocks_to_markdown, export_filename

console = Console()

_INDENT = {"H1": "", "H2": "  ", "H3": "    "}


@click.command("show")
@click.argument("article_id")
@click.option("--export", "export_dir", default=None, help="Write the content as markdown into this directory.")
@click.pass_context
def show_cmd(ctx, article_id: str, export_dir: str | None):
    """Show an article's titles, outline or content and its latest feedback."""
    store = get_store(ctx)
    article = fetch_article(store, article_id)

    task = to_review_task(article)
    console.print(f"\n[bold]{task.name}[/bold]  [dim]{article.id}[/dim]")
    console.print(
        f"{task.task_type} · {styled(task.approval_state, APPROVAL_STYLE[task.approval_state])} · "
        f"{article.status} · round {article.revision_round}\n"
    )

    if task.task_type is TaskType.TITLE_REVIEW:
        for option in task.titles:
            marker = "[green]✓[/green]" if option.is_selected else " "
            console.print(f" {marker} [bold]{option.id}[/bold]  {option.text}")
    elif task.task_type is TaskType.OUTLINE_REVIEW:
        for section in task.outline:
            words = f" [dim](~{section.word_count_estimate} words)[/dim]" if section.word_count_estimate else ""
            indent = _INDENT.get(section.level, "")
            console.print(f"{indent}[bold]{section.title}[/bold] [dim]{section.id}[/dim]{words}")
    else:
        console.print(Markdown(blocks_to_markdown(task.content)))

    feedback = article.client_comments
    if feedback:
        lines = [f"[bold]{feedback.action}[/bold] by {feedback.reviewer} in round {feedback.round}"]
        if feedback.reject_reason:
            lines.append(f"Reason: {feedback.reject_reason}")
        if feedback.general_comment:
            lines.append(f"General: {feedback.general_comment}")
        lines += [f"• {c.target_id}: {c.text}" for c in feedback.comments]
        if feedback.edits:
            lines.append(f"{len(feedback.edits)} edit suggestion(s)")
        console.print(Panel("\n".join(lines), title="Latest feedback", expand=False))

    if export_dir is not None:
        if not task.content:
            raise click.ClickException("Article has no content to export")
        path = Path(export_dir) / export_filename(task.name)
        path.write_text(blocks_to_markdown(task.content))
        console.print(f"[green]Exported {path}[/green]")
