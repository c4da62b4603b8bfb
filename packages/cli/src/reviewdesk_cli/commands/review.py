"""review command — submit a client decision on an article.

Whatever the reviewer left in their saved draft is folded in: pending
edit suggestions are stored first so the submission gathers them, and
unresolved draft comments join the comments given on the command line.
"""

from __future__ import annotations

import click
from rich.console import Console

from reviewdesk_cli.output import fetch_article, get_config, get_store, store_errors, unwrap
from reviewdesk_core.access import Reviewer
from reviewdesk_core.drafts import load_draft
from reviewdesk_core.edits import submit_edit_suggestions
from reviewdesk_core.status import AWAITING_REVIEW, ReviewType
from reviewdesk_core.submission import ReviewDecision, submit_review
from reviewdesk_store.models import Article, TargetComment, TitleChoice

console = Console()


def _pairs(values: tuple[str, ...], option: str) -> list[tuple[str, str]]:
    pairs = []
    for value in values:
        key, sep, text = value.partition("=")
        if not sep or not key.strip() or not text.strip():
            raise click.BadParameter(f"expected KEY=TEXT, got {value!r}", param_hint=option)
        pairs.append((key.strip(), text.strip()))
    return pairs


def _title_choices(article: Article, picks: tuple[str, ...], notes: dict[str, str]) -> list[TitleChoice]:
    """Resolve --title values (title-N id, 1-based index or exact text) against the proposals."""
    options = {f"title-{i}": text for i, text in enumerate(article.proposed_titles, start=1)}
    choices = []
    for pick in picks:
        if pick in options:
            title_id = pick
        elif pick.isdigit() and f"title-{pick}" in options:
            title_id = f"title-{pick}"
        else:
            title_id = next((tid for tid, text in options.items() if text == pick), None)
            if title_id is None:
                raise click.BadParameter(f"{pick!r} is not one of the proposed titles", param_hint="--title")
        choices.append(TitleChoice(id=title_id, text=options[title_id], notes=notes.get(title_id)))
    return choices


def _infer_review_type(article: Article) -> ReviewType:
    for review_type, status in AWAITING_REVIEW.items():
        if article.status == status:
            return review_type
    raise click.ClickException(f"Article {article.id} is {article.status} and not awaiting client review")


@click.command("review")
@click.argument("article_id")
@click.option("--email", required=True, help="Reviewer email (must be on the campaign's allow-list).")
@click.option("--name", default="", help="Reviewer display name. Defaults to the contact directory entry.")
@click.option(
    "--type",
    "review_type",
    type=click.Choice([t.value for t in ReviewType]),
    default=None,
    help="Review phase. Inferred from the article status when omitted.",
)
@click.option("--approve", is_flag=True, help="Approve the outline/content, or the titles given with --title.")
@click.option("--request-changes", "request_changes", is_flag=True, help="Send the outline/content back for revision.")
@click.option("--reject", "reject_reason", default=None, help="Reject all proposed titles with this reason.")
@click.option("--title", "titles", multiple=True, help="Approved title: title-N id, index or exact text. Repeatable.")
@click.option("--note", "notes", multiple=True, help="Note on an approved title as TITLE_ID=TEXT. Repeatable.")
@click.option("--comment", "comments", multiple=True, help="Comment on a section or block as TARGET_ID=TEXT.")
@click.option("--general", "general_comment", default=None, help="General comment for the whole article.")
@click.pass_context
def review_cmd(
    ctx,
    article_id: str,
    email: str,
    name: str,
    review_type: str | None,
    approve: bool,
    request_changes: bool,
    reject_reason: str | None,
    titles: tuple[str, ...],
    notes: tuple[str, ...],
    comments: tuple[str, ...],
    general_comment: str | None,
):
    """Approve or request changes on an article awaiting review."""
    store = get_store(ctx)
    config = get_config(ctx)

    if sum([approve, request_changes, reject_reason is not None]) != 1:
        raise click.UsageError("Choose exactly one of --approve, --request-changes or --reject.")

    article = fetch_article(store, article_id)
    phase = ReviewType(review_type) if review_type else _infer_review_type(article)

    if phase is ReviewType.TITLE:
        if request_changes:
            raise click.UsageError("Use --reject REASON to send titles back.")
        if approve:
            decision = ReviewDecision.approve_titles(_title_choices(article, titles, dict(_pairs(notes, "--note"))))
        else:
            decision = ReviewDecision.reject_titles(reject_reason)
    else:
        if reject_reason is not None or titles:
            raise click.UsageError("--reject and --title only apply to title reviews.")
        decision = ReviewDecision.approve() if approve else ReviewDecision.request_changes()

    if not name:
        with store_errors():
            name = store.resolve_contact_name(email) or ""
    reviewer = Reviewer(email=email, name=name)
    target_comments = [TargetComment(target_id=t, text=text) for t, text in _pairs(comments, "--comment")]

    draft = unwrap(load_draft(store, article_id, reviewer.email, phase))
    if draft is not None:
        target_comments += [TargetComment(c.target_id, c.text) for c in draft.comments if not c.resolved]
        general_comment = general_comment or draft.general_comment or None
        if draft.edits and phase is not ReviewType.TITLE:
            stored = unwrap(submit_edit_suggestions(store, article_id, reviewer, draft.edits, phase))
            console.print(f"[dim]Submitted {len(stored)} edit suggestion(s) from your draft.[/dim]")

    outcome = unwrap(
        submit_review(
            store,
            article_id,
            phase,
            decision,
            reviewer,
            target_comments=target_comments,
            general_comment=general_comment,
            reviewer_tag=config.get("reviewer_tag", "client"),
        )
    )

    console.print(f"[green]Review submitted:[/green] {article_id} → [bold]{outcome.status}[/bold]")
    if outcome.article_ids != [article_id]:
        for child_id in outcome.article_ids:
            console.print(f"  created article [bold]{child_id}[/bold]")
    if outcome.orphaned_article_id:
        console.print(
            f"[yellow]Original article {outcome.orphaned_article_id} could not be removed and needs cleanup.[/yellow]"
        )
    if not outcome.draft_cleared:
        console.print("[yellow]Your saved draft could not be cleared; it will be pruned later.[/yellow]")
