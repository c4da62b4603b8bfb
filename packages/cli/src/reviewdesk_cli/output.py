"""Shared plumbing for commands: context access, Result unwrapping, status colours."""

from __future__ import annotations

from contextlib import contextmanager

import click

from reviewdesk_core.errors import ErrorKind, Result
from reviewdesk_core.status import ApprovalState
from reviewdesk_store.base import StoreError
from reviewdesk_store.models import Article

_KIND_LABEL = {
    ErrorKind.NOT_FOUND: "Not found",
    ErrorKind.ACCESS_DENIED: "Access denied",
    ErrorKind.CONFLICT: "Conflict",
    ErrorKind.STORE_FAILURE: "Store failure",
    ErrorKind.VALIDATION: "Invalid request",
}

APPROVAL_STYLE = {
    ApprovalState.PENDING: "yellow",
    ApprovalState.APPROVED: "green",
    ApprovalState.CHANGES_REQUESTED: "red",
}


def get_store(ctx: click.Context):
    store = ctx.obj.get("store") if ctx.obj else None
    if store is None:
        raise click.UsageError("No store configured. Run `reviewdesk init` to set one up.")
    return store


def get_config(ctx: click.Context) -> dict:
    return ctx.obj.get("config", {}) if ctx.obj else {}


def unwrap(result: Result):
    """Return the success value or abort the command with the failure message."""
    if result.ok:
        return result.value
    failure = result.failure
    raise click.ClickException(f"{_KIND_LABEL.get(failure.kind, failure.kind)}: {failure.message}")


@contextmanager
def store_errors():
    """Report a failing direct store call the way unwrap reports a failed Result."""
    try:
        yield
    except StoreError as e:
        raise click.ClickException(f"{_KIND_LABEL[ErrorKind.STORE_FAILURE]}: {e}") from e


def fetch_article(store, article_id: str) -> Article:
    with store_errors():
        article = store.get_article(article_id)
    if article is None:
        raise click.ClickException(f"Article {article_id} not found")
    return article


def styled(text: str, style: str) -> str:
    return f"[{style}]{text}[/{style}]"


def short_time(timestamp: str | None) -> str:
    return (timestamp or "")[:19].replace("T", " ")
