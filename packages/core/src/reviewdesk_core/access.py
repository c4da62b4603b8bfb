"""Email allow-list access control.

A reviewer may act on a campaign when their email belongs to a contact
whose client is linked to that campaign. There are no passwords: the
allow-list in the contact directory is the whole authentication model.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from reviewdesk_core.errors import AccessDeniedError, ValidationError, returns_result
from reviewdesk_store.base import BaseStore
from reviewdesk_store.models import Contact, normalize_email

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

ACCESS_DENIED_MESSAGE = "Access denied. Your email is not authorized to access this campaign."


@dataclass
class Reviewer:
    """Identity of the person submitting or drafting a review."""

    email: str
    name: str = ""

    def __post_init__(self):
        self.email = normalize_email(self.email)

    @property
    def display_name(self) -> str:
        return self.name or self.email


def is_valid_email(email: str) -> bool:
    return bool(EMAIL_PATTERN.match(normalize_email(email)))


def resolve_contact(store: BaseStore, email: str) -> Contact | None:
    return store.get_contact(normalize_email(email))


def verify_access(store: BaseStore, email: str, campaign_id: str) -> bool:
    """Return True if email's client is linked to campaign_id."""
    contact = resolve_contact(store, email)
    if contact is None:
        logger.debug("No contact for %s", normalize_email(email))
        return False
    if contact.client_id not in store.campaign_client_ids(campaign_id):
        logger.debug("Client %s is not linked to campaign %s", contact.client_id, campaign_id)
        return False
    return True


def ensure_access(store: BaseStore, email: str, campaign_id: str) -> None:
    if not verify_access(store, email, campaign_id):
        raise AccessDeniedError(ACCESS_DENIED_MESSAGE, email=normalize_email(email), campaign_id=campaign_id)


@returns_result
def login(store: BaseStore, email: str, campaign_id: str) -> Contact:
    """Validate an email against a campaign's allow-list and return the contact."""
    if not is_valid_email(email):
        raise ValidationError("Please enter a valid email address.", email=email)
    ensure_access(store, email, campaign_id)
    contact = resolve_contact(store, email)
    logger.info("%s signed in to campaign %s", contact.email, campaign_id)
    return contact
