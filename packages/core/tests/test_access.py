"""Tests for the email allow-list."""

import pytest

from reviewdesk_core.access import ACCESS_DENIED_MESSAGE, Reviewer, is_valid_email, login, verify_access
from reviewdesk_core.errors import ErrorKind
from reviewdesk_store.base import StoreError


@pytest.mark.parametrize(
    "email, valid",
    [
        ("jane@acme.com", True),
        ("  Jane@Acme.COM ", True),
        ("jane@acme", False),
        ("jane acme@acme.com", False),
        ("", False),
    ],
)
def test_email_format(email, valid):
    assert is_valid_email(email) is valid


def test_reviewer_normalises_email():
    reviewer = Reviewer(email=" Jane@ACME.com ")
    assert reviewer.email == "jane@acme.com"
    assert reviewer.display_name == "jane@acme.com"


class TestVerifyAccess:
    def test_contact_of_linked_client_has_access(self, store):
        assert verify_access(store, "JANE@acme.com", "camp1")

    def test_contact_of_other_client_is_denied(self, store):
        assert not verify_access(store, "eve@globex.com", "camp1")

    def test_unknown_email_is_denied(self, store):
        assert not verify_access(store, "nobody@acme.com", "camp1")

    def test_unknown_campaign_is_denied(self, store):
        assert not verify_access(store, "jane@acme.com", "camp-missing")


class TestLogin:
    def test_returns_the_contact(self, store):
        result = login(store, "Jane@Acme.com", "camp1")
        assert result.ok
        assert result.value.name == "Jane Doe"
        assert result.value.client_name == "Acme Corp"

    def test_malformed_email_is_a_validation_failure(self, store):
        result = login(store, "not-an-email", "camp1")
        assert result.failure.kind == ErrorKind.VALIDATION
        assert result.failure.message == "Please enter a valid email address."

    def test_unlisted_email_is_denied(self, store):
        result = login(store, "eve@globex.com", "camp1")
        assert result.failure.kind == ErrorKind.ACCESS_DENIED
        assert result.failure.message == ACCESS_DENIED_MESSAGE

    def test_store_failure_is_reported_not_raised(self, store, mocker):
        mocker.patch.object(store, "get_contact", side_effect=StoreError("connection reset"))
        result = login(store, "jane@acme.com", "camp1")
        assert result.failure.kind == ErrorKind.STORE_FAILURE
        assert "connection reset" in str(result.failure)
