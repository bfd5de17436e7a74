from __future__ import annotations

import pytest

from user_directory.domain.form_validator import (
    FormDraft,
    FormValidationError,
    ensure_valid_draft,
    is_valid_email,
    validate_form_draft,
)


def _draft(**overrides: str) -> FormDraft:
    values = {
        "first_name": "Amy",
        "last_name": "Lee",
        "email": "a@b.com",
        "department": "Ops",
    }
    values.update(overrides)
    return FormDraft(**values)


def test_valid_draft_has_no_errors() -> None:
    assert validate_form_draft(_draft()) == {}


def test_all_empty_fields_report_every_error() -> None:
    errors = validate_form_draft(FormDraft())

    assert errors == {
        "firstName": "First name is required",
        "lastName": "Last name is required",
        "email": "Email is required",
        "department": "Department is required",
    }


def test_whitespace_only_values_count_as_empty() -> None:
    errors = validate_form_draft(_draft(first_name="   ", department="\t"))

    assert errors == {
        "firstName": "First name is required",
        "department": "Department is required",
    }


@pytest.mark.parametrize(
    "email",
    ["plainaddress", "a@b", "a b@c.com", "a@@b.com", "a@b .com", "@b.com", "a@.com"],
)
def test_malformed_email_is_invalid(email: str) -> None:
    assert validate_form_draft(_draft(email=email)) == {"email": "Email is invalid"}


@pytest.mark.parametrize("email", ["a@b.com", "first.last@mail.example.org", "x+y@d.io"])
def test_well_formed_email_is_accepted(email: str) -> None:
    assert is_valid_email(email)


def test_invalid_email_and_missing_name_are_reported_together() -> None:
    errors = validate_form_draft(_draft(last_name="", email="nope"))

    assert errors == {"lastName": "Last name is required", "email": "Email is invalid"}


def test_ensure_valid_draft_raises_with_field_errors() -> None:
    with pytest.raises(FormValidationError) as exc_info:
        ensure_valid_draft(_draft(first_name=""))

    assert exc_info.value.field_errors == {"firstName": "First name is required"}


def test_ensure_valid_draft_returns_draft() -> None:
    draft = _draft()

    assert ensure_valid_draft(draft) is draft
