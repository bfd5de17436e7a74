"""Client-side validation for create/edit form drafts."""

from __future__ import annotations

import re
from dataclasses import dataclass

_EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


@dataclass(frozen=True)
class FormDraft:
    """Field values entered in the create/edit dialog."""

    first_name: str = ""
    last_name: str = ""
    email: str = ""
    department: str = ""


class FormValidationError(ValueError):
    """Raised when a draft cannot be submitted; carries per-field messages."""

    def __init__(self, field_errors: dict[str, str]) -> None:
        super().__init__(f"invalid form fields: {', '.join(sorted(field_errors))}")
        self.field_errors = field_errors


def is_valid_email(email: str) -> bool:
    """Return whether email looks like `local@domain.tld`."""

    return _EMAIL_PATTERN.match(email) is not None


def validate_form_draft(draft: FormDraft) -> dict[str, str]:
    """Return every field error for the draft; empty mapping means valid."""

    errors: dict[str, str] = {}
    if not draft.first_name.strip():
        errors["firstName"] = "First name is required"
    if not draft.last_name.strip():
        errors["lastName"] = "Last name is required"
    if not draft.email.strip():
        errors["email"] = "Email is required"
    elif not is_valid_email(draft.email):
        errors["email"] = "Email is invalid"
    if not draft.department.strip():
        errors["department"] = "Department is required"
    return errors


def ensure_valid_draft(draft: FormDraft) -> FormDraft:
    """Return the draft unchanged or raise `FormValidationError`."""

    errors = validate_form_draft(draft)
    if errors:
        raise FormValidationError(errors)
    return draft
