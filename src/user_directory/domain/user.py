"""Canonical user record held by the local cache."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final, Literal

UserField = Literal["firstName", "lastName", "email", "department"]

EDITABLE_FIELDS: Final[tuple[UserField, ...]] = (
    "firstName",
    "lastName",
    "email",
    "department",
)


@dataclass(frozen=True)
class User:
    """Normalized user row. `user_id` never changes after creation."""

    user_id: int
    first_name: str
    last_name: str
    email: str
    department: str

    def field_value(self, field: str) -> str:
        """Return one editable field by its wire name."""

        if field == "firstName":
            return self.first_name
        if field == "lastName":
            return self.last_name
        if field == "email":
            return self.email
        if field == "department":
            return self.department
        raise KeyError(field)
