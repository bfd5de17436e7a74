"""Normalization of raw remote user records into `User` rows."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Mapping
from dataclasses import replace
from typing import Any

from user_directory.domain.user import User

DEFAULT_DEPARTMENT = "General"
_INTEGER_TEXT = re.compile(r"-?[0-9]+")

logger = logging.getLogger(__name__)


class NormalizationError(ValueError):
    """Raised when one raw record is not an object."""


def normalize_user_record(raw: Any, *, local_id: int = 0) -> User:
    """Normalize one raw record, defaulting every optional field.

    A missing or non-integral `id` is replaced by `local_id`.
    """

    if not isinstance(raw, Mapping):
        raise NormalizationError(f"user record must be an object, got {type(raw).__name__}")

    remote_id = read_user_id(raw.get("id"))
    first_name, last_name = _split_name(raw.get("name"))

    email = raw.get("email")
    company = raw.get("company")
    company_name = company.get("name") if isinstance(company, Mapping) else None

    return User(
        user_id=remote_id if remote_id is not None else local_id,
        first_name=first_name,
        last_name=last_name,
        email=email if isinstance(email, str) else "",
        department=company_name if isinstance(company_name, str) else DEFAULT_DEPARTMENT,
    )


def normalize_user_records(raw_records: Iterable[Any]) -> list[User]:
    """Normalize a batch, skipping non-object records.

    Records with a missing, unusable or repeated id are kept under a local id
    larger than every remote id in the batch, so ids stay unique.
    """

    records: list[tuple[int, Mapping[str, Any], int | None]] = []
    for index, raw in enumerate(raw_records):
        if not isinstance(raw, Mapping):
            logger.warning(
                "user_record_skipped index=%s reason=not an object (%s)",
                index,
                type(raw).__name__,
            )
            continue
        records.append((index, raw, read_user_id(raw.get("id"))))

    remote_ids = [remote_id for _, _, remote_id in records if remote_id is not None]
    next_local_id = max(remote_ids, default=0) + 1
    taken: set[int] = set()
    users: list[User] = []
    for index, raw, remote_id in records:
        if remote_id is not None and remote_id not in taken:
            user = normalize_user_record(raw)
        else:
            user = replace(normalize_user_record(raw), user_id=next_local_id)
            logger.info(
                "user_id_synthesized index=%s remote_id=%r local_id=%s",
                index,
                raw.get("id"),
                next_local_id,
            )
            next_local_id += 1
        taken.add(user.user_id)
        users.append(user)
    return users


def read_user_id(value: Any) -> int | None:
    """Return an integral id from JSON number or digit-string input, else None."""

    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str) and _INTEGER_TEXT.fullmatch(value.strip()):
        return int(value.strip())
    return None


def _split_name(name: Any) -> tuple[str, str]:
    # Only the first space separates; the rest of the tokens stay in the last name.
    if not isinstance(name, str) or not name:
        return "", ""
    first, _, rest = name.partition(" ")
    return first, rest
