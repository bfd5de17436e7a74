"""In-process cache owning the authoritative `User` collection."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterable, Mapping
from dataclasses import replace
from typing import Any

from user_directory.domain.form_validator import FormDraft
from user_directory.domain.normalizer import read_user_id
from user_directory.domain.user import User

IdFactory = Callable[[], int]
logger = logging.getLogger(__name__)


def _timestamp_id() -> int:
    return time.time_ns() // 1_000_000


class UserCache:
    """Apply confirmed remote outcomes to the local collection.

    Only this class mutates the collection. Readers get tuple snapshots, and
    `version` increases on every mutation so derived results can be memoized.
    """

    def __init__(self, *, id_factory: IdFactory = _timestamp_id) -> None:
        self._users: list[User] = []
        self._id_factory = id_factory
        self._version = 0

    @property
    def version(self) -> int:
        return self._version

    def snapshot(self) -> tuple[User, ...]:
        """Return an immutable view of the current collection."""

        return tuple(self._users)

    def get(self, user_id: int) -> User | None:
        for user in self._users:
            if user.user_id == user_id:
                return user
        return None

    def replace_all(self, users: Iterable[User]) -> None:
        """Replace the entire collection with a freshly loaded one."""

        loaded = list(users)
        ids = [user.user_id for user in loaded]
        if len(ids) != len(set(ids)):
            raise ValueError("loaded users contain duplicate ids")
        self._users = loaded
        self._bump()

    def apply_created(self, draft: FormDraft, remote_record: Mapping[str, Any]) -> User:
        """Prepend a user built from the draft and the remote-assigned id."""

        user = User(
            user_id=self._resolve_new_id(remote_record.get("id")),
            first_name=draft.first_name,
            last_name=draft.last_name,
            email=draft.email,
            department=draft.department,
        )
        self._users.insert(0, user)
        self._bump()
        return user

    def apply_updated(self, user_id: int, draft: FormDraft) -> User | None:
        """Replace editable fields of one cached user; id is kept."""

        for index, user in enumerate(self._users):
            if user.user_id != user_id:
                continue
            updated = replace(
                user,
                first_name=draft.first_name,
                last_name=draft.last_name,
                email=draft.email,
                department=draft.department,
            )
            self._users[index] = updated
            self._bump()
            return updated
        logger.warning("user_update_skipped user_id=%s reason=not cached", user_id)
        return None

    def apply_deleted(self, user_id: int) -> bool:
        """Remove one user; a missing id is a no-op."""

        remaining = [user for user in self._users if user.user_id != user_id]
        if len(remaining) == len(self._users):
            return False
        self._users = remaining
        self._bump()
        return True

    def _resolve_new_id(self, remote_id: Any) -> int:
        existing = {user.user_id for user in self._users}
        candidate = read_user_id(remote_id)
        if candidate is not None and candidate not in existing:
            return candidate

        synthesized = self._id_factory()
        if existing and synthesized <= max(existing):
            synthesized = max(existing) + 1
        logger.info(
            "user_id_synthesized remote_id=%s local_id=%s",
            remote_id,
            synthesized,
        )
        return synthesized

    def _bump(self) -> None:
        self._version += 1
