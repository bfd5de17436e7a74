"""Pure search -> filter -> sort -> paginate pipeline over cached users."""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass
from functools import cmp_to_key

from user_directory.domain.query_state import (
    SORTABLE_COLUMNS,
    QueryState,
    SortDirection,
)
from user_directory.domain.user import User


@dataclass(frozen=True)
class QueryResult:
    """One page of users plus the filtered (pre-pagination) count."""

    items: tuple[User, ...]
    total_count: int


def query(users: Sequence[User], state: QueryState) -> QueryResult:
    """Run the full pipeline; never mutates `users`.

    `state.page_size` must be at least 1; callers reject other values.
    """

    matched = search_users(users, state.search_text)
    matched = filter_users(matched, state.field_filters)
    ordered = sort_users(matched, column=state.sort.column, direction=state.sort.direction)
    return QueryResult(
        items=tuple(paginate(ordered, page=state.page, page_size=state.page_size)),
        total_count=len(matched),
    )


def search_users(users: Sequence[User], search_text: str) -> list[User]:
    """Keep users whose joined text fields contain the search text."""

    if not search_text.strip():
        return list(users)
    needle = search_text.lower()
    return [user for user in users if needle in _search_haystack(user)]


def filter_users(
    users: Sequence[User],
    field_filters: Sequence[tuple[str, str]],
) -> list[User]:
    """Apply every non-empty field filter with AND semantics."""

    matched = list(users)
    for field_name, value in field_filters:
        if not value:
            continue
        needle = value.lower()
        matched = [user for user in matched if needle in user.field_value(field_name).lower()]
    return matched


def sort_users(
    users: Sequence[User],
    *,
    column: str,
    direction: SortDirection,
) -> list[User]:
    """Stable sort by column; ties keep input order in both directions."""

    if column not in SORTABLE_COLUMNS:
        column = "id"
    sign = -1 if direction is SortDirection.DESC else 1

    def compare(left: User, right: User) -> int:
        left_key = _sort_key(left, column)
        right_key = _sort_key(right, column)
        if left_key < right_key:
            return -sign
        if left_key > right_key:
            return sign
        return 0

    return sorted(users, key=cmp_to_key(compare))


def paginate(users: Sequence[User], *, page: int, page_size: int) -> Sequence[User]:
    """Return the `[(page-1)*size, page*size)` slice; out of range gives empty."""

    start = max(0, (page - 1) * page_size)
    end = max(0, page * page_size)
    return users[start:end]


def total_pages(total_count: int, page_size: int) -> int:
    """Return the page count, never less than one."""

    return max(1, math.ceil(total_count / page_size))


def clamp_page(page: int, *, total_count: int, page_size: int) -> int:
    """Clamp a page number into `[1, total_pages]`."""

    return min(max(1, page), total_pages(total_count, page_size))


def _search_haystack(user: User) -> str:
    return " ".join(
        (user.first_name, user.last_name, user.email, user.department)
    ).lower()


def _sort_key(user: User, column: str) -> int | str:
    if column == "id":
        return user.user_id
    return user.field_value(column).lower()
