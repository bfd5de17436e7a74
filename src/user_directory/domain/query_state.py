"""Query state consumed by the query engine."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import StrEnum
from typing import Final

from user_directory.domain.user import EDITABLE_FIELDS

SORTABLE_COLUMNS: Final[tuple[str, ...]] = ("id", *EDITABLE_FIELDS)
FILTERABLE_FIELDS: Final[tuple[str, ...]] = EDITABLE_FIELDS


class SortDirection(StrEnum):
    """Sort direction applied to the comparison, not to the final list."""

    ASC = "asc"
    DESC = "desc"

    def toggled(self) -> SortDirection:
        return SortDirection.DESC if self is SortDirection.ASC else SortDirection.ASC


@dataclass(frozen=True)
class SortSpec:
    """Sort column plus direction."""

    column: str = "id"
    direction: SortDirection = SortDirection.ASC


def _empty_filters() -> tuple[tuple[str, str], ...]:
    return tuple((name, "") for name in FILTERABLE_FIELDS)


@dataclass(frozen=True)
class QueryState:
    """Immutable search/filter/sort/page selection.

    Field filters are kept as an ordered tuple of pairs so the state stays
    hashable and can key the memoized query result.
    """

    search_text: str = ""
    field_filters: tuple[tuple[str, str], ...] = field(default_factory=_empty_filters)
    sort: SortSpec = field(default_factory=SortSpec)
    page: int = 1
    page_size: int = 10

    def filter_value(self, name: str) -> str:
        """Return the current filter text for one filterable field."""

        for field_name, value in self.field_filters:
            if field_name == name:
                return value
        raise KeyError(name)

    def with_filter(self, name: str, value: str) -> QueryState:
        """Return a copy with one field filter replaced."""

        if name not in FILTERABLE_FIELDS:
            raise KeyError(name)
        filters = tuple(
            (field_name, value if field_name == name else current)
            for field_name, current in self.field_filters
        )
        return replace(self, field_filters=filters)

    def without_filters(self) -> QueryState:
        """Return a copy with search text and every field filter cleared."""

        return replace(self, search_text="", field_filters=_empty_filters())
