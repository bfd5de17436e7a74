"""Lifecycle statuses and transition guards for a directory session."""

from __future__ import annotations

from enum import StrEnum
from typing import Final


class SessionStatus(StrEnum):
    """Load lifecycle of one session; `busy` is tracked separately within READY."""

    IDLE = "IDLE"
    LOADING = "LOADING"
    READY = "READY"
    LOAD_FAILED = "LOAD_FAILED"


class InvalidSessionTransitionError(ValueError):
    """Raised when an attempted session status transition is not allowed."""


_ALLOWED_TRANSITIONS: Final[dict[SessionStatus, frozenset[SessionStatus]]] = {
    SessionStatus.IDLE: frozenset({SessionStatus.LOADING}),
    SessionStatus.LOADING: frozenset({SessionStatus.READY, SessionStatus.LOAD_FAILED}),
    SessionStatus.READY: frozenset(),
    SessionStatus.LOAD_FAILED: frozenset(),
}


def can_transition(from_status: SessionStatus, to_status: SessionStatus) -> bool:
    """Return whether the transition is valid for the session state machine."""

    return to_status in _ALLOWED_TRANSITIONS[from_status]


def assert_transition(from_status: SessionStatus, to_status: SessionStatus) -> None:
    """Assert a transition is allowed, else raise deterministic domain error."""

    if not can_transition(from_status, to_status):
        raise InvalidSessionTransitionError(
            f"Invalid session status transition: {from_status.value} -> {to_status.value}"
        )
