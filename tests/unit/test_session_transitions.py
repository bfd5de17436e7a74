from __future__ import annotations

import pytest

from user_directory.domain.session_status import (
    InvalidSessionTransitionError,
    SessionStatus,
    assert_transition,
)


@pytest.mark.parametrize(
    ("from_status", "to_status"),
    [
        (SessionStatus.IDLE, SessionStatus.LOADING),
        (SessionStatus.LOADING, SessionStatus.READY),
        (SessionStatus.LOADING, SessionStatus.LOAD_FAILED),
    ],
)
def test_allowed_transitions_pass(from_status: SessionStatus, to_status: SessionStatus) -> None:
    assert_transition(from_status, to_status)


@pytest.mark.parametrize(
    ("from_status", "to_status"),
    [
        (SessionStatus.IDLE, SessionStatus.READY),
        (SessionStatus.READY, SessionStatus.LOADING),
        (SessionStatus.LOAD_FAILED, SessionStatus.LOADING),
        (SessionStatus.LOADING, SessionStatus.LOADING),
    ],
)
def test_invalid_transitions_raise_deterministic_error(
    from_status: SessionStatus,
    to_status: SessionStatus,
) -> None:
    with pytest.raises(InvalidSessionTransitionError) as exc_info:
        assert_transition(from_status, to_status)

    assert str(exc_info.value) == (
        f"Invalid session status transition: {from_status.value} -> {to_status.value}"
    )
