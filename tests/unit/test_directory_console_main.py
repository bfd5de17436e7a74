from __future__ import annotations

import pytest

from apps.directory_console.main import build_session, format_page_lines
from user_directory.application.dto.user_models import PageView, UserView
from user_directory.config.settings import Settings
from user_directory.domain.session_status import SessionStatus


def test_build_session_uses_settings_page_size(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DEFAULT_PAGE_SIZE", "50")

    session = build_session(settings=Settings(_env_file=None))

    assert session.status is SessionStatus.IDLE
    assert session.query_state.page_size == 50


def test_format_page_lines_renders_header_and_rows() -> None:
    view = PageView(
        items=[
            UserView(
                user_id=1,
                first_name="Jane",
                last_name="Doe",
                email="jane@x.com",
                department="Acme",
            )
        ],
        total_count=1,
        total_pages=1,
        page=1,
        page_size=10,
    )

    assert format_page_lines(view) == [
        "1 user(s), page 1/1",
        "1\tJane\tDoe\tjane@x.com\tAcme",
    ]
