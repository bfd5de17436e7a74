"""directory-console entrypoint."""

from __future__ import annotations

import asyncio
import logging
import sys

from user_directory.application.dto.user_models import PageView
from user_directory.application.services.directory_session import DirectorySession
from user_directory.config.settings import Settings, load_settings
from user_directory.domain.session_status import SessionStatus
from user_directory.infrastructure.http.user_collection_client import RestUserCollectionClient
from user_directory.infrastructure.logging import configure_logging

logger = logging.getLogger(__name__)


def build_session(*, settings: Settings) -> DirectorySession:
    """Compose the REST client and session from runtime settings."""

    client = RestUserCollectionClient(
        base_url=str(settings.user_api_base_url),
        access_token=settings.user_api_token,
        timeout_seconds=settings.http_timeout_seconds,
    )
    return DirectorySession(
        repository=client,
        page_size=settings.default_page_size,
        transient_message_seconds=settings.transient_message_seconds,
    )


def format_page_lines(view: PageView) -> list[str]:
    """Render one page as plain text rows."""

    lines = [f"{view.total_count} user(s), page {view.page}/{view.total_pages}"]
    for item in view.items:
        lines.append(
            f"{item.user_id}\t{item.first_name}\t{item.last_name}\t{item.email}\t{item.department}"
        )
    return lines


async def _run_console() -> int:
    settings = load_settings()
    configure_logging(level=settings.log_level)
    logger.info("directory_console_starting base_url=%s", settings.user_api_base_url)

    session = build_session(settings=settings)
    try:
        await session.start()
        if session.status is SessionStatus.LOAD_FAILED:
            print(f"Error: {session.sync_state().last_error}", file=sys.stderr)
            return 1
        for line in format_page_lines(session.view()):
            print(line)
        return 0
    finally:
        session.close()


def main() -> None:
    """Load the remote collection once and print the first page."""

    raise SystemExit(asyncio.run(_run_console()))


if __name__ == "__main__":
    main()
