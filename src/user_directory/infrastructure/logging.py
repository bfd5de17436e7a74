"""Process logging setup for directory entrypoints."""

from __future__ import annotations

import logging
from typing import TextIO

_LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
_NOISY_LOGGERS = ("asyncio",)


def configure_logging(*, level: str, stream: TextIO | None = None) -> int:
    """Configure root logging once and return the resolved numeric level.

    Unknown or blank level names fall back to INFO.
    """

    normalized_level = level.strip().upper() or "INFO"
    resolved_level = getattr(logging, normalized_level, None)
    if not isinstance(resolved_level, int):
        resolved_level = logging.INFO

    logging.basicConfig(level=resolved_level, format=_LOG_FORMAT, stream=stream)
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(resolved_level, logging.WARNING))
    return resolved_level
