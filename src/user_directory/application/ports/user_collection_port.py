"""Port for the remote user collection endpoint."""

from __future__ import annotations

from typing import Any, Protocol

from user_directory.domain.form_validator import FormDraft


class NetworkError(RuntimeError):
    """Raised when one remote call fails at transport level or with non-2xx status."""

    def __init__(
        self,
        *,
        operation: str,
        status_code: int | None,
        detail: str | None = None,
    ) -> None:
        if status_code is not None:
            message = f"HTTP {status_code}"
        else:
            message = detail or "network request failed"
        super().__init__(message)
        self.operation = operation
        self.status_code = status_code
        self.detail = detail


class UserCollectionPort(Protocol):
    """Remote collection contract; each call is attempted exactly once."""

    async def fetch_all(self) -> list[Any]:
        """Return every raw user record."""

    async def create(self, draft: FormDraft) -> dict[str, Any]:
        """Create one user and return the remote record, possibly with an id."""

    async def update(self, user_id: int, draft: FormDraft) -> dict[str, Any]:
        """Replace one user with the merged representation and return the response body."""

    async def delete(self, user_id: int) -> None:
        """Delete one user."""
