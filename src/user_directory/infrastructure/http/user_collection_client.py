"""REST adapter implementing the remote user collection port."""

from __future__ import annotations

import json
import logging
from typing import Any

from user_directory.application.dto.user_models import UserPayload
from user_directory.application.ports.user_collection_port import NetworkError
from user_directory.domain.form_validator import FormDraft
from user_directory.infrastructure.http.transport import (
    HttpResponse,
    HttpTransportPort,
    UrllibHttpTransport,
)

logger = logging.getLogger(__name__)


class RestUserCollectionClient:
    """Collection endpoint adapter: GET/POST on the base URL, PUT/DELETE on `/{id}`."""

    def __init__(
        self,
        *,
        base_url: str,
        access_token: str | None = None,
        transport: HttpTransportPort | None = None,
        timeout_seconds: float = 30.0,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._access_token = access_token
        self._transport = transport or UrllibHttpTransport()
        self._timeout_seconds = timeout_seconds

    async def fetch_all(self) -> list[Any]:
        """Return every raw record from the collection."""

        response = await self._request(operation="fetch_all", method="GET", url=self._base_url)
        decoded = _decode_json(response, operation="fetch_all")
        if not isinstance(decoded, list):
            raise NetworkError(
                operation="fetch_all",
                status_code=None,
                detail="fetch_all returned non-array JSON payload",
            )
        return decoded

    async def create(self, draft: FormDraft) -> dict[str, Any]:
        """POST the draft and return the created record."""

        response = await self._request(
            operation="create",
            method="POST",
            url=self._base_url,
            payload=UserPayload.from_draft(draft).to_json_dict(),
        )
        decoded = _decode_json(response, operation="create")
        if not isinstance(decoded, dict):
            raise NetworkError(
                operation="create",
                status_code=None,
                detail="create returned non-object JSON payload",
            )
        return decoded

    async def update(self, user_id: int, draft: FormDraft) -> dict[str, Any]:
        """PUT the merged representation; an empty or non-object body yields {}."""

        response = await self._request(
            operation="update",
            method="PUT",
            url=self._item_url(user_id),
            payload=UserPayload.from_draft(draft, user_id=user_id).to_json_dict(),
        )
        if not response.body_bytes:
            return {}
        try:
            decoded = _decode_json(response, operation="update")
        except NetworkError:
            logger.warning("user_update_response_unreadable user_id=%s", user_id)
            return {}
        return decoded if isinstance(decoded, dict) else {}

    async def delete(self, user_id: int) -> None:
        """DELETE one record; 200 and 204 both count as success."""

        await self._request(operation="delete", method="DELETE", url=self._item_url(user_id))

    def _item_url(self, user_id: int) -> str:
        return f"{self._base_url}/{user_id}"

    async def _request(
        self,
        *,
        operation: str,
        method: str,
        url: str,
        payload: dict[str, object] | None = None,
    ) -> HttpResponse:
        headers = {"Accept": "application/json"}
        if self._access_token:
            headers["Authorization"] = f"Bearer {self._access_token}"
        body: bytes | None = None
        if payload is not None:
            body = json.dumps(payload, ensure_ascii=False).encode("utf-8")
            headers["Content-Type"] = "application/json"

        try:
            response = await self._transport.request(
                method=method,
                url=url,
                headers=headers,
                body=body,
                timeout_seconds=self._timeout_seconds,
            )
        except Exception as error:  # noqa: BLE001
            raise NetworkError(
                operation=operation,
                status_code=None,
                detail=f"{operation} transport failure: {error}",
            ) from error

        if response.status_code < 200 or response.status_code >= 300:
            logger.warning(
                "remote_call_failed operation=%s status=%s body=%s",
                operation,
                response.status_code,
                _decode_error_payload(response.body_bytes),
            )
            raise NetworkError(operation=operation, status_code=response.status_code)
        return response


def _decode_json(response: HttpResponse, *, operation: str) -> Any:
    try:
        return json.loads(response.body_bytes.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as error:
        raise NetworkError(
            operation=operation,
            status_code=None,
            detail=f"{operation} returned invalid JSON payload",
        ) from error


def _decode_error_payload(payload: bytes) -> str:
    if not payload:
        return "empty response body"
    try:
        decoded = payload.decode("utf-8")
    except UnicodeDecodeError:
        return "<binary>"
    return decoded[:200]
