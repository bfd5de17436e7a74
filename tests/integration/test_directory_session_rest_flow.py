from __future__ import annotations

import json
from dataclasses import dataclass, field

import pytest

from user_directory.application.services.directory_session import DirectorySession
from user_directory.domain.form_validator import FormDraft
from user_directory.domain.session_status import SessionStatus
from user_directory.infrastructure.http.transport import HttpResponse
from user_directory.infrastructure.http.user_collection_client import RestUserCollectionClient

BASE_URL = "https://api.example.org/users"


@dataclass
class _RoutedTransport:
    routes: dict[tuple[str, str], list[HttpResponse]]
    calls: list[tuple[str, str, object]] = field(default_factory=list)

    async def request(
        self,
        *,
        method: str,
        url: str,
        headers: dict[str, str],
        body: bytes | None,
        timeout_seconds: float,
    ) -> HttpResponse:
        _ = headers, timeout_seconds
        payload = json.loads(body.decode("utf-8")) if body else None
        self.calls.append((method, url, payload))
        return self.routes[(method, url)].pop(0)


def _json(status_code: int, payload: object) -> HttpResponse:
    return HttpResponse(status_code=status_code, body_bytes=json.dumps(payload).encode("utf-8"))


async def _no_sleep(delay: float) -> None:
    _ = delay


def _session(transport: _RoutedTransport) -> DirectorySession:
    return DirectorySession(
        repository=RestUserCollectionClient(base_url=BASE_URL, transport=transport),
        sleep=_no_sleep,
    )


@pytest.mark.asyncio
async def test_load_create_update_delete_round_trip() -> None:
    transport = _RoutedTransport(
        routes={
            ("GET", BASE_URL): [
                _json(
                    200,
                    [
                        {
                            "id": 1,
                            "name": "Jane Doe",
                            "email": "jane@x.com",
                            "company": {"name": "Acme"},
                        },
                        {"id": 2, "name": "John Roe", "email": "john@y.com"},
                    ],
                )
            ],
            ("POST", BASE_URL): [_json(201, {"id": 11})],
            ("PUT", f"{BASE_URL}/1"): [_json(500, {"error": "boom"}), _json(200, {"id": 1})],
            ("DELETE", f"{BASE_URL}/11"): [HttpResponse(status_code=204, body_bytes=b"")],
        }
    )
    session = _session(transport)

    await session.start()
    assert session.status is SessionStatus.READY
    first_page = session.view()
    assert [item.model_dump(by_alias=True) for item in first_page.items] == [
        {
            "id": 1,
            "firstName": "Jane",
            "lastName": "Doe",
            "email": "jane@x.com",
            "department": "Acme",
        },
        {
            "id": 2,
            "firstName": "John",
            "lastName": "Roe",
            "email": "john@y.com",
            "department": "General",
        },
    ]
    original = session.cache.snapshot()

    amy = FormDraft(first_name="Amy", last_name="Lee", email="a@b.com", department="Ops")
    session.open_create()
    assert await session.submit(amy) is True
    assert session.cache.snapshot()[0].user_id == 11

    session.open_edit(1)
    renamed = FormDraft(first_name="Janet", last_name="Doe", email="jane@x.com", department="Acme")
    before_failure = session.cache.get(1)
    assert await session.submit(renamed) is False
    assert session.cache.get(1) == before_failure
    assert session.sync_state().last_error == "HTTP 500"

    assert await session.submit(renamed) is True
    updated = session.cache.get(1)
    assert updated is not None
    assert updated.first_name == "Janet"

    assert await session.delete_user(11) is True
    assert [user.user_id for user in session.cache.snapshot()] == [1, 2]
    assert session.cache.snapshot()[1] == original[1]

    assert [(method, url) for method, url, _ in transport.calls] == [
        ("GET", BASE_URL),
        ("POST", BASE_URL),
        ("PUT", f"{BASE_URL}/1"),
        ("PUT", f"{BASE_URL}/1"),
        ("DELETE", f"{BASE_URL}/11"),
    ]
    assert transport.calls[2][2] == {
        "id": 1,
        "firstName": "Janet",
        "lastName": "Doe",
        "email": "jane@x.com",
        "department": "Acme",
    }


@pytest.mark.asyncio
async def test_load_failure_surfaces_status_and_leaves_cache_empty() -> None:
    transport = _RoutedTransport(routes={("GET", BASE_URL): [_json(502, {"error": "bad"})]})
    session = _session(transport)

    await session.start()

    assert session.status is SessionStatus.LOAD_FAILED
    assert session.sync_state().last_error == "HTTP 502"
    assert session.view().total_count == 0
