from __future__ import annotations

from typing import Any

import pytest
import requests

from lint_report_service.adapters import StandardizationClient, UpstreamError
from lint_report_service.adapters.upstream import http_session


class _FakeResponse:
    def __init__(self, *, status_code: int = 200, payload: Any = None, invalid_json: bool = False):
        self.status_code = status_code
        self._payload = payload
        self._invalid_json = invalid_json

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"HTTP {self.status_code}", response=self)

    def json(self) -> Any:
        if self._invalid_json:
            raise ValueError("not json")
        return self._payload


class _FakeSession:
    def __init__(self, response: _FakeResponse | None = None, error: Exception | None = None):
        self.response = response
        self.error = error
        self.calls: list[dict[str, Any]] = []

    def get(self, url: str, *, headers: dict[str, str], timeout: float) -> _FakeResponse:
        self.calls.append({"url": url, "headers": headers, "timeout": timeout})
        if self.error is not None:
            raise self.error
        assert self.response is not None
        return self.response


def _client(session: _FakeSession, api_key: str | None = "secret") -> StandardizationClient:
    return StandardizationClient(
        "https://registry.example.com/",
        api_key=api_key,
        timeout=12,
        session=session,  # type: ignore[arg-type]
    )


def test_fetch_violations_builds_standardization_url(petstore_payload: dict[str, Any]) -> None:
    session = _FakeSession(_FakeResponse(payload=petstore_payload))

    violations = _client(session).fetch_violations("acme", "petstore", "1.0.0")

    assert len(violations) == 20
    call = session.calls[0]
    assert call["url"] == "https://registry.example.com/apis/acme/petstore/1.0.0/standardization"
    assert call["headers"]["Authorization"] == "Bearer secret"
    assert call["headers"]["Accept"] == "application/json"
    assert call["timeout"] == 12


def test_no_authorization_header_without_key() -> None:
    session = _FakeSession(_FakeResponse(payload=[]))

    _client(session, api_key=None).fetch_violations("acme", "petstore", "1.0.0")

    assert "Authorization" not in session.calls[0]["headers"]


def test_path_segments_are_escaped() -> None:
    session = _FakeSession(_FakeResponse(payload=[]))

    _client(session).fetch_violations("acme", "pet store", "1.0/beta")

    assert session.calls[0]["url"].endswith("/apis/acme/pet%20store/1.0%2Fbeta/standardization")


@pytest.mark.parametrize(
    "version, expected_suffix",
    [
        ("2.1.0", "/apis/acme/petstore/2.1.0"),
        ("latest", "/apis/acme/petstore"),
    ],
)
def test_fetch_api_spec_url(version: str, expected_suffix: str) -> None:
    session = _FakeSession(_FakeResponse(payload={"openapi": "3.0.0"}))

    spec = _client(session).fetch_api_spec("acme", "petstore", version)

    assert spec == {"openapi": "3.0.0"}
    assert session.calls[0]["url"].endswith(expected_suffix)


@pytest.mark.parametrize(
    "status, fragment",
    [
        (401, "SwaggerHub authentication failed. Check your API key. (bad token)"),
        (403, "Access denied to acme/petstore. Check permissions. (bad token)"),
        (404, "API not found: acme/petstore@1.0.0. (bad token)"),
        (500, "SwaggerHub API error (500): bad token"),
    ],
)
def test_http_errors_map_to_upstream_error(status: int, fragment: str) -> None:
    session = _FakeSession(_FakeResponse(status_code=status, payload={"message": "bad token"}))

    with pytest.raises(UpstreamError) as excinfo:
        _client(session).fetch_violations("acme", "petstore", "1.0.0")

    assert str(excinfo.value) == fragment
    assert excinfo.value.status_code == status


def test_error_without_message_body_uses_exception_text() -> None:
    session = _FakeSession(_FakeResponse(status_code=502, invalid_json=True))

    with pytest.raises(UpstreamError, match=r"SwaggerHub API error \(502\): HTTP 502"):
        _client(session).fetch_violations("acme", "petstore", "1.0.0")


def test_connection_failure_maps_to_upstream_error() -> None:
    session = _FakeSession(error=requests.ConnectionError("connection refused"))

    with pytest.raises(UpstreamError, match="Failed to connect to SwaggerHub: connection refused"):
        _client(session).fetch_violations("acme", "petstore", "1.0.0")


def test_invalid_json_body_raises() -> None:
    session = _FakeSession(_FakeResponse(invalid_json=True))

    with pytest.raises(UpstreamError, match="invalid JSON"):
        _client(session).fetch_violations("acme", "petstore", "1.0.0")


def test_unexpected_payload_shape_raises() -> None:
    session = _FakeSession(_FakeResponse(payload={"data": []}))

    with pytest.raises(UpstreamError, match="Unexpected standardization payload"):
        _client(session).fetch_violations("acme", "petstore", "1.0.0")


def test_http_session_mounts_retrying_adapter() -> None:
    session = http_session()

    adapter = session.get_adapter("https://registry.example.com")
    retries = adapter.max_retries
    assert retries.total == 3
    assert 503 in retries.status_forcelist
