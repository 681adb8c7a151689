"""HTTP client for the upstream API registry and its standardization endpoint."""

from __future__ import annotations

import logging
from typing import Any, List, Mapping
from urllib.parse import quote

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from ..normalization import NormalizationError, extract_violations

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.swaggerhub.com"
DEFAULT_TIMEOUT = 30.0
LATEST_VERSION = "latest"


class UpstreamError(RuntimeError):
    """Raised when the upstream registry cannot be reached or rejects a request."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


def http_session() -> requests.Session:
    session = requests.Session()
    retries = Retry(
        total=3,
        backoff_factor=0.6,
        status_forcelist=(429, 500, 502, 503, 504),
        allowed_methods=("GET", "POST"),
        raise_on_status=False,
    )
    adapter = HTTPAdapter(max_retries=retries)
    session.mount("https://", adapter)
    session.mount("http://", adapter)
    return session


class StandardizationClient:
    """Fetch API definitions and their lint violations from the registry."""

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        *,
        api_key: str | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = (base_url or DEFAULT_BASE_URL).rstrip("/")
        self.api_key = api_key or None
        self.timeout = timeout
        self.session = session or http_session()

    def fetch_violations(self, owner: str, subject: str, version: str = LATEST_VERSION) -> List[Any]:
        """Return the raw violation records for ``owner/subject@version``."""

        path = f"/apis/{_segment(owner)}/{_segment(subject)}/{_segment(version)}/standardization"
        payload = self._get(path, owner=owner, subject=subject, version=version)
        try:
            violations = extract_violations(payload)
        except NormalizationError as exc:
            raise UpstreamError(f"Unexpected standardization payload for {owner}/{subject}: {exc}") from exc
        logger.debug("upstream.violations owner=%s subject=%s count=%d", owner, subject, len(violations))
        return violations

    def fetch_api_spec(self, owner: str, subject: str, version: str = LATEST_VERSION) -> Any:
        """Return the parsed API definition; ``latest`` resolves to the default version."""

        path = f"/apis/{_segment(owner)}/{_segment(subject)}"
        if version and version != LATEST_VERSION:
            path += f"/{_segment(version)}"
        return self._get(path, owner=owner, subject=subject, version=version)

    # ------------------------------------------------------------------
    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    def _get(self, path: str, *, owner: str, subject: str, version: str) -> Any:
        url = f"{self.base_url}{path}"
        logger.info("upstream.request url=%s", url)
        try:
            response = self.session.get(url, headers=self._headers(), timeout=self.timeout)
            response.raise_for_status()
        except requests.HTTPError as exc:
            raise _http_error(exc, owner=owner, subject=subject, version=version) from exc
        except requests.RequestException as exc:
            raise UpstreamError(f"Failed to connect to SwaggerHub: {exc}") from exc

        try:
            return response.json()
        except ValueError as exc:
            raise UpstreamError(f"SwaggerHub returned invalid JSON for {path}") from exc


def _segment(value: str) -> str:
    return quote(str(value), safe="")


def _response_message(response: requests.Response | None, fallback: str) -> str:
    if response is None:
        return fallback
    try:
        body = response.json()
    except ValueError:
        return fallback
    if isinstance(body, Mapping) and body.get("message"):
        return str(body["message"])
    return fallback


def _http_error(exc: requests.HTTPError, *, owner: str, subject: str, version: str) -> UpstreamError:
    response = exc.response
    status = response.status_code if response is not None else None
    message = _response_message(response, str(exc))

    if status == 401:
        text = f"SwaggerHub authentication failed. Check your API key. ({message})"
    elif status == 403:
        text = f"Access denied to {owner}/{subject}. Check permissions. ({message})"
    elif status == 404:
        text = f"API not found: {owner}/{subject}@{version}. ({message})"
    else:
        text = f"SwaggerHub API error ({status}): {message}"
    return UpstreamError(text, status_code=status)
