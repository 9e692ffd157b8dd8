"""
HTTP client for the rechtsinformationen.bund.de search API.

Provides:
- Federated document search (legislation and case law in one index)
- Legislation and case-law searches with their filters
- Document retrieval from API paths, web viewer URLs or document numbers

Every call uses a fixed timeout and is made exactly once; callers decide
whether a failure is fatal. Transport errors, timeouts, non-2xx responses and
unreadable bodies all surface as ``SearchServiceError``.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Optional
from urllib.parse import urlsplit

import requests

logger = logging.getLogger(__name__)

# ── Configuration ─────────────────────────────────────────────
BASE_URL = os.environ.get(
    "RECHTSINFO_BASE_URL", "https://testphase.rechtsinformationen.bund.de"
).rstrip("/")
REQUEST_TIMEOUT = float(os.environ.get("RECHTSINFO_TIMEOUT", "30"))
USER_AGENT = os.environ.get(
    "RECHTSINFO_USER_AGENT", "rechtsinformationen-search/0.1 (legal research client)"
)

API_MAX_SIZE = 100

_ACCEPT_HEADERS = {
    "json": "application/json",
    "html": "text/html",
    "xml": "application/xml",
}


class SearchServiceError(RuntimeError):
    """A call to the search service failed (transport, timeout, status or body)."""


class DocumentAccessForbidden(SearchServiceError):
    """The service answered 403 for a document path."""

    def __init__(self, url: str):
        super().__init__(f"Access forbidden (403) for {url}")
        self.url = url


class DocumentPathError(ValueError):
    """A document identifier cannot be mapped onto an API path."""


class RechtsinformationenClient:
    """Thin wrapper over a requests session bound to one API base URL."""

    def __init__(
        self,
        base_url: str = BASE_URL,
        *,
        timeout: float = REQUEST_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or self._build_session()

    def _build_session(self) -> requests.Session:
        """Build an HTTP session with identifying headers and no retries."""
        session = requests.Session()
        session.headers.update(
            {
                "User-Agent": USER_AGENT,
                "Accept": _ACCEPT_HEADERS["json"],
                "Accept-Language": "de-DE,de;q=0.9,en;q=0.5",
            }
        )
        return session

    # ── Searches ──────────────────────────────────────────────

    def search_documents(self, term: str, size: int = 10) -> list[dict]:
        """Search legislation and case law together; returns the ``member`` list."""
        return self._search("/v1/document", {"searchTerm": term, "size": _cap_size(size)})

    def search_legislation(
        self,
        term: str,
        size: int = 10,
        temporal_coverage_from: Optional[str] = None,
        temporal_coverage_to: Optional[str] = None,
    ) -> list[dict]:
        params: dict[str, Any] = {"searchTerm": term}
        if temporal_coverage_from:
            params["temporalCoverageFrom"] = temporal_coverage_from
        if temporal_coverage_to:
            params["temporalCoverageTo"] = temporal_coverage_to
        params["size"] = _cap_size(size)
        return self._search("/v1/legislation", params)

    def search_case_law(
        self,
        term: str,
        size: int = 10,
        court: Optional[str] = None,
        date_from: Optional[str] = None,
        date_to: Optional[str] = None,
        document_type: Optional[str] = None,
    ) -> list[dict]:
        params: dict[str, Any] = {"searchTerm": term}
        if court:
            params["court"] = court
        if date_from:
            params["dateFrom"] = date_from
        if date_to:
            params["dateTo"] = date_to
        if document_type:
            params["type"] = document_type
        params["size"] = _cap_size(size)
        return self._search("/v1/case-law", params)

    def _search(self, path: str, params: dict[str, Any]) -> list[dict]:
        payload = self._get_json(self.base_url + path, params=params)
        if not isinstance(payload, dict):
            raise SearchServiceError(f"Unexpected response body from {path}")
        members = payload.get("member") or []
        if not isinstance(members, list):
            raise SearchServiceError(f"Unexpected 'member' field from {path}")
        return [m for m in members if isinstance(m, dict)]

    # ── Documents ─────────────────────────────────────────────

    def get_document(self, document_id: str, format: str = "json") -> Any:
        """Fetch one document; JSON is decoded, HTML and XML are returned as text."""
        if format not in _ACCEPT_HEADERS:
            raise ValueError(f"Unsupported format: {format!r}")
        url = self.base_url + resolve_document_path(document_id)
        headers = {"Accept": _ACCEPT_HEADERS[format]}
        if format == "json":
            return self._get_json(url, headers=headers)
        response = self._get(url, headers=headers)
        return response.text

    # ── Transport ─────────────────────────────────────────────

    def _get(self, url: str, **kwargs) -> requests.Response:
        logger.debug("GET %s %s", url, kwargs.get("params") or "")
        try:
            response = self.session.get(url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            raise SearchServiceError(f"Request to {url} failed: {e}") from e
        if response.status_code == 403:
            raise DocumentAccessForbidden(url)
        if not response.ok:
            raise SearchServiceError(f"HTTP {response.status_code} from {url}")
        return response

    def _get_json(self, url: str, **kwargs) -> Any:
        response = self._get(url, **kwargs)
        try:
            return response.json()
        except ValueError as e:
            raise SearchServiceError(f"Invalid JSON from {url}: {e}") from e


def resolve_document_path(document_id: str) -> str:
    """Map a document identifier onto an API path below the base URL.

    Accepts full URLs (API, ``/norms/`` viewer or ``/case-law/``), ``/v1/``
    paths, ELI paths (``eli/bund/...``) and bare case-law document numbers.
    """
    document_id = (document_id or "").strip()
    if not document_id:
        raise DocumentPathError("document id must not be empty")

    if document_id.startswith(("http://", "https://")):
        path = urlsplit(document_id).path
        if path.startswith("/norms/"):
            return path.replace("/norms/", "/v1/legislation/", 1)
        if path.startswith("/ecli/"):
            raise DocumentPathError(
                "ECLI URLs are not supported; use the document number or search for the case first"
            )
        return path

    if document_id.startswith("/v1/"):
        return document_id
    if "eli/bund/" in document_id:
        return f"/v1/legislation/{document_id.lstrip('/')}"
    return f"/v1/case-law/{document_id.lstrip('/')}"


def _cap_size(size: int) -> int:
    return max(1, min(int(size), API_MAX_SIZE))
