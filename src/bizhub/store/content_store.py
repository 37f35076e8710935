"""
Content store access for business records and file blobs.

:class:`ContentStore` is the interface the rest of the code depends on.
:class:`SupabaseContentStore` implements it on top of Supabase's REST (PostgREST) and Storage
HTTP APIs.
"""

import logging
import re
import time
from typing import (
    Any,
    Dict,
    List,
    Mapping,
    Protocol,
    Sequence,
)

import httpx

from bizhub.config import settings

logger = logging.getLogger(__name__)

_UNSAFE_FILENAME_CHARS = re.compile(r"[^a-zA-Z0-9.]")
# PostgREST reserves these inside or=(...) filter values
_POSTGREST_RESERVED = re.compile(r"[,()]")


class ContentStoreError(RuntimeError):
    """Raised when the content store rejects or fails a request."""


class ContentStore(Protocol):
    """Read/write access to directory records and blobs."""

    async def search(
        self,
        table: str,
        fields: Sequence[str],
        pattern: str,
        limit: int,
        columns: str = "*",
    ) -> List[Dict[str, Any]]:
        """Case-insensitive substring match of *pattern* against any of *fields*."""
        ...

    async def insert(self, table: str, record: Mapping[str, Any]) -> Dict[str, Any]:
        """Insert *record* and return the stored row."""
        ...

    async def upload_blob(
        self, bucket: str, path: str, data: bytes, content_type: str = "application/octet-stream"
    ) -> str:
        """Store *data* under *bucket*/*path* and return its public URL."""
        ...


def blob_path(owner_id: str, filename: str, timestamp_ms: int | None = None) -> str:
    """Build ``<owner>/<timestamp>_<sanitized name>`` for an uploaded file."""
    if timestamp_ms is None:
        timestamp_ms = int(time.time() * 1000)
    safe_name = _UNSAFE_FILENAME_CHARS.sub("_", filename)
    return f"{owner_id}/{timestamp_ms}_{safe_name}"


class SupabaseContentStore:
    """
    Supabase-backed :class:`ContentStore`.

    Parameters
    ----------
    url, anon_key:
        Project URL and public key; default to ``SUPABASE_URL`` / ``SUPABASE_ANON_KEY``.
    http_client:
        Optional pre-built ``httpx.AsyncClient`` (tests inject one with a mock transport).
    """

    def __init__(
        self,
        url: str | None = None,
        anon_key: str | None = None,
        http_client: httpx.AsyncClient | None = None,
        timeout: float = 15.0,
    ):
        url = url or settings.SUPABASE_URL
        anon_key = anon_key or settings.SUPABASE_ANON_KEY
        if not url or not anon_key:
            raise ContentStoreError("SUPABASE_URL and SUPABASE_ANON_KEY must be configured.")
        self._base_url = url.rstrip("/")
        self._anon_key = anon_key
        self._http_client = http_client
        self._timeout = timeout

    # ------------------------------------------------------------------ #
    # Helpers
    # ------------------------------------------------------------------ #
    def _headers(self, extra: Mapping[str, str] | None = None) -> Dict[str, str]:
        headers = {"apikey": self._anon_key, "Authorization": f"Bearer {self._anon_key}"}
        if extra:
            headers.update(extra)
        return headers

    async def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        try:
            if self._http_client is not None:
                resp = await self._http_client.request(method, url, **kwargs)
            else:
                async with httpx.AsyncClient(timeout=self._timeout) as client:
                    resp = await client.request(method, url, **kwargs)
        except httpx.HTTPError as exc:
            logger.error("Content store request failed: %s", exc)
            raise ContentStoreError(str(exc)) from exc

        if not resp.is_success:
            message = resp.text
            try:
                message = resp.json().get("message", message)
            except (ValueError, AttributeError):
                logger.debug("Content store error body is not a JSON object")
            logger.error("Content store returned %d: %s", resp.status_code, message)
            raise ContentStoreError(message)
        return resp

    # ------------------------------------------------------------------ #
    # Public API
    # ------------------------------------------------------------------ #
    async def search(
        self,
        table: str,
        fields: Sequence[str],
        pattern: str,
        limit: int,
        columns: str = "*",
    ) -> List[Dict[str, Any]]:
        """Return up to *limit* rows whose *fields* contain *pattern* (case-insensitive)."""
        term = _POSTGREST_RESERVED.sub(" ", pattern)
        filters = ",".join(f"{field}.ilike.*{term}*" for field in fields)
        params = {"select": columns, "or": f"({filters})", "limit": str(limit)}
        resp = await self._request(
            "GET", f"{self._base_url}/rest/v1/{table}", params=params, headers=self._headers()
        )
        return resp.json()

    async def insert(self, table: str, record: Mapping[str, Any]) -> Dict[str, Any]:
        """Insert one row and return it as stored."""
        resp = await self._request(
            "POST",
            f"{self._base_url}/rest/v1/{table}",
            json=[dict(record)],
            headers=self._headers({"Prefer": "return=representation"}),
        )
        rows = resp.json()
        return rows[0] if rows else dict(record)

    async def upload_blob(
        self, bucket: str, path: str, data: bytes, content_type: str = "application/octet-stream"
    ) -> str:
        """Upload *data* to Storage and return its public URL."""
        await self._request(
            "POST",
            f"{self._base_url}/storage/v1/object/{bucket}/{path}",
            content=data,
            headers=self._headers({"Content-Type": content_type}),
        )
        return f"{self._base_url}/storage/v1/object/public/{bucket}/{path}"
