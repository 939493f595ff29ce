"""
Massive (formerly Polygon.io) snapshot API adapter.

Two endpoints are used:
- per-ticker stock snapshot (spot quote for the underlying)
- cursor-paginated options chain snapshot
"""
from __future__ import annotations

import logging
from typing import Any, Mapping
from urllib.parse import parse_qsl, quote, urlencode, urlsplit

import requests

from callscope.config import Settings, require_api_key
from callscope.errors import UpstreamError

logger = logging.getLogger(__name__)

MASSIVE_BASE = "https://api.massive.com"
API_KEY_PARAM = "apiKey"


def ensure_api_key(url: str, api_key: str) -> str:
    """Append the credential query parameter unless the URL already carries one."""
    parts = urlsplit(url)
    if any(k == API_KEY_PARAM for k, _ in parse_qsl(parts.query, keep_blank_values=True)):
        return url
    # Append rather than rebuild, so the rest of a cursor URL stays byte-for-byte intact.
    base, _, fragment = url.partition("#")
    sep = "&" if parts.query else ("" if base.endswith("?") else "?")
    out = f"{base}{sep}{urlencode({API_KEY_PARAM: api_key})}"
    return f"{out}#{fragment}" if fragment else out


def parse_next_url(value: Any) -> str | None:
    """
    Validate a `next_url` cursor.

    Returns None for a missing, blank or unparsable value; callers treat that as
    the end of pagination rather than an error.
    """
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        parts = urlsplit(value.strip())
        # Accessing .port validates the netloc (raises on garbage like "host:abc").
        parts.port
    except ValueError:
        return None
    if parts.scheme not in {"http", "https"} or not parts.netloc:
        return None
    return value.strip()


class MassiveClient:
    def __init__(
        self,
        api_key: str,
        *,
        base_url: str = MASSIVE_BASE,
        timeout: float | None = None,
        session: requests.Session | None = None,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    @classmethod
    def from_settings(cls, settings: Settings, *, session: requests.Session | None = None) -> "MassiveClient":
        return cls(
            require_api_key(settings),
            base_url=settings.massive_base_url,
            timeout=settings.timeout,
            session=session,
        )

    def chain_url(self, ticker: str, *, page_size: int = 250) -> str:
        url = f"{self.base_url}/v3/snapshot/options/{quote(ticker, safe='')}"
        url = f"{url}?{urlencode({'limit': int(page_size), 'contract_type': 'call'})}"
        return ensure_api_key(url, self.api_key)

    def quote_url(self, ticker: str) -> str:
        url = f"{self.base_url}/v2/snapshot/locale/us/markets/stocks/tickers/{quote(ticker, safe='')}"
        return ensure_api_key(url, self.api_key)

    def get_json(self, url: str) -> dict[str, Any]:
        """
        GET a provider URL (credential re-asserted) and decode the JSON body.

        Raises UpstreamError on a non-success status or transport failure.
        """
        url = ensure_api_key(url, self.api_key)
        try:
            resp = self.session.get(url, headers={"Accept": "application/json"}, timeout=self.timeout)
        except requests.RequestException as e:
            raise UpstreamError("Failed to reach Massive snapshot API", details=str(e)) from e

        if not resp.ok:
            raise UpstreamError(
                "Failed to fetch Massive snapshot",
                upstream_status=resp.status_code,
                details=resp.text,
            )
        try:
            data = resp.json()
        except ValueError as e:
            raise UpstreamError(
                "Massive snapshot returned a non-JSON body",
                upstream_status=resp.status_code,
                details=resp.text,
            ) from e
        return data if isinstance(data, dict) else {}

    def fetch_underlying_snapshot(self, ticker: str) -> Mapping[str, Any] | None:
        """
        Best-effort spot snapshot for the underlying.

        Returns None when the quote endpoint is unavailable (any failure); the
        caller falls back to the underlying data embedded in the chain.
        """
        try:
            body = self.get_json(self.quote_url(ticker))
        except UpstreamError as e:
            logger.info("Spot quote unavailable for %s (status=%s)", ticker, e.upstream_status)
            return None

        snap = body.get("ticker")
        if isinstance(snap, Mapping):
            return snap
        results = body.get("results")
        if isinstance(results, Mapping):
            return results
        if isinstance(results, list) and results and isinstance(results[0], Mapping):
            return results[0]
        return body or None
