"""
Pytest configuration and shared fixtures for callscope tests.

Usage:
    @pytest.fixture functions are automatically available to all tests.
    Import helpers from conftest when needed.
"""
from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Callable

import pytest

from callscope.config import Settings
from callscope.data.massive import MassiveClient

QUOTE_PATH = "/v2/snapshot/locale/us/markets/stocks/tickers/"
CHAIN_PATH = "/v3/snapshot/options/"


# =============================================================================
# Fake HTTP layer
# =============================================================================

@dataclass
class FakeResponse:
    status_code: int = 200
    payload: Any = None
    body: str | None = None

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 400

    @property
    def text(self) -> str:
        if self.body is not None:
            return self.body
        return json.dumps(self.payload)

    def json(self) -> Any:
        if self.body is not None and self.payload is None:
            return json.loads(self.body)
        return self.payload


@dataclass
class FakeSession:
    """
    Stand-in for requests.Session.

    `handler(url)` returns the FakeResponse for each GET; every requested URL
    is recorded in `calls` (in order).
    """
    handler: Callable[[str], FakeResponse]
    calls: list[str] = field(default_factory=list)

    def get(self, url: str, headers: dict | None = None, timeout: float | None = None) -> FakeResponse:
        self.calls.append(url)
        return self.handler(url)

    def chain_calls(self) -> list[str]:
        return [u for u in self.calls if CHAIN_PATH in u]

    def quote_calls(self) -> list[str]:
        return [u for u in self.calls if QUOTE_PATH in u]


def make_row(
    strike: Any = 100,
    expiration: str = "2030-01-18",
    *,
    contract_type: str = "call",
    ticker: str | None = "O:AAPL300118C00100000",
    bid: Any = None,
    ask: Any = None,
    last_trade: Any = None,
    day_close: Any = None,
    break_even: Any = None,
    underlying: dict | None = None,
) -> dict:
    """
    Build one options-chain snapshot row in the provider's shape.

    Usage:
        row = make_row(strike=100, bid=5, ask=7)
    """
    row: dict[str, Any] = {
        "details": {
            "contract_type": contract_type,
            "expiration_date": expiration,
            "strike_price": strike,
        }
    }
    if ticker is not None:
        row["details"]["ticker"] = ticker
    quote = {k: v for k, v in (("bid", bid), ("ask", ask)) if v is not None}
    if quote:
        row["last_quote"] = quote
    if last_trade is not None:
        row["last_trade"] = {"price": last_trade}
    if day_close is not None:
        row["day"] = {"close": day_close}
    if break_even is not None:
        row["break_even_price"] = break_even
    if underlying is not None:
        row["underlying_asset"] = underlying
    return row


def chain_handler(
    pages: list[dict],
    *,
    quote: FakeResponse | None = None,
) -> Callable[[str], FakeResponse]:
    """
    Serve `pages` in order for chain requests; quote requests get `quote`
    (default 404 so the spot falls back to chain data).
    """
    state = {"i": 0}

    def handler(url: str) -> FakeResponse:
        if QUOTE_PATH in url:
            return quote or FakeResponse(404, body='{"status":"NOT_FOUND"}')
        i = state["i"]
        state["i"] += 1
        if i >= len(pages):
            return FakeResponse(200, {"results": []})
        page = pages[i]
        if isinstance(page, FakeResponse):
            return page
        return FakeResponse(200, page)

    return handler


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def settings() -> Settings:
    return Settings(MASSIVE_API_KEY="test_key", MASSIVE_BASE_URL="https://api.test.local")


@pytest.fixture
def make_client(settings: Settings) -> Callable[[FakeSession], MassiveClient]:
    def _make(session: FakeSession) -> MassiveClient:
        return MassiveClient.from_settings(settings, session=session)

    return _make
