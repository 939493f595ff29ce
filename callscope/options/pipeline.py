"""
Request-scoped chain pipeline: spot price, bounded call chain, valuation.

Everything is recomputed per call; nothing is cached between requests.
"""
from __future__ import annotations

import logging
from datetime import date, datetime, timezone

import requests

from callscope.config import Settings, load_settings
from callscope.data.massive import MassiveClient
from callscope.errors import InputError
from callscope.options.expirations import filter_to_expirations, select_expirations
from callscope.options.models import ChainResult, Contract, ValuedContract
from callscope.options.paginator import iter_chain_pages
from callscope.options.resolver import resolve_underlying_price
from callscope.options.valuation import valuate
from callscope.utils.logging import DiagnosticLog

logger = logging.getLogger(__name__)


def normalize_ticker(raw: str | None) -> str:
    if raw is None:
        raise InputError("Missing ticker parameter")
    ticker = raw.strip().upper()
    if not ticker:
        raise InputError("Ticker cannot be empty")
    return ticker


def utc_today() -> date:
    return datetime.now(timezone.utc).date()


def build_chain(
    raw_ticker: str | None,
    *,
    settings: Settings | None = None,
    client: MassiveClient | None = None,
    session: requests.Session | None = None,
    today: date | None = None,
    diag: DiagnosticLog | None = None,
) -> ChainResult:
    """
    Fetch and value the call chain for one ticker.

    Raises InputError (bad ticker), ConfigError (no credential) or
    UpstreamError (chain page failed); any page failure discards everything
    fetched so far.
    """
    ticker = normalize_ticker(raw_ticker)
    settings = settings or load_settings()
    client = client or MassiveClient.from_settings(settings, session=session)
    diag = diag if diag is not None else DiagnosticLog(ticker=ticker)

    # Spot: dedicated quote endpoint first, then chain-level underlying, then per-row.
    # Once found it is never re-resolved.
    spot = resolve_underlying_price(client.fetch_underlying_snapshot(ticker), diag=diag, source="quote")

    contracts: list[Contract] = []
    pages = 0
    for page in iter_chain_pages(
        client,
        ticker,
        max_pages=settings.max_pages,
        page_size=settings.page_size,
        diag=diag,
    ):
        pages = page.number
        if spot is None and page.underlying_asset is not None:
            spot = resolve_underlying_price(page.underlying_asset, diag=diag, source="chain")
        for c in page.contracts:
            if spot is None and c.underlying is not None:
                spot = resolve_underlying_price(c.underlying, diag=diag, source="row")
            contracts.append(c)

    if spot is None:
        diag.emit("underlying.unavailable", ticker=ticker)

    expirations = select_expirations(contracts, today or utc_today(), limit=settings.max_expirations)
    options: list[ValuedContract] = []
    for c in filter_to_expirations(contracts, expirations):
        v = valuate(c, spot, ticker=ticker, diag=diag)
        if v is not None:
            options.append(v)

    logger.info(
        "%s: %d page(s), %d call(s), %d expiration(s), %d valued, spot=%s",
        ticker,
        pages,
        len(contracts),
        len(expirations),
        len(options),
        spot,
    )
    return ChainResult(
        ticker=ticker,
        underlying_price=spot,
        expirations=tuple(expirations),
        options=tuple(options),
        pages_fetched=pages,
    )
