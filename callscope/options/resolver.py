"""
Underlying spot-price resolution from provider snapshots of unknown shape.

Candidates are tried in a fixed priority order and the first one that parses
wins. Only when every named field fails does the bounded recursive scan run.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Iterator, Mapping

from callscope.utils.logging import DiagnosticLog
from callscope.utils.numbers import parse_number
from callscope.utils.paths import get_path

SCALAR_KEYS = ("price", "last_price", "lastPrice", "close", "day_close", "c", "last")
LAST_TRADE_KEYS = ("last_trade", "lastTrade")
LAST_TRADE_FIELDS = ("price", "p")
DAY_KEYS = ("day",)
DAY_FIELDS = ("close", "c", "last", "price")
LAST_QUOTE_KEYS = ("last_quote", "lastQuote")
# Settling for one side of the quote is lossy but better than no spot at all.
LAST_QUOTE_FIELDS = ("bid", "bid_price", "bidPrice", "ask", "ask_price", "askPrice", "mid", "midpoint")

PRICE_LIKE = re.compile(r"price|close|last|trade|bid|ask", re.IGNORECASE)
EXCLUDED = re.compile(r"strike|premium|option", re.IGNORECASE)
MAX_SCAN_DEPTH = 4


@dataclass(frozen=True)
class PriceCandidate:
    path: str
    value: Any


def _explicit_candidates(snapshot: Mapping[str, Any]) -> Iterator[PriceCandidate]:
    for k in SCALAR_KEYS:
        yield PriceCandidate(k, snapshot.get(k))
    for outer in LAST_TRADE_KEYS:
        for f in LAST_TRADE_FIELDS:
            p = f"{outer}.{f}"
            yield PriceCandidate(p, get_path(snapshot, p))
    for outer in DAY_KEYS:
        for f in DAY_FIELDS:
            p = f"{outer}.{f}"
            yield PriceCandidate(p, get_path(snapshot, p))
    # Field order is the outer loop: a bid under either spelling beats any ask.
    for f in LAST_QUOTE_FIELDS:
        for outer in LAST_QUOTE_KEYS:
            p = f"{outer}.{f}"
            yield PriceCandidate(p, get_path(snapshot, p))


def scan_price_candidates(
    obj: Any,
    *,
    max_depth: int = MAX_SCAN_DEPTH,
    _path: str = "",
    _key: str = "",
    _depth: int = 0,
) -> Iterator[PriceCandidate]:
    """
    Depth-first walk yielding scalars stored under price-like keys.

    List elements are judged by the key of the list that holds them. Keys
    matching the exclusion pattern (strike/premium/option) are skipped together
    with everything beneath them. Containers nested deeper than `max_depth`
    are not entered.
    """
    if _depth > max_depth:
        return
    if isinstance(obj, Mapping):
        items = [(str(k), f"{_path}.{k}" if _path else str(k), v) for k, v in obj.items()]
    elif isinstance(obj, (list, tuple)):
        items = [(_key, f"{_path}[{i}]", v) for i, v in enumerate(obj)]
    else:
        return

    for key, path, value in items:
        if EXCLUDED.search(key):
            continue
        if isinstance(value, (Mapping, list, tuple)):
            yield from scan_price_candidates(value, max_depth=max_depth, _path=path, _key=key, _depth=_depth + 1)
        elif PRICE_LIKE.search(key):
            yield PriceCandidate(path, value)


def resolve_underlying_price(
    snapshot: Mapping[str, Any] | None,
    *,
    diag: DiagnosticLog | None = None,
    source: str = "snapshot",
) -> float | None:
    """Best available current price for the underlying, or None if nothing parses."""
    if not isinstance(snapshot, Mapping) or not snapshot:
        return None

    for cand in _explicit_candidates(snapshot):
        px = parse_number(cand.value)
        if px is not None:
            if diag is not None:
                diag.emit("underlying.resolved", source=source, path=cand.path, price=px)
            return px
        if cand.value is not None and diag is not None:
            diag.emit("underlying.candidate_unparsable", source=source, path=cand.path, value=repr(cand.value))

    for cand in scan_price_candidates(snapshot):
        px = parse_number(cand.value)
        if px is not None:
            if diag is not None:
                diag.emit("underlying.resolved", source=source, path=cand.path, price=px, fallback="scan")
            return px

    if diag is not None:
        diag.emit("underlying.unresolved", source=source, keys=sorted(str(k) for k in snapshot.keys()))
    return None
