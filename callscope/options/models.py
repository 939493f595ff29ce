from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

from callscope.utils.numbers import parse_number
from callscope.utils.paths import get_path


# Provider alias paths for per-contract quote fields (snake_case v3 + camelCase v2 spellings).
BID_PATHS = ("last_quote.bid", "last_quote.bid_price", "lastQuote.bid", "lastQuote.bidPrice")
ASK_PATHS = ("last_quote.ask", "last_quote.ask_price", "lastQuote.ask", "lastQuote.askPrice")
MID_PATHS = ("last_quote.midpoint", "last_quote.mid", "lastQuote.midpoint", "lastQuote.mid", "mark", "mid")
LAST_TRADE_PATHS = ("last_trade.price", "lastTrade.price", "lastTrade.p")
DAY_CLOSE_PATHS = ("day.close", "day.c")
BREAK_EVEN_PATHS = ("break_even_price", "breakEvenPrice")


def _first_number(row: Mapping[str, Any], paths: tuple[str, ...]) -> float | None:
    for p in paths:
        n = parse_number(get_path(row, p))
        if n is not None:
            return n
    return None


def _text(v: Any) -> str | None:
    if isinstance(v, str) and v.strip():
        return v.strip()
    return None


@dataclass(frozen=True)
class Contract:
    """One option contract row as delivered by the chain snapshot, with quote fields coerced."""

    ticker: str | None  # contract symbol, e.g. "O:AAPL261120C00100000"
    contract_type: str
    strike: float | None
    expiration: str | None  # ISO YYYY-MM-DD
    bid: float | None = None
    ask: float | None = None
    mid: float | None = None
    last_trade: float | None = None
    day_close: float | None = None
    break_even: float | None = None
    # Raw underlying_asset sub-object; only read for spot-price fallback.
    underlying: Mapping[str, Any] | None = field(default=None, repr=False, compare=False)

    @property
    def is_call(self) -> bool:
        return self.contract_type == "call"

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Contract":
        details = row.get("details") if isinstance(row.get("details"), Mapping) else {}
        underlying = row.get("underlying_asset")
        if not isinstance(underlying, Mapping):
            underlying = None
        ctype = details.get("contract_type")
        return cls(
            ticker=_text(details.get("ticker")),
            contract_type=ctype.strip().lower() if isinstance(ctype, str) else "",
            strike=parse_number(details.get("strike_price")),
            expiration=_text(details.get("expiration_date")),
            bid=_first_number(row, BID_PATHS),
            ask=_first_number(row, ASK_PATHS),
            mid=_first_number(row, MID_PATHS),
            last_trade=_first_number(row, LAST_TRADE_PATHS),
            day_close=_first_number(row, DAY_CLOSE_PATHS),
            break_even=_first_number(row, BREAK_EVEN_PATHS),
            underlying=underlying,
        )


@dataclass(frozen=True)
class ValuedContract:
    ticker: str
    strike: float
    expiration: str
    premium: float
    intrinsic: float
    extrinsic: float
    break_even: float
    target2x: float
    target3x: float
    target4x: float
    premium_source: str = field(default="", compare=False)

    def target(self, n: int) -> float:
        return self.strike + n * self.premium

    def to_dict(self) -> dict[str, Any]:
        return {
            "ticker": self.ticker,
            "strike": self.strike,
            "expiration": self.expiration,
            "premium": self.premium,
            "intrinsic": self.intrinsic,
            "extrinsic": self.extrinsic,
            "breakEven": self.break_even,
            "target2x": self.target2x,
            "target3x": self.target3x,
            "target4x": self.target4x,
        }


@dataclass(frozen=True)
class ChainResult:
    ticker: str
    underlying_price: float | None
    expirations: tuple[str, ...]
    options: tuple[ValuedContract, ...]
    pages_fetched: int = field(default=0, compare=False)

    def by_expiration(self) -> dict[str, list[ValuedContract]]:
        """Contracts grouped per selected expiration (in expiration order), strikes ascending."""
        grouped: dict[str, list[ValuedContract]] = {exp: [] for exp in self.expirations}
        for o in self.options:
            if o.expiration in grouped:
                grouped[o.expiration].append(o)
        for rows in grouped.values():
            rows.sort(key=lambda o: o.strike)
        return grouped

    def to_dict(self) -> dict[str, Any]:
        # Both spellings of the spot field are emitted while consumers migrate to `underlyingSpot`.
        return {
            "underlyingPrice": self.underlying_price,
            "underlyingSpot": self.underlying_price,
            "expirations": list(self.expirations),
            "options": [o.to_dict() for o in self.options],
        }
