from __future__ import annotations

import math
from typing import Callable

from callscope.options.models import Contract, ValuedContract
from callscope.utils.logging import DiagnosticLog

TARGET_MULTIPLES = (2, 3, 4)


def _usable(x: float | None) -> bool:
    return x is not None and math.isfinite(x) and x >= 0


def choose_premium(contract: Contract) -> tuple[float, str] | None:
    """
    Pick the contract premium, first usable source wins.

    Order: two-sided mid (bid+ask)/2, provider mid/mark, last trade, day
    close, provider break-even minus strike. A one-sided quote never
    produces a premium on its own.
    """
    strategies: list[tuple[str, Callable[[], float | None]]] = [
        ("bid_ask_mid", lambda: (contract.bid + contract.ask) / 2 if contract.bid is not None and contract.ask is not None else None),
        ("mid", lambda: contract.mid),
        ("last_trade", lambda: contract.last_trade),
        ("day_close", lambda: contract.day_close),
        (
            "break_even",
            lambda: contract.break_even - contract.strike
            if contract.break_even is not None and contract.strike is not None
            else None,
        ),
    ]
    for name, fn in strategies:
        px = fn()
        if _usable(px):
            return float(px), name
    return None


def valuate(
    contract: Contract,
    spot: float | None,
    *,
    ticker: str,
    diag: DiagnosticLog | None = None,
) -> ValuedContract | None:
    """
    Derive premium, intrinsic/extrinsic value, break-even and payoff targets.

    Returns None (contract dropped) when the strike or premium can't be
    established. An unavailable spot is treated as 0, so intrinsic collapses
    to 0 for every strike.
    """
    if contract.strike is None:
        if diag is not None:
            diag.emit("valuation.dropped", contract=contract.ticker, reason="strike_unparsable")
        return None
    strike = contract.strike

    picked = choose_premium(contract)
    if picked is None:
        if diag is not None:
            diag.emit("valuation.dropped", contract=contract.ticker, strike=strike, reason="no_premium")
        return None
    premium, source = picked

    spot_for_intrinsic = spot if spot is not None else 0.0
    intrinsic = max(spot_for_intrinsic - strike, 0.0)
    extrinsic = max(premium - intrinsic, 0.0)
    break_even = contract.break_even if contract.break_even is not None else strike + premium
    t2, t3, t4 = (strike + n * premium for n in TARGET_MULTIPLES)

    return ValuedContract(
        ticker=contract.ticker or ticker,
        strike=strike,
        expiration=contract.expiration or "",
        premium=premium,
        intrinsic=intrinsic,
        extrinsic=extrinsic,
        break_even=break_even,
        target2x=t2,
        target3x=t3,
        target4x=t4,
        premium_source=source,
    )
