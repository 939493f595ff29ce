from __future__ import annotations

from datetime import date
from typing import Iterable

from callscope.options.models import Contract

MAX_EXPIRATIONS = 10


def _is_iso_date(s: str) -> bool:
    if len(s) != 10:
        return False
    try:
        date.fromisoformat(s)
    except ValueError:
        return False
    return True


def select_expirations(
    contracts: Iterable[Contract],
    today: date | str,
    *,
    limit: int = MAX_EXPIRATIONS,
) -> list[str]:
    """
    Distinct ISO expirations on or after `today`, ascending, capped at `limit`.

    Zero-padded ISO dates sort correctly as strings; anything not in that
    shape is ignored.
    """
    today_s = today if isinstance(today, str) else today.isoformat()
    found = {
        c.expiration
        for c in contracts
        if isinstance(c.expiration, str) and _is_iso_date(c.expiration) and c.expiration >= today_s
    }
    return sorted(found)[: max(int(limit), 0)]


def filter_to_expirations(contracts: Iterable[Contract], expirations: Iterable[str]) -> list[Contract]:
    keep = set(expirations)
    return [c for c in contracts if c.expiration in keep]
