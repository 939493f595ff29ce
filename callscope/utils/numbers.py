from __future__ import annotations

import math
import re
from typing import Any

# Anything that can't appear in a decimal/scientific literal.
_NON_NUMERIC = re.compile(r"[^0-9eE+\-.]")


def parse_number(value: Any) -> float | None:
    """
    Coerce a loosely-typed price value into a finite float.

    Accepts ints/floats and numeric strings, including currency-formatted ones
    ("$1,234.50"). Returns None for anything missing, non-finite, malformed
    ("N/A", "-", ".") or of another type. Never raises.
    """
    if value is None:
        return None
    # bool is an int subclass; True is not a price.
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            f = float(value)
        except OverflowError:
            return None
        return f if math.isfinite(f) else None
    if isinstance(value, str):
        cleaned = _NON_NUMERIC.sub("", value.replace("$", "").replace(",", ""))
        if not cleaned or not any(ch.isdigit() for ch in cleaned):
            return None
        try:
            f = float(cleaned)
        except ValueError:
            return None
        return f if math.isfinite(f) else None
    return None
