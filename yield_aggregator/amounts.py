"""Amount parsing and display formatting."""
from __future__ import annotations

import math
import re

# Commas are only accepted as thousands separators: "1,000" or "12,345.67".
_GROUPED_RE = re.compile(r"^\d{1,3}(,\d{3})+(\.\d+)?$")


def parse_amount(value: object) -> float | None:
    """Return ``value`` as a positive finite float, or None if it is not one.

    Accepts ints, floats and numeric strings (surrounding whitespace and
    well-formed thousands separators allowed). Booleans are rejected.
    """
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, str):
        value = value.strip()
        if "," in value:
            if not _GROUPED_RE.match(value):
                return None
            value = value.replace(",", "")
        if not value:
            return None
    try:
        amount = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError, OverflowError):
        return None
    if not math.isfinite(amount) or amount <= 0:
        return None
    return amount


def format_amount(value: float) -> str:
    """Format with thousands separators and two decimals, e.g. ``1,234.50``."""
    return f"{value:,.2f}"
