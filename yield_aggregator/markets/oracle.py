"""Best-rate lookup over the rate table."""
from __future__ import annotations

import math

from ..models import Action, RateQuote
from .table import RateTable


class RateOracle:
    """Pure query layer answering "best rate for (asset, action)"."""

    def __init__(self, table: RateTable) -> None:
        self._table = table

    def best_rate(self, asset: str, action: Action | str) -> RateQuote | None:
        """Return the highest supply rate or lowest borrow rate for ``asset``.

        Ties keep the first entry in table order. Returns None when the
        asset has no entries.
        """
        action = Action(action)
        supply = action is Action.SUPPLY
        best_rate = -math.inf if supply else math.inf
        best: RateQuote | None = None

        for _, chain, protocol, rate in self._table.entries(asset):
            if (supply and rate > best_rate) or (not supply and rate < best_rate):
                best_rate = rate
                best = RateQuote(rate=rate, protocol=protocol, chain=chain)

        return best
