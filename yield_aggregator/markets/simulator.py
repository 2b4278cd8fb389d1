"""Market simulator: random-walks every rate once per tick."""
from __future__ import annotations

import logging
from collections.abc import Callable

from ..config import SimulatorConfig
from ..interfaces.random_source import RandomSource
from .table import RateTable

logger = logging.getLogger(__name__)


class RateSimulator:
    """Perturbs each rate by a uniform draw in ``[-bound, +bound]`` per tick.

    Rates are clamped at zero and rounded to ``rate_precision`` places. The
    new table is built on a copy and swapped in whole, then ``on_tick`` runs
    (the passive optimality re-check).
    """

    def __init__(
        self,
        table: RateTable,
        config: SimulatorConfig,
        rng: RandomSource,
        on_tick: Callable[[], object] | None = None,
    ) -> None:
        self._table = table
        self._bound = config.perturbation_bound
        self._precision = config.rate_precision
        self._rng = rng
        self._on_tick = on_tick
        self.ticks = 0

    def _perturb(self, rate: float) -> float:
        change = (self._rng.random() - 0.5) * 2 * self._bound
        return round(max(0.0, rate + change), self._precision)

    def tick(self) -> None:
        """Advance the market by one step."""
        rates = self._table.snapshot()
        for asset, chains in rates.items():
            for chain, protocols in chains.items():
                for protocol, rate in protocols.items():
                    try:
                        protocols[protocol] = self._perturb(rate)
                    except Exception as e:
                        logger.error(
                            "Failed to perturb %s/%s/%s, keeping %.2f: %s",
                            asset, chain, protocol, rate, e,
                        )

        self._table.replace(rates)
        self.ticks += 1
        logger.debug("Tick %d applied to %d rates", self.ticks, len(self._table))

        if self._on_tick is not None:
            self._on_tick()
