"""Placeholder reward model: a random increment per successful action."""
from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import date

from ..config import RewardsConfig
from ..interfaces.random_source import RandomSource
from ..models import Accrual, RewardPoint

logger = logging.getLogger(__name__)


class RewardAccrualModel:
    """Running reward total plus a chart series of per-action increments."""

    def __init__(
        self,
        config: RewardsConfig,
        rng: RandomSource,
        today: Callable[[], date] = date.today,
    ) -> None:
        self._max_increment = config.max_increment
        self.token_symbol = config.token_symbol
        self._rng = rng
        self._today = today
        self._total = 0.0
        self._series: list[RewardPoint] = [
            RewardPoint(date=p.date, reward_amount=p.amount) for p in config.history
        ]

    @property
    def total(self) -> float:
        return self._total

    @property
    def series(self) -> tuple[RewardPoint, ...]:
        return tuple(self._series)

    def accrue(self) -> Accrual:
        """Draw an increment in ``[0, max_increment)`` and record it for today."""
        increment = self._rng.random() * self._max_increment
        point = RewardPoint(date=self._today(), reward_amount=increment)
        self._total += increment
        self._series.append(point)
        logger.debug("Accrued %.4f %s (total %.4f)", increment, self.token_symbol, self._total)
        return Accrual(total=self._total, point=point)
