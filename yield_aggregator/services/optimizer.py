"""Position ledger and rate optimization."""
from __future__ import annotations

import dataclasses
import logging
from collections.abc import Iterator

from ..amounts import parse_amount
from ..errors import InvalidInput, NoRateAvailable
from ..markets.oracle import RateOracle
from ..models import Action, Position
from .rewards import RewardAccrualModel

logger = logging.getLogger(__name__)


class PositionLedger:
    """Ordered positions; insertion order is display order.

    Every write swaps in a new tuple, so a reader sees either the old or
    the new ledger and never a partial rewrite.
    """

    def __init__(self) -> None:
        self._positions: tuple[Position, ...] = ()

    def append(self, position: Position) -> None:
        self._positions = self._positions + (position,)

    def replace_all(self, positions: list[Position] | tuple[Position, ...]) -> None:
        if len(positions) != len(self._positions):
            raise ValueError("Bulk rewrite must keep the number of positions")
        self._positions = tuple(positions)

    @property
    def positions(self) -> tuple[Position, ...]:
        return self._positions

    def __len__(self) -> int:
        return len(self._positions)

    def __iter__(self) -> Iterator[Position]:
        return iter(self._positions)


def _is_optimal(position: Position, best_rate: float) -> bool:
    if position.action is Action.SUPPLY:
        return position.rate >= best_rate
    return position.rate <= best_rate


class OptimizationService:
    """Opens positions at the best rate and keeps their optimality current."""

    def __init__(
        self,
        oracle: RateOracle,
        ledger: PositionLedger,
        rewards: RewardAccrualModel,
    ) -> None:
        self._oracle = oracle
        self._ledger = ledger
        self._rewards = rewards

    @property
    def ledger(self) -> PositionLedger:
        return self._ledger

    def open_position(self, asset: str, amount: object, action: Action | str) -> Position:
        """Open a position at the current best rate for ``(asset, action)``.

        Raises:
            InvalidInput: amount is not a number greater than zero, or the
                action is neither supply nor borrow.
            NoRateAvailable: the asset has no rates.
        """
        parsed = parse_amount(amount)
        if parsed is None:
            raise InvalidInput(f"Invalid amount: {amount!r}")
        try:
            action = Action(action)
        except ValueError:
            raise InvalidInput(f"Unknown action: {action!r}") from None

        quote = self._oracle.best_rate(asset, action)
        if quote is None:
            raise NoRateAvailable(f"No rate available for {asset}")

        position = Position(
            asset=asset,
            amount=parsed,
            action=action,
            protocol=quote.protocol,
            chain=quote.chain,
            rate=quote.rate,
            is_optimal=True,
        )
        self._rewards.accrue()
        self._ledger.append(position)
        logger.info(
            "Opened %s %.2f %s on %s/%s at %.2f%%",
            action.value, parsed, asset, quote.chain, quote.protocol, quote.rate,
        )
        return position

    def reoptimize_all(self) -> tuple[Position, ...]:
        """Move every position to the current best rate, chain and protocol."""
        rewritten: list[Position] = []
        for position in self._ledger:
            quote = self._oracle.best_rate(position.asset, position.action)
            if quote is None:
                rewritten.append(position)
                continue
            rewritten.append(
                dataclasses.replace(
                    position,
                    protocol=quote.protocol,
                    chain=quote.chain,
                    rate=quote.rate,
                    is_optimal=True,
                )
            )

        if rewritten:
            self._ledger.replace_all(rewritten)
            self._rewards.accrue()
            logger.info("Reoptimized %d positions", len(rewritten))
        return self._ledger.positions

    def recheck_optimality(self) -> list[Position]:
        """Refresh each position's ``is_optimal`` flag against the live best rate.

        Only the flag changes; rate, chain and protocol stay as stored.
        Returns the positions that went from optimal to non-optimal.
        """
        updated: list[Position] = []
        degraded: list[Position] = []
        for position in self._ledger:
            quote = self._oracle.best_rate(position.asset, position.action)
            if quote is None:
                updated.append(position)
                continue
            optimal = _is_optimal(position, quote.rate)
            if optimal != position.is_optimal:
                position = dataclasses.replace(position, is_optimal=optimal)
                if not optimal:
                    degraded.append(position)
            updated.append(position)

        if updated:
            self._ledger.replace_all(updated)
        return degraded
