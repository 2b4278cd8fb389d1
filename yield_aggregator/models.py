"""Data models, all frozen."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum


class Action(str, Enum):
    """Side of a position: supply prefers a high rate, borrow a low one."""

    SUPPLY = "supply"
    BORROW = "borrow"

    @property
    def past_tense(self) -> str:
        return "supplied" if self is Action.SUPPLY else "borrowed"


@dataclass(frozen=True)
class RateQuote:
    """Best rate found for an (asset, action) pair and where it lives."""

    rate: float
    protocol: str
    chain: str


@dataclass(frozen=True)
class Position:
    """A simulated lending position.

    ``rate`` is the snapshot taken when the position was opened or last
    optimized; ``is_optimal`` is refreshed after every simulator tick.
    """

    asset: str
    amount: float
    action: Action
    protocol: str
    chain: str
    rate: float
    is_optimal: bool = True


@dataclass(frozen=True)
class RewardPoint:
    date: date
    reward_amount: float


@dataclass(frozen=True)
class Accrual:
    """Result of one reward draw: the new running total and the appended sample."""

    total: float
    point: RewardPoint


@dataclass(frozen=True)
class BridgeRequest:
    source_chain: str
    destination_chain: str
    asset: str
    amount: object


class RejectionReason(str, Enum):
    INVALID_AMOUNT = "invalid_amount"
    SAME_CHAIN = "same_chain"


@dataclass(frozen=True)
class BridgeDecision:
    accepted: bool
    reason: RejectionReason | None = None
    amount: float | None = None


class NotificationLevel(str, Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class Notification:
    """Event emitted for the presentation layer (toast, feed, chat bot)."""

    title: str
    description: str
    timestamp: datetime
    level: NotificationLevel = NotificationLevel.INFO


@dataclass(frozen=True)
class WalletSession:
    connected: bool = False
    account: str = ""


@dataclass(frozen=True)
class MarketSnapshot:
    """State published to listeners after every tick and mutating operation."""

    rates: dict[str, dict[str, dict[str, float]]]
    positions: tuple[Position, ...]
    timestamp: datetime
