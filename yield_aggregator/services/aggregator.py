"""Aggregator facade: wallet precondition, event publishing, simulator loop."""
from __future__ import annotations

import asyncio
import logging
import random
from datetime import datetime, timezone

from ..amounts import format_amount
from ..config import AppConfig
from ..errors import InvalidInput, NoRateAvailable, SameChain, WalletNotConnected
from ..interfaces.listener import SnapshotListener
from ..interfaces.notifier import Notifier
from ..interfaces.random_source import RandomSource
from ..markets import RateOracle, RateSimulator, RateTable
from ..models import (
    Action,
    BridgeRequest,
    MarketSnapshot,
    Notification,
    NotificationLevel,
    Position,
    RateQuote,
    RejectionReason,
    RewardPoint,
    WalletSession,
)
from ..notifications import EmailNotifier, LogNotifier, NotificationFeed, TelegramNotifier
from .bridge import BridgeValidator
from .optimizer import OptimizationService, PositionLedger
from .rewards import RewardAccrualModel

logger = logging.getLogger(__name__)


class Aggregator:
    """Single-tenant engine: rate table, positions, rewards and notifications."""

    def __init__(self, config: AppConfig, rng: RandomSource | None = None) -> None:
        self._config = config
        rng = rng if rng is not None else random.Random()

        self._table = RateTable(config.markets)
        self._oracle = RateOracle(self._table)
        self._rewards = RewardAccrualModel(config.rewards, rng)
        self._service = OptimizationService(self._oracle, PositionLedger(), self._rewards)
        self._simulator = RateSimulator(
            self._table,
            config.simulator,
            rng,
            on_tick=self._recheck,
        )
        self._bridge = BridgeValidator()
        self._degraded: list[Position] = []
        self._wallet = WalletSession()
        self._listeners: list[SnapshotListener] = []

        # Build notifiers
        self._feed = NotificationFeed(config.notifications.feed_max_items)
        self._notifiers: list[Notifier] = [LogNotifier()]
        if config.notifications.telegram.enabled:
            self._notifiers.append(TelegramNotifier(config.notifications.telegram))
        if config.notifications.email.enabled:
            self._notifiers.append(EmailNotifier(config.notifications.email))

    # ------------------------------------------------------------------
    # Read accessors
    # ------------------------------------------------------------------

    @property
    def rates(self) -> dict[str, dict[str, dict[str, float]]]:
        return self._table.snapshot()

    @property
    def positions(self) -> tuple[Position, ...]:
        return self._service.ledger.positions

    @property
    def rewards_total(self) -> float:
        return self._rewards.total

    @property
    def reward_series(self) -> tuple[RewardPoint, ...]:
        return self._rewards.series

    @property
    def reward_token(self) -> str:
        return self._rewards.token_symbol

    @property
    def notifications(self) -> tuple[Notification, ...]:
        return self._feed.items

    @property
    def wallet(self) -> WalletSession:
        return self._wallet

    @property
    def referral_code(self) -> str:
        return self._config.referral_code

    @property
    def bridge_chains(self) -> tuple[str, ...]:
        return self._config.bridge.chains

    def best_rate(self, asset: str, action: Action | str) -> RateQuote | None:
        return self._oracle.best_rate(asset, action)

    def clear_notifications(self) -> None:
        self._feed.clear()

    def add_listener(self, listener: SnapshotListener) -> None:
        self._listeners.append(listener)

    # ------------------------------------------------------------------
    # Publishing
    # ------------------------------------------------------------------

    async def _publish(
        self,
        title: str,
        description: str,
        level: NotificationLevel = NotificationLevel.INFO,
    ) -> Notification:
        notification = Notification(
            title=title,
            description=description,
            timestamp=datetime.now(timezone.utc),
            level=level,
        )
        self._feed.add(notification)
        for notifier in self._notifiers:
            try:
                await notifier.notify(notification)
            except Exception as e:
                logger.error("Notifier %s failed: %s", type(notifier).__name__, e)
        return notification

    def _emit_snapshot(self) -> None:
        snapshot = MarketSnapshot(
            rates=self._table.snapshot(),
            positions=self.positions,
            timestamp=datetime.now(timezone.utc),
        )
        for listener in self._listeners:
            try:
                listener(snapshot)
            except Exception as e:
                logger.error("Snapshot listener failed: %s", e)

    async def _require_wallet(self) -> None:
        if not self._wallet.connected:
            await self._publish(
                "Wallet Not Connected",
                "Please connect your wallet first.",
                NotificationLevel.ERROR,
            )
            raise WalletNotConnected("Wallet not connected")

    # ------------------------------------------------------------------
    # Wallet
    # ------------------------------------------------------------------

    async def connect_wallet(self, account: str) -> WalletSession:
        self._wallet = WalletSession(connected=True, account=account)
        logger.info("Wallet connected: %s", account)
        await self._publish(
            "Wallet Connected", "You have successfully connected your wallet."
        )
        return self._wallet

    async def disconnect_wallet(self) -> None:
        self._wallet = WalletSession()
        logger.info("Wallet disconnected")
        await self._publish("Wallet Disconnected", "Your wallet has been disconnected.")

    # ------------------------------------------------------------------
    # User operations
    # ------------------------------------------------------------------

    async def open_position(
        self, asset: str, amount: object, action: Action | str
    ) -> Position:
        """Open a position at the best available rate and accrue a reward."""
        await self._require_wallet()
        try:
            position = self._service.open_position(asset, amount, action)
        except InvalidInput as e:
            logger.warning("Open rejected: %s", e)
            await self._publish(
                "Invalid Amount",
                "Please enter a valid amount greater than zero.",
                NotificationLevel.ERROR,
            )
            raise
        except NoRateAvailable as e:
            logger.warning("Open rejected: %s", e)
            await self._publish(
                "No Rate Available",
                f"No protocol currently offers a rate for {asset}.",
                NotificationLevel.ERROR,
            )
            raise

        self._emit_snapshot()
        await self._publish(
            "Transaction Successful",
            f"You have {position.action.past_tense} {format_amount(position.amount)} "
            f"{position.asset} at {format_amount(position.rate)}% APY.",
        )
        return position

    async def optimize(self) -> tuple[Position, ...]:
        """Rewrite every position to the current best rate."""
        await self._require_wallet()
        positions = self._service.reoptimize_all()
        self._emit_snapshot()
        await self._publish(
            "Positions Optimized",
            "Your positions have been optimized to the best rates.",
        )
        return positions

    async def bridge(
        self,
        source_chain: str,
        destination_chain: str,
        asset: str,
        amount: object,
    ) -> BridgeRequest:
        """Validate a bridge request; no funds move."""
        await self._require_wallet()
        request = BridgeRequest(
            source_chain=source_chain,
            destination_chain=destination_chain,
            asset=asset,
            amount=amount,
        )
        decision = self._bridge.validate(request)
        if not decision.accepted:
            await self._publish(
                "Invalid Bridge Transaction",
                "Please check your inputs and try again.",
                NotificationLevel.ERROR,
            )
            if decision.reason is RejectionReason.SAME_CHAIN:
                raise SameChain(f"Cannot bridge from {source_chain} to itself")
            raise InvalidInput(f"Invalid bridge amount: {amount!r}")

        await self._publish(
            "Bridge Transaction Initiated",
            f"Bridging {format_amount(decision.amount or 0.0)} {asset} "
            f"from {source_chain} to {destination_chain}.",
        )
        return request

    # ------------------------------------------------------------------
    # Simulation
    # ------------------------------------------------------------------

    def _recheck(self) -> None:
        self._degraded.extend(self._service.recheck_optimality())

    async def tick(self) -> list[Position]:
        """Run one simulator step; returns positions that just became non-optimal."""
        self._degraded = []
        self._simulator.tick()
        degraded = self._degraded
        self._emit_snapshot()

        for position in degraded:
            quote = self._oracle.best_rate(position.asset, position.action)
            best = (
                f"{format_amount(quote.rate)}% on {quote.protocol} ({quote.chain})"
                if quote
                else "n/a"
            )
            await self._publish(
                "Better Rate Available",
                f"Your {position.action.value} of {format_amount(position.amount)} "
                f"{position.asset} at {format_amount(position.rate)}% is no longer "
                f"optimal; best is now {best}.",
                NotificationLevel.WARNING,
            )
        return degraded

    async def run_ticks(self, count: int, interval: float = 0.0) -> None:
        for _ in range(count):
            await self.tick()
            if interval:
                await asyncio.sleep(interval)

    async def run_continuous(self, interval: float | None = None) -> None:
        """Run the market simulator forever."""
        if interval is None:
            interval = self._config.simulator.tick_interval_seconds
        logger.info("Starting rate simulation (tick every %.1f seconds)", interval)

        while True:
            try:
                await self.tick()
            except Exception as e:
                logger.error("Error in simulation loop: %s", e)
            await asyncio.sleep(interval)
