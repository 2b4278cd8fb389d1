"""Integration tests for the Aggregator facade: full flows with deterministic randomness."""
from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, patch

import pytest

from yield_aggregator.config import AppConfig, NotificationsConfig, SimulatorConfig
from yield_aggregator.errors import InvalidInput, NoRateAvailable, SameChain, WalletNotConnected
from yield_aggregator.models import MarketSnapshot, NotificationLevel
from yield_aggregator.services import Aggregator


@pytest.fixture()
def aggregator(sample_app_config: AppConfig, make_random) -> Aggregator:
    return Aggregator(sample_app_config, rng=make_random(default=0.5))


class TestWallet:
    @pytest.mark.asyncio
    async def test_connect_publishes_notification(self, aggregator: Aggregator) -> None:
        session = await aggregator.connect_wallet("0xABC")
        assert session.connected and session.account == "0xABC"
        assert aggregator.notifications[0].title == "Wallet Connected"

    @pytest.mark.asyncio
    async def test_operations_require_wallet(self, aggregator: Aggregator) -> None:
        with pytest.raises(WalletNotConnected):
            await aggregator.open_position("USDC", 100, "supply")
        with pytest.raises(WalletNotConnected):
            await aggregator.optimize()
        with pytest.raises(WalletNotConnected):
            await aggregator.bridge("Ethereum", "Optimism", "USDC", 10)
        assert aggregator.positions == ()
        assert aggregator.notifications[0].level is NotificationLevel.ERROR

    @pytest.mark.asyncio
    async def test_disconnect(self, aggregator: Aggregator) -> None:
        await aggregator.connect_wallet("0xABC")
        await aggregator.disconnect_wallet()
        assert aggregator.wallet.connected is False
        with pytest.raises(WalletNotConnected):
            await aggregator.open_position("USDC", 100, "supply")


class TestOpenPosition:
    @pytest.mark.asyncio
    async def test_success_notification(self, aggregator: Aggregator) -> None:
        await aggregator.connect_wallet("0xABC")
        position = await aggregator.open_position("USDC", "1000", "supply")

        assert position.rate == 3.8
        latest = aggregator.notifications[0]
        assert latest.title == "Transaction Successful"
        assert latest.description == "You have supplied 1,000.00 USDC at 3.80% APY."
        assert latest.timestamp.tzinfo is not None

    @pytest.mark.asyncio
    async def test_invalid_amount(self, aggregator: Aggregator) -> None:
        await aggregator.connect_wallet("0xABC")
        with pytest.raises(InvalidInput):
            await aggregator.open_position("USDC", "-3", "supply")
        assert aggregator.positions == ()
        assert len(aggregator.reward_series) == 1
        assert aggregator.notifications[0].title == "Invalid Amount"

    @pytest.mark.asyncio
    async def test_oversized_amount_is_invalid(self, aggregator: Aggregator) -> None:
        await aggregator.connect_wallet("0xABC")
        with pytest.raises(InvalidInput):
            await aggregator.open_position("USDC", 10**400, "supply")
        assert aggregator.positions == ()
        assert aggregator.notifications[0].title == "Invalid Amount"

    @pytest.mark.asyncio
    async def test_no_rate(self, aggregator: Aggregator) -> None:
        await aggregator.connect_wallet("0xABC")
        with pytest.raises(NoRateAvailable):
            await aggregator.open_position("DAI", 10, "borrow")
        assert aggregator.notifications[0].title == "No Rate Available"

    @pytest.mark.asyncio
    async def test_two_opens_produce_two_positions_and_rewards(self, aggregator: Aggregator) -> None:
        await aggregator.connect_wallet("0xABC")
        history = len(aggregator.reward_series)

        first = await aggregator.open_position("ETH", 100, "supply")
        second = await aggregator.open_position("ETH", 100, "supply")

        assert len(aggregator.positions) == 2
        assert first == second
        assert first.rate == 2.3
        assert len(aggregator.reward_series) == history + 2
        assert aggregator.rewards_total == pytest.approx(5.0)


class TestOptimizationScenario:
    @pytest.mark.asyncio
    async def test_tick_flags_then_optimize_rewrites(self, make_random) -> None:
        config = AppConfig(
            simulator=SimulatorConfig(perturbation_bound=0.5),
            markets={"USDC": {"Base": {"MorphoBlue": 3.8, "AAVEV3": 3.6}}},
        )
        # 0.5 -> no move for MorphoBlue, 0.9 -> +0.4 for AAVEV3
        rng = make_random([0.5, 0.5, 0.9], default=0.5)
        aggregator = Aggregator(config, rng=rng)
        await aggregator.connect_wallet("0xABC")

        position = await aggregator.open_position("USDC", 100, "supply")  # draws 0.5
        assert (position.protocol, position.rate) == ("MorphoBlue", 3.8)

        degraded = await aggregator.tick()
        assert aggregator.rates["USDC"]["Base"]["AAVEV3"] == 4.0
        assert len(degraded) == 1
        assert aggregator.positions[0].is_optimal is False
        assert aggregator.positions[0].rate == 3.8
        warning = aggregator.notifications[0]
        assert warning.title == "Better Rate Available"
        assert warning.level is NotificationLevel.WARNING
        assert "4.00% on AAVEV3 (Base)" in warning.description

        optimized = await aggregator.optimize()
        assert (optimized[0].rate, optimized[0].protocol, optimized[0].is_optimal) == (4.0, "AAVEV3", True)
        assert aggregator.notifications[0].title == "Positions Optimized"

    @pytest.mark.asyncio
    async def test_unchanged_market_publishes_no_warning(self, aggregator: Aggregator) -> None:
        await aggregator.connect_wallet("0xABC")
        await aggregator.open_position("USDC", 100, "supply")
        before = len(aggregator.notifications)
        assert await aggregator.tick() == []
        assert len(aggregator.notifications) == before

    @pytest.mark.asyncio
    async def test_run_ticks(self, aggregator: Aggregator) -> None:
        await aggregator.run_ticks(3)
        assert aggregator._simulator.ticks == 3


class TestBridge:
    @pytest.mark.asyncio
    async def test_accepted(self, aggregator: Aggregator) -> None:
        await aggregator.connect_wallet("0xABC")
        request = await aggregator.bridge("Ethereum", "Optimism", "USDC", "50")
        assert request.destination_chain == "Optimism"
        latest = aggregator.notifications[0]
        assert latest.title == "Bridge Transaction Initiated"
        assert latest.description == "Bridging 50.00 USDC from Ethereum to Optimism."

    @pytest.mark.asyncio
    async def test_same_chain(self, aggregator: Aggregator) -> None:
        await aggregator.connect_wallet("0xABC")
        with pytest.raises(SameChain):
            await aggregator.bridge("Base", "Base", "USDC", 50)
        assert aggregator.notifications[0].title == "Invalid Bridge Transaction"

    @pytest.mark.asyncio
    async def test_invalid_amount(self, aggregator: Aggregator) -> None:
        await aggregator.connect_wallet("0xABC")
        with pytest.raises(InvalidInput):
            await aggregator.bridge("Ethereum", "Base", "USDC", "0")


class TestPublishing:
    @pytest.mark.asyncio
    async def test_failing_notifier_does_not_propagate(self, aggregator: Aggregator) -> None:
        broken = AsyncMock()
        broken.notify.side_effect = RuntimeError("boom")
        aggregator._notifiers.append(broken)

        await aggregator.connect_wallet("0xABC")

        broken.notify.assert_awaited_once()
        assert aggregator.wallet.connected

    @pytest.mark.asyncio
    async def test_listeners_receive_snapshots(self, aggregator: Aggregator) -> None:
        seen: list[MarketSnapshot] = []
        aggregator.add_listener(seen.append)
        await aggregator.connect_wallet("0xABC")
        await aggregator.open_position("USDC", 100, "supply")
        await aggregator.tick()

        assert len(seen) == 2
        assert len(seen[0].positions) == 1
        assert seen[1].rates["USDC"]["Base"]["MorphoBlue"] == 3.8

    @pytest.mark.asyncio
    async def test_clear_notifications(self, aggregator: Aggregator) -> None:
        await aggregator.connect_wallet("0xABC")
        aggregator.clear_notifications()
        assert aggregator.notifications == ()

    def test_referral_code(self, aggregator: Aggregator) -> None:
        assert aggregator.referral_code == "BLEND123"

    def test_bridge_chains(self, aggregator: Aggregator) -> None:
        assert aggregator.bridge_chains == ("Ethereum", "Optimism", "Base", "Mode")

    @pytest.mark.asyncio
    async def test_feed_is_bounded(self, make_random) -> None:
        config = AppConfig(notifications=NotificationsConfig(feed_max_items=3))
        aggregator = Aggregator(config, rng=make_random())
        for i in range(5):
            await aggregator.connect_wallet(f"0x{i}")
        assert len(aggregator.notifications) == 3


class TestRunContinuous:
    @pytest.mark.asyncio
    async def test_loop_survives_tick_errors(self, aggregator: Aggregator) -> None:
        calls = 0

        async def flaky_tick() -> list:
            nonlocal calls
            calls += 1
            if calls == 1:
                raise RuntimeError("tick failed")
            if calls == 3:
                raise asyncio.CancelledError
            return []

        with patch.object(aggregator, "tick", side_effect=flaky_tick):
            with patch("yield_aggregator.services.aggregator.asyncio.sleep", new=AsyncMock()) as sleep:
                with pytest.raises(asyncio.CancelledError):
                    await aggregator.run_continuous()

        assert calls == 3
        sleep.assert_awaited_with(5.0)

    @pytest.mark.asyncio
    async def test_explicit_zero_interval_is_kept(self, aggregator: Aggregator) -> None:
        with patch.object(aggregator, "tick", side_effect=[[], asyncio.CancelledError()]):
            with patch("yield_aggregator.services.aggregator.asyncio.sleep", new=AsyncMock()) as sleep:
                with pytest.raises(asyncio.CancelledError):
                    await aggregator.run_continuous(0.0)

        sleep.assert_awaited_once_with(0.0)
