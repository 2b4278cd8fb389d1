"""Shared test fixtures and sample data."""
from __future__ import annotations

import textwrap
from datetime import date
from pathlib import Path

import pytest

from yield_aggregator.config import (
    AppConfig,
    EmailConfig,
    HistoryPoint,
    NotificationsConfig,
    RewardsConfig,
    SimulatorConfig,
    TelegramConfig,
)
from yield_aggregator.markets import RateOracle, RateTable
from yield_aggregator.services import OptimizationService, PositionLedger, RewardAccrualModel


class FixedRandom:
    """Deterministic random source replaying ``values``, then ``default``."""

    def __init__(self, values: list[float] | None = None, default: float = 0.5) -> None:
        self.values = list(values or [])
        self.default = default
        self.calls = 0

    def random(self) -> float:
        self.calls += 1
        if self.values:
            return self.values.pop(0)
        return self.default


# ---------------------------------------------------------------------------
# Market fixtures
# ---------------------------------------------------------------------------

SAMPLE_MARKETS = {
    "USDC": {
        "Base": {"MorphoBlue": 3.8, "AAVEV3": 3.6},
        "Optimism": {"AAVEV3": 3.7, "CompoundV3": 3.3},
    },
    "ETH": {
        "Base": {"MorphoBlue": 2.3, "AAVEV3": 2.2},
        "Optimism": {"CompoundV3": 2.0},
    },
}


@pytest.fixture()
def fixed_random() -> FixedRandom:
    return FixedRandom()


@pytest.fixture()
def make_random() -> type[FixedRandom]:
    return FixedRandom


@pytest.fixture()
def rate_table() -> RateTable:
    return RateTable(SAMPLE_MARKETS)


@pytest.fixture()
def oracle(rate_table: RateTable) -> RateOracle:
    return RateOracle(rate_table)


@pytest.fixture()
def rewards(fixed_random: FixedRandom) -> RewardAccrualModel:
    return RewardAccrualModel(
        RewardsConfig(max_increment=5.0),
        fixed_random,
        today=lambda: date(2024, 5, 1),
    )


@pytest.fixture()
def service(oracle: RateOracle, rewards: RewardAccrualModel) -> OptimizationService:
    return OptimizationService(oracle, PositionLedger(), rewards)


# ---------------------------------------------------------------------------
# Config fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def sample_app_config() -> AppConfig:
    return AppConfig(
        simulator=SimulatorConfig(
            tick_interval_seconds=5.0, perturbation_bound=0.2, rate_precision=2
        ),
        rewards=RewardsConfig(
            max_increment=5.0,
            token_symbol="OP",
            history=(HistoryPoint(date=date(2023, 10, 1), amount=10.0),),
        ),
        markets={a: {c: dict(p) for c, p in chains.items()} for a, chains in SAMPLE_MARKETS.items()},
        notifications=NotificationsConfig(
            telegram=TelegramConfig(enabled=False),
            email=EmailConfig(enabled=False),
        ),
    )


SAMPLE_YAML = textwrap.dedent("""\
    simulator:
      tick_interval_seconds: 2
      perturbation_bound: 0.3
      rate_precision: 3
    rewards:
      max_increment: 4.0
      token_symbol: OP
      history:
        - {date: 2023-10-01, amount: 10}
        - {date: "2023-10-02", amount: 15}
    referral_code: TEST42
    bridge:
      chains: [Ethereum, Base]
    markets:
      USDC:
        Base: {MorphoBlue: 3.8, AAVEV3: 3.6}
      ETH:
        Mode: {LayerBank: 2.1}
    notifications:
      telegram:
        enabled: true
        bot_token: "tok"
        chat_id: 999
      email:
        enabled: false
""")


@pytest.fixture()
def sample_yaml_path(tmp_path: Path) -> Path:
    cfg_file = tmp_path / "config.yaml"
    cfg_file.write_text(SAMPLE_YAML)
    return cfg_file
