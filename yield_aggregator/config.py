"""Configuration loader: reads config.yaml, interpolates env vars, validates."""
from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

# Rates the dashboard starts with when config.yaml has no ``markets`` section.
DEFAULT_MARKETS: dict[str, dict[str, dict[str, float]]] = {
    "USDC": {
        "Mode": {"LayerBank": 3.5, "IonicProtocol": 3.2},
        "Base": {"MorphoBlue": 3.8, "AAVEV3": 3.6, "Moonwell": 3.4},
        "Optimism": {"AAVEV3": 3.7, "CompoundV3": 3.3, "SiloFinance": 3.5},
    },
    "ETH": {
        "Mode": {"LayerBank": 2.1, "IonicProtocol": 2.0},
        "Base": {"MorphoBlue": 2.3, "AAVEV3": 2.2, "Moonwell": 2.1},
        "Optimism": {"AAVEV3": 2.2, "CompoundV3": 2.0, "SiloFinance": 2.1},
    },
}

# ---------------------------------------------------------------------------
# Frozen config dataclasses
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SimulatorConfig:
    tick_interval_seconds: float = 5.0
    perturbation_bound: float = 0.2
    rate_precision: int = 2


@dataclass(frozen=True)
class HistoryPoint:
    date: date
    amount: float


@dataclass(frozen=True)
class RewardsConfig:
    max_increment: float = 5.0
    token_symbol: str = "OP"
    history: tuple[HistoryPoint, ...] = ()


@dataclass(frozen=True)
class BridgeConfig:
    chains: tuple[str, ...] = ("Ethereum", "Optimism", "Base", "Mode")


@dataclass(frozen=True)
class TelegramConfig:
    enabled: bool = False
    bot_token: str = ""
    chat_id: str = ""


@dataclass(frozen=True)
class EmailConfig:
    enabled: bool = False
    recipient: str = ""
    smtp_server: str = "smtp.gmail.com"
    smtp_port: int = 587
    sender_email: str = ""
    sender_password: str = ""


@dataclass(frozen=True)
class NotificationsConfig:
    telegram: TelegramConfig = field(default_factory=TelegramConfig)
    email: EmailConfig = field(default_factory=EmailConfig)
    feed_max_items: int = 100


@dataclass(frozen=True)
class AppConfig:
    simulator: SimulatorConfig = field(default_factory=SimulatorConfig)
    rewards: RewardsConfig = field(default_factory=RewardsConfig)
    bridge: BridgeConfig = field(default_factory=BridgeConfig)
    markets: dict[str, dict[str, dict[str, float]]] = field(
        default_factory=lambda: {
            a: {c: dict(p) for c, p in chains.items()}
            for a, chains in DEFAULT_MARKETS.items()
        }
    )
    referral_code: str = "BLEND123"
    notifications: NotificationsConfig = field(default_factory=NotificationsConfig)


# ---------------------------------------------------------------------------
# Env interpolation
# ---------------------------------------------------------------------------

_ENV_VAR_RE = re.compile(r"\$\{([^}]+)}")


def _interpolate_env(value: Any) -> Any:
    """Recursively replace ${VAR} references with environment variable values."""
    if isinstance(value, str):
        return _ENV_VAR_RE.sub(lambda m: os.environ.get(m.group(1), ""), value)
    if isinstance(value, dict):
        return {k: _interpolate_env(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_interpolate_env(item) for item in value]
    return value


# ---------------------------------------------------------------------------
# YAML → dataclass builders
# ---------------------------------------------------------------------------


def _build_simulator(raw: dict[str, Any]) -> SimulatorConfig:
    return SimulatorConfig(
        tick_interval_seconds=float(raw.get("tick_interval_seconds", 5.0)),
        perturbation_bound=float(raw.get("perturbation_bound", 0.2)),
        rate_precision=int(raw.get("rate_precision", 2)),
    )


def _parse_date(value: Any) -> date:
    # PyYAML already turns unquoted ISO dates into ``date`` objects.
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value))


def _build_rewards(raw: dict[str, Any]) -> RewardsConfig:
    history = tuple(
        HistoryPoint(date=_parse_date(p["date"]), amount=float(p.get("amount", 0.0)))
        for p in raw.get("history", [])
    )
    return RewardsConfig(
        max_increment=float(raw.get("max_increment", 5.0)),
        token_symbol=str(raw.get("token_symbol", "OP")),
        history=history,
    )


def _build_bridge(raw: dict[str, Any]) -> BridgeConfig:
    if "chains" not in raw:
        return BridgeConfig()
    return BridgeConfig(chains=tuple(str(c) for c in raw["chains"]))


def _build_markets(raw: dict[str, Any] | None) -> dict[str, dict[str, dict[str, float]]]:
    if raw is None:
        return AppConfig().markets
    markets: dict[str, dict[str, dict[str, float]]] = {}
    for asset, chains in raw.items():
        markets[str(asset)] = {
            str(chain): {str(proto): float(rate) for proto, rate in (protocols or {}).items()}
            for chain, protocols in (chains or {}).items()
        }
    return markets


def _build_notifications(raw: dict[str, Any]) -> NotificationsConfig:
    tg = raw.get("telegram", {})
    em = raw.get("email", {})
    return NotificationsConfig(
        telegram=TelegramConfig(
            enabled=bool(tg.get("enabled", False)),
            bot_token=tg.get("bot_token", ""),
            chat_id=str(tg.get("chat_id", "")),
        ),
        email=EmailConfig(
            enabled=bool(em.get("enabled", False)),
            recipient=em.get("recipient", ""),
            smtp_server=em.get("smtp_server", "smtp.gmail.com"),
            smtp_port=int(em.get("smtp_port", 587)),
            sender_email=em.get("sender_email", ""),
            sender_password=em.get("sender_password", ""),
        ),
        feed_max_items=int(raw.get("feed_max_items", 100)),
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load_config(config_path: str | Path | None = None) -> AppConfig:
    """Load and validate application configuration from YAML + .env.

    Args:
        config_path: Path to config.yaml. Defaults to ``config.yaml`` in the
            project root (one level up from this package).
    """
    load_dotenv()

    if config_path is None:
        config_path = Path(__file__).resolve().parent.parent / "config.yaml"
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path) as f:
        raw = yaml.safe_load(f) or {}

    raw = _interpolate_env(raw)

    cfg = AppConfig(
        simulator=_build_simulator(raw.get("simulator", {})),
        rewards=_build_rewards(raw.get("rewards", {})),
        bridge=_build_bridge(raw.get("bridge", {})),
        markets=_build_markets(raw.get("markets")),
        referral_code=str(raw.get("referral_code", "BLEND123")),
        notifications=_build_notifications(raw.get("notifications", {})),
    )

    _validate(cfg)
    logger.info("Configuration loaded from %s", config_path)
    return cfg


def _validate(cfg: AppConfig) -> None:
    """Raise on invalid configuration."""
    if not any(p for chains in cfg.markets.values() for p in chains.values()):
        raise ValueError("At least one market rate must be configured")

    for asset, chains in cfg.markets.items():
        for chain, protocols in chains.items():
            for protocol, rate in protocols.items():
                if rate < 0:
                    raise ValueError(
                        f"Market '{asset}/{chain}/{protocol}' has negative rate {rate}"
                    )

    if cfg.simulator.tick_interval_seconds <= 0:
        raise ValueError("tick_interval_seconds must be positive")
    if cfg.simulator.perturbation_bound < 0:
        raise ValueError("perturbation_bound must not be negative")
    if cfg.simulator.rate_precision < 0:
        raise ValueError("rate_precision must not be negative")
    if cfg.rewards.max_increment < 0:
        raise ValueError("max_increment must not be negative")
    if cfg.notifications.feed_max_items <= 0:
        raise ValueError("feed_max_items must be positive")
