"""Service modules"""
from .aggregator import Aggregator
from .bridge import BridgeValidator
from .optimizer import OptimizationService, PositionLedger
from .rewards import RewardAccrualModel

__all__ = [
    "Aggregator",
    "BridgeValidator",
    "OptimizationService",
    "PositionLedger",
    "RewardAccrualModel",
]
