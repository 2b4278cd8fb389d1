"""Rate table, best-rate oracle and market simulator."""
from .oracle import RateOracle
from .simulator import RateSimulator
from .table import RateTable

__all__ = ["RateTable", "RateOracle", "RateSimulator"]
