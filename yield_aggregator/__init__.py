"""Simulated cross-chain lending rate aggregator."""

__version__ = "0.1.0"
