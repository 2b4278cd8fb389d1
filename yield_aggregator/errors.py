"""Errors raised by the aggregation engine.

All of them are recoverable: the caller surfaces a notification and no
engine state has been modified.
"""


class AggregatorError(Exception):
    """Base class for engine errors."""


class InvalidInput(AggregatorError):
    """Amount is non-numeric, non-finite or not greater than zero, or the action is unknown."""


class NoRateAvailable(AggregatorError):
    """The rate table holds no entry for the requested asset."""


class SameChain(AggregatorError):
    """Bridge source and destination chains are identical."""


class WalletNotConnected(AggregatorError):
    """Operation requires a connected wallet."""
