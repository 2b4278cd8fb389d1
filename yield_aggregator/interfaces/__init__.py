"""Protocol interfaces for the yield aggregator."""
from .listener import SnapshotListener
from .notifier import Notifier
from .random_source import RandomSource

__all__ = ["Notifier", "RandomSource", "SnapshotListener"]
