"""Snapshot listener protocol: UI/API observers of engine state."""
from typing import Protocol

from ..models import MarketSnapshot


class SnapshotListener(Protocol):
    def __call__(self, snapshot: MarketSnapshot) -> None: ...
