"""Random source protocol: lets tests make draws deterministic."""
from typing import Protocol


class RandomSource(Protocol):
    """Anything with a ``random()`` returning a float in [0, 1), e.g. ``random.Random``."""

    def random(self) -> float: ...
