"""In-memory rate table keyed by asset → chain → protocol."""
from __future__ import annotations

from collections.abc import Iterator, Mapping

RateMap = dict[str, dict[str, dict[str, float]]]


def _copy(rates: Mapping[str, Mapping[str, Mapping[str, float]]]) -> RateMap:
    return {
        asset: {
            chain: {protocol: float(rate) for protocol, rate in protocols.items()}
            for chain, protocols in chains.items()
        }
        for asset, chains in rates.items()
    }


class RateTable:
    """Current interest rates (percent) per (asset, chain, protocol).

    Missing triples are absent, never zero. Iteration follows insertion
    order, which the oracle relies on for tie-breaking. Bulk updates go
    through :meth:`replace`, which swaps the whole mapping in one step so
    readers never observe a half-updated table.
    """

    def __init__(
        self, rates: Mapping[str, Mapping[str, Mapping[str, float]]] | None = None
    ) -> None:
        self._rates: RateMap = {}
        if rates:
            for asset, chains in rates.items():
                for chain, protocols in chains.items():
                    for protocol, rate in protocols.items():
                        self.set(asset, chain, protocol, rate)

    def set(self, asset: str, chain: str, protocol: str, rate: float) -> None:
        """Seed or add a single rate."""
        rate = float(rate)
        if rate < 0:
            raise ValueError(
                f"Negative rate {rate} for {asset}/{chain}/{protocol}"
            )
        self._rates.setdefault(asset, {}).setdefault(chain, {})[protocol] = rate

    def get(self, asset: str, chain: str, protocol: str) -> float | None:
        return self._rates.get(asset, {}).get(chain, {}).get(protocol)

    def replace(self, rates: Mapping[str, Mapping[str, Mapping[str, float]]]) -> None:
        """Atomically swap in a complete new table."""
        self._rates = _copy(rates)

    def assets(self) -> list[str]:
        return list(self._rates)

    def chains(self, asset: str) -> list[str]:
        return list(self._rates.get(asset, {}))

    def entries(self, asset: str | None = None) -> Iterator[tuple[str, str, str, float]]:
        """Yield ``(asset, chain, protocol, rate)`` in table order."""
        rates = self._rates
        assets = [asset] if asset is not None else list(rates)
        for a in assets:
            for chain, protocols in rates.get(a, {}).items():
                for protocol, rate in protocols.items():
                    yield a, chain, protocol, rate

    def snapshot(self) -> RateMap:
        """Deep copy of the table for display or for building the next tick."""
        return _copy(self._rates)

    def __contains__(self, asset: object) -> bool:
        return asset in self._rates

    def __len__(self) -> int:
        return sum(1 for _ in self.entries())
