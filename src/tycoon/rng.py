"""Seedable random streams, one per decision point.

Decision points in use: market.price, neon.shadow, heist.outcome,
arena.drones, arena.power_ups.
"""

from __future__ import annotations

import random


class RandomSource:
    """Hands out an independent `random.Random` per named decision point.

    With a seed, every stream is reproducible on its own: drawing from
    "arena.drones" never shifts the sequence seen by "heist.outcome".
    """

    def __init__(self, seed: int | None = None) -> None:
        self.seed = seed
        self._streams: dict[str, random.Random] = {}

    def stream(self, name: str) -> random.Random:
        rng = self._streams.get(name)
        if rng is None:
            rng = random.Random(f"{self.seed}:{name}") if self.seed is not None else random.Random()
            self._streams[name] = rng
        return rng
