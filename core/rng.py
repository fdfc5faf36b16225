"""
core.rng
Deterministic RNG helpers that do NOT rely on Python's built-in hash().

Goal:
- Same (base_seed + inputs) => same Random stream across platforms & runs.
- Rules only ever see the two RngSource primitives, so tests can replay a
  fixed sequence of draws.
"""

from __future__ import annotations

import hashlib
import json
import random
from typing import Any, Iterable, List, Protocol, Union


def stable_int_seed(*parts: Any, salt: str = "kingdom-idle") -> int:
    """SHA-256 of the canonical JSON of `parts`, cut to 32 bits.

    Non-JSON values go through str(), which is deterministic enough for
    seeds built from names, days and counters.
    """
    payload = json.dumps(parts, sort_keys=True, ensure_ascii=False, separators=(",", ":"), default=str)
    h = hashlib.sha256((salt + "|" + payload).encode("utf-8")).digest()
    return int.from_bytes(h[:4], "big", signed=False)


def rng_from(*parts: Any, base_seed: int) -> random.Random:
    """Create a Random instance from (base_seed + parts)."""
    seed = stable_int_seed(base_seed, *parts)
    return random.Random(seed)


class RngSource(Protocol):
    def draw_int(self, lo: int, hi: int) -> int:
        """Uniform integer in [lo, hi], both inclusive."""
        ...

    def draw_unit(self) -> float:
        """Uniform float in [0, 1)."""
        ...


class RandomSource:
    """RngSource backed by random.Random."""

    def __init__(self, rng: random.Random) -> None:
        self._rng = rng

    def draw_int(self, lo: int, hi: int) -> int:
        return self._rng.randint(int(lo), int(hi))

    def draw_unit(self) -> float:
        return self._rng.random()


def source_from(*parts: Any, base_seed: int) -> RandomSource:
    return RandomSource(rng_from(*parts, base_seed=base_seed))


class ScriptedSource:
    """Replays a fixed list of draws (for tests and replays).

    Ints are consumed by draw_int, floats by draw_unit, in call order.
    A value outside the requested range is a scripting mistake and raises.
    """

    def __init__(self, values: Iterable[Union[int, float]]) -> None:
        self._values: List[Union[int, float]] = list(values)
        self._pos = 0

    @property
    def remaining(self) -> int:
        return len(self._values) - self._pos

    def _next(self) -> Union[int, float]:
        if self._pos >= len(self._values):
            raise RuntimeError(f"ScriptedSource exhausted after {self._pos} draws")
        v = self._values[self._pos]
        self._pos += 1
        return v

    def draw_int(self, lo: int, hi: int) -> int:
        v = self._next()
        if isinstance(v, float) or not (int(lo) <= int(v) <= int(hi)):
            raise ValueError(f"scripted draw {v!r} is not an int in [{lo}, {hi}] (draw #{self._pos})")
        return int(v)

    def draw_unit(self) -> float:
        v = self._next()
        if not (0.0 <= float(v) < 1.0):
            raise ValueError(f"scripted unit draw {v!r} is not in [0, 1) (draw #{self._pos})")
        return float(v)
