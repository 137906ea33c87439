"""Weighted random selection over explicit (weight, value) distributions.

Weights are proportions that must already add up to one. ``choose_weighted``
never normalises: a table that is not a distribution is a content bug and
raises ``DistributionError`` before any value is drawn. The draw itself walks
the table subtracting each weight from a uniform sample in [0, 1).
"""
from __future__ import annotations
import math
import random
from typing import Iterable, Sequence, Tuple, TypeVar

from pokebattle.core.errors import DistributionError

T = TypeVar("T")

DEFAULT_TOLERANCE = 1e-6


def choose_weighted(pairs: Sequence[Tuple[float, T]], rng: random.Random | None = None) -> T:
    validate_distribution(w for w, _ in pairs)
    rng = rng or random.Random()
    r = rng.random()
    for weight, value in pairs:
        if r < weight:
            return value
        r -= weight
    # float residue from summing exact thirds and the like
    return pairs[-1][1]


def equal_weights(values: Iterable[T]) -> list[Tuple[float, T]]:
    """Uniform distribution over ``values``."""
    items = list(values)
    if not items:
        return []
    share = 1.0 / len(items)
    return [(share, v) for v in items]


def validate_distribution(weights: Iterable[float], *, tolerance: float = DEFAULT_TOLERANCE) -> float:
    """Return the total of ``weights`` or raise if it is not a distribution."""
    ws = list(weights)
    if not ws:
        raise DistributionError(0.0, "distribution is empty")
    for w in ws:
        if w < 0 or math.isnan(w):
            raise DistributionError(sum(ws), f"invalid weight {w!r}")
    total = math.fsum(ws)
    if abs(total - 1.0) > tolerance:
        raise DistributionError(total)
    return total


__all__ = ["choose_weighted", "equal_weights", "validate_distribution", "DEFAULT_TOLERANCE"]
