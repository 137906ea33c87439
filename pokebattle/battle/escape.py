"""Flee odds for wild battles."""
from __future__ import annotations
import random


def flee_odds(runner_speed: int, foe_speed: int, attempts: int) -> int:
    """Escape threshold out of 256; above 255 the escape is guaranteed.

    ``attempts`` counts this try, so the first attempt passes 1.
    """
    return (runner_speed * 128) // max(1, foe_speed) + 30 * max(1, attempts)


def flee_success(rng: random.Random, runner_speed: int, foe_speed: int, attempts: int) -> bool:
    odds = flee_odds(runner_speed, foe_speed, attempts)
    if odds > 255:
        return True
    return rng.randint(0, 255) < odds


__all__ = ["flee_odds", "flee_success"]
