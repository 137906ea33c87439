"""Experience curves, XP awards & level-up handling.

Six growth groups, each a published cubic or piecewise-cubic curve giving the
total XP needed to reach a level from zero. Combatants store XP earned since
their last level-up, so a level costs ``xp_for_next_level(rate, level)``.
"""
from __future__ import annotations
from fractions import Fraction
from typing import Callable, Dict

from pokebattle.core.errors import ValidationError
from .stats import MIN_LEVEL, MAX_LEVEL

GROWTH_RATES = ("erratic", "fast", "medium-fast", "medium-slow", "slow", "fluctuating")
GROWTH_RATE_DEFAULT = "medium-fast"

_ALIASES = {
    "erratic": "erratic",
    "fast": "fast",
    "mediumfast": "medium-fast",
    "medium-fast": "medium-fast",
    "medium": "medium-fast",
    "mediumslow": "medium-slow",
    "medium-slow": "medium-slow",
    "slow": "slow",
    "fluctuating": "fluctuating",
}


def clamp_level(level: int) -> int:
    return max(MIN_LEVEL, min(int(level), MAX_LEVEL))


def normalize_growth_rate(raw: str) -> str:
    key = str(raw).strip().lower().replace("_", "-").replace(" ", "-")
    try:
        return _ALIASES[key]
    except KeyError:
        raise ValidationError(f"Unknown growth rate '{raw}'") from None


def _erratic(n: int) -> Fraction:
    cube = n ** 3
    if n <= 50:
        return Fraction(cube * (100 - n), 50)
    if n <= 68:
        return Fraction(cube * (150 - n), 100)
    if n <= 98:
        return Fraction(cube * ((1911 - 10 * n) // 3), 500)
    return Fraction(cube * (160 - n), 100)

def _fluctuating(n: int) -> Fraction:
    cube = n ** 3
    if n <= 15:
        return Fraction(cube * ((n + 1) // 3 + 24), 50)
    if n <= 36:
        return Fraction(cube * (n + 14), 50)
    return Fraction(cube * (n // 2 + 32), 50)

_CURVES: Dict[str, Callable[[int], Fraction]] = {
    "erratic": _erratic,
    "fast": lambda n: Fraction(4 * n ** 3, 5),
    "medium-fast": lambda n: Fraction(n ** 3),
    "medium-slow": lambda n: Fraction(6 * n ** 3, 5) - 15 * n ** 2 + 100 * n - 140,
    "slow": lambda n: Fraction(5 * n ** 3, 4),
    "fluctuating": _fluctuating,
}


def xp_to_reach_level(rate: str, level: int) -> int:
    """Total XP from zero to ``level``; level 1 (and below) costs nothing."""
    curve = _CURVES[normalize_growth_rate(rate)]
    if level <= MIN_LEVEL:
        return 0
    # medium-slow dips below zero at the bottom of the curve
    return max(0, int(curve(min(level, MAX_LEVEL))))


def xp_for_next_level(rate: str, level: int) -> int:
    if level >= MAX_LEVEL:
        return 0
    return max(0, xp_to_reach_level(rate, level + 1) - xp_to_reach_level(rate, level))


def exp_gain(base_experience: int, defeated_level: int) -> int:
    """XP awarded for knocking out a combatant: ``base_exp * level // 7``."""
    return max(0, int(base_experience)) * max(1, int(defeated_level)) // 7


def apply_experience(member, gained: int) -> dict:
    """Add XP to any object with ``level``, ``exp`` and ``growth_rate`` fields.

    Spends XP on level-ups while it covers the next level; leftover XP at the
    level cap is discarded.
    """
    before = member.level
    member.exp = getattr(member, "exp", 0) + max(0, int(gained))
    while member.level < MAX_LEVEL:
        cost = xp_for_next_level(member.growth_rate, member.level)
        if member.exp < cost:
            break
        member.exp -= cost
        member.level += 1
    if member.level >= MAX_LEVEL:
        member.level = MAX_LEVEL
        member.exp = 0
    return {"gained": gained, "leveled": member.level != before, "from": before, "to": member.level}


__all__ = [
    "GROWTH_RATES", "GROWTH_RATE_DEFAULT", "clamp_level", "normalize_growth_rate",
    "xp_to_reach_level", "xp_for_next_level", "exp_gain", "apply_experience",
]
