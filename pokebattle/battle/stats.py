"""Derived-stat arithmetic and in-battle stat stages.

All stat math is integer (floor) division, Gen III+ family:

    HP    = ((iv + 2*base + ev//4) * level // 100) + level + 10
    other = ((iv + 2*base + ev//4) * level // 100) + 5
"""
from __future__ import annotations
from dataclasses import dataclass, fields, asdict
from fractions import Fraction
from typing import Dict, Mapping

from pokebattle.core.errors import ValidationError

MIN_LEVEL = 1
MAX_LEVEL = 100
MAX_IV = 31
MAX_EV = 255
MIN_STAGE = -6
MAX_STAGE = 6

STAT_NAMES = ("hp", "attack", "defense", "sp_atk", "sp_def", "speed")


@dataclass(frozen=True)
class StatBlock:
    hp: int = 0
    attack: int = 0
    defense: int = 0
    sp_atk: int = 0
    sp_def: int = 0
    speed: int = 0

    @classmethod
    def uniform(cls, value: int) -> "StatBlock":
        return cls(*(value for _ in STAT_NAMES))

    @classmethod
    def from_mapping(cls, data: Mapping[str, int]) -> "StatBlock":
        try:
            return cls(**{name: int(data[name]) for name in STAT_NAMES})
        except KeyError as e:
            raise ValidationError(f"Missing stat {e.args[0]!r}") from e

    def as_dict(self) -> Dict[str, int]:
        return asdict(self)

    def check_range(self, low: int, high: int, label: str) -> "StatBlock":
        for f in fields(self):
            v = getattr(self, f.name)
            if not low <= v <= high:
                raise ValidationError(f"{label} {f.name}={v} outside {low}..{high}")
        return self


def derived_stat(base: int, iv: int, ev: int, level: int, is_hp: bool) -> int:
    core = (iv + 2 * base + ev // 4) * level // 100
    if is_hp:
        return core + level + 10
    return core + 5


def derive_stats(base: StatBlock, ivs: StatBlock, evs: StatBlock, level: int) -> StatBlock:
    if not MIN_LEVEL <= level <= MAX_LEVEL:
        raise ValidationError(f"Level {level} outside {MIN_LEVEL}..{MAX_LEVEL}")
    return StatBlock(**{
        name: derived_stat(getattr(base, name), getattr(ivs, name), getattr(evs, name), level, name == "hp")
        for name in STAT_NAMES
    })


# ---------------------------------------------------------------------------
# Stage helpers
# ---------------------------------------------------------------------------

def clamp_stage(stage: int) -> int:
    return max(MIN_STAGE, min(MAX_STAGE, int(stage)))

def stage_multiplier_stat(stage: int) -> Fraction:
    """2/8 .. 8/2 family (stage -6 => 1/4, +6 => 4)."""
    s = clamp_stage(stage)
    return Fraction(2 + s, 2) if s >= 0 else Fraction(2, 2 - s)

def stage_multiplier_acc_eva(stage: int) -> Fraction:
    """3/9 .. 9/3 family (stage -6 => 1/3, +6 => 3)."""
    s = clamp_stage(stage)
    return Fraction(3 + s, 3) if s >= 0 else Fraction(3, 3 - s)

def apply_stat_stage(value: int, stage: int) -> int:
    return int(value * stage_multiplier_stat(stage))

def apply_accuracy_stage(value: int, stage: int) -> int:
    return int(value * stage_multiplier_acc_eva(stage))


@dataclass
class Stages:
    attack: int = 0
    defense: int = 0
    sp_atk: int = 0
    sp_def: int = 0
    speed: int = 0
    accuracy: int = 0
    evasion: int = 0

    def shift(self, stat: str, delta: int) -> int:
        """Move a stage by ``delta`` within -6..+6; returns the applied change."""
        if stat not in {f.name for f in fields(self)}:
            raise ValidationError(f"Unknown stage '{stat}'")
        before = getattr(self, stat)
        after = clamp_stage(before + delta)
        setattr(self, stat, after)
        return after - before

    def reset(self) -> None:
        for f in fields(self):
            setattr(self, f.name, 0)


__all__ = [
    "StatBlock", "Stages", "STAT_NAMES", "MIN_LEVEL", "MAX_LEVEL", "MAX_IV", "MAX_EV",
    "derived_stat", "derive_stats", "clamp_stage", "stage_multiplier_stat",
    "stage_multiplier_acc_eva", "apply_stat_stage", "apply_accuracy_stage",
]
