"""Static elemental type-effectiveness chart (18 types, Gen VI+).

Only non-neutral matchups are stored; a missing (attacking, defending) pair
is x1. Dual-type defenders multiply the two single-type lookups.
"""
from __future__ import annotations
from types import MappingProxyType
from typing import Dict, Iterable, Mapping, Tuple

from pokebattle.core.types import normalize_type

_ROWS: Dict[str, Dict[str, float]] = {
    "normal":  {"rock": 0.5, "ghost": 0.0, "steel": 0.5},
    "fire":    {"fire": 0.5, "water": 0.5, "grass": 2.0, "ice": 2.0, "bug": 2.0, "rock": 0.5, "dragon": 0.5, "steel": 2.0},
    "water":   {"fire": 2.0, "water": 0.5, "grass": 0.5, "ground": 2.0, "rock": 2.0, "dragon": 0.5},
    "grass":   {"fire": 0.5, "water": 2.0, "grass": 0.5, "poison": 0.5, "ground": 2.0, "flying": 0.5, "bug": 0.5, "rock": 2.0, "dragon": 0.5, "steel": 0.5},
    "electric":{"water": 2.0,"electric": 0.5,"grass": 0.5,"ground": 0.0,"flying": 2.0,"dragon": 0.5},
    "ice":     {"fire": 0.5,"water": 0.5,"grass": 2.0,"ice": 0.5,"ground": 2.0,"flying": 2.0,"dragon": 2.0,"steel": 0.5},
    "fighting":{"normal": 2.0,"ice": 2.0,"rock": 2.0,"dark": 2.0,"steel": 2.0,"poison": 0.5,"flying": 0.5,"psychic": 0.5,"bug": 0.5,"ghost": 0.0,"fairy": 0.5},
    "poison":  {"grass": 2.0,"poison": 0.5,"ground": 0.5,"rock": 0.5,"ghost": 0.5,"steel": 0.0,"fairy": 2.0},
    "ground":  {"fire": 2.0,"electric": 2.0,"poison": 2.0,"rock": 2.0,"steel": 2.0,"grass": 0.5,"bug": 0.5,"flying": 0.0},
    "flying":  {"grass": 2.0,"fighting": 2.0,"bug": 2.0,"electric": 0.5,"rock": 0.5,"steel": 0.5},
    "psychic": {"fighting": 2.0,"poison": 2.0,"psychic": 0.5,"steel": 0.5,"dark": 0.0},
    "bug":     {"grass": 2.0,"psychic": 2.0,"dark": 2.0,"fire": 0.5,"fighting": 0.5,"poison": 0.5,"flying": 0.5,"ghost": 0.5,"steel": 0.5,"fairy": 0.5},
    "rock":    {"fire": 2.0,"ice": 2.0,"flying": 2.0,"bug": 2.0,"fighting": 0.5,"ground": 0.5,"steel": 0.5},
    "ghost":   {"ghost": 2.0,"psychic": 2.0,"dark": 0.5,"normal": 0.0},
    "dragon":  {"dragon": 2.0,"steel": 0.5,"fairy": 0.0},
    "dark":    {"ghost": 2.0,"psychic": 2.0,"fighting": 0.5,"dark": 0.5,"fairy": 0.5},
    "steel":   {"ice": 2.0,"rock": 2.0,"fire": 0.5,"water": 0.5,"electric": 0.5,"steel": 0.5,"fairy": 2.0},
    "fairy":   {"fire": 0.5,"fighting": 2.0,"poison": 0.5,"dragon": 2.0,"dark": 2.0,"steel": 0.5},
}

NEUTRAL = 1.0


class TypeChart:
    """Read-only (attacking, defending) -> multiplier lookup."""

    def __init__(self, rows: Mapping[str, Mapping[str, float]]):
        entries: Dict[Tuple[str, str], float] = {}
        for attacking, row in rows.items():
            atk = normalize_type(attacking)
            for defending, mult in row.items():
                if float(mult) != NEUTRAL:
                    entries[(atk, normalize_type(defending))] = float(mult)
        self._entries = MappingProxyType(entries)

    def __len__(self) -> int:
        return len(self._entries)

    def multiplier(self, attacking: str, defending: str) -> float:
        return self._entries.get((normalize_type(attacking), normalize_type(defending)), NEUTRAL)

    def effectiveness(self, attacking: str, defending: Iterable[str]) -> float:
        mult = NEUTRAL
        for t in defending:
            mult *= self.multiplier(attacking, t)
        return mult

    def entries(self) -> Mapping[Tuple[str, str], float]:
        return self._entries


def effectiveness_message(mult: float) -> str | None:
    """Narration line for an effectiveness value, or None when neutral."""
    if mult == 0:
        return "It had no effect!"
    if mult >= 4:
        return "It's extremely effective!"
    if mult > 1:
        return "It's super effective!"
    if mult <= 0.25:
        return "It's really not very effective..."
    if mult < 1:
        return "It's not very effective..."
    return None


TYPE_CHART = TypeChart(_ROWS)

__all__ = ["TypeChart", "TYPE_CHART", "NEUTRAL", "effectiveness_message"]
