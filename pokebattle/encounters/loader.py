"""Wild encounter tables: per-location grass rate and weighted spawn list.

A step in tall grass starts an encounter when ``random() * 187.5 < rate``;
the species is then drawn with ``choose_weighted`` over spawn percentages
and the level uniformly from the spawn's range.
"""
from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
import random
from typing import Dict, List, Optional, Tuple

from pokebattle.battle.choice import choose_weighted, validate_distribution
from pokebattle.core.errors import DataLoadError, DistributionError, PokeBattleError
from pokebattle.core.logging import logger
from pokebattle.core.paths import ENCOUNTERS
from pokebattle.data.validate import load_validated_json

ENCOUNTER_ROLL_SCALE = 187.5

class EncounterRate:
    VERY_COMMON = 10.0
    COMMON = 8.5
    SEMI_RARE = 6.75
    RARE = 3.33
    VERY_RARE = 1.25

_NAMED_RATES = {
    "very_common": EncounterRate.VERY_COMMON,
    "common": EncounterRate.COMMON,
    "semi_rare": EncounterRate.SEMI_RARE,
    "rare": EncounterRate.RARE,
    "very_rare": EncounterRate.VERY_RARE,
}

class LocationNotFound(PokeBattleError):
    pass

@dataclass(frozen=True)
class Spawn:
    species: int
    percentage: float
    min_level: int
    max_level: int

    def level(self, rng: random.Random) -> int:
        if self.min_level == self.max_level:
            return self.min_level
        return rng.randint(self.min_level, self.max_level)

@dataclass(frozen=True)
class Location:
    key: str
    display_name: str
    grass_encounter_rate: float
    spawns: Tuple[Spawn, ...]

    def distribution(self) -> List[Tuple[float, Spawn]]:
        return [(s.percentage, s) for s in self.spawns]

def location_from_json(raw: dict, source: str = "<memory>") -> Location:
    rate = raw["grass_encounter_rate"]
    rate = _NAMED_RATES[rate] if isinstance(rate, str) else float(rate)
    spawns = []
    for s in raw["spawns"]:
        if s["min_level"] > s["max_level"]:
            raise DataLoadError(source, f"spawn {s['species']}: min_level above max_level")
        spawns.append(Spawn(int(s["species"]), float(s["percentage"]), int(s["min_level"]), int(s["max_level"])))
    return Location(
        key=raw["location"],
        display_name=raw.get("display_name") or raw["location"].replace("_", " ").title(),
        grass_encounter_rate=rate,
        spawns=tuple(spawns),
    )

_tables: Dict[str, Location] = {}

def load_locations(force: bool = False, root: Optional[Path] = None) -> Dict[str, Location]:
    if _tables and not force:
        return _tables
    _tables.clear()
    base = root or ENCOUNTERS
    if not base.exists():
        logger.warn("EncounterDirectoryMissing", path=str(base))
        return _tables
    for f in sorted(base.glob("*.json")):
        loc = location_from_json(load_validated_json(f, "encounters"), str(f))
        if loc.key in _tables:
            raise DataLoadError(str(f), f"duplicate location {loc.key}")
        _tables[loc.key] = loc
    logger.info("EncountersLoaded", count=len(_tables))
    return _tables

def get_location(key: str) -> Location:
    try:
        return load_locations()[key]
    except KeyError:
        raise LocationNotFound(f"Unknown location '{key}'") from None

def should_encounter(location: Location, rng: Optional[random.Random] = None) -> bool:
    rng = rng or random.Random()
    return rng.random() * ENCOUNTER_ROLL_SCALE < location.grass_encounter_rate

def roll_spawn(location: Location, rng: Optional[random.Random] = None) -> Tuple[int, int]:
    """(species id, level) for a wild encounter at ``location``."""
    rng = rng or random.Random()
    spawn = choose_weighted(location.distribution(), rng)
    return spawn.species, spawn.level(rng)

def validate_spawn_tables(locations: Optional[Dict[str, Location]] = None) -> Dict[str, float]:
    """Totals per location; raises DistributionError naming the first bad table."""
    totals: Dict[str, float] = {}
    for key, loc in (locations if locations is not None else load_locations()).items():
        try:
            totals[key] = validate_distribution(s.percentage for s in loc.spawns)
        except DistributionError as e:
            raise DistributionError(e.total, f"spawn table '{key}' weights do not add up to one") from e
    return totals

__all__ = [
    "EncounterRate", "Spawn", "Location", "LocationNotFound", "ENCOUNTER_ROLL_SCALE",
    "load_locations", "get_location", "location_from_json",
    "should_encounter", "roll_spawn", "validate_spawn_tables",
]
