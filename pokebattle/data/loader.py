"""Runtime loader for the species catalog.

Provides cached, read-only access to ``assets/catalog/species.json``,
validated against ``schema/species.schema.json``.
"""
from __future__ import annotations
from functools import lru_cache
from typing import Dict, List, Optional, Tuple

from pokebattle.battle.models import GenderRatio, Species
from pokebattle.battle.stats import StatBlock
from pokebattle.core.errors import DataLoadError, PokeBattleError, ValidationError
from pokebattle.core.logging import logger
from pokebattle.core.paths import CATALOG
from .moves import MoveNotFound, get_move
from .validate import load_validated_json

SPECIES_FILE = CATALOG / "species.json"

class SpeciesNotFound(PokeBattleError):
    pass

def species_from_json(raw: dict) -> Species:
    ratio = raw["gender_ratio"]
    return Species(
        id=int(raw["id"]),
        name=raw["name"].lower(),
        types=tuple(raw["types"]),
        base_stats=StatBlock.from_mapping(raw["base_stats"]),
        growth_rate=raw["growth_rate"],
        gender_ratio=GenderRatio.from_raw(ratio["male"], ratio["female"]),
        base_experience=int(raw["base_experience"]),
        learnset=tuple((int(lvl), str(name)) for lvl, name in raw["learnset"]),
    )

@lru_cache(maxsize=None)
def _catalog() -> Dict[int, Species]:
    entries = load_validated_json(SPECIES_FILE, "species")
    out: Dict[int, Species] = {}
    for raw in entries:
        try:
            sp = species_from_json(raw)
        except ValidationError as e:
            raise DataLoadError(str(SPECIES_FILE), f"species {raw.get('id')}: {e}") from e
        if sp.id in out:
            raise DataLoadError(str(SPECIES_FILE), f"duplicate species id {sp.id}")
        out[sp.id] = sp
    logger.info("SpeciesCatalogLoaded", count=len(out))
    return out

def get_species(species_id: int) -> Species:
    try:
        return _catalog()[int(species_id)]
    except KeyError:
        raise SpeciesNotFound(f"Species id {species_id} not found") from None

@lru_cache(maxsize=None)
def all_species_ids() -> Tuple[int, ...]:
    return tuple(sorted(_catalog()))

@lru_cache(maxsize=None)
def find_by_name(name: str) -> Optional[Species]:
    name_lower = name.strip().lower()
    for sp in _catalog().values():
        if sp.name == name_lower:
            return sp
    return None

def resolve_species(query: str | int) -> Species:
    """Look up by numeric id or by name."""
    if isinstance(query, int) or str(query).isdigit():
        return get_species(int(query))
    sp = find_by_name(str(query))
    if sp is None:
        raise SpeciesNotFound(f"Species '{query}' not found")
    return sp

def check_learnsets() -> List[str]:
    """Learnset entries naming a move missing from the move catalog."""
    problems: List[str] = []
    for sp in _catalog().values():
        for lvl, name in sp.learnset:
            try:
                get_move(name)
            except MoveNotFound:
                problems.append(f"{sp.name} Lv{lvl}: unknown move {name}")
    return problems

__all__ = ["SpeciesNotFound", "get_species", "all_species_ids", "find_by_name", "resolve_species", "species_from_json",
           "check_learnsets"]
