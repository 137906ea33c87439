"""Runtime loader for the move catalog.

Moves are keyed by a slug of their display name ("Thunder Shock" ->
"thunder-shock"), so either spelling resolves.
"""
from __future__ import annotations
from functools import lru_cache
from typing import Dict

from pokebattle.battle.models import Move
from pokebattle.core.errors import DataLoadError, PokeBattleError, ValidationError
from pokebattle.core.logging import logger
from pokebattle.core.paths import CATALOG
from .validate import load_validated_json

MOVES_FILE = CATALOG / "moves.json"

class MoveNotFound(PokeBattleError):
    pass

def move_slug(name: str) -> str:
    return "-".join(name.strip().lower().replace("_", " ").split())

def move_from_json(raw: dict) -> Move:
    return Move(
        name=raw["name"],
        type=raw["type"],
        category=raw["category"],
        power=int(raw.get("power") or 0),
        accuracy=raw.get("accuracy"),
        priority=int(raw.get("priority", 0)),
        max_pp=int(raw["pp"]),
    )

@lru_cache(maxsize=None)
def all_moves() -> Dict[str, Move]:
    out: Dict[str, Move] = {}
    for raw in load_validated_json(MOVES_FILE, "moves"):
        try:
            mv = move_from_json(raw)
        except ValidationError as e:
            raise DataLoadError(str(MOVES_FILE), f"move {raw.get('name')}: {e}") from e
        slug = move_slug(mv.name)
        if slug in out:
            raise DataLoadError(str(MOVES_FILE), f"duplicate move {mv.name}")
        out[slug] = mv
    logger.info("MoveCatalogLoaded", count=len(out))
    return out

def get_move(name: str) -> Move:
    try:
        return all_moves()[move_slug(name)]
    except KeyError:
        raise MoveNotFound(f"Move not found: {name}") from None

__all__ = ["MoveNotFound", "get_move", "all_moves", "move_slug", "move_from_json"]
