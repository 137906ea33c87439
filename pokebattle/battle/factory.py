"""Factory helpers for constructing Combatant instances from catalog data.

Shared across the session driver, the CLI and tests.
"""
from __future__ import annotations
import random
from typing import Optional, Sequence

from pokebattle.data.loader import get_species
from pokebattle.data.moves import get_move
from pokebattle.encounters.loader import Location, roll_spawn
from .combatant import Combatant
from .experience import clamp_level
from .models import MoveSlot, RosterMember, Species, TrainerRank
from .stats import StatBlock, STAT_NAMES, MAX_IV


def random_ivs(rng: random.Random) -> StatBlock:
    return StatBlock(**{name: rng.randint(0, MAX_IV) for name in STAT_NAMES})


def combatant_from_species(species: int | Species, level: int, *,
                           rng: Optional[random.Random] = None,
                           rank: Optional[TrainerRank] = None,
                           nickname: Optional[str] = None,
                           moves: Optional[Sequence[str]] = None,
                           ivs: Optional[StatBlock] = None) -> Combatant:
    """Fresh combatant with rolled IVs and gender.

    NPC trainer combatants get uniform EVs by ``rank``; wild and player
    combatants start at zero. Without ``moves`` the last four learnset moves
    at or below ``level`` are used.
    """
    rng = rng or random.Random()
    sp = species if isinstance(species, Species) else get_species(species)
    level = clamp_level(level)
    names = list(moves) if moves else sp.moves_at(level)
    evs = StatBlock.uniform(rank.effort) if rank is not None else StatBlock()
    return Combatant(
        species=sp,
        level=level,
        ivs=ivs if ivs is not None else random_ivs(rng),
        evs=evs,
        moves=[MoveSlot.fresh(get_move(n)) for n in names],
        nickname=nickname,
        gender=sp.gender_ratio.roll(rng),
    )


def combatant_from_roster(member: RosterMember) -> Combatant:
    return Combatant.from_roster_member(member, get_species(member.species_id), get_move)


def wild_combatant(location: Location, rng: Optional[random.Random] = None) -> Combatant:
    rng = rng or random.Random()
    species_id, level = roll_spawn(location, rng)
    return combatant_from_species(species_id, level, rng=rng)


__all__ = ["combatant_from_species", "combatant_from_roster", "wild_combatant", "random_ivs"]
