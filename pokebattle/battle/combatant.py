"""Battle-bound copy of a roster member."""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from pokebattle.core.errors import ValidationError
from .experience import apply_experience
from .models import Gender, Move, MoveSlot, RosterMember, Species, MAX_MOVES
from .pool import BoundedPool
from .stats import (
    StatBlock, Stages, derive_stats, apply_stat_stage,
    MIN_LEVEL, MAX_LEVEL, MAX_IV, MAX_EV,
)


@dataclass(eq=False)
class Combatant:
    species: Species
    level: int
    ivs: StatBlock
    evs: StatBlock = field(default_factory=StatBlock)
    moves: List[MoveSlot] = field(default_factory=list)
    nickname: Optional[str] = None
    gender: Gender = Gender.NONE
    exp: int = 0
    health: BoundedPool = field(init=False)
    stages: Stages = field(default_factory=Stages)
    run_count: int = 0

    def __post_init__(self):
        if not MIN_LEVEL <= self.level <= MAX_LEVEL:
            raise ValidationError(f"Level {self.level} outside {MIN_LEVEL}..{MAX_LEVEL}")
        self.ivs.check_range(0, MAX_IV, "IV")
        self.evs.check_range(0, MAX_EV, "EV")
        if not 1 <= len(self.moves) <= MAX_MOVES:
            raise ValidationError(f"{self.name}: expected 1..{MAX_MOVES} moves, got {len(self.moves)}")
        self.health = BoundedPool(self.stats.hp)

    # -- identity ----------------------------------------------------------
    @property
    def name(self) -> str:
        return self.nickname or self.species.display_name

    @property
    def types(self):
        return self.species.types

    @property
    def growth_rate(self) -> str:
        return self.species.growth_rate

    def __repr__(self) -> str:
        return f"Combatant({self.name} Lv{self.level} HP {self.health})"

    # -- stats -------------------------------------------------------------
    @property
    def stats(self) -> StatBlock:
        return derive_stats(self.species.base_stats, self.ivs, self.evs, self.level)

    def final_stat(self, name: str) -> int:
        """Derived stat with the current stage applied."""
        return apply_stat_stage(getattr(self.stats, name), getattr(self.stages, name))

    @property
    def speed(self) -> int:
        return self.final_stat("speed")

    # -- state -------------------------------------------------------------
    @property
    def fainted(self) -> bool:
        return self.health.empty

    def usable_moves(self) -> List[MoveSlot]:
        return [s for s in self.moves if s.usable]

    def slot_for(self, move: Move | str) -> MoveSlot:
        name = move if isinstance(move, str) else move.name
        for slot in self.moves:
            if slot.move.name == name:
                return slot
        raise ValidationError(f"{self.name} does not know {name}")

    def reset_battle_state(self) -> None:
        """Clear transient modifiers when leaving the field."""
        self.stages.reset()
        self.run_count = 0

    def gain_experience(self, amount: int) -> dict:
        """Apply XP; each new level raises max HP and current HP by the same delta."""
        before_hp = self.stats.hp
        result = apply_experience(self, amount)
        if result["leveled"]:
            delta = self.stats.hp - before_hp
            self.health.set_maximum(self.stats.hp)
            if not self.fainted:
                self.health.add(delta)
        return result

    # -- roster conversion -------------------------------------------------
    @classmethod
    def from_roster_member(cls, member: RosterMember, species: Species,
                           move_lookup: Callable[[str], Move]) -> "Combatant":
        slots = [MoveSlot.fresh(move_lookup(n), remaining) for n, remaining in member.moves]
        c = cls(
            species=species, level=member.level, ivs=member.ivs, evs=member.evs,
            moves=slots, nickname=member.nickname, gender=member.gender, exp=member.exp,
        )
        if member.current_hp is not None:
            c.health.set_current(member.current_hp)
        return c

    def to_roster_member(self) -> RosterMember:
        return RosterMember(
            species_id=self.species.id,
            level=self.level,
            ivs=self.ivs,
            evs=self.evs,
            nickname=self.nickname,
            gender=self.gender,
            exp=self.exp,
            moves=[(s.move.name, s.uses.current) for s in self.moves],
            current_hp=self.health.current,
        )


__all__ = ["Combatant"]
