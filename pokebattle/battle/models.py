"""Plain data records shared by the engine, the catalogs and the factory."""
from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from pokebattle.core.errors import ValidationError
from pokebattle.core.logging import logger
from pokebattle.core.types import normalize_type, normalize_types
from .choice import choose_weighted
from .experience import normalize_growth_rate
from .pool import BoundedPool
from .stats import StatBlock, MIN_LEVEL, MAX_LEVEL, MAX_IV, MAX_EV

MOVE_CATEGORIES = ("physical", "special", "status")
MAX_MOVES = 4


@dataclass(frozen=True)
class Move:
    name: str
    type: str
    category: str  # physical | special | status
    power: int = 0
    accuracy: Optional[int] = 100  # None never misses
    priority: int = 0
    max_pp: int = 35

    def __post_init__(self):
        object.__setattr__(self, "type", normalize_type(self.type))
        if self.category not in MOVE_CATEGORIES:
            raise ValidationError(f"Move {self.name}: unknown category '{self.category}'")
        if self.max_pp < 1:
            raise ValidationError(f"Move {self.name}: max_pp must be positive")

    @property
    def is_status(self) -> bool:
        return self.category == "status" or self.power <= 0


@dataclass
class MoveSlot:
    move: Move
    uses: BoundedPool

    @classmethod
    def fresh(cls, move: Move, remaining: Optional[int] = None) -> "MoveSlot":
        return cls(move, BoundedPool(move.max_pp, remaining))

    @property
    def usable(self) -> bool:
        return not self.uses.empty

    def __str__(self) -> str:
        return f"{self.move.name} ({self.uses})"


class Gender(str, Enum):
    MALE = "male"
    FEMALE = "female"
    NONE = "none"


@dataclass(frozen=True)
class GenderRatio:
    """Male/female split in percent; (0, 0) means genderless."""
    male: float = 50
    female: float = 50

    # catalog sentinels inherited from the raw species dumps
    _GENDERLESS_SENTINEL = (250, 156)
    _FEMALE_ONLY_SENTINEL = (254, 102)

    @classmethod
    def from_raw(cls, male: float, female: float) -> "GenderRatio":
        pair = (float(male), float(female))
        if pair == cls._GENDERLESS_SENTINEL or pair == (0, 0):
            return cls(0, 0)
        if pair == cls._FEMALE_ONLY_SENTINEL:
            return cls(0, 100)
        if pair[0] < 0 or pair[1] < 0 or abs(sum(pair) - 100) > 1e-9:
            logger.warn("GenderRatioCoerced", male=male, female=female)
            return cls(50, 50)
        return cls(*pair)

    @property
    def genderless(self) -> bool:
        return self.male == 0 and self.female == 0

    def roll(self, rng) -> Gender:
        if self.genderless:
            return Gender.NONE
        return choose_weighted([(self.male / 100, Gender.MALE), (self.female / 100, Gender.FEMALE)], rng)


class TrainerRank(Enum):
    NORMAL = 0
    GRUNT = 10
    ELITE = 20
    GYM_LEADER = 40
    ELITE_FOUR = 60
    CHAMPION = 80

    @property
    def effort(self) -> int:
        return self.value

    @classmethod
    def parse(cls, raw: str) -> "TrainerRank":
        key = raw.strip().upper().replace("-", "_").replace(" ", "_")
        try:
            return cls[key]
        except KeyError:
            raise ValidationError(f"Unknown trainer rank '{raw}'") from None


@dataclass(frozen=True)
class Species:
    id: int
    name: str
    types: Tuple[str, ...]
    base_stats: StatBlock
    growth_rate: str = "medium-fast"
    gender_ratio: GenderRatio = field(default_factory=GenderRatio)
    base_experience: int = 64
    learnset: Tuple[Tuple[int, str], ...] = ()  # (level, move name), ascending

    def __post_init__(self):
        object.__setattr__(self, "types", normalize_types(self.types))
        object.__setattr__(self, "growth_rate", normalize_growth_rate(self.growth_rate))
        self.base_stats.check_range(1, 255, f"{self.name} base stat")

    @property
    def display_name(self) -> str:
        return self.name.capitalize()

    def moves_at(self, level: int) -> List[str]:
        """Last four distinct learnset moves available at ``level``."""
        known: List[str] = []
        for lvl, name in sorted(self.learnset, key=lambda e: e[0]):
            if lvl > level:
                break
            if name in known:
                known.remove(name)
            known.append(name)
        return known[-MAX_MOVES:]


@dataclass
class RosterMember:
    """Persistent roster snapshot read into and written back from a battle."""
    species_id: int
    level: int
    ivs: StatBlock
    evs: StatBlock = field(default_factory=StatBlock)
    nickname: Optional[str] = None
    gender: Gender = Gender.NONE
    exp: int = 0
    moves: List[Tuple[str, Optional[int]]] = field(default_factory=list)  # (name, remaining uses)
    current_hp: Optional[int] = None  # None => full

    def __post_init__(self):
        if not MIN_LEVEL <= self.level <= MAX_LEVEL:
            raise ValidationError(f"Level {self.level} outside {MIN_LEVEL}..{MAX_LEVEL}")
        self.ivs.check_range(0, MAX_IV, "IV")
        self.evs.check_range(0, MAX_EV, "EV")
        if not 1 <= len(self.moves) <= MAX_MOVES:
            raise ValidationError(f"Expected 1..{MAX_MOVES} moves, got {len(self.moves)}")

    @property
    def fainted(self) -> bool:
        return self.current_hp == 0

    def to_json(self) -> Dict[str, Any]:
        return {
            "species_id": self.species_id,
            "level": self.level,
            "nickname": self.nickname,
            "gender": self.gender.value,
            "exp": self.exp,
            "ivs": self.ivs.as_dict(),
            "evs": self.evs.as_dict(),
            "moves": [{"name": n, "remaining": r} for n, r in self.moves],
            "current_hp": self.current_hp,
        }

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "RosterMember":
        return cls(
            species_id=int(data["species_id"]),
            level=int(data["level"]),
            nickname=data.get("nickname"),
            gender=Gender(data.get("gender", "none")),
            exp=int(data.get("exp", 0)),
            ivs=StatBlock.from_mapping(data["ivs"]),
            evs=StatBlock.from_mapping(data.get("evs") or StatBlock().as_dict()),
            moves=[(m["name"], m.get("remaining")) for m in data["moves"]],
            current_hp=data.get("current_hp"),
        )


__all__ = [
    "Move", "MoveSlot", "Gender", "GenderRatio", "TrainerRank", "Species", "RosterMember",
    "MOVE_CATEGORIES", "MAX_MOVES",
]
