"""Accuracy and damage resolution for a single move use."""
from __future__ import annotations
from dataclasses import dataclass
import random

from .combatant import Combatant
from .models import Move
from .stats import apply_accuracy_stage, clamp_stage
from .typechart import TYPE_CHART, TypeChart

STAB_BONUS = 1.5


@dataclass(frozen=True)
class DamageResult:
    amount: int
    effectiveness: float = 1.0
    stab: bool = False


def hit_chance(user: Combatant, target: Combatant, move: Move) -> int:
    """Percent chance to land ``move`` after accuracy/evasion stages, 0..100."""
    if move.accuracy is None:
        return 100
    stage = clamp_stage(user.stages.accuracy - target.stages.evasion)
    return max(0, min(100, apply_accuracy_stage(move.accuracy, stage)))


def accuracy_check(rng: random.Random, user: Combatant, target: Combatant, move: Move) -> bool:
    if move.accuracy is None:
        return True
    return rng.randint(0, 99) < hit_chance(user, target, move)


def calc_damage(user: Combatant, target: Combatant, move: Move, chart: TypeChart = TYPE_CHART) -> DamageResult:
    """Integer base damage scaled by type effectiveness and same-type bonus.

    Physical moves read Attack/Defense, special moves Sp. Atk/Sp. Def.
    Status moves always return zero.
    """
    if move.is_status:
        return DamageResult(0)
    if move.category == "physical":
        atk, dfn = user.final_stat("attack"), target.final_stat("defense")
    else:
        atk, dfn = user.final_stat("sp_atk"), target.final_stat("sp_def")
    base = ((2 * user.level // 5 + 2) * atk * move.power // max(1, dfn)) // 50 + 2
    effectiveness = chart.effectiveness(move.type, target.types)
    stab = move.type in user.types
    multiplier = effectiveness * (STAB_BONUS if stab else 1.0)
    return DamageResult(int(base * multiplier), effectiveness, stab)


__all__ = ["DamageResult", "STAB_BONUS", "hit_chance", "accuracy_check", "calc_damage"]
