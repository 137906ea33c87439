"""Opponent policies: ``(BattleState, Side) -> Action``."""
from __future__ import annotations
from typing import Callable, Optional
import random

from pokebattle.core.errors import PreconditionError
from .actions import Action, SwitchOut, UseMove
from .choice import choose_weighted, equal_weights
from .state import BattleState, Side

Policy = Callable[[BattleState, Side], Action]


def replacement_switch(state: BattleState, side: Side) -> SwitchOut:
    """First healthy bench member, used when the active combatant fainted."""
    candidates = state.usable_switch_indices(side)
    if not candidates:
        raise PreconditionError("no-replacement", side.value)
    return SwitchOut(state.active_combatant(side), candidates[0])


def random_move_policy(state: BattleState, side: Side, rng: Optional[random.Random] = None) -> Action:
    """Pick uniformly among usable moves; switch in a replacement when fainted."""
    actor = state.active_combatant(side)
    if actor.fainted:
        return replacement_switch(state, side)
    slots = actor.usable_moves()
    if not slots:
        raise PreconditionError("no-usable-moves", actor.name)
    slot = choose_weighted(equal_weights(slots), rng or state.rng)
    return UseMove(actor, state.active_combatant(side.other), slot.move)


def strongest_move_policy(state: BattleState, side: Side) -> Action:
    """Highest power x effectiveness among usable moves; first slot wins ties."""
    actor = state.active_combatant(side)
    if actor.fainted:
        return replacement_switch(state, side)
    foe = state.active_combatant(side.other)
    best = None
    best_score = -1.0
    for slot in actor.usable_moves():
        score = max(slot.move.power, 0) * state.chart.effectiveness(slot.move.type, foe.types)
        if score > best_score:
            best_score = score
            best = slot
    if best is None:
        raise PreconditionError("no-usable-moves", actor.name)
    return UseMove(actor, foe, best.move)


__all__ = ["Policy", "random_move_policy", "strongest_move_policy", "replacement_switch"]
