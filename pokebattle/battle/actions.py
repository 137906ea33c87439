"""Closed set of turn actions a side can submit for a round."""
from __future__ import annotations
from dataclasses import dataclass
from enum import IntEnum
from typing import Union

from .combatant import Combatant
from .models import Move


class ActionKind(IntEnum):
    """Ordering tier; lower values act first."""
    FLEE = 0
    SWITCH = 1
    MOVE = 2


@dataclass(frozen=True)
class UseMove:
    actor: Combatant
    target: Combatant
    move: Move

    kind = ActionKind.MOVE

    @property
    def priority(self) -> int:
        return self.move.priority


@dataclass(frozen=True)
class SwitchOut:
    actor: Combatant
    incoming_index: int

    kind = ActionKind.SWITCH
    priority = 0


@dataclass(frozen=True)
class AttemptFlee:
    actor: Combatant
    target: Combatant

    kind = ActionKind.FLEE
    priority = 0


Action = Union[UseMove, SwitchOut, AttemptFlee]

__all__ = ["Action", "ActionKind", "UseMove", "SwitchOut", "AttemptFlee"]
