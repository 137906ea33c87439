"""Turn-based battle state machine.

A driver (UI loop, CLI, test) advances a ``BattleState`` one discrete step at
a time::

    submit_action(PLAYER, ...) / submit_action(OPPONENT, ...)
    order_actions()
    while phase is EXECUTING: execute_next()
    react to peek_flags(); consume_narration()

Phases: AWAITING_ACTIONS -> EXECUTING -> AWAITING_ACTIONS | AWAITING_SWITCH |
FINISHED. While AWAITING_SWITCH, the side whose active combatant fainted
submits a SwitchOut which executes immediately. Every illegal call raises
``PreconditionError`` before anything is mutated.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
import random
from typing import Dict, List, Optional, Sequence, Set, Tuple

from pokebattle.core.errors import PreconditionError, ValidationError
from pokebattle.core.logging import logger
from .actions import Action, AttemptFlee, SwitchOut, UseMove
from .combatant import Combatant
from .damage import accuracy_check, calc_damage
from .escape import flee_success
from .experience import exp_gain
from .models import RosterMember
from .typechart import TYPE_CHART, TypeChart, effectiveness_message

MAX_ROSTER = 6
TIE_POLICIES = ("coin_flip", "stable")


class Side(str, Enum):
    PLAYER = "player"
    OPPONENT = "opponent"

    @property
    def other(self) -> "Side":
        return Side.OPPONENT if self is Side.PLAYER else Side.PLAYER


class BattlePhase(str, Enum):
    AWAITING_ACTIONS = "awaiting_actions"
    EXECUTING = "executing"
    AWAITING_SWITCH = "awaiting_switch"
    FINISHED = "finished"


class BattleOutcome(str, Enum):
    ONGOING = "ongoing"
    PLAYER_WIN = "player_win"
    PLAYER_LOSS = "player_loss"
    ESCAPED = "escaped"


@dataclass(frozen=True)
class BattleFlags:
    open_switch_menu: bool = False
    empty_log: bool = False
    battle_finished: bool = False

    def changed_from(self, before: "BattleFlags") -> Tuple[str, ...]:
        return tuple(
            name for name in ("open_switch_menu", "empty_log", "battle_finished")
            if getattr(self, name) != getattr(before, name)
        )


@dataclass
class ExecutionOutcome:
    action: Action
    side: Side
    narration: List[str] = field(default_factory=list)
    fainted: List[Combatant] = field(default_factory=list)
    damage: int = 0
    flags_changed: Tuple[str, ...] = ()


class BattleState:
    def __init__(self, player: Sequence[Combatant], opponent: Sequence[Combatant], *,
                 trainer_name: Optional[str] = None,
                 rng: Optional[random.Random] = None,
                 tie_policy: str = "coin_flip",
                 chart: TypeChart = TYPE_CHART):
        if tie_policy not in TIE_POLICIES:
            raise ValidationError(f"Unknown tie policy '{tie_policy}'")
        self._rosters: Dict[Side, Tuple[Combatant, ...]] = {
            Side.PLAYER: self._check_roster(player, "player"),
            Side.OPPONENT: self._check_roster(opponent, "opponent"),
        }
        if {id(c) for c in player} & {id(c) for c in opponent}:
            raise ValidationError("A combatant cannot fight on both sides")
        self._active: Dict[Side, int] = {
            side: next(i for i, c in enumerate(r) if not c.fainted)
            for side, r in self._rosters.items()
        }
        self.trainer_name = trainer_name
        self.rng = rng or random.Random()
        self.tie_policy = tie_policy
        self.chart = chart
        self.round = 1
        self._phase = BattlePhase.AWAITING_ACTIONS
        self._outcome = BattleOutcome.ONGOING
        self._pending: Dict[Side, Tuple[int, Action]] = {}
        self._queue: List[Tuple[Side, Action]] = []
        self._submissions = 0
        self._switch_required: Set[Side] = set()
        self._open_switch_menu = False
        self._narration: List[str] = []

        foe = self.active_combatant(Side.OPPONENT)
        if self.is_trainer_battle:
            self._say(f"{trainer_name} challenged you to a battle!")
            self._say(f"{trainer_name} sent out {foe.name}!")
        else:
            self._say(f"A wild {foe.name} appeared!")
        self._say(f"Go! {self.active_combatant(Side.PLAYER).name}!")
        logger.debug("BattleStarted", trainer=trainer_name, tie_policy=tie_policy)

    @staticmethod
    def _check_roster(members: Sequence[Combatant], label: str) -> Tuple[Combatant, ...]:
        roster = tuple(members)
        if not 1 <= len(roster) <= MAX_ROSTER:
            raise ValidationError(f"{label} roster must hold 1..{MAX_ROSTER} combatants, got {len(roster)}")
        if len({id(c) for c in roster}) != len(roster):
            raise ValidationError(f"{label} roster lists a combatant twice")
        if all(c.fainted for c in roster):
            raise ValidationError(f"{label} roster has no combatant able to battle")
        return roster

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------
    @property
    def phase(self) -> BattlePhase:
        return self._phase

    @property
    def outcome(self) -> BattleOutcome:
        return self._outcome

    @property
    def is_trainer_battle(self) -> bool:
        return self.trainer_name is not None

    @property
    def switch_required(self) -> frozenset:
        return frozenset(self._switch_required)

    def roster(self, side: Side) -> Tuple[Combatant, ...]:
        return self._rosters[side]

    def active_index(self, side: Side) -> int:
        return self._active[side]

    def active_combatant(self, side: Side) -> Combatant:
        return self._rosters[side][self._active[side]]

    def side_of(self, combatant: Combatant) -> Side:
        for side, roster in self._rosters.items():
            if any(c is combatant for c in roster):
                return side
        raise ValidationError(f"{combatant.name} is not part of this battle")

    def pending_action(self, side: Side) -> Optional[Action]:
        entry = self._pending.get(side)
        return entry[1] if entry else None

    def queued_actions(self) -> Tuple[Action, ...]:
        return tuple(a for _, a in self._queue)

    def export_roster(self, side: Side) -> List[RosterMember]:
        """Snapshots to merge back into persistent storage."""
        return [c.to_roster_member() for c in self._rosters[side]]

    # ------------------------------------------------------------------
    # Flags & narration
    # ------------------------------------------------------------------
    def peek_flags(self) -> BattleFlags:
        return BattleFlags(
            open_switch_menu=self._open_switch_menu,
            empty_log=bool(self._narration),
            battle_finished=self._phase is BattlePhase.FINISHED,
        )

    def consume_narration(self) -> List[str]:
        """Hand buffered narration to the presentation layer and clear emptyLog."""
        lines, self._narration = self._narration, []
        return lines

    def request_switch_menu(self) -> None:
        """Player chose to switch manually; the menu stays open until a switch executes.

        A move or flee already chosen this round is withdrawn; only a
        SwitchOut is accepted from the player while the menu is open.
        """
        self._require_phase(BattlePhase.AWAITING_ACTIONS)
        pending = self._pending.get(Side.PLAYER)
        if pending is not None and not isinstance(pending[1], SwitchOut):
            del self._pending[Side.PLAYER]
        self._open_switch_menu = True

    def _say(self, line: str, sink: Optional[List[str]] = None) -> None:
        self._narration.append(line)
        if sink is not None:
            sink.append(line)

    # ------------------------------------------------------------------
    # Submission
    # ------------------------------------------------------------------
    def _require_phase(self, *phases: BattlePhase) -> None:
        if self._phase in phases:
            return
        if self._phase is BattlePhase.FINISHED:
            raise PreconditionError("battle-finished")
        if self._phase is BattlePhase.AWAITING_SWITCH:
            raise PreconditionError("switch-required", ", ".join(s.value for s in self._switch_required))
        raise PreconditionError("round-in-progress", self._phase.value)

    def submit_action(self, side: Side, action: Action, *, replace: bool = False) -> None:
        if self._phase is BattlePhase.AWAITING_SWITCH and side in self._switch_required:
            if not isinstance(action, SwitchOut):
                raise PreconditionError("switch-required", side.value)
            self._validate(side, action)
            self._free_switch(side, action)
            return
        self._require_phase(BattlePhase.AWAITING_ACTIONS)
        if side is Side.PLAYER and self._open_switch_menu and not isinstance(action, SwitchOut):
            raise PreconditionError("switch-required", "switch menu is open")
        existing = self._pending.get(side)
        if existing is not None:
            if existing[1] == action:
                return
            if not replace:
                raise PreconditionError("duplicate-submission", side.value)
        self._validate(side, action)
        order = existing[0] if existing is not None else self._submissions
        self._submissions += 1
        self._pending[side] = (order, action)
        logger.debug("ActionSubmitted", side=side.value, kind=action.kind.name, actor=action.actor.name)

    def _validate(self, side: Side, action: Action) -> None:
        actor = action.actor
        if actor is not self.active_combatant(side):
            raise PreconditionError("not-active", f"{actor.name} is not {side.value}'s active combatant")
        if isinstance(action, SwitchOut):
            roster = self._rosters[side]
            if not 0 <= action.incoming_index < len(roster):
                raise PreconditionError("invalid-switch-index", str(action.incoming_index))
            if roster[action.incoming_index].fainted:
                raise PreconditionError("fainted-switch-target", roster[action.incoming_index].name)
            if action.incoming_index == self._active[side]:
                raise PreconditionError("already-active", actor.name)
            return
        if actor.fainted:
            raise PreconditionError("fainted-actor", actor.name)
        if isinstance(action, UseMove):
            slot = next((s for s in actor.moves if s.move == action.move), None)
            if slot is None:
                raise PreconditionError("unknown-move", f"{actor.name} does not know {action.move.name}")
            if not slot.usable:
                raise PreconditionError("exhausted-move", action.move.name)
            if not any(c is action.target for c in self._rosters[side.other]):
                raise PreconditionError("invalid-target", action.target.name)
        elif isinstance(action, AttemptFlee):
            if side is not Side.PLAYER or self.is_trainer_battle:
                raise PreconditionError("flee-not-allowed", side.value)

    # ------------------------------------------------------------------
    # Ordering
    # ------------------------------------------------------------------
    def order_actions(self) -> Tuple[Action, ...]:
        """Sort both sides' actions into the round's execution queue.

        Flee before switch before move; moves by priority then Speed
        (with stages) descending; exact ties follow ``tie_policy``.
        """
        self._require_phase(BattlePhase.AWAITING_ACTIONS)
        missing = [s.value for s in Side if s not in self._pending]
        if missing:
            raise PreconditionError("incomplete-round", ", ".join(missing))

        def key(entry: Tuple[Side, Tuple[int, Action]]):
            _, (order, action) = entry
            tiebreak = self.rng.random() if self.tie_policy == "coin_flip" else order
            return (int(action.kind), -action.priority, -action.actor.speed, tiebreak)

        ordered = sorted(sorted(self._pending.items(), key=lambda e: e[1][0]), key=key)
        self._queue = [(side, action) for side, (_, action) in ordered]
        self._pending.clear()
        self._phase = BattlePhase.EXECUTING
        logger.debug("ActionsOrdered", order=[f"{s.value}:{a.kind.name}" for s, a in self._queue])
        return self.queued_actions()

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------
    def execute_next(self) -> ExecutionOutcome:
        if self._phase is not BattlePhase.EXECUTING:
            if self._phase is BattlePhase.FINISHED:
                raise PreconditionError("battle-finished")
            raise PreconditionError("nothing-to-execute", self._phase.value)
        before = self.peek_flags()
        side, action = self._queue.pop(0)
        outcome = ExecutionOutcome(action=action, side=side)
        if isinstance(action, UseMove):
            self._execute_move(side, action, outcome)
        elif isinstance(action, SwitchOut):
            self._execute_switch(side, action, outcome)
        else:
            self._execute_flee(action, outcome)
        logger.debug("ActionExecuted", side=side.value, kind=action.kind.name, actor=action.actor.name)
        self._advance_phase()
        outcome.flags_changed = self.peek_flags().changed_from(before)
        return outcome

    def _advance_phase(self) -> None:
        if self._phase is BattlePhase.FINISHED or self._queue:
            return
        if self._switch_required:
            self._phase = BattlePhase.AWAITING_SWITCH
        else:
            self._start_round()

    def _start_round(self) -> None:
        self._phase = BattlePhase.AWAITING_ACTIONS
        self.round += 1
        logger.debug("RoundStarted", round=self.round)

    def _execute_move(self, side: Side, action: UseMove, out: ExecutionOutcome) -> None:
        user = action.actor
        target = action.target
        if not self._is_active(target):
            target = self.active_combatant(side.other)
        slot = user.slot_for(action.move)
        slot.uses.subtract(1)
        self._say(f"{user.name} used {action.move.name}!", out.narration)
        if target.fainted:
            self._say("But there was no target...", out.narration)
            return
        if not accuracy_check(self.rng, user, target, action.move):
            self._say(f"{user.name}'s attack missed!", out.narration)
            return
        if action.move.is_status:
            self._say("But nothing happened.", out.narration)
            return
        result = calc_damage(user, target, action.move, self.chart)
        out.damage = target.health.subtract(result.amount)
        if result.effectiveness:
            self._say(f"{target.name} took {out.damage} damage!", out.narration)
        msg = effectiveness_message(result.effectiveness)
        if msg:
            self._say(msg, out.narration)
        if target.fainted:
            self._on_faint(side.other, target, out)
            if side is Side.PLAYER and not user.fainted:
                self._award_experience(user, target, out)
            self._check_finished(side.other)

    def _execute_switch(self, side: Side, action: SwitchOut, out: ExecutionOutcome) -> None:
        outgoing = self.active_combatant(side)
        incoming = self._rosters[side][action.incoming_index]
        if not outgoing.fainted:
            if side is Side.PLAYER:
                self._say(f"Come back, {outgoing.name}!", out.narration)
            else:
                self._say(f"{outgoing.name} was withdrawn!", out.narration)
        outgoing.reset_battle_state()
        self._active[side] = action.incoming_index
        self._switch_required.discard(side)
        if side is Side.PLAYER:
            self._say(f"Go! {incoming.name}!", out.narration)
            self._open_switch_menu = False
        elif self.is_trainer_battle:
            self._say(f"{self.trainer_name} sent out {incoming.name}!", out.narration)
        else:
            self._say(f"{incoming.name} was sent out!", out.narration)

    def _execute_flee(self, action: AttemptFlee, out: ExecutionOutcome) -> None:
        runner = action.actor
        foe = self.active_combatant(Side.OPPONENT)
        if flee_success(self.rng, runner.speed, foe.speed, runner.run_count + 1):
            self._say("You fled from the battle!", out.narration)
            self._finish(BattleOutcome.ESCAPED)
        else:
            runner.run_count += 1
            self._say("Couldn't escape!", out.narration)

    def _free_switch(self, side: Side, action: SwitchOut) -> None:
        out = ExecutionOutcome(action=action, side=side)
        self._execute_switch(side, action, out)
        logger.debug("ReplacementSwitch", side=side.value, incoming=action.incoming_index)
        if not self._switch_required:
            self._start_round()

    def _is_active(self, combatant: Combatant) -> bool:
        return any(self.active_combatant(s) is combatant for s in Side)

    def _on_faint(self, side: Side, fallen: Combatant, out: ExecutionOutcome) -> None:
        self._say(f"{fallen.name} fainted!", out.narration)
        out.fainted.append(fallen)
        self._queue = [(s, a) for s, a in self._queue if a.actor is not fallen]
        if fallen is self.active_combatant(side) and self._has_reserves(side):
            self._switch_required.add(side)
            if side is Side.PLAYER:
                self._open_switch_menu = True

    def _award_experience(self, winner: Combatant, fallen: Combatant, out: ExecutionOutcome) -> None:
        gained = exp_gain(fallen.species.base_experience, fallen.level)
        if gained <= 0:
            return
        self._say(f"{winner.name} earned {gained} XP!", out.narration)
        result = winner.gain_experience(gained)
        for level in range(result["from"] + 1, result["to"] + 1):
            self._say(f"{winner.name} grew to Lv. {level}!", out.narration)

    def _has_reserves(self, side: Side) -> bool:
        return any(not c.fainted for c in self._rosters[side])

    def _check_finished(self, side: Side) -> None:
        if self._has_reserves(side):
            return
        self._finish(BattleOutcome.PLAYER_WIN if side is Side.OPPONENT else BattleOutcome.PLAYER_LOSS)

    def _finish(self, outcome: BattleOutcome) -> None:
        self._outcome = outcome
        self._phase = BattlePhase.FINISHED
        self._queue.clear()
        self._pending.clear()
        self._switch_required.clear()
        logger.debug("BattleFinished", outcome=outcome.value, round=self.round)

    # ------------------------------------------------------------------
    # Convenience
    # ------------------------------------------------------------------
    def run_queue(self) -> List[ExecutionOutcome]:
        """Execute until the round's queue drains or the state leaves EXECUTING."""
        results: List[ExecutionOutcome] = []
        while self._phase is BattlePhase.EXECUTING:
            results.append(self.execute_next())
        return results

    def usable_switch_indices(self, side: Side) -> List[int]:
        return [i for i, c in enumerate(self._rosters[side]) if not c.fainted and i != self._active[side]]


__all__ = [
    "BattleState", "BattlePhase", "BattleOutcome", "BattleFlags", "ExecutionOutcome", "Side",
    "MAX_ROSTER", "TIE_POLICIES",
]
