"""Reference driver loop over a BattleState.

Plays both sides through policy callables the way a presentation layer
would: submit, order, execute until the queue drains, resolve forced
switches, repeat until the battle finishes.
"""
from __future__ import annotations
from typing import List, Optional, Sequence
import random

from pokebattle.encounters.loader import get_location
from .ai import Policy, random_move_policy, strongest_move_policy
from .combatant import Combatant
from .factory import wild_combatant
from .state import BattleOutcome, BattlePhase, BattleState, Side

DEFAULT_MAX_ROUNDS = 200


class BattleSession:
    def __init__(self, state: BattleState, *,
                 player_policy: Policy = strongest_move_policy,
                 opponent_policy: Policy = random_move_policy):
        self.state = state
        self.policies = {Side.PLAYER: player_policy, Side.OPPONENT: opponent_policy}
        self.log: List[str] = list(state.consume_narration())

    def is_over(self) -> bool:
        return self.state.phase is BattlePhase.FINISHED

    def _drain(self) -> None:
        self.log.extend(self.state.consume_narration())

    def step(self) -> None:
        """Advance one round (or one batch of replacement switches)."""
        st = self.state
        if st.phase is BattlePhase.AWAITING_SWITCH:
            for side in sorted(st.switch_required, key=lambda s: s.value):
                st.submit_action(side, self.policies[side](st, side))
        elif st.phase is BattlePhase.AWAITING_ACTIONS:
            for side in Side:
                st.submit_action(side, self.policies[side](st, side))
            st.order_actions()
            st.run_queue()
        self._drain()

    def run_auto(self, max_rounds: int = DEFAULT_MAX_ROUNDS) -> BattleOutcome:
        while not self.is_over() and self.state.round <= max_rounds:
            self.step()
        return self.state.outcome

    @classmethod
    def from_wild_encounter(cls, player: Sequence[Combatant], location_key: str,
                            rng: Optional[random.Random] = None, **kwargs) -> "BattleSession":
        rng = rng or random.Random()
        wild = wild_combatant(get_location(location_key), rng)
        return cls(BattleState(player, [wild], rng=rng), **kwargs)


__all__ = ["BattleSession", "DEFAULT_MAX_ROUNDS"]
