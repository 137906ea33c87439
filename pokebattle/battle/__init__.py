"""
Turn-based battle engine.
Modules:
- pool.py / choice.py (bounded pools, weighted choice)
- stats.py / experience.py (derived stats, stages, growth curves)
- typechart.py (type effectiveness)
- combatant.py / actions.py (battle participants and their turn actions)
- state.py (BattleState turn protocol)
- ai.py (opponent policies)
"""
from .actions import Action, AttemptFlee, SwitchOut, UseMove
from .combatant import Combatant
from .pool import BoundedPool
from .state import BattleFlags, BattleOutcome, BattlePhase, BattleState, ExecutionOutcome, Side
from .typechart import TYPE_CHART, TypeChart

__all__ = [
    "Action", "AttemptFlee", "SwitchOut", "UseMove", "Combatant", "BoundedPool",
    "BattleFlags", "BattleOutcome", "BattlePhase", "BattleState", "ExecutionOutcome", "Side",
    "TYPE_CHART", "TypeChart",
]
