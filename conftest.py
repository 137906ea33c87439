# Ensure project root is on sys.path for tests
import sys, pathlib
root = pathlib.Path(__file__).resolve().parent
if str(root) not in sys.path:
    sys.path.insert(0, str(root))

import pytest

from pokebattle.battle.combatant import Combatant
from pokebattle.battle.models import Move, MoveSlot, Species
from pokebattle.battle.stats import StatBlock
from pokebattle.core.logging import logger

TACKLE = Move("Tackle", "normal", "physical", power=40, accuracy=100, max_pp=35)
SWIFT = Move("Swift", "normal", "special", power=60, accuracy=None, max_pp=20)


@pytest.fixture(autouse=True)
def _quiet_logger():
    before = logger.threshold
    logger.set_level("ERROR")
    yield
    logger.threshold = before


@pytest.fixture
def make_combatant():
    """Build catalog-free combatants: uniform base stats, zero IVs/EVs."""
    counter = iter(range(900, 10_000))

    def _make(name="testmon", *, level=50, base=50, speed=None, types=("normal",),
              moves=(SWIFT,), hp=None, base_experience=64, growth_rate="medium-fast"):
        stats = StatBlock.uniform(base)
        if speed is not None:
            stats = StatBlock(stats.hp, stats.attack, stats.defense, stats.sp_atk, stats.sp_def, speed)
        species = Species(id=next(counter), name=name, types=tuple(types), base_stats=stats,
                          base_experience=base_experience, growth_rate=growth_rate)
        c = Combatant(species=species, level=level, ivs=StatBlock(), moves=[MoveSlot.fresh(m) for m in moves])
        if hp is not None:
            c.health.set_current(hp)
        return c

    return _make
