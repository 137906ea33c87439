import pytest

from pokebattle.battle.typechart import TYPE_CHART, TypeChart, effectiveness_message
from pokebattle.core.errors import ValidationError
from pokebattle.core.types import ELEMENTAL_TYPES


def test_chart_covers_eighteen_types_with_120_entries():
    assert len(ELEMENTAL_TYPES) == 18
    assert len(TYPE_CHART) == 120


@pytest.mark.parametrize("atk,dfn,expected", [
    ("fire", "grass", 2.0),
    ("water", "fire", 2.0),
    ("normal", "ghost", 0.0),
    ("dragon", "fairy", 0.0),
    ("fairy", "dragon", 2.0),
    ("electric", "electric", 0.5),
    ("fire", "normal", 1.0),
])
def test_single_lookups(atk, dfn, expected):
    assert TYPE_CHART.multiplier(atk, dfn) == expected


def test_lookup_is_directional_but_stable():
    first = TYPE_CHART.multiplier("ground", "flying")
    assert first == TYPE_CHART.multiplier("ground", "flying") == 0.0
    assert TYPE_CHART.multiplier("flying", "ground") == 1.0


def test_case_and_whitespace_folded():
    assert TYPE_CHART.multiplier(" FIRE ", "Grass") == 2.0


def test_dual_type_multiplies():
    assert TYPE_CHART.effectiveness("ice", ("dragon", "flying")) == 4.0
    assert TYPE_CHART.effectiveness("ground", ("electric", "flying")) == 0.0
    assert TYPE_CHART.effectiveness("fire", ("water", "rock")) == 0.25


def test_unknown_type_rejected():
    with pytest.raises(ValidationError):
        TYPE_CHART.multiplier("cosmic", "fire")


def test_entries_are_read_only():
    with pytest.raises(TypeError):
        TYPE_CHART.entries()[("fire", "fire")] = 3.0


def test_custom_chart_drops_neutral_rows():
    chart = TypeChart({"fire": {"grass": 2.0, "normal": 1.0}})
    assert len(chart) == 1
    assert chart.multiplier("grass", "fire") == 1.0


@pytest.mark.parametrize("mult,msg", [
    (0.0, "It had no effect!"),
    (0.25, "It's really not very effective..."),
    (0.5, "It's not very effective..."),
    (1.0, None),
    (1.5, "It's super effective!"),
    (2.0, "It's super effective!"),
    (4.0, "It's extremely effective!"),
])
def test_effectiveness_messages(mult, msg):
    assert effectiveness_message(mult) == msg
