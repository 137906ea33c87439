import pytest

from pokebattle.core.errors import ValidationError
from pokebattle.core.types import (
    ELEMENTAL_TYPES, format_types, normalize_type, normalize_types, strip_ansi, type_abbreviation,
)


def test_type_abbreviations_primary():
    assert type_abbreviation('fire') == 'FIR'
    assert type_abbreviation('ground') == 'GRN'
    assert type_abbreviation('fairy') == 'FAI'


def test_format_types_dual():
    out = format_types(('fire', 'flying'))
    assert strip_ansi(out) == 'FIR/FLY'


def test_eighteen_types():
    assert len(ELEMENTAL_TYPES) == 18
    assert 'fairy' in ELEMENTAL_TYPES


def test_normalize_type():
    assert normalize_type(' Water ') == 'water'
    with pytest.raises(ValidationError):
        normalize_type('sound')


def test_normalize_types_combinations():
    assert normalize_types(['Fire', 'fire']) == ('fire',)
    assert normalize_types(['grass', 'poison']) == ('grass', 'poison')
    with pytest.raises(ValidationError):
        normalize_types([])
    with pytest.raises(ValidationError):
        normalize_types(['fire', 'water', 'grass'])
