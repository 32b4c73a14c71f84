"""Tests for the growth model lookup tables."""

import pytest

from life_leveling.models.interest import CommitmentLevel, SkillLevel
from life_leveling.simulation.tables import (
    COMMITMENT_MULTIPLIERS,
    DIMINISHING_RETURNS,
    LEVEL_MULTIPLIERS,
    SYNERGY_MAP,
    related_categories,
)


def test_level_multipliers():
    assert [LEVEL_MULTIPLIERS[level] for level in SkillLevel] == [1.0, 0.8, 0.6, 0.4]


def test_diminishing_returns():
    assert [DIMINISHING_RETURNS[level] for level in SkillLevel] == [1.0, 0.9, 0.7, 0.5]


def test_commitment_multipliers():
    assert COMMITMENT_MULTIPLIERS[CommitmentLevel.CASUAL] == 0.8
    assert COMMITMENT_MULTIPLIERS[CommitmentLevel.AVERAGE] == 1.0
    assert COMMITMENT_MULTIPLIERS[CommitmentLevel.INVESTED] == 1.2
    assert COMMITMENT_MULTIPLIERS[CommitmentLevel.COMPETITIVE] == 1.4


def test_synergy_map_entries():
    assert len(SYNERGY_MAP) == 14
    assert dict(SYNERGY_MAP["Math"]) == {"Technical": 0.3, "Science": 0.2}
    assert dict(SYNERGY_MAP["Creativity"]) == {"Arts": 0.3, "Music": 0.3, "Technical": 0.2}
    assert SYNERGY_MAP["Reading"]["Writing"] == 0.4
    assert SYNERGY_MAP["Writing"]["Reading"] == 0.4


def test_synergy_map_is_not_symmetric():
    assert SYNERGY_MAP["Gaming"]["Technical"] == 0.2
    assert "Gaming" not in SYNERGY_MAP["Technical"]


def test_strengths_in_expected_range():
    for related in SYNERGY_MAP.values():
        for strength in related.values():
            assert 0.2 <= strength <= 0.4


def test_tables_are_read_only():
    with pytest.raises(TypeError):
        SYNERGY_MAP["Math"] = {}  # type: ignore[index]
    with pytest.raises(TypeError):
        SYNERGY_MAP["Math"]["Technical"] = 1.0  # type: ignore[index]
    with pytest.raises(TypeError):
        LEVEL_MULTIPLIERS[SkillLevel.NOVICE] = 2.0  # type: ignore[index]


def test_related_categories_unknown():
    assert dict(related_categories("Other")) == {}
