import pytest

from mhtriage.risk.aggregator import (
    MAX_SCORE,
    SOCIAL_FUNCTION_ITEMS,
    functional_level,
    overall_risk,
    resolve_overall_risk,
    risk_without_triage,
    social_function_score,
)
from mhtriage.rules.models import FunctionalLevel as F, RiskLevel as R

OVERALL_TABLE = [
    (R.IMMINENT, F.SEVERE, R.IMMINENT),
    (R.IMMINENT, F.LOW, R.IMMINENT),
    (R.IMMINENT, F.MODERATE, R.IMMINENT),
    (R.IMMINENT, F.HIGH, R.IMMINENT),
    (R.HIGH, F.SEVERE, R.HIGH),
    (R.HIGH, F.LOW, R.HIGH),
    (R.HIGH, F.MODERATE, R.HIGH),
    (R.HIGH, F.HIGH, R.HIGH),
    (R.MODERATE, F.SEVERE, R.HIGH),
    (R.MODERATE, F.LOW, R.MODERATE),
    (R.MODERATE, F.MODERATE, R.MODERATE),
    (R.MODERATE, F.HIGH, R.MODERATE),
    (R.LOW, F.SEVERE, R.MODERATE),
    (R.LOW, F.LOW, R.MODERATE),
    (R.LOW, F.MODERATE, R.LOW),
    (R.LOW, F.HIGH, R.LOW),
]


@pytest.mark.parametrize("triage,level,expected", OVERALL_TABLE)
def test_overall_risk_table(triage, level, expected):
    assert overall_risk(triage, level) == expected


def test_overall_table_is_complete():
    assert {(t, f) for t, f, _ in OVERALL_TABLE} == {(t, f) for t in R for f in F}


def test_triage_never_downgraded():
    for t, f, _ in OVERALL_TABLE:
        assert overall_risk(t, f) >= t


@pytest.mark.parametrize("score,expected", [
    (0, F.SEVERE), (9, F.SEVERE),
    (10, F.LOW), (17, F.LOW),
    (18, F.MODERATE), (25, F.MODERATE),
    (26, F.HIGH), (32, F.HIGH),
])
def test_functional_band_edges(score, expected):
    assert functional_level(score) == expected


def test_every_score_has_one_band():
    levels = [functional_level(s) for s in range(MAX_SCORE + 1)]
    assert set(levels) == set(F)
    # bands are contiguous: level changes exactly three times going up
    changes = sum(1 for a, b in zip(levels, levels[1:]) if a != b)
    assert changes == 3


@pytest.mark.parametrize("score", [-1, MAX_SCORE + 1])
def test_functional_level_out_of_range(score):
    with pytest.raises(ValueError):
        functional_level(score)


def test_band_boundary_with_low_triage():
    # no triage signal, score on the low/moderate boundary
    assert overall_risk(R.LOW, functional_level(18)) == R.LOW
    assert overall_risk(R.LOW, functional_level(17)) == R.MODERATE


def test_social_function_score():
    answers = {item: 4 for item in SOCIAL_FUNCTION_ITEMS}
    assert social_function_score(answers) == MAX_SCORE == 32
    answers["life_meaning"] = 0
    assert social_function_score(answers) == 28
    assert social_function_score({}) == 0


@pytest.mark.parametrize("answers", [
    {"personal_hygiene": 5},
    {"personal_hygiene": -1},
    {"personal_hygiene": True},
    {"personal_hygiene": "3"},
    {"favourite_colour": 2},
])
def test_social_function_score_rejects_bad_items(answers):
    with pytest.raises(ValueError):
        social_function_score(answers)


@pytest.mark.parametrize("level,expected", [
    (F.SEVERE, R.HIGH), (F.LOW, R.MODERATE), (F.MODERATE, R.LOW), (F.HIGH, R.LOW),
])
def test_risk_without_triage(level, expected):
    assert risk_without_triage(level) == expected
    assert resolve_overall_risk(None, level) == expected


def test_resolve_uses_triage_when_present():
    assert resolve_overall_risk(R.LOW, F.SEVERE) == R.MODERATE
