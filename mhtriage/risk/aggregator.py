from typing import Mapping, Optional

from ..rules.models import FunctionalLevel, RiskLevel

# Social function screening: 8 Likert items scored 0-4.
SOCIAL_FUNCTION_ITEMS = (
    "personal_hygiene",
    "emotion_management",
    "relationships",
    "social_activities",
    "work_focus",
    "daily_motivation",
    "community_involvement",
    "life_meaning",
)
LIKERT_MIN = 0
LIKERT_MAX = 4
MAX_SCORE = len(SOCIAL_FUNCTION_ITEMS) * LIKERT_MAX  # 32

# Lower bound of each band, highest first. Clinical constants: do not tune
# without sign-off.
FUNCTIONAL_BANDS = (
    (26, FunctionalLevel.HIGH),      # 81-100%
    (18, FunctionalLevel.MODERATE),  # 56-80%
    (10, FunctionalLevel.LOW),       # 31-55%
    (0, FunctionalLevel.SEVERE),     # 0-30%
)


def social_function_score(answers: Mapping[str, int]) -> int:
    total = 0
    for item, value in answers.items():
        if item not in SOCIAL_FUNCTION_ITEMS:
            raise ValueError(f"Unknown social function item: {item}")
        if isinstance(value, bool) or not isinstance(value, int) or not LIKERT_MIN <= value <= LIKERT_MAX:
            raise ValueError(f"{item}: expected an integer {LIKERT_MIN}-{LIKERT_MAX}, got {value!r}")
        total += value
    return total


def functional_level(score: int) -> FunctionalLevel:
    if not 0 <= score <= MAX_SCORE:
        raise ValueError(f"Score {score} outside 0-{MAX_SCORE}")
    for lower, level in FUNCTIONAL_BANDS:
        if score >= lower:
            return level
    raise AssertionError("unreachable: bands start at 0")


def overall_risk(triage_risk: RiskLevel, level: FunctionalLevel) -> RiskLevel:
    """
    Final risk from triage risk and functional level.

    High/imminent triage passes through untouched. Below that, severe
    impairment raises moderate->high and low->moderate, and low functioning
    raises low->moderate.
    """
    if triage_risk in (RiskLevel.IMMINENT, RiskLevel.HIGH):
        return triage_risk
    if level == FunctionalLevel.SEVERE:
        return RiskLevel.HIGH if triage_risk == RiskLevel.MODERATE else RiskLevel.MODERATE
    if level == FunctionalLevel.LOW:
        return RiskLevel.MODERATE if triage_risk == RiskLevel.LOW else triage_risk
    return triage_risk


def risk_without_triage(level: FunctionalLevel) -> RiskLevel:
    # used when the social screening arrives with no initial screening on record
    if level == FunctionalLevel.SEVERE:
        return RiskLevel.HIGH
    if level == FunctionalLevel.LOW:
        return RiskLevel.MODERATE
    return RiskLevel.LOW


def resolve_overall_risk(triage_risk: Optional[RiskLevel], level: FunctionalLevel) -> RiskLevel:
    if triage_risk is None:
        return risk_without_triage(level)
    return overall_risk(triage_risk, level)
