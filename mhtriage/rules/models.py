from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import FrozenSet, Optional, Tuple


class RiskLevel(str, Enum):
    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"
    IMMINENT = "imminent"

    @property
    def priority(self) -> int:
        return RISK_PRIORITY[self]

    # str's lexical ordering would put "high" < "imminent" < "low" < "moderate"
    def __lt__(self, other):
        if not isinstance(other, RiskLevel):
            return NotImplemented
        return self.priority < other.priority

    def __le__(self, other):
        if not isinstance(other, RiskLevel):
            return NotImplemented
        return self.priority <= other.priority

    def __gt__(self, other):
        if not isinstance(other, RiskLevel):
            return NotImplemented
        return self.priority > other.priority

    def __ge__(self, other):
        if not isinstance(other, RiskLevel):
            return NotImplemented
        return self.priority >= other.priority


RISK_PRIORITY = {
    RiskLevel.LOW: 0,
    RiskLevel.MODERATE: 1,
    RiskLevel.HIGH: 2,
    RiskLevel.IMMINENT: 3,
}


def max_risk(*levels: RiskLevel) -> RiskLevel:
    """Highest of the given levels; LOW when none are given."""
    best = RiskLevel.LOW
    for lvl in levels:
        if lvl.priority > best.priority:
            best = lvl
    return best


class Action(str, Enum):
    SHOW_EMERGENCY_OVERLAY = "show_emergency_overlay"
    BLOCK_CONVERSATIONAL_FEATURE = "block_conversational_feature"
    LOG_SAFETY_EVENT = "log_safety_event"
    REDIRECT_TO_EMERGENCY_RESOURCES = "redirect_to_emergency_resources"
    SHOW_WARNING_BANNER = "show_warning_banner"


class ConditionTag(str, Enum):
    DEPRESSION = "depression"
    ANXIETY = "anxiety"
    OCD = "ocd"
    PTSD = "ptsd"
    INSOMNIA = "insomnia"
    SUICIDAL = "suicidal"
    PSYCHOSIS = "psychosis"
    SEXUAL_ADDICTION = "sexual_addiction"
    MARITAL_DISTRESS = "marital_distress"


class FunctionalLevel(str, Enum):
    SEVERE = "severe"
    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"


IMMINENT_ACTIONS: FrozenSet[Action] = frozenset({
    Action.SHOW_EMERGENCY_OVERLAY,
    Action.BLOCK_CONVERSATIONAL_FEATURE,
    Action.LOG_SAFETY_EVENT,
    Action.REDIRECT_TO_EMERGENCY_RESOURCES,
})
WARNING_ACTIONS: FrozenSet[Action] = frozenset({
    Action.SHOW_WARNING_BANNER,
    Action.LOG_SAFETY_EVENT,
})


@dataclass(frozen=True)
class Question:
    id: str
    text: str
    text_ms: str = ""
    category: str = "general"
    trigger_condition: Optional[ConditionTag] = None
    triage_risk: Optional[RiskLevel] = None
    triage_reason: Optional[str] = None


@dataclass(frozen=True)
class TriageRule:
    question_id: str
    trigger_value: bool
    risk_level: RiskLevel
    reason: str
    actions: FrozenSet[Action]
    implicit: bool = False

    def matches(self, value) -> bool:
        # absent answers never match; 1/0 are not booleans here
        return isinstance(value, bool) and value == self.trigger_value


@dataclass(frozen=True)
class TriageResult:
    risk_level: RiskLevel = RiskLevel.LOW
    triggered_rules: Tuple[TriageRule, ...] = ()
    actions: FrozenSet[Action] = field(default_factory=frozenset)
    highest_risk_reason: Optional[str] = None
    has_suicidal_ideation: bool = False
    has_psychosis_indicators: bool = False
    trigger_questions: Tuple[str, ...] = ()

    @property
    def should_block_chat(self) -> bool:
        return Action.BLOCK_CONVERSATIONAL_FEATURE in self.actions

    @property
    def should_show_emergency(self) -> bool:
        return Action.SHOW_EMERGENCY_OVERLAY in self.actions

    @property
    def should_redirect_emergency(self) -> bool:
        return Action.REDIRECT_TO_EMERGENCY_RESOURCES in self.actions
