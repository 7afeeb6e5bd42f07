from typing import FrozenSet, Mapping

from .models import ConditionTag
from .registry import RuleRegistry


def detect_conditions(registry: RuleRegistry, answers: Mapping[str, bool]) -> FrozenSet[ConditionTag]:
    # independent of risk: a "low" screening can still suggest follow-up assessments
    return frozenset(
        q.trigger_condition
        for q in registry.questions
        if q.trigger_condition and answers.get(q.id) is True
    )
