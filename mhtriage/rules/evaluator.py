"""
Rule evaluation over screening answers.

Pure and synchronous: no I/O, no logging, nothing retained between calls.
Runs on every recorded answer (evaluate_one) and on the finished answer set
(evaluate_all). Both walk the same registry so they always agree on which
rule a (question, answer) pair fires and at what level.
"""
from __future__ import annotations
from typing import Iterable, List, Mapping, Optional

from .models import RiskLevel, TriageResult, TriageRule
from .registry import RuleRegistry


def _result(registry: RuleRegistry, triggered: List[TriageRule]) -> TriageResult:
    risk = RiskLevel.LOW
    reason = None
    actions = set()
    for rule in triggered:
        actions |= rule.actions
        # strictly greater: ties keep the earlier rule's reason
        if rule.risk_level > risk:
            risk = rule.risk_level
            reason = rule.reason

    qids = tuple(r.question_id for r in triggered)
    return TriageResult(
        risk_level=risk,
        triggered_rules=tuple(triggered),
        actions=frozenset(actions),
        highest_risk_reason=reason,
        has_suicidal_ideation=any(q in registry.suicidal_ideation_questions for q in qids),
        has_psychosis_indicators=any(q in registry.psychosis_questions for q in qids),
        trigger_questions=qids,
    )


def evaluate_all(registry: RuleRegistry, answers: Mapping[str, bool]) -> TriageResult:
    triggered = [r for r in registry.rules if r.matches(answers.get(r.question_id))]
    return _result(registry, triggered)


def evaluate_one(registry: RuleRegistry, question_id: str, value: bool) -> Optional[TriageResult]:
    """None means the answer fires nothing, which is not the same as risk low."""
    if not isinstance(value, bool):
        return None
    rule = registry.rule_for(question_id, value)
    if rule is None:
        return None
    return _result(registry, [rule])


def merge_results(registry: RuleRegistry, results: Iterable[Optional[TriageResult]]) -> TriageResult:
    # Combine results computed independently (e.g. rapid answers) by max risk.
    seen = set()
    triggered: List[TriageRule] = []
    for res in results:
        if res is None:
            continue
        for rule in res.triggered_rules:
            if rule not in seen:
                seen.add(rule)
                triggered.append(rule)
    # registry order, so ties resolve as in evaluate_all regardless of arrival
    position = {rule: i for i, rule in enumerate(registry.rules)}
    triggered.sort(key=lambda r: position.get(r, len(position)))
    return _result(registry, triggered)
