"""
Unified triage rule registry.

Curated (explicit) rules and rules implied by question metadata are merged
once, at startup, into a single ordered tuple:

    explicit rules (file order)  +  implicit rules (question-bank order)

An implicit rule fires on "yes", so it is only synthesized when no explicit
rule exists for that question answered "yes". An explicit rule on "no" leaves
the metadata rule in place. Explicit always wins, with no merging of the two
definitions.

Anything that would let the engine silently skip or mis-escalate a rule is a
RegistryConfigError, and the service will not start with it.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Any, Dict, FrozenSet, Iterable, List, Optional, Tuple

from ..core.logging import get_logger
from .loader import REQUIRED_INDICATORS, RegistryConfigError, load_explicit_rules, load_question_bank
from .models import (
    IMMINENT_ACTIONS,
    WARNING_ACTIONS,
    Action,
    ConditionTag,
    Question,
    RiskLevel,
    TriageRule,
)

logger = get_logger(__name__)

ESCALATION_ONLY = frozenset({Action.BLOCK_CONVERSATIONAL_FEATURE, Action.REDIRECT_TO_EMERGENCY_RESOURCES})


@dataclass(frozen=True)
class RuleRegistry:
    questions: Tuple[Question, ...]
    rules: Tuple[TriageRule, ...]
    suicidal_ideation_questions: FrozenSet[str] = frozenset()
    psychosis_questions: FrozenSet[str] = frozenset()
    _index: Dict[Tuple[str, bool], TriageRule] = field(default_factory=dict, compare=False, repr=False)

    def rule_for(self, question_id: str, value: bool) -> Optional[TriageRule]:
        return self._index.get((question_id, value))

    @property
    def explicit_rules(self) -> Tuple[TriageRule, ...]:
        return tuple(r for r in self.rules if not r.implicit)

    @property
    def implicit_rules(self) -> Tuple[TriageRule, ...]:
        return tuple(r for r in self.rules if r.implicit)


def _enum(cls, raw: Any, where: str):
    try:
        return cls(raw)
    except ValueError:
        allowed = ", ".join(m.value for m in cls)
        raise RegistryConfigError(f"{where}: unknown {cls.__name__} {raw!r} (allowed: {allowed})")


def parse_question(raw: Dict[str, Any]) -> Question:
    qid = raw.get("id")
    if not qid or not isinstance(qid, str):
        raise RegistryConfigError(f"question without a string id: {raw!r}")
    where = f"question {qid}"
    cond = raw.get("triggerCondition")
    risk = raw.get("triageRisk")
    return Question(
        id=qid,
        text=raw.get("text", ""),
        text_ms=raw.get("textMs", ""),
        category=raw.get("category", "general"),
        trigger_condition=_enum(ConditionTag, cond, where) if cond else None,
        triage_risk=_enum(RiskLevel, risk, where) if risk else None,
        triage_reason=raw.get("triageReason") or None,
    )


def parse_rule(raw: Dict[str, Any]) -> TriageRule:
    qid = raw.get("questionId")
    if not qid or not isinstance(qid, str):
        raise RegistryConfigError(f"rule without a string questionId: {raw!r}")
    where = f"rule {qid}"
    trigger = raw.get("triggerValue")
    if not isinstance(trigger, bool):
        raise RegistryConfigError(f"{where}: triggerValue must be true or false")
    reason = raw.get("reason")
    if not reason:
        raise RegistryConfigError(f"{where}: reason is required")
    actions = raw.get("actions") or []
    return TriageRule(
        question_id=qid,
        trigger_value=trigger,
        risk_level=_enum(RiskLevel, raw.get("riskLevel"), where),
        reason=str(reason),
        actions=frozenset(_enum(Action, a, where) for a in actions),
    )


def implicit_rule(q: Question) -> TriageRule:
    return TriageRule(
        question_id=q.id,
        trigger_value=True,
        risk_level=q.triage_risk,
        reason=q.triage_reason or f"Triggered by {q.id}",
        actions=IMMINENT_ACTIONS if q.triage_risk == RiskLevel.IMMINENT else WARNING_ACTIONS,
        implicit=True,
    )


def _check_rule(rule: TriageRule) -> None:
    where = f"{'implicit' if rule.implicit else 'explicit'} rule {rule.question_id}={rule.trigger_value}"
    if not rule.actions:
        raise RegistryConfigError(f"{where}: no actions")
    # a triggered rule must raise risk, otherwise "low" would not mean "nothing fired"
    if rule.risk_level == RiskLevel.LOW:
        raise RegistryConfigError(f"{where}: risk level low cannot be a trigger")
    if rule.risk_level == RiskLevel.IMMINENT and not ESCALATION_ONLY <= rule.actions:
        raise RegistryConfigError(f"{where}: imminent rules must block and redirect")
    if rule.risk_level in (RiskLevel.LOW, RiskLevel.MODERATE) and rule.actions & ESCALATION_ONLY:
        raise RegistryConfigError(f"{where}: only high/imminent rules may block or redirect")


def build_registry(
    questions: Iterable[Dict[str, Any] | Question],
    rules: Iterable[Dict[str, Any] | TriageRule] = (),
    indicators: Dict[str, List[str]] | None = None,
) -> RuleRegistry:
    qs: List[Question] = [q if isinstance(q, Question) else parse_question(q) for q in questions]
    by_id: Dict[str, Question] = {}
    for q in qs:
        if q.id in by_id:
            raise RegistryConfigError(f"duplicate question id {q.id}")
        by_id[q.id] = q

    explicit: List[TriageRule] = [r if isinstance(r, TriageRule) else parse_rule(r) for r in rules]
    index: Dict[Tuple[str, bool], TriageRule] = {}
    for r in explicit:
        if r.question_id not in by_id:
            raise RegistryConfigError(f"rule references unknown question {r.question_id}")
        key = (r.question_id, r.trigger_value)
        if key in index:
            raise RegistryConfigError(f"duplicate rule for {r.question_id}={r.trigger_value}")
        index[key] = r

    # metadata rules fire on "yes"; only an explicit "yes" rule displaces one
    implicit = [implicit_rule(q) for q in qs if q.triage_risk and (q.id, True) not in index]
    for r in implicit:
        index[(r.question_id, r.trigger_value)] = r

    ordered = tuple(explicit + implicit)
    for r in ordered:
        _check_rule(r)

    indicators = indicators or {}
    for name, ids in indicators.items():
        if name not in REQUIRED_INDICATORS:
            raise RegistryConfigError(f"unknown indicator {name!r} (allowed: {', '.join(REQUIRED_INDICATORS)})")
        unknown = [i for i in (ids or []) if i not in by_id]
        if unknown:
            raise RegistryConfigError(f"indicator {name} references unknown questions {unknown}")

    return RuleRegistry(
        questions=tuple(qs),
        rules=ordered,
        suicidal_ideation_questions=frozenset(indicators.get("suicidal_ideation") or ()),
        psychosis_questions=frozenset(indicators.get("psychosis") or ()),
        _index=index,
    )


@lru_cache(maxsize=1)
def get_registry() -> RuleRegistry:
    questions = load_question_bank()
    rules, indicators = load_explicit_rules()
    registry = build_registry(questions, rules, indicators)
    logger.info(
        "triage_registry_loaded",
        questions=len(registry.questions),
        explicit_rules=len(registry.explicit_rules),
        implicit_rules=len(registry.implicit_rules),
    )
    return registry
