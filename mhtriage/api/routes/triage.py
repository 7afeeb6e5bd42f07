from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException

from ..deps import get_referral_client, get_rule_registry
from ..schemas import (
    AnswerIn, AnswerResponse, ScreeningIn, ScreeningResponse,
    SocialFunctionIn, SocialFunctionResponse, TriageOut, TriggeredRuleOut,
)
from ...core.logging import get_logger
from ...escalation.dispatcher import dispatch
from ...escalation.referral import ReferralClient, needs_referral
from ...risk.aggregator import functional_level, resolve_overall_risk, social_function_score
from ...rules.conditions import detect_conditions
from ...rules.evaluator import evaluate_all, evaluate_one
from ...rules.models import ConditionTag, RiskLevel, TriageResult
from ...rules.registry import RuleRegistry

router = APIRouter(prefix="/triage", tags=["triage"])
logger = get_logger(__name__)

def _out(result: TriageResult) -> TriageOut:
    return TriageOut(
        riskLevel=result.risk_level,
        actions=list(dispatch(result)),
        triggeredRules=[
            TriggeredRuleOut(
                questionId=r.question_id,
                triggerValue=r.trigger_value,
                riskLevel=r.risk_level,
                reason=r.reason,
                implicit=r.implicit,
            )
            for r in result.triggered_rules
        ],
        triggerQuestions=list(result.trigger_questions),
        highestRiskReason=result.highest_risk_reason,
        hasSuicidalIdeation=result.has_suicidal_ideation,
        hasPsychosisIndicators=result.has_psychosis_indicators,
        shouldShowEmergency=result.should_show_emergency,
        shouldBlockChat=result.should_block_chat,
        shouldRedirectEmergency=result.should_redirect_emergency,
    )

@router.post("/answer", response_model=AnswerResponse)
def answer(payload: AnswerIn, registry: RuleRegistry = Depends(get_rule_registry)):
    result = evaluate_one(registry, payload.questionId, payload.value)
    if result is None:
        return AnswerResponse(triggered=False)
    logger.info("triage_answer_triggered", question_id=payload.questionId, risk_level=result.risk_level.value)
    return AnswerResponse(triggered=True, result=_out(result))

@router.post("/screening", response_model=ScreeningResponse)
def screening(
    payload: ScreeningIn,
    background: BackgroundTasks,
    registry: RuleRegistry = Depends(get_rule_registry),
    referrals: ReferralClient = Depends(get_referral_client),
):
    result = evaluate_all(registry, payload.answers)
    conditions = detect_conditions(registry, payload.answers)
    out = _out(result)

    if result.risk_level != RiskLevel.LOW:
        logger.warning(
            "triage_escalation",
            risk_level=result.risk_level.value,
            trigger_questions=out.triggerQuestions,
            actions=[a.value for a in out.actions],
        )

    # referral goes out after the response: escalation must not wait on it
    requested = bool(payload.userId) and needs_referral(result)
    if requested:
        background.add_task(referrals.request_referral, payload.userId, result, conditions)

    return ScreeningResponse(
        result=out,
        detectedConditions=[c for c in ConditionTag if c in conditions],
        referralRequested=requested,
    )

@router.post("/social", response_model=SocialFunctionResponse)
def social(payload: SocialFunctionIn):
    try:
        total = social_function_score(payload.answers)
        level = functional_level(total)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return SocialFunctionResponse(
        totalScore=total,
        functionalLevel=level,
        overallRisk=resolve_overall_risk(payload.triageRisk, level),
    )
