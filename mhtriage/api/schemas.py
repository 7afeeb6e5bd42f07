from pydantic import BaseModel, Field, StrictBool
from typing import Optional, Dict, List

from ..rules.models import Action, ConditionTag, FunctionalLevel, RiskLevel

class AnswerIn(BaseModel):
    questionId: str
    value: StrictBool

class ScreeningIn(BaseModel):
    userId: Optional[str] = None
    answers: Dict[str, StrictBool] = Field(default_factory=dict)

class SocialFunctionIn(BaseModel):
    answers: Dict[str, int] = Field(default_factory=dict)
    triageRisk: Optional[RiskLevel] = None  # null when no initial screening exists

class TriggeredRuleOut(BaseModel):
    questionId: str
    triggerValue: bool
    riskLevel: RiskLevel
    reason: str
    implicit: bool

class TriageOut(BaseModel):
    riskLevel: RiskLevel
    actions: List[Action]  # ordered, most severe first
    triggeredRules: List[TriggeredRuleOut]
    triggerQuestions: List[str]
    highestRiskReason: Optional[str] = None
    hasSuicidalIdeation: bool
    hasPsychosisIndicators: bool
    shouldShowEmergency: bool
    shouldBlockChat: bool
    shouldRedirectEmergency: bool

class AnswerResponse(BaseModel):
    triggered: bool
    result: Optional[TriageOut] = None

class ScreeningResponse(BaseModel):
    result: TriageOut
    detectedConditions: List[ConditionTag]
    referralRequested: bool

class SocialFunctionResponse(BaseModel):
    totalScore: int
    functionalLevel: FunctionalLevel
    overallRisk: RiskLevel
