import itertools

import httpx
import pytest
from fastapi.testclient import TestClient

from mhtriage.main import app
from mhtriage.api.deps import get_referral_client
from mhtriage.escalation.referral import ReferralClient
from mhtriage.rules.registry import build_registry, get_registry

# Small bank exercising implicit rules, explicit overrides and false-triggers.
CUSTOM_QUESTIONS = [
    {"id": "q_imm", "text": "imminent via metadata", "triageRisk": "imminent", "triageReason": "metadata imminent", "triggerCondition": "suicidal"},
    {"id": "q_high", "text": "high via metadata", "triageRisk": "high", "triggerCondition": "psychosis"},
    {"id": "q_mod", "text": "moderate via metadata", "triageRisk": "moderate", "triageReason": "metadata moderate"},
    {"id": "q_override", "text": "metadata says imminent, rule says moderate", "triageRisk": "imminent", "triageReason": "metadata override"},
    {"id": "q_neg", "text": "a 'no' is the concerning answer"},
    {"id": "q_plain", "text": "no triage, condition only", "triggerCondition": "anxiety"},
]
CUSTOM_RULES = [
    {"questionId": "q_override", "triggerValue": True, "riskLevel": "moderate", "reason": "explicit moderate", "actions": ["show_warning_banner", "log_safety_event"]},
    {"questionId": "q_neg", "triggerValue": False, "riskLevel": "high", "reason": "denied support", "actions": ["show_warning_banner", "log_safety_event"]},
]
CUSTOM_INDICATORS = {"suicidal_ideation": ["q_imm"], "psychosis": ["q_high"]}


def all_answer_sets(registry):
    """Every yes / no / unanswered combination over the questions that carry rules."""
    qids = sorted({r.question_id for r in registry.rules})
    for values in itertools.product((True, False, None), repeat=len(qids)):
        yield {q: v for q, v in zip(qids, values) if v is not None}


@pytest.fixture()
def registry():
    return get_registry()


@pytest.fixture()
def custom_registry():
    return build_registry(CUSTOM_QUESTIONS, CUSTOM_RULES, CUSTOM_INDICATORS)


class RecordingTransport(httpx.MockTransport):
    def __init__(self, handler):
        self.requests = []

        def record(request):
            self.requests.append(request)
            return handler(request)

        super().__init__(record)


@pytest.fixture()
def referral_ok():
    return RecordingTransport(lambda request: httpx.Response(200, json={"success": True, "referralId": "ref-1", "alertId": "alert-1"}))


@pytest.fixture()
def referral_down():
    def boom(request):
        raise httpx.ConnectError("connection refused", request=request)
    return RecordingTransport(boom)


@pytest.fixture()
def client(referral_ok):
    app.dependency_overrides[get_referral_client] = lambda: ReferralClient(base_url="http://referrals.test", transport=referral_ok)
    yield TestClient(app)
    app.dependency_overrides.clear()
