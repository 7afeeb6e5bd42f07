"""
Referral escalation client.

Asks the referral service to open a referral (and admin alert) for users
screened at high or imminent risk. Best-effort: by the time this runs the
local escalation actions have already been decided and handed to the caller.
A failure here is logged and returned as a ReferralFailure, never retried,
and never changes those actions.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Iterable, List, Optional

import httpx

from ..core.config import settings
from ..core.logging import get_logger
from ..rules.models import ConditionTag, RiskLevel, TriageResult

logger = get_logger(__name__)

REFERRAL_LEVELS = (RiskLevel.HIGH, RiskLevel.IMMINENT)


@dataclass(frozen=True)
class ReferralOutcome:
    referral_id: Optional[str] = None
    alert_id: Optional[str] = None


@dataclass(frozen=True)
class ReferralFailure:
    reason: str
    status_code: Optional[int] = None


def needs_referral(result: TriageResult) -> bool:
    return result.risk_level in REFERRAL_LEVELS


def build_payload(user_id: str, result: TriageResult, conditions: Iterable[ConditionTag],
                  contact_preference: List[str]) -> dict:
    return {
        "userId": user_id,
        "riskLevel": result.risk_level.value,
        "detectedConditions": [c.value for c in ConditionTag if c in set(conditions)],
        "referralReason": result.highest_risk_reason,
        "contactPreference": list(contact_preference),
    }


class ReferralClient:
    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        contact_preference: List[str] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = (base_url or settings.REFERRAL_BASE_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.REFERRAL_TIMEOUT_SECONDS
        self.contact_preference = contact_preference or list(settings.REFERRAL_CONTACT_PREFERENCE)
        self.transport = transport

    @property
    def url(self) -> str:
        return f"{self.base_url}{settings.REFERRAL_CREATE_PATH}"

    async def request_referral(
        self,
        user_id: str,
        result: TriageResult,
        conditions: Iterable[ConditionTag],
    ) -> ReferralOutcome | ReferralFailure:
        if not needs_referral(result):
            return ReferralOutcome()

        payload = build_payload(user_id, result, conditions, self.contact_preference)
        log = logger.bind(user_id=user_id, risk_level=result.risk_level.value)
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                r = await client.post(self.url, json=payload)
                r.raise_for_status()
                data = r.json()
        except httpx.HTTPStatusError as e:
            log.error("referral_request_rejected", status_code=e.response.status_code)
            return ReferralFailure("referral service returned an error", e.response.status_code)
        except httpx.HTTPError as e:
            log.error("referral_request_failed", error=str(e) or type(e).__name__)
            return ReferralFailure(f"transport error: {type(e).__name__}")
        except ValueError:
            log.error("referral_response_malformed")
            return ReferralFailure("malformed response body")

        if not isinstance(data, dict) or not data.get("referralId"):
            log.error("referral_response_malformed")
            return ReferralFailure("response missing referralId")

        alert_id = data.get("alertId")
        outcome = ReferralOutcome(str(data["referralId"]), str(alert_id) if alert_id is not None else None)
        log.info("referral_created", referral_id=outcome.referral_id, alert_id=outcome.alert_id)
        return outcome
