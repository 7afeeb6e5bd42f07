from dataclasses import dataclass, replace
from typing import Iterable

from ..rules.models import Action, RiskLevel, max_risk


@dataclass(frozen=True)
class EscalationState:
    risk_level: RiskLevel = RiskLevel.LOW
    emergency_overlay: bool = False
    overlay_dismissible: bool = True
    chat_blocked: bool = False
    redirect_to_emergency: bool = False
    warning_banner: bool = False
    safety_events: int = 0


def apply_actions(state: EscalationState, actions: Iterable[Action], risk_level: RiskLevel) -> EscalationState:
    # Session-side application of dispatched actions. Escalation only ratchets
    # up within a session: block and redirect stay set once seen.
    actions = list(actions)
    risk = max_risk(state.risk_level, risk_level)
    overlay = state.emergency_overlay or Action.SHOW_EMERGENCY_OVERLAY in actions
    return replace(
        state,
        risk_level=risk,
        emergency_overlay=overlay,
        overlay_dismissible=not (overlay and risk == RiskLevel.IMMINENT),
        chat_blocked=state.chat_blocked or Action.BLOCK_CONVERSATIONAL_FEATURE in actions,
        redirect_to_emergency=state.redirect_to_emergency or Action.REDIRECT_TO_EMERGENCY_RESOURCES in actions,
        warning_banner=state.warning_banner or Action.SHOW_WARNING_BANNER in actions,
        safety_events=state.safety_events + actions.count(Action.LOG_SAFETY_EVENT),
    )


def dismiss_overlay(state: EscalationState) -> EscalationState:
    if not state.overlay_dismissible:
        return state
    return replace(state, emergency_overlay=False)
