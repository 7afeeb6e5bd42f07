from typing import Tuple

from ..rules.models import Action, TriageResult

# Most severe UI first, for callers that execute actions one by one.
ACTION_PRIORITY: Tuple[Action, ...] = (
    Action.REDIRECT_TO_EMERGENCY_RESOURCES,
    Action.SHOW_EMERGENCY_OVERLAY,
    Action.BLOCK_CONVERSATIONAL_FEATURE,
    Action.LOG_SAFETY_EVENT,
    Action.SHOW_WARNING_BANNER,
)


def dispatch(result: TriageResult) -> Tuple[Action, ...]:
    """Ordered, duplicate-free escalation instructions. Executes nothing."""
    return tuple(a for a in ACTION_PRIORITY if a in result.actions)
