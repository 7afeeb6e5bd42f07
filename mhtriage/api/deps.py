from ..escalation.referral import ReferralClient
from ..rules.registry import RuleRegistry, get_registry

def get_rule_registry() -> RuleRegistry:
    return get_registry()

def get_referral_client() -> ReferralClient:
    return ReferralClient()
