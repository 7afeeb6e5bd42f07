from fastapi import APIRouter, Depends
from ...core.config import settings
from ..deps import get_rule_registry
from ...rules.registry import RuleRegistry

router = APIRouter(tags=["misc"])

@router.get("/health")
def health():
    return {"ok": True}

@router.get("/version")
def version():
    return {"version": settings.API_VERSION}

@router.get("/config/registry")
def registry_summary(registry: RuleRegistry = Depends(get_rule_registry)):
    return {
        "questions": [q.id for q in registry.questions],
        "explicitRules": len(registry.explicit_rules),
        "implicitRules": len(registry.implicit_rules),
    }
