import yaml
from typing import Any, Dict, List, Tuple

from ..core.config import settings

REQUIRED_INDICATORS = ("suicidal_ideation", "psychosis")


class RegistryConfigError(Exception):
    """Raised when the question bank or rule file cannot be turned into a registry."""


def _read_yaml(path: str) -> Dict[str, Any]:
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except FileNotFoundError:
        raise RegistryConfigError(f"Missing file: {path}")
    except yaml.YAMLError as e:
        raise RegistryConfigError(f"Invalid YAML in {path}: {e}")
    if not isinstance(data, dict):
        raise RegistryConfigError(f"{path}: expected a mapping at top level")
    return data


def load_question_bank(path: str | None = None) -> List[Dict[str, Any]]:
    path = path or settings.QUESTION_BANK_PATH
    items = _read_yaml(path).get("questions")
    if not isinstance(items, list) or not items:
        raise RegistryConfigError(f"{path}: 'questions' must be a non-empty list")
    return items


def load_explicit_rules(path: str | None = None) -> Tuple[List[Dict[str, Any]], Dict[str, List[str]]]:
    path = path or settings.TRIAGE_RULES_PATH
    data = _read_yaml(path)
    rules = data.get("rules") or []
    indicators = data.get("indicators") or {}
    if not isinstance(rules, list):
        raise RegistryConfigError(f"{path}: 'rules' must be a list")
    if not isinstance(indicators, dict):
        raise RegistryConfigError(f"{path}: 'indicators' must be a mapping")
    # the result flags depend on these lists; an absent one would never fire
    missing = [name for name in REQUIRED_INDICATORS if not indicators.get(name)]
    if missing:
        raise RegistryConfigError(f"{path}: indicators missing {missing}")
    return rules, indicators
