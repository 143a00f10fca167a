from typing import Any, Dict, List

from pulsehr.services.catalog import ONBOARDING_STEPS

MARRIED = "married"


def missing_required(data: Dict[str, Any]) -> Dict[str, List[str]]:
    """
    Required fields left empty, grouped by step title.
    """
    missing: Dict[str, List[str]] = {}
    for step in ONBOARDING_STEPS:
        empty = [f for f in step["required"] if data.get(f) in (None, "")]
        if empty:
            missing[step["title"]] = empty
    return missing


def clean_conditionals(data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Drop answers that only make sense behind another answer:
    number_of_kids without being married, health details without a health problem.
    """
    out = dict(data)
    if str(out.get("marital_status") or "").lower() != MARRIED:
        out["number_of_kids"] = 0
    if not out.get("has_health_problem"):
        out["health_problem_details"] = ""
    return out
