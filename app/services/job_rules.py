"""
Field rules for job postings.

Kept free of database access so the endpoint and the tests share one source
of truth for what a valid job looks like.
"""

import math
import re
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from app.core.exceptions import ValidationError

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

# Applied only when a non-empty value is supplied
TEXT_FIELDS = ("title", "description", "job_difficulty", "project_length", "scope", "name")
# May be explicitly cleared with null
NULLABLE_FIELDS = ("company", "note", "video_file_url")
LIST_FIELDS = ("category", "key_responsibilities", "required_skills", "tools")


def as_list(value: Any) -> List[Any]:
    """Wrap a scalar in a list; pass sequences through; drop empty strings."""
    if value is None:
        return []
    if isinstance(value, (list, tuple, set)):
        items = list(value)
    else:
        items = [value]
    return [item for item in items if item != ""]


def validate_email(email: str) -> str:
    if not EMAIL_PATTERN.match(email):
        raise ValidationError("Invalid email format")
    return email


def validate_budget_min(value: float) -> float:
    if math.isnan(value) or value < 0:
        raise ValidationError("Invalid budgetMin value")
    return value


def validate_budget_max(value: float, budget_min: Optional[float]) -> float:
    floor = budget_min if budget_min is not None else 0
    if math.isnan(value) or value < floor:
        raise ValidationError("Invalid budgetMax value; must be greater than budgetMin")
    return value


def validate_future_deadline(deadline: datetime, now: Optional[datetime] = None) -> datetime:
    """Deadlines without a timezone are taken as UTC."""
    now = now or datetime.now(timezone.utc)
    if deadline.tzinfo is None:
        deadline = deadline.replace(tzinfo=timezone.utc)
    if deadline <= now:
        raise ValidationError("Invalid deadline. Please provide a future date")
    return deadline


def validate_new_job(fields: Dict[str, Any]) -> Dict[str, Any]:
    """Check cross-field rules on a creation payload and fill list defaults."""
    if fields.get("budget_min") is not None:
        validate_budget_min(fields["budget_min"])
    if fields.get("budget_max") is not None:
        validate_budget_max(fields["budget_max"], fields.get("budget_min"))
    if fields.get("email"):
        validate_email(fields["email"])

    for key in LIST_FIELDS:
        if fields.get(key) is None:
            fields[key] = []
    return fields


def build_job_update(job, changes: Dict[str, Any], now: Optional[datetime] = None) -> Dict[str, Any]:
    """
    Turn the fields present in an update request into column values.

    Args:
        job: The stored job, used for budget cross-checks
        changes: Fields explicitly sent by the caller (exclude_unset dump)
        now: Reference time for the deadline check

    Returns:
        Mapping of attribute name to new value

    Raises:
        ValidationError: on the first invalid field
    """
    update: Dict[str, Any] = {}

    for key in TEXT_FIELDS:
        if changes.get(key):
            update[key] = changes[key]

    for key in LIST_FIELDS:
        if changes.get(key) is not None:
            update[key] = as_list(changes[key])

    if changes.get("budget_min") is not None:
        update["budget_min"] = validate_budget_min(changes["budget_min"])

    if changes.get("budget_max") is not None:
        effective_min = update.get("budget_min", job.budget_min)
        update["budget_max"] = validate_budget_max(changes["budget_max"], effective_min)
    elif "budget_min" in update and job.budget_max is not None and update["budget_min"] > job.budget_max:
        raise ValidationError("Invalid budgetMin value; must not exceed budgetMax")

    if changes.get("deadline") is not None:
        update["deadline"] = validate_future_deadline(changes["deadline"], now)

    if changes.get("email"):
        update["email"] = validate_email(changes["email"])

    for key in NULLABLE_FIELDS:
        if key in changes:
            update[key] = changes[key]

    return update
