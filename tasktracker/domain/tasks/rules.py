from __future__ import annotations

from typing import Optional

from tasktracker.domain.common.errors import ValidationError
from tasktracker.domain.tasks.models import NAME_MAX_LEN, TASK_STATUSES


def normalize_name(name: Optional[str]) -> str:
    cleaned = (name or "").strip()
    if not cleaned:
        raise ValidationError("Task name is required")
    if len(cleaned) > NAME_MAX_LEN:
        raise ValidationError(f"Task name is too long (max {NAME_MAX_LEN} chars)")
    return cleaned


def validate_status(status: Optional[str]) -> str:
    if not status:
        raise ValidationError("Status is required")
    if status not in TASK_STATUSES:
        raise ValidationError("Invalid status")
    return status


def validate_optional_status(status: Optional[str]) -> Optional[str]:
    if status is None or status == "":
        return None
    return validate_status(status)
