from __future__ import annotations

from typing import Optional, Tuple

from tasktracker.domain.tasks.models import TASK_STATUSES


def command_args(text: Optional[str]) -> str:
    """Everything after the command word: '/add foo bar' -> 'foo bar'."""
    text = (text or "").strip()
    if not text:
        return ""
    parts = text.split(maxsplit=1)
    if len(parts) < 2:
        return ""
    return parts[1].strip()


def parse_list_args(args: str) -> Tuple[Optional[str], Optional[str]]:
    """
    '/tasks done report' -> ("done", "report").
    The first word is a status filter only when it names a status.
    """
    args = (args or "").strip()
    if not args:
        return None, None
    first, _, rest = args.partition(" ")
    if first in TASK_STATUSES:
        return first, rest.strip() or None
    return None, args


def parse_add_args(args: str) -> Tuple[str, Optional[str]]:
    """'name | description' -> (name, description)."""
    name, sep, description = (args or "").partition("|")
    if not sep:
        return name.strip(), None
    return name.strip(), description.strip() or None


def parse_task_id(raw: Optional[str]) -> Optional[int]:
    raw = (raw or "").strip().lstrip("#")
    if not raw.isdigit():
        return None
    return int(raw)


def parse_status_args(args: str) -> Tuple[Optional[int], Optional[str]]:
    """'12 done' -> (12, "done"). Status is passed through unvalidated."""
    parts = (args or "").split()
    if not parts:
        return None, None
    task_id = parse_task_id(parts[0])
    status = parts[1] if len(parts) > 1 else None
    return task_id, status
