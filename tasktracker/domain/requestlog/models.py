from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class RequestLogEntry:
    route: str
    method: str
    status_code: int
    duration_ms: int  # >= 0
    error_message: Optional[str] = None  # failures only
    created_at: Optional[datetime] = None
