from __future__ import annotations


class DomainError(Exception):
    """Base for errors raised by domain services."""


class ValidationError(DomainError):
    pass


class NotFoundError(DomainError):
    pass


class ConflictError(DomainError):
    pass


class TimerAlreadyRunningError(ConflictError):
    def __init__(self, message: str = "Timer already running") -> None:
        super().__init__(message)


class TimerNotRunningError(ConflictError):
    def __init__(self, message: str = "Timer not running") -> None:
        super().__init__(message)
