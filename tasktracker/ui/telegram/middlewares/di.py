from __future__ import annotations

from typing import Any, Awaitable, Callable, Dict

from aiogram import BaseMiddleware
from aiogram.types import TelegramObject

from tasktracker.domain.operations import TaskOperations
from tasktracker.domain.tasks.ports import Clock


class DIMiddleware(BaseMiddleware):
    """
    Inject dependencies to handlers via `data` dict.

    Handlers can request args by name, e.g.
      async def handler(message: Message, ops: TaskOperations, clock: Clock): ...
    """

    def __init__(self, ops: TaskOperations, clock: Clock) -> None:
        self._ops = ops
        self._clock = clock

    async def __call__(
        self,
        handler: Callable[[TelegramObject, Dict[str, Any]], Awaitable[Any]],
        event: TelegramObject,
        data: Dict[str, Any],
    ) -> Any:
        # keep names stable across the project
        data["ops"] = self._ops
        data["clock"] = self._clock

        return await handler(event, data)
