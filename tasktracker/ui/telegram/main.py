from __future__ import annotations

import asyncio
import logging
import os
from pathlib import Path

from aiogram import Bot, Dispatcher
from aiogram.client.default import DefaultBotProperties
from aiogram.enums import ParseMode
from aiogram.fsm.storage.memory import MemoryStorage

from tasktracker.config import load_settings
from tasktracker.domain.common.time import to_iso
from tasktracker.domain.operations import TaskOperations
from tasktracker.domain.requestlog.service import RequestLogger
from tasktracker.domain.tasks.service import TaskService
from tasktracker.infra.clock.system_clock import SystemClock
from tasktracker.infra.db.connection import Database
from tasktracker.infra.db.repo.request_logs_sqlite import RequestLogsSqliteRepo
from tasktracker.infra.db.repo.tasks_sqlite import TasksSqliteRepo
from tasktracker.infra.db.schema_version import apply_migrations
from tasktracker.logging_setup import setup_logging
from tasktracker.ui.telegram.handlers.dashboard import router as dashboard_router
from tasktracker.ui.telegram.handlers.start import router as start_router
from tasktracker.ui.telegram.handlers.tasks import router as tasks_router
from tasktracker.ui.telegram.middlewares.auth import OwnerOnlyMiddleware
from tasktracker.ui.telegram.middlewares.di import DIMiddleware

logger = logging.getLogger(__name__)


async def main() -> None:
    settings = load_settings()

    repo_root = Path(__file__).resolve().parents[3]  # .../tasktracker/ui/telegram/main.py -> repo root

    log_dir = settings.log_dir if settings.log_dir.is_absolute() else repo_root / settings.log_dir
    log_file = setup_logging(level=settings.log_level, log_dir=log_dir)

    pid = os.getpid()
    logger.info("Bot starting - PID: %s, log file: %s", pid, log_file)

    # --- DB path: one place, always absolute, ensure dir exists ---
    db_path = settings.db_path
    if not db_path.is_absolute():
        db_path = repo_root / db_path
    db_path.parent.mkdir(parents=True, exist_ok=True)
    logger.info("DB_PATH: %s", db_path)

    db = Database(str(db_path))
    clock = SystemClock(settings.timezone)

    await db.init()
    applied = await apply_migrations(db=db, now_iso=to_iso(clock.now()))
    if applied:
        logger.info("Migrations applied: %s", applied)

    # --- services ---
    task_service = TaskService(repo=TasksSqliteRepo(db), clock=clock)
    request_logger = RequestLogger(repo=RequestLogsSqliteRepo(db), clock=clock)
    ops = TaskOperations(task_service, request_logger, default_user_id=settings.owner_telegram_id)

    # --- bot/dispatcher ---
    bot = Bot(
        token=settings.bot_token,
        default=DefaultBotProperties(parse_mode=ParseMode.HTML),
    )
    dp = Dispatcher(storage=MemoryStorage())

    # --- middlewares ---
    dp.message.middleware(OwnerOnlyMiddleware(settings.owner_telegram_id))
    dp.callback_query.middleware(OwnerOnlyMiddleware(settings.owner_telegram_id))

    dp.message.middleware(DIMiddleware(ops, clock))
    dp.callback_query.middleware(DIMiddleware(ops, clock))

    # --- routers ---
    dp.include_router(start_router)
    dp.include_router(tasks_router)
    dp.include_router(dashboard_router)

    logger.info("Starting polling - PID: %s", pid)
    try:
        await dp.start_polling(bot)
    except Exception:
        logger.error("Bot crashed - PID: %s", pid, exc_info=True)
        raise
    finally:
        await request_logger.aclose()
        await bot.session.close()
        logger.info("Bot shutdown complete - PID: %s", pid)


def run() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    run()
