from dataclasses import dataclass
import os
from pathlib import Path

from dotenv import find_dotenv, load_dotenv


@dataclass(frozen=True)
class Settings:
    bot_token: str
    owner_telegram_id: int
    timezone: str
    db_path: Path
    log_level: str
    log_dir: Path


def load_settings() -> Settings:
    # .env from the working directory (or its parents), never overriding real env vars
    load_dotenv(find_dotenv(usecwd=True))

    bot_token = os.getenv("BOT_TOKEN", "").strip()
    owner_raw = os.getenv("OWNER_TELEGRAM_ID", "0").strip()
    tz = os.getenv("TZ", "Europe/Helsinki").strip()
    db_raw = os.getenv("DB_PATH", "data/tasks.db").strip()
    log_level = os.getenv("LOG_LEVEL", "INFO").strip().upper()
    log_dir = os.getenv("LOG_DIR", "logs").strip()

    if not bot_token:
        raise RuntimeError("BOT_TOKEN missing in .env")
    try:
        owner_id = int(owner_raw)
    except ValueError:
        raise RuntimeError("OWNER_TELEGRAM_ID missing/invalid in .env") from None
    if owner_id <= 0:
        raise RuntimeError("OWNER_TELEGRAM_ID missing/invalid in .env")

    # relative paths are resolved against the repo root by the composition root
    return Settings(
        bot_token=bot_token,
        owner_telegram_id=owner_id,
        timezone=tz,
        db_path=Path(db_raw),
        log_level=log_level,
        log_dir=Path(log_dir),
    )
