# tasktracker/logging_setup.py

from __future__ import annotations

import logging
import sys
from pathlib import Path

from tasktracker.domain.requestlog.service import REQUESTS_LOGGER_NAME


def setup_logging(*, level: str = "INFO", log_dir: str | Path = "logs") -> Path:
    """
    Configure logging with:
    - console handler on stderr, at `level`
    - app.log file handler with everything, request log lines included

    Call this once, before the first logger.info. Returns the log file path.
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / "app.log"

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)

    # Remove any pre-existing handlers to avoid duplicates.
    for h in list(root.handlers):
        root.removeHandler(h)

    fmt = logging.Formatter(
        fmt="%(asctime)s - %(name)s - %(levelname)s - [PID:%(process)d] - %(message)s",
    )

    ch = logging.StreamHandler(sys.stderr)
    ch.setLevel(getattr(logging, level.upper(), logging.INFO))
    ch.setFormatter(fmt)
    root.addHandler(ch)

    fh = logging.FileHandler(str(log_file), encoding="utf-8")
    fh.setLevel(logging.DEBUG)
    fh.setFormatter(fmt)
    root.addHandler(fh)

    logging.getLogger(REQUESTS_LOGGER_NAME).setLevel(logging.INFO)
    # aiogram logs every update at INFO
    logging.getLogger("aiogram.event").setLevel(logging.WARNING)

    return log_file
