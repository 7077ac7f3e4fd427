import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

LOG_DIR = Path(os.getenv("KIOSK_LOG_DIR", "logs"))
LOG_FILE = LOG_DIR / "kiosk.log"
LOG_FORMAT = "%(levelname)s | %(asctime)s | %(name)s | %(message)s"


def _console_stream():
    # Kiosk terminals run with odd locales; force UTF-8 on stdout when possible
    try:
        return open(sys.stdout.fileno(), mode="w", encoding="utf-8", closefd=False)
    except (AttributeError, OSError, ValueError):
        return sys.stdout


def get_logger(name: str) -> logging.Logger:
    logger = logging.getLogger(name)

    if logger.handlers:
        return logger

    formatter = logging.Formatter(LOG_FORMAT)

    LOG_DIR.mkdir(parents=True, exist_ok=True)
    file_handler = RotatingFileHandler(
        LOG_FILE, maxBytes=2_000_000, backupCount=3, encoding="utf-8"
    )
    file_handler.setFormatter(formatter)
    file_handler.setLevel(logging.INFO)

    console_handler = logging.StreamHandler(_console_stream())
    console_handler.setFormatter(formatter)
    console_handler.setLevel(logging.INFO)

    logger.addHandler(file_handler)
    logger.addHandler(console_handler)
    logger.setLevel(logging.INFO)
    logger.propagate = False

    return logger
