"""
SHOPSEED — Centralised Logging
==============================
• get_logger(name)          → stdlib logger with console + file output
"""

import logging
import sys

import config

# ── Log directory ────────────────────────────────────────────────────
LOG_DIR = config.LOG_DIR
LOG_DIR.mkdir(parents=True, exist_ok=True)

# ── Formatter ────────────────────────────────────────────────────────
_FMT = "%(asctime)s  %(levelname)-8s  [%(name)s]  %(message)s"
_DATE_FMT = "%Y-%m-%d %H:%M:%S"
_formatter = logging.Formatter(_FMT, datefmt=_DATE_FMT)

# ── Shared file handler (all modules → single log file) ─────────────
_file_handler = logging.FileHandler(
    LOG_DIR / "shopseed.log", encoding="utf-8"
)
_file_handler.setFormatter(_formatter)
_file_handler.setLevel(logging.DEBUG)

# ── Console handler ─────────────────────────────────────────────────
_console_handler = logging.StreamHandler(sys.stdout)
_console_handler.setFormatter(_formatter)
_console_handler.setLevel(logging.INFO)


def get_logger(name: str) -> logging.Logger:
    """Return a named logger that writes to both console and log file."""
    logger = logging.getLogger(f"shopseed.{name}")
    if not logger.handlers:
        logger.setLevel(logging.DEBUG)
        logger.addHandler(_file_handler)
        logger.addHandler(_console_handler)
        logger.propagate = False
    return logger


def set_console_level(level: int) -> None:
    """Adjust console verbosity (the log file always records DEBUG)."""
    _console_handler.setLevel(level)
