"""Diagnostic logging shared by the API, the UI and the CLI scripts.

Console output always; a daily file under ``LOG_DIR`` (default ``logs/``)
unless ``LOG_TO_FILE`` is off. Worker threads are named, so the thread
name is part of every line.
"""
from __future__ import annotations

import logging
import os
import sys
from datetime import date
from pathlib import Path

_FORMAT = "%(asctime)s  %(levelname)-8s  [%(threadName)s]  %(name)s  %(message)s"
_DATE_FMT = "%Y-%m-%d %H:%M:%S"

# SDK and server loggers that drown out ours at INFO
_CHATTY = ("httpx", "httpcore", "openai", "anthropic", "urllib3", "google.auth", "werkzeug")

_configured = False


def get_logger(name: str) -> logging.Logger:
    global _configured
    if not _configured:
        _configure()
        _configured = True
    return logging.getLogger(name)


def _flag(key: str, default: str) -> bool:
    return os.environ.get(key, default).strip().lower() in ("1", "true", "yes", "on")


def _log_dir() -> Path:
    custom = os.environ.get("LOG_DIR", "").strip()
    return Path(custom) if custom else Path(__file__).resolve().parent.parent / "logs"


def _configure() -> None:
    level = getattr(logging, os.environ.get("LOG_LEVEL", "INFO").strip().upper(), logging.INFO)
    formatter = logging.Formatter(_FORMAT, datefmt=_DATE_FMT)

    root = logging.getLogger()
    root.setLevel(level)
    for name in _CHATTY:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    # Streamlit and pytest install their own root handlers
    if root.handlers:
        return

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(level)
    console.setFormatter(formatter)
    root.addHandler(console)

    if not _flag("LOG_TO_FILE", "true"):
        return

    log_file = _log_dir() / f"planner_{date.today():%Y-%m-%d}.log"
    try:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
    except OSError as exc:
        root.warning("File logging disabled, cannot open %s: %s", log_file, exc)
        return
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(formatter)
    root.addHandler(file_handler)
