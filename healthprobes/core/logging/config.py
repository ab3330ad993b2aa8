from __future__ import annotations

import logging
import os
from logging.handlers import QueueHandler, QueueListener, RotatingFileHandler
from pathlib import Path
from queue import Queue
from typing import Optional

from .formatter import ConsoleFormatter, JSONFormatter
from .levels import register_levels, to_level

_listener: QueueListener | None = None


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def bootstrap_logging(
    *,
    level: str | int | None = None,
    console: Optional[bool] = None,
    log_dir: Optional[Path] = None,
    log_file_name: str = "healthprobes.jsonl",
    max_bytes: int = 5_000_000,
    backup_count: int = 5,
) -> None:
    """Configure the root logger for the CLI.

    Console output goes to stderr so JSON reports on stdout stay parseable.
    When ``log_dir`` is given, records are also written as JSON lines through
    a queue so file I/O never runs on the event loop thread.
    """
    global _listener
    shutdown_logging()
    register_levels()

    root = logging.getLogger()
    root.handlers.clear()
    lvl = to_level(level if level is not None else os.getenv("LOG_LEVEL"))
    root.setLevel(lvl)

    if console is None:
        console = _env_flag("LOG_CONSOLE", True)
    if console:
        handler = logging.StreamHandler()
        console_level = os.getenv("LOG_CONSOLE_LEVEL", "")
        handler.setLevel(to_level(console_level, default=lvl))
        handler.setFormatter(ConsoleFormatter(color=_env_flag("LOG_COLOR", True)))
        root.addHandler(handler)

    if log_dir:
        log_dir.mkdir(parents=True, exist_ok=True)
        json_handler = RotatingFileHandler(
            str(log_dir / log_file_name), maxBytes=max_bytes, backupCount=backup_count
        )
        json_handler.setLevel(lvl)
        json_handler.setFormatter(JSONFormatter())
        q: Queue[logging.LogRecord] = Queue(-1)
        root.addHandler(QueueHandler(q))
        _listener = QueueListener(q, json_handler, respect_handler_level=True)
        _listener.start()


def shutdown_logging() -> None:
    """Stop the queue listener, flushing pending records."""
    global _listener
    if _listener is not None:
        _listener.stop()
        _listener = None
