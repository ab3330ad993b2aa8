from __future__ import annotations

import logging
from enum import IntEnum


class LogLevel(IntEnum):
    TRACE = 5
    DEBUG = 10
    INFO = 20
    SUCCESS = 25
    WARNING = 30
    ERROR = 40
    CRITICAL = 50


_CUSTOM = {
    LogLevel.TRACE: "TRACE",
    LogLevel.SUCCESS: "SUCCESS",
}


def register_levels() -> None:
    for level, name in _CUSTOM.items():
        if logging.getLevelName(int(level)) != name:
            logging.addLevelName(int(level), name)


def to_level(value: int | str | None, default: int = logging.INFO) -> int:
    """Resolve a level name or number; unknown names map to ``default``."""
    if value is None:
        return default
    if isinstance(value, int):
        return value
    name = value.strip().upper()
    if not name:
        return default
    if name.isdigit():
        return int(name)
    try:
        return int(LogLevel[name])
    except KeyError:
        return default
