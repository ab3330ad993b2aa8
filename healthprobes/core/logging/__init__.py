"""Structured logging built on the standard ``logging`` module."""
from .logger import StructuredLogger, get_logger

__all__ = [
    "StructuredLogger",
    "get_logger",
]
