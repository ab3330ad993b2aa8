"""Presentation layer - Command-line interface."""
from .cli import HealthCommand

__all__ = [
    "HealthCommand",
]
