"""Fields attached to every log record emitted while they are in scope.

asyncio copies the context into each task, so fields bound while one probe
runs never show up on a concurrently running probe's records.
"""
from __future__ import annotations

from contextlib import contextmanager
from contextvars import ContextVar
from types import MappingProxyType
from typing import Any, Dict, Iterator, Mapping

_EMPTY: Mapping[str, Any] = MappingProxyType({})
_fields: ContextVar[Mapping[str, Any]] = ContextVar("probe_log_fields", default=_EMPTY)


def get_context() -> Dict[str, Any]:
    return dict(_fields.get())


def _with(values: Mapping[str, Any]) -> Mapping[str, Any]:
    merged = dict(_fields.get())
    merged.update((k, v) for k, v in values.items() if v is not None)
    return MappingProxyType(merged)


@contextmanager
def scoped(**values: Any) -> Iterator[Dict[str, Any]]:
    token = _fields.set(_with(values))
    try:
        yield get_context()
    finally:
        _fields.reset(token)
