from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, List, Optional, TypeVar

from healthprobes.domain.errors import OperationCancelledError

T = TypeVar("T")


class CancellationToken:
    """Cooperative cancellation signal shared between a caller and a probe.

    Tokens can be linked: a child created with ``linked()`` fires when its
    parent fires or when its own timer elapses, whichever comes first.
    """

    def __init__(self) -> None:
        self._cancelled = False
        self._event: Optional[asyncio.Event] = None
        self._callbacks: List[Callable[[], None]] = []
        self._timer: Optional[asyncio.TimerHandle] = None
        self._parent: Optional[CancellationToken] = None

    @classmethod
    def none(cls) -> "CancellationToken":
        """A token nobody holds a reference to cancel."""
        return cls()

    @property
    def is_cancellation_requested(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        if self._cancelled:
            return
        self._cancelled = True
        if self._event is not None:
            self._event.set()
        callbacks, self._callbacks = self._callbacks, []
        for cb in callbacks:
            cb()

    def cancel_after(self, delay_s: float) -> None:
        """Schedule cancellation on the running loop."""
        if self._timer is not None:
            self._timer.cancel()
        loop = asyncio.get_running_loop()
        self._timer = loop.call_later(max(0.0, delay_s), self.cancel)

    def register(self, callback: Callable[[], None]) -> None:
        if self._cancelled:
            callback()
            return
        self._callbacks.append(callback)

    def unregister(self, callback: Callable[[], None]) -> None:
        try:
            self._callbacks.remove(callback)
        except ValueError:
            pass

    def raise_if_cancelled(self) -> None:
        if self._cancelled:
            raise OperationCancelledError()

    def linked(self, timeout_s: Optional[float] = None) -> "CancellationToken":
        """Create a child token that also fires after ``timeout_s`` seconds."""
        child = CancellationToken()
        child._parent = self
        self.register(child.cancel)
        if timeout_s is not None and not child.is_cancellation_requested:
            child.cancel_after(timeout_s)
        return child

    def close(self) -> None:
        """Drop the timer and detach from the parent token."""
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        if self._parent is not None:
            self._parent.unregister(self.cancel)
            self._parent = None

    def __enter__(self) -> "CancellationToken":
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False

    async def wait(self) -> None:
        if self._cancelled:
            return
        if self._event is None:
            self._event = asyncio.Event()
        await self._event.wait()

    async def guard(self, awaitable: Awaitable[T]) -> T:
        """Await ``awaitable`` unless the token fires first.

        On cancellation the inner task is cancelled and awaited before
        ``OperationCancelledError`` is raised, so resources it holds are
        released by its own cleanup code.
        """
        if self._cancelled:
            if asyncio.iscoroutine(awaitable):
                awaitable.close()
            raise OperationCancelledError()
        task = asyncio.ensure_future(awaitable)
        waiter = asyncio.ensure_future(self.wait())
        try:
            await asyncio.wait({task, waiter}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            waiter.cancel()
            if not task.done():
                task.cancel()
                await asyncio.wait({task})
        if task.cancelled():
            raise OperationCancelledError()
        return task.result()
