import asyncio

import pytest

from healthprobes.core.cancellation import CancellationToken
from healthprobes.domain.errors import OperationCancelledError


def test_cancel_runs_callbacks_once():
    token = CancellationToken()
    calls = []
    token.register(lambda: calls.append("a"))
    token.cancel()
    token.cancel()
    assert token.is_cancellation_requested
    assert calls == ["a"]

    # late registrations run immediately
    token.register(lambda: calls.append("b"))
    assert calls == ["a", "b"]
    with pytest.raises(OperationCancelledError):
        token.raise_if_cancelled()


def test_linked_child_follows_parent():
    parent = CancellationToken()
    child = parent.linked()
    assert not child.is_cancellation_requested
    parent.cancel()
    assert child.is_cancellation_requested


def test_closed_child_detaches_from_parent():
    parent = CancellationToken()
    with parent.linked() as child:
        pass
    parent.cancel()
    assert not child.is_cancellation_requested


def test_child_of_cancelled_parent_starts_cancelled():
    parent = CancellationToken()
    parent.cancel()
    assert parent.linked(10).is_cancellation_requested


@pytest.mark.anyio
async def test_linked_timeout_fires():
    parent = CancellationToken()
    with parent.linked(0.02) as child:
        await asyncio.wait_for(child.wait(), timeout=2)
        assert child.is_cancellation_requested
    assert not parent.is_cancellation_requested


@pytest.mark.anyio
async def test_guard_returns_result():
    token = CancellationToken()
    assert await token.guard(asyncio.sleep(0, result=42)) == 42


@pytest.mark.anyio
async def test_guard_propagates_inner_errors():
    async def fail():
        raise ConnectionResetError("reset")

    with pytest.raises(ConnectionResetError):
        await CancellationToken().guard(fail())


@pytest.mark.anyio
async def test_guard_cancels_inner_work():
    cleaned_up = asyncio.Event()

    async def work():
        try:
            await asyncio.sleep(10)
        finally:
            cleaned_up.set()

    token = CancellationToken()
    token.cancel_after(0.02)
    with pytest.raises(OperationCancelledError):
        await token.guard(work())
    assert cleaned_up.is_set()


@pytest.mark.anyio
async def test_guard_on_cancelled_token_does_not_start_work():
    started = []

    async def work():
        started.append(True)

    token = CancellationToken()
    token.cancel()
    with pytest.raises(OperationCancelledError):
        await token.guard(work())
    assert started == []
