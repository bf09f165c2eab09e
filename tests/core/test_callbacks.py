"""Tests for sync-or-async callback helpers."""

from __future__ import annotations

import asyncio
import functools

import pytest

from refreshable.core.callbacks import call_flexible, callback_name


@pytest.mark.asyncio
async def test_call_flexible_sync() -> None:
    calls: list[str] = []

    def hook() -> str:
        calls.append("sync")
        return "done"

    assert await call_flexible(hook) == "done"
    assert calls == ["sync"]


@pytest.mark.asyncio
async def test_call_flexible_async_waits_for_completion() -> None:
    calls: list[str] = []

    async def hook() -> str:
        await asyncio.sleep(0.01)
        calls.append("async")
        return "done"

    assert await call_flexible(hook) == "done"
    assert calls == ["async"]


@pytest.mark.asyncio
async def test_call_flexible_lambda_returning_future() -> None:
    """Plain callables returning an awaitable are awaited too."""
    loop = asyncio.get_running_loop()
    fut: asyncio.Future[int] = loop.create_future()
    loop.call_later(0.01, fut.set_result, 7)

    assert await call_flexible(lambda: fut) == 7


@pytest.mark.asyncio
@pytest.mark.parametrize("is_async", [False, True])
async def test_call_flexible_propagates_errors(is_async: bool) -> None:
    def sync_hook() -> None:
        raise ValueError("sync")

    async def async_hook() -> None:
        raise ValueError("async")

    with pytest.raises(ValueError):
        await call_flexible(async_hook if is_async else sync_hook)


def test_callback_name() -> None:
    def named() -> None:
        pass

    assert callback_name(None) == "None"
    assert callback_name(named).endswith("named")
    assert "partial" in callback_name(functools.partial(named))
