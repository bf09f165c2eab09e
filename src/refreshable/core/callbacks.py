"""Sync-or-async callback helpers (UI-agnostic).

Hooks handed to the coordinator may be plain functions or coroutine
functions. `call_flexible` gives both the same awaitable contract: a sync
callback completes immediately, an async one is awaited.
"""

from __future__ import annotations

import inspect
from typing import Any, Awaitable, Callable, Optional, Union

FlexibleCallback = Callable[[], Union[None, Awaitable[Any]]]


async def call_flexible(callback: FlexibleCallback) -> Any:
    """Call `callback` and await its result if it returned an awaitable.

    Exceptions raised while calling or awaiting propagate unchanged.

    Args:
        callback: Zero-argument callable, sync or async.

    Returns:
        The (awaited) return value of the callback.
    """
    result = callback()
    if inspect.isawaitable(result):
        result = await result
    return result


def callback_name(callback: Optional[Callable[..., Any]]) -> str:
    """Best-effort readable name for log messages."""
    if callback is None:
        return "None"
    return getattr(callback, "__qualname__", None) or getattr(callback, "__name__", None) or repr(callback)
