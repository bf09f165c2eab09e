"""Helpers for UI updates that may outlive their NiceGUI client."""

from __future__ import annotations

from typing import Callable

from refreshable.core.utils.logging import get_logger

logger = get_logger(__name__)


def safe_call(func: Callable, *args, **kwargs) -> None:
    """Call `func`, ignoring "client deleted" errors.

    Coordinator notifications can arrive after the browser tab that owns the
    UI elements is gone. Any other RuntimeError is logged and re-raised.
    """
    try:
        func(*args, **kwargs)
    except RuntimeError as e:
        if "deleted" not in str(e).lower():
            logger.error(f"safe_call caught RuntimeError in {getattr(func, '__name__', func)}: {e}")
            raise
