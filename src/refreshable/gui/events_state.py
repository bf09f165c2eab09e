"""Event definitions for refresh state notifications.

These are state change notifications (not user intents), emitted by
RefreshStateBridgeController whenever a RefreshCoordinator notifies.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True, slots=True)
class RefreshStateChanged:
    """Coordinator state change notification.

    Attributes:
        source: Name of the coordinator that changed.
        is_loading: True while the coordinator's operations are running.
        error: First failure of the last refresh, or None.
    """

    source: str
    is_loading: bool
    error: Optional[BaseException] = None
