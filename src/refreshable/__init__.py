"""Pull-to-refresh coordination for NiceGUI content.

The core (`refreshable.core`) is UI-agnostic; `refreshable.gui` holds the
NiceGUI glue.
"""

from refreshable.core.callbacks import FlexibleCallback, call_flexible
from refreshable.core.coordinator import (
    ConcurrencyPolicy,
    CoordinatorStatus,
    EmptyOperationsError,
    RefreshCoordinator,
    RefreshError,
    RefreshState,
)

__version__ = "0.1.0"

__all__ = [
    "ConcurrencyPolicy",
    "CoordinatorStatus",
    "EmptyOperationsError",
    "FlexibleCallback",
    "RefreshCoordinator",
    "RefreshError",
    "RefreshState",
    "call_flexible",
]
