# src/refreshable/gui/controllers/__init__.py
"""Controllers connect coordinators to the per-client EventBus."""

from refreshable.gui.controllers.refresh_state_bridge import RefreshStateBridgeController

__all__ = [
    "RefreshStateBridgeController",
]
