"""Bridge between RefreshCoordinator observers and the EventBus."""

from __future__ import annotations

from refreshable.core.coordinator import RefreshCoordinator, RefreshState
from refreshable.gui.bus import EventBus
from refreshable.gui.events_state import RefreshStateChanged


class RefreshStateBridgeController:
    """Re-emit coordinator notifications as RefreshStateChanged bus events.

    Lets bindings that do not hold the coordinator (status badges, toolbars)
    react to loading/error changes through the per-client bus.

    Flow:
        RefreshCoordinator.trigger() -> observer -> emit RefreshStateChanged

    Attributes:
        _coordinator: Coordinator being observed.
        _bus: Per-client EventBus instance.
    """

    def __init__(self, coordinator: RefreshCoordinator, bus: EventBus) -> None:
        self._coordinator: RefreshCoordinator = coordinator
        self._bus: EventBus = bus
        self._coordinator.subscribe(self._on_state_changed)

    def _on_state_changed(self, state: RefreshState) -> None:
        self._bus.emit(
            RefreshStateChanged(
                source=self._coordinator.name,
                is_loading=state.is_loading,
                error=state.error,
            )
        )

    def detach(self) -> None:
        """Stop forwarding notifications."""
        self._coordinator.unsubscribe(self._on_state_changed)
