"""Refreshable content view.

RefreshableView wraps arbitrary NiceGUI content with refresh behaviour. The
caller supplies a `builder(is_loading, error)` that draws the content; the
view re-runs it on every coordinator notification and calls
`RefreshCoordinator.trigger()` when the user asks for a refresh.
"""

from __future__ import annotations

from typing import Any, Callable, Optional, Sequence, Union

from nicegui import ui

from refreshable.core.callbacks import FlexibleCallback
from refreshable.core.coordinator import (
    AfterHook,
    ConcurrencyPolicy,
    Operation,
    RefreshCoordinator,
    RefreshState,
)
from refreshable.core.utils.logging import get_logger
from refreshable.gui.bus import EventBus, clear_client_bus
from refreshable.gui.client_utils import safe_call
from refreshable.gui.controllers.refresh_state_bridge import RefreshStateBridgeController

logger = get_logger(__name__)

ContentBuilder = Callable[[bool, Optional[BaseException]], None]


class RefreshableView:
    """Content area driven by a RefreshCoordinator.

    Lifecycle:
        - UI elements are created in render() (not __init__) to ensure correct
          DOM placement within NiceGUI's client context
        - Coordinator notifications refresh the content and the button
        - render() is idempotent; the first call builds the elements
        - dispose() runs when the NiceGUI client is deleted (not on a
          transient disconnect) and also drops the client's EventBus

    Attributes:
        _coordinator: Coordinator owned by this view.
        _builder: Callback drawing the content from (is_loading, error).
        _bridge: Optional bridge forwarding state to the EventBus.
        _content: ui.refreshable wrapping _build_content (created in render()).
        _button: Refresh button (created in render()).
    """

    def __init__(
        self,
        coordinator: RefreshCoordinator,
        builder: ContentBuilder,
        *,
        bus: Optional[EventBus] = None,
        show_button: bool = True,
        button_label: str = "Refresh",
    ) -> None:
        self._coordinator = coordinator
        self._builder = builder
        self._show_button = show_button
        self._button_label = button_label

        self._bus: Optional[EventBus] = bus
        self._bridge: Optional[RefreshStateBridgeController] = None
        if bus is not None:
            self._bridge = RefreshStateBridgeController(coordinator, bus)

        self._content: Any = None
        self._button: Any = None
        self._rendered: bool = False

        self._coordinator.subscribe(self._on_state_changed)

    @classmethod
    def create(
        cls,
        operations: Sequence[Operation],
        builder: ContentBuilder,
        *,
        policy: Union[ConcurrencyPolicy, str] = ConcurrencyPolicy.PARALLEL,
        before: Optional[FlexibleCallback] = None,
        after: Optional[AfterHook] = None,
        name: Optional[str] = None,
        **view_kwargs: Any,
    ) -> "RefreshableView":
        """Build the coordinator and the view in one call."""
        coordinator = RefreshCoordinator(operations, policy=policy, before=before, after=after, name=name)
        return cls(coordinator, builder, **view_kwargs)

    @classmethod
    def single(cls, operation: Operation, builder: ContentBuilder, **kwargs: Any) -> "RefreshableView":
        """Convenience constructor for a single refresh operation."""
        return cls.create([operation], builder, **kwargs)

    @property
    def coordinator(self) -> RefreshCoordinator:
        return self._coordinator

    def render(self) -> None:
        """Create the view's UI elements inside the current NiceGUI container.

        Calling it again after the first render has no effect.
        """
        if self._rendered:
            logger.debug(f"view for {self._coordinator.name} already rendered, skipping")
            return

        self._rendered = True
        self._content = ui.refreshable(self._build_content)
        with ui.column().classes("w-full gap-2"):
            if self._show_button:
                self._button = ui.button(
                    self._button_label,
                    icon="refresh",
                    on_click=self._on_refresh_clicked,
                ).props("dense")
            self._content()

        client = getattr(ui.context, "client", None)
        if client is not None:
            # on_disconnect also fires on reconnectable drops; on_delete is final.
            client.on_delete(self._on_client_deleted)

    def _build_content(self) -> None:
        state = self._coordinator.state
        self._builder(state.is_loading, state.error)

    def _on_state_changed(self, state: RefreshState) -> None:
        if self._button is not None:
            safe_call(self._update_button, state.is_loading)
        if self._content is not None:
            safe_call(self._content.refresh)

    def _update_button(self, is_loading: bool) -> None:
        if is_loading:
            self._button.props("loading")
        else:
            self._button.props(remove="loading")
        self._button.set_enabled(not is_loading)

    async def _on_refresh_clicked(self) -> None:
        logger.debug(f"refresh requested for {self._coordinator.name}")
        await self._coordinator.trigger()

    async def refresh(self) -> None:
        """Trigger a refresh programmatically (same path as the button)."""
        await self._on_refresh_clicked()

    def _on_client_deleted(self) -> None:
        self.dispose()
        if self._bus is not None:
            clear_client_bus(self._bus.client_id)
            self._bus = None

    def dispose(self) -> None:
        """Detach from the coordinator and dispose it. Idempotent."""
        self._coordinator.unsubscribe(self._on_state_changed)
        if self._bridge is not None:
            self._bridge.detach()
            self._bridge = None
        self._coordinator.dispose()
        self._content = None
        self._button = None
