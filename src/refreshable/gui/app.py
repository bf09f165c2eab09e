"""Demo application for refreshable views.

Shows a single refresh, a multi-operation refresh (using the configured
concurrency policy), a sequential refresh with hooks, and a failing refresh.

Run with:
    python -m refreshable.gui.app
"""

from __future__ import annotations

import asyncio
from typing import List, Optional

from nicegui import ui

from refreshable.core.config import RefreshConfig
from refreshable.core.coordinator import ConcurrencyPolicy
from refreshable.core.utils.logging import get_logger, setup_logging
from refreshable.gui.bus import BusConfig, EventBus, get_event_bus
from refreshable.gui.events_state import RefreshStateChanged
from refreshable.gui.views.refreshable_view import RefreshableView

logger = get_logger(__name__)

_CONFIG: Optional[RefreshConfig] = None


def _content(title: str):
    def build(is_loading: bool, error: Optional[BaseException]) -> None:
        if error is not None:
            ui.label(f"{title}: failed ({error})").classes("text-negative")
        elif is_loading:
            ui.spinner(size="lg")
        else:
            ui.label(title)

    return build


async def _sleep(seconds: float) -> None:
    await asyncio.sleep(seconds)


async def _fail_after(seconds: float) -> None:
    await asyncio.sleep(seconds)
    raise RuntimeError("refresh failed")


def build_demo_views(policy: ConcurrencyPolicy, bus: EventBus) -> List[RefreshableView]:
    """Create the demo views (not yet rendered)."""
    single = RefreshableView.single(
        lambda: _sleep(2.0),
        _content("Single refresh"),
        name="single",
        bus=bus,
    )
    multi = RefreshableView.create(
        [lambda: _sleep(1.0), lambda: _sleep(1.5)],
        _content(f"Multi refresh ({policy.value})"),
        policy=policy,
        name="multi",
        bus=bus,
    )
    hooks = RefreshableView.create(
        [lambda: _sleep(0.5), lambda: _sleep(0.5)],
        _content("Sequential refresh with hooks"),
        policy=ConcurrencyPolicy.SEQUENTIAL,
        before=lambda: ui.notify("Refreshing..."),
        after=lambda: ui.notify("Refreshed", type="positive"),
        name="hooks",
        bus=bus,
    )
    failing = RefreshableView.single(
        lambda: _fail_after(1.0),
        _content("Failing refresh"),
        name="failing",
        bus=bus,
    )
    return [single, multi, hooks, failing]


def index() -> None:
    """Home route: one card per demo view plus a bus-driven status line."""
    config = _CONFIG or RefreshConfig.load()
    bus = get_event_bus(BusConfig(trace=config.get_trace_events()))

    ui.page_title("Refreshable")
    status = ui.label("idle").classes("text-sm text-grey")

    def _on_refresh_state(e: RefreshStateChanged) -> None:
        status.set_text(f"{e.source}: {'loading' if e.is_loading else 'done'}")

    bus.subscribe(RefreshStateChanged, _on_refresh_state)

    for view in build_demo_views(config.get_policy(), bus):
        with ui.card().classes("w-full"):
            view.render()


def main() -> None:
    global _CONFIG
    _CONFIG = RefreshConfig.load(create_if_missing=True)
    setup_logging(level=_CONFIG.get_log_level())
    logger.info(f"starting demo (concurrency={_CONFIG.get_policy().value})")

    ui.page("/")(index)
    ui.run(title="Refreshable", reload=False)


if __name__ in {"__main__", "__mp_main__"}:
    main()
