"""Pytest fixtures for GUI tests."""

from __future__ import annotations

from typing import Generator

import pytest

from refreshable.gui.bus import BusConfig, EventBus


@pytest.fixture
def bus() -> Generator[EventBus, None, None]:
    """Create an EventBus instance for testing.

    Buses are created directly (not via get_event_bus) to avoid needing a
    NiceGUI client context.
    """
    test_bus = EventBus(client_id="test-client", config=BusConfig(trace=False))
    yield test_bus
    test_bus.clear()
