"""Pytest configuration and fixtures for refreshable tests."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Callable, List, Optional

import pytest

from refreshable.core.coordinator import RefreshState


class StateRecorder:
    """Observer that records every RefreshState it receives."""

    def __init__(self) -> None:
        self.states: List[RefreshState] = []

    def __call__(self, state: RefreshState) -> None:
        self.states.append(state)

    @property
    def pairs(self) -> List[tuple[bool, Optional[BaseException]]]:
        return [(s.is_loading, s.error) for s in self.states]


class OperationLog:
    """Factory for test operations that record their calls in order."""

    def __init__(self) -> None:
        self.started: List[str] = []
        self.finished: List[str] = []

    def ok(self, name: str, delay: float = 0.0) -> Callable[[], "asyncio.Future[None]"]:
        async def op() -> None:
            self.started.append(name)
            await asyncio.sleep(delay)
            self.finished.append(name)

        return op

    def fail(self, name: str, exc: BaseException, delay: float = 0.0) -> Callable[[], "asyncio.Future[None]"]:
        async def op() -> None:
            self.started.append(name)
            await asyncio.sleep(delay)
            self.finished.append(name)
            raise exc

        return op


@pytest.fixture
def recorder() -> StateRecorder:
    """Fixture providing a fresh StateRecorder observer."""
    return StateRecorder()


@pytest.fixture
def op_log() -> OperationLog:
    """Fixture providing a fresh OperationLog."""
    return OperationLog()


@pytest.fixture
def config_path(tmp_path: Path) -> Path:
    """Fixture providing a config file path inside a temp directory.

    Returns:
        Path that does not exist yet.
    """
    return tmp_path / "refreshable" / "refresh_config.json"
