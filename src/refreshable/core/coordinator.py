"""Refresh-operation coordinator.

RefreshCoordinator runs a fixed list of async refresh operations under a
concurrency policy and exposes a single loading flag plus a single captured
error to observers. It is UI-agnostic: the view layer decides when to call
`trigger()` and how to paint the observed `RefreshState`.

Flow of one `trigger()`:
    before hook -> (is_loading=True, notify) -> operations
        -> (is_loading=False, error, notify) -> after hook

Once `dispose()` has been called the coordinator never mutates state or
notifies again. In-flight operations are not cancelled; their outcomes are
discarded.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, List, Optional, Sequence, Tuple, Union

from refreshable.core.callbacks import FlexibleCallback, call_flexible, callback_name
from refreshable.core.utils.logging import get_logger

logger = get_logger(__name__)

Operation = Callable[[], Awaitable[Any]]
AfterHook = Callable[[], None]


class RefreshError(Exception):
    """Base class for errors raised by the refreshable package."""


class EmptyOperationsError(RefreshError, ValueError):
    """Raised when a coordinator is constructed without any operation."""


class ConcurrencyPolicy(str, Enum):
    """How the operations of one refresh are scheduled.

    Values:
        PARALLEL: Start all operations together, wait for all of them. No early
            stop; the captured error is the lowest-index failure.
        SEQUENTIAL: Run one at a time in order, stop at the first failure.
    """

    PARALLEL = "parallel"
    SEQUENTIAL = "sequential"


class CoordinatorStatus(str, Enum):
    """Lifecycle of a coordinator. DISPOSED is terminal."""

    ACTIVE = "active"
    DISPOSED = "disposed"


@dataclass(frozen=True, slots=True)
class RefreshState:
    """Snapshot of the observable coordinator state.

    Attributes:
        is_loading: True while the operation batch of a trigger is running.
        error: First failure of the last batch, or None.
    """

    is_loading: bool = False
    error: Optional[BaseException] = None

    def __str__(self) -> str:
        return f"RefreshState(is_loading: {self.is_loading}, error: {self.error!r})"


Observer = Callable[[RefreshState], None]


class RefreshCoordinator:
    """Run refresh operations and publish unified loading/error state.

    Observers are called synchronously, once per state transition, with a
    RefreshState snapshot. Overlapping `trigger()` calls are not queued: a
    call made while another is in flight returns immediately.

    Attributes:
        _operations: Operations captured at construction (immutable).
        _policy: Concurrency policy.
        _before: Optional sync-or-async hook awaited before loading starts.
        _after: Optional sync hook called after loading ends.
        _status: Lifecycle guard checked before every mutation.
        _state: Current RefreshState.
        _observers: Registered observers in subscription order.
        _running: True while a trigger cycle is in flight.
    """

    def __init__(
        self,
        operations: Sequence[Operation],
        *,
        policy: Union[ConcurrencyPolicy, str] = ConcurrencyPolicy.PARALLEL,
        before: Optional[FlexibleCallback] = None,
        after: Optional[AfterHook] = None,
        name: Optional[str] = None,
    ) -> None:
        """Create a coordinator.

        Args:
            operations: Non-empty ordered sequence of zero-argument async callables.
            policy: ConcurrencyPolicy or its string value. Defaults to PARALLEL.
            before: Optional hook run before each refresh (sync or async).
            after: Optional synchronous hook run after each refresh.
            name: Optional label used in log messages.

        Raises:
            EmptyOperationsError: If `operations` is empty.
            TypeError: If an operation or hook is not callable.
            ValueError: If `policy` is not a known policy.
        """
        ops: Tuple[Operation, ...] = tuple(operations)
        if not ops:
            raise EmptyOperationsError("RefreshCoordinator requires at least one operation")
        for index, op in enumerate(ops):
            if not callable(op):
                raise TypeError(f"operation {index} is not callable: {op!r}")
        if before is not None and not callable(before):
            raise TypeError(f"before hook is not callable: {before!r}")
        if after is not None and not callable(after):
            raise TypeError(f"after hook is not callable: {after!r}")

        self._operations: Tuple[Operation, ...] = ops
        self._policy: ConcurrencyPolicy = ConcurrencyPolicy(policy)
        self._before: Optional[FlexibleCallback] = before
        self._after: Optional[AfterHook] = after
        self._name: str = name or f"coordinator-{id(self):x}"

        self._status: CoordinatorStatus = CoordinatorStatus.ACTIVE
        self._state: RefreshState = RefreshState()
        self._observers: List[Observer] = []
        self._running: bool = False

        logger.debug(
            f"[coordinator] Created {self._name} "
            f"(operations={len(ops)}, policy={self._policy.value})"
        )

    @classmethod
    def single(cls, operation: Operation, **kwargs: Any) -> "RefreshCoordinator":
        """Create a coordinator for a single operation.

        Keyword arguments are passed through to the constructor.
        """
        return cls([operation], **kwargs)

    # -----------------------------
    # Read-only state
    # -----------------------------
    @property
    def name(self) -> str:
        return self._name

    @property
    def operations(self) -> Tuple[Operation, ...]:
        return self._operations

    @property
    def policy(self) -> ConcurrencyPolicy:
        return self._policy

    @property
    def status(self) -> CoordinatorStatus:
        return self._status

    @property
    def is_disposed(self) -> bool:
        return self._status is CoordinatorStatus.DISPOSED

    @property
    def is_running(self) -> bool:
        """True while a trigger cycle (hooks included) is in flight."""
        return self._running

    @property
    def state(self) -> RefreshState:
        return self._state

    @property
    def is_loading(self) -> bool:
        return self._state.is_loading

    @property
    def error(self) -> Optional[BaseException]:
        return self._state.error

    # -----------------------------
    # Observers
    # -----------------------------
    def subscribe(self, observer: Observer) -> None:
        """Register an observer. Subscribing the same observer twice has no effect."""
        if observer in self._observers:
            logger.debug(f"[coordinator] {callback_name(observer)} already subscribed to {self._name}, skipping")
            return
        self._observers.append(observer)
        logger.debug(
            f"[coordinator] Subscribed {callback_name(observer)} to {self._name} "
            f"(total_observers={len(self._observers)})"
        )

    def unsubscribe(self, observer: Observer) -> None:
        """Remove an observer. Safe to call if it was never subscribed."""
        try:
            self._observers.remove(observer)
        except ValueError:
            return
        logger.debug(
            f"[coordinator] Unsubscribed {callback_name(observer)} from {self._name} "
            f"(remaining_observers={len(self._observers)})"
        )

    def _notify(self, state: RefreshState) -> None:
        # Iterate a snapshot so observers may (un)subscribe or dispose mid-delivery.
        for observer in list(self._observers):
            try:
                observer(state)
            except Exception:
                logger.exception(f"[coordinator] Exception in observer {callback_name(observer)} ({self._name})")

    def _set_state(self, state: RefreshState) -> bool:
        """Apply and broadcast `state` unless disposed.

        Returns:
            True if the state was applied, False if the coordinator is disposed.
        """
        if self._status is CoordinatorStatus.DISPOSED:
            return False
        self._state = state
        self._notify(state)
        return True

    # -----------------------------
    # Lifecycle
    # -----------------------------
    def dispose(self) -> None:
        """Freeze the coordinator. Idempotent; does not cancel running operations."""
        if self._status is CoordinatorStatus.DISPOSED:
            return
        self._status = CoordinatorStatus.DISPOSED
        self._observers.clear()
        logger.debug(f"[coordinator] Disposed {self._name} (running={self._running})")

    async def trigger(self) -> None:
        """Run one refresh cycle.

        Operation failures are captured into `error` and never raised. A
        failure in the before hook or the after hook propagates to the caller.
        Calls made after disposal, or while a cycle is already running, return
        immediately without side effects.
        """
        if self._status is CoordinatorStatus.DISPOSED:
            logger.debug(f"[coordinator] trigger() on disposed {self._name} ignored")
            return
        if self._running:
            logger.info(f"[coordinator] trigger() while {self._name} is running, ignored")
            return

        self._running = True
        try:
            await self._run_cycle()
        finally:
            self._running = False

    async def _run_cycle(self) -> None:
        if self._before is not None:
            await call_flexible(self._before)

        if not self._set_state(RefreshState(is_loading=True, error=None)):
            logger.debug(f"[coordinator] {self._name} disposed during before hook, skipping operations")
            return

        if self._policy is ConcurrencyPolicy.PARALLEL:
            error = await self._run_parallel()
        else:
            error = await self._run_sequential()

        if not self._set_state(RefreshState(is_loading=False, error=error)):
            logger.debug(f"[coordinator] {self._name} disposed while loading, outcome discarded")
            return

        if self._after is not None:
            self._after()

    async def _run_parallel(self) -> Optional[BaseException]:
        results = await asyncio.gather(
            *(call_flexible(op) for op in self._operations),
            return_exceptions=True,
        )

        first: Optional[BaseException] = None
        for index, result in enumerate(results):
            if not isinstance(result, BaseException):
                continue
            if not isinstance(result, Exception):
                # Cancellation and interpreter exits are not refresh failures.
                raise result
            if first is None:
                first = result
                logger.warning(f"[coordinator] {self._name} operation {index} failed: {result!r}")
            else:
                logger.debug(f"[coordinator] {self._name} operation {index} failed, discarded: {result!r}")
        return first

    async def _run_sequential(self) -> Optional[BaseException]:
        for index, op in enumerate(self._operations):
            if self._status is CoordinatorStatus.DISPOSED:
                logger.debug(f"[coordinator] {self._name} disposed, aborting at operation {index}")
                return None
            try:
                await call_flexible(op)
            except Exception as exc:
                logger.warning(f"[coordinator] {self._name} operation {index} failed: {exc!r}")
                return exc
        return None

    def __repr__(self) -> str:
        return (
            f"RefreshCoordinator(name={self._name!r}, operations={len(self._operations)}, "
            f"policy={self._policy.value}, status={self._status.value}, state={self._state})"
        )
