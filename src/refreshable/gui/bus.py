"""Event bus with per-client isolation.

Each NiceGUI client (browser tab/window) gets its own EventBus so that
refresh-state subscriptions made by one page never leak into another.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, DefaultDict, Dict, List, Type, TypeVar

from nicegui import ui

from refreshable.core.utils.logging import get_logger

logger = get_logger(__name__)

TEvent = TypeVar("TEvent")

# Key: client ID, Value: EventBus instance
_CLIENT_BUSES: Dict[str, EventBus] = {}


@dataclass(frozen=True, slots=True)
class BusConfig:
    """Configuration for EventBus behavior.

    Attributes:
        trace: If True, log all event emissions and handler executions.
    """

    trace: bool = False


class EventBus:
    """A typed, synchronous event bus for one NiceGUI client.

    Events are routed to the subscribers of their concrete type, in
    subscription order.

    Attributes:
        _config: Bus configuration (trace mode).
        _subs: Map from event type to list of handler functions.
        _client_id: Client identifier for this bus instance.
    """

    def __init__(self, client_id: str, config: BusConfig | None = None) -> None:
        self._config: BusConfig = config or BusConfig()
        self._subs: DefaultDict[Type[Any], List[Callable[[Any], None]]] = DefaultDict(list)
        self._client_id: str = client_id
        logger.debug(f"[bus] Created EventBus for client {client_id}")

    @property
    def client_id(self) -> str:
        return self._client_id

    def subscribe(self, event_type: Type[TEvent], handler: Callable[[TEvent], None]) -> None:
        """Subscribe a handler for a concrete event type.

        Subscribing the same handler twice for the same event type has no
        effect, so pages rebuilt during navigation do not double up.
        """
        handlers = self._subs[event_type]
        if handler in handlers:
            logger.debug(
                f"[bus] Handler {handler.__qualname__} already subscribed to {event_type.__name__}, skipping"
            )
            return
        handlers.append(handler)
        logger.debug(
            f"[bus] Subscribed {handler.__qualname__} to {event_type.__name__} "
            f"(client={self._client_id}, total_handlers={len(handlers)})"
        )

    def unsubscribe(self, event_type: Type[TEvent], handler: Callable[[TEvent], None]) -> None:
        """Unsubscribe a handler. Safe to call if it was never subscribed."""
        handlers = self._subs.get(event_type)
        if not handlers or handler not in handlers:
            return
        handlers.remove(handler)
        logger.debug(
            f"[bus] Unsubscribed {handler.__qualname__} from {event_type.__name__} "
            f"(client={self._client_id}, remaining_handlers={len(handlers)})"
        )

    def emit(self, event: Any) -> None:
        """Deliver `event` synchronously to every handler of its type.

        A handler that raises is logged and does not prevent the remaining
        handlers from receiving the event.
        """
        etype = type(event)
        handlers = list(self._subs.get(etype, []))

        if self._config.trace:
            logger.info(f"[bus] emit {etype.__name__}: {event} (client={self._client_id}, handlers={len(handlers)})")

        for h in handlers:
            if self._config.trace:
                name = getattr(h, "__qualname__", repr(h))
                logger.info(f"[bus] -> {etype.__name__} handled by {name} (client={self._client_id})")
            try:
                h(event)
            except Exception:
                logger.exception(
                    f"[bus] Exception in handler {getattr(h, '__qualname__', repr(h))} "
                    f"for {etype.__name__} (client={self._client_id})"
                )

    def handler_count(self, event_type: Type[Any]) -> int:
        return len(self._subs.get(event_type, []))

    def clear(self) -> None:
        """Remove all subscriptions. The bus instance stays usable."""
        count = sum(len(handlers) for handlers in self._subs.values())
        self._subs.clear()
        logger.debug(f"[bus] Cleared {count} subscriptions (client={self._client_id})")


def get_client_id() -> str:
    """Current NiceGUI client ID, or "default" outside a client context."""
    try:
        if hasattr(ui.context, "client") and hasattr(ui.context.client, "id"):
            return str(ui.context.client.id)
    except (AttributeError, RuntimeError):
        # No client context (e.g. during testing)
        pass
    return "default"


def get_event_bus(config: BusConfig | None = None) -> EventBus:
    """Get or create the EventBus for the current NiceGUI client.

    `config` only applies when the bus is created. Tests should construct
    EventBus instances directly.
    """
    client_id = get_client_id()
    if client_id not in _CLIENT_BUSES:
        _CLIENT_BUSES[client_id] = EventBus(client_id, config)
        logger.info(f"[bus] Created new EventBus for client {client_id}")
    return _CLIENT_BUSES[client_id]


def clear_client_bus(client_id: str | None = None) -> None:
    """Clear and forget the bus of `client_id` (current client if None)."""
    if client_id is None:
        client_id = get_client_id()

    bus = _CLIENT_BUSES.pop(client_id, None)
    if bus is not None:
        bus.clear()
        logger.debug(f"[bus] Cleared bus for client {client_id}")
