"""
In-process event bus (Observer pattern).

Services publish entity lifecycle events after their unit of work commits;
handlers subscribed at startup turn them into audit log lines.
"""
import logging
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Type

logger = logging.getLogger(__name__)
audit_logger = logging.getLogger("stockledger.audit")


@dataclass
class DomainEvent:
    entity_type: str
    entity_id: Any
    occurred_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def name(self) -> str:
        return type(self).__name__


@dataclass
class EntityCreatedEvent(DomainEvent):
    new_values: Optional[Dict[str, Any]] = None


@dataclass
class EntityUpdatedEvent(DomainEvent):
    old_values: Optional[Dict[str, Any]] = None
    new_values: Optional[Dict[str, Any]] = None


@dataclass
class EntityDeletedEvent(DomainEvent):
    pass


@dataclass
class StockShortfallEvent(DomainEvent):
    """A stock-out asked for more than the ledger held."""

    product_code: str = ""
    warehouse_code: str = ""
    requested: int = 0
    available: int = 0


Handler = Callable[[DomainEvent], None]


class EventBus:
    def __init__(self):
        self._handlers: Dict[Type[DomainEvent], List[Handler]] = defaultdict(list)

    def subscribe(self, event_type: Type[DomainEvent], handler: Handler) -> None:
        if handler not in self._handlers[event_type]:
            self._handlers[event_type].append(handler)

    def unsubscribe(self, event_type: Type[DomainEvent], handler: Handler) -> None:
        if handler in self._handlers.get(event_type, []):
            self._handlers[event_type].remove(handler)

    def publish(self, event: DomainEvent) -> None:
        for event_type, handlers in list(self._handlers.items()):
            if not isinstance(event, event_type):
                continue
            for handler in handlers:
                try:
                    handler(event)
                except Exception:
                    # An observer must never undo a committed operation.
                    logger.exception("event_handler_failed event=%s handler=%r", event.name, handler)


class LoggingHandler:
    """Writes one structured audit line per domain event."""

    def __call__(self, event: DomainEvent) -> None:
        payload = {
            "event": event.name,
            "entity_type": event.entity_type,
            "entity_id": event.entity_id,
            "occurred_at": event.occurred_at.isoformat(),
        }
        for key in ("old_values", "new_values"):
            value = getattr(event, key, None)
            if value:
                payload[key] = value
        level = logging.WARNING if isinstance(event, StockShortfallEvent) else logging.INFO
        if isinstance(event, StockShortfallEvent):
            payload.update(
                product_code=event.product_code,
                warehouse_code=event.warehouse_code,
                requested=event.requested,
                available=event.available,
            )
        audit_logger.log(level, "audit_event %s %s=%s", event.name, event.entity_type, event.entity_id, extra=payload)


_bus = EventBus()
_logging_handler = LoggingHandler()


def get_event_bus() -> EventBus:
    return _bus


def configure_event_bus() -> EventBus:
    _bus.subscribe(DomainEvent, _logging_handler)
    return _bus
