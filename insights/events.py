from datetime import datetime
from typing import Callable, Dict, List, NamedTuple, Optional

import structlog

__all__ = [
    'EventBus', 'Event',
    'INSIGHTS_REFRESHED', 'INSIGHTS_REFRESH_FAILED', 'INSIGHT_READ', 'INSIGHT_DISMISSED',
    'log_event_handler', 'register_default_handlers',
]

logger = structlog.get_logger(__name__)


class Event(NamedTuple):
    name: str
    ts: str
    payload: dict


class EventBus:
    def __init__(self, clock: Callable[[], datetime] = datetime.now):
        self.clock = clock
        self._subscribers: Dict[str, List[Callable[[Event, dict], dict]]] = {}

    def subscribe(self, name: str, handler: Callable[[Event, dict], dict]) -> None:
        if name not in self._subscribers:
            self._subscribers[name] = []
        self._subscribers[name].append(handler)

    def publish(self, name: str, payload: dict, ts: Optional[datetime] = None) -> List[dict]:
        if name not in self._subscribers:
            return []

        event = Event(
            name=name,
            ts=(ts or self.clock()).isoformat(),
            payload=payload
        )

        results = []
        for handler in self._subscribers[name]:
            result = handler(event, payload)
            results.append(result)
        return results

    def unsubscribe(self, name: str, handler: Callable[[Event, dict], dict]) -> None:
        if name in self._subscribers:
            if handler in self._subscribers[name]:
                self._subscribers[name].remove(handler)


INSIGHTS_REFRESHED = "INSIGHTS_REFRESHED"
INSIGHTS_REFRESH_FAILED = "INSIGHTS_REFRESH_FAILED"
INSIGHT_READ = "INSIGHT_READ"
INSIGHT_DISMISSED = "INSIGHT_DISMISSED"


def log_event_handler(event: Event, payload: dict) -> dict:
    logger.info(event.name.lower(), ts=event.ts, **payload)
    return {"logged": True}


def register_default_handlers(bus: EventBus) -> EventBus:
    for name in (INSIGHTS_REFRESHED, INSIGHTS_REFRESH_FAILED, INSIGHT_READ, INSIGHT_DISMISSED):
        bus.subscribe(name, log_event_handler)
    return bus
