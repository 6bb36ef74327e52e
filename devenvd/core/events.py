import asyncio
from dataclasses import dataclass
from dataclasses import field
from datetime import datetime
from enum import Enum
from typing import AsyncIterator
from typing import Callable
from typing import Iterable

from rich.text import Text

from devenvd.core.operations import utc_now
from devenvd.output.console import CONSOLE
from devenvd.output.styles import Style


class EventKind(str, Enum):
    ENVIRONMENT_INITIALIZING = 'environment:initializing'
    ENVIRONMENT_INITIALIZED = 'environment:initialized'
    ENVIRONMENT_CREATING = 'environment:creating'
    ENVIRONMENT_CREATED = 'environment:created'
    ENVIRONMENT_STARTING = 'environment:starting'
    ENVIRONMENT_STARTED = 'environment:started'
    ENVIRONMENT_STOPPING = 'environment:stopping'
    ENVIRONMENT_STOPPED = 'environment:stopped'
    ENVIRONMENT_DESTROYING = 'environment:destroying'
    ENVIRONMENT_DESTROYED = 'environment:destroyed'
    ENVIRONMENT_ERROR = 'environment:error'
    OPERATION_UPDATED = 'operation:updated'
    HEALTH_UPDATED = 'health:updated'
    HEALTH_ERROR = 'health:error'
    METRICS_UPDATED = 'metrics:updated'
    METRICS_ERROR = 'metrics:error'
    SERVICE_SCALING = 'service:scaling'
    SERVICE_SCALED = 'service:scaled'
    SERVICE_ERROR = 'service:error'
    BACKUP_STARTING = 'backup:starting'
    BACKUP_COMPLETED = 'backup:completed'
    BACKUP_ERROR = 'backup:error'


@dataclass
class Event:
    kind: EventKind
    payload: dict = field(default_factory=dict)
    timestamp: datetime = field(default_factory=utc_now)

    def as_json(self) -> dict:
        return {
            'kind': self.kind.value,
            'payload': self.payload,
            'timestamp': self.timestamp.isoformat(),
        }


EventCallback = Callable[[Event], None]


class Subscription:
    def __init__(self, bus: 'EventBus', callback: EventCallback, kinds: frozenset[EventKind] | None):
        self._bus = bus
        self.callback = callback
        self.kinds = kinds

    def accepts(self, event: Event) -> bool:
        return self.kinds is None or event.kind in self.kinds

    def unsubscribe(self) -> None:
        self._bus._remove(self)


class EventChannel:
    """Polling side of the bus: buffered events, consumed with `async for` or `get()`."""

    def __init__(self, bus: 'EventBus', kinds: frozenset[EventKind] | None, maxsize: int = 0):
        self._queue: asyncio.Queue[Event] = asyncio.Queue(maxsize=maxsize)
        self._subscription = bus.subscribe(self._put, kinds)

    def _put(self, event: Event) -> None:
        if self._queue.full():
            self._queue.get_nowait()
        self._queue.put_nowait(event)

    async def get(self) -> Event:
        return await self._queue.get()

    def pending(self) -> list[Event]:
        events = []
        while not self._queue.empty():
            events.append(self._queue.get_nowait())
        return events

    def close(self) -> None:
        self._subscription.unsubscribe()

    def __aiter__(self) -> AsyncIterator[Event]:
        return self

    async def __anext__(self) -> Event:
        return await self.get()


class EventBus:
    def __init__(self, verbose: bool = False):
        self._subscriptions: list[Subscription] = []
        self._verbose = verbose

    def subscribe(self, callback: EventCallback, kinds: Iterable[EventKind] | None = None) -> Subscription:
        subscription = Subscription(self, callback, frozenset(kinds) if kinds is not None else None)
        self._subscriptions.append(subscription)
        return subscription

    def _remove(self, subscription: Subscription) -> None:
        if subscription in self._subscriptions:
            self._subscriptions.remove(subscription)

    def channel(self, kinds: Iterable[EventKind] | None = None, maxsize: int = 0) -> EventChannel:
        return EventChannel(self, frozenset(kinds) if kinds is not None else None, maxsize)

    def emit(self, kind: EventKind, **payload) -> Event:
        event = Event(kind=kind, payload=payload)
        if self._verbose:
            CONSOLE.print(Text(f'{kind.value} ', style=Style.mark_neutral) + Text(str(payload), style=Style.context))
        for subscription in list(self._subscriptions):
            if subscription.accepts(event):
                subscription.callback(event)
        return event
