"""A bounded, non-blocking queue of incident updates for the dispatcher."""

from __future__ import annotations

import threading
from collections import deque
from dataclasses import dataclass

from .schema import IncidentUpdate


@dataclass
class IncidentPayload:
    """One incident update together with its dispatcher event type."""

    incident_update: IncidentUpdate
    state: str


class QueueFull(Exception):
    """Raised when publishing to a queue that has no room left."""

    def __init__(self, message: str = "queue is full") -> None:
        super().__init__(message)


class QueueEmpty(Exception):
    """Raised when consuming from a queue that holds nothing."""

    def __init__(self, message: str = "queue is empty") -> None:
        super().__init__(message)


class IncidentQueue:
    """Thread-safe FIFO of incident payloads; never blocks."""

    def __init__(self, capacity: int) -> None:
        if capacity < 0:
            raise ValueError("queue capacity must not be negative")
        self._capacity = capacity
        self._items: deque[IncidentPayload] = deque()
        self._lock = threading.Lock()

    def publish(self, payload: IncidentPayload) -> None:
        """Append a payload, raising QueueFull when at capacity."""
        with self._lock:
            if len(self._items) >= self._capacity:
                raise QueueFull()
            self._items.append(payload)

    def consume(self) -> IncidentPayload:
        """Remove and return the oldest payload, raising QueueEmpty if none."""
        with self._lock:
            if not self._items:
                raise QueueEmpty()
            return self._items.popleft()

    def is_empty(self) -> bool:
        with self._lock:
            return not self._items

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)