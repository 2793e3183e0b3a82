"""Wiring user activity events to the idle timer."""

from collections.abc import Callable
from typing import Protocol

from ..session.manager import SessionManager

ACTIVITY_EVENTS = ("mousemove", "keydown", "touchstart", "scroll")


class ActivitySource(Protocol):
    def add_listener(self, event: str, callback: Callable[[], None]) -> None: ...

    def remove_listener(self, event: str, callback: Callable[[], None]) -> None: ...


class ActivityMonitor:
    """Subscribes the manager's idle timer to an activity source."""

    def __init__(self, manager: SessionManager, source: ActivitySource):
        self.manager = manager
        self.source = source
        self._mounted = False

    def _on_activity(self) -> None:
        self.manager.reset_inactivity_timer()

    def mount(self) -> None:
        if self._mounted:
            return
        for event in ACTIVITY_EVENTS:
            self.source.add_listener(event, self._on_activity)
        self._mounted = True
        self.manager.reset_inactivity_timer()

    def unmount(self) -> None:
        if not self._mounted:
            return
        for event in ACTIVITY_EVENTS:
            self.source.remove_listener(event, self._on_activity)
        self._mounted = False
        self.manager.cancel_inactivity_timer()


class EventHub:
    """Minimal ActivitySource fed by the HTTP surface."""

    def __init__(self):
        self._listeners: dict[str, list[Callable[[], None]]] = {}

    def add_listener(self, event: str, callback: Callable[[], None]) -> None:
        self._listeners.setdefault(event, []).append(callback)

    def remove_listener(self, event: str, callback: Callable[[], None]) -> None:
        callbacks = self._listeners.get(event, [])
        if callback in callbacks:
            callbacks.remove(callback)

    def emit(self, event: str) -> int:
        """Fire an event. Returns how many listeners ran."""
        callbacks = list(self._listeners.get(event, []))
        for callback in callbacks:
            callback()
        return len(callbacks)
