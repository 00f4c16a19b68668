"""In-process signal bus with synchronous, re-entrancy-guarded delivery."""
from __future__ import annotations

from typing import Any, Callable

_Handler = Callable[[str, dict[str, Any]], None]

STAT_CHANGED = "stat_changed"
DEATH_CONDITION = "death_condition"
GLOBAL_TEMPERATURE_CHANGED = "global_temperature_changed"
GLOBAL_ENVIRONMENT_CHANGED = "global_environment_changed"
AGENT_DIED = "agent_died"


class SignalDepthError(RuntimeError):
    """Raised when handlers keep publishing from inside delivery."""

    def __init__(self, signal_name: str, depth: int) -> None:
        self.signal_name = signal_name
        self.depth = depth
        super().__init__(
            f"Signal {signal_name!r} re-entered the bus {depth} levels deep"
        )


class SignalBus:
    """Delivers each published signal to its handlers before returning.

    Handlers run in registration order on the publisher's call stack. A
    handler may publish again, up to *max_depth* nested deliveries.
    """

    def __init__(self, max_depth: int = 32) -> None:
        if max_depth < 1:
            raise ValueError("max_depth must be >= 1")
        self._subscribers: dict[str, list[_Handler]] = {}
        self._max_depth = max_depth
        self._depth = 0

    @property
    def depth(self) -> int:
        return self._depth

    def subscribe(self, signal_name: str, handler: _Handler) -> None:
        self._subscribers.setdefault(signal_name, []).append(handler)

    def unsubscribe(self, signal_name: str, handler: _Handler) -> None:
        handlers = self._subscribers.get(signal_name)
        if handlers is None:
            return
        try:
            handlers.remove(handler)
        except ValueError:
            pass

    def has_subscribers(self, signal_name: str) -> bool:
        return bool(self._subscribers.get(signal_name))

    def publish(self, signal_name: str, **data: Any) -> None:
        handlers = self._subscribers.get(signal_name)
        if not handlers:
            return
        if self._depth >= self._max_depth:
            raise SignalDepthError(signal_name, self._depth)
        self._depth += 1
        try:
            # copy so handlers may (un)subscribe during delivery
            for handler in list(handlers):
                handler(signal_name, data)
        finally:
            self._depth -= 1

    def clear(self) -> None:
        self._subscribers.clear()
