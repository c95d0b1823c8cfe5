"""
EventRegistry - Explicit registration of renderer events

Bounded Context: Routing map renderer events to core operations
Responsibilities:
  - Register event handlers
  - Reject unknown events before dispatch
  - Provide introspection (available_events, get_help)

Problem: Loose callbacks make it unclear which renderer events are handled
Solution: Explicit registration pattern

Threading: single event loop, no locking
"""

from typing import Any, Callable, Dict, Set


class EventNotAvailableError(Exception):
    """Raised when dispatching an event nobody registered"""
    pass


class EventRegistry:
    """
    Registry for renderer events with explicit registration.

    Key Features:
      - Fail-fast: Unknown events rejected immediately
      - Introspection: Can query handled events at runtime
      - Self-Documenting: Each event has a description

    Example:
        registry = EventRegistry()
        registry.register('draw_start', machine.start, "Begin a draw session")

        try:
            registry.dispatch('vertex_add', 7.1, 51.2)
        except EventNotAvailableError as e:
            print(f"Unhandled event: {e}")
    """

    def __init__(self):
        self._handlers: Dict[str, Callable[..., Any]] = {}
        self._descriptions: Dict[str, str] = {}

    def register(self, event: str, handler: Callable[..., Any], description: str) -> None:
        """
        Register a handler for an event.

        Raises:
            ValueError: If the event is already registered
        """
        if event in self._handlers:
            raise ValueError(f"Event '{event}' already registered")

        self._handlers[event] = handler
        self._descriptions[event] = description

    def dispatch(self, event: str, *args: Any, **kwargs: Any) -> Any:
        """
        Invoke the handler registered for `event`.

        Returns:
            Whatever the handler returns

        Raises:
            EventNotAvailableError: If the event is not registered
        """
        if event not in self._handlers:
            raise EventNotAvailableError(
                f"Event '{event}' not available. "
                f"Available events: {', '.join(sorted(self.available_events))}"
            )

        return self._handlers[event](*args, **kwargs)

    def is_available(self, event: str) -> bool:
        return event in self._handlers

    @property
    def available_events(self) -> Set[str]:
        """Snapshot of registered event names."""
        return set(self._handlers.keys())

    def get_help(self) -> Dict[str, str]:
        """Snapshot of event descriptions."""
        return dict(self._descriptions)

    def count(self) -> int:
        return len(self._handlers)
