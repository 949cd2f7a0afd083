"""
Reactive primitive: Signal.

Signal[T] is the observable value the controller is built on:
- the `authenticated` flag that drives the channel lifecycle
- the snapshot store the view layer renders from

Subscribers receive (old, new) so they can react to edges such as
false -> true, not just to the new value.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Generic, TypeVar

T = TypeVar("T")

Subscriber = Callable[[T, T], None]


@dataclass
class Signal(Generic[T]):
    """
    Observable value that notifies subscribers when it changes.

    Example:
        auth = Signal.of(False)
        auth.subscribe(lambda old, new: print(f"{old} -> {new}"))
        auth.set(True)   # prints "False -> True"
        auth.set(True)   # unchanged, no notification
    """

    _value: T
    _subscribers: list[Subscriber] = field(default_factory=list)

    @classmethod
    def of(cls, value: T) -> Signal[T]:
        """Create a signal with initial value."""
        return cls(_value=value)

    @property
    def value(self) -> T:
        """Get current value (read-only)."""
        return self._value

    def set(self, new_value: T) -> None:
        """Set new value and notify subscribers if changed.

        Subscribers run in subscription order on the caller's stack. A
        subscriber that sets the signal again sees the nested change
        before later subscribers see this one.
        """
        if new_value == self._value:
            return
        old_value = self._value
        self._value = new_value
        for sub in list(self._subscribers):
            sub(old_value, new_value)

    def update(self, fn: Callable[[T], T]) -> None:
        """Update value via function of the current value."""
        self.set(fn(self._value))

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """
        Subscribe to changes. Returns unsubscribe function.

        Unsubscribing twice is harmless.
        """
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe
