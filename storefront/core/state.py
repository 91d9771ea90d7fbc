"""Published state cell shared by the stores."""
import logging
import threading
from typing import Callable, Generic, List, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

Listener = Callable[[T], None]


class StateCell(Generic[T]):
    """
    Holds the latest immutable snapshot of a store and notifies listeners.

    Reads are a single attribute load, so readers always see a complete
    snapshot without taking the lock. Writers are serialized by the owning
    store, not here.
    """

    def __init__(self, initial: T):
        self._value = initial
        self._listeners: List[Listener] = []
        self._listeners_lock = threading.Lock()

    @property
    def value(self) -> T:
        return self._value

    def publish(self, value: T) -> None:
        """Replace the snapshot and notify every listener."""
        self._value = value
        with self._listeners_lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(value)
            except Exception as e:
                # The snapshot stays published even if a listener fails
                logger.error(
                    f"[STATE] Listener {listener!r} failed: {type(e).__name__}: {e}",
                    exc_info=True,
                )

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Register a listener and immediately send it the current snapshot.

        Returns:
            Callable that removes the listener
        """
        with self._listeners_lock:
            self._listeners.append(listener)
        listener(self._value)

        def unsubscribe() -> None:
            with self._listeners_lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe
