"""Minimal event emitter and disposable helpers."""

import logging
from collections.abc import Callable
from collections.abc import Iterable
from typing import Generic
from typing import Protocol
from typing import TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SupportsDispose(Protocol):
    def dispose(self) -> None: ...


class Disposable:
    """Runs a release callback once, on the first ``dispose()``."""

    def __init__(self, on_dispose: Callable[[], None]):
        self._on_dispose: Callable[[], None] | None = on_dispose

    def dispose(self) -> None:
        if self._on_dispose is not None:
            callback, self._on_dispose = self._on_dispose, None
            callback()


def dispose_all(disposables: Iterable[SupportsDispose]) -> None:
    for disposable in disposables:
        disposable.dispose()


class Emitter(Generic[T]):
    """Fan out events to subscribed listeners.

    Example:
        ```python
        emitter: Emitter[int] = Emitter()
        subscription = emitter.event(print)
        emitter.fire(1)
        subscription.dispose()
        ```
    """

    def __init__(self) -> None:
        self._listeners: list[Callable[[T], None]] = []

    def event(self, listener: Callable[[T], None]) -> Disposable:
        """Subscribe ``listener``; dispose the result to unsubscribe."""
        self._listeners.append(listener)

        def remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return Disposable(remove)

    def fire(self, data: T) -> None:
        # A failing listener must not keep others from being notified
        for listener in list(self._listeners):
            try:
                listener(data)
            except Exception:
                logger.exception(f"Listener {listener!r} failed")

    def dispose(self) -> None:
        self._listeners.clear()
