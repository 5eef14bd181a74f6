"""Synchronous event dispatcher for model notifications.

No external dependencies. Handlers are called inline, in subscription
order, before ``emit()`` returns.  Each ``ModelInstance`` owns one
dispatcher and each ``Schema`` owns a second, class-scope one.

By default a raising handler propagates to the caller of ``set()`` /
``reset()``.  With ``isolate_errors=True`` the failure is logged and
recorded as a dead letter and the remaining handlers still run.
"""

from __future__ import annotations

import logging
import time
from collections import defaultdict
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from attrmodel.core.enums import ModelEvent
from attrmodel.core.errors import UnknownEventError

logger = logging.getLogger(__name__)

Handler = Callable[..., Any]

EVENT_NAMES: tuple[str, ...] = tuple(e.value for e in ModelEvent)


def coerce_event(event: ModelEvent | str) -> ModelEvent:
    """Map a user-supplied event name to ``ModelEvent``.

    Raises
    ------
    UnknownEventError
        If *event* is not one of ``setting``, ``set``, ``resetting``,
        ``reset``.
    """
    if isinstance(event, ModelEvent):
        return event
    try:
        return ModelEvent(event)
    except ValueError:
        raise UnknownEventError(event, EVENT_NAMES) from None


@dataclass
class DeadLetter:
    """Record of a handler failure under error isolation."""

    event: ModelEvent
    handler: str
    error: str
    timestamp: float = field(default_factory=time.monotonic)


class EventDispatcher:
    """Ordered observer lists keyed by ``ModelEvent``.

    Parameters
    ----------
    scope
        Label used in log messages (``"instance"`` or a schema name).
    isolate_errors
        When ``True``, handler exceptions are logged and dead-lettered
        instead of propagating.
    """

    def __init__(self, scope: str = "instance", *, isolate_errors: bool = False) -> None:
        self._scope = scope
        self._isolate_errors = isolate_errors
        self._handlers: dict[ModelEvent, list[Handler]] = defaultdict(list)
        self._error_counts: dict[str, int] = defaultdict(int)
        self._dead_letters: list[DeadLetter] = []
        self._messages_processed: int = 0

    # -- Subscription --------------------------------------------------------

    def subscribe(self, event: ModelEvent | str, handler: Handler) -> None:
        """Append *handler* to the observers of *event*."""
        resolved = coerce_event(event)
        if not callable(handler):
            raise TypeError(f"Handler for {resolved.value!r} must be callable")
        self._handlers[resolved].append(handler)

    def unsubscribe(self, event: ModelEvent | str, handler: Handler) -> bool:
        """Remove the first registration of *handler*; ``False`` if absent."""
        resolved = coerce_event(event)
        handlers = self._handlers.get(resolved, [])
        try:
            handlers.remove(handler)
        except ValueError:
            return False
        return True

    def handlers(self, event: ModelEvent | str) -> tuple[Handler, ...]:
        return tuple(self._handlers.get(coerce_event(event), ()))

    # -- Dispatch ------------------------------------------------------------

    def emit(self, event: ModelEvent, *args: Any) -> None:
        """Call every handler of *event* with ``*args``, in order."""
        # Handlers subscribed during dispatch run from the next emit on
        for handler in list(self._handlers.get(event, ())):
            if not self._isolate_errors:
                handler(*args)
                self._messages_processed += 1
                continue
            try:
                handler(*args)
                self._messages_processed += 1
            except Exception as exc:
                self._error_counts[event.value] += 1
                self._dead_letters.append(
                    DeadLetter(
                        event=event,
                        handler=getattr(handler, "__qualname__", repr(handler)),
                        error=str(exc),
                    )
                )
                logger.exception(
                    "Handler error on scope=%s event=%s",
                    self._scope,
                    event.value,
                )

    # ------------------------------------------------------------------
    # Observability
    # ------------------------------------------------------------------

    def get_error_counts(self) -> dict[str, int]:
        """Return per-event error counts."""
        return dict(self._error_counts)

    @property
    def dead_letters(self) -> list[DeadLetter]:
        """Access the dead-letter list (read-only snapshot)."""
        return list(self._dead_letters)

    @property
    def messages_processed(self) -> int:
        """Total handler invocations that returned normally."""
        return self._messages_processed

    def clear_dead_letters(self) -> list[DeadLetter]:
        """Drain the dead-letter list and return all entries."""
        drained = self._dead_letters[:]
        self._dead_letters.clear()
        return drained
