"""Model instances: a base snapshot plus an ordered change log.

An instance never mutates its ``SchemaConfig``.  Reads run the full
resolution pipeline on every call; writes append to the change log and
notify instance-scope handlers, then class-scope handlers.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from attrmodel.core.enums import ModelEvent
from attrmodel.model.dispatch import EventDispatcher, Handler
from attrmodel.model.resolvers import (
    MISSING,
    apply_calcs,
    apply_casts,
    apply_changes,
    apply_defaults,
)
from attrmodel.observability.logger import get_logger

if TYPE_CHECKING:
    from attrmodel.model.schema import Schema, SchemaConfig

log = get_logger(__name__)


def snapshot_base(obj: Any) -> dict[str, Any]:
    """Own key/value pairs of *obj* as a new dict.

    Mappings are copied, plain objects contribute their instance
    attributes, ``None`` is an empty record.
    """
    if obj is None:
        return {}
    if isinstance(obj, Mapping):
        return dict(obj)
    if hasattr(obj, "__dict__"):
        return dict(vars(obj))
    raise TypeError(
        f"Base object must be a mapping or an object with attributes, "
        f"got {type(obj).__name__}"
    )


class ModelInstance:
    """A wrapped data record with change tracking.

    States: *clean* (empty change log) and *dirty*.  An accepted ``set``
    makes the instance dirty; ``reset`` makes it clean again.
    """

    def __init__(
        self,
        config: SchemaConfig,
        base: Any = None,
        *,
        schema_dispatcher: EventDispatcher | None = None,
        schema: Schema | None = None,
    ) -> None:
        self._config = config
        self._schema = schema
        self._base: dict[str, Any] = snapshot_base(base)
        self._changes: list[tuple[str, Any]] = []
        isolate = schema.settings.isolate_handler_errors if schema is not None else False
        self._dispatcher = EventDispatcher("instance", isolate_errors=isolate)
        self._schema_dispatcher = schema_dispatcher

    @property
    def config(self) -> SchemaConfig:
        return self._config

    @property
    def schema(self) -> Schema | None:
        return self._schema

    @property
    def dispatcher(self) -> EventDispatcher:
        return self._dispatcher

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get(self, name: str, default: Any = None) -> Any:
        """Resolved value of *name*.

        Runs the whole pipeline; prefer one ``value()`` call when reading
        several attributes.
        """
        return self.value().get(name, default)

    def value(self) -> dict[str, Any]:
        """Base, defaults, changes, casts and calculations, layered in order."""
        cfg = self._config
        record = apply_defaults(self._base, cfg.defaults)
        record = apply_changes(record, self._changes)
        record = apply_casts(record, cfg.casts, cfg.types)
        return apply_calcs(record, cfg.calcs)

    def change(self) -> dict[str, Any]:
        """What was explicitly set since the last reset, coerced."""
        cfg = self._config
        record = apply_changes({}, self._changes)
        return apply_casts(record, cfg.casts, cfg.types)

    def changed_value(self) -> dict[str, Any]:
        """``value()`` restricted to writable attributes."""
        writable = self._config.writable_names
        return {k: v for k, v in self.value().items() if k in writable}

    def changes(self) -> tuple[tuple[str, Any], ...]:
        """Raw change log, duplicates included, in call order."""
        return tuple(self._changes)

    def dirty(self) -> bool:
        return bool(self._changes)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def set(self, name: str, value: Any) -> ModelInstance:
        """Record a write to *name*.

        Writes to read-only, calculated or undeclared names are dropped
        without events.
        """
        if not self._config.is_writable(name):
            log.debug("write_ignored", schema=self._config.name, attribute=name)
            return self
        self._emit(ModelEvent.SETTING, name, value)
        self._changes.append((name, value))
        self._emit(ModelEvent.SET, name, value)
        return self

    def set_many(self, values: Mapping[str, Any]) -> ModelInstance:
        """``set()`` each key of *values*, in order."""
        for name, value in values.items():
            self.set(name, value)
        return self

    def reset(self, base: Any = MISSING) -> ModelInstance:
        """Clear the change log, and replace the base if one is given."""
        new_base = self._base if base is MISSING else snapshot_base(base)
        self._emit(ModelEvent.RESETTING, dict(new_base))
        self._changes = []
        self._base = new_base
        self._emit(ModelEvent.RESET, dict(new_base))
        return self

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    def on(self, event: ModelEvent | str, handler: Handler) -> ModelInstance:
        """Subscribe to *event* on this instance only.

        Handlers receive ``(name, value)`` for ``setting``/``set`` and
        ``(new_base)`` for ``resetting``/``reset``.
        """
        self._dispatcher.subscribe(event, handler)
        return self

    def off(self, event: ModelEvent | str, handler: Handler) -> ModelInstance:
        self._dispatcher.unsubscribe(event, handler)
        return self

    def _emit(self, event: ModelEvent, *args: Any) -> None:
        self._dispatcher.emit(event, *args)
        if self._schema_dispatcher is not None:
            self._schema_dispatcher.emit(event, self, *args)

    def __repr__(self) -> str:
        state = "dirty" if self._changes else "clean"
        return f"<ModelInstance {self._config.name!r} {state} changes={len(self._changes)}>"
