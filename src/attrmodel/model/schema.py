"""Schema builder and its compiled, immutable configuration.

Usage::

    from attrmodel import define_schema

    Person = (
        define_schema("person")
        .attr("name", type="string")
        .attr("age", type="integer", default=0)
        .attr("id", read_only=True)
        .calc("adult", lambda rec: rec.get("age", 0) >= 18)
    )

    bob = Person({"name": "Bob", "age": "42"})
    bob.value()   # {'name': 'Bob', 'age': 42, 'adult': True}

Declarations mutate the builder.  The first time the schema is called it
compiles a ``SchemaConfig`` (frozen tables, detached registry) and, by
default, freezes itself so the configuration every instance sees can no
longer change.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from attrmodel.core.casts import Caster, CastRegistry
from attrmodel.core.config import Settings, load_settings
from attrmodel.core.enums import ModelEvent
from attrmodel.core.errors import (
    InvalidAttributeOptions,
    SchemaFrozenError,
    UnknownCastTypeError,
)
from attrmodel.model.dispatch import EventDispatcher, Handler
from attrmodel.model.resolvers import MISSING, Calc, CastRule, DefaultRule
from attrmodel.observability.logger import get_logger

if TYPE_CHECKING:
    from attrmodel.model.instance import ModelInstance

log = get_logger(__name__)


# ---------------------------------------------------------------------------
# Attribute options
# ---------------------------------------------------------------------------

class AttrOptions(BaseModel):
    """Validated options for a single ``attr()`` declaration.

    Accepts JSON-Schema style keys (``readOnly``) as well as snake_case.
    Whether ``default`` was supplied at all is read from
    ``model_fields_set``; ``default=None`` is a real default.
    """

    model_config = ConfigDict(
        populate_by_name=True,
        extra="ignore",
        frozen=True,
        arbitrary_types_allowed=True,
    )

    read_only: bool = Field(default=False, alias="readOnly")
    default: Any = None
    default_factory: Callable[[], Any] | None = Field(
        default=None, alias="defaultFactory"
    )
    type: str | Callable[[Any], Any] | None = None

    @model_validator(mode="after")
    def _one_default_source(self) -> AttrOptions:
        if "default" in self.model_fields_set and self.default_factory is not None:
            raise ValueError("give either 'default' or 'default_factory', not both")
        return self

    @property
    def has_default(self) -> bool:
        return "default" in self.model_fields_set or self.default_factory is not None


# ---------------------------------------------------------------------------
# Compiled configuration
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SchemaConfig:
    """Immutable snapshot of a schema's tables.

    Shared by reference between every instance compiled from the same
    builder state.  All tables are read-only mappings.
    """

    name: str
    attributes: tuple[str, ...]
    writable: Mapping[str, bool]
    defaults: Mapping[str, DefaultRule]
    casts: Mapping[str, CastRule]
    calcs: Mapping[str, Calc]
    types: Mapping[str, Caster]

    def is_writable(self, name: str) -> bool:
        return self.writable.get(name, False)

    @property
    def writable_names(self) -> frozenset[str]:
        return frozenset(name for name, ok in self.writable.items() if ok)


# ---------------------------------------------------------------------------
# Builder
# ---------------------------------------------------------------------------

class Schema:
    """Declaration builder and instance factory for one model "class".

    Parameters
    ----------
    name
        Label used in logs and error messages.
    settings
        Library settings; loaded from env/defaults when omitted.
    """

    def __init__(self, name: str = "model", settings: Settings | None = None) -> None:
        self.name = name
        self.settings = settings if settings is not None else load_settings()
        self._attributes: list[str] = []
        self._writable: dict[str, bool] = {}
        self._defaults: dict[str, DefaultRule] = {}
        self._casts: dict[str, CastRule] = {}
        self._calcs: dict[str, Calc] = {}
        self._registry = CastRegistry()
        self._dispatcher = EventDispatcher(
            scope=name, isolate_errors=self.settings.isolate_handler_errors
        )
        self._config: SchemaConfig | None = None
        self._frozen = False

    # ------------------------------------------------------------------
    # Declaration
    # ------------------------------------------------------------------

    def attr(
        self,
        name: str,
        options: Mapping[str, Any] | AttrOptions | None = None,
        **kwargs: Any,
    ) -> Schema:
        """Declare attribute *name*.

        Options may be given as a mapping, as keyword arguments, or both
        (keywords win).  Recognised keys: ``read_only``/``readOnly``,
        ``default``, ``default_factory``, ``type``.
        """
        self._check_mutable("declare attribute " + repr(name))
        opts = self._parse_options(name, options, kwargs)

        if name not in self._writable:
            self._attributes.append(name)
        self._writable[name] = not opts.read_only

        if opts.default_factory is not None:
            self._defaults[name] = DefaultRule(factory=opts.default_factory)
        elif "default" in opts.model_fields_set:
            self._defaults[name] = DefaultRule(
                value=opts.default, copy_value=self.settings.copy_defaults
            )

        # An existing cast (explicit or implicit) is never replaced here
        if opts.type is not None and name not in self._casts:
            self._casts[name] = CastRule(target=opts.type)

        self._invalidate()
        return self

    def attrs(self, declarations: Mapping[str, Mapping[str, Any] | None]) -> Schema:
        """Declare several attributes, in mapping order."""
        for name, options in declarations.items():
            self.attr(name, options)
        return self

    def cast(self, name: str, fn: Caster) -> Schema:
        """Set the explicit cast for attribute *name*, replacing any other."""
        self._check_mutable("cast " + repr(name))
        if not callable(fn):
            raise TypeError(f"Cast for {name!r} must be callable")
        self._casts[name] = CastRule(target=fn, explicit=True)
        self._invalidate()
        return self

    def casts(self, casts: Mapping[str, Caster]) -> Schema:
        for name, fn in casts.items():
            self.cast(name, fn)
        return self

    def register_type(self, type_name: str, fn: Caster) -> Schema:
        """Add *type_name* to this schema's cast registry.

        Visible to every ``attr(type=type_name)`` declaration, including
        those made before this call.
        """
        self._check_mutable("register type " + repr(type_name))
        self._registry.register(type_name, fn)
        self._invalidate()
        return self

    def calc(self, name: str, fn: Calc) -> Schema:
        """Register a calculated field computed from the resolved record."""
        self._check_mutable("calc " + repr(name))
        if not callable(fn):
            raise TypeError(f"Calculation for {name!r} must be callable")
        self._calcs[name] = fn
        self._invalidate()
        return self

    def calcs(self, calcs: Mapping[str, Calc]) -> Schema:
        for name, fn in calcs.items():
            self.calc(name, fn)
        return self

    # ------------------------------------------------------------------
    # Class-scope events
    # ------------------------------------------------------------------

    def on(self, event: ModelEvent | str, handler: Handler) -> Schema:
        """Subscribe to *event* on every instance of this schema.

        Handlers receive the instance first: ``(instance, name, value)``
        for ``setting``/``set``, ``(instance, new_base)`` for
        ``resetting``/``reset``.
        """
        self._dispatcher.subscribe(event, handler)
        return self

    def off(self, event: ModelEvent | str, handler: Handler) -> Schema:
        self._dispatcher.unsubscribe(event, handler)
        return self

    @property
    def dispatcher(self) -> EventDispatcher:
        return self._dispatcher

    # ------------------------------------------------------------------
    # Compilation
    # ------------------------------------------------------------------

    @property
    def frozen(self) -> bool:
        return self._frozen

    @property
    def config(self) -> SchemaConfig:
        """The compiled configuration for the current declarations."""
        if self._config is None:
            self._config = self._compile()
        return self._config

    def freeze(self) -> SchemaConfig:
        """Compile and reject any further declaration."""
        config = self.config
        if not self._frozen:
            self._frozen = True
            log.debug(
                "schema_frozen",
                schema=self.name,
                attributes=len(config.attributes),
                calcs=len(config.calcs),
            )
        return config

    def _compile(self) -> SchemaConfig:
        types = self._registry.snapshot()
        for name, rule in self._casts.items():
            if rule.type_name is not None and rule.type_name not in types:
                log.debug(
                    "unknown_cast_type",
                    schema=self.name,
                    attribute=name,
                    type_name=rule.type_name,
                )
                raise UnknownCastTypeError(rule.type_name)

        writable = dict(self._writable)
        for name in self._calcs:
            if writable.get(name):
                writable[name] = False

        return SchemaConfig(
            name=self.name,
            attributes=tuple(self._attributes),
            writable=MappingProxyType(writable),
            defaults=MappingProxyType(dict(self._defaults)),
            casts=MappingProxyType(dict(self._casts)),
            calcs=MappingProxyType(dict(self._calcs)),
            types=types,
        )

    def _invalidate(self) -> None:
        self._config = None

    def _check_mutable(self, operation: str) -> None:
        if self._frozen:
            raise SchemaFrozenError(self.name, operation)

    def _parse_options(
        self,
        name: str,
        options: Mapping[str, Any] | AttrOptions | None,
        kwargs: Mapping[str, Any],
    ) -> AttrOptions:
        if isinstance(options, AttrOptions) and not kwargs:
            return options
        data: dict[str, Any] = {}
        if isinstance(options, AttrOptions):
            data.update(options.model_dump(include=options.model_fields_set))
        elif options is not None:
            data.update(options)
        data.update(kwargs)
        try:
            return AttrOptions.model_validate(data)
        except ValidationError as exc:
            raise InvalidAttributeOptions(name, str(exc)) from exc

    # ------------------------------------------------------------------
    # Instantiation
    # ------------------------------------------------------------------

    def __call__(self, base: Any = None) -> ModelInstance:
        """Wrap *base* in a new ``ModelInstance``."""
        from attrmodel.model.instance import ModelInstance

        if self.settings.freeze_on_instantiate:
            config = self.freeze()
        else:
            config = self.config
        return ModelInstance(config, base, schema_dispatcher=self._dispatcher, schema=self)

    def __repr__(self) -> str:
        state = "frozen" if self._frozen else "open"
        return f"<Schema {self.name!r} attributes={self._attributes!r} {state}>"


def define_schema(name: str = "model", *, settings: Settings | None = None) -> Schema:
    """Create a new, empty schema builder."""
    return Schema(name, settings=settings)


__all__ = [
    "MISSING",
    "AttrOptions",
    "Schema",
    "SchemaConfig",
    "define_schema",
]
