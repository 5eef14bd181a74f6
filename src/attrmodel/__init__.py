"""attrmodel: declarative attributes with defaults, casts, calculations
and change tracking over plain data objects."""

from attrmodel.core.casts import BUILTIN_CASTS, CastRegistry
from attrmodel.core.config import Settings, load_settings
from attrmodel.core.enums import ModelEvent
from attrmodel.core.errors import (
    AttrModelError,
    CastError,
    ConfigError,
    EventError,
    InvalidAttributeOptions,
    SchemaError,
    SchemaFrozenError,
    UnknownCastTypeError,
    UnknownEventError,
)
from attrmodel.model import (
    MISSING,
    AttrOptions,
    ModelInstance,
    Schema,
    SchemaConfig,
    define_schema,
)

__version__ = "0.1.0"

__all__ = [
    "BUILTIN_CASTS",
    "MISSING",
    "AttrModelError",
    "AttrOptions",
    "CastError",
    "CastRegistry",
    "ConfigError",
    "EventError",
    "InvalidAttributeOptions",
    "ModelEvent",
    "ModelInstance",
    "Schema",
    "SchemaConfig",
    "SchemaError",
    "SchemaFrozenError",
    "Settings",
    "UnknownCastTypeError",
    "UnknownEventError",
    "define_schema",
    "load_settings",
]
