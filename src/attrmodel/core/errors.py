"""Custom exception hierarchy for attrmodel."""

from __future__ import annotations

from typing import Any


class AttrModelError(Exception):
    """Base exception for all attrmodel errors."""


# --- Configuration ---
class ConfigError(AttrModelError):
    """Invalid or missing library configuration."""


# --- Schema declaration ---
class SchemaError(AttrModelError):
    """Invalid schema declaration."""


class SchemaFrozenError(SchemaError):
    """Declaration attempted on a schema that has already been frozen."""

    def __init__(self, schema_name: str, operation: str):
        self.schema_name = schema_name
        self.operation = operation
        super().__init__(
            f"{schema_name}: cannot {operation} after the schema is frozen"
        )


class InvalidAttributeOptions(SchemaError):
    """Attribute options failed validation."""

    def __init__(self, attribute: str, reason: str):
        self.attribute = attribute
        self.reason = reason
        super().__init__(f"Invalid options for attribute {attribute!r}: {reason}")


# --- Casting ---
class CastError(AttrModelError, ValueError):
    """A value could not be coerced by a cast."""

    def __init__(self, type_name: str, value: Any, reason: str = ""):
        self.type_name = type_name
        self.value = value
        message = f"Unable to cast {value!r} to {type_name}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class UnknownCastTypeError(CastError):
    """A type name is not present in the cast registry."""

    def __init__(self, type_name: str):
        self.type_name = type_name
        self.value = None
        AttrModelError.__init__(
            self, f"Unable to cast to unknown type: {type_name}"
        )


# --- Events ---
class EventError(AttrModelError):
    """Event subscription or dispatch error."""


class UnknownEventError(EventError, ValueError):
    """Subscription to an event name outside the supported set."""

    def __init__(self, event_name: Any, allowed: tuple[str, ...] = ()):
        self.event_name = event_name
        self.allowed = allowed
        message = f"Unknown event: {event_name!r}"
        if allowed:
            message = f"{message} (expected one of: {', '.join(allowed)})"
        super().__init__(message)
