"""Enumerations used across attrmodel."""

from enum import Enum


class ModelEvent(str, Enum):
    """Notifications fired by model instances.

    ``SETTING``/``SET`` bracket an accepted write; ``RESETTING``/``RESET``
    bracket a reset of the change log.
    """

    SETTING = "setting"
    SET = "set"
    RESETTING = "resetting"
    RESET = "reset"


class BuiltinType(str, Enum):
    """JSON-Schema type names seeded into every cast registry."""

    ARRAY = "array"
    BOOLEAN = "boolean"
    INTEGER = "integer"
    NUMBER = "number"
    NULL = "null"
    OBJECT = "object"
    STRING = "string"


class LogFormat(str, Enum):
    JSON = "json"
    CONSOLE = "console"
