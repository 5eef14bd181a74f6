"""Built-in casters and the per-schema cast-type registry.

The registry maps a free-form type name to a one-argument coercion
function.  Every schema starts from its own copy of ``BUILTIN_CASTS``;
registrations on one schema never leak into another.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable, Iterator, Mapping
from types import MappingProxyType
from typing import Any

from .enums import BuiltinType
from .errors import CastError, UnknownCastTypeError

Caster = Callable[[Any], Any]

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


# ---------------------------------------------------------------------------
# Built-in casters (JSON Schema types)
# ---------------------------------------------------------------------------

def to_array(value: Any) -> list[Any]:
    if isinstance(value, list):
        return value
    if isinstance(value, (str, bytes, Mapping)):
        return [value]
    if isinstance(value, Iterable):
        return list(value)
    return [value]


def to_boolean(value: Any) -> bool:
    return bool(value)


def to_integer(value: Any) -> int:
    """Truncating parse: ``"42abc"`` -> 42, ``4.7`` -> 4, ``"-3.9"`` -> -3."""
    if isinstance(value, int):
        return int(value)
    if isinstance(value, float):
        try:
            return int(value)
        except (OverflowError, ValueError) as exc:
            raise CastError(BuiltinType.INTEGER.value, value, str(exc)) from exc
    if isinstance(value, (str, bytes)):
        text = value.decode() if isinstance(value, bytes) else value
        match = _LEADING_INT.match(text)
        if match:
            return int(match.group(1))
        raise CastError(BuiltinType.INTEGER.value, value, "no leading digits")
    raise CastError(BuiltinType.INTEGER.value, value)


def to_number(value: Any) -> int | float:
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, (int, float)):
        return value
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return 0
        try:
            return float(text)
        except ValueError as exc:
            raise CastError(BuiltinType.NUMBER.value, value, str(exc)) from exc
    raise CastError(BuiltinType.NUMBER.value, value)


def to_null(value: Any) -> None:
    return None


def to_object(value: Any) -> dict[str, Any]:
    if isinstance(value, Mapping):
        return dict(value)
    if hasattr(value, "__dict__"):
        return dict(vars(value))
    raise CastError(BuiltinType.OBJECT.value, value, "not a mapping or object")


def to_string(value: Any) -> str:
    return str(value)


BUILTIN_CASTS: Mapping[str, Caster] = MappingProxyType({
    BuiltinType.ARRAY.value: to_array,
    BuiltinType.BOOLEAN.value: to_boolean,
    BuiltinType.INTEGER.value: to_integer,
    BuiltinType.NUMBER.value: to_number,
    BuiltinType.NULL.value: to_null,
    BuiltinType.OBJECT.value: to_object,
    BuiltinType.STRING.value: to_string,
})


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

class CastRegistry(Mapping[str, Caster]):
    """Type name -> caster lookup table.

    Seeded with ``BUILTIN_CASTS`` unless *seed* is given.  Entries can be
    added or replaced but never removed.  ``lookup()`` is the only read
    path used during value resolution and raises ``UnknownCastTypeError``
    rather than passing a value through untouched.
    """

    def __init__(self, seed: Mapping[str, Caster] | None = None) -> None:
        self._casters: dict[str, Caster] = dict(
            BUILTIN_CASTS if seed is None else seed
        )

    def register(self, type_name: str, fn: Caster) -> None:
        if not callable(fn):
            raise TypeError(f"Caster for {type_name!r} must be callable")
        self._casters[type_name] = fn

    def lookup(self, type_name: str) -> Caster:
        try:
            return self._casters[type_name]
        except KeyError:
            raise UnknownCastTypeError(type_name) from None

    def snapshot(self) -> Mapping[str, Caster]:
        """Read-only copy, detached from later registrations."""
        return MappingProxyType(dict(self._casters))

    def copy(self) -> CastRegistry:
        return CastRegistry(self._casters)

    # -- Mapping protocol ----------------------------------------------------

    def __getitem__(self, type_name: str) -> Caster:
        return self._casters[type_name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._casters)

    def __len__(self) -> int:
        return len(self._casters)

    def __repr__(self) -> str:
        return f"CastRegistry({sorted(self._casters)!r})"


def lookup_caster(registry: Mapping[str, Caster], type_name: str) -> Caster:
    """Resolve *type_name* in any registry mapping, failing loudly."""
    if isinstance(registry, CastRegistry):
        return registry.lookup(type_name)
    try:
        return registry[type_name]
    except KeyError:
        raise UnknownCastTypeError(type_name) from None
