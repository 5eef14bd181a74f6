"""Pure, stateless resolution steps of the value pipeline.

``value()`` is the composition::

    base -> apply_defaults -> apply_changes -> apply_casts -> apply_calcs

Every step takes a record and returns a new ``dict``; none of them mutate
their inputs.  Absence of a key is represented by ``MISSING`` so that a
present ``None`` is never mistaken for "no value".
"""

from __future__ import annotations

import copy
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any

from attrmodel.core.casts import Caster, lookup_caster


class _Missing:
    """Sentinel type for an absent value."""

    _instance: _Missing | None = None

    def __new__(cls) -> _Missing:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False

    def __copy__(self) -> _Missing:
        return self

    def __deepcopy__(self, memo: dict[int, Any]) -> _Missing:
        return self


MISSING: Any = _Missing()

Calc = Callable[[Mapping[str, Any]], Any]


# ---------------------------------------------------------------------------
# Rules
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class DefaultRule:
    """Fills an absent value with a declared default.

    Exactly one of ``value`` / ``factory`` is set.  Static values are
    deep-copied on each resolution when ``copy_value`` is true, so two
    instances never share a mutable default.
    """

    value: Any = MISSING
    factory: Callable[[], Any] | None = None
    copy_value: bool = True

    def resolve(self, current: Any = MISSING) -> Any:
        if current is not MISSING:
            return current
        if self.factory is not None:
            return self.factory()
        if self.copy_value:
            return copy.deepcopy(self.value)
        return self.value


@dataclass(frozen=True)
class CastRule:
    """Coerces a present value.

    ``target`` is either a callable (used directly) or a type name looked
    up in the registry at resolution time.  ``explicit`` marks rules set
    through ``Schema.cast()``, which implicit ``attr(type=...)``
    declarations never replace.
    """

    target: str | Caster
    explicit: bool = False

    @property
    def type_name(self) -> str | None:
        return self.target if isinstance(self.target, str) else None

    def resolve(
        self,
        current: Any = MISSING,
        registry: Mapping[str, Caster] | None = None,
    ) -> Any:
        if current is MISSING:
            return current
        if callable(self.target):
            return self.target(current)
        return lookup_caster(registry or {}, self.target)(current)


# ---------------------------------------------------------------------------
# Pipeline steps
# ---------------------------------------------------------------------------

def apply_defaults(
    record: Mapping[str, Any],
    defaults: Mapping[str, DefaultRule],
) -> dict[str, Any]:
    """Fill keys absent from *record*; present keys (even ``None``) win."""
    result = dict(record)
    for name, rule in defaults.items():
        resolved = rule.resolve(result.get(name, MISSING))
        if resolved is not MISSING:
            result[name] = resolved
    return result


def apply_changes(
    record: Mapping[str, Any],
    changes: Iterable[tuple[str, Any]],
) -> dict[str, Any]:
    """Overlay change-log entries in order; later entries win."""
    result = dict(record)
    for name, value in changes:
        result[name] = value
    return result


def apply_casts(
    record: Mapping[str, Any],
    casts: Mapping[str, CastRule],
    registry: Mapping[str, Caster],
) -> dict[str, Any]:
    """Coerce only the keys already present in *record*."""
    result = dict(record)
    for name, rule in casts.items():
        if name in result:
            result[name] = rule.resolve(result[name], registry)
    return result


def apply_calcs(
    record: Mapping[str, Any],
    calcs: Mapping[str, Calc],
) -> dict[str, Any]:
    """Evaluate calculations in declaration order.

    Each calculation sees a read-only view of everything resolved so far,
    including earlier calculations, and its result always overwrites.
    """
    result = dict(record)
    view = MappingProxyType(result)
    for name, fn in calcs.items():
        result[name] = fn(view)
    return result
