"""Property test: change-log and resolution invariants.

Uses hypothesis to generate random write sequences (including writes to
read-only and undeclared names) and checks that the change log, the
resolved value and the event counts always agree.
"""

import math

from hypothesis import given, strategies as st

from attrmodel import define_schema
from attrmodel.core.casts import to_integer

WRITABLE = ("a", "b", "c")
NAMES = WRITABLE + ("ro", "undeclared")

SCHEMA = (
    define_schema("prop")
    .attr("a")
    .attr("b", default=0)
    .attr("c", type="integer")
    .attr("ro", read_only=True, default="fixed")
)

writes = st.lists(
    st.tuples(st.sampled_from(NAMES), st.integers(min_value=-1000, max_value=1000)),
    max_size=20,
)
bases = st.dictionaries(
    st.sampled_from(NAMES + ("extra",)),
    st.integers(min_value=-1000, max_value=1000),
    max_size=5,
)


@given(base=bases, ops=writes)
def test_log_holds_exactly_the_accepted_writes(base, ops):
    inst = SCHEMA(base)
    for name, value in ops:
        inst.set(name, value)

    accepted = tuple((n, v) for n, v in ops if n in WRITABLE)
    assert inst.changes() == accepted
    assert inst.dirty() is bool(accepted)


@given(base=bases, ops=writes)
def test_last_write_wins(base, ops):
    inst = SCHEMA(base)
    for name, value in ops:
        inst.set(name, value)

    resolved = inst.value()
    last = {n: v for n, v in ops if n in WRITABLE}
    for name, value in last.items():
        assert resolved[name] == value
    assert inst.change() == last
    assert resolved["ro"] == base.get("ro", "fixed")


@given(base=bases, ops=writes)
def test_reset_restores_base_value(base, ops):
    inst = SCHEMA(base)
    for name, value in ops:
        inst.set(name, value)
    inst.reset()
    assert inst.value() == SCHEMA(base).value()
    assert inst.dirty() is False


@given(ops=writes)
def test_event_counts_match_accepted_writes(ops):
    counts = {"setting": 0, "set": 0}
    inst = SCHEMA()
    inst.on("setting", lambda n, v: counts.__setitem__("setting", counts["setting"] + 1))
    inst.on("set", lambda n, v: counts.__setitem__("set", counts["set"] + 1))
    for name, value in ops:
        inst.set(name, value)

    accepted = sum(1 for n, _ in ops if n in WRITABLE)
    assert counts == {"setting": accepted, "set": accepted}


@given(value=st.integers())
def test_integer_cast_round_trips_integer_strings(value):
    assert to_integer(str(value)) == value


@given(value=st.floats(allow_nan=False, allow_infinity=False))
def test_integer_cast_truncates_floats(value):
    assert to_integer(value) == math.trunc(value)
