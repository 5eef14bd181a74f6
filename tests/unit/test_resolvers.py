"""Test the pure pipeline steps in isolation."""

import copy

from attrmodel.model.resolvers import (
    MISSING,
    CastRule,
    DefaultRule,
    apply_calcs,
    apply_casts,
    apply_changes,
    apply_defaults,
)


class TestMissing:
    def test_singleton_and_falsey(self):
        assert type(MISSING)() is MISSING
        assert not MISSING
        assert repr(MISSING) == "MISSING"

    def test_survives_copies(self):
        assert copy.copy(MISSING) is MISSING
        assert copy.deepcopy(MISSING) is MISSING


class TestRules:
    def test_default_rule_keeps_present_value(self):
        assert DefaultRule(value=1).resolve(None) is None
        assert DefaultRule(value=1).resolve(0) == 0

    def test_default_rule_fills_missing(self):
        assert DefaultRule(value=1).resolve() == 1
        assert DefaultRule(factory=lambda: "made").resolve(MISSING) == "made"

    def test_cast_rule_is_identity_on_missing(self):
        calls = []
        rule = CastRule(target=lambda v: calls.append(v))
        assert rule.resolve(MISSING) is MISSING
        assert calls == []

    def test_cast_rule_type_name(self):
        assert CastRule(target="integer").type_name == "integer"
        assert CastRule(target=int).type_name is None


class TestPipelineSteps:
    def test_steps_do_not_mutate_inputs(self):
        record = {"a": "1"}
        apply_defaults(record, {"b": DefaultRule(value=2)})
        apply_changes(record, [("a", "2")])
        apply_casts(record, {"a": CastRule(target=int)}, {})
        apply_calcs(record, {"c": lambda r: 3})
        assert record == {"a": "1"}

    def test_apply_changes_in_order(self):
        assert apply_changes({}, [("a", 1), ("b", 2), ("a", 3)]) == {"a": 3, "b": 2}

    def test_apply_casts_skips_absent_keys(self):
        result = apply_casts({"a": "1"}, {
            "a": CastRule(target="integer"),
            "b": CastRule(target="integer"),
        }, {"integer": int})
        assert result == {"a": 1}

    def test_apply_defaults_skips_rules_without_value(self):
        assert apply_defaults({"x": 1}, {}) == {"x": 1}
