"""Shared fixtures for the attrmodel test suite."""

from __future__ import annotations

import os

import pytest

from attrmodel import Schema, Settings, define_schema


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    """Keep ATTRMODEL_* variables from the host out of every test."""
    for key in list(os.environ):
        if key.startswith("ATTRMODEL_"):
            monkeypatch.delenv(key, raising=False)


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------

@pytest.fixture
def settings() -> Settings:
    return Settings()


@pytest.fixture
def isolating_settings() -> Settings:
    return Settings(isolate_handler_errors=True)


@pytest.fixture
def open_settings() -> Settings:
    """Settings that keep schemas declarable after instantiation."""
    return Settings(freeze_on_instantiate=False)


# ---------------------------------------------------------------------------
# Schemas
# ---------------------------------------------------------------------------

@pytest.fixture
def defaults_schema() -> Schema:
    return (
        define_schema("defaults")
        .attr("A", default="default")
        .attr("B", default=[])
        .attr("C")
    )


@pytest.fixture
def cast_schema() -> Schema:
    return (
        define_schema("casts")
        .attr("string", type="string")
        .attr("boolean", type="boolean")
        .attr("number", type="number")
        .attr("integer", type="integer")
        .attr("null", type="null")
        .attr("array", type="array")
        .attr("object", type="object")
        .attr("custom", type="upcase")
        .attr("notype")
        .register_type("upcase", lambda v: str(v).upper())
    )


@pytest.fixture
def person_schema() -> Schema:
    """Writable, read-only and calculated attributes side by side."""
    return (
        define_schema("person")
        .attr("first", type="string")
        .attr("last", type="string")
        .attr("age", type="integer", default=0)
        .attr("id", read_only=True, default="anon")
        .calc("full", lambda r: " ".join(
            part for part in (r.get("first"), r.get("last")) if part
        ))
        .calc("adult", lambda r: r.get("age", 0) >= 18)
    )
