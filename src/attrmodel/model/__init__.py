"""Schema builder, model instances and the value-resolution pipeline."""

from attrmodel.model.dispatch import EventDispatcher
from attrmodel.model.instance import ModelInstance
from attrmodel.model.resolvers import MISSING
from attrmodel.model.schema import AttrOptions, Schema, SchemaConfig, define_schema

__all__ = [
    "MISSING",
    "AttrOptions",
    "EventDispatcher",
    "ModelInstance",
    "Schema",
    "SchemaConfig",
    "define_schema",
]
