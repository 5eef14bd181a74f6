"""Core primitives: errors, enums, settings and the built-in cast registry."""
