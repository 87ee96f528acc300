"""Parsing module for field paths and constraint expressions."""

from idl_probe.parsing.path_parser import (
    ConstraintSpec,
    PathParser,
    parse_constraint,
    parse_field_path,
)

__all__ = [
    "ConstraintSpec",
    "PathParser",
    "parse_constraint",
    "parse_field_path",
]
