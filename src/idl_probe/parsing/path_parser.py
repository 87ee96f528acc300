"""Parser for dotted field paths and ``path=value`` constraint expressions."""

from __future__ import annotations

from dataclasses import dataclass
from functools import cache
from typing import Any

import ply.yacc as yacc

from idl_probe.errors import FieldPathError
from idl_probe.parsing.path_lexer import PathLexer


@dataclass
class ConstraintSpec:
    """A parsed ``path=value`` expression. The value is still text."""

    path: str
    value: str


@dataclass
class _Statement:
    segments: list[str]
    value: str | None = None


class PathParser:
    """Parser for the field path grammar."""

    tokens = PathLexer.tokens

    def __init__(self) -> None:
        self.lexer = PathLexer()
        self.lexer.build()
        self.parser: yacc.LRParser = None  # type: ignore

    def p_statement_path(self, p: yacc.YaccProduction) -> None:
        """statement : path"""
        p[0] = _Statement(segments=p[1])

    def p_statement_constraint(self, p: yacc.YaccProduction) -> None:
        """statement : path EQUALS VALUE"""
        p[0] = _Statement(segments=p[1], value=p[3])

    def p_path_single(self, p: yacc.YaccProduction) -> None:
        """path : SEGMENT"""
        p[0] = [p[1]]

    def p_path_nested(self, p: yacc.YaccProduction) -> None:
        """path : path DOT SEGMENT"""
        p[0] = p[1] + [p[3]]

    def p_error(self, p: yacc.YaccProduction) -> None:
        if p:
            raise SyntaxError(f"Unexpected '{p.value}' at position {p.lexpos}")
        raise SyntaxError("Unexpected end of input")

    def build(self, **kwargs: Any) -> None:
        """Build the parser."""
        self.parser = yacc.yacc(module=self, **kwargs)

    def parse(self, data: str) -> _Statement:
        """Parse a path or constraint expression."""
        if self.parser is None:
            self.build(debug=False, write_tables=False, errorlog=yacc.NullLogger())
        try:
            statement = self.parser.parse(data, lexer=self.lexer.fresh())
        except SyntaxError as e:
            raise FieldPathError(data, str(e)) from e
        if statement is None:
            raise FieldPathError(data, "empty path")
        return statement


@cache
def _shared_parser() -> PathParser:
    return PathParser()


def parse_field_path(path: str) -> list[str]:
    """Split a dotted field path into its segments.

    Raises:
        FieldPathError: If the path is empty or malformed.
    """
    statement = _shared_parser().parse(path)
    if statement.value is not None:
        raise FieldPathError(path, "unexpected '=' in field path")
    return statement.segments


def parse_constraint(expression: str) -> ConstraintSpec:
    """Parse a ``path=value`` expression.

    Raises:
        FieldPathError: If the expression is malformed or has no value.
    """
    statement = _shared_parser().parse(expression)
    if statement.value is None:
        raise FieldPathError(expression, "expected 'path=value'")
    return ConstraintSpec(path=".".join(statement.segments), value=statement.value)
