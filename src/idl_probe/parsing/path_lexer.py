"""Lexer for dotted field paths and ``path=value`` constraint expressions."""

import ply.lex as lex


class PathLexer:
    """Lexer for tokenizing field paths.

    After ``=`` the lexer switches to the ``value`` state, where the rest of
    the input (trimmed) is a single VALUE token. Values such as base58
    public keys can start with a digit, so they are not split further.
    """

    states = (("value", "exclusive"),)

    tokens = [
        "SEGMENT",
        "DOT",
        "EQUALS",
        "VALUE",
    ]

    t_DOT = r"\."

    t_ignore = " \t"
    t_value_ignore = " \t"

    def __init__(self) -> None:
        self.lexer: lex.Lexer = None  # type: ignore

    def t_EQUALS(self, t: lex.LexToken) -> lex.LexToken:
        r"="
        t.lexer.begin("value")
        return t

    def t_SEGMENT(self, t: lex.LexToken) -> lex.LexToken:
        r"[A-Za-z0-9_]+"
        return t

    def t_value_VALUE(self, t: lex.LexToken) -> lex.LexToken:
        r"\S(?:.*\S)?"
        return t

    def t_error(self, t: lex.LexToken) -> None:
        raise SyntaxError(f"Illegal character '{t.value[0]}' at position {t.lexpos}")

    def t_value_error(self, t: lex.LexToken) -> None:
        raise SyntaxError(f"Illegal character '{t.value[0]}' at position {t.lexpos}")

    def build(self, **kwargs) -> None:  # type: ignore
        """Build the lexer."""
        self.lexer = lex.lex(module=self, **kwargs)

    def fresh(self) -> lex.Lexer:
        """Return an independent lexer positioned in the initial state."""
        lexer = self.lexer.clone()
        lexer.begin("INITIAL")
        return lexer

    def tokenize(self, data: str) -> list[lex.LexToken]:
        """Tokenize the input and return all tokens."""
        lexer = self.fresh()
        lexer.input(data)
        tokens = []
        while True:
            tok = lexer.token()
            if tok is None:
                break
            tokens.append(tok)
        return tokens
