"""Token definitions for the rulox language: token kinds, the token value itself, and the keyword table.

Keywords are spelled in Russian. The names the runtime binds implicitly (receiver, superclass and initializer) are
kept here so that the scanner, resolver and interpreter agree on them.
"""

from dataclasses import dataclass
from enum import Enum, auto


MAX_ARGUMENTS = 255  # per call site and per declaration

THIS = "это"
SUPER = "супер"
INITIALIZER = "init"


class TokenKind(Enum):
    """Closed set of token kinds produced by the Scanner."""
    # single-character punctuation
    LEFT_PAREN = auto()
    RIGHT_PAREN = auto()
    LEFT_BRACE = auto()
    RIGHT_BRACE = auto()
    COMMA = auto()
    DOT = auto()
    MINUS = auto()
    PLUS = auto()
    SEMICOLON = auto()
    SLASH = auto()
    STAR = auto()

    # one or two character operators
    BANG = auto()
    BANG_EQUAL = auto()
    EQUAL = auto()
    EQUAL_EQUAL = auto()
    GREATER = auto()
    GREATER_EQUAL = auto()
    LESS = auto()
    LESS_EQUAL = auto()

    # literals
    IDENTIFIER = auto()
    STRING = auto()
    NUMBER = auto()

    # keywords
    AND = auto()
    CLASS = auto()
    ELSE = auto()
    FALSE = auto()
    FUN = auto()
    FOR = auto()
    IF = auto()
    NIL = auto()
    OR = auto()
    PRINT = auto()
    RETURN = auto()
    SUPER = auto()
    THIS = auto()
    TRUE = auto()
    VAR = auto()
    WHILE = auto()

    EOF = auto()


KEYWORDS = {
    "и": TokenKind.AND,
    "класс": TokenKind.CLASS,
    "иначе": TokenKind.ELSE,
    "ложь": TokenKind.FALSE,
    "для": TokenKind.FOR,
    "функция": TokenKind.FUN,
    "если": TokenKind.IF,
    "пусто": TokenKind.NIL,
    "или": TokenKind.OR,
    "вывести": TokenKind.PRINT,
    "вернуть": TokenKind.RETURN,
    SUPER: TokenKind.SUPER,
    THIS: TokenKind.THIS,
    "правда": TokenKind.TRUE,
    "переменная": TokenKind.VAR,
    "пока": TokenKind.WHILE,
}

# tokens at which the parser may resume after a syntax error
STATEMENT_STARTS = frozenset({
    TokenKind.CLASS,
    TokenKind.FUN,
    TokenKind.VAR,
    TokenKind.FOR,
    TokenKind.IF,
    TokenKind.WHILE,
    TokenKind.PRINT,
    TokenKind.RETURN,
})


@dataclass(frozen=True)
class Token:
    """A single scanned token. literal holds the parsed value of NUMBER and STRING tokens, None otherwise."""
    kind: TokenKind
    lexeme: str
    literal: object
    line: int
    column: int = None  # offset of the lexeme in its first line

    def __str__(self):
        return f"{self.kind.name} {self.lexeme} {'' if self.literal is None else self.literal}".rstrip()
