"""Lexical analysis for rulox: turns source text into a list of Tokens in a single forward pass.

```
<token>      ::= <punct> | <operator> | <number> | <string> | <identifier> | <keyword>
<operator>   ::= "!" | "!=" | "=" | "==" | "<" | "<=" | ">" | ">="      ; longest match wins
<number>     ::= <digit>+ ("." <digit>+)?                               ; "1." is NUMBER then DOT
<string>     ::= '"' <char>* '"'                                        ; may span lines, no escapes
<identifier> ::= <alpha> (<alpha> | <digit>)*                           ; alpha includes Cyrillic а-я, А-Я
<comment>    ::= "//" <char>* <newline>                                 ; discarded
```

Errors (unexpected character, unterminated string) are reported to the ErrorHandler and scanning carries on.
"""

from rulox.lang.error import LexicalError
from rulox.syntax.tokens import KEYWORDS, Token, TokenKind


SINGLE = {
    "(": TokenKind.LEFT_PAREN,
    ")": TokenKind.RIGHT_PAREN,
    "{": TokenKind.LEFT_BRACE,
    "}": TokenKind.RIGHT_BRACE,
    ",": TokenKind.COMMA,
    ".": TokenKind.DOT,
    "-": TokenKind.MINUS,
    "+": TokenKind.PLUS,
    ";": TokenKind.SEMICOLON,
    "*": TokenKind.STAR,
}

# char: (kind when followed by "=", kind otherwise)
DOUBLE = {
    "!": (TokenKind.BANG_EQUAL, TokenKind.BANG),
    "=": (TokenKind.EQUAL_EQUAL, TokenKind.EQUAL),
    "<": (TokenKind.LESS_EQUAL, TokenKind.LESS),
    ">": (TokenKind.GREATER_EQUAL, TokenKind.GREATER),
}


def is_digit(char):
    return "0" <= char <= "9"


def is_alpha(char):
    return ("a" <= char <= "z" or "A" <= char <= "Z" or
            "а" <= char <= "я" or "А" <= char <= "Я" or
            char == "_")


def is_alphanumeric(char):
    return is_alpha(char) or is_digit(char)


class Scanner:
    """Scans one unit of source. line is the number of the unit's first line (the shell numbers lines globally)."""

    def __init__(self, source, error_handler, line=1):
        self.source = source
        self.error_handler = error_handler

        self.tokens = []
        self.start = 0    # index of first char of the token being scanned
        self.current = 0  # index of next char to consume
        self.line = line
        self.line_start = 0  # index of first char of the current line
        self.column = 0      # column the token being scanned starts at

    def scan_tokens(self):
        """Scans the whole source and returns the tokens, always terminated by an EOF token."""
        while not self.at_end():
            self.start = self.current
            self.column = self.start - self.line_start
            self.scan_token()

        self.tokens.append(Token(TokenKind.EOF, "", None, self.line, self.current - self.line_start))
        return self.tokens

    def scan_token(self):
        char = self.advance()

        if char in SINGLE:
            self.add_token(SINGLE[char])
        elif char in DOUBLE:
            matched, single = DOUBLE[char]
            self.add_token(matched if self.match("=") else single)
        elif char == "/":
            if self.match("/"):
                while self.peek() != "\n" and not self.at_end():
                    self.advance()
            else:
                self.add_token(TokenKind.SLASH)
        elif char in " \r\t":
            pass
        elif char == "\n":
            self.line += 1
            self.line_start = self.current
        elif char == '"':
            self.string()
        elif is_digit(char):
            self.number()
        elif is_alpha(char):
            self.identifier()
        else:
            self.error_handler.report(LexicalError(f"Unexpected character '{char}'.", line=self.line))

    def string(self):
        while self.peek() != '"' and not self.at_end():
            if self.peek() == "\n":
                self.line += 1
                self.line_start = self.current + 1
            self.advance()

        if self.at_end():
            self.error_handler.report(LexicalError("Unterminated string.", line=self.line))
            return

        self.advance()  # closing quote
        self.add_token(TokenKind.STRING, self.source[self.start + 1:self.current - 1])

    def number(self):
        while is_digit(self.peek()):
            self.advance()

        # the dot is only part of the number if a digit follows it
        if self.peek() == "." and is_digit(self.peek_next()):
            self.advance()
            while is_digit(self.peek()):
                self.advance()

        self.add_token(TokenKind.NUMBER, float(self.source[self.start:self.current]))

    def identifier(self):
        while is_alphanumeric(self.peek()):
            self.advance()

        text = self.source[self.start:self.current]
        self.add_token(KEYWORDS.get(text, TokenKind.IDENTIFIER))

    def add_token(self, kind, literal=None):
        self.tokens.append(Token(kind, self.source[self.start:self.current], literal, self.line, self.column))

    def advance(self):
        char = self.source[self.current]
        self.current += 1
        return char

    def match(self, expected):
        """Consumes the next char only if it is expected."""
        if self.at_end() or self.source[self.current] != expected:
            return False
        self.current += 1
        return True

    def peek(self):
        if self.at_end():
            return "\0"
        return self.source[self.current]

    def peek_next(self):
        if self.current + 1 >= len(self.source):
            return "\0"
        return self.source[self.current + 1]

    def at_end(self):
        return self.current >= len(self.source)
