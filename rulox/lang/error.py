"""Error handling for the rulox language. Only GenericExceptions should be encountered while a unit is compiled or run:
if another type of error makes it all the way to ErrorHandler, it is assumed to be an internal issue.

Errors come in three flavours. Lexical and syntactic errors are reported as they are found and the phase keeps going,
so one pass can surface several of them; the session then stops at a checkpoint before running anything. Resolution
errors behave the same way. Evaluation errors are raised and abort the current unit only.
"""

import sys

from termcolor import colored

from rulox.syntax.tokens import TokenKind


class GenericException(Exception):
    """Templates a rulox error so that it can be reported or thrown. token is the offending token, if known."""
    exit_code = 1

    def __init__(self, msg, token=None, line=None, internal=False):
        super().__init__(msg)
        self.message = msg
        self.token = token
        self.line = token.line if token is not None else line
        self.internal = internal

    @property
    def where(self):
        """Location suffix for the message: the offending lexeme, or the end of input."""
        if self.token is None:
            return ""
        if self.token.kind is TokenKind.EOF:
            return " at end"
        return f" at '{self.token.lexeme}'"

    def __str__(self):
        return f"[line {self.line}] {self.message}{self.where}" if self.line is not None else self.message


class LexicalError(GenericException):
    """Unexpected character or unterminated string."""
    exit_code = 65


class ParseError(GenericException):
    """Grammar violation. Raised inside the parser to unwind to the nearest statement boundary."""
    exit_code = 65


class ResolveError(GenericException):
    """Static binding error, e.g. a local variable read in its own initializer."""
    exit_code = 65


class EvaluationError(GenericException):
    """Runtime type mismatch, unbound name or property, bad call."""
    exit_code = 70


class ErrorHandler:
    """Context manager that prints rulox diagnostics and decides whether they end the process.

    When fatal (script mode) the first thrown error, or a checkpoint after reported errors, exits with the error's
    exit code. When not fatal (interactive mode) every diagnostic is printed and control goes back to the caller.
    """
    ERROR = "red"

    def __init__(self, fatal=True, file=None):
        self.fatal = fatal
        self.file = file    # stream diagnostics are printed to, stdout if None
        self.path = None    # file currently being compiled/run
        self.lines = {}     # dict of line num: source text, used for diagnosis
        self.reported = []  # errors reported since the last checkpoint

    def register_file(self, path):
        """Registers path as the origin of subsequent diagnostics."""
        self.path = path
        self.lines = {}

    def register_source(self, source, line_num=1):
        """Registers source text, whose first line is line_num, for diagnosis."""
        for offset, text in enumerate(source.split("\n")):
            self.lines[line_num + offset] = text

    @property
    def had_error(self):
        return bool(self.reported)

    @staticmethod
    def locate(token, text):
        """Index of token in text: its column when that fits, else the lexeme's only occurrence. None if ambiguous."""
        lexeme = token.lexeme
        if token.column is not None and text[token.column:token.column + len(lexeme)] == lexeme:
            return token.column
        if text.count(lexeme) == 1:
            return text.index(lexeme)
        return None

    @staticmethod
    def diagnose(error, text):
        """Returns text with the offending lexeme of error highlighted and underlined. Assumes locate finds it."""
        lexeme = error.token.lexeme
        start = ErrorHandler.locate(error.token, text)
        end = start + len(lexeme)

        diagnosis = "  " + text[:start]
        diagnosis += colored(lexeme, ErrorHandler.ERROR, attrs=["bold"])
        diagnosis += text[end:] + "\n"

        diagnosis += "  " + " " * start
        diagnosis += colored("^" + "~" * (end - start - 1), ErrorHandler.ERROR, attrs=["bold"])

        return diagnosis

    def _print(self, error):
        error_msg = ""
        if self.path is not None and error.line is not None:
            error_msg += colored(f"{self.path}:{error.line}: ", attrs=["bold"])

        if error.internal:
            error_msg += colored("[internal] ", ErrorHandler.ERROR, attrs=["bold"])

        error_msg += colored("error: ", ErrorHandler.ERROR, attrs=["bold"]) + error.message + error.where
        print(error_msg, file=self.file)

        text = self.lines.get(error.line)
        if (not error.internal and error.token is not None and error.token.lexeme and text
                and ErrorHandler.locate(error.token, text) is not None):
            print(ErrorHandler.diagnose(error, text), file=self.file)

    def report(self, error):
        """Prints error and records it without interrupting the current phase."""
        self.reported.append(error)
        self._print(error)

    def checkpoint(self):
        """Ends a static phase. Returns whether no errors were reported since the last checkpoint; if some were and
        the handler is fatal, exits instead.
        """
        if not self.reported:
            return True

        exit_code = self.reported[0].exit_code
        self.reported = []
        if self.fatal:
            sys.exit(exit_code)
        return False

    def throw(self, error):
        """Prints error and exits if fatal."""
        self._print(error)
        if self.fatal:
            sys.exit(error.exit_code)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        do_exit = False
        if exc_type is KeyboardInterrupt:
            self.throw(GenericException("keyboard interrupt"))
        elif exc_type is SystemExit:
            do_exit = True
        elif exc_type is RecursionError:
            self.throw(EvaluationError("stack overflow: maximum recursion depth exceeded"))
        elif exc_type is not None and issubclass(exc_type, GenericException):
            self.throw(exc_val)
        elif exc_type is not None:
            self.throw(GenericException(f"unknown error: '{exc_type.__name__}: {exc_val}'", internal=True))
            do_exit = True

        return not do_exit
