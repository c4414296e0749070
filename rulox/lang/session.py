"""Session control for the rulox language: runs the scanner, parser, resolver and interpreter over units of source,
either a whole file or what the shell reads line by line.
"""

from rulox.lang.error import GenericException
from rulox.runtime.interpreter import Interpreter
from rulox.runtime.resolver import Resolver
from rulox.syntax.parser import Parser
from rulox.syntax.scanner import Scanner


class Session:
    """Governs a rulox session. One Interpreter lives as long as the session, so globals survive between units."""
    SH_FILE = "<in>"  # command-line interpreter filename

    def __init__(self, error_handler, path, cmd_line, out=None):
        self.error_handler = error_handler
        self.error_handler.register_file(path)

        self.path = path          # used for error messages
        self.cmd_line = cmd_line  # whether or not in command-line mode
        self.source = None        # contents of path, if it is a file

        self.interpreter = Interpreter(out)
        self.to_exec = []  # list of (statements, distances) that compiled cleanly and haven't run yet

        if self.cmd_line:
            self.error_handler.fatal = False

        if path != Session.SH_FILE:
            self.source = Session.read(path)
        elif not cmd_line:
            raise GenericException("'<in>' is a reserved filename")

    @staticmethod
    def read(path):
        try:
            with open(path, "r", encoding="utf-8") as file:
                return file.read()
        except OSError:
            raise GenericException(f"'{path}' could not be opened")

    @staticmethod
    def is_incomplete(source):
        """Whether source leaves a brace, parenthesis or string open, in which case the shell keeps reading lines."""
        depth = 0
        in_string = False
        idx = 0
        while idx < len(source):
            char = source[idx]
            if in_string:
                in_string = char != '"'
            elif char == '"':
                in_string = True
            elif source.startswith("//", idx):
                newline = source.find("\n", idx)
                if newline == -1:
                    break
                idx = newline
            elif char in "({":
                depth += 1
            elif char in ")}":
                depth -= 1
            idx += 1
        return in_string or depth > 0

    def tokens(self, source, line_num=1):
        """Scans source, whose first line is line_num. Lexical errors are reported, not raised."""
        self.error_handler.register_source(source, line_num)
        return Scanner(source, self.error_handler, line_num).scan_tokens()

    def syntax_tree(self, source, line_num=1):
        """Scans and parses source. Returns its statements, or None if it had lexical or syntax errors."""
        tokens = self.tokens(source, line_num)
        statements = Parser(tokens, self.error_handler).parse()
        if not self.error_handler.checkpoint():
            return None
        return statements

    def add(self, source, line_num=1):
        """Compiles source and queues it to be run. Returns whether it compiled cleanly: a unit with any static error
        is dropped.
        """
        statements = self.syntax_tree(source, line_num)
        if statements is None:
            return False

        distances = Resolver(self.error_handler).resolve(statements)
        if not self.error_handler.checkpoint():
            return False

        self.to_exec.append((statements, distances))
        return True

    def run(self):
        """Runs queued units in order. An EvaluationError aborts its unit and is raised; later units stay queued."""
        while self.to_exec:
            statements, distances = self.to_exec.pop(0)
            self.interpreter.interpret(statements, distances)
