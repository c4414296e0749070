import io
import os
import tempfile
import unittest

from rulox.lang.error import ErrorHandler, EvaluationError, GenericException, ParseError
from rulox.lang.session import Session
from rulox.syntax.tokens import Token, TokenKind


def write_source(source):
    fd, path = tempfile.mkstemp(suffix=".rulox")
    with os.fdopen(fd, "w", encoding="utf-8") as file:
        file.write(source)
    return path


class SessionTestCase(unittest.TestCase):

    def setUp(self):
        self.paths = []

    def tearDown(self):
        for path in self.paths:
            os.remove(path)

    def file_session(self, source, fatal=True):
        path = write_source(source)
        self.paths.append(path)
        out = io.StringIO()
        error_handler = ErrorHandler(fatal=fatal, file=io.StringIO())
        return Session(error_handler, path, cmd_line=False, out=out), out

    def test_is_incomplete(self):
        should_pass = {
            "вывести 1;": False,
            "функция f() {": True,
            "функция f() { вернуть 1; }": False,
            "f(1,": True,
            'вывести "abc': True,
            'вывести "{";': False,
            "{ // }": True,
            "}": False,
        }
        for case, result in should_pass.items():
            self.assertEqual(result, Session.is_incomplete(case), case)

    def test_runs_file(self):
        sess, out = self.file_session("переменная a = 2;\nвывести a * 21;\n")
        self.assertTrue(sess.add(sess.source))
        self.assertEqual([], out.getvalue().splitlines())  # nothing runs before run()
        sess.run()
        self.assertEqual(["42"], out.getvalue().splitlines())
        self.assertEqual([], sess.to_exec)

    def test_units_share_globals(self):
        error_handler = ErrorHandler(fatal=False, file=io.StringIO())
        out = io.StringIO()
        sess = Session(error_handler, Session.SH_FILE, cmd_line=True, out=out)
        self.assertTrue(sess.add("переменная a = 1;"))
        self.assertTrue(sess.add("функция f() { вернуть a + 1; }", 2))
        sess.run()
        self.assertTrue(sess.add("вывести f();", 3))
        sess.run()
        self.assertEqual(["2"], out.getvalue().splitlines())

    def test_static_errors_drop_unit(self):
        error_handler = ErrorHandler(fatal=False, file=io.StringIO())
        sess = Session(error_handler, Session.SH_FILE, cmd_line=True)
        self.assertFalse(sess.add("вывести ;"))
        self.assertFalse(sess.add("вернуть 1;"))
        self.assertFalse(sess.add('вывести "open'))
        self.assertEqual([], sess.to_exec)
        self.assertFalse(error_handler.had_error)  # cleared at each checkpoint

    def test_syntax_tree(self):
        sess, __ = self.file_session("вывести 1;")
        self.assertEqual(1, len(sess.syntax_tree(sess.source)))

    def test_missing_file(self):
        error_handler = ErrorHandler(fatal=False, file=io.StringIO())
        with self.assertRaises(GenericException) as ctx:
            Session(error_handler, "/nonexistent/prog.rulox", cmd_line=False)
        self.assertEqual("'/nonexistent/prog.rulox' could not be opened", ctx.exception.message)
        self.assertEqual(1, ctx.exception.exit_code)

    def test_reserved_filename(self):
        error_handler = ErrorHandler(fatal=False, file=io.StringIO())
        self.assertRaises(GenericException, Session, error_handler, Session.SH_FILE, cmd_line=False)

    def test_fatal_exit_codes(self):
        should_fail = {
            "вывести ;": 65,
            "вывести @;": 65,
            "{ переменная a = a; }": 65,
        }
        for case, code in should_fail.items():
            sess, __ = self.file_session(case)
            with self.assertRaises(SystemExit) as ctx:
                sess.add(sess.source)
            self.assertEqual(code, ctx.exception.code, case)

        sess, out = self.file_session("вывести 1;\nвывести -пусто;\nвывести 2;")
        with self.assertRaises(SystemExit) as ctx:
            with sess.error_handler:
                sess.add(sess.source)
                sess.run()
        self.assertEqual(70, ctx.exception.code)
        self.assertEqual(["1"], out.getvalue().splitlines())
        self.assertIn("error: ", sess.error_handler.file.getvalue())
        self.assertIn(":2: ", sess.error_handler.file.getvalue())


class ErrorHandlerTestCase(unittest.TestCase):

    def setUp(self):
        self.file = io.StringIO()
        self.error_handler = ErrorHandler(fatal=False, file=self.file)
        self.error_handler.register_file("prog.rulox")

    def test_report_and_checkpoint(self):
        self.assertTrue(self.error_handler.checkpoint())

        token = Token(TokenKind.SEMICOLON, ";", None, 3)
        self.error_handler.report(ParseError("Expect expression.", token))
        self.assertTrue(self.error_handler.had_error)
        self.assertIn("prog.rulox:3: ", self.file.getvalue())
        self.assertIn("Expect expression. at ';'", self.file.getvalue())

        self.assertFalse(self.error_handler.checkpoint())
        self.assertFalse(self.error_handler.had_error)

    def test_diagnosis(self):
        self.error_handler.register_source("переменная a = 1;\nвывести a +  ;", 1)
        token = Token(TokenKind.SEMICOLON, ";", None, 2)
        self.error_handler.report(ParseError("Expect expression.", token))
        self.assertIn("вывести a +  ", self.file.getvalue())
        self.assertIn("^", self.file.getvalue())

        self.assertIn("^~~", ErrorHandler.diagnose(ParseError("x", Token(TokenKind.NIL, "пусто", None, 1)), "пусто"))

    def test_diagnosis_points_at_column(self):
        self.error_handler.register_source("вывести a + a", 1)
        token = Token(TokenKind.IDENTIFIER, "a", None, 1, 12)
        self.error_handler.report(ParseError("Expect ';' after value.", token))
        caret_line = self.file.getvalue().splitlines()[-1]
        self.assertIn("^", caret_line)
        self.assertEqual(2 + 12, len(caret_line) - len(caret_line.lstrip(" ")))

    def test_ambiguous_lexeme_is_not_underlined(self):
        self.error_handler.register_source("вывести a + a", 1)
        self.error_handler.report(ParseError("Expect ';' after value.", Token(TokenKind.IDENTIFIER, "a", None, 1)))
        self.assertEqual(1, len(self.file.getvalue().splitlines()))
        self.assertNotIn("^", self.file.getvalue())

    def test_error_str(self):
        token = Token(TokenKind.EOF, "", None, 4)
        self.assertEqual("[line 4] Expect ';' after value. at end", str(ParseError("Expect ';' after value.", token)))
        self.assertEqual("[line 2] Unterminated string.", str(GenericException("Unterminated string.", line=2)))
        self.assertEqual("boom", str(GenericException("boom")))

    def test_context_manager_reports_rulox_errors(self):
        with self.error_handler:
            raise EvaluationError("boom")
        self.assertIn("boom", self.file.getvalue())

    def test_context_manager_converts_recursion_error(self):
        with self.error_handler:
            raise RecursionError()
        self.assertIn("stack overflow", self.file.getvalue())

        self.error_handler.fatal = True
        with self.assertRaises(SystemExit) as ctx:
            with self.error_handler:
                raise RecursionError()
        self.assertEqual(70, ctx.exception.code)

    def test_context_manager_propagates_internal_errors(self):
        with self.assertRaises(ValueError):
            with self.error_handler:
                raise ValueError("bug")
        self.assertIn("[internal]", self.file.getvalue())

    def test_context_manager_lets_exit_through(self):
        with self.assertRaises(SystemExit):
            with self.error_handler:
                raise SystemExit(3)


if __name__ == '__main__':
    unittest.main()
