import io
import unittest

from rulox.lang.error import ErrorHandler, ResolveError
from rulox.runtime.resolver import Resolver
from rulox.syntax.parser import Parser
from rulox.syntax.scanner import Scanner


def resolve(source):
    error_handler = ErrorHandler(fatal=False, file=io.StringIO())
    tokens = Scanner(source, error_handler).scan_tokens()
    statements = Parser(tokens, error_handler).parse()
    assert not error_handler.reported, [str(error) for error in error_handler.reported]
    distances = Resolver(error_handler).resolve(statements)
    return statements, distances, error_handler.reported


class DistanceTestCase(unittest.TestCase):

    def test_globals_are_not_recorded(self):
        statements, distances, errors = resolve("переменная a = 1; вывести a; a = 2;")
        self.assertEqual({}, distances)
        self.assertFalse(errors)

    def test_block_distances(self):
        statements, distances, __ = resolve("{ переменная a = 1; { вывести a; a = 2; } }")
        inner = statements[0].statements[1]
        read, write = inner.statements[0].expression, inner.statements[1].expression
        self.assertEqual(1, distances[read])
        self.assertEqual(1, distances[write])

    def test_shadowing_picks_innermost(self):
        statements, distances, __ = resolve("{ переменная a = 1; { переменная a = 2; вывести a; } }")
        read = statements[0].statements[1].statements[1].expression
        self.assertEqual(0, distances[read])

    def test_closure_sees_declaration_scope(self):
        source = ("переменная a = \"global\";\n"
                  "{\n"
                  "  функция show() { вывести a; }\n"
                  "  show();\n"
                  "  переменная a = \"block\";\n"
                  "  show();\n"
                  "}")
        statements, distances, errors = resolve(source)
        read = statements[1].statements[0].body[0].expression
        self.assertNotIn(read, distances)  # still the global, despite the later local
        self.assertFalse(errors)

    def test_function_parameters_and_recursion(self):
        statements, distances, __ = resolve("{ функция f(n) { вернуть f(n); } }")
        call = statements[0].statements[0].body[0].value
        self.assertEqual(1, distances[call.callee])
        self.assertEqual(0, distances[call.arguments[0]])

    def test_this_and_super(self):
        source = "класс A { m() {} }\nкласс B < A { m() { вернуть супер.m(это); } }"
        statements, distances, errors = resolve(source)
        call = statements[1].methods[0].body[0].value
        self.assertEqual(2, distances[call.callee])
        self.assertEqual(1, distances[call.arguments[0]])
        self.assertFalse(errors)

    def test_redeclaration_is_allowed(self):
        __, __, errors = resolve("{ переменная a = 1; переменная a = 2; }")
        self.assertFalse(errors)


class ResolveErrorTestCase(unittest.TestCase):

    def test_errors(self):
        should_fail = {
            "{ переменная a = a; }": "Can't read local variable in its own initializer.",
            "вернуть 1;": "Can't return from top-level code.",
            "вывести это;": "Can't use 'это' outside of a class.",
            "функция f() { вернуть это; }": "Can't use 'это' outside of a class.",
            "вывести супер.m;": "Can't use 'супер' outside of a class.",
            "класс A { m() { супер.m(); } }": "Can't use 'супер' in a class with no superclass.",
            "класс A < A {}": "A class can't inherit from itself.",
        }
        for case, message in should_fail.items():
            __, __, errors = resolve(case)
            self.assertEqual([message], [error.message for error in errors], case)
            self.assertIsInstance(errors[0], ResolveError, case)

    def test_global_self_reference_is_allowed(self):
        __, __, errors = resolve("переменная a = a;")
        self.assertFalse(errors)

    def test_return_inside_method_and_initializer(self):
        __, __, errors = resolve("класс A { init() { вернуть; } m() { вернуть 1; } }")
        self.assertFalse(errors)

    def test_reports_every_error(self):
        __, __, errors = resolve("вернуть 1;\nвывести это;\n{ переменная b = b; }")
        self.assertEqual([1, 2, 3], [error.line for error in errors])


if __name__ == '__main__':
    unittest.main()
