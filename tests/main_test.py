import os
import subprocess
import sys
import tempfile
import unittest

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))


def rulox(*args, source=None, stdin=None):
    """Runs the rulox entry point in a child process. Returns (exit code, stdout)."""
    path = None
    if source is not None:
        fd, path = tempfile.mkstemp(suffix=".rulox")
        with os.fdopen(fd, "w", encoding="utf-8") as file:
            file.write(source)
        args = (path,) + args

    env = dict(os.environ, PYTHONIOENCODING="utf-8", NO_COLOR="1")
    try:
        proc = subprocess.run(
            [sys.executable, "-m", "rulox.main", *args],
            input=stdin,
            capture_output=True,
            encoding="utf-8",
            cwd=ROOT,
            env=env,
            timeout=60,
        )
    finally:
        if path is not None:
            os.remove(path)
    return proc.returncode, proc.stdout


class MainTestCase(unittest.TestCase):

    def test_runs_file(self):
        code, out = rulox(source="переменная a = 6;\nвывести a * 7;\nвывести \"готово\";\n")
        self.assertEqual(0, code)
        self.assertEqual(["42", "готово"], out.splitlines())

    def test_static_error_exit_code(self):
        code, out = rulox(source="вывести 1;\nвывести ;\n")
        self.assertEqual(65, code)
        self.assertIn("error: ", out)
        self.assertNotIn("1\n", out)  # nothing runs when the file doesn't compile

        code, __ = rulox(source="вернуть 1;")
        self.assertEqual(65, code)

    def test_evaluation_error_exit_code(self):
        code, out = rulox(source="вывести 1;\nвывести nope;\nвывести 2;\n")
        self.assertEqual(70, code)
        self.assertEqual("1", out.splitlines()[0])
        self.assertIn("Undefined variable 'nope'.", out)
        self.assertNotIn("\n2\n", out)

    def test_deep_recursion(self):
        source = "функция f(n) { если (n > 0) { вернуть 1 + f(n - 1); } вернуть 0; }\nвывести f(5000);\n"
        code, out = rulox(source=source)
        self.assertEqual(0, code, out)
        self.assertEqual(["5000"], out.splitlines())

    def test_stack_overflow(self):
        code, out = rulox(source="\nфункция f(n) { вернуть f(n + 1); }\nf(0);\n")
        self.assertEqual(70, code)
        self.assertIn(":2: ", out)
        self.assertIn("Stack overflow. at ')'", out)

    def test_missing_file(self):
        code, out = rulox("/nonexistent/prog.rulox")
        self.assertEqual(1, code)
        self.assertIn("could not be opened", out)

    def test_tokens(self):
        code, out = rulox("--tokens", source="переменная a = 1;")
        self.assertEqual(0, code)
        self.assertEqual(["VAR переменная", "IDENTIFIER a", "EQUAL =", "NUMBER 1 1.0", "SEMICOLON ;", "EOF"],
                         out.splitlines())

    def test_ast(self):
        code, out = rulox("--ast", source="переменная a = 1 + 2;\nвывести a;")
        self.assertEqual(0, code)
        self.assertEqual(["(var a (+ 1 2))", "(print a)"], out.splitlines())

    def test_dump_needs_file(self):
        code, __ = rulox("--ast")
        self.assertEqual(2, code)

    def test_shell(self):
        code, out = rulox(stdin="переменная a = 6;\nфункция f(x) {\nвернуть x * 7;\n}\nвывести f(a);\nвывести nope;\nвывести 1;\n")
        self.assertEqual(0, code)
        self.assertIn("42", out)
        self.assertIn("Undefined variable 'nope'.", out)
        self.assertIn("1\n", out)


if __name__ == '__main__':
    unittest.main()
