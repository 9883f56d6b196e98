import io
import os
import tempfile
import unittest
from contextlib import redirect_stderr, redirect_stdout

from tinylang.config import VERSION
from tinylang.parser import parse
from tinylang.runtime import RuntimeError
from tinylang.tiny import brace_depth, format_runtime_error, main, report_errors

class CliTestCase(unittest.TestCase):
    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()

    def tearDown(self):
        self.tmpdir.cleanup()

    def write(self, source: str) -> str:
        path = os.path.join(self.tmpdir.name, "program.tiny")
        with open(path, 'w') as f:
            f.write(source)
        return path

    def invoke(self, *args):
        """Run main(); returns (exit code, stdout, stderr)"""
        out, err = io.StringIO(), io.StringIO()
        code = 0
        with redirect_stdout(out), redirect_stderr(err):
            try:
                main(list(args))
            except SystemExit as e:
                code = e.code
        return code, out.getvalue(), err.getvalue()

class TestMain(CliTestCase):
    def test_version(self):
        code, out, _ = self.invoke('--version')
        self.assertEqual(code, 0)
        self.assertEqual(out.strip(), f"Tiny {VERSION}")

    def test_help(self):
        _, out, _ = self.invoke('--help')
        self.assertIn("Usage:", out)
        self.assertIn("--tokens", out)

    def test_unknown_option(self):
        code, _, err = self.invoke('--bogus')
        self.assertEqual(code, 1)
        self.assertIn("Unknown option: --bogus", err)

    def test_runs_file(self):
        path = self.write('let x = 2\nprint("x is " + x)\nprint([1, 2])\n')
        code, out, _ = self.invoke(path)
        self.assertEqual(code, 0)
        self.assertEqual(out.splitlines(), ["x is 2", "[1, 2]"])

    def test_missing_file(self):
        code, _, err = self.invoke(os.path.join(self.tmpdir.name, "nope.tiny"))
        self.assertEqual(code, 1)
        self.assertIn("File not found", err)

    def test_syntax_errors_block_execution(self):
        path = self.write('print("never")\nlet = 1\nlet y = $\n')
        code, out, err = self.invoke(path)
        self.assertEqual(code, 1)
        self.assertEqual(out, "")
        self.assertIn("Lex error at line 3, col 9: Invalid character '$'", err)
        self.assertIn("Parse error at line 2, col 5: Expected variable name after 'let'", err)

    def test_runtime_error_exit_status(self):
        path = self.write('print("start")\nprint(1 / 0)\n')
        code, out, err = self.invoke(path)
        self.assertEqual(code, 1)
        self.assertEqual(out.splitlines(), ["start"])
        self.assertIn("Runtime error at line 2: Division by zero", err)

    def test_tokens_table(self):
        path = self.write('let x = 1\n')
        code, out, _ = self.invoke('--tokens', path)
        self.assertEqual(code, 0)
        self.assertIn("KEYWORD", out)
        self.assertIn("'let'", out)
        self.assertIn("EOF", out)

    def test_ast_outline(self):
        path = self.write('function add(a, b) { return a + b }\n')
        code, out, _ = self.invoke('--ast', path)
        self.assertEqual(code, 0)
        lines = out.splitlines()
        self.assertEqual(lines[0], "Program  [line 1]")
        self.assertEqual(lines[1], "  FunctionDeclaration add(a, b)  [line 1]")
        self.assertIn("        BinaryExpression +  [line 1]", lines)

    def test_flag_needs_file(self):
        code, _, err = self.invoke('--ast')
        self.assertEqual(code, 1)
        self.assertIn("Missing file", err)

class TestHelpers(unittest.TestCase):
    def test_brace_depth(self):
        self.assertEqual(brace_depth("function f() {"), 1)
        self.assertEqual(brace_depth("if (a) { if (b) {\n}"), 1)
        self.assertEqual(brace_depth('print("{")'), 0)
        self.assertEqual(brace_depth("}"), -1)

    def test_report_errors(self):
        stream = io.StringIO()
        self.assertTrue(report_errors(parse("let = 1"), stream))
        self.assertIn("Parse error at line 1, col 5", stream.getvalue())
        self.assertFalse(report_errors(parse("let a = 1"), io.StringIO()))

    def test_format_runtime_error(self):
        self.assertEqual(format_runtime_error(RuntimeError("boom")), "Runtime error: boom")
        self.assertEqual(format_runtime_error(RuntimeError("boom", 3)), "Runtime error at line 3: boom")

if __name__ == '__main__':
    unittest.main()
