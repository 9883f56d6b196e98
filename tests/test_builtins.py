import unittest

from tinylang import Host, Options, RecordingHost, RuntimeError
from tinylang.config import SLOW_DELAY_MS, SLOWER_DELAY_MS
from tinylang.stdlib import STDLIB, get_stdlib

from tests.helpers import lines, run

class TestConversion(unittest.TestCase):
    def test_num(self):
        self.assertEqual(lines('print(num("42") + 1)\nprint(num(" 2.5 "))\nprint(num(7))'), ["43", "2.5", "7"])

    def test_num_accepts_signs_and_exponents(self):
        self.assertEqual(lines('print(num("1e5"))\nprint(num("+3"))\nprint(num("-2.5E-1"))'), ["100000", "3", "-0.25"])

    def test_num_rejects_text(self):
        with self.assertRaises(RuntimeError) as cm:
            run('num("hello")')
        self.assertEqual(cm.exception.message, "Cannot convert 'hello' to a number")

    def test_num_rejects_non_finite(self):
        for text in ("inf", "nan", "1e999", "1_000"):
            with self.subTest(text=text):
                with self.assertRaises(RuntimeError):
                    run(f'num("{text}")')

    def test_len(self):
        self.assertEqual(lines('print(len([1, 2, 3]))\nprint(len("abcd"))'), ["3", "4"])
        with self.assertRaises(RuntimeError) as cm:
            run('len(5)')
        self.assertEqual(cm.exception.message, "len() requires an array or string")

    def test_print_arity(self):
        with self.assertRaises(RuntimeError) as cm:
            run('print(1, 2)')
        self.assertEqual(cm.exception.message, "print() requires 1 argument")

class TestRandom(unittest.TestCase):
    def test_inclusive_range(self):
        interp = run("let r = random(3, 5)", options=Options(seed=1))
        r = interp.globals.get('r')
        self.assertIn(r, (3.0, 4.0, 5.0))

    def test_seed_is_reproducible(self):
        source = "print(random(1, 1000))\nprint(random(1, 1000))"
        self.assertEqual(lines(source, options=Options(seed=7)), lines(source, options=Options(seed=7)))

    def test_equal_bounds(self):
        self.assertEqual(lines("print(random(4, 4))"), ["4"])

    def test_errors(self):
        cases = {
            'random(1)': "random() requires 2 arguments",
            'random(1.5, 3)': "random() requires integer arguments",
            'random("a", 3)': "random() requires integer arguments",
            'random(5, 1)': "random() min must be <= max",
        }
        for source, message in cases.items():
            with self.subTest(source=source):
                with self.assertRaises(RuntimeError) as cm:
                    run(source)
                self.assertEqual(cm.exception.message, message)

class TestInput(unittest.TestCase):
    def test_input_and_key(self):
        host = RecordingHost(inputs=["Ada"], keys=["w"])
        run('let name = input()\nprint("hi " + name)\nprint(key())', host=host)
        self.assertEqual(host.lines, ["hi Ada", "w"])

    def test_input_is_a_string(self):
        host = RecordingHost(inputs=["12"])
        run('print(num(input()) + 1)', host=host)
        self.assertEqual(host.lines, ["13"])

    def test_pressed(self):
        host = RecordingHost(pressed={"ArrowUp"})
        run('print(pressed("ArrowUp"))\nprint(pressed("ArrowDown"))', host=host)
        self.assertEqual(host.lines, ["true", "false"])
        with self.assertRaises(RuntimeError) as cm:
            run('pressed(1)')
        self.assertEqual(cm.exception.message, "pressed() requires a string")

    def test_exhausted_input_is_a_runtime_error(self):
        with self.assertRaises(RuntimeError) as cm:
            run('let x = input()', host=RecordingHost())
        self.assertTrue(cm.exception.message.startswith("input() is not available"))
        self.assertEqual(cm.exception.line, 1)

    def test_host_without_keyboard(self):
        with self.assertRaises(RuntimeError) as cm:
            run('print(1)\nlet k = key()', host=Host())
        self.assertTrue(cm.exception.message.startswith("key() is not available"))
        self.assertEqual(cm.exception.line, 2)

class TestTiming(unittest.TestCase):
    def test_sleep(self):
        self.assertEqual(lines('sleep(1)\nprint("awake")'), ["awake"])

    def test_sleep_rejects_bad_values(self):
        for source in ('sleep(-100)', 'sleep("fast")', 'sleep()'):
            with self.subTest(source=source):
                with self.assertRaises(RuntimeError) as cm:
                    run(source)
                self.assertEqual(cm.exception.message, "sleep() requires a positive number")

    def test_speed_presets(self):
        interp = run("slow()")
        self.assertEqual(interp.step_delay_ms, SLOW_DELAY_MS)
        interp = run("slower()")
        self.assertEqual(interp.step_delay_ms, SLOWER_DELAY_MS)
        interp = run("fast()", options=Options(step_delay_ms=1))
        self.assertEqual(interp.step_delay_ms, 0)

    def test_looplimit_errors(self):
        cases = {
            'looplimit()': "looplimit() requires 1 argument",
            'looplimit("hello")': "looplimit() requires an integer",
            'looplimit(2.5)': "looplimit() requires an integer",
            'looplimit(-5)': "looplimit() requires a positive number",
        }
        for source, message in cases.items():
            with self.subTest(source=source):
                with self.assertRaises(RuntimeError) as cm:
                    run(source)
                self.assertEqual(cm.exception.message, message)

class TestGraphics(unittest.TestCase):
    def test_draw_calls_reach_host(self):
        host = RecordingHost()
        run('clear()\ncolor("red")\nrect(10, 20, 30, 40)\ncircle(5, 5, 2)\n'
            'line(0, 0, 1, 1)\ntriangle(0, 0, 1, 0, 0, 1)\ntext(3, 4, 42)\nfill()\nstroke()\nfullscreen()',
            host=host)
        self.assertEqual(host.draws, [
            ('clear',),
            ('color', 'red', '#ff0000'),
            ('rect', 10.0, 20.0, 30.0, 40.0),
            ('circle', 5.0, 5.0, 2.0),
            ('line', 0.0, 0.0, 1.0, 1.0),
            ('triangle', 0.0, 0.0, 1.0, 0.0, 0.0, 1.0),
            ('text', 3.0, 4.0, '42'),
            ('fill',),
            ('stroke',),
            ('fullscreen',),
        ])

    def test_hex_and_case_insensitive_colors(self):
        host = RecordingHost()
        run('color("#0F0")\ncolor("Lime")', host=host)
        self.assertEqual(host.draws, [('color', '#0F0', '#0f0'), ('color', 'lime', '#00ff00')])

    def test_canvas_size(self):
        host = RecordingHost(size=(640, 480))
        run('print(width())\nprint(height())', host=host)
        self.assertEqual(host.lines, ["640", "480"])
        self.assertEqual(lines('print(width() + "x" + height())'), ["400x300"])

    def test_graphics_errors(self):
        cases = {
            'color("mauve")': "Unknown color: mauve",
            'rect(1, 2, 3)': "rect() requires 4 arguments",
            'circle(1, "2", 3)': "circle() requires 3 number arguments",
            'clear(1)': "clear() takes no arguments",
        }
        for source, message in cases.items():
            with self.subTest(source=source):
                with self.assertRaises(RuntimeError) as cm:
                    run(source)
                self.assertEqual(cm.exception.message, message)

class TestRegistry(unittest.TestCase):
    def test_registry_names(self):
        for name in ('print', 'num', 'random', 'input', 'key', 'sleep', 'pressed', 'clear', 'color',
                     'rect', 'circle', 'line', 'text', 'triangle', 'fill', 'stroke', 'fullscreen',
                     'width', 'height', 'pause', 'slow', 'slower', 'fast', 'looplimit', 'len'):
            self.assertIn(name, STDLIB)

    def test_get_stdlib_returns_copy(self):
        library = get_stdlib()
        library.pop('print')
        self.assertIn('print', STDLIB)

if __name__ == '__main__':
    unittest.main()
