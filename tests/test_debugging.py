import asyncio
import unittest

from tinylang import Interpreter, Observer, Options, RecordingHost

from tests.helpers import parse_ok

PROGRAM = """function f() {
    print("in f")
}
pause()
f()
print("done")
"""

class DebugObserver(Observer):
    def __init__(self):
        self.pauses = []
        self.steps = []

    def on_pause(self, line, interpreter):
        self.pauses.append(line)

    def on_debug_step(self, node, interpreter):
        self.steps.append(node.line)

async def wait_for(condition, attempts=1000):
    for _ in range(attempts):
        if condition():
            return
        await asyncio.sleep(0)
    raise AssertionError("condition never became true")

class TestStop(unittest.IsolatedAsyncioTestCase):
    async def test_stop_ends_busy_loop(self):
        interp = Interpreter(RecordingHost(), options=Options(max_loop_iterations=10 ** 9))
        task = asyncio.create_task(interp.interpret(parse_ok("let i = 0\nwhile (true) { i = i + 1 }")))
        await asyncio.sleep(0.01)
        interp.stop()
        result = await task
        self.assertTrue(result.stopped)
        self.assertEqual(result.errors, [])
        self.assertGreater(interp.globals.get('i'), 0)

    async def test_stop_interrupts_sleep(self):
        host = RecordingHost()
        interp = Interpreter(host)
        task = asyncio.create_task(interp.interpret(parse_ok('sleep(60000)\nprint("late")')))
        await asyncio.sleep(0.01)
        interp.stop()
        result = await asyncio.wait_for(task, 5)
        self.assertTrue(result.stopped)
        self.assertEqual(host.lines, [])

    async def test_stop_while_paused(self):
        host = RecordingHost()
        observer = DebugObserver()
        interp = Interpreter(host, observer)
        task = asyncio.create_task(interp.interpret(parse_ok(PROGRAM)))
        await wait_for(lambda: observer.pauses)
        interp.stop()
        result = await task
        self.assertTrue(result.stopped)
        self.assertEqual(host.lines, [])

class TestPause(unittest.IsolatedAsyncioTestCase):
    async def test_pause_waits_for_resume(self):
        host = RecordingHost()
        observer = DebugObserver()
        interp = Interpreter(host, observer)
        task = asyncio.create_task(interp.interpret(parse_ok('print("a")\npause()\nprint("b")')))
        await wait_for(lambda: observer.pauses)
        self.assertEqual(observer.pauses, [2])
        self.assertTrue(interp.paused)
        self.assertEqual(host.lines, ["a"])
        interp.resume()
        result = await task
        self.assertFalse(result.stopped)
        self.assertEqual(host.lines, ["a", "b"])

    async def test_call_stack_visible_while_paused(self):
        interp = Interpreter(RecordingHost(), DebugObserver())
        source = "function outer(a) {\n    inner(a + 1)\n}\nfunction inner(b) {\n    pause()\n}\nouter(3)"
        task = asyncio.create_task(interp.interpret(parse_ok(source)))
        await wait_for(lambda: interp.paused)
        self.assertEqual(interp.call_depth, 2)
        self.assertEqual([frame.name for frame in interp.call_stack], ['outer', 'inner'])
        self.assertEqual([frame.line for frame in interp.call_stack], [7, 2])
        self.assertEqual(interp.call_stack[-1].environment.variables(), [('b', 4.0)])
        interp.resume()
        await task
        self.assertEqual(interp.call_stack, [])

class TestStepping(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        self.host = RecordingHost()
        self.observer = DebugObserver()

    def start(self, options=None):
        interp = Interpreter(self.host, self.observer, options)
        task = asyncio.create_task(interp.interpret(parse_ok(PROGRAM)))
        return interp, task

    async def test_step_into_enters_calls(self):
        interp, task = self.start()
        await wait_for(lambda: self.observer.pauses)
        interp.step_into()
        await wait_for(lambda: len(self.observer.steps) == 1)
        self.assertEqual(self.observer.steps, [5])
        interp.step_into()
        await wait_for(lambda: len(self.observer.steps) == 2)
        self.assertEqual(self.observer.steps, [5, 2])
        self.assertEqual(interp.call_depth, 1)
        interp.resume()
        await task
        self.assertEqual(self.host.lines, ["in f", "done"])

    async def test_step_over_skips_call_bodies(self):
        interp, task = self.start()
        await wait_for(lambda: self.observer.pauses)
        interp.step_over()
        await wait_for(lambda: len(self.observer.steps) == 1)
        interp.step_over()
        await wait_for(lambda: len(self.observer.steps) == 2)
        self.assertEqual(self.observer.steps, [5, 6])
        self.assertEqual(self.host.lines, ["in f"])
        interp.resume()
        await task
        self.assertEqual(self.host.lines, ["in f", "done"])

    async def test_step_uses_configured_mode(self):
        interp, task = self.start(Options(step_mode='over'))
        await wait_for(lambda: self.observer.pauses)
        interp.step()
        await wait_for(lambda: len(self.observer.steps) == 1)
        interp.step()
        await wait_for(lambda: len(self.observer.steps) == 2)
        self.assertEqual(self.observer.steps, [5, 6])
        interp.resume()
        await task

    async def test_step_delay_still_runs_to_completion(self):
        interp = Interpreter(self.host, options=Options(step_delay_ms=1))
        await interp.interpret(parse_ok('let a = 1\nprint(a + 1)'))
        self.assertEqual(self.host.lines, ["2"])

if __name__ == '__main__':
    unittest.main()
