"""
Tiny Language - Host Interfaces
Callbacks the interpreter invokes for output, input, graphics and observation
"""

import asyncio
import logging
import sys
from typing import Any, Iterable, List, Optional, Set, Tuple

from .config import CANVAS_WIDTH, CANVAS_HEIGHT
from .runtime import format_value

logger = logging.getLogger(__name__)

class Host:
    """Base host: silent output, no input, graphics discarded.

    Subclasses override what they support. Graphics calls receive arguments
    already validated by the interpreter (numbers as floats, colors as hex).
    """

    def print(self, value: Any):
        pass

    async def input_line(self) -> str:
        raise NotImplementedError("input() is not available in this host")

    async def read_key(self) -> str:
        raise NotImplementedError("key() is not available in this host")

    def is_pressed(self, key: str) -> bool:
        return False

    # Graphics
    def clear(self):
        pass

    def color(self, name: str, hex_value: str):
        pass

    def rect(self, x: float, y: float, w: float, h: float):
        pass

    def circle(self, x: float, y: float, r: float):
        pass

    def line(self, x1: float, y1: float, x2: float, y2: float):
        pass

    def text(self, x: float, y: float, value: str):
        pass

    def triangle(self, x1: float, y1: float, x2: float, y2: float, x3: float, y3: float):
        pass

    def fill(self):
        pass

    def stroke(self):
        pass

    def fullscreen(self):
        pass

    def width(self) -> float:
        return CANVAS_WIDTH

    def height(self) -> float:
        return CANVAS_HEIGHT

class ConsoleHost(Host):
    """stdin/stdout host used by the command line"""

    def __init__(self, stream=None):
        self.stream = stream or sys.stdout

    def print(self, value: Any):
        print(format_value(value), file=self.stream, flush=True)

    async def input_line(self) -> str:
        line = await asyncio.to_thread(sys.stdin.readline)
        if not line:
            raise EOFError("end of input")
        return line.rstrip('\n')

    async def read_key(self) -> str:
        line = await self.input_line()
        return line[:1]

    def _draw(self, op: str, *args):
        logger.debug("graphics %s%r", op, args)

    def clear(self):
        self._draw('clear')

    def color(self, name, hex_value):
        self._draw('color', name, hex_value)

    def rect(self, x, y, w, h):
        self._draw('rect', x, y, w, h)

    def circle(self, x, y, r):
        self._draw('circle', x, y, r)

    def line(self, x1, y1, x2, y2):
        self._draw('line', x1, y1, x2, y2)

    def text(self, x, y, value):
        self._draw('text', x, y, value)

    def triangle(self, x1, y1, x2, y2, x3, y3):
        self._draw('triangle', x1, y1, x2, y2, x3, y3)

    def fill(self):
        self._draw('fill')

    def stroke(self):
        self._draw('stroke')

    def fullscreen(self):
        self._draw('fullscreen')

class RecordingHost(Host):
    """Captures everything; scripted input for tests and embedding"""

    def __init__(self, inputs: Iterable[str] = (), keys: Iterable[str] = (),
                 pressed: Optional[Set[str]] = None, size: Tuple[float, float] = (CANVAS_WIDTH, CANVAS_HEIGHT)):
        self.output: List[Any] = []
        self.draws: List[Tuple] = []
        self.inputs = list(inputs)
        self.keys = list(keys)
        self.pressed = set(pressed or ())
        self.size = size

    @property
    def lines(self) -> List[str]:
        return [format_value(v) for v in self.output]

    def print(self, value):
        self.output.append(value)

    async def input_line(self) -> str:
        if not self.inputs:
            raise EOFError("no scripted input left")
        return self.inputs.pop(0)

    async def read_key(self) -> str:
        if not self.keys:
            raise EOFError("no scripted key left")
        return self.keys.pop(0)

    def is_pressed(self, key):
        return key in self.pressed

    def clear(self):
        self.draws.append(('clear',))

    def color(self, name, hex_value):
        self.draws.append(('color', name, hex_value))

    def rect(self, x, y, w, h):
        self.draws.append(('rect', x, y, w, h))

    def circle(self, x, y, r):
        self.draws.append(('circle', x, y, r))

    def line(self, x1, y1, x2, y2):
        self.draws.append(('line', x1, y1, x2, y2))

    def text(self, x, y, value):
        self.draws.append(('text', x, y, value))

    def triangle(self, x1, y1, x2, y2, x3, y3):
        self.draws.append(('triangle', x1, y1, x2, y2, x3, y3))

    def fill(self):
        self.draws.append(('fill',))

    def stroke(self):
        self.draws.append(('stroke',))

    def fullscreen(self):
        self.draws.append(('fullscreen',))

    def width(self):
        return self.size[0]

    def height(self):
        return self.size[1]

class Observer:
    """Execution hooks for highlighting, memory views and debuggers.

    Every method is optional; the interpreter calls them synchronously at
    node entry/exit, on binding changes, around calls, and when paused.
    """

    def on_node_enter(self, node):
        pass

    def on_node_exit(self, node, result):
        pass

    def on_variable_change(self, name: str, value: Any, kind: str, environment):
        """kind is 'define', 'assign' or 'update'"""

    def on_call_start(self, frame, args: List[Any]):
        pass

    def on_call_end(self, frame):
        pass

    def on_pause(self, line: int, interpreter):
        pass

    def on_debug_step(self, node, interpreter):
        pass
