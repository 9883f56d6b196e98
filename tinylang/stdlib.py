"""
Tiny Language - Standard Library
Built-in functions; each validates its arguments before acting
"""

import math
import re
from typing import Any, Awaitable, Callable, Dict, List

from .config import COLORS, SLOW_DELAY_MS, SLOWER_DELAY_MS
from .runtime import RuntimeError, format_value, is_number, is_integer

HEX_COLOR = re.compile(r'^#(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{6})$')
NUMBER_TEXT = re.compile(r'^\s*[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?\s*$')

def expect_args(name: str, args: List[Any], count: int):
    if len(args) == count:
        return
    if count == 0:
        raise RuntimeError(f"{name}() takes no arguments")
    if count == 1:
        raise RuntimeError(f"{name}() requires 1 argument")
    raise RuntimeError(f"{name}() requires {count} arguments")

def expect_numbers(name: str, args: List[Any], count: int) -> List[float]:
    expect_args(name, args, count)
    for arg in args:
        if not is_number(arg):
            raise RuntimeError(f"{name}() requires {count} number arguments")
    return [float(a) for a in args]

# Output and conversion
async def print_fn(interp, args):
    expect_args("print", args, 1)
    interp.emit(args[0])

async def num(interp, args):
    expect_args("num", args, 1)
    value = args[0]
    if is_number(value):
        return value
    if isinstance(value, str) and NUMBER_TEXT.match(value):
        number = float(value)
        if math.isfinite(number):
            return number
    raise RuntimeError(f"Cannot convert '{format_value(value)}' to a number")

async def len_fn(interp, args):
    expect_args("len", args, 1)
    if not isinstance(args[0], (list, str)):
        raise RuntimeError("len() requires an array or string")
    return float(len(args[0]))

async def random_fn(interp, args):
    if len(args) != 2:
        raise RuntimeError("random() requires 2 arguments")
    low, high = args
    if not (is_integer(low) and is_integer(high)):
        raise RuntimeError("random() requires integer arguments")
    if low > high:
        raise RuntimeError("random() min must be <= max")
    return float(interp.rng.randint(int(low), int(high)))

# Interactive input
async def input_fn(interp, args):
    expect_args("input", args, 0)
    try:
        return str(await interp.host.input_line())
    except (EOFError, NotImplementedError) as e:
        raise RuntimeError(f"input() is not available: {e}") from e

async def key(interp, args):
    expect_args("key", args, 0)
    try:
        return str(await interp.host.read_key())
    except (EOFError, NotImplementedError) as e:
        raise RuntimeError(f"key() is not available: {e}") from e

async def pressed(interp, args):
    expect_args("pressed", args, 1)
    if not isinstance(args[0], str):
        raise RuntimeError("pressed() requires a string")
    return bool(interp.host.is_pressed(args[0]))

# Timing and debugging
async def sleep(interp, args):
    if len(args) != 1 or not is_number(args[0]) or args[0] < 0:
        raise RuntimeError("sleep() requires a positive number")
    await interp.suspend(args[0] / 1000)

async def pause(interp, args):
    expect_args("pause", args, 0)
    await interp.pause()

async def slow(interp, args):
    expect_args("slow", args, 0)
    interp.step_delay_ms = SLOW_DELAY_MS

async def slower(interp, args):
    expect_args("slower", args, 0)
    interp.step_delay_ms = SLOWER_DELAY_MS

async def fast(interp, args):
    expect_args("fast", args, 0)
    interp.step_delay_ms = 0

async def looplimit(interp, args):
    expect_args("looplimit", args, 1)
    limit = args[0]
    if not is_integer(limit):
        raise RuntimeError("looplimit() requires an integer")
    if limit <= 0:
        raise RuntimeError("looplimit() requires a positive number")
    interp.max_loop_iterations = int(limit)

# Graphics
async def clear(interp, args):
    expect_args("clear", args, 0)
    interp.host.clear()

async def color(interp, args):
    expect_args("color", args, 1)
    name = args[0]
    if not isinstance(name, str):
        raise RuntimeError("color() requires a string")
    if name.lower() in COLORS:
        interp.host.color(name.lower(), COLORS[name.lower()])
    elif HEX_COLOR.match(name):
        interp.host.color(name, name.lower())
    else:
        raise RuntimeError(f"Unknown color: {name}")

async def rect(interp, args):
    interp.host.rect(*expect_numbers("rect", args, 4))

async def circle(interp, args):
    interp.host.circle(*expect_numbers("circle", args, 3))

async def line(interp, args):
    interp.host.line(*expect_numbers("line", args, 4))

async def triangle(interp, args):
    interp.host.triangle(*expect_numbers("triangle", args, 6))

async def text(interp, args):
    expect_args("text", args, 3)
    x, y = expect_numbers("text", args[:2], 2)
    interp.host.text(x, y, format_value(args[2]))

async def fill(interp, args):
    expect_args("fill", args, 0)
    interp.host.fill()

async def stroke(interp, args):
    expect_args("stroke", args, 0)
    interp.host.stroke()

async def fullscreen(interp, args):
    expect_args("fullscreen", args, 0)
    interp.host.fullscreen()

async def width(interp, args):
    expect_args("width", args, 0)
    return float(interp.host.width())

async def height(interp, args):
    expect_args("height", args, 0)
    return float(interp.host.height())

Builtin = Callable[[Any, List[Any]], Awaitable[Any]]

# Standard library registry
STDLIB: Dict[str, Builtin] = {
    # Output / conversion
    "print": print_fn,
    "num": num,
    "len": len_fn,
    "random": random_fn,

    # Input
    "input": input_fn,
    "key": key,
    "pressed": pressed,

    # Timing / debugging
    "sleep": sleep,
    "pause": pause,
    "slow": slow,
    "slower": slower,
    "fast": fast,
    "looplimit": looplimit,

    # Graphics
    "clear": clear,
    "color": color,
    "rect": rect,
    "circle": circle,
    "line": line,
    "triangle": triangle,
    "text": text,
    "fill": fill,
    "stroke": stroke,
    "fullscreen": fullscreen,
    "width": width,
    "height": height,
}

def get_stdlib() -> Dict[str, Builtin]:
    """Get copy of standard library"""
    return STDLIB.copy()
