#!/usr/bin/env python3
"""
Tiny Benchmark Suite - Interpreter throughput
"""

import asyncio
import time

from tinylang import Options, RecordingHost, run_source

# Loops are capped by the interpreter; lift the cap for timing runs
OPTIONS = Options(max_loop_iterations=10_000_000)

def now_ms():
    return time.perf_counter() * 1000

def run(source: str):
    host = RecordingHost()
    result = asyncio.run(run_source(source, host, options=OPTIONS))
    if result.errors:
        raise SystemExit("\n".join(result.errors))
    return host.lines[-1] if host.lines else ""

def timed(label: str, source: str):
    start = now_ms()
    shown = run(source)
    end = now_ms()
    print(f"{label:<26}{end - start:8.2f} ms  ({shown})")

# 1. Empty loop
EMPTY_LOOP = """
let i = 0
while (i < 100000) { i = i + 1 }
print("i=" + i)
"""

# 2. Function call cost
FUNCTION_CALL = """
function f(x) { return x + 1 }
let x = 0
let i = 0
while (i < 20000) { x = f(x) i = i + 1 }
print("x=" + x)
"""

# 3. Recursion
RECURSION = """
function fib(n) {
    if (n < 2) { return n }
    return fib(n - 1) + fib(n - 2)
}
print("fib=" + fib(16))
"""

# 4. Array fill and read
ARRAY_FILL = """
let arr = []
let i = 0
while (i < 20000) { arr[i] = i * 2 i = i + 1 }
let s = 0
i = 0
while (i < arr.length()) { s = s + arr[i] i = i + 1 }
print("sum=" + s)
"""

# 5. String concatenation
STRING_BUILD = """
let s = ""
let i = 0
while (i < 5000) { s = s + "a" i = i + 1 }
print("len=" + s.length())
"""

# 6. Method calls
METHOD_CALLS = """
class Counter {
    count
    tick() { this.count = this.count + 1 }
}
let c = new Counter(0)
let i = 0
while (i < 20000) { c.tick() i = i + 1 }
print("count=" + c.count)
"""

if __name__ == "__main__":
    print("=== Tiny Benchmark Suite ===\n")

    timed("1. Empty loop (1e5):", EMPTY_LOOP)
    timed("2. Function call (2e4):", FUNCTION_CALL)
    timed("3. Recursion fib(16):", RECURSION)
    timed("4. Array fill (2e4):", ARRAY_FILL)
    timed("5. String build (5e3):", STRING_BUILD)
    timed("6. Method calls (2e4):", METHOD_CALLS)

    print("\n=== Done ===")
