"""
Shared helpers for running Tiny source in tests
"""

import asyncio
from typing import List, Optional

from tinylang import Interpreter, Observer, Options, RecordingHost, parse

def parse_ok(source: str):
    result = parse(source)
    if not result.ok:
        messages = [str(e) for e in result.lex_errors] + [str(e) for e in result.errors]
        raise AssertionError(f"unexpected syntax errors: {messages}")
    return result.program

def run(source: str, host: Optional[RecordingHost] = None, options: Optional[Options] = None,
        observer: Optional[Observer] = None) -> Interpreter:
    """Run to completion on a fresh event loop"""
    interpreter = Interpreter(host or RecordingHost(), observer, options)
    asyncio.run(interpreter.interpret(parse_ok(source)))
    return interpreter

def lines(source: str, **kwargs) -> List[str]:
    """Printed values as print() renders them"""
    host = RecordingHost()
    run(source, host=host, **kwargs)
    return host.lines
