#!/usr/bin/env python3
"""
Tiny Language - Main Entry Point
Run Tiny programs from files or an interactive REPL
"""

import asyncio
import logging
import sys
from typing import List, Optional, Set

from .config import Options, VERSION
from .formatting import format_token_table, format_ast
from .host import ConsoleHost, Observer
from .interpreter import Interpreter
from .lexer import tokenize, TokenType
from .parser import parse, ParseResult
from .runtime import RuntimeError

logger = logging.getLogger(__name__)

class ConsoleDebugger(Observer):
    """Answers pause() and debug steps from the terminal"""

    def __init__(self):
        self.tasks: Set[asyncio.Task] = set()

    def on_pause(self, line, interpreter):
        self._ask(f"Paused at line {line}", interpreter)

    def on_debug_step(self, node, interpreter):
        self._ask(f"Line {node.line}: {node.kind}", interpreter)

    def _ask(self, message: str, interpreter: Interpreter):
        task = asyncio.get_running_loop().create_task(self.prompt(message, interpreter))
        self.tasks.add(task)
        task.add_done_callback(self.tasks.discard)

    async def prompt(self, message: str, interpreter: Interpreter):
        print(f"{message} [Enter=continue, s=step into, n=step over, q=stop]",
              file=sys.stderr, flush=True)
        answer = (await asyncio.to_thread(sys.stdin.readline)).strip().lower()
        if answer == 's':
            interpreter.step_into()
        elif answer == 'n':
            interpreter.step_over()
        elif answer == 'q':
            interpreter.stop()
        else:
            interpreter.resume()

def read_source(filepath: str) -> str:
    try:
        with open(filepath, 'r') as f:
            return f.read()
    except FileNotFoundError:
        print(f"Error: File not found: {filepath}", file=sys.stderr)
        sys.exit(1)

def report_errors(result: ParseResult, stream=None) -> bool:
    """Print lex and parse errors; True if there were any"""
    stream = stream or sys.stderr
    for error in result.lex_errors:
        print(error, file=stream)
    for error in result.errors:
        print(f"Parse error at line {error.line}, col {error.column}: {error.message}", file=stream)
    return not result.ok

def format_runtime_error(error: RuntimeError) -> str:
    if error.line is None:
        return f"Runtime error: {error.message}"
    return str(error)

def load_options() -> Options:
    try:
        return Options.from_env()
    except ValueError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        sys.exit(1)

def run_file(filepath: str):
    """Execute a Tiny source file"""
    result = parse(read_source(filepath))
    if report_errors(result):
        sys.exit(1)

    interpreter = Interpreter(ConsoleHost(), ConsoleDebugger(), load_options())
    try:
        asyncio.run(interpreter.interpret(result.program))
    except RuntimeError as e:
        print(format_runtime_error(e), file=sys.stderr)
        sys.exit(1)
    except KeyboardInterrupt:
        print("\nInterrupted", file=sys.stderr)
        sys.exit(130)

def brace_depth(source: str) -> int:
    """Unclosed '{' count, ignoring braces inside strings and comments"""
    tokens, _ = tokenize(source)
    depth = 0
    for token in tokens:
        if token.type == TokenType.PUNCTUATION:
            if token.value == '{':
                depth += 1
            elif token.value == '}':
                depth -= 1
    return depth

def run_repl():
    """Interactive REPL; bindings persist between entries"""
    print(f"Tiny {VERSION} - Type 'exit' or Ctrl+D to quit")

    interpreter = Interpreter(ConsoleHost(), ConsoleDebugger(), load_options())
    buffer: List[str] = []

    while True:
        try:
            prompt = "... " if buffer else ">>> "
            line = input(prompt)

            if not buffer and line.strip() == "exit":
                break

            buffer.append(line)
            source = '\n'.join(buffer)
            if brace_depth(source) > 0:
                continue
            buffer = []

            if not source.strip():
                continue

            result = parse(source)
            if report_errors(result, sys.stdout):
                continue

            try:
                asyncio.run(interpreter.interpret(result.program))
            except RuntimeError as e:
                print(format_runtime_error(e))

        except EOFError:
            print()
            break
        except KeyboardInterrupt:
            print("\nInterrupted")
            buffer = []

def show_tokens(filepath: str):
    tokens, errors = tokenize(read_source(filepath))
    print(format_token_table(tokens))
    for error in errors:
        print(error, file=sys.stderr)
    if errors:
        sys.exit(1)

def show_ast(filepath: str):
    result = parse(read_source(filepath))
    if report_errors(result):
        sys.exit(1)
    print(format_ast(result.program))

def show_help():
    print(f"""Tiny {VERSION} - A small teaching language

Usage:
  tiny [file.tiny]            Run a source file
  tiny                        Start interactive REPL
  tiny --tokens FILE          Print the token table
  tiny --ast FILE             Print the syntax tree
  tiny --verbose ...          Log interpreter activity to stderr
  tiny --help                 Show this help
  tiny --version              Show version

Environment:
  TINY_STEP_DELAY             Delay per statement in ms (default 0)
  TINY_STEP_MODE              Debug step mode: into | over
  TINY_LOOP_LIMIT             While-loop iteration cap (default 10000)
  TINY_SEED                   Seed for random()

Examples:
  tiny hello.tiny             Run hello.tiny
  tiny                        Start REPL
""")

def main(argv: Optional[List[str]] = None):
    args = list(sys.argv[1:] if argv is None else argv)

    if '--verbose' in args:
        args.remove('--verbose')
        logging.basicConfig(level=logging.DEBUG, format="%(name)s %(levelname)s: %(message)s")
        logger.debug("verbose logging enabled")

    if not args:
        run_repl()
    elif args[0] in ('--help', '-h'):
        show_help()
    elif args[0] in ('--version', '-v'):
        print(f"Tiny {VERSION}")
    elif args[0] in ('--tokens', '--ast'):
        if len(args) < 2:
            print(f"Missing file for {args[0]}", file=sys.stderr)
            sys.exit(1)
        if args[0] == '--tokens':
            show_tokens(args[1])
        else:
            show_ast(args[1])
    elif args[0].startswith('-'):
        print(f"Unknown option: {args[0]}", file=sys.stderr)
        sys.exit(1)
    else:
        run_file(args[0])

if __name__ == "__main__":
    main()
