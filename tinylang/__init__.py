"""
Tiny Language Package
"""

import logging

from .lexer import tokenize, Lexer, Token, TokenType, LexError
from .scanner import Scanner, ScanState, ScanStep
from .parser import parse, Parser, ParseError, ParseResult
from .runtime import RuntimeError, ExecutionStopped, Environment, format_value
from .config import Options, VERSION
from .host import Host, ConsoleHost, RecordingHost, Observer
from .interpreter import Interpreter, CallFrame, RunResult, run_source, execute
from .stdlib import STDLIB, get_stdlib

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = VERSION
__all__ = [
    "tokenize", "Lexer", "Token", "TokenType", "LexError",
    "Scanner", "ScanState", "ScanStep",
    "parse", "Parser", "ParseError", "ParseResult",
    "RuntimeError", "ExecutionStopped", "Environment", "format_value",
    "Options", "VERSION",
    "Host", "ConsoleHost", "RecordingHost", "Observer",
    "Interpreter", "CallFrame", "RunResult", "run_source", "execute",
    "STDLIB", "get_stdlib"
]
