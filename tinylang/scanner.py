"""
Tiny Language - Step Scanner
Character-by-character state machine that explains how tokens are built
"""

from enum import IntEnum, auto
from dataclasses import dataclass
from typing import List, Optional

from .lexer import (
    Token, TokenType, KEYWORDS, TWO_CHAR_OPS, SINGLE_CHAR_OPS, PUNCTUATION,
    WHITESPACE_CHARS, is_digit, is_alpha, is_alnum,
)

class ScanState(IntEnum):
    IDLE = auto()
    IDENTIFIER = auto()
    NUMBER = auto()
    STRING = auto()
    OPERATOR = auto()
    WHITESPACE = auto()
    COMMENT = auto()

@dataclass(slots=True)
class ScanStep:
    """What one call to Scanner.step() did"""
    pos: int
    line: int
    column: int
    char: str
    state: ScanState
    buffer: str
    action: str = ''
    token: Optional[Token] = None
    done: bool = False

def char_display(ch: str) -> str:
    return {
        ' ': 'space', '\t': 'tab', '\n': 'newline', '\r': 'return', '\0': 'end',
    }.get(ch, ch)

class Scanner:
    """Exposes the lexing process one character at a time"""

    __slots__ = ('source', 'pos', 'line', 'col', 'state', 'buffer',
                 'start', 'start_line', 'start_col', 'tokens')

    def __init__(self, source: str):
        self.source = source
        self.pos = 0
        self.line = 1
        self.col = 1
        self.state = ScanState.IDLE
        self.buffer = ''
        self.start = 0
        self.start_line = 1
        self.start_col = 1
        self.tokens: List[Token] = []

    def peek(self, offset: int = 0) -> str:
        idx = self.pos + offset
        return self.source[idx] if idx < len(self.source) else '\0'

    def at_end(self) -> bool:
        return self.pos >= len(self.source)

    def consume(self, ch: str):
        self.buffer += ch
        self.pos += 1
        if ch == '\n':
            self.line += 1
            self.col = 1
        else:
            self.col += 1

    def begin(self, state: ScanState):
        self.start = self.pos
        self.start_line = self.line
        self.start_col = self.col
        self.buffer = ''
        self.state = state

    def emit(self, type: TokenType) -> Token:
        raw = self.buffer
        if type == TokenType.NUMBER:
            value = float(raw)
        elif type == TokenType.STRING:
            value = raw[1:-1]
        elif type == TokenType.IDENTIFIER and raw in KEYWORDS:
            type, value = TokenType.KEYWORD, raw
        else:
            value = raw
        token = Token(type, value, self.start_line, self.start_col, raw, self.start, self.pos)
        self.tokens.append(token)
        self.buffer = ''
        self.state = ScanState.IDLE
        return token

    def step(self) -> ScanStep:
        """Advance the state machine by one character (or one emit)"""
        ch = self.peek()
        result = ScanStep(self.pos, self.line, self.col, ch, self.state, self.buffer)

        if self.at_end():
            if self.state == ScanState.STRING:
                self.buffer = ''
                self.state = ScanState.IDLE
                result.action = "End of input inside string. Unterminated string."
            elif self.state != ScanState.IDLE:
                result.token = self.finish()
                result.action = f"End of input. Emit {result.token.type.name} {result.token.raw!r}"
            else:
                self.begin(ScanState.IDLE)
                eof = Token(TokenType.EOF, None, self.line, self.col, '', self.pos, self.pos)
                self.tokens.append(eof)
                result.token = eof
                result.action = "End of input. Emit EOF"
                result.done = True
            return result

        handler = {
            ScanState.IDLE: self.scan_idle,
            ScanState.IDENTIFIER: self.scan_identifier,
            ScanState.NUMBER: self.scan_number,
            ScanState.STRING: self.scan_string,
            ScanState.OPERATOR: self.scan_operator,
            ScanState.WHITESPACE: self.scan_whitespace,
            ScanState.COMMENT: self.scan_comment,
        }[self.state]
        result.action = handler(ch, result)
        return result

    def scan_idle(self, ch: str, result: ScanStep) -> str:
        shown = char_display(ch)

        if ch in WHITESPACE_CHARS:
            self.begin(ScanState.WHITESPACE)
            self.consume(ch)
            return f"'{shown}' is whitespace. Start building WHITESPACE token."

        if ch == '/' and self.peek(1) == '/':
            self.begin(ScanState.COMMENT)
            self.consume(ch)
            return "'/' followed by '/' starts a comment. Start building COMMENT token."

        if is_digit(ch):
            self.begin(ScanState.NUMBER)
            self.consume(ch)
            return f"'{ch}' is a digit. Start building NUMBER token."

        if ch == '"':
            self.begin(ScanState.STRING)
            self.consume(ch)
            return "'\"' opens a string. Start building STRING token."

        if is_alpha(ch):
            self.begin(ScanState.IDENTIFIER)
            self.consume(ch)
            return f"'{ch}' is a letter. Start building IDENTIFIER token."

        if ch in SINGLE_CHAR_OPS:
            self.begin(ScanState.OPERATOR)
            self.consume(ch)
            return f"'{ch}' is an operator character. Start building OPERATOR token."

        if ch in PUNCTUATION:
            self.begin(ScanState.IDLE)
            self.consume(ch)
            result.token = self.emit(TokenType.PUNCTUATION)
            return f"'{ch}' is punctuation. Emit PUNCTUATION {ch!r} immediately."

        self.begin(ScanState.IDLE)
        self.consume(ch)
        self.buffer = ''
        return f"'{shown}' is unknown. Skipping."

    def scan_identifier(self, ch: str, result: ScanStep) -> str:
        if is_alnum(ch):
            self.consume(ch)
            return f"'{ch}' is alphanumeric. Add to buffer: {self.buffer!r}"
        result.token = self.emit(TokenType.IDENTIFIER)
        return f"'{char_display(ch)}' ends the identifier. Emit {result.token.type.name} {result.token.raw!r}"

    def scan_number(self, ch: str, result: ScanStep) -> str:
        if is_digit(ch):
            self.consume(ch)
            return f"'{ch}' is a digit. Add to buffer: {self.buffer!r}"
        if ch == '.' and '.' not in self.buffer and is_digit(self.peek(1)):
            self.consume(ch)
            return f"'.' is a decimal point. Add to buffer: {self.buffer!r}"
        result.token = self.emit(TokenType.NUMBER)
        return f"'{char_display(ch)}' ends the number. Emit NUMBER {result.token.raw}"

    def scan_string(self, ch: str, result: ScanStep) -> str:
        if ch == '"':
            self.consume(ch)
            result.token = self.emit(TokenType.STRING)
            return f"'\"' closes the string. Emit STRING {result.token.value!r}"
        if ch == '\n':
            # Drop the partial string; the newline is scanned again from IDLE
            self.buffer = ''
            self.state = ScanState.IDLE
            return "Newline in string! Unterminated string error."
        self.consume(ch)
        return f"'{char_display(ch)}' is string content. Add to buffer."

    def scan_operator(self, ch: str, result: ScanStep) -> str:
        if self.buffer + ch in TWO_CHAR_OPS:
            self.consume(ch)
            result.token = self.emit(TokenType.OPERATOR)
            return f"'{ch}' completes two-char operator. Emit OPERATOR {result.token.raw!r}"
        result.token = self.emit(TokenType.OPERATOR)
        return f"'{char_display(ch)}' ends operator. Emit OPERATOR {result.token.raw!r}"

    def scan_whitespace(self, ch: str, result: ScanStep) -> str:
        if ch in WHITESPACE_CHARS:
            self.consume(ch)
            return f"'{char_display(ch)}' is whitespace. Add to buffer."
        result.token = self.emit(TokenType.WHITESPACE)
        return f"'{char_display(ch)}' ends whitespace. Emit WHITESPACE (skipped)."

    def scan_comment(self, ch: str, result: ScanStep) -> str:
        if ch == '\n':
            result.token = self.emit(TokenType.COMMENT)
            return f"Newline ends comment. Emit COMMENT {result.token.raw!r}"
        self.consume(ch)
        return f"'{char_display(ch)}' is comment content. Add to buffer."

    def finish(self) -> Optional[Token]:
        """Emit whatever token is being built at end of input"""
        kind = {
            ScanState.IDENTIFIER: TokenType.IDENTIFIER,
            ScanState.NUMBER: TokenType.NUMBER,
            ScanState.OPERATOR: TokenType.OPERATOR,
            ScanState.WHITESPACE: TokenType.WHITESPACE,
            ScanState.COMMENT: TokenType.COMMENT,
        }.get(self.state)
        return self.emit(kind) if kind is not None else None

    def run(self) -> List[Token]:
        """Step until EOF has been emitted"""
        while not self.step().done:
            pass
        return self.tokens
