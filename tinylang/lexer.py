"""
Tiny Language - Lexer/Tokenizer
Single-pass tokenization that keeps whitespace and comments for visualization
"""

from enum import IntEnum, auto
from dataclasses import dataclass
from typing import List, Optional, Tuple

class TokenType(IntEnum):
    NUMBER = auto()
    STRING = auto()
    IDENTIFIER = auto()
    KEYWORD = auto()
    OPERATOR = auto()
    PUNCTUATION = auto()
    COMMENT = auto()
    WHITESPACE = auto()
    EOF = auto()

KEYWORDS = frozenset({
    'let', 'if', 'else', 'while', 'function',
    'return', 'true', 'false', 'stop',
    'and', 'or', 'not', 'equals',
    'class', 'new', 'this',
})

# Checked before the single-character fallback
TWO_CHAR_OPS = frozenset({'<=', '>='})

SINGLE_CHAR_OPS = frozenset('+-*/%=<>')

PUNCTUATION = frozenset('(){},[].')

WHITESPACE_CHARS = ' \t\r\n'

@dataclass(frozen=True, slots=True)
class Token:
    type: TokenType
    value: str | float | None
    line: int
    column: int
    raw: str
    start: int
    end: int

    def is_(self, type: TokenType, value=None) -> bool:
        """Check type and, optionally, value"""
        if self.type != type:
            return False
        return value is None or self.value == value

    def __repr__(self):
        return f"Token({self.type.name}, {self.value!r}, {self.line}:{self.column})"

@dataclass(frozen=True, slots=True)
class LexError:
    message: str
    line: int
    column: int

    def __str__(self):
        return f"Lex error at line {self.line}, col {self.column}: {self.message}"

def is_digit(ch: str) -> bool:
    return '0' <= ch <= '9'

def is_alpha(ch: str) -> bool:
    return ('a' <= ch <= 'z') or ('A' <= ch <= 'Z') or ch == '_'

def is_alnum(ch: str) -> bool:
    return is_alpha(ch) or is_digit(ch)

class Lexer:
    """Single-pass lexer; never aborts on bad input"""

    __slots__ = ('source', 'pos', 'line', 'col', 'length', 'errors',
                 'token_start', 'token_line', 'token_col')

    def __init__(self, source: str):
        self.source = source
        self.pos = 0
        self.line = 1
        self.col = 1
        self.length = len(source)
        self.errors: List[LexError] = []
        self.token_start = 0
        self.token_line = 1
        self.token_col = 1

    def at_end(self) -> bool:
        return self.pos >= self.length

    def peek(self, offset: int = 0) -> str:
        """Look ahead without consuming"""
        idx = self.pos + offset
        return self.source[idx] if idx < self.length else '\0'

    def advance(self) -> str:
        """Consume and return current character"""
        ch = self.peek()
        self.pos += 1
        if ch == '\n':
            self.line += 1
            self.col = 1
        else:
            self.col += 1
        return ch

    def make_token(self, type: TokenType, value) -> Token:
        return Token(
            type, value, self.token_line, self.token_col,
            self.source[self.token_start:self.pos], self.token_start, self.pos
        )

    def error(self, message: str, line: int, col: int):
        self.errors.append(LexError(message, line, col))

    def token_span(self) -> Tuple[int, int, int, int]:
        """Source span of the token most recently scanned"""
        return self.token_start, self.pos, self.token_line, self.token_col

    def read_whitespace(self) -> Token:
        while not self.at_end() and self.peek() in WHITESPACE_CHARS:
            self.advance()
        return self.make_token(TokenType.WHITESPACE, self.source[self.token_start:self.pos])

    def read_comment(self) -> Token:
        """Consume to end of line; the newline belongs to the next token"""
        while not self.at_end() and self.peek() != '\n':
            self.advance()
        return self.make_token(TokenType.COMMENT, self.source[self.token_start:self.pos])

    def read_number(self) -> Token:
        while is_digit(self.peek()):
            self.advance()

        # A '.' without a digit after it is left for the parser (method call dot)
        if self.peek() == '.' and is_digit(self.peek(1)):
            self.advance()
            while is_digit(self.peek()):
                self.advance()

        return self.make_token(TokenType.NUMBER, float(self.source[self.token_start:self.pos]))

    def read_string(self) -> Optional[Token]:
        """Parse string literal; no escapes, no newlines"""
        self.advance()  # Opening quote

        while not self.at_end() and self.peek() != '"':
            if self.peek() == '\n':
                self.error("Unterminated string", self.token_line, self.token_col)
                return None
            self.advance()

        if self.at_end():
            self.error("Unterminated string", self.token_line, self.token_col)
            return None

        self.advance()  # Closing quote
        return self.make_token(TokenType.STRING, self.source[self.token_start + 1:self.pos - 1])

    def read_identifier(self) -> Token:
        """Parse identifier or keyword"""
        while is_alnum(self.peek()):
            self.advance()

        text = self.source[self.token_start:self.pos]
        token_type = TokenType.KEYWORD if text in KEYWORDS else TokenType.IDENTIFIER
        return self.make_token(token_type, text)

    def next_token(self) -> Optional[Token]:
        """Scan one token; None means an invalid character was skipped"""
        self.token_start = self.pos
        self.token_line = self.line
        self.token_col = self.col

        if self.at_end():
            return self.make_token(TokenType.EOF, None)

        ch = self.peek()

        if ch in WHITESPACE_CHARS:
            return self.read_whitespace()

        if ch == '/' and self.peek(1) == '/':
            return self.read_comment()

        if is_digit(ch):
            return self.read_number()

        if ch == '"':
            return self.read_string()

        if is_alpha(ch):
            return self.read_identifier()

        two_char = ch + self.peek(1)
        if two_char in TWO_CHAR_OPS:
            self.advance()
            self.advance()
            return self.make_token(TokenType.OPERATOR, two_char)

        if ch in SINGLE_CHAR_OPS:
            self.advance()
            return self.make_token(TokenType.OPERATOR, ch)

        if ch in PUNCTUATION:
            self.advance()
            return self.make_token(TokenType.PUNCTUATION, ch)

        # Unknown character
        self.error(f"Invalid character '{ch}'", self.line, self.col)
        self.advance()
        return None

    def tokenize(self) -> List[Token]:
        """Tokenize entire source; always ends with exactly one EOF"""
        tokens = []
        while True:
            token = self.next_token()
            if token is None:
                continue
            tokens.append(token)
            if token.type == TokenType.EOF:
                break
        return tokens


def tokenize(source: str) -> Tuple[List[Token], List[LexError]]:
    """Convenience function to tokenize source code"""
    lexer = Lexer(source)
    tokens = lexer.tokenize()
    return tokens, lexer.errors


def significant(tokens: List[Token]) -> List[Token]:
    """Drop whitespace and comment tokens"""
    return [t for t in tokens if t.type not in (TokenType.WHITESPACE, TokenType.COMMENT)]
