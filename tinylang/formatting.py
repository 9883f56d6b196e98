"""
Tiny Language - Formatting
Plain-text dumps of token streams and syntax trees
"""

from typing import Iterable, List

from .ast_nodes import (
    Node, NumberLiteral, StringLiteral, BooleanLiteral, FunctionDeclaration, ClassDeclaration, children,
)
from .lexer import Token, TokenType
from .runtime import format_value

def format_token_table(tokens: Iterable[Token], include_trivia: bool = False) -> str:
    """One row per token: position, type, value"""
    rows = [f"{'LINE':>4}:{'COL':<4} {'TYPE':<12} VALUE"]
    for token in tokens:
        if not include_trivia and token.type in (TokenType.WHITESPACE, TokenType.COMMENT):
            continue
        value = "" if token.type == TokenType.EOF else repr(token.raw)
        rows.append(f"{token.line:>4}:{token.column:<4} {token.type.name:<12} {value}")
    return "\n".join(rows)

def describe(node: Node) -> str:
    """Short label for an outline row"""
    if isinstance(node, FunctionDeclaration):
        return f"{node.kind} {node.name}({', '.join(node.params)})"
    if isinstance(node, ClassDeclaration):
        return f"{node.kind} {node.name} fields=({', '.join(node.fields)})"
    if isinstance(node, (NumberLiteral, StringLiteral, BooleanLiteral)):
        return f"{node.kind} {format_value(node.value, nested=True)}"
    for name in ('name', 'operator', 'callee', 'class_name', 'property', 'method'):
        value = getattr(node, name, None)
        if isinstance(value, str):
            return f"{node.kind} {value}"
    return node.kind

def format_ast(node: Node, indent: int = 0) -> str:
    lines: List[str] = []
    _outline(node, indent, lines)
    return "\n".join(lines)

def _outline(node: Node, indent: int, lines: List[str]):
    lines.append(f"{'  ' * indent}{describe(node)}  [line {node.line}]")
    for child in children(node):
        _outline(child, indent + 1, lines)
