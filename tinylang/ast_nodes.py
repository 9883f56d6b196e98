"""
Tiny Language - AST (Abstract Syntax Tree)
Immutable node structures with __slots__; every node knows its first and last token
"""

from dataclasses import dataclass, fields as dataclass_fields
from typing import Tuple, Optional, Union

from .lexer import Token

# Base AST Node
@dataclass(frozen=True, slots=True)
class Node:
    token: Token
    end_token: Token

    @property
    def line(self) -> int:
        return self.token.line

    @property
    def column(self) -> int:
        return self.token.column

    @property
    def span(self) -> Tuple[int, int]:
        """Source offsets covered by this node"""
        return self.token.start, self.end_token.end

    @property
    def kind(self) -> str:
        return type(self).__name__

# Expressions
@dataclass(frozen=True, slots=True)
class NumberLiteral(Node):
    value: float

@dataclass(frozen=True, slots=True)
class StringLiteral(Node):
    value: str

@dataclass(frozen=True, slots=True)
class BooleanLiteral(Node):
    value: bool

@dataclass(frozen=True, slots=True)
class Identifier(Node):
    name: str

@dataclass(frozen=True, slots=True)
class BinaryExpression(Node):
    operator: str
    op_token: Token
    left: 'Expr'
    right: 'Expr'

@dataclass(frozen=True, slots=True)
class UnaryExpression(Node):
    operator: str
    operand: 'Expr'

@dataclass(frozen=True, slots=True)
class CallExpression(Node):
    callee: str
    arguments: Tuple['Expr', ...]

@dataclass(frozen=True, slots=True)
class ArrayLiteral(Node):
    elements: Tuple['Expr', ...]

@dataclass(frozen=True, slots=True)
class IndexExpression(Node):
    object: 'Expr'
    index: 'Expr'

@dataclass(frozen=True, slots=True)
class ThisExpression(Node):
    pass

@dataclass(frozen=True, slots=True)
class NewExpression(Node):
    class_name: str
    arguments: Tuple['Expr', ...]

@dataclass(frozen=True, slots=True)
class MemberExpression(Node):
    object: 'Expr'
    property: str

@dataclass(frozen=True, slots=True)
class MethodCall(Node):
    object: 'Expr'
    method: str
    arguments: Tuple['Expr', ...]

# Statements
@dataclass(frozen=True, slots=True)
class LetStatement(Node):
    name: str
    value: 'Expr'

@dataclass(frozen=True, slots=True)
class AssignStatement(Node):
    name: str
    value: 'Expr'

@dataclass(frozen=True, slots=True)
class IndexAssignStatement(Node):
    object: 'Expr'
    index: 'Expr'
    value: 'Expr'

@dataclass(frozen=True, slots=True)
class MemberAssignStatement(Node):
    object: 'Expr'
    property: str
    value: 'Expr'

@dataclass(frozen=True, slots=True)
class Block(Node):
    statements: Tuple['Stmt', ...]

@dataclass(frozen=True, slots=True)
class IfStatement(Node):
    condition: 'Expr'
    then_branch: Block
    # Block, or a nested IfStatement for `else if`
    else_branch: Optional[Union[Block, 'IfStatement']]

@dataclass(frozen=True, slots=True)
class WhileStatement(Node):
    condition: 'Expr'
    body: Block

@dataclass(frozen=True, slots=True)
class FunctionDeclaration(Node):
    name: str
    params: Tuple[str, ...]
    body: Block

@dataclass(frozen=True, slots=True)
class ReturnStatement(Node):
    value: Optional['Expr']

@dataclass(frozen=True, slots=True)
class ExpressionStatement(Node):
    expression: 'Expr'

@dataclass(frozen=True, slots=True)
class ClassDeclaration(Node):
    name: str
    fields: Tuple[str, ...]
    methods: Tuple[FunctionDeclaration, ...]

# Program root
@dataclass(frozen=True, slots=True)
class Program(Node):
    statements: Tuple['Stmt', ...]

# Type aliases
Expr = Union[
    NumberLiteral, StringLiteral, BooleanLiteral, Identifier,
    BinaryExpression, UnaryExpression, CallExpression, ArrayLiteral,
    IndexExpression, ThisExpression, NewExpression, MemberExpression,
    MethodCall
]

Stmt = Union[
    LetStatement, AssignStatement, IndexAssignStatement, MemberAssignStatement,
    Block, IfStatement, WhileStatement, FunctionDeclaration, ReturnStatement,
    ExpressionStatement, ClassDeclaration
]

STATEMENT_TYPES = (
    LetStatement, AssignStatement, IndexAssignStatement, MemberAssignStatement,
    Block, IfStatement, WhileStatement, FunctionDeclaration, ReturnStatement,
    ExpressionStatement, ClassDeclaration,
)


def children(node: Node):
    """Direct child nodes in source order (top-down traversal helper)"""
    for field in dataclass_fields(node):
        name = field.name
        if name in ('token', 'end_token', 'op_token'):
            continue
        value = getattr(node, name)
        if isinstance(value, Node):
            yield value
        elif isinstance(value, tuple):
            for item in value:
                if isinstance(item, Node):
                    yield item


def node_at(root: Node, offset: int) -> Optional[Node]:
    """Innermost node whose span contains a source offset"""
    start, end = root.span
    if not start <= offset < end:
        return None
    for child in children(root):
        found = node_at(child, offset)
        if found is not None:
            return found
    return root
