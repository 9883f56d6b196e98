"""
Tiny Language - Parser
Recursive descent parser, one method per precedence level, with error recovery
"""

import logging
from dataclasses import dataclass, replace
from typing import List, Optional, Tuple, Union

from .lexer import Token, TokenType, LexError, tokenize, significant
from .ast_nodes import *

logger = logging.getLogger(__name__)

class ParseError(Exception):
    def __init__(self, message: str, line: int, column: int):
        super().__init__(f"{message} at line {line}, col {column}")
        self.message = message
        self.line = line
        self.column = column

    @classmethod
    def at(cls, message: str, token: Token) -> 'ParseError':
        return cls(message, token.line, token.column)

@dataclass(slots=True)
class ParseResult:
    program: Program
    errors: List[ParseError]
    lex_errors: List[LexError]

    @property
    def ok(self) -> bool:
        return not self.errors and not self.lex_errors

class Parser:
    """Recursive descent parser; records errors and resynchronizes"""

    __slots__ = ('tokens', 'pos', 'length', 'errors')

    # Keywords that most likely begin a new statement
    SYNC_KEYWORDS = frozenset({'let', 'if', 'while', 'function', 'return'})

    def __init__(self, tokens: List[Token]):
        tokens = significant(tokens)
        if not tokens or tokens[-1].type != TokenType.EOF:
            end = tokens[-1].end if tokens else 0
            line = tokens[-1].line if tokens else 1
            tokens.append(Token(TokenType.EOF, None, line, 1, '', end, end))
        self.tokens = tokens
        self.pos = 0
        self.length = len(tokens)
        self.errors: List[ParseError] = []

    def peek(self, offset: int = 0) -> Token:
        idx = self.pos + offset
        if idx >= self.length:
            return self.tokens[-1]  # EOF
        return self.tokens[idx]

    def current(self) -> Token:
        return self.peek(0)

    def previous(self) -> Token:
        return self.tokens[self.pos - 1] if self.pos > 0 else self.tokens[0]

    def at_end(self) -> bool:
        return self.current().type == TokenType.EOF

    def advance(self) -> Token:
        token = self.current()
        if token.type != TokenType.EOF:
            self.pos += 1
        return token

    def check(self, type: TokenType, value=None) -> bool:
        return self.current().is_(type, value)

    def check_keyword(self, *words: str) -> bool:
        token = self.current()
        return token.type == TokenType.KEYWORD and token.value in words

    def check_operator(self, *ops: str) -> bool:
        token = self.current()
        return token.type == TokenType.OPERATOR and token.value in ops

    def match(self, type: TokenType, value=None) -> Optional[Token]:
        if self.check(type, value):
            return self.advance()
        return None

    def expect(self, type: TokenType, value, message: str) -> Token:
        if self.check(type, value):
            return self.advance()
        raise ParseError.at(message, self.current())

    def unexpected(self) -> ParseError:
        token = self.current()
        shown = '' if token.value is None else token.value
        if isinstance(shown, float) and shown.is_integer():
            shown = int(shown)
        return ParseError.at(f"Unexpected token: {token.type.name} '{shown}'", token)

    def synchronize(self):
        """Skip tokens until a likely statement start"""
        self.advance()
        while not self.at_end():
            if self.check_keyword(*self.SYNC_KEYWORDS):
                return
            self.advance()

    # === Expression Parsing ===

    def parse_expression(self) -> Expr:
        return self.parse_or()

    def make_binary(self, left: Expr, op_token: Token, operator: str, right: Expr) -> BinaryExpression:
        return BinaryExpression(left.token, right.end_token, operator, op_token, left, right)

    def parse_or(self) -> Expr:
        left = self.parse_and()
        while self.check_keyword('or'):
            op_token = self.advance()
            right = self.parse_and()
            left = self.make_binary(left, op_token, 'or', right)
        return left

    def parse_and(self) -> Expr:
        left = self.parse_equality()
        while self.check_keyword('and'):
            op_token = self.advance()
            right = self.parse_equality()
            left = self.make_binary(left, op_token, 'and', right)
        return left

    def parse_equality(self) -> Expr:
        left = self.parse_comparison()
        while True:
            if self.check_keyword('equals'):
                op_token = self.advance()
                operator = 'equals'
            elif self.check_keyword('not') and self.peek(1).is_(TokenType.KEYWORD, 'equals'):
                op_token = self.advance()
                self.advance()
                operator = 'not equals'
            else:
                break
            right = self.parse_comparison()
            left = self.make_binary(left, op_token, operator, right)
        return left

    def parse_comparison(self) -> Expr:
        left = self.parse_term()
        while self.check_operator('<', '>', '<=', '>='):
            op_token = self.advance()
            right = self.parse_term()
            left = self.make_binary(left, op_token, op_token.value, right)
        return left

    def parse_term(self) -> Expr:
        left = self.parse_factor()
        while self.check_operator('+', '-'):
            op_token = self.advance()
            right = self.parse_factor()
            left = self.make_binary(left, op_token, op_token.value, right)
        return left

    def parse_factor(self) -> Expr:
        left = self.parse_unary()
        while self.check_operator('*', '/', '%'):
            op_token = self.advance()
            right = self.parse_unary()
            left = self.make_binary(left, op_token, op_token.value, right)
        return left

    def parse_unary(self) -> Expr:
        """Parse unary operators (right-associative)"""
        if self.check_keyword('not') or self.check_operator('-'):
            op_token = self.advance()
            operand = self.parse_unary()
            return UnaryExpression(op_token, operand.end_token, op_token.value, operand)
        return self.parse_postfix()

    def parse_arguments(self) -> Tuple[Tuple[Expr, ...], Token]:
        """Parse call arguments after '('; returns them with the closing paren"""
        args = []
        if not self.check(TokenType.PUNCTUATION, ')'):
            args.append(self.parse_expression())
            while self.match(TokenType.PUNCTUATION, ','):
                args.append(self.parse_expression())
        close = self.expect(TokenType.PUNCTUATION, ')', "Expected ')' after arguments")
        return tuple(args), close

    def parse_postfix(self) -> Expr:
        """Parse index and member chains"""
        expr = self.parse_primary()

        while True:
            if self.match(TokenType.PUNCTUATION, '['):
                index = self.parse_expression()
                close = self.expect(TokenType.PUNCTUATION, ']', "Expected ']' after index")
                expr = IndexExpression(expr.token, close, expr, index)

            elif self.match(TokenType.PUNCTUATION, '.'):
                name = self.expect(TokenType.IDENTIFIER, None, "Expected property name after '.'")
                if self.match(TokenType.PUNCTUATION, '('):
                    args, close = self.parse_arguments()
                    expr = MethodCall(expr.token, close, expr, name.value, args)
                else:
                    expr = MemberExpression(expr.token, name, expr, name.value)

            else:
                break

        return expr

    def parse_primary(self) -> Expr:
        """Parse primary expressions (literals, identifiers, calls, parens)"""
        token = self.current()

        if self.match(TokenType.NUMBER):
            return NumberLiteral(token, token, token.value)

        if self.match(TokenType.STRING):
            return StringLiteral(token, token, token.value)

        if self.match(TokenType.KEYWORD, 'true'):
            return BooleanLiteral(token, token, True)

        if self.match(TokenType.KEYWORD, 'false'):
            return BooleanLiteral(token, token, False)

        if self.match(TokenType.KEYWORD, 'this'):
            return ThisExpression(token, token)

        if self.match(TokenType.KEYWORD, 'new'):
            name = self.expect(TokenType.IDENTIFIER, None, "Expected class name after 'new'")
            self.expect(TokenType.PUNCTUATION, '(', "Expected '(' after class name")
            args, close = self.parse_arguments()
            return NewExpression(token, close, name.value, args)

        if self.match(TokenType.IDENTIFIER):
            if self.match(TokenType.PUNCTUATION, '('):
                args, close = self.parse_arguments()
                return CallExpression(token, close, token.value, args)
            return Identifier(token, token, token.value)

        if self.match(TokenType.PUNCTUATION, '('):
            expr = self.parse_expression()
            close = self.expect(TokenType.PUNCTUATION, ')', "Expected ')' after expression")
            # Parens widen the span but add no node
            return replace(expr, token=token, end_token=close)

        if self.match(TokenType.PUNCTUATION, '['):
            elements = []
            if not self.check(TokenType.PUNCTUATION, ']'):
                elements.append(self.parse_expression())
                while self.match(TokenType.PUNCTUATION, ','):
                    elements.append(self.parse_expression())
            close = self.expect(TokenType.PUNCTUATION, ']', "Expected ']' after array elements")
            return ArrayLiteral(token, close, tuple(elements))

        raise self.unexpected()

    # === Statement Parsing ===

    def parse_statement(self) -> Stmt:
        """Parse a single statement"""
        if self.check_keyword('let'):
            return self.parse_let_statement()

        if self.check_keyword('if'):
            return self.parse_if_statement(self.advance())

        if self.check_keyword('while'):
            return self.parse_while_statement()

        if self.check_keyword('function'):
            return self.parse_function_declaration()

        if self.check_keyword('return'):
            return self.parse_return_statement()

        if self.check_keyword('class'):
            return self.parse_class_declaration()

        if self.check(TokenType.PUNCTUATION, '{'):
            return self.parse_block()

        if self.check(TokenType.IDENTIFIER) and self.peek(1).is_(TokenType.OPERATOR, '='):
            return self.parse_assign_statement()

        return self.parse_expression_statement()

    def parse_let_statement(self) -> LetStatement:
        """Parse variable declaration: let x = 10"""
        token = self.advance()
        name = self.expect(TokenType.IDENTIFIER, None, "Expected variable name after 'let'")
        self.expect(TokenType.OPERATOR, '=', "Expected '=' after variable name")
        value = self.parse_expression()
        return LetStatement(token, self.previous(), name.value, value)

    def parse_assign_statement(self) -> AssignStatement:
        name = self.advance()
        self.advance()  # =
        value = self.parse_expression()
        return AssignStatement(name, self.previous(), name.value, value)

    def parse_expression_statement(self) -> Stmt:
        """Expression statement, or a[i] = v / obj.f = v"""
        expr = self.parse_expression()

        if self.check(TokenType.OPERATOR, '='):
            if isinstance(expr, IndexExpression):
                self.advance()
                value = self.parse_expression()
                return IndexAssignStatement(expr.token, self.previous(), expr.object, expr.index, value)
            if isinstance(expr, MemberExpression):
                self.advance()
                value = self.parse_expression()
                return MemberAssignStatement(expr.token, self.previous(), expr.object, expr.property, value)
            raise ParseError.at("Invalid assignment target", self.current())

        return ExpressionStatement(expr.token, expr.end_token, expr)

    def parse_if_statement(self, token: Token) -> IfStatement:
        """Parse if statement; `token` is the already consumed 'if'"""
        self.expect(TokenType.PUNCTUATION, '(', "Expected '(' after 'if'")
        condition = self.parse_expression()
        self.expect(TokenType.PUNCTUATION, ')', "Expected ')' after condition")
        then_branch = self.parse_block()

        else_branch = None
        if self.match(TokenType.KEYWORD, 'else'):
            if self.check_keyword('if'):
                else_branch = self.parse_if_statement(self.advance())
            else:
                else_branch = self.parse_block()

        return IfStatement(token, self.previous(), condition, then_branch, else_branch)

    def parse_while_statement(self) -> WhileStatement:
        token = self.advance()
        self.expect(TokenType.PUNCTUATION, '(', "Expected '(' after 'while'")
        condition = self.parse_expression()
        self.expect(TokenType.PUNCTUATION, ')', "Expected ')' after condition")
        body = self.parse_block()
        return WhileStatement(token, self.previous(), condition, body)

    def parse_params(self) -> Tuple[str, ...]:
        self.expect(TokenType.PUNCTUATION, '(', "Expected '(' after function name")
        params = []
        if not self.check(TokenType.PUNCTUATION, ')'):
            params.append(self.expect(TokenType.IDENTIFIER, None, "Expected parameter name").value)
            while self.match(TokenType.PUNCTUATION, ','):
                params.append(self.expect(TokenType.IDENTIFIER, None, "Expected parameter name").value)
        self.expect(TokenType.PUNCTUATION, ')', "Expected ')' after parameters")
        return tuple(params)

    def parse_function_declaration(self) -> FunctionDeclaration:
        token = self.advance()
        name = self.expect(TokenType.IDENTIFIER, None, "Expected function name")
        params = self.parse_params()
        body = self.parse_block()
        return FunctionDeclaration(token, self.previous(), name.value, params, body)

    def parse_return_statement(self) -> ReturnStatement:
        token = self.advance()
        value = None
        if not self.check(TokenType.PUNCTUATION, '}') and not self.at_end():
            value = self.parse_expression()
        return ReturnStatement(token, self.previous(), value)

    def parse_class_declaration(self) -> ClassDeclaration:
        """Parse class: fields are bare names, methods are name(params) { ... }"""
        token = self.advance()
        name = self.expect(TokenType.IDENTIFIER, None, "Expected class name")
        self.expect(TokenType.PUNCTUATION, '{', "Expected '{'")

        fields = []
        methods = []
        while not self.check(TokenType.PUNCTUATION, '}') and not self.at_end():
            member = self.expect(TokenType.IDENTIFIER, None, "Expected field or method name")
            if self.check(TokenType.PUNCTUATION, '('):
                params = self.parse_params()
                body = self.parse_block()
                methods.append(FunctionDeclaration(member, body.end_token, member.value, params, body))
            else:
                fields.append(member.value)
            self.match(TokenType.PUNCTUATION, ',')

        self.expect(TokenType.PUNCTUATION, '}', "Expected '}'")
        return ClassDeclaration(token, self.previous(), name.value, tuple(fields), tuple(methods))

    def parse_block(self) -> Block:
        """Parse { statements }"""
        open_brace = self.expect(TokenType.PUNCTUATION, '{', "Expected '{'")

        statements = []
        while not self.check(TokenType.PUNCTUATION, '}') and not self.at_end():
            statements.append(self.parse_statement())

        close_brace = self.expect(TokenType.PUNCTUATION, '}', "Expected '}'")
        return Block(open_brace, close_brace, tuple(statements))

    def parse_program(self) -> Program:
        """Parse entire program, collecting every error"""
        first = self.current()
        statements = []

        while not self.at_end():
            try:
                statements.append(self.parse_statement())
            except ParseError as e:
                self.errors.append(e)
                logger.debug("parse error: %s; resynchronizing", e)
                self.synchronize()
            except RecursionError:
                self.errors.append(ParseError.at("Expression nested too deeply", self.current()))
                logger.debug("nesting too deep at line %d; resynchronizing", self.current().line)
                self.synchronize()

        return Program(first, self.current(), tuple(statements))


def parse(source: Union[str, List[Token]]) -> ParseResult:
    """Convenience function: parse source text or an existing token list"""
    lex_errors: List[LexError] = []
    if isinstance(source, str):
        tokens, lex_errors = tokenize(source)
    else:
        tokens = source
    parser = Parser(tokens)
    program = parser.parse_program()
    return ParseResult(program, parser.errors, lex_errors)
