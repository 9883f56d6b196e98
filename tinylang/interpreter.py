"""
Tiny Language - Interpreter
Asynchronous tree-walking evaluator with pause, step and stop controls
"""

import asyncio
import logging
import math
import random
import sys
from dataclasses import dataclass, field
from typing import Any, List, Optional

from .ast_nodes import *
from .config import Options, MAX_CALL_DEPTH
from .host import Host, Observer
from .parser import parse
from .runtime import (
    RuntimeError, ExecutionStopped, Environment, TinyFunction, TinyClass, TinyInstance,
    Completion, SignalKind, NORMAL, is_number, is_integer, is_truthy, values_equal, format_value,
)
from .stdlib import STDLIB

logger = logging.getLogger(__name__)

# Statements run between event-loop yields when no step delay is set
YIELD_INTERVAL = 100

# Frames of Python recursion a single Tiny call level may use
FRAMES_PER_CALL = 40

@dataclass(slots=True)
class CallFrame:
    """Active user function or method call"""
    name: str
    line: int
    environment: Environment

@dataclass(slots=True)
class RunResult:
    output: List[Any] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    stopped: bool = False

    @property
    def ok(self) -> bool:
        return not self.errors

class Interpreter:
    """Executes a Program against a Host.

    All execution happens on one asyncio task. Statement boundaries are
    suspension points: the stop flag is checked there, step delays and
    debugger pauses happen there, and the loop is yielded to periodically.
    """

    def __init__(self, host: Optional[Host] = None, observer: Optional[Observer] = None,
                 options: Optional[Options] = None):
        self.host = host or Host()
        self.observer = observer or Observer()
        self.options = options or Options()
        self.step_delay_ms = self.options.step_delay_ms
        self.max_loop_iterations = self.options.max_loop_iterations
        self.rng = random.Random(self.options.seed)

        self.globals = Environment(name='global')
        self.environment = self.globals
        self.output: List[Any] = []
        self.call_depth = 0
        self.call_stack: List[CallFrame] = []
        self.current_node: Optional[Node] = None

        self._stop_requested = False
        self._paused = False
        self._stepping: Optional[str] = None
        self._step_depth = 0
        self._wakeup: Optional[asyncio.Event] = None
        self._ticks = 0

    # ==================== Control ====================

    @property
    def paused(self) -> bool:
        return self._paused

    @property
    def stopped(self) -> bool:
        return self._stop_requested

    def stop(self):
        """Request termination; takes effect at the next suspension point"""
        self._stop_requested = True
        self._wake()

    def resume(self):
        if self._paused:
            self._stepping = None
            self._wake()

    def step_into(self):
        """Resume and pause again at the very next statement"""
        if self._paused:
            self._stepping = 'into'
            self._wake()

    def step_over(self):
        """Resume and pause at the next statement not inside a deeper call"""
        if self._paused:
            self._stepping = 'over'
            self._step_depth = self.call_depth
            self._wake()

    def step(self):
        """Step using the configured step mode"""
        if self.options.step_mode == 'over':
            self.step_over()
        else:
            self.step_into()

    def _wake(self):
        if self._wakeup is not None:
            self._wakeup.set()

    def check_stopped(self):
        if self._stop_requested:
            raise ExecutionStopped()

    async def suspend(self, seconds: Optional[float] = None):
        """Wait for a duration, or until woken when seconds is None"""
        self.check_stopped()
        self._wakeup = asyncio.Event()
        try:
            if seconds is None:
                await self._wakeup.wait()
            else:
                try:
                    await asyncio.wait_for(self._wakeup.wait(), seconds)
                except asyncio.TimeoutError:
                    pass
        finally:
            self._wakeup = None
        self.check_stopped()

    async def pause(self):
        """Suspend until resume(), step_into(), step_over() or stop()"""
        line = self.current_node.line if self.current_node is not None else 0
        logger.debug("paused at line %d", line)
        self._stepping = None
        self._paused = True
        try:
            self.observer.on_pause(line, self)
            await self.suspend()
        finally:
            self._paused = False

    def should_break(self) -> bool:
        if self._stepping == 'into':
            return True
        return self.call_depth <= self._step_depth

    async def statement_boundary(self, node: Node):
        self.check_stopped()
        # Blocks only group statements; their children are the stopping points
        if isinstance(node, Block):
            return
        self.current_node = node
        if self._stepping is not None and self.should_break():
            self._stepping = None
            self._paused = True
            try:
                self.observer.on_debug_step(node, self)
                await self.suspend()
            finally:
                self._paused = False
        if self.step_delay_ms > 0:
            await self.suspend(self.step_delay_ms / 1000)
        else:
            self._ticks += 1
            if self._ticks >= YIELD_INTERVAL:
                self._ticks = 0
                await asyncio.sleep(0)
                self.check_stopped()

    # ==================== Running ====================

    async def interpret(self, program: Program) -> RunResult:
        """Run every top-level statement; runtime errors propagate"""
        logger.debug("run start: %d statements", len(program.statements))
        self._stop_requested = False
        limit = sys.getrecursionlimit()
        sys.setrecursionlimit(max(limit, MAX_CALL_DEPTH * FRAMES_PER_CALL))
        try:
            for stmt in program.statements:
                completion = await self.execute(stmt)
                if completion.is_return:
                    break
        except ExecutionStopped:
            logger.info("run stopped")
            return RunResult(self.output, [], stopped=True)
        except RecursionError:
            raise RuntimeError("Stack overflow: maximum call depth exceeded") from None
        finally:
            sys.setrecursionlimit(limit)
            self.environment = self.globals
            self.call_depth = 0
            self.call_stack.clear()
        logger.debug("run finished: %d values printed", len(self.output))
        return RunResult(self.output, [])

    def emit(self, value: Any):
        self.output.append(value)
        self.host.print(value)

    # ==================== Statements ====================

    async def execute(self, node: Node) -> Completion:
        await self.statement_boundary(node)
        self.observer.on_node_enter(node)
        try:
            completion = await self.execute_node(node)
        except RuntimeError as e:
            if e.line is None:
                logger.debug("runtime error at line %d: %s", node.line, e.message)
                raise e.with_line(node.line) from None
            raise
        self.observer.on_node_exit(node, completion.value)
        return completion

    async def execute_node(self, node: Node) -> Completion:
        if isinstance(node, ExpressionStatement):
            return Completion(SignalKind.NORMAL, await self.evaluate(node.expression))

        elif isinstance(node, LetStatement):
            value = await self.evaluate(node.value)
            self.environment.define(node.name, value)
            self.observer.on_variable_change(node.name, value, 'define', self.environment)

        elif isinstance(node, AssignStatement):
            value = await self.evaluate(node.value)
            self.environment.assign(node.name, value)
            self.observer.on_variable_change(node.name, value, 'assign', self.environment)

        elif isinstance(node, IndexAssignStatement):
            await self.execute_index_assign(node)

        elif isinstance(node, MemberAssignStatement):
            target = await self.evaluate(node.object)
            value = await self.evaluate(node.value)
            if not isinstance(target, TinyInstance):
                raise RuntimeError("Cannot set property on non-instance")
            target.set(node.property, value)
            self.notify_update(node.object, target)

        elif isinstance(node, IfStatement):
            if is_truthy(await self.evaluate(node.condition)):
                return await self.execute(node.then_branch)
            if node.else_branch is not None:
                return await self.execute(node.else_branch)

        elif isinstance(node, WhileStatement):
            return await self.execute_while(node)

        elif isinstance(node, Block):
            return await self.execute_block(node.statements, Environment(self.environment))

        elif isinstance(node, FunctionDeclaration):
            function = TinyFunction(node, self.environment)
            self.environment.define(node.name, function)
            self.observer.on_variable_change(node.name, function, 'define', self.environment)

        elif isinstance(node, ReturnStatement):
            value = await self.evaluate(node.value) if node.value is not None else None
            return Completion(SignalKind.RETURN, value)

        elif isinstance(node, ClassDeclaration):
            klass = TinyClass.from_declaration(node)
            self.environment.define(node.name, klass)
            self.observer.on_variable_change(node.name, klass, 'define', self.environment)

        else:
            raise RuntimeError(f"Unknown statement type: {node.kind}")

        return NORMAL

    async def execute_block(self, statements, environment: Environment) -> Completion:
        previous = self.environment
        self.environment = environment
        try:
            for stmt in statements:
                completion = await self.execute(stmt)
                if completion.is_return:
                    return completion
        finally:
            self.environment = previous
        return NORMAL

    async def execute_while(self, node: WhileStatement) -> Completion:
        limit = self.max_loop_iterations
        checks = 0
        while True:
            if checks > 0:
                await self.statement_boundary(node)
            checks += 1
            if not is_truthy(await self.evaluate(node.condition)):
                return NORMAL
            if checks >= limit:
                raise RuntimeError(
                    f"Infinite loop detected: loop exceeded {limit} iterations. "
                    f"Use looplimit() to raise the limit")
            completion = await self.execute(node.body)
            if completion.is_return:
                return completion

    async def execute_index_assign(self, node: IndexAssignStatement):
        target = await self.evaluate(node.object)
        index = await self.evaluate(node.index)
        value = await self.evaluate(node.value)
        if isinstance(target, str):
            raise RuntimeError("Cannot assign to string index")
        if not isinstance(target, list):
            raise RuntimeError("Cannot index non-array")
        if not is_integer(index) or index < 0:
            raise RuntimeError("Array index must be a non-negative integer")
        i = int(index)
        if i >= len(target):
            target.extend([None] * (i + 1 - len(target)))
        target[i] = value
        self.notify_update(node.object, target)

    def notify_update(self, target_node: Node, value: Any):
        if isinstance(target_node, Identifier):
            self.observer.on_variable_change(target_node.name, value, 'update', self.environment)
        elif isinstance(target_node, ThisExpression):
            self.observer.on_variable_change('this', value, 'update', self.environment)

    # ==================== Expressions ====================

    async def evaluate(self, node: Node) -> Any:
        self.observer.on_node_enter(node)
        value = await self.evaluate_node(node)
        self.observer.on_node_exit(node, value)
        return value

    async def evaluate_node(self, node: Node) -> Any:
        if isinstance(node, (NumberLiteral, StringLiteral, BooleanLiteral)):
            return node.value

        elif isinstance(node, Identifier):
            return self.environment.get(node.name)

        elif isinstance(node, BinaryExpression):
            return await self.evaluate_binary(node)

        elif isinstance(node, UnaryExpression):
            operand = await self.evaluate(node.operand)
            if node.operator == 'not':
                return not is_truthy(operand)
            if not is_number(operand):
                raise RuntimeError("Unary '-' requires a number")
            return -operand

        elif isinstance(node, CallExpression):
            return await self.evaluate_call(node)

        elif isinstance(node, ArrayLiteral):
            return [await self.evaluate(e) for e in node.elements]

        elif isinstance(node, IndexExpression):
            return await self.evaluate_index(node)

        elif isinstance(node, ThisExpression):
            scope = self.environment.resolve('this')
            if scope is None:
                raise RuntimeError("'this' used outside of a method")
            return scope.values['this']

        elif isinstance(node, NewExpression):
            klass = self.environment.get(node.class_name)
            if not isinstance(klass, TinyClass):
                raise RuntimeError(f"{node.class_name} is not a class")
            args = [await self.evaluate(a) for a in node.arguments]
            if len(args) != len(klass.fields):
                raise RuntimeError(f"{klass.name} expects {len(klass.fields)} arguments but got {len(args)}")
            return TinyInstance(klass, args)

        elif isinstance(node, MemberExpression):
            target = await self.evaluate(node.object)
            if not isinstance(target, TinyInstance):
                raise RuntimeError("Cannot access property on non-instance")
            return target.get(node.property)

        elif isinstance(node, MethodCall):
            return await self.evaluate_method_call(node)

        raise RuntimeError(f"Unknown expression type: {node.kind}")

    async def evaluate_binary(self, node: BinaryExpression) -> Any:
        op = node.operator

        # Short-circuit operators yield the deciding operand
        if op == 'and':
            left = await self.evaluate(node.left)
            if not is_truthy(left):
                return left
            return await self.evaluate(node.right)
        if op == 'or':
            left = await self.evaluate(node.left)
            if is_truthy(left):
                return left
            return await self.evaluate(node.right)

        left = await self.evaluate(node.left)
        right = await self.evaluate(node.right)

        if op == 'equals':
            return values_equal(left, right)
        if op == 'not equals':
            return not values_equal(left, right)
        if op == '+' and (isinstance(left, str) or isinstance(right, str)):
            return format_value(left) + format_value(right)

        if not (is_number(left) and is_number(right)):
            raise RuntimeError(f"Cannot perform '{op}' on non-numeric values")

        if op == '+':
            return left + right
        elif op == '-':
            return left - right
        elif op == '*':
            return left * right
        elif op == '/':
            if right == 0:
                raise RuntimeError("Division by zero")
            return left / right
        elif op == '%':
            if right == 0:
                raise RuntimeError("Modulo by zero")
            return math.fmod(left, right)
        elif op == '<':
            return left < right
        elif op == '>':
            return left > right
        elif op == '<=':
            return left <= right
        elif op == '>=':
            return left >= right

        raise RuntimeError(f"Unknown operator: {op}")

    async def evaluate_index(self, node: IndexExpression) -> Any:
        target = await self.evaluate(node.object)
        index = await self.evaluate(node.index)
        if not isinstance(target, (list, str)):
            raise RuntimeError("Cannot index non-array")
        if not is_integer(index):
            raise RuntimeError("Array index must be an integer")
        i = int(index)
        if i < 0 or i >= len(target):
            kind = "Array" if isinstance(target, list) else "String"
            raise RuntimeError(f"{kind} index out of bounds: {i} (length {len(target)})")
        return target[i]

    async def evaluate_call(self, node: CallExpression) -> Any:
        name = node.callee
        args = [await self.evaluate(a) for a in node.arguments]
        scope = self.environment.resolve(name)
        callee = scope.values[name] if scope is not None else None

        if isinstance(callee, TinyFunction):
            return await self.call_function(callee, args, node.line)
        if name in STDLIB:
            return await STDLIB[name](self, args)
        if scope is None:
            raise RuntimeError(f"Undefined function: {name}")
        raise RuntimeError(f"{name} is not a function")

    async def evaluate_method_call(self, node: MethodCall) -> Any:
        target = await self.evaluate(node.object)
        args = [await self.evaluate(a) for a in node.arguments]

        if isinstance(target, (list, str)):
            if node.method != 'length':
                raise RuntimeError(f"Undefined method: {node.method}")
            if args:
                raise RuntimeError("length() takes no arguments")
            return float(len(target))
        if not isinstance(target, TinyInstance):
            if node.method == 'length':
                raise RuntimeError("length() requires an array or string")
            raise RuntimeError("Cannot call method on non-instance")

        method = target.klass.methods.get(node.method)
        if method is None:
            raise RuntimeError(f"Undefined method: {node.method}")
        self.check_arity(len(method.params), args)

        # Methods see the caller's scope, with 'this' bound on top
        env = Environment(self.environment, name=f"{target.klass.name}.{method.name}")
        env.define('this', target)
        return await self.invoke(method, env, env.name, args, node.line)

    # ==================== Calls ====================

    def check_arity(self, arity: int, args: List[Any]):
        if len(args) != arity:
            raise RuntimeError(f"Expected {arity} arguments but got {len(args)}")

    async def call_function(self, function: TinyFunction, args: List[Any], line: int) -> Any:
        self.check_arity(function.arity, args)
        env = Environment(function.closure, name=function.name)
        return await self.invoke(function.declaration, env, function.name, args, line)

    async def invoke(self, declaration: FunctionDeclaration, env: Environment,
                     name: str, args: List[Any], line: int) -> Any:
        if self.call_depth >= MAX_CALL_DEPTH:
            raise RuntimeError(f"Stack overflow: maximum call depth {MAX_CALL_DEPTH} exceeded")

        for param, arg in zip(declaration.params, args):
            env.define(param, arg)
            self.observer.on_variable_change(param, arg, 'define', env)

        frame = CallFrame(name, line, env)
        self.call_stack.append(frame)
        self.call_depth += 1
        self.observer.on_call_start(frame, args)
        try:
            completion = await self.execute_block(declaration.body.statements, env)
        finally:
            self.call_depth -= 1
            self.call_stack.pop()
            self.observer.on_call_end(frame)
        return completion.value if completion.is_return else None

async def run_source(source: str, host: Optional[Host] = None, observer: Optional[Observer] = None,
                     options: Optional[Options] = None) -> RunResult:
    """Parse and run; lex and parse errors come back in RunResult.errors"""
    result = parse(source)
    if not result.ok:
        errors = [str(e) for e in result.lex_errors]
        errors += [f"Parse error at line {e.line}, col {e.column}: {e.message}" for e in result.errors]
        return RunResult([], errors)
    interpreter = Interpreter(host, observer, options)
    return await interpreter.interpret(result.program)

def execute(source: str, host: Optional[Host] = None, options: Optional[Options] = None) -> RunResult:
    """Blocking convenience wrapper around run_source"""
    return asyncio.run(run_source(source, host, None, options))
