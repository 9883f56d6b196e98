"""
Tiny Language - Runtime
Scope chain, value representations, control signals and error types
"""

from dataclasses import dataclass
from enum import IntEnum, auto
from typing import Any, Dict, List, Optional, Tuple

from .ast_nodes import FunctionDeclaration, ClassDeclaration

class RuntimeError(Exception):
    """Fatal error raised while running a Tiny program"""

    def __init__(self, message: str, line: Optional[int] = None):
        if line is None:
            super().__init__(message)
        else:
            super().__init__(f"Runtime error at line {line}: {message}")
        self.message = message
        self.line = line

    def with_line(self, line: int) -> 'RuntimeError':
        """Copy carrying a line number, unless one is already known"""
        if self.line is not None:
            return self
        return RuntimeError(self.message, line)

class ExecutionStopped(Exception):
    """Host asked the run to stop; not a user-visible error"""

class Environment:
    """One lexical scope: name -> value bindings plus a parent link"""

    __slots__ = ('values', 'parent', 'name')

    def __init__(self, parent: Optional['Environment'] = None, name: str = ''):
        self.values: Dict[str, Any] = {}
        self.parent = parent
        self.name = name

    def define(self, name: str, value: Any):
        """Create or overwrite a binding in this scope only"""
        self.values[name] = value

    def get(self, name: str) -> Any:
        env = self
        while env is not None:
            if name in env.values:
                return env.values[name]
            env = env.parent
        raise RuntimeError(f"Undefined variable: {name}")

    def assign(self, name: str, value: Any):
        """Rebind an existing variable; never creates one"""
        env = self
        while env is not None:
            if name in env.values:
                env.values[name] = value
                return
            env = env.parent
        raise RuntimeError(f"Undefined variable: {name}")

    def resolve(self, name: str) -> Optional['Environment']:
        """Scope that binds name, or None"""
        env = self
        while env is not None:
            if name in env.values:
                return env
            env = env.parent
        return None

    def has(self, name: str) -> bool:
        """Local-only check"""
        return name in self.values

    def variables(self) -> List[Tuple[str, Any]]:
        return list(self.values.items())

    @property
    def depth(self) -> int:
        depth = 0
        env = self.parent
        while env is not None:
            depth += 1
            env = env.parent
        return depth

    def __repr__(self):
        return f"Environment({self.name or 'block'}, {len(self.values)} vars, depth={self.depth})"

class TinyFunction:
    """User function: declaration plus the environment it closes over"""

    __slots__ = ('declaration', 'closure')

    def __init__(self, declaration: FunctionDeclaration, closure: Environment):
        self.declaration = declaration
        self.closure = closure

    @property
    def name(self) -> str:
        return self.declaration.name

    @property
    def arity(self) -> int:
        return len(self.declaration.params)

class TinyClass:
    __slots__ = ('name', 'fields', 'methods')

    def __init__(self, name: str, fields: Tuple[str, ...], methods: Dict[str, FunctionDeclaration]):
        self.name = name
        self.fields = fields
        self.methods = methods

    @classmethod
    def from_declaration(cls, node: ClassDeclaration) -> 'TinyClass':
        return cls(node.name, node.fields, {m.name: m for m in node.methods})

class TinyInstance:
    """Object whose field set is fixed by its class"""

    __slots__ = ('klass', 'fields')

    def __init__(self, klass: TinyClass, values: List[Any]):
        self.klass = klass
        self.fields: Dict[str, Any] = dict(zip(klass.fields, values))

    def get(self, name: str) -> Any:
        if name not in self.fields:
            raise RuntimeError(f"Undefined property: {name}")
        return self.fields[name]

    def set(self, name: str, value: Any):
        if name not in self.fields:
            raise RuntimeError(f"Undefined property: {name}")
        self.fields[name] = value

# Control signals

class SignalKind(IntEnum):
    NORMAL = auto()
    RETURN = auto()

@dataclass(frozen=True, slots=True)
class Completion:
    """Result of executing a statement"""
    kind: SignalKind = SignalKind.NORMAL
    value: Any = None

    @property
    def is_return(self) -> bool:
        return self.kind == SignalKind.RETURN

NORMAL = Completion()

# Value helpers

def is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)

def is_integer(value: Any) -> bool:
    return is_number(value) and float(value).is_integer()

def is_truthy(value: Any) -> bool:
    """Only null and false are falsy; 0 and "" are truthy"""
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    return True

def values_equal(a: Any, b: Any) -> bool:
    """Strict equality: no coercion, identity for arrays and objects"""
    if isinstance(a, bool) or isinstance(b, bool):
        return isinstance(a, bool) and isinstance(b, bool) and a == b
    if is_number(a) and is_number(b):
        return a == b
    if isinstance(a, str) and isinstance(b, str):
        return a == b
    return a is b

def type_name(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if is_number(value):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    if isinstance(value, TinyFunction):
        return "function"
    if isinstance(value, TinyClass):
        return "class"
    if isinstance(value, TinyInstance):
        return value.klass.name
    return "builtin"

def format_number(value: float) -> str:
    if value != value:
        return "NaN"
    if value in (float('inf'), float('-inf')):
        return "Infinity" if value > 0 else "-Infinity"
    if float(value).is_integer() and abs(value) < 1e21:
        return str(int(value))
    return repr(float(value))

def format_value(value: Any, nested: bool = False, _seen: Optional[set] = None) -> str:
    """Render a value the way print() shows it"""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if is_number(value):
        return format_number(value)
    if isinstance(value, str):
        return f'"{value}"' if nested else value
    if isinstance(value, (list, TinyInstance)):
        seen = _seen or set()
        if id(value) in seen:
            return "[...]" if isinstance(value, list) else f"{value.klass.name} {{...}}"
        seen = seen | {id(value)}
        if isinstance(value, list):
            return "[" + ", ".join(format_value(v, True, seen) for v in value) + "]"
        body = ", ".join(f"{k}: {format_value(v, True, seen)}" for k, v in value.fields.items())
        return f"{value.klass.name} {{{body}}}"
    if isinstance(value, TinyFunction):
        return f"<function {value.name}>"
    if isinstance(value, TinyClass):
        return f"<class {value.name}>"
    return f"<builtin {getattr(value, 'name', '?')}>"
