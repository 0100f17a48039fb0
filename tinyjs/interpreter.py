"""Tree-walking interpreter for TinyJS.

The interpreter executes the AST produced by ``tinyjs.parser`` directly.
Expressions evaluate to Python values (see ``tinyjs.values``); statements
return ``None`` or a control signal (``ReturnSignal``, ``BreakSignal``,
``ContinueSignal``) which travels up through enclosing statement lists
until a loop or function call absorbs it. Scopes are ``Environment``
records kept in an ``EnvironmentArena``; name resolution walks the parent
chain outward from the innermost scope.

Every failure is a ``TinyJSError`` stamped with the line being executed.
Nothing inside a program can catch it: the run is aborted and the error
propagates to the caller of ``Interpreter.run``.
"""

from __future__ import annotations

import math
import sys
from typing import Any, Dict, List, Optional, Sequence, TextIO, Union

from .ast import (
    Program, IntegerLiteral, FloatLiteral, StringLiteral, Variable,
    BinaryOp, UnaryOp, Call, FunctionDecl, VarDecl, Return, Break,
    Continue, If, While, DoWhile, For, Block, Node,
)
from .builtin_function import BuiltinFunction
from .environment import Environment, EnvironmentArena
from .errors import (
    TinyJSError, ReturnSignal, BreakSignal, BREAK, CONTINUE, REFERENCE_ERROR, TYPE_ERROR, ARGUMENT_ERROR,
    CONTROL_FLOW_ERROR, ARITHMETIC_ERROR, RANGE_ERROR,
)
from .parser import parse_program
from .values import UNDEFINED, Undefined, FunctionValue, wrap_int, is_number, to_string, type_name


ARITHMETIC_OPS = {'+', '-', '*', '/', '%'}
RELATIONAL_OPS = {'<', '>', '<=', '>='}
EQUALITY_OPS = {'==', '!='}
BITWISE_OPS = {'&', '|', '^', '<<', '>>'}

# Python frames available to a run; a script call takes roughly ten
RECURSION_LIMIT = 10000


def truncated_div(a: int, b: int) -> int:
    """Integer quotient rounded toward zero."""
    q = abs(a) // abs(b)
    return -q if (a < 0) != (b < 0) else q


class Interpreter:
    """Core interpreter that executes a TinyJS AST.

    One instance is meant to run one program: the built-in table is set up
    at construction, ``run`` creates the top-level scope and tears every
    scope down again when the program ends.
    """
    def __init__(self, debug_level: int = 0, debug_file: str = 'debug.txt',
                 stdout: Optional[TextIO] = None, max_call_depth: Optional[int] = None):
        self.arena = EnvironmentArena()
        self.global_env: Optional[Environment] = None
        self.builtins: Dict[str, BuiltinFunction] = {}
        self.line = 0
        self.call_depth = 0
        self.frame: Optional[Environment] = None
        self.max_call_depth = max_call_depth
        self.stdout = stdout
        self.debug_level = debug_level
        self.debug_file = debug_file
        self.debug_fp = open(debug_file, 'w') if debug_level > 0 else None
        self.load_builtins()

    def debug(self, msg: str):
        if self.debug_level > 0:
            if self.debug_fp:
                self.debug_fp.write(msg + '\n')
                self.debug_fp.flush()
            else:
                print(msg)

    def error(self, kind: str, message: str) -> TinyJSError:
        return TinyJSError(kind, message, self.line)

    def load_builtins(self):
        def std_print(args: List[Any]) -> Any:
            out = self.stdout if self.stdout is not None else sys.stdout
            out.write(to_string(args[0]) + '\n')
            return UNDEFINED

        self.builtins['print'] = BuiltinFunction('print', 1, std_print)

    # Public API
    def run(self, program: Union[Program, Sequence[Node]]) -> None:
        body = program.body if isinstance(program, Program) else list(program)
        if self.debug_level > 0 and self.debug_fp is None:
            # a reused interpreter appends to the trace of its earlier runs
            self.debug_fp = open(self.debug_file, 'a')
        recursion_limit = sys.getrecursionlimit()
        sys.setrecursionlimit(max(recursion_limit, RECURSION_LIMIT))
        self.global_env = self.arena.create_root()
        try:
            for node in body:
                self.line = node.line
                signal = self.execute(node, self.global_env)
                if signal is not None:
                    raise self.error(CONTROL_FLOW_ERROR, f"'{signal.keyword}' outside of {self.signal_owner(signal)}")
        except RecursionError:
            raise self.error(RANGE_ERROR, 'maximum call depth exceeded') from None
        finally:
            sys.setrecursionlimit(recursion_limit)
            self.arena.clear()
            self.global_env = None
            if self.debug_fp:
                self.debug_fp.close()
                self.debug_fp = None

    @staticmethod
    def signal_owner(signal: Any) -> str:
        return 'a function' if isinstance(signal, ReturnSignal) else 'a loop'

    # Statements
    def execute_block(self, statements: List[Node], env: Environment) -> Any:
        for stmt in statements:
            signal = self.execute(stmt, env)
            if signal is not None:
                return signal
        return None

    def execute_scoped(self, statements: List[Node], env: Environment, name: str) -> Any:
        scope = env.create_child(name)
        try:
            return self.execute_block(statements, scope)
        finally:
            self.arena.release(scope)

    def execute(self, node: Node, env: Environment) -> Any:
        if node.line:
            self.line = node.line
        if isinstance(node, FunctionDecl):
            env.set(node.name, FunctionValue(node, env))
            if self.debug_level >= 2:
                self.debug(f"define function {node.name}({', '.join(node.params)}) in {env!r}")
            return None
        if isinstance(node, VarDecl):
            value = self.evaluate(node.initializer, env) if node.initializer is not None else UNDEFINED
            self.bind(env, node.name, value)
            if self.debug_level >= 2:
                self.debug(f"declare {node.name}: {type_name(value)} = {value!r}")
            return None
        if isinstance(node, Return):
            value = self.evaluate(node.value, env) if node.value is not None else UNDEFINED
            if isinstance(value, FunctionValue) and self.frame is not None and value.closure.serial >= self.frame.serial:
                # scopes created since the call began are released on the way out
                self.retain(value)
            return ReturnSignal(value)
        if isinstance(node, Break):
            return BREAK
        if isinstance(node, Continue):
            return CONTINUE
        if isinstance(node, Block):
            return self.execute_scoped(node.body, env, 'block')
        if isinstance(node, If):
            cond = self.evaluate(node.condition, env)
            truthy = self.is_truthy(cond)
            if self.debug_level >= 3:
                self.debug(f"line {node.line}: if condition {cond!r} -> {truthy}")
            if truthy:
                return self.execute_scoped(node.then_branch, env, 'if')
            if node.else_branch is not None:
                return self.execute_scoped(node.else_branch, env, 'else')
            return None
        if isinstance(node, While):
            return self.execute_while(node, env)
        if isinstance(node, DoWhile):
            return self.execute_do_while(node, env)
        if isinstance(node, For):
            return self.execute_for(node, env)
        # expression statement
        self.evaluate(node, env)
        return None

    def loop_condition(self, node: Node, env: Environment) -> bool:
        truthy = self.is_truthy(self.evaluate(node, env))
        if self.debug_level >= 3:
            self.debug(f"line {node.line}: loop condition -> {truthy}")
        return truthy

    def execute_while(self, node: While, env: Environment) -> Any:
        while self.loop_condition(node.condition, env):
            signal = self.execute_scoped(node.body, env, 'while')
            if isinstance(signal, BreakSignal):
                break
            if isinstance(signal, ReturnSignal):
                return signal
        return None

    def execute_do_while(self, node: DoWhile, env: Environment) -> Any:
        while True:
            signal = self.execute_scoped(node.body, env, 'do-while')
            if isinstance(signal, BreakSignal):
                break
            if isinstance(signal, ReturnSignal):
                return signal
            if not self.loop_condition(node.condition, env):
                break
        return None

    def execute_for(self, node: For, env: Environment) -> Any:
        # init, condition and step share one scope; each body run gets its own
        loop_env = env.create_child('for')
        try:
            if node.init is not None:
                self.execute(node.init, loop_env)
            while node.condition is None or self.loop_condition(node.condition, loop_env):
                signal = self.execute_scoped(node.body, loop_env, 'for-body')
                if isinstance(signal, BreakSignal):
                    break
                if isinstance(signal, ReturnSignal):
                    return signal
                if node.step is not None:
                    self.evaluate(node.step, loop_env)
            return None
        finally:
            self.arena.release(loop_env)

    # Name resolution
    def find_scope(self, name: str, env: Environment) -> Optional[Environment]:
        scope: Optional[Environment] = env
        while scope is not None:
            if scope.has(name):
                return scope
            scope = scope.parent
        return None

    def outlives(self, scope: Environment, func: FunctionValue) -> bool:
        """Whether ``scope`` can still be alive after ``func``'s closure is released."""
        closure = func.closure
        if self.arena.is_pinned(closure):
            return False
        return self.arena.is_pinned(scope) or scope.serial < closure.serial

    def retain(self, func: FunctionValue):
        # functions stored in a pinned scope must keep their own closures too
        pending = [func.closure]
        while pending:
            for scope in self.arena.pin(pending.pop()):
                for value in scope.values.values():
                    if isinstance(value, FunctionValue) and not self.arena.is_pinned(value.closure):
                        pending.append(value.closure)

    def bind(self, scope: Environment, name: str, value: Any):
        if isinstance(value, FunctionValue) and self.outlives(scope, value):
            self.retain(value)
        scope.set(name, value)

    def lookup(self, name: str, env: Environment) -> Any:
        scope = self.find_scope(name, env)
        if scope is None:
            raise self.error(REFERENCE_ERROR, f'{name} is not defined')
        return scope.get(name)

    def assign(self, node: BinaryOp, env: Environment) -> Any:
        target = node.left
        if not isinstance(target, Variable):
            raise self.error(TYPE_ERROR, 'invalid assignment target')
        value = self.evaluate(node.right, env)
        # an undeclared name becomes a binding of the innermost scope
        scope = self.find_scope(target.name, env) or env
        self.bind(scope, target.name, value)
        if self.debug_level >= 2:
            self.debug(f"assign {target.name} = {value!r} in {scope!r}")
        return value

    # Expressions
    def evaluate(self, node: Node, env: Environment) -> Any:
        if node.line:
            self.line = node.line
        if self.debug_level >= 4:
            self.debug(f"line {self.line}: eval {type(node).__name__}")
        if isinstance(node, IntegerLiteral):
            return wrap_int(node.value)
        if isinstance(node, (FloatLiteral, StringLiteral)):
            return node.value
        if isinstance(node, Variable):
            return self.lookup(node.name, env)
        if isinstance(node, BinaryOp):
            if node.op == '=':
                return self.assign(node, env)
            left = self.evaluate(node.left, env)
            # Short-circuit for && and ||
            if node.op == '&&':
                if not self.is_truthy(left):
                    return 0
                return 1 if self.is_truthy(self.evaluate(node.right, env)) else 0
            if node.op == '||':
                if self.is_truthy(left):
                    return 1
                return 1 if self.is_truthy(self.evaluate(node.right, env)) else 0
            right = self.evaluate(node.right, env)
            self.line = node.line or self.line
            return self.apply_binary_op(node.op, left, right)
        if isinstance(node, UnaryOp):
            operand = self.evaluate(node.operand, env)
            self.line = node.line or self.line
            return self.apply_unary_op(node.op, operand)
        if isinstance(node, Call):
            return self.evaluate_call(node, env)
        raise self.error(TYPE_ERROR, f'{type(node).__name__} cannot be used as an expression')

    def evaluate_call(self, node: Call, env: Environment) -> Any:
        builtin = self.builtins.get(node.callee)
        if builtin is not None:
            if builtin.arity is not None and len(node.args) != builtin.arity:
                raise self.error(ARGUMENT_ERROR, f'{builtin.name} expects {builtin.arity} argument(s), got {len(node.args)}')
            args = [self.evaluate(arg, env) for arg in node.args]
            self.line = node.line or self.line
            return builtin.fn(args)
        func = self.lookup(node.callee, env)
        if not isinstance(func, FunctionValue):
            raise self.error(TYPE_ERROR, f'{node.callee} is not a function ({type_name(func)})')
        if len(node.args) != len(func.params):
            raise self.error(ARGUMENT_ERROR, f'{func.name} expects {len(func.params)} argument(s), got {len(node.args)}')
        args = [self.evaluate(arg, env) for arg in node.args]
        self.line = node.line or self.line
        return self.call_function(func, args)

    def call_function(self, func: FunctionValue, args: List[Any]) -> Any:
        if self.max_call_depth is not None and self.call_depth >= self.max_call_depth:
            raise self.error(RANGE_ERROR, f'maximum call depth of {self.max_call_depth} exceeded in {func.name}')
        caller_line = self.line
        # lexical scoping: the call scope hangs off the declaring scope
        call_env = func.closure.create_child(func.name)
        for param, arg in zip(func.params, args):
            self.bind(call_env, param, arg)
        if self.debug_level >= 1:
            self.debug(f"call {func.name}({', '.join(repr(a) for a in args)}) depth={self.call_depth + 1}")
        self.call_depth += 1
        caller_frame, self.frame = self.frame, call_env
        try:
            signal = self.execute_block(func.body, call_env)
            if signal is not None and not isinstance(signal, ReturnSignal):
                raise self.error(CONTROL_FLOW_ERROR, f"'{signal.keyword}' outside of a loop in function {func.name}")
        finally:
            self.frame = caller_frame
            self.call_depth -= 1
            self.arena.release(call_env)
        result = signal.value if isinstance(signal, ReturnSignal) else UNDEFINED
        if self.debug_level >= 1:
            self.debug(f"return {func.name} -> {result!r}")
        self.line = caller_line
        return result

    def is_truthy(self, value: Any) -> bool:
        if isinstance(value, (int, float)):
            return value != 0
        if isinstance(value, str):
            return len(value) > 0
        if isinstance(value, Undefined):
            return False
        return isinstance(value, FunctionValue)

    def apply_unary_op(self, op: str, operand: Any) -> Any:
        if op == '!':
            return 0 if self.is_truthy(operand) else 1
        if op == '~':
            if not isinstance(operand, int):
                raise self.error(TYPE_ERROR, f'unary ~ expects integer, got {type_name(operand)}')
            return ~operand
        if op in ('-', '+'):
            if not is_number(operand):
                raise self.error(TYPE_ERROR, f'unary {op} expects number, got {type_name(operand)}')
            if op == '+':
                return operand
            return wrap_int(-operand) if isinstance(operand, int) else -operand
        raise self.error(TYPE_ERROR, f'unsupported unary operator {op}')

    def apply_binary_op(self, op: str, a: Any, b: Any) -> Any:
        # String concatenation
        if op == '+' and (isinstance(a, str) or isinstance(b, str)):
            return to_string(a) + to_string(b)
        if op in ARITHMETIC_OPS:
            return self.arithmetic(op, a, b)
        if op in EQUALITY_OPS:
            eq = self.equal_values(a, b)
            return 1 if (eq if op == '==' else not eq) else 0
        if op in RELATIONAL_OPS:
            return self.compare(op, a, b)
        if op in BITWISE_OPS:
            return self.bitwise(op, a, b)
        raise self.error(TYPE_ERROR, f'unknown operator {op}')

    def arithmetic(self, op: str, a: Any, b: Any) -> Any:
        if not (is_number(a) and is_number(b)):
            raise self.error(TYPE_ERROR, f'unsupported operand types for {op}: {type_name(a)} and {type_name(b)}')
        if isinstance(a, float) or isinstance(b, float):
            return self.float_arithmetic(op, float(a), float(b))
        if op == '+':
            return wrap_int(a + b)
        if op == '-':
            return wrap_int(a - b)
        if op == '*':
            return wrap_int(a * b)
        if b == 0:
            what = 'division' if op == '/' else 'modulo'
            raise self.error(ARITHMETIC_ERROR, f'integer {what} by zero')
        q = truncated_div(a, b)
        if op == '/':
            return wrap_int(q)
        return wrap_int(a - b * q)

    @staticmethod
    def float_arithmetic(op: str, a: float, b: float) -> float:
        if op == '+':
            return a + b
        if op == '-':
            return a - b
        if op == '*':
            return a * b
        if op == '/':
            if b == 0.0:
                if a == 0.0 or math.isnan(a):
                    return math.nan
                return math.copysign(math.inf, a) * math.copysign(1.0, b)
            return a / b
        # C fmod: sign follows the dividend
        if b == 0.0 or math.isinf(a) or math.isnan(a) or math.isnan(b):
            return math.nan
        return math.fmod(a, b)

    def compare(self, op: str, a: Any, b: Any) -> int:
        if not ((is_number(a) and is_number(b)) or (isinstance(a, str) and isinstance(b, str))):
            raise self.error(TYPE_ERROR, f'cannot compare {type_name(a)} and {type_name(b)} with {op}')
        if op == '<':
            result = a < b
        elif op == '>':
            result = a > b
        elif op == '<=':
            result = a <= b
        else:
            result = a >= b
        return 1 if result else 0

    def equal_values(self, a: Any, b: Any) -> bool:
        if is_number(a) and is_number(b):
            return a == b
        if isinstance(a, str) and isinstance(b, str):
            return a == b
        if isinstance(a, Undefined) or isinstance(b, Undefined):
            return a is b
        if isinstance(a, FunctionValue) and isinstance(b, FunctionValue):
            return a is b
        raise self.error(TYPE_ERROR, f'cannot compare {type_name(a)} and {type_name(b)} for equality')

    def bitwise(self, op: str, a: Any, b: Any) -> int:
        if not (isinstance(a, int) and isinstance(b, int)):
            raise self.error(TYPE_ERROR, f'bitwise {op} expects integers, got {type_name(a)} and {type_name(b)}')
        if op == '&':
            return a & b
        if op == '|':
            return a | b
        if op == '^':
            return a ^ b
        if not 0 <= b < 64:
            raise self.error(ARITHMETIC_ERROR, f'shift count {b} out of range 0..63')
        if op == '<<':
            return wrap_int(a << b)
        return a >> b


def run_program(source: str, debug_level: int = 0, stdout: Optional[TextIO] = None) -> None:
    """Convenience function to parse and run a TinyJS program from source."""
    program = parse_program(source)
    interpreter = Interpreter(debug_level=debug_level, stdout=stdout)
    interpreter.run(program)


def run_file(file_path: str, debug_level: int = 0) -> None:
    """Parse and run a TinyJS source file."""
    with open(file_path, 'r', encoding='utf-8') as f:
        source = f.read()
    run_program(source, debug_level=debug_level)
