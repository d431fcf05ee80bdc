"""Tree-walking interpreter for the xmas language.

The interpreter evaluates a parsed :class:`~xmas.ast.Program` against one
:class:`~xmas.environment.Environment` and produces a single value: the
top-level `_` if the program set it, otherwise the value of the last bare
expression statement, otherwise an empty array.

Every runtime fault is raised as an :class:`XmasRuntimeError`; scoped state
(parameters, loop variables, return slots) is restored on the way out even
when an error propagates.
"""

from __future__ import annotations

import sys
from typing import Any, Callable, List, Optional

from .ast import (
    Program, Assign, AssignOp, Return, FuncDef, ExprStmt,
    Literal, Identifier, Input, ReturnValue, ArrayLit, RangeLit,
    UnaryOp, BinaryOp, Pipe, Call, IndexSingle, IndexRange, Index,
    Builtin, MethodCall, Block, Node, format_expr,
)
from .builtin_function import BUILTINS
from .environment import Environment, parse_input
from .errors import XmasRuntimeError
from .parser import parse_program
from .types import (
    Array1D, Array2D, apply_binary, debug_repr, empty_array, is_number,
    is_truthy, to_number, type_name,
)

PIPE_TEMP = '__pipe_temp__'

# One xmas call takes several Python frames.
RECURSION_LIMIT = 5000


def raise_recursion_limit():
    if sys.getrecursionlimit() < RECURSION_LIMIT:
        sys.setrecursionlimit(RECURSION_LIMIT)


def _stderr_trace(msg: str):
    print(msg, file=sys.stderr)


class Interpreter:
    """Core interpreter that executes an xmas AST."""
    def __init__(self, debug: bool = False, trace: Optional[Callable[[str], None]] = None):
        self.env = Environment()
        self.debug_enabled = debug
        self.trace = trace or _stderr_trace
        self.debug_indent = 0

    def debug(self, msg: str):
        if self.debug_enabled:
            self.trace('DEBUG: ' + ' ' * self.debug_indent + msg)

    def set_input(self, text: str):
        self.env.input = parse_input(text)

    @property
    def variables(self):
        return self.env.variables

    # Public API
    def interpret(self, program: Program) -> Any:
        raise_recursion_limit()
        last_value: Any = empty_array()
        for stmt in program.body:
            if isinstance(stmt, ExprStmt):
                last_value = self.evaluate(stmt.expr)
            else:
                self.execute(stmt)
        if self.env.return_value is not None:
            return self.env.return_value
        return last_value

    def execute(self, node: Node):
        env = self.env
        if isinstance(node, Assign):
            value = self.evaluate(node.value)
            if self.debug_enabled:
                old = env.variables.get(node.name)
                self.debug(f'{node.name}: {self._show(old)} → {debug_repr(value)}')
            env.set(node.name, value)
            return
        if isinstance(node, AssignOp):
            self.execute_assign_op(node)
            return
        if isinstance(node, Return):
            value = self.evaluate(node.value)
            env.return_value = value
            if node.name is not None:
                env.named_returns[node.name] = value
            return
        if isinstance(node, FuncDef):
            env.define_function(node.name, node.params, node.body)
            return
        if isinstance(node, ExprStmt):
            self.evaluate(node.expr)
            return
        raise XmasRuntimeError(f'Unexpected statement {type(node).__name__}')

    def execute_assign_op(self, node: AssignOp):
        env = self.env
        name = node.name
        if name == '_':
            current = env.get_return()
        elif name.startswith('_'):
            # a named return falls back to `_` until it has its own value
            key = name[1:]
            current = env.named_returns.get(key, env.return_value)
            if current is None:
                raise XmasRuntimeError(f'No return value set for {name}')
        else:
            current = env.get(name)

        new_value = apply_binary(node.op, current, self.evaluate(node.value))

        if name == '_':
            old = env.return_value
            env.return_value = new_value
        elif name.startswith('_'):
            old = env.named_returns.get(name[1:])
            env.named_returns[name[1:]] = new_value
        else:
            old = env.variables.get(name)
            env.set(name, new_value)
        if self.debug_enabled:
            self.debug(f'{name} {node.op}=: {self._show(old)} → {debug_repr(new_value)}')

    @staticmethod
    def _show(value: Any) -> str:
        return 'undefined' if value is None else debug_repr(value)

    def evaluate(self, node: Node) -> Any:
        env = self.env
        if isinstance(node, Literal):
            return node.value
        if isinstance(node, Identifier):
            if node.name.startswith('_') and len(node.name) > 1:
                return env.get_named_return(node.name[1:])
            return env.get(node.name)
        if isinstance(node, Input):
            return env.input
        if isinstance(node, ReturnValue):
            return env.get_return()
        if isinstance(node, ArrayLit):
            return Array1D([self.evaluate(el) for el in node.elements])
        if isinstance(node, RangeLit):
            start = self.evaluate(node.start)
            end = self.evaluate(node.end)
            if not is_number(start):
                raise XmasRuntimeError('Range start must be a number')
            if not is_number(end):
                raise XmasRuntimeError('Range end must be a number')
            step = 1 if start <= end else -1
            return Array1D(list(range(start, end + step, step)))
        if isinstance(node, UnaryOp):
            value = self.evaluate(node.operand)
            if node.op == '~':
                return to_number(value)
            return not is_truthy(value)
        if isinstance(node, BinaryOp):
            left = self.evaluate(node.left)
            right = self.evaluate(node.right)
            return apply_binary(node.op, left, right)
        if isinstance(node, Pipe):
            # The left value is only visible to the right side through the
            # temporary variable; it is not passed as an argument.
            left = self.evaluate(node.left)
            with env.shadow({PIPE_TEMP: left}):
                return self.evaluate(node.right)
        if isinstance(node, Call):
            return self.call_function(node.name, node.args)
        if isinstance(node, Index):
            return self.evaluate_index(self.evaluate(node.target), node.indices)
        if isinstance(node, Builtin):
            return self.call_builtin(node.name, node.args)
        if isinstance(node, MethodCall):
            return self.call_method(self.evaluate(node.target), node.method, node.args)
        if isinstance(node, Block):
            with env.return_scope():
                for stmt in node.statements:
                    self.execute(stmt)
                result = env.return_value
            return result if result is not None else empty_array()
        raise XmasRuntimeError(f'Unexpected expression {type(node).__name__}')

    # Indexing

    def to_index(self, value: Any) -> int:
        if not is_number(value):
            raise XmasRuntimeError('Array index must be a number')
        if value < 0:
            raise XmasRuntimeError('Array index must be non-negative integer')
        return value

    def range_bounds(self, index: IndexRange):
        start = self.to_index(self.evaluate(index.start)) if index.start is not None else 0
        end = self.to_index(self.evaluate(index.end)) if index.end is not None else None
        return start, end

    def evaluate_index(self, value: Any, indices: List[Node]) -> Any:
        current = value
        i = 0
        while i < len(indices):
            index = indices[i]
            # grid[rows, col]: a row range followed by a column picks one
            # column out of every selected row
            if (isinstance(current, Array2D) and isinstance(index, IndexRange)
                    and i + 1 < len(indices) and isinstance(indices[i + 1], IndexSingle)):
                col = self.to_index(self.evaluate(indices[i + 1].expr))
                start, end = self.range_bounds(index)
                rows = self._clamped(current.rows, start, end)
                current = Array1D([row[col] for row in rows if col < len(row)])
                i += 2
                continue
            if isinstance(index, IndexSingle):
                current = self.index_value(current, self.to_index(self.evaluate(index.expr)))
            else:
                start, end = self.range_bounds(index)
                current = self.slice_value(current, start, end)
            i += 1
        return current

    @staticmethod
    def _clamped(seq, start: int, end: Optional[int]):
        length = len(seq)
        end = length if end is None else min(end, length)
        return seq[min(start, length):end]

    def index_value(self, value: Any, index: int) -> Any:
        if isinstance(value, Array1D):
            if index >= len(value.items):
                raise XmasRuntimeError(f'Index {index} out of bounds (array length: {len(value.items)})')
            return value.items[index]
        if isinstance(value, Array2D):
            if index >= len(value.rows):
                raise XmasRuntimeError(f'Index {index} out of bounds')
            return Array1D(list(value.rows[index]))
        if isinstance(value, str):
            if index >= len(value):
                raise XmasRuntimeError(f'Index {index} out of bounds')
            return value[index]
        raise XmasRuntimeError(f'Cannot index non-array value: {type_name(value)}')

    def slice_value(self, value: Any, start: int, end: Optional[int]) -> Any:
        if isinstance(value, Array1D):
            return Array1D(self._clamped(value.items, start, end))
        if isinstance(value, Array2D):
            return Array2D(self._clamped(value.rows, start, end))
        if isinstance(value, str):
            return self._clamped(value, start, end)
        raise XmasRuntimeError('Cannot slice non-array value')

    # Calls

    def call_function(self, name: str, args: List[Node]) -> Any:
        env = self.env
        func = env.get_function(name)
        if len(args) != len(func.params):
            raise XmasRuntimeError(
                f'Function {name} expects {len(func.params)} arguments, got {len(args)}')
        values = [self.evaluate(arg) for arg in args]
        with env.shadow(dict(zip(func.params, values))), env.return_scope():
            try:
                result = self.evaluate(func.body)
            except RecursionError:
                raise XmasRuntimeError('Maximum recursion depth exceeded') from None
            returned = env.return_value
        # `_` wins over the value of the body expression
        return result if returned is None else returned

    def call_builtin(self, name: str, args: List[Node]) -> Any:
        if name == 'if':
            return self.builtin_if(args)
        if name == 'for':
            return self.builtin_for(args)
        if name not in BUILTINS:
            raise XmasRuntimeError(f'Unknown builtin function: {name}')
        return BUILTINS[name]([self.evaluate(arg) for arg in args])

    def builtin_if(self, args: List[Node]) -> Any:
        if len(args) not in (2, 3):
            raise XmasRuntimeError('if requires 2 or 3 arguments: condition, trueBlock, [falseBlock]')
        condition = is_truthy(self.evaluate(args[0]))
        if self.debug_enabled:
            self.debug(f"if {format_expr(args[0])}: {'true' if condition else 'false'}")
        self.debug_indent += 2
        try:
            if condition:
                return self.evaluate(args[1])
            if len(args) == 3:
                return self.evaluate(args[2])
            return empty_array()
        finally:
            self.debug_indent -= 2

    def builtin_for(self, args: List[Node]) -> Any:
        if len(args) not in (3, 4):
            raise XmasRuntimeError('for requires 3 or 4 arguments: variable, array, block, [initialValue]')
        if not isinstance(args[0], Identifier):
            raise XmasRuntimeError('First argument to for must be variable name')
        var_name = args[0].name
        array = self.evaluate(args[1])
        if isinstance(array, Array2D):
            raise XmasRuntimeError('for loop requires 1D array')
        if not isinstance(array, Array1D):
            raise XmasRuntimeError('for loop requires array')

        has_initial = len(args) == 4
        initial = self.evaluate(args[3]) if has_initial else None
        body = args[2]
        env = self.env
        with env.return_scope(initial):
            for element in array.items:
                if self.debug_enabled:
                    self.debug(f'for {var_name}: {debug_repr(element)}')
                self.debug_indent += 2
                try:
                    with env.shadow({var_name: element}):
                        if isinstance(body, Block):
                            # statements run in the loop's return scope so
                            # that `_` accumulates across iterations
                            for stmt in body.statements:
                                self.execute(stmt)
                        else:
                            self.evaluate(body)
                finally:
                    self.debug_indent -= 2
            result = env.return_value
        if not has_initial:
            return empty_array()
        return result if result is not None else initial

    def call_method(self, target: Any, method: str, args: List[Node]) -> Any:
        if method == 'rows':
            if args:
                raise XmasRuntimeError('rows() method takes no arguments')
            if not isinstance(target, Array2D):
                raise XmasRuntimeError('rows() method only works on 2D arrays')
            return Array1D([Array1D(list(row)) for row in target.rows])
        raise XmasRuntimeError(f'Unknown method: {method}')


def run_program(source: str, input_text: Optional[str] = None, debug: bool = False,
                trace: Optional[Callable[[str], None]] = None) -> Any:
    """Convenience function to parse and run an xmas program from source."""
    raise_recursion_limit()
    program = parse_program(source)
    interpreter = Interpreter(debug=debug, trace=trace)
    if input_text is not None:
        interpreter.set_input(input_text)
    return interpreter.interpret(program)
