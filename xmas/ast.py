"""Abstract Syntax Tree (AST) definitions for the xmas language.

The parser builds these nodes and the interpreter walks them; nothing
modifies a node once it has been built. A program is a flat list of
statements; blocks, function bodies and loop bodies are expressions.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Optional, Union


@dataclass
class Node:
    """Base class for all AST nodes."""
    pass


@dataclass
class Program(Node):
    body: List[Node]


# Statements

@dataclass
class Assign(Node):
    name: str
    value: Node


@dataclass
class AssignOp(Node):
    name: str  # plain variable, `_` or `_name`
    op: str    # the arithmetic operator, without the `=`
    value: Node


@dataclass
class Return(Node):
    name: Optional[str]  # None for `_`, `name` for `_name`
    value: Node


@dataclass
class FuncDef(Node):
    name: str
    params: List[str]
    body: Node


@dataclass
class ExprStmt(Node):
    expr: Node


# Expressions

@dataclass
class Literal(Node):
    value: Any
    literal_type: str  # 'Number', 'Boolean', 'String'


@dataclass
class Identifier(Node):
    name: str


@dataclass
class Input(Node):
    pass


@dataclass
class ReturnValue(Node):
    pass


@dataclass
class ArrayLit(Node):
    elements: List[Node]


@dataclass
class RangeLit(Node):
    start: Node
    end: Node


@dataclass
class UnaryOp(Node):
    op: str
    operand: Node


@dataclass
class BinaryOp(Node):
    op: str
    left: Node
    right: Node


@dataclass
class Pipe(Node):
    left: Node
    right: Node


@dataclass
class Call(Node):
    name: str
    args: List[Node]


@dataclass
class IndexSingle(Node):
    expr: Node


@dataclass
class IndexRange(Node):
    start: Optional[Node]
    end: Optional[Node]


@dataclass
class Index(Node):
    target: Node
    indices: List[Union[IndexSingle, IndexRange]]


@dataclass
class Builtin(Node):
    name: str  # if, for, len, max, min, floor, ceil
    args: List[Node]


@dataclass
class MethodCall(Node):
    target: Node
    method: str
    args: List[Node]


@dataclass
class Block(Node):
    statements: List[Node]


def _format_args(args: List[Node]) -> str:
    return ', '.join(format_expr(a) for a in args)


def format_expr(node: Node) -> str:
    """Render an expression compactly, for the debug trace."""
    if isinstance(node, Literal):
        if node.literal_type == 'String':
            return f'"{node.value}"'
        if node.literal_type == 'Boolean':
            return 'true' if node.value else 'false'
        return str(node.value)
    if isinstance(node, Identifier):
        return node.name
    if isinstance(node, Input):
        return 'input'
    if isinstance(node, ReturnValue):
        return '_'
    if isinstance(node, ArrayLit):
        return f'[{_format_args(node.elements)}]'
    if isinstance(node, RangeLit):
        return f'[{format_expr(node.start)}..{format_expr(node.end)}]'
    if isinstance(node, UnaryOp):
        return f'{node.op}{format_expr(node.operand)}'
    if isinstance(node, BinaryOp):
        return f'({format_expr(node.left)} {node.op} {format_expr(node.right)})'
    if isinstance(node, Pipe):
        return f'{format_expr(node.left)} |> {format_expr(node.right)}'
    if isinstance(node, Call):
        return f'{node.name}({_format_args(node.args)})'
    if isinstance(node, Index):
        parts = []
        for index in node.indices:
            if isinstance(index, IndexSingle):
                parts.append(format_expr(index.expr))
            else:
                start = format_expr(index.start) if index.start is not None else ''
                end = format_expr(index.end) if index.end is not None else ''
                parts.append(f'{start}..{end}')
        return f"{format_expr(node.target)}[{', '.join(parts)}]"
    if isinstance(node, Builtin):
        if node.name == 'for' and node.args:
            rest = _format_args(node.args[1:])
            return f'for({format_expr(node.args[0])} of {rest})'
        return f'{node.name}({_format_args(node.args)})'
    if isinstance(node, MethodCall):
        return f'{format_expr(node.target)}.{node.method}({_format_args(node.args)})'
    if isinstance(node, Block):
        return '{ ... }'
    return type(node).__name__
