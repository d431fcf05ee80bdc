"""JSON serialization/deserialization for the xmas AST.

This module converts between AST dataclasses and plain Python dict/list
structures suitable for JSON encoding. Every node is tagged with its class
name under ``"type"``, and the round-trip is exact for all node types.
"""

from __future__ import annotations

from typing import Any

from .ast import (
    Program,
    Assign,
    AssignOp,
    Return,
    FuncDef,
    ExprStmt,
    Literal,
    Identifier,
    Input,
    ReturnValue,
    ArrayLit,
    RangeLit,
    UnaryOp,
    BinaryOp,
    Pipe,
    Call,
    IndexSingle,
    IndexRange,
    Index,
    Builtin,
    MethodCall,
    Block,
)


def _list(nodes) -> list:
    return [ast_to_obj(n) for n in nodes]


def ast_to_obj(node: Any) -> Any:
    # Primitives
    if node is None:
        return None
    if isinstance(node, (int, str, bool)):
        return node

    if isinstance(node, Program):
        return {"type": "Program", "body": _list(node.body)}
    if isinstance(node, Assign):
        return {"type": "Assign", "name": node.name, "value": ast_to_obj(node.value)}
    if isinstance(node, AssignOp):
        return {"type": "AssignOp", "name": node.name, "op": node.op, "value": ast_to_obj(node.value)}
    if isinstance(node, Return):
        return {"type": "Return", "name": node.name, "value": ast_to_obj(node.value)}
    if isinstance(node, FuncDef):
        return {"type": "FuncDef", "name": node.name, "params": list(node.params), "body": ast_to_obj(node.body)}
    if isinstance(node, ExprStmt):
        return {"type": "ExprStmt", "expr": ast_to_obj(node.expr)}
    if isinstance(node, Literal):
        return {"type": "Literal", "value": node.value, "literal_type": node.literal_type}
    if isinstance(node, Identifier):
        return {"type": "Identifier", "name": node.name}
    if isinstance(node, Input):
        return {"type": "Input"}
    if isinstance(node, ReturnValue):
        return {"type": "ReturnValue"}
    if isinstance(node, ArrayLit):
        return {"type": "ArrayLit", "elements": _list(node.elements)}
    if isinstance(node, RangeLit):
        return {"type": "RangeLit", "start": ast_to_obj(node.start), "end": ast_to_obj(node.end)}
    if isinstance(node, UnaryOp):
        return {"type": "UnaryOp", "op": node.op, "operand": ast_to_obj(node.operand)}
    if isinstance(node, BinaryOp):
        return {"type": "BinaryOp", "op": node.op, "left": ast_to_obj(node.left), "right": ast_to_obj(node.right)}
    if isinstance(node, Pipe):
        return {"type": "Pipe", "left": ast_to_obj(node.left), "right": ast_to_obj(node.right)}
    if isinstance(node, Call):
        return {"type": "Call", "name": node.name, "args": _list(node.args)}
    if isinstance(node, IndexSingle):
        return {"type": "IndexSingle", "expr": ast_to_obj(node.expr)}
    if isinstance(node, IndexRange):
        return {"type": "IndexRange", "start": ast_to_obj(node.start), "end": ast_to_obj(node.end)}
    if isinstance(node, Index):
        return {"type": "Index", "target": ast_to_obj(node.target), "indices": _list(node.indices)}
    if isinstance(node, Builtin):
        return {"type": "Builtin", "name": node.name, "args": _list(node.args)}
    if isinstance(node, MethodCall):
        return {
            "type": "MethodCall",
            "target": ast_to_obj(node.target),
            "method": node.method,
            "args": _list(node.args),
        }
    if isinstance(node, Block):
        return {"type": "Block", "statements": _list(node.statements)}

    raise TypeError(f"Unsupported node for serialization: {type(node).__name__}")


def _nodes(objs) -> list:
    return [ast_from_obj(o) for o in objs]


def ast_from_obj(obj: Any) -> Any:
    if obj is None or isinstance(obj, (int, str, bool)):
        return obj
    if not isinstance(obj, dict):
        raise TypeError("Invalid AST object")
    t = obj.get("type")
    if t == "Program":
        return Program(body=_nodes(obj["body"]))
    if t == "Assign":
        return Assign(name=obj["name"], value=ast_from_obj(obj["value"]))
    if t == "AssignOp":
        return AssignOp(name=obj["name"], op=obj["op"], value=ast_from_obj(obj["value"]))
    if t == "Return":
        return Return(name=obj.get("name"), value=ast_from_obj(obj["value"]))
    if t == "FuncDef":
        return FuncDef(name=obj["name"], params=list(obj["params"]), body=ast_from_obj(obj["body"]))
    if t == "ExprStmt":
        return ExprStmt(expr=ast_from_obj(obj["expr"]))
    if t == "Literal":
        return Literal(value=obj["value"], literal_type=obj["literal_type"])
    if t == "Identifier":
        return Identifier(name=obj["name"])
    if t == "Input":
        return Input()
    if t == "ReturnValue":
        return ReturnValue()
    if t == "ArrayLit":
        return ArrayLit(elements=_nodes(obj["elements"]))
    if t == "RangeLit":
        return RangeLit(start=ast_from_obj(obj["start"]), end=ast_from_obj(obj["end"]))
    if t == "UnaryOp":
        return UnaryOp(op=obj["op"], operand=ast_from_obj(obj["operand"]))
    if t == "BinaryOp":
        return BinaryOp(op=obj["op"], left=ast_from_obj(obj["left"]), right=ast_from_obj(obj["right"]))
    if t == "Pipe":
        return Pipe(left=ast_from_obj(obj["left"]), right=ast_from_obj(obj["right"]))
    if t == "Call":
        return Call(name=obj["name"], args=_nodes(obj["args"]))
    if t == "IndexSingle":
        return IndexSingle(expr=ast_from_obj(obj["expr"]))
    if t == "IndexRange":
        return IndexRange(start=ast_from_obj(obj.get("start")), end=ast_from_obj(obj.get("end")))
    if t == "Index":
        return Index(target=ast_from_obj(obj["target"]), indices=_nodes(obj["indices"]))
    if t == "Builtin":
        return Builtin(name=obj["name"], args=_nodes(obj["args"]))
    if t == "MethodCall":
        return MethodCall(target=ast_from_obj(obj["target"]), method=obj["method"], args=_nodes(obj["args"]))
    if t == "Block":
        return Block(statements=_nodes(obj["statements"]))

    raise ValueError(f"Unknown AST node type: {t}")
