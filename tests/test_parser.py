import pytest

from xmas.ast import (
    ArrayLit, Assign, AssignOp, BinaryOp, Block, Builtin, Call, ExprStmt, FuncDef,
    Identifier, Index, IndexRange, IndexSingle, Input, Literal, MethodCall, Pipe,
    RangeLit, Return, ReturnValue, UnaryOp, format_expr,
)
from xmas.errors import XmasSyntaxError
from xmas.parser import parse_program


def num(n):
    return Literal(n, 'Number')


def expr(source):
    (stmt,) = parse_program(source).body
    assert isinstance(stmt, ExprStmt)
    return stmt.expr


def test_precedence():
    assert expr('1 + 2 * 3') == BinaryOp('+', num(1), BinaryOp('*', num(2), num(3)))
    assert expr('1 < 2 == true') == BinaryOp('==', BinaryOp('<', num(1), num(2)), Literal(True, 'Boolean'))
    assert expr('a || b && c') == BinaryOp('||', Identifier('a'), BinaryOp('&&', Identifier('b'), Identifier('c')))


def test_left_associative():
    assert expr('10 - 4 - 3') == BinaryOp('-', BinaryOp('-', num(10), num(4)), num(3))


def test_unary_binds_tighter_than_binary():
    assert expr('~a + 1') == BinaryOp('+', UnaryOp('~', Identifier('a')), num(1))
    assert expr('!!x') == UnaryOp('!', UnaryOp('!', Identifier('x')))
    assert expr('~line[1..]') == UnaryOp('~', Index(Identifier('line'), [IndexRange(num(1), None)]))


def test_pipe_is_lowest():
    assert expr('a + 1 |> f(b)') == Pipe(BinaryOp('+', Identifier('a'), num(1)), Call('f', [Identifier('b')]))


def test_function_definition_vs_call():
    (stmt,) = parse_program('add(a, b) = a + b').body
    assert stmt == FuncDef('add', ['a', 'b'], BinaryOp('+', Identifier('a'), Identifier('b')))
    assert expr('add(1, 2)') == Call('add', [num(1), num(2)])
    assert expr('f(g(1)) == 3') == BinaryOp('==', Call('f', [Call('g', [num(1)])]), num(3))


def test_assignment_forms():
    body = parse_program('x = 1\nx += 2\n_ = 3\n_best = 4\n_ *= 2\n_best -= 1').body
    assert body == [
        Assign('x', num(1)),
        AssignOp('x', '+', num(2)),
        Return(None, num(3)),
        Return('best', num(4)),
        AssignOp('_', '*', num(2)),
        AssignOp('_best', '-', num(1)),
    ]


def test_identifier_statement_rewinds_to_expression():
    assert parse_program('x + 1').body == [ExprStmt(BinaryOp('+', Identifier('x'), num(1)))]
    assert parse_program('_').body == [ExprStmt(ReturnValue())]


def test_range_and_array_literals():
    assert expr('[1..3]') == RangeLit(num(1), num(3))
    assert expr('[a + 1..b]') == RangeLit(BinaryOp('+', Identifier('a'), num(1)), Identifier('b'))
    assert expr('[1, 2]') == ArrayLit([num(1), num(2)])
    assert expr('[]') == ArrayLit([])
    assert expr('[[1], [2..3]]') == ArrayLit([ArrayLit([num(1)]), RangeLit(num(2), num(3))])


def test_index_groups():
    assert expr('g[1.., 2]') == Index(Identifier('g'), [IndexRange(num(1), None), IndexSingle(num(2))])
    assert expr('a[..3]') == Index(Identifier('a'), [IndexRange(None, num(3))])
    assert expr('a[..]') == Index(Identifier('a'), [IndexRange(None, None)])
    assert expr('a[1][2]') == Index(Index(Identifier('a'), [IndexSingle(num(1))]), [IndexSingle(num(2))])


def test_method_call():
    assert expr('input.rows()') == MethodCall(Input(), 'rows', [])
    assert expr('input.rows()[0]') == Index(MethodCall(Input(), 'rows', []), [IndexSingle(num(0))])


def test_builtins():
    assert expr('if(x, 1)') == Builtin('if', [Identifier('x'), num(1)])
    assert expr('if(x, 1, 2)') == Builtin('if', [Identifier('x'), num(1), num(2)])
    assert expr('for(n of xs, { _ += n }, 0)') == Builtin('for', [
        Identifier('n'), Identifier('xs'), Block([AssignOp('_', '+', Identifier('n'))]), num(0),
    ])
    assert expr('max(1, 2)') == Builtin('max', [num(1), num(2)])
    assert expr('len(xs)') == Builtin('len', [Identifier('xs')])


def test_block_skips_newlines_and_comments():
    source = 'r = {\n  // set up\n  x = 1\n\n  _ = x\n}\n'
    (stmt,) = parse_program(source).body
    assert stmt == Assign('r', Block([Assign('x', num(1)), Return(None, Identifier('x'))]))


def test_newlines_inside_arguments():
    source = 'max(\n  1,\n  2\n)'
    assert expr(source) == Builtin('max', [num(1), num(2)])
    assert expr('1 +\n 2') == BinaryOp('+', num(1), num(2))


def test_statements_on_separate_lines():
    body = parse_program('a = 1\nb = 2\n// done\na + b\n').body
    assert len(body) == 3


def test_wrong_builtin_arity_is_syntax_error():
    with pytest.raises(XmasSyntaxError) as info:
        parse_program('len(1, 2)')
    assert info.value.message == 'len expects 1 argument, got 2'
    assert (info.value.line, info.value.column) == (1, 1)


def test_error_position_and_caret():
    with pytest.raises(XmasSyntaxError) as info:
        parse_program('x = )')
    err = info.value
    assert err.message == "Unexpected token ')'"
    assert (err.line, err.column) == (1, 5)
    assert str(err) == "Syntax error at line 1, column 5: Unexpected token ')'\n    x = )\n        ^"


def test_error_at_end_of_input_points_past_last_token():
    with pytest.raises(XmasSyntaxError) as info:
        parse_program('a = 1\nb = (2')
    err = info.value
    assert err.message == "Expected ')' after expression"
    assert (err.line, err.column) == (2, 7)
    assert err.source_line == 'b = (2'


def test_unclosed_block():
    with pytest.raises(XmasSyntaxError) as info:
        parse_program('x = { y = 1')
    assert info.value.message == "Expected '}' after block"


def test_single_ampersand_is_reported():
    with pytest.raises(XmasSyntaxError) as info:
        parse_program('a = 1 & 2')
    assert info.value.column == 7


def test_format_expr():
    assert format_expr(expr('x % 2 == 0')) == '((x % 2) == 0)'
    assert format_expr(expr('f(a, "s")')) == 'f(a, "s")'
    assert format_expr(expr('g[1.., 2]')) == 'g[1.., 2]'
    assert format_expr(expr('if(a, { _ = 1 })')) == 'if(a, { ... })'


def test_deeply_nested_brackets_parse_once():
    depth = 40
    node = expr('[' * depth + '1' + ']' * depth)
    for _ in range(depth):
        assert isinstance(node, ArrayLit)
        (node,) = node.elements
    assert node == num(1)


def test_nested_ranges_inside_arrays():
    assert expr('[[1..2], [3]]') == ArrayLit([RangeLit(num(1), num(2)), ArrayLit([num(3)])])
    assert expr('[\n  1,\n  2\n]') == ArrayLit([num(1), num(2)])


def test_range_takes_exactly_two_bounds():
    with pytest.raises(XmasSyntaxError) as info:
        parse_program('[1..2, 3]')
    assert info.value.message == "Expected ']' after range"
    with pytest.raises(XmasSyntaxError) as info:
        parse_program('[1, 2..3]')
    assert info.value.message == "Expected ']' after array elements"
