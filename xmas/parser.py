"""Parser for the xmas language.

A hand-written recursive-descent parser over the tokens produced by
:mod:`xmas.lexer`. Binary operators are parsed by precedence, lowest
first::

    |>   ||   &&   < > <= >= ==   + -   * / %   ~ !   postfix   primary

Three spots in the grammar are ambiguous and need to look ahead:

* ``name(...)`` at the start of a statement is a function definition only
  if an ``=`` follows the balanced parentheses.
* ``name``/``_``/``_name`` at the start of a statement is an assignment
  only if an assignment operator follows; otherwise the statement is
  re-read as an expression.
* ``[`` opens a range literal when its first element is followed by
  ``..``, and an array literal otherwise.

The first syntax error aborts parsing with an :class:`XmasSyntaxError`.
"""

from __future__ import annotations

from typing import Callable, Dict, List, Optional

from lark import Token

from .ast import (
    Program, Assign, AssignOp, Return, FuncDef, ExprStmt,
    Literal, Identifier, Input, ReturnValue, ArrayLit, RangeLit,
    UnaryOp, BinaryOp, Pipe, Call, IndexSingle, IndexRange, Index,
    Builtin, MethodCall, Block, Node,
)
from .builtin_function import BUILTINS
from .errors import XmasSyntaxError
from .lexer import tokenize


COMPOUND_ASSIGN = {
    'PLUSEQUAL': '+',
    'MINUSEQUAL': '-',
    'STAREQUAL': '*',
    'SLASHEQUAL': '/',
    'PERCENTEQUAL': '%',
}

COMPARISON = {
    'LESSTHAN': '<',
    'MORETHAN': '>',
    'LESSEQUAL': '<=',
    'MOREEQUAL': '>=',
    'EQEQUAL': '==',
}

ADDITIVE = {'PLUS': '+', 'MINUS': '-'}

MULTIPLICATIVE = {'STAR': '*', 'SLASH': '/', 'PERCENT': '%'}

UNARY = {'TILDE': '~', 'BANG': '!'}


class Parser:
    def __init__(self, tokens: List[Token], source: str = ''):
        self.tokens = tokens
        self.source_lines = source.split('\n')
        self.pos = 0

    # Token cursor

    def peek(self, offset: int = 0) -> Optional[Token]:
        index = self.pos + offset
        if index < len(self.tokens):
            return self.tokens[index]
        return None

    def at_end(self) -> bool:
        return self.pos >= len(self.tokens)

    def check(self, *types: str) -> bool:
        token = self.peek()
        return token is not None and token.type in types

    def check_next(self, *types: str) -> bool:
        token = self.peek(1)
        return token is not None and token.type in types

    def advance(self) -> Token:
        token = self.tokens[self.pos]
        self.pos += 1
        return token

    def match(self, *types: str) -> Optional[Token]:
        if self.check(*types):
            return self.advance()
        return None

    def consume(self, type_: str, message: str) -> Token:
        if self.check(type_):
            return self.advance()
        raise self.error(message)

    def skip_newlines(self):
        while self.check('NEWLINE', 'COMMENT'):
            self.pos += 1

    def error(self, message: str, token: Optional[Token] = None) -> XmasSyntaxError:
        if token is None:
            token = self.peek()
        if token is not None:
            line, column = token.line, token.column
        elif self.tokens:
            last = self.tokens[-1]
            line, column = last.end_line, last.end_column
        else:
            line, column = 1, 1
        source_line = self.source_lines[line - 1] if 0 < line <= len(self.source_lines) else None
        return XmasSyntaxError(message, line, column, source_line)

    # Statements

    def parse(self) -> Program:
        statements: List[Node] = []
        self.skip_newlines()
        while not self.at_end():
            statements.append(self.parse_statement())
            self.skip_newlines()
        return Program(statements)

    def parse_statement(self) -> Node:
        self.skip_newlines()
        if self.check('IDENT') and self.check_next('LPAR') and self.is_function_definition():
            return self.parse_function()

        if self.check('IDENT', 'UNDERSCORE'):
            start = self.pos
            name = self.advance().value
            op_token = self.match(*COMPOUND_ASSIGN)
            if op_token is not None:
                return AssignOp(name, COMPOUND_ASSIGN[op_token.type], self.parse_expression())
            if self.match('EQUAL'):
                value = self.parse_expression()
                if name == '_':
                    return Return(None, value)
                if name.startswith('_'):
                    return Return(name[1:], value)
                return Assign(name, value)
            self.pos = start

        return ExprStmt(self.parse_expression())

    def is_function_definition(self) -> bool:
        # Skip `name (` and the balanced parameter list, then look for `=`.
        index = self.pos + 2
        depth = 1
        while depth > 0 and index < len(self.tokens):
            type_ = self.tokens[index].type
            if type_ == 'LPAR':
                depth += 1
            elif type_ == 'RPAR':
                depth -= 1
            index += 1
        return index < len(self.tokens) and self.tokens[index].type == 'EQUAL'

    def parse_function(self) -> FuncDef:
        name = self.consume('IDENT', 'Expected function name').value
        self.consume('LPAR', "Expected '(' after function name")
        params: List[str] = []
        if not self.check('RPAR'):
            while True:
                params.append(self.consume('IDENT', 'Expected parameter name').value)
                if not self.match('COMMA'):
                    break
        self.consume('RPAR', "Expected ')' after parameters")
        self.consume('EQUAL', "Expected '=' after function definition")
        body = self.parse_expression()
        return FuncDef(name, params, body)

    # Expressions

    def parse_expression(self) -> Node:
        return self.parse_pipe()

    def parse_pipe(self) -> Node:
        node = self.parse_or()
        while self.match('PIPE'):
            node = Pipe(node, self.parse_or())
        return node

    def parse_binary(self, operand: Callable[[], Node], operators: Dict[str, str]) -> Node:
        node = operand()
        while self.check(*operators):
            op = operators[self.advance().type]
            node = BinaryOp(op, node, operand())
        return node

    def parse_or(self) -> Node:
        return self.parse_binary(self.parse_and, {'OR': '||'})

    def parse_and(self) -> Node:
        return self.parse_binary(self.parse_comparison, {'AND': '&&'})

    def parse_comparison(self) -> Node:
        return self.parse_binary(self.parse_additive, COMPARISON)

    def parse_additive(self) -> Node:
        return self.parse_binary(self.parse_multiplicative, ADDITIVE)

    def parse_multiplicative(self) -> Node:
        return self.parse_binary(self.parse_unary, MULTIPLICATIVE)

    def parse_unary(self) -> Node:
        self.skip_newlines()
        if self.check(*UNARY):
            op = UNARY[self.advance().type]
            return UnaryOp(op, self.parse_unary())
        return self.parse_postfix()

    def parse_postfix(self) -> Node:
        node = self.parse_primary()
        while True:
            if self.check('LSQB'):
                node = Index(node, self.parse_index_group())
                continue
            if self.match('DOT'):
                method = self.consume('IDENT', "Expected method name after '.'").value
                node = MethodCall(node, method, self.parse_arguments())
                continue
            break
        return node

    def parse_primary(self) -> Node:
        self.skip_newlines()
        token = self.peek()
        if token is None:
            raise self.error('Unexpected end of input')
        type_ = token.type
        if type_ == 'NUMBER':
            self.advance()
            return Literal(int(token.value), 'Number')
        if type_ == 'STRING':
            self.advance()
            return Literal(token.value, 'String')
        if type_ in ('TRUE', 'FALSE'):
            self.advance()
            return Literal(type_ == 'TRUE', 'Boolean')
        if type_ == 'INPUT':
            self.advance()
            return Input()
        if type_ == 'UNDERSCORE':
            self.advance()
            return ReturnValue()
        if type_ == 'IDENT':
            self.advance()
            if self.check('LPAR'):
                return Call(token.value, self.parse_arguments())
            return Identifier(token.value)
        if type_ == 'LSQB':
            return self.parse_bracket_literal()
        if type_ == 'LBRACE':
            return self.parse_block()
        if type_ == 'LPAR':
            self.advance()
            expr = self.parse_expression()
            self.skip_newlines()
            self.consume('RPAR', "Expected ')' after expression")
            return expr
        if type_ == 'IF':
            return self.parse_if()
        if type_ == 'FOR':
            return self.parse_for()
        if type_ in ('LEN', 'MAX', 'MIN', 'FLOOR', 'CEIL'):
            return self.parse_builtin_call()
        if type_ == 'ILLEGAL':
            raise self.error(f"Unexpected character '{token.value}'")
        raise self.error(f"Unexpected token '{token.value}'")

    def parse_arguments(self) -> List[Node]:
        self.consume('LPAR', "Expected '('")
        args: List[Node] = []
        self.skip_newlines()
        if not self.check('RPAR'):
            while True:
                args.append(self.parse_expression())
                self.skip_newlines()
                if not self.match('COMMA'):
                    break
        self.skip_newlines()
        self.consume('RPAR', "Expected ')' after arguments")
        return args

    def parse_bracket_literal(self) -> Node:
        # `[a..b]` and `[a, b, ...]` share their first element, so it is
        # parsed once and the token after it picks the literal.
        self.consume('LSQB', "Expected '['")
        self.skip_newlines()
        if self.match('RSQB'):
            return ArrayLit([])
        first = self.parse_expression()
        self.skip_newlines()
        if self.match('DOTDOT'):
            end = self.parse_expression()
            self.skip_newlines()
            self.consume('RSQB', "Expected ']' after range")
            return RangeLit(first, end)
        elements: List[Node] = [first]
        while self.match('COMMA'):
            elements.append(self.parse_expression())
            self.skip_newlines()
        self.consume('RSQB', "Expected ']' after array elements")
        return ArrayLit(elements)

    def parse_index_group(self) -> List[Node]:
        self.consume('LSQB', "Expected '['")
        indices: List[Node] = []
        while True:
            self.skip_newlines()
            if self.match('DOTDOT'):
                indices.append(IndexRange(None, self.parse_range_end()))
            else:
                first = self.parse_expression()
                if self.match('DOTDOT'):
                    indices.append(IndexRange(first, self.parse_range_end()))
                else:
                    indices.append(IndexSingle(first))
            self.skip_newlines()
            if not self.match('COMMA'):
                break
        self.consume('RSQB', "Expected ']' after index")
        return indices

    def parse_range_end(self) -> Optional[Node]:
        self.skip_newlines()
        if self.check('RSQB', 'COMMA'):
            return None
        return self.parse_expression()

    def parse_block(self) -> Block:
        self.consume('LBRACE', "Expected '{'")
        statements: List[Node] = []
        while True:
            self.skip_newlines()
            if self.check('RBRACE') or self.at_end():
                break
            statements.append(self.parse_statement())
        self.consume('RBRACE', "Expected '}' after block")
        return Block(statements)

    def parse_if(self) -> Builtin:
        self.advance()
        self.consume('LPAR', "Expected '(' after 'if'")
        args = [self.parse_expression()]
        self.skip_newlines()
        self.consume('COMMA', "Expected ',' after condition")
        args.append(self.parse_expression())
        self.skip_newlines()
        if self.match('COMMA'):
            args.append(self.parse_expression())
            self.skip_newlines()
        self.consume('RPAR', "Expected ')' after if expression")
        return Builtin('if', args)

    def parse_for(self) -> Builtin:
        self.advance()
        self.consume('LPAR', "Expected '(' after 'for'")
        self.skip_newlines()
        var = self.consume('IDENT', "Expected variable name after 'for'").value
        self.consume('OF', "Expected 'of' after variable name")
        args: List[Node] = [Identifier(var), self.parse_expression()]
        self.skip_newlines()
        self.consume('COMMA', "Expected ',' after array")
        args.append(self.parse_expression())
        self.skip_newlines()
        if self.match('COMMA'):
            args.append(self.parse_expression())
            self.skip_newlines()
        self.consume('RPAR', "Expected ')' after for expression")
        return Builtin('for', args)

    def parse_builtin_call(self) -> Builtin:
        name_token = self.advance()
        name = name_token.value
        args = self.parse_arguments()
        arity = BUILTINS[name].arity
        if len(args) != arity:
            plural = 'argument' if arity == 1 else 'arguments'
            raise self.error(f'{name} expects {arity} {plural}, got {len(args)}', name_token)
        return Builtin(name, args)


def parse_program(source: str) -> Program:
    """Tokenize and parse xmas source code into a Program AST."""
    return Parser(tokenize(source), source).parse()
