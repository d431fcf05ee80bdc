"""Tokenizer for the xmas language.

Source text becomes a flat list of ``lark.Token`` objects. Each token knows
its type, its value and the 1-based line/column where it starts, so the
parser can point at it in error messages.

Newlines and ``//`` comments are kept as tokens; the parser decides where
they matter. The tokenizer never fails: characters it does not recognize
are skipped. The one exception is a lone ``&``, which is emitted as an
``ILLEGAL`` token so the parser can report it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from lark import Token

KEYWORDS = {
    'if': 'IF',
    'for': 'FOR',
    'of': 'OF',
    'input': 'INPUT',
    'len': 'LEN',
    'max': 'MAX',
    'min': 'MIN',
    'floor': 'FLOOR',
    'ceil': 'CEIL',
    'true': 'TRUE',
    'false': 'FALSE',
}

# Longest match first.
OPERATORS = [
    ('+=', 'PLUSEQUAL'),
    ('-=', 'MINUSEQUAL'),
    ('*=', 'STAREQUAL'),
    ('/=', 'SLASHEQUAL'),
    ('%=', 'PERCENTEQUAL'),
    ('==', 'EQEQUAL'),
    ('<=', 'LESSEQUAL'),
    ('>=', 'MOREEQUAL'),
    ('|>', 'PIPE'),
    ('>|', 'PIPE'),  # older spelling of the pipe
    ('&&', 'AND'),
    ('||', 'OR'),
    ('..', 'DOTDOT'),
    ('(', 'LPAR'),
    (')', 'RPAR'),
    ('{', 'LBRACE'),
    ('}', 'RBRACE'),
    ('[', 'LSQB'),
    (']', 'RSQB'),
    (',', 'COMMA'),
    ('+', 'PLUS'),
    ('-', 'MINUS'),
    ('*', 'STAR'),
    ('/', 'SLASH'),
    ('%', 'PERCENT'),
    ('~', 'TILDE'),
    ('!', 'BANG'),
    ('=', 'EQUAL'),
    ('<', 'LESSTHAN'),
    ('>', 'MORETHAN'),
    ('|', 'VBAR'),
    ('&', 'ILLEGAL'),
    ('.', 'DOT'),
]

ESCAPES = {'n': '\n', 't': '\t', '\\': '\\', '"': '"'}

DIGITS = '0123456789'


def _is_ident_char(c: str) -> bool:
    return c == '_' or (c.isascii() and c.isalnum())


@dataclass(frozen=True)
class Position:
    line: int
    column: int

    @classmethod
    def of(cls, token: Token) -> 'Position':
        return cls(token.line, token.column)


class Lexer:
    def __init__(self, source: str):
        self.source = source
        self.pos = 0
        self.line = 1
        self.column = 1

    def peek(self, offset: int = 0) -> str:
        index = self.pos + offset
        if index < len(self.source):
            return self.source[index]
        return ''

    def advance(self) -> str:
        c = self.source[self.pos]
        self.pos += 1
        if c == '\n':
            self.line += 1
            self.column = 1
        else:
            self.column += 1
        return c

    def tokenize(self) -> List[Token]:
        tokens: List[Token] = []
        while self.pos < len(self.source):
            token = self.next_token()
            if token is not None:
                tokens.append(token)
        return tokens

    def next_token(self) -> Optional[Token]:
        start_pos, line, column = self.pos, self.line, self.column
        c = self.peek()

        if c in (' ', '\t', '\r'):
            self.advance()
            return None
        if c == '\n':
            self.advance()
            return self.make('NEWLINE', '\n', start_pos, line, column)
        if c == '/' and self.peek(1) == '/':
            self.advance()
            self.advance()
            chars = []
            while self.pos < len(self.source) and self.peek() != '\n':
                chars.append(self.advance())
            return self.make('COMMENT', ''.join(chars), start_pos, line, column)
        if c == '"':
            return self.make('STRING', self.read_string(), start_pos, line, column)
        if c in DIGITS:
            while self.peek() and self.peek() in DIGITS:
                self.advance()
            return self.make('NUMBER', self.source[start_pos:self.pos], start_pos, line, column)
        if c == '_' and not _is_ident_char(self.peek(1)):
            self.advance()
            return self.make('UNDERSCORE', '_', start_pos, line, column)
        if c == '_' or (c.isascii() and c.isalpha()):
            while self.peek() and _is_ident_char(self.peek()):
                self.advance()
            word = self.source[start_pos:self.pos]
            return self.make(KEYWORDS.get(word, 'IDENT'), word, start_pos, line, column)
        for text, type_ in OPERATORS:
            if self.source.startswith(text, self.pos):
                for _ in text:
                    self.advance()
                return self.make(type_, text, start_pos, line, column)
        # anything else is silently dropped
        self.advance()
        return None

    def read_string(self) -> str:
        self.advance()  # opening quote
        chars: List[str] = []
        while self.pos < len(self.source) and self.peek() != '"':
            c = self.advance()
            if c == '\\' and self.peek() in ESCAPES:
                chars.append(ESCAPES[self.advance()])
            else:
                chars.append(c)
        if self.pos < len(self.source):
            self.advance()  # closing quote
        return ''.join(chars)

    def make(self, type_: str, value: str, start_pos: int, line: int, column: int) -> Token:
        return Token(type_, value, start_pos, line, column, self.line, self.column, self.pos)


def tokenize(source: str) -> List[Token]:
    """Convert source code into a list of tokens with positions."""
    return Lexer(source).tokenize()
