"""CLI entry point for the xmas interpreter.

Usage:
    python -m xmas [-d] [-i INPUT] [program_file]
    python -m xmas --emit-ast <program_file>
    python -m xmas [-d] [-i INPUT] --ast <ast_json_file>

Options:
  -i, --input   Text file exposed to the program as the `input` grid
  -d, --debug   Trace assignments, conditions and loop iterations on stderr
  --emit-ast    Parse the program file and write `<program_file>.ast.json`
  --ast         Execute a previously emitted AST JSON file

Without a program file the source is read from stdin. The value the
program produces is printed unless it is an empty array.
"""

import argparse
import json
import sys
from pathlib import Path
from typing import Optional

from .ast import Program
from .ast_json import ast_to_obj, ast_from_obj
from .errors import XmasRuntimeError, XmasSyntaxError
from .interpreter import Interpreter, raise_recursion_limit
from .parser import parse_program
from .types import Array1D, to_string


def _read_source(path: Optional[str]) -> str:
    if path is None:
        return sys.stdin.read()
    program_file = Path(path)
    try:
        return program_file.read_text(encoding='utf-8')
    except OSError as e:
        print(f"Error reading file '{program_file}': {e}", file=sys.stderr)
        sys.exit(1)


def _load_input(interpreter: Interpreter, path: str):
    try:
        text = Path(path).read_text(encoding='utf-8')
    except OSError as e:
        print(f"Warning: Could not read input file '{path}': {e}", file=sys.stderr)
        return
    interpreter.set_input(text)


def _emit_ast(path: str):
    program_file = Path(path)
    source = _read_source(path)
    try:
        ast_program = parse_program(source)
    except XmasSyntaxError as e:
        print(e, file=sys.stderr)
        sys.exit(1)
    out_path = program_file.with_name(program_file.name + '.ast.json')
    with open(out_path, 'w', encoding='utf-8') as out:
        json.dump(ast_to_obj(ast_program), out, ensure_ascii=False, indent=2)
    print(str(out_path))


def main(argv: Optional[list] = None) -> None:
    parser = argparse.ArgumentParser(prog='xmas', description="xmas language interpreter")
    parser.add_argument('-i', '--input', metavar='INPUT_FILE', help='input text file for the `input` grid')
    parser.add_argument('-d', '--debug', action='store_true', help='print a debug trace to stderr')
    group = parser.add_mutually_exclusive_group()
    group.add_argument('--emit-ast', action='store_true', help='emit AST JSON for the program file')
    group.add_argument('--ast', metavar='AST_JSON_FILE', help='execute AST from a JSON file')
    parser.add_argument('program', nargs='?', help='xmas program file (.xmas); stdin when omitted')
    args = parser.parse_args(argv)
    raise_recursion_limit()

    # Emit AST mode
    if args.emit_ast:
        if not args.program:
            parser.error('--emit-ast needs a program file')
        _emit_ast(args.program)
        return

    # Execute from AST JSON, or parse the source
    if args.ast:
        ast_path = Path(args.ast)
        if not ast_path.exists():
            print(f"Error: file {ast_path} not found", file=sys.stderr)
            sys.exit(1)
        try:
            with open(ast_path, 'r', encoding='utf-8') as f:
                ast_program = ast_from_obj(json.load(f))
            if not isinstance(ast_program, Program):
                raise ValueError('top-level node is not a Program')
        except (KeyError, ValueError, TypeError) as e:
            print(f"Error: invalid AST file {ast_path}: {e}", file=sys.stderr)
            sys.exit(1)
    else:
        source = _read_source(args.program)
        try:
            ast_program = parse_program(source)
        except XmasSyntaxError as e:
            print(e, file=sys.stderr)
            sys.exit(1)

    interpreter = Interpreter(debug=args.debug)
    if args.input:
        _load_input(interpreter, args.input)
    try:
        result = interpreter.interpret(ast_program)
    except XmasRuntimeError as e:
        print(f"Runtime error: {e}", file=sys.stderr)
        sys.exit(1)

    if not (isinstance(result, Array1D) and not result.items):
        print(to_string(result))


if __name__ == '__main__':
    main()
