# xmas language package
# A terse, list-oriented language for grid and array puzzles.
from .errors import XmasError, XmasSyntaxError, XmasRuntimeError
from .interpreter import run_program, Interpreter
from .parser import parse_program
from .types import Array1D, Array2D

__all__ = [
    'run_program',
    'parse_program',
    'Interpreter',
    'XmasError',
    'XmasSyntaxError',
    'XmasRuntimeError',
    'Array1D',
    'Array2D',
]
