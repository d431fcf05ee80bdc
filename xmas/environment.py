from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Optional

from xmas.ast import Node
from xmas.errors import XmasRuntimeError
from xmas.types import Array2D


@dataclass
class Function:
    params: List[str]
    body: Node


_MISSING = object()


def parse_input(text: str) -> Array2D:
    """Split raw input text into a grid of one-character strings."""
    lines = text.split('\n')
    if lines and lines[-1] == '':
        lines.pop()
    return Array2D([list(line[:-1] if line.endswith('\r') else line) for line in lines])


class Environment:
    """Runtime state of one interpretation run.

    There is a single flat variable namespace. Function parameters, loop
    variables and the pipe temporary are laid over it with :meth:`shadow`
    and taken off again afterwards. Blocks, calls and loops get a fresh
    return value from :meth:`return_scope`; they never get fresh variables.
    """
    def __init__(self):
        self.variables: Dict[str, Any] = {}
        self.functions: Dict[str, Function] = {}
        self.input = Array2D([])
        self.return_value: Optional[Any] = None  # None while `_` is unset
        self.named_returns: Dict[str, Any] = {}

    def get(self, name: str) -> Any:
        if name in self.variables:
            return self.variables[name]
        raise XmasRuntimeError(f'Undefined variable: {name}')

    def set(self, name: str, value: Any):
        self.variables[name] = value

    def get_function(self, name: str) -> Function:
        if name in self.functions:
            return self.functions[name]
        raise XmasRuntimeError(f'Undefined function: {name}')

    def define_function(self, name: str, params: List[str], body: Node):
        self.functions[name] = Function(list(params), body)

    def get_return(self) -> Any:
        if self.return_value is None:
            raise XmasRuntimeError('No return value set')
        return self.return_value

    def get_named_return(self, name: str) -> Any:
        if name in self.named_returns:
            return self.named_returns[name]
        raise XmasRuntimeError(f'Undefined named return: _{name}')

    @contextmanager
    def shadow(self, bindings: Dict[str, Any]) -> Iterator[None]:
        saved = {name: self.variables.get(name, _MISSING) for name in bindings}
        self.variables.update(bindings)
        try:
            yield
        finally:
            for name, old in saved.items():
                if old is _MISSING:
                    self.variables.pop(name, None)
                else:
                    self.variables[name] = old

    @contextmanager
    def return_scope(self, initial: Optional[Any] = None) -> Iterator[None]:
        saved_return, saved_named = self.return_value, self.named_returns
        self.return_value = initial
        self.named_returns = {}
        try:
            yield
        finally:
            self.return_value = saved_return
            self.named_returns = saved_named
