from dataclasses import dataclass
from typing import Any, Callable, Dict, List

from xmas.errors import XmasRuntimeError
from xmas.types import Array1D, Array2D, is_number


@dataclass
class BuiltinFunction:
    name: str
    arity: int
    fn: Callable[[List[Any]], Any]

    def __call__(self, args: List[Any]) -> Any:
        if len(args) != self.arity:
            plural = 'argument' if self.arity == 1 else 'arguments'
            raise XmasRuntimeError(f'{self.name} requires {self.arity} {plural}')
        return self.fn(args)

    def __repr__(self) -> str:
        return f"<builtin {self.name}>"


def builtin_len(args: List[Any]) -> Any:
    value = args[0]
    if isinstance(value, Array1D):
        return len(value.items)
    if isinstance(value, Array2D):
        # [rows, columns of the first row]
        if not value.rows:
            return Array1D([0, 0])
        return Array1D([len(value.rows), len(value.rows[0])])
    if isinstance(value, str):
        return len(value)
    raise XmasRuntimeError('len requires array or string')


def builtin_max(args: List[Any]) -> Any:
    a, b = args
    if not (is_number(a) and is_number(b)):
        raise XmasRuntimeError('max requires 2 numbers')
    return max(a, b)


def builtin_min(args: List[Any]) -> Any:
    a, b = args
    if not (is_number(a) and is_number(b)):
        raise XmasRuntimeError('min requires 2 numbers')
    return min(a, b)


def _rounding(name: str) -> Callable[[List[Any]], Any]:
    # Numbers are integers, so rounding leaves them alone.
    def fn(args: List[Any]) -> Any:
        if not is_number(args[0]):
            raise XmasRuntimeError(f'{name} requires a number')
        return args[0]
    return fn


BUILTINS: Dict[str, BuiltinFunction] = {
    'len': BuiltinFunction('len', 1, builtin_len),
    'max': BuiltinFunction('max', 2, builtin_max),
    'min': BuiltinFunction('min', 2, builtin_min),
    'floor': BuiltinFunction('floor', 1, _rounding('floor')),
    'ceil': BuiltinFunction('ceil', 1, _rounding('ceil')),
}
