from pathlib import Path

from xmas.interpreter import Interpreter
from xmas.parser import parse_program
from xmas.types import Array1D

EXAMPLES = Path(__file__).resolve().parent.parent / 'examples'


def test_program_loops():
    source = (EXAMPLES / 'loops.xmas').read_text(encoding='utf-8')
    interp = Interpreter()
    result = interp.interpret(parse_program(source))
    assert result == 120
    v = interp.variables
    assert v['sum'] == 15
    assert v['evens'] == Array1D([2, 4])
    assert v['nothing'] == Array1D([])
    assert v['last'] == 5
    assert v['countdown'] == Array1D([3, 2, 1])
    assert 'n' not in v
