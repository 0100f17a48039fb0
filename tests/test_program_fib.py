from tinyjs.interpreter import Interpreter
from tinyjs.parser import parse_program


def test_program_fib_recursion(example_source, capsys):
    ast = parse_program(example_source('fib.tjs'))
    interp = Interpreter()
    interp.run(ast)
    out_lines = capsys.readouterr().out.strip().split('\n')
    expected = [0, 1, 1, 2, 3, 5, 8, 13, 21, 34]
    assert out_lines == [f'fib({k}) = {v}' for k, v in enumerate(expected)]
