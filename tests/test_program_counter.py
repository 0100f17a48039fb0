from tinyjs.interpreter import Interpreter
from tinyjs.parser import parse_program


def test_program_counter_while_loop(example_source, capsys):
    ast = parse_program(example_source('counter.tjs'))
    interp = Interpreter()
    interp.run(ast)
    out_lines = capsys.readouterr().out.strip().split('\n')
    assert out_lines == ['0', '1', '2']
