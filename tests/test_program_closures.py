from tinyjs.interpreter import Interpreter
from tinyjs.parser import parse_program


def test_program_closures_keep_declaring_scope(example_source, capsys):
    ast = parse_program(example_source('closures.tjs'))
    interp = Interpreter()
    interp.run(ast)
    out_lines = capsys.readouterr().out.strip().split('\n')
    assert out_lines == ['6', '11', '115']
