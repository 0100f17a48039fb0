from tinyjs.interpreter import Interpreter
from tinyjs.parser import parse_program


def test_program_scopes_are_lexical(example_source, capsys):
    """show() sees the global x even when called from a function that shadows it."""
    ast = parse_program(example_source('scopes.tjs'))
    interp = Interpreter()
    interp.run(ast)
    out_lines = capsys.readouterr().out.strip().split('\n')
    assert out_lines == ['global', 'local', 'block', 'global']
