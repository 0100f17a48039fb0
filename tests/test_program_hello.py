from pathlib import Path

from tinyjs import run_file
from tinyjs.interpreter import Interpreter
from tinyjs.parser import parse_program


def test_program_hello(example_source, capsys):
    ast = parse_program(example_source('hello.tjs'))
    interp = Interpreter()
    interp.run(ast)
    out = capsys.readouterr().out.strip()
    assert out == 'Hello World!!'


def test_program_hello_from_file(capsys):
    run_file(str(Path(__file__).resolve().parent.parent / 'examples' / 'hello.tjs'))
    assert capsys.readouterr().out == 'Hello World!!\n'
