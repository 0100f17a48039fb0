import json

import pytest

from tinyjs.__main__ import main


@pytest.fixture
def program_file(tmp_path):
    def _write(source: str, name: str = 'program.tjs'):
        path = tmp_path / name
        path.write_text(source, encoding='utf-8')
        return path
    return _write


def test_runs_program(program_file, capsys):
    main([str(program_file('print("hi from file");'))])
    assert capsys.readouterr().out == 'hi from file\n'


def test_tokens(program_file, capsys):
    main(['--tokens', str(program_file('var a = 1;'))])
    lines = capsys.readouterr().out.splitlines()
    assert len(lines) == 6
    assert 'VAR' in lines[0]
    assert 'EOF' in lines[-1]


def test_emit_ast_then_run_it(program_file, capsys):
    source = program_file('function sq(x) { return x * x; }\nprint(sq(7));')
    main(['--emit-ast', str(source)])
    ast_path = source.with_name(source.name + '.ast.json')
    assert capsys.readouterr().out.strip() == str(ast_path)
    assert json.loads(ast_path.read_text(encoding='utf-8'))['type'] == 'Program'
    main(['--ast', str(ast_path)])
    assert capsys.readouterr().out == '49\n'


def test_runtime_error_exits_with_status_1(program_file, capsys):
    with pytest.raises(SystemExit) as exc_info:
        main([str(program_file('print("before");\nprint(nope);'))])
    assert exc_info.value.code == 1
    captured = capsys.readouterr()
    assert captured.out == 'before\n'
    assert 'Runtime error: line 2: ReferenceError: nope is not defined' in captured.err


def test_syntax_error_exits_with_status_1(program_file, capsys):
    with pytest.raises(SystemExit) as exc_info:
        main([str(program_file('var = ;'))])
    assert exc_info.value.code == 1
    assert 'Syntax error: line 1: SyntaxError' in capsys.readouterr().err


def test_max_depth_option(program_file, capsys):
    with pytest.raises(SystemExit):
        main(['--max-depth', '5', str(program_file('function f() { return f(); }\nf();'))])
    assert 'RangeError' in capsys.readouterr().err


def test_missing_file(tmp_path, capsys):
    with pytest.raises(SystemExit) as exc_info:
        main([str(tmp_path / 'absent.tjs')])
    assert exc_info.value.code == 1
    assert 'not found' in capsys.readouterr().err


def test_debug_trace_written(program_file, tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    main(['-vv', str(program_file('function id(v) { return v; }\nvar a = id(3);\nprint(a);'))])
    assert capsys.readouterr().out == '3\n'
    trace = (tmp_path / 'debug.txt').read_text()
    assert 'call id(3)' in trace
    assert 'return id -> 3' in trace
    assert 'declare a: integer = 3' in trace


@pytest.mark.parametrize('data', [
    {'type': 'Program', 'body': [{'type': 'BinaryOp', 'op': '+', 'left': 1, 'right': 2}]},
    {'type': 'IntegerLiteral', 'value': 1},
])
def test_invalid_ast_file(tmp_path, capsys, data):
    ast_path = tmp_path / 'bad.ast.json'
    ast_path.write_text(json.dumps(data), encoding='utf-8')
    with pytest.raises(SystemExit) as exc_info:
        main(['--ast', str(ast_path)])
    assert exc_info.value.code == 1
    assert 'invalid AST file' in capsys.readouterr().err
