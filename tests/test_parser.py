import pytest

from tinyjs.ast import (
    Program, IntegerLiteral, FloatLiteral, StringLiteral, Variable,
    BinaryOp, UnaryOp, Call, FunctionDecl, VarDecl, Return, Break,
    Continue, If, While, DoWhile, For, Block,
)
from tinyjs.errors import TinyJSSyntaxError
from tinyjs.lexer import tokenize
from tinyjs.parser import parse, parse_program


def expr(source):
    program = parse_program(source + ';')
    assert len(program.body) == 1
    return program.body[0]


def test_parse_accepts_token_list():
    program = parse(tokenize('x;'))
    assert program == Program([Variable('x')])


def test_literals():
    assert expr('1') == IntegerLiteral(1)
    assert expr('2.5') == FloatLiteral(2.5)
    assert expr('"s"') == StringLiteral('s')


def test_precedence():
    assert expr('1 + 2 * 3') == BinaryOp('+', IntegerLiteral(1), BinaryOp('*', IntegerLiteral(2), IntegerLiteral(3)))
    assert expr('(1 + 2) * 3') == BinaryOp('*', BinaryOp('+', IntegerLiteral(1), IntegerLiteral(2)), IntegerLiteral(3))
    assert expr('a || b && c') == BinaryOp('||', Variable('a'), BinaryOp('&&', Variable('b'), Variable('c')))
    assert expr('a == b < c') == BinaryOp('==', Variable('a'), BinaryOp('<', Variable('b'), Variable('c')))
    assert expr('a & b | c ^ d') == BinaryOp(
        '|', BinaryOp('&', Variable('a'), Variable('b')), BinaryOp('^', Variable('c'), Variable('d')))
    assert expr('1 << 2 + 3') == BinaryOp('<<', IntegerLiteral(1), BinaryOp('+', IntegerLiteral(2), IntegerLiteral(3)))


def test_left_associativity():
    assert expr('10 - 4 - 3') == BinaryOp('-', BinaryOp('-', IntegerLiteral(10), IntegerLiteral(4)), IntegerLiteral(3))


def test_unary_operators():
    assert expr('-x') == UnaryOp('-', Variable('x'))
    assert expr('!~x') == UnaryOp('!', UnaryOp('~', Variable('x')))
    assert expr('a - -1') == BinaryOp('-', Variable('a'), UnaryOp('-', IntegerLiteral(1)))


def test_assignment_is_right_associative_binary_op():
    assert expr('a = b = 1') == BinaryOp('=', Variable('a'), BinaryOp('=', Variable('b'), IntegerLiteral(1)))


def test_compound_assignment_desugars():
    assert expr('a += 2') == BinaryOp('=', Variable('a'), BinaryOp('+', Variable('a'), IntegerLiteral(2)))
    assert expr('a %= 2') == BinaryOp('=', Variable('a'), BinaryOp('%', Variable('a'), IntegerLiteral(2)))


def test_calls():
    assert expr('f()') == Call('f', [])
    assert expr('f(1, g(x))') == Call('f', [IntegerLiteral(1), Call('g', [Variable('x')])])


def test_function_declaration():
    program = parse_program('function add(a, b) { return a + b; }')
    assert program.body == [
        FunctionDecl('add', ['a', 'b'], [Return(BinaryOp('+', Variable('a'), Variable('b')))]),
    ]
    assert parse_program('function f() { return; }').body == [FunctionDecl('f', [], [Return(None)])]


def test_var_declarations():
    assert parse_program('var x; let y = 2;').body == [VarDecl('x'), VarDecl('y', IntegerLiteral(2))]


def test_if_else_chain():
    program = parse_program('if (a) { x; } else if (b) { y; } else { z; }')
    assert program.body == [
        If(Variable('a'), [Variable('x')], [If(Variable('b'), [Variable('y')], [Variable('z')])]),
    ]


def test_loops():
    assert parse_program('while (a) { break; }').body == [While(Variable('a'), [Break()])]
    assert parse_program('do { continue; } while (a);').body == [DoWhile(Variable('a'), [Continue()])]
    assert parse_program('for (var i = 0; i < 3; i += 1) { }').body == [
        For(VarDecl('i', IntegerLiteral(0)),
            BinaryOp('<', Variable('i'), IntegerLiteral(3)),
            BinaryOp('=', Variable('i'), BinaryOp('+', Variable('i'), IntegerLiteral(1))),
            []),
    ]
    assert parse_program('for (;;) { break; }').body == [For(None, None, None, [Break()])]


def test_block_and_empty_statements():
    assert parse_program(';{ ; x; }').body == [Block([Variable('x')])]


def test_line_numbers():
    program = parse_program('var a = 1;\n\nfunction f(x) {\n    return x;\n}\nf(a);')
    decl, func, call = program.body
    assert decl.line == 1
    assert func.line == 3
    assert func.body[0].line == 4
    assert call.line == 6


@pytest.mark.parametrize('source, line', [
    ('var = 1;', 1),
    ('x = 1\ny = 2;', 2),
    ('1 + 2 = 3;', 1),
    ('f(1;', 1),
    ('function f(a, a) { }', 1),
    ('if (x) {\n', 1),
])
def test_syntax_errors(source, line):
    with pytest.raises(TinyJSSyntaxError) as exc_info:
        parse_program(source)
    assert exc_info.value.line == line


def test_non_ascii_digit_is_a_syntax_error():
    with pytest.raises(TinyJSSyntaxError) as exc_info:
        parse_program('var a = 1;\nprint(²);')
    assert exc_info.value.line == 2
