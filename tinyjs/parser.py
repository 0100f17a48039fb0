"""Parser for TinyJS.

Parsing is done in two stages:

1. **Tokens to parse tree**: the token list produced by ``tinyjs.lexer`` is
   handed to a Lark LALR parser. The grammar only declares its terminals;
   ``TokenStreamLexer`` maps each ``Token`` onto the matching terminal so
   Lark never looks at raw text.

2. **Parse tree to AST**: ``ASTTransformer`` rewrites the tree into the
   dataclasses of ``tinyjs.ast``. Line numbers come from Lark's propagated
   positions, which are seeded from the token lines.

The public entry points are ``parse`` (token list in) and
``parse_program`` (source text in); both return a ``Program`` node.
"""

from __future__ import annotations

from typing import Iterable, List, Optional

from lark import Lark, Transformer, v_args
from lark.exceptions import UnexpectedInput, UnexpectedToken, VisitError
from lark.lexer import Lexer as LarkLexer, Token as LarkToken

from .ast import (
    Program, IntegerLiteral, FloatLiteral, StringLiteral, Variable,
    BinaryOp, UnaryOp, Call, FunctionDecl, VarDecl, Return, Break,
    Continue, If, While, DoWhile, For, Block, Node,
)
from .errors import TinyJSSyntaxError
from .lexer import Token, tokenize, IDENTIFIER, INTEGER, FLOAT, STRING, OP, PUNCT, EOF


TINYJS_GRAMMAR = r"""
    start: statement*

    ?statement: function_decl
              | var_decl _SEMI
              | if_stmt
              | while_stmt
              | do_while_stmt
              | for_stmt
              | return_stmt
              | break_stmt
              | continue_stmt
              | body -> block
              | expression _SEMI
              | empty_stmt

    function_decl: _FUNCTION IDENTIFIER _LPAR [params] _RPAR body
    params: IDENTIFIER (_COMMA IDENTIFIER)*

    var_decl: _VAR IDENTIFIER [_ASSIGN expression]

    if_stmt: _IF _LPAR expression _RPAR body [_ELSE else_branch]
    ?else_branch: body
                | if_stmt
    while_stmt: _WHILE _LPAR expression _RPAR body
    do_while_stmt: _DO body _WHILE _LPAR expression _RPAR _SEMI
    for_stmt: _FOR _LPAR for_init _SEMI for_cond _SEMI for_step _RPAR body
    for_init: (var_decl | expression)?
    for_cond: expression?
    for_step: expression?

    return_stmt: _RETURN [expression] _SEMI
    break_stmt: _BREAK _SEMI
    continue_stmt: _CONTINUE _SEMI
    empty_stmt: _SEMI

    body: _LBRACE statement* _RBRACE

    // Expressions with C precedence, loosest first
    ?expression: assignment
    ?assignment: logic_or [(_ASSIGN | COMPOUND_ASSIGN) assignment]
    ?logic_or: logic_and (OROR logic_and)*
    ?logic_and: bit_or (ANDAND bit_or)*
    ?bit_or: bit_xor (BITOR bit_xor)*
    ?bit_xor: bit_and (BITXOR bit_and)*
    ?bit_and: equality (BITAND equality)*
    ?equality: relational (EQ_OP relational)*
    ?relational: shift (REL_OP shift)*
    ?shift: additive (SHIFT_OP additive)*
    ?additive: multiplicative (ADD_OP multiplicative)*
    ?multiplicative: unary (MUL_OP unary)*
    ?unary: (ADD_OP | BANG | TILDE) unary -> unary_op
          | primary
    ?primary: IDENTIFIER _LPAR [arguments] _RPAR -> call
            | IDENTIFIER -> variable
            | INTEGER -> integer
            | FLOAT -> float_
            | STRING -> string
            | _LPAR expression _RPAR
    arguments: expression (_COMMA expression)*

    %declare IDENTIFIER INTEGER FLOAT STRING
    %declare _FUNCTION _IF _ELSE _FOR _WHILE _DO _VAR _RETURN _BREAK _CONTINUE
    %declare _LPAR _RPAR _LBRACE _RBRACE _COMMA _SEMI
    %declare _ASSIGN COMPOUND_ASSIGN OROR ANDAND BITOR BITXOR BITAND
    %declare EQ_OP REL_OP SHIFT_OP ADD_OP MUL_OP BANG TILDE
"""


PUNCTUATION_TERMINALS = {
    '(': '_LPAR',
    ')': '_RPAR',
    '{': '_LBRACE',
    '}': '_RBRACE',
    ',': '_COMMA',
    ';': '_SEMI',
}

OPERATOR_TERMINALS = {
    '=': '_ASSIGN',
    '+=': 'COMPOUND_ASSIGN', '-=': 'COMPOUND_ASSIGN', '*=': 'COMPOUND_ASSIGN',
    '/=': 'COMPOUND_ASSIGN', '%=': 'COMPOUND_ASSIGN',
    '||': 'OROR',
    '&&': 'ANDAND',
    '|': 'BITOR',
    '^': 'BITXOR',
    '&': 'BITAND',
    '==': 'EQ_OP', '!=': 'EQ_OP',
    '<': 'REL_OP', '>': 'REL_OP', '<=': 'REL_OP', '>=': 'REL_OP',
    '<<': 'SHIFT_OP', '>>': 'SHIFT_OP',
    '+': 'ADD_OP', '-': 'ADD_OP',
    '*': 'MUL_OP', '/': 'MUL_OP', '%': 'MUL_OP',
    '!': 'BANG',
    '~': 'TILDE',
}

LITERAL_KINDS = {IDENTIFIER, INTEGER, FLOAT, STRING}


def terminal_for(token: Token) -> str:
    """Name of the grammar terminal a lexer token stands for."""
    if token.kind in LITERAL_KINDS:
        return token.kind
    if token.kind == OP:
        return OPERATOR_TERMINALS[token.lexeme]
    if token.kind == PUNCT:
        return PUNCTUATION_TERMINALS[token.lexeme]
    # keywords
    return '_' + token.kind


class TokenStreamLexer(LarkLexer):
    """Feeds an already tokenized program to Lark."""
    def __init__(self, lexer_conf):
        pass

    def lex(self, data: Iterable[Token]):
        for token in data:
            if token.kind == EOF:
                return
            yield LarkToken(terminal_for(token), token.lexeme, line=token.line, end_line=token.line)


TINYJS_PARSER = Lark(
    TINYJS_GRAMMAR,
    parser='lalr',
    lexer=TokenStreamLexer,
    propagate_positions=True,
    maybe_placeholders=False,
)


def _line(meta) -> int:
    return getattr(meta, 'line', None) or 0


def _statements(items) -> List[Node]:
    # empty statements come back as None
    return [item for item in items if item is not None]


class ASTTransformer(Transformer):
    """Transforms the raw parse tree into an AST."""

    def start(self, items):
        return Program(body=_statements(items))

    def body(self, items):
        return _statements(items)

    @v_args(meta=True)
    def block(self, meta, items):
        return Block(items[0], line=_line(meta))

    def empty_stmt(self, items):
        return None

    @v_args(meta=True)
    def function_decl(self, meta, items):
        name = str(items[0])
        params: List[str] = items[1] if len(items) > 2 else []
        if len(set(params)) != len(params):
            raise TinyJSSyntaxError(f'duplicate parameter name in function {name}', _line(meta))
        return FunctionDecl(name, params, items[-1], line=_line(meta))

    def params(self, items):
        return [str(item) for item in items]

    @v_args(meta=True)
    def var_decl(self, meta, items):
        initializer = items[1] if len(items) > 1 else None
        return VarDecl(str(items[0]), initializer, line=_line(meta))

    @v_args(meta=True)
    def if_stmt(self, meta, items):
        else_branch = None
        if len(items) > 2:
            else_branch = items[2] if isinstance(items[2], list) else [items[2]]
        return If(items[0], items[1], else_branch, line=_line(meta))

    @v_args(meta=True)
    def while_stmt(self, meta, items):
        return While(items[0], items[1], line=_line(meta))

    @v_args(meta=True)
    def do_while_stmt(self, meta, items):
        body, condition = items
        return DoWhile(condition, body, line=_line(meta))

    @v_args(meta=True)
    def for_stmt(self, meta, items):
        init, condition, step, body = items
        return For(init, condition, step, body, line=_line(meta))

    def for_init(self, items):
        return items[0] if items else None

    for_cond = for_init
    for_step = for_init

    @v_args(meta=True)
    def return_stmt(self, meta, items):
        return Return(items[0] if items else None, line=_line(meta))

    @v_args(meta=True)
    def break_stmt(self, meta, items):
        return Break(line=_line(meta))

    @v_args(meta=True)
    def continue_stmt(self, meta, items):
        return Continue(line=_line(meta))

    # Expressions
    @v_args(meta=True)
    def assignment(self, meta, items):
        target, value = items[0], items[-1]
        line = _line(meta)
        if not isinstance(target, Variable):
            raise TinyJSSyntaxError('invalid assignment target', line)
        if len(items) == 3:
            # x op= e  is  x = x op e
            op = str(items[1])[:-1]
            value = BinaryOp(op, Variable(target.name, line=line), value, line=line)
        return BinaryOp('=', target, value, line=line)

    @v_args(meta=True)
    def binary_chain(self, meta, items):
        # operand (op operand)* folded left-associatively
        left = items[0]
        for i in range(1, len(items), 2):
            left = BinaryOp(str(items[i]), left, items[i + 1], line=items[i].line or _line(meta))
        return left

    logic_or = logic_and = bit_or = bit_xor = bit_and = binary_chain
    equality = relational = shift = additive = multiplicative = binary_chain

    @v_args(meta=True)
    def unary_op(self, meta, items):
        return UnaryOp(str(items[0]), items[1], line=_line(meta))

    @v_args(meta=True)
    def call(self, meta, items):
        args = items[1] if len(items) > 1 else []
        return Call(str(items[0]), args, line=_line(meta))

    def arguments(self, items):
        return list(items)

    @v_args(meta=True)
    def variable(self, meta, items):
        return Variable(str(items[0]), line=_line(meta))

    @v_args(meta=True)
    def integer(self, meta, items):
        return IntegerLiteral(int(items[0]), line=_line(meta))

    @v_args(meta=True)
    def float_(self, meta, items):
        return FloatLiteral(float(items[0]), line=_line(meta))

    @v_args(meta=True)
    def string(self, meta, items):
        return StringLiteral(str(items[0]), line=_line(meta))


def _describe(token: Optional[LarkToken]) -> str:
    if token is None or token.type == '$END':
        return 'end of input'
    return repr(str(token))


def parse(tokens: List[Token]) -> Program:
    """Parse a token list (as produced by ``tokenize``) into a Program."""
    try:
        tree = TINYJS_PARSER.parse(tokens)
    except UnexpectedToken as e:
        raise TinyJSSyntaxError(f'unexpected {_describe(e.token)}', e.token.line) from None
    except UnexpectedInput as e:
        raise TinyJSSyntaxError(f'unexpected input: {e}', getattr(e, 'line', None)) from None
    try:
        return ASTTransformer().transform(tree)
    except VisitError as e:
        if isinstance(e.orig_exc, TinyJSSyntaxError):
            raise e.orig_exc from None
        raise


def parse_program(source: str) -> Program:
    """Tokenize and parse TinyJS source code into a Program AST."""
    return parse(tokenize(source))
