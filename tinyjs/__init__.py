# TinyJS language package
# A lexer, LALR parser and tree-walking interpreter for a small JavaScript-like language.
from .errors import TinyJSError, TinyJSSyntaxError
from .interpreter import Interpreter, run_program, run_file
from .lexer import tokenize
from .parser import parse, parse_program

__all__ = [
    'Interpreter',
    'TinyJSError',
    'TinyJSSyntaxError',
    'parse',
    'parse_program',
    'run_file',
    'run_program',
    'tokenize',
]
