"""Tokenizer for TinyJS source text.

The lexer turns a program into a flat list of ``Token(kind, lexeme, line)``
triples terminated by an ``EOF`` token. It knows nothing about grammar: the
parser consumes the list as-is.
"""

from __future__ import annotations

import string
from dataclasses import dataclass
from typing import List

from .errors import TinyJSSyntaxError


IDENTIFIER = 'IDENTIFIER'
INTEGER = 'INTEGER'
FLOAT = 'FLOAT'
STRING = 'STRING'
OP = 'OP'
PUNCT = 'PUNCT'
EOF = 'EOF'

KEYWORDS = {
    'function': 'FUNCTION',
    'if': 'IF',
    'else': 'ELSE',
    'for': 'FOR',
    'while': 'WHILE',
    'do': 'DO',
    'var': 'VAR',
    'let': 'VAR',
    'return': 'RETURN',
    'break': 'BREAK',
    'continue': 'CONTINUE',
}

TWO_CHAR_OPS = {'==', '!=', '<=', '>=', '<<', '>>', '&&', '||', '+=', '-=', '*=', '/=', '%='}
ONE_CHAR_OPS = set('+-*/%<>=!&|^~')
PUNCTUATION = set('(){},;')

IDENTIFIER_START = set(string.ascii_letters + '_')
IDENTIFIER_CHARS = IDENTIFIER_START | set(string.digits)
DIGITS = set(string.digits)

ESCAPES = {'n': '\n', 't': '\t', 'r': '\r'}


@dataclass(frozen=True)
class Token:
    kind: str
    lexeme: str
    line: int


def format_token(token: Token) -> str:
    return f"{token.line:>4} {token.kind:<10} {token.lexeme!r}"


def tokenize(source: str) -> List[Token]:
    """Convert source code into a list of tokens ending with ``EOF``.

    A minus sign is always its own operator token; negative literals are
    built by the parser's unary rule.
    """
    tokens: List[Token] = []
    i = 0
    line = 1
    length = len(source)

    while i < length:
        c = source[i]
        if c == '\n':
            line += 1
            i += 1
            continue
        if c.isspace():
            i += 1
            continue
        # Comments
        if c == '/' and source.startswith('//', i):
            while i < length and source[i] != '\n':
                i += 1
            continue
        if c == '/' and source.startswith('/*', i):
            start_line = line
            end = source.find('*/', i + 2)
            if end < 0:
                raise TinyJSSyntaxError('unterminated block comment', start_line)
            line += source.count('\n', i, end)
            i = end + 2
            continue
        # Identifiers or keywords
        if c in IDENTIFIER_START:
            start = i
            while i < length and source[i] in IDENTIFIER_CHARS:
                i += 1
            word = source[start:i]
            tokens.append(Token(KEYWORDS.get(word, IDENTIFIER), word, line))
            continue
        # Numbers: digits with an optional fraction
        if c in DIGITS:
            start = i
            while i < length and source[i] in DIGITS:
                i += 1
            kind = INTEGER
            if i < length and source[i] == '.':
                kind = FLOAT
                i += 1
                while i < length and source[i] in DIGITS:
                    i += 1
            tokens.append(Token(kind, source[start:i], line))
            continue
        # Strings, either quote style
        if c in ('"', "'"):
            quote = c
            start_line = line
            i += 1
            chars: List[str] = []
            while True:
                if i >= length:
                    raise TinyJSSyntaxError('unterminated string literal', start_line)
                ch = source[i]
                if ch == quote:
                    i += 1
                    break
                if ch == '\\' and i + 1 < length:
                    nxt = source[i + 1]
                    chars.append(ESCAPES.get(nxt, nxt))
                    if nxt == '\n':
                        line += 1
                    i += 2
                    continue
                if ch == '\n':
                    line += 1
                chars.append(ch)
                i += 1
            tokens.append(Token(STRING, ''.join(chars), start_line))
            continue
        # Operators, longest match first
        pair = source[i:i + 2]
        if pair in TWO_CHAR_OPS:
            tokens.append(Token(OP, pair, line))
            i += 2
            continue
        if c in ONE_CHAR_OPS:
            tokens.append(Token(OP, c, line))
            i += 1
            continue
        if c in PUNCTUATION:
            tokens.append(Token(PUNCT, c, line))
            i += 1
            continue
        raise TinyJSSyntaxError(f'unexpected character {c!r}', line)

    tokens.append(Token(EOF, '', line))
    return tokens
