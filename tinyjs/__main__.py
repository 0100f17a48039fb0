"""CLI entry point for the TinyJS interpreter.

Usage:
    python -m tinyjs [-v|-vv|-vvv|-vvvv] <program_file>
    python -m tinyjs [-v...] --emit-ast <program_file>
    python -m tinyjs [-v...] --ast <ast_json_file>
    python -m tinyjs --tokens <program_file>

Options:
  -v            Increase debug verbosity (can be repeated)
  --emit-ast    Parse the given file and write the AST as JSON next to it
  --ast         Execute a previously emitted AST JSON file
  --tokens      Print the token stream of the given file
  --max-depth   Abort with a RangeError past this many nested calls

Debug information is written to `debug.txt` in the current directory when
verbosity is greater than zero.
"""

import argparse
import json
import sys
from pathlib import Path
from .errors import TinyJSError, TinyJSSyntaxError
from .interpreter import Interpreter
from .parser import parse_program
from .lexer import tokenize, format_token
from .ast_json import ast_to_obj, ast_from_obj
from .ast import Program


def read_source(path: Path) -> str:
    if not path.exists():
        print(f"Error: file {path} not found", file=sys.stderr)
        sys.exit(1)
    with open(path, 'r', encoding='utf-8') as f:
        return f.read()


def parse_or_exit(source: str):
    try:
        return parse_program(source)
    except TinyJSSyntaxError as e:
        print(f"Syntax error: {e}", file=sys.stderr)
        sys.exit(1)


def execute(program, args) -> None:
    interpreter = Interpreter(debug_level=args.v, max_call_depth=args.max_depth)
    try:
        interpreter.run(program)
    except TinyJSError as e:
        print(f"Runtime error: {e}", file=sys.stderr)
        sys.exit(1)


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(prog='tinyjs', description="TinyJS language interpreter")
    parser.add_argument('-v', action='count', default=0, help='increase debug verbosity (can be repeated)')
    parser.add_argument('--max-depth', type=int, default=None, metavar='N', help='maximum nested function calls')
    group = parser.add_mutually_exclusive_group()
    group.add_argument('--emit-ast', metavar='SOURCE_FILE', help='emit AST JSON for the given source file')
    group.add_argument('--ast', metavar='AST_JSON_FILE', help='execute AST from a JSON file')
    group.add_argument('--tokens', metavar='SOURCE_FILE', help='print the token stream of the given source file')
    parser.add_argument('program', nargs='?', help='TinyJS program file to execute')
    args = parser.parse_args(argv)

    # Token dump mode
    if args.tokens:
        source = read_source(Path(args.tokens))
        try:
            tokens = tokenize(source)
        except TinyJSSyntaxError as e:
            print(f"Syntax error: {e}", file=sys.stderr)
            sys.exit(1)
        for token in tokens:
            print(format_token(token))
        return

    # Emit AST mode
    if args.emit_ast:
        program_file = Path(args.emit_ast)
        program = parse_or_exit(read_source(program_file))
        out_path = program_file.with_name(program_file.name + '.ast.json')
        with open(out_path, 'w', encoding='utf-8') as out:
            json.dump(ast_to_obj(program), out, ensure_ascii=False, indent=2)
        print(str(out_path))
        return

    # Execute from AST JSON
    if args.ast:
        ast_path = Path(args.ast)
        if not ast_path.exists():
            print(f"Error: file {ast_path} not found", file=sys.stderr)
            sys.exit(1)
        with open(ast_path, 'r', encoding='utf-8') as f:
            data = json.load(f)
        try:
            program = ast_from_obj(data)
            if not isinstance(program, Program):
                raise ValueError('top-level node must be a Program')
        except (TypeError, ValueError) as e:
            print(f"Error: invalid AST file {ast_path}: {e}", file=sys.stderr)
            sys.exit(1)
        execute(program, args)
        return

    # Default: execute source file
    if not args.program:
        parser.error('missing program file; or use --emit-ast/--ast/--tokens')
    program = parse_or_exit(read_source(Path(args.program)))
    execute(program, args)


if __name__ == '__main__':
    main()
