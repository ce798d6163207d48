#! /usr/bin/env python3

# --------------------------------------------------------------------
# Requires Python3 >= 3.10

# --------------------------------------------------------------------
import argparse
import os
import sys

from loxlib.loxast     import ExprStatement
from loxlib.loxerrors  import Reporter
from loxlib.loxinterp  import Interpreter, run
from loxlib.loxparser  import Parser
from loxlib.loxprinter import sexpr

EX_DATAERR  = 65
EX_NOINPUT  = 66
EX_SOFTWARE = 70

# ====================================================================
# Parse command line arguments

def parse_args(argv = None):
    parser = argparse.ArgumentParser(prog = os.path.basename(sys.argv[0]))

    parser.add_argument('input', nargs = '?', help = 'input file (.lox), REPL if omitted')
    parser.add_argument(
        '--no-echo', dest = 'echo', action = 'store_false',
        help = 'do not print the value of top-level expression statements',
    )
    parser.add_argument(
        '--print-ast', action = 'store_true',
        help = 'print top-level expressions as s-expressions instead of running',
    )

    return parser.parse_args(argv)

# ====================================================================
# Drivers

def print_ast(source: str, reporter: Reporter) -> int:
    prgm = Parser(reporter).parse_source(source)
    for stmt in prgm:
        if isinstance(stmt, ExprStatement):
            print(sexpr(stmt.expression))
    return EX_DATAERR if reporter.had_error else 0

def run_file(path: str, echo: bool = True, ast: bool = False) -> int:
    try:
        with open(path, 'r') as stream:
            source = stream.read()

    except IOError as e:
        print(f'cannot read input file {path}: {e}', file = sys.stderr)
        return EX_NOINPUT

    reporter = Reporter()
    if ast:
        return print_ast(source, reporter)

    run(source, Interpreter(reporter = reporter, echo = echo))

    if reporter.had_error:
        return EX_DATAERR
    if reporter.had_runtime_error:
        return EX_SOFTWARE
    return 0

def run_prompt(echo: bool = True, ast: bool = False) -> int:
    reporter    = Reporter()
    interpreter = Interpreter(reporter = reporter, echo = echo)

    while True:
        try:
            line = input('> ')
        except EOFError:
            print()
            return 0

        if ast:
            print_ast(line, reporter)
        else:
            run(line, interpreter)
        reporter.reset()

# ====================================================================
# Main entry point

def _main(argv = None) -> int:
    args = parse_args(argv)

    if args.input is None:
        return run_prompt(echo = args.echo, ast = args.print_ast)
    return run_file(args.input, echo = args.echo, ast = args.print_ast)

# --------------------------------------------------------------------
if __name__ == '__main__':
    sys.exit(_main())
