# --------------------------------------------------------------------
import contextlib as cl
import dataclasses as dc
import sys

from typing import Optional as Opt

# ====================================================================
# Source positions

@dc.dataclass(frozen = True)
class Position:
    line  : int
    where : str = ''

    @staticmethod
    def of_token(token):
        if token is None:
            return None
        where = f" at '{token.lexeme}'" if token.lexeme else ' at end'
        return Position(token.line, where)

    def __str__(self):
        return f'[line {self.line}] Error{self.where}'

# ====================================================================
# Error taxonomy

class LoxError(Exception):
    """
    every diagnostic carries the offending token (when there is one)
    and a human readable message
    """
    def __init__(self, token, message: str):
        super().__init__(message)
        self.token   = token
        self.message = message

    @property
    def position(self) -> Opt[Position]:
        return Position.of_token(self.token)

# --------------------------------------------------------------------
class ParseError(LoxError):
    pass

class InvalidAssignmentTarget(ParseError):
    pass

class BreakOutsideLoop(ParseError):
    pass

# --------------------------------------------------------------------
class ResolveError(LoxError):
    pass

# --------------------------------------------------------------------
class LoxRuntimeError(LoxError):
    pass

class LoxTypeError(LoxRuntimeError):
    pass

class ArityMismatch(LoxRuntimeError):
    def __init__(self, token, expected: int, got: int):
        super().__init__(token, f'Expected {expected} arguments but got {got}.')
        self.expected = expected
        self.got      = got

class DivisionByZero(LoxRuntimeError):
    pass

class UndefinedVariable(LoxRuntimeError):
    def __init__(self, token):
        super().__init__(token, f"Undefined variable '{token.lexeme}'.")

class UndefinedProperty(LoxRuntimeError):
    def __init__(self, token):
        super().__init__(token, f"Undefined property '{token.lexeme}'.")

# ====================================================================
# Reporter

class Checkpoint:
    def __init__(self, reporter: 'Reporter'):
        self.reporter = reporter
        self.start    = reporter.nerrors

    def __bool__(self):
        return self.reporter.nerrors == self.start

class Reporter:
    """
    collect and print diagnostics

    `reporter(msg, position)` reports a static error (lexing, parsing,
    resolution), `reporter.runtime_error(e)` a runtime one. The stream
    defaults to whatever `sys.stderr` is at report time.
    """
    def __init__(self, stream = None):
        self.stream   = stream
        self.messages = []
        self.nerrors  = 0
        self.nruntime = 0

    def _emit(self, text: str):
        self.messages.append(text)
        print(text, file = self.stream or sys.stderr)

    def __call__(self, msg: str, position: Opt[Position] = None):
        self.nerrors += 1
        self._emit(f'{position}: {msg}' if position else f'Error: {msg}')

    def error(self, error: LoxError):
        self(error.message, position = error.position)

    def runtime_error(self, error: LoxRuntimeError):
        self.nruntime += 1
        if error.token is None:
            self._emit(error.message)
        else:
            self._emit(f'{error.message}\n[line {error.token.line}]')

    @property
    def had_error(self):
        return self.nerrors > 0

    @property
    def had_runtime_error(self):
        return self.nruntime > 0

    def reset(self):
        self.nerrors  = 0
        self.nruntime = 0

    @cl.contextmanager
    def checkpoint(self):
        yield Checkpoint(self)
