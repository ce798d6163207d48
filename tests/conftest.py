"""Shared fixtures for the interpreter test suite."""

import io

import pytest

from loxlib.loxast import ExprStatement
from loxlib.loxerrors import Reporter
from loxlib.loxinterp import Interpreter, run
from loxlib.loxparser import Parser
from loxlib.loxresolver import resolve


class Session:
    """An interpreter wired to in-memory output and error streams."""

    def __init__(self, echo: bool = False):
        self.stdout = io.StringIO()
        self.reporter = Reporter(stream=io.StringIO())
        self.interpreter = Interpreter(
            stdout=self.stdout, reporter=self.reporter, echo=echo
        )

    def run(self, source: str) -> "Session":
        run(source, self.interpreter)
        return self

    def evaluate(self, source: str):
        """Parse and resolve a single expression, then evaluate it."""
        prgm = Parser(self.reporter).parse_source(source + ";")
        assert self.reporter.messages == []
        assert resolve(prgm, self.reporter)
        [stmt] = prgm
        assert isinstance(stmt, ExprStatement)
        return self.interpreter.for_expression(stmt.expression)

    @property
    def output(self) -> list[str]:
        return self.stdout.getvalue().splitlines()

    @property
    def errors(self) -> list[str]:
        return self.reporter.messages


@pytest.fixture
def session() -> Session:
    return Session()


@pytest.fixture
def lox():
    """Run a program and return the finished session."""

    def _run(source: str, echo: bool = False) -> Session:
        return Session(echo=echo).run(source)

    return _run


@pytest.fixture
def reporter() -> Reporter:
    return Reporter(stream=io.StringIO())


@pytest.fixture
def parse(reporter):
    """Parse source text into a program, collecting diagnostics in `reporter`."""

    def _parse(source: str):
        return Parser(reporter).parse_source(source)

    return _parse
