# --------------------------------------------------------------------
import contextlib as cl
import enum

from .loxast    import *
from .loxerrors import ResolveError, Reporter

# ====================================================================
# Static scope resolution
#
# Walks the program with the same scope structure the interpreter
# builds at runtime and records, on every variable reference, how many
# scopes separate it from its binding. Anything not found in a local
# scope is left unresolved and looked up in the globals at runtime.

class FunctionKind(enum.Enum):
    NONE     = 0
    FUNCTION = 1

class ClassKind(enum.Enum):
    NONE     = 0
    CLASS    = 1
    SUBCLASS = 2

# --------------------------------------------------------------------
class Resolver:
    def __init__(self, reporter: Reporter):
        self.reporter = reporter
        self.scopes   = []
        self.function = FunctionKind.NONE
        self.klass    = ClassKind.NONE

    def report(self, token: Token, msg: str):
        self.reporter.error(ResolveError(token, msg))

    @cl.contextmanager
    def in_scope(self, **bindings: bool):
        self.scopes.append(dict(bindings))
        try:
            yield self
        finally:
            self.scopes.pop()

    @cl.contextmanager
    def in_function(self, kind: FunctionKind):
        enclosing, self.function = self.function, kind
        try:
            yield self
        finally:
            self.function = enclosing

    @cl.contextmanager
    def in_class(self, kind: ClassKind):
        enclosing, self.klass = self.klass, kind
        try:
            yield self
        finally:
            self.klass = enclosing

    def declare(self, name: Token):
        if not self.scopes:
            return

        scope = self.scopes[-1]
        if name.lexeme in scope:
            self.report(name, 'Already a variable with this name in this scope.')
        scope[name.lexeme] = False

    def define(self, name: Token):
        if self.scopes:
            self.scopes[-1][name.lexeme] = True

    def resolve_local(self, expr: Expression, name: str):
        for depth, scope in enumerate(reversed(self.scopes)):
            if name in scope:
                expr.depth = depth
                return

    def for_function(self, function: FunExpression, kind: FunctionKind):
        with self.in_function(kind), self.in_scope():
            for param in function.params:
                self.declare(param)
                self.define(param)
            self.for_statements(function.body)

    def for_class(self, decl: ClassDecl):
        kind = ClassKind.CLASS if decl.superclass is None else ClassKind.SUBCLASS

        with self.in_class(kind):
            self.declare(decl.name)
            self.define(decl.name)

            if decl.superclass is None:
                self.for_methods(decl.methods)
                return

            if decl.superclass.name.lexeme == decl.name.lexeme:
                self.report(decl.superclass.name, "A class can't inherit from itself.")
            self.for_expression(decl.superclass)

            with self.in_scope(super = True):
                self.for_methods(decl.methods)

    def for_methods(self, methods: list[FunDecl]):
        with self.in_scope(this = True):
            for method in methods:
                self.for_function(method.function, FunctionKind.FUNCTION)

    def for_expression(self, expr: Expression):
        match expr:
            case LiteralExpression(_):
                pass

            case GroupingExpression(inner):
                self.for_expression(inner)

            case UnaryExpression(_, right):
                self.for_expression(right)

            case BinaryExpression(left, _, right) | LogicalExpression(left, _, right):
                self.for_expression(left)
                self.for_expression(right)

            case VarExpression(name):
                if self.scopes and self.scopes[-1].get(name.lexeme) is False:
                    self.report(name, "Can't read local variable in its own initializer.")
                self.resolve_local(expr, name.lexeme)

            case AssignExpression(name, value):
                self.for_expression(value)
                self.resolve_local(expr, name.lexeme)

            case CallExpression(callee, _, arguments):
                self.for_expression(callee)
                for argument in arguments:
                    self.for_expression(argument)

            case GetExpression(object_, _):
                self.for_expression(object_)

            case SetExpression(object_, _, value):
                self.for_expression(value)
                self.for_expression(object_)

            case ThisExpression(keyword):
                if self.klass == ClassKind.NONE:
                    self.report(keyword, "Can't use 'this' outside of a class.")
                    return
                self.resolve_local(expr, 'this')

            case SuperExpression(keyword, _):
                if self.klass == ClassKind.NONE:
                    self.report(keyword, "Can't use 'super' outside of a class.")
                elif self.klass != ClassKind.SUBCLASS:
                    self.report(keyword, "Can't use 'super' in a class with no superclass.")
                self.resolve_local(expr, 'super')

            case FunExpression(_, _):
                self.for_function(expr, FunctionKind.FUNCTION)

            case SequenceExpression(expressions):
                for e in expressions:
                    self.for_expression(e)

            case _:
                assert(False)

    def for_statement(self, stmt: Statement):
        match stmt:
            case ExprStatement(expr) | PrintStatement(expr):
                self.for_expression(expr)

            case VarDeclStatement(name, init):
                self.declare(name)
                if init is not None:
                    self.for_expression(init)
                self.define(name)

            case BlockStatement(body):
                with self.in_scope():
                    self.for_statements(body)

            case IfStatement(condition, iftrue, iffalse):
                self.for_expression(condition)
                self.for_statement(iftrue)
                if iffalse is not None:
                    self.for_statement(iffalse)

            case WhileStatement(condition, body):
                self.for_expression(condition)
                self.for_statement(body)

            case ReturnStatement(keyword, value):
                if self.function == FunctionKind.NONE:
                    self.report(keyword, "Can't return from top-level code.")
                if value is not None:
                    self.for_expression(value)

            case BreakStatement(_):
                pass

            case FunDecl(name, function):
                self.declare(name)
                self.define(name)
                self.for_function(function, FunctionKind.FUNCTION)

            case ClassDecl(_, _, _):
                self.for_class(stmt)

            case _:
                assert(False)

    def for_statements(self, stmts: Block):
        for stmt in stmts:
            self.for_statement(stmt)

    def resolve(self, prgm: Program):
        for stmt in prgm:
            try:
                self.for_statement(stmt)
            except RecursionError:
                self.reporter('Nesting too deep.')

# --------------------------------------------------------------------
def resolve(prgm: Program, reporter: Reporter):
    with reporter.checkpoint() as checkpoint:
        Resolver(reporter).resolve(prgm)
        return bool(checkpoint)
