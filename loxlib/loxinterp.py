# --------------------------------------------------------------------
import sys

from .loxast      import *
from .loxenv      import Environment
from .loxerrors   import *
from .loxlexer    import Lexer, TokenKind as TK
from .loxparser   import Parser
from .loxresolver import resolve
from .loxruntime  import *

# ====================================================================
# Tree-walking evaluator

# A Lox call costs about six Python frames; this leaves room for well
# over a thousand nested Lox calls before `Stack overflow.` is reported.
RECURSION_LIMIT = 10000

class Interpreter:
    def __init__(
            self,
            stdout   = None,
            reporter : Opt[Reporter] = None,
            echo     : bool          = True,
    ):
        self.stdout      = stdout
        self.reporter    = reporter or Reporter()
        self.echo        = echo
        self.globals     = Environment()
        self.environment = self.globals

        sys.setrecursionlimit(max(sys.getrecursionlimit(), RECURSION_LIMIT))

        for native in natives():
            self.globals.define(native.name, native)

    def output(self, value):
        print(stringify(value), file = self.stdout or sys.stdout)

    def interpret(self, prgm: Program):
        """
        run the top-level statements in order; a runtime error aborts
        the statement it occurs in and is reported, then execution goes
        on with the next one
        """
        for stmt in prgm:
            try:
                match stmt:
                    case ExprStatement(expr) if self.echo:
                        self.output(self.for_expression(expr))
                    case _:
                        self.for_statement(stmt)

            except LoxRuntimeError as e:
                self.reporter.runtime_error(e)

            except RecursionError:
                self.reporter.runtime_error(LoxRuntimeError(None, 'Stack overflow.'))

    # ----------------------------------------------------------------
    # Statements

    def execute_block(self, stmts: Block, env: Environment) -> Completion:
        previous = self.environment
        try:
            self.environment = env
            for stmt in stmts:
                completion = self.for_statement(stmt)
                if completion is not None:
                    return completion
            return None
        finally:
            self.environment = previous

    def for_statement(self, stmt: Statement) -> Completion:
        match stmt:
            case ExprStatement(expr):
                self.for_expression(expr)

            case PrintStatement(value):
                self.output(self.for_expression(value))

            case VarDeclStatement(name, init):
                value = None if init is None else self.for_expression(init)
                self.environment.define(name.lexeme, value)

            case BlockStatement(body):
                return self.execute_block(body, Environment(self.environment))

            case IfStatement(condition, iftrue, iffalse):
                if is_truthy(self.for_expression(condition)):
                    return self.for_statement(iftrue)
                if iffalse is not None:
                    return self.for_statement(iffalse)

            case WhileStatement(condition, body):
                while is_truthy(self.for_expression(condition)):
                    match self.for_statement(body):
                        case BreakSignal():
                            break
                        case ReturnSignal() as completion:
                            return completion

            case ReturnStatement(_, value):
                return ReturnSignal(None if value is None else self.for_expression(value))

            case BreakStatement(_):
                return BreakSignal()

            case FunDecl(name, function):
                self.environment.define(
                    name.lexeme,
                    LoxFunction(function, self.environment, name.lexeme),
                )

            case ClassDecl(_, _, _):
                self.for_class(stmt)

            case _:
                assert(False)

        return None

    def for_class(self, decl: ClassDecl):
        superclass = None
        if decl.superclass is not None:
            superclass = self.for_expression(decl.superclass)
            if not isinstance(superclass, LoxClass):
                raise LoxTypeError(decl.superclass.name, 'Superclass must be a class.')

        self.environment.define(decl.name.lexeme, None)

        closure = self.environment
        if superclass is not None:
            closure = Environment(closure)
            closure.define('super', superclass)

        methods = {
            method.name.lexeme: LoxFunction(
                method.function,
                closure,
                name           = method.name.lexeme,
                is_initializer = method.name.lexeme == 'init',
            )
            for method in decl.methods
        }

        klass = LoxClass(decl.name.lexeme, superclass, methods)
        self.environment.assign(decl.name, klass)

    # ----------------------------------------------------------------
    # Expressions

    def lookup_variable(self, name: Token, depth: Opt[int]):
        if depth is None:
            return self.globals.get(name)
        return self.environment.get_at(depth, name.lexeme)

    @staticmethod
    def check_number_operand(operator: Token, operand):
        if not isinstance(operand, float):
            raise LoxTypeError(operator, 'Operand must be a number.')

    @staticmethod
    def check_number_operands(operator: Token, left, right):
        if not (isinstance(left, float) and isinstance(right, float)):
            raise LoxTypeError(operator, 'Operands must be numbers.')

    def for_binary(self, left, operator: Token, right):
        match operator.kind:
            case TK.PLUS:
                if isinstance(left, float) and isinstance(right, float):
                    return left + right
                if isinstance(left, str) or isinstance(right, str):
                    return stringify(left) + stringify(right)
                raise LoxTypeError(
                    operator,
                    'Operands must be two numbers or at least one string.',
                )

            case TK.SLASH:
                if isinstance(right, float) and right == 0.0:
                    raise DivisionByZero(operator, 'Division by zero.')
                self.check_number_operands(operator, left, right)
                return left / right

            case TK.EQUAL_EQUAL:
                return is_equal(left, right)

            case TK.BANG_EQUAL:
                return not is_equal(left, right)

        self.check_number_operands(operator, left, right)

        match operator.kind:
            case TK.MINUS:
                return left - right
            case TK.STAR:
                return left * right
            case TK.GREATER:
                return left > right
            case TK.GREATER_EQUAL:
                return left >= right
            case TK.LESS:
                return left < right
            case TK.LESS_EQUAL:
                return left <= right

        assert(False)

    def for_call(self, expr: CallExpression):
        callee    = self.for_expression(expr.callee)
        arguments = [self.for_expression(a) for a in expr.arguments]

        if not isinstance(callee, LoxCallable):
            raise LoxTypeError(expr.paren, 'Can only call functions and classes.')

        if len(arguments) != callee.arity():
            raise ArityMismatch(expr.paren, callee.arity(), len(arguments))

        try:
            return callee.call(self, arguments)
        except RecursionError:
            raise LoxRuntimeError(expr.paren, 'Stack overflow.') from None

    def for_expression(self, expr: Expression):
        match expr:
            case LiteralExpression(value):
                return value

            case GroupingExpression(inner):
                return self.for_expression(inner)

            case UnaryExpression(operator, right):
                right = self.for_expression(right)

                match operator.kind:
                    case TK.MINUS:
                        self.check_number_operand(operator, right)
                        return -right
                    case TK.BANG:
                        return not is_truthy(right)

                assert(False)

            case BinaryExpression(left, operator, right):
                left  = self.for_expression(left)
                right = self.for_expression(right)
                return self.for_binary(left, operator, right)

            case LogicalExpression(left, operator, right):
                left = self.for_expression(left)

                if operator.kind == TK.OR:
                    if is_truthy(left):
                        return left
                elif not is_truthy(left):
                    return left

                return self.for_expression(right)

            case VarExpression(name):
                return self.lookup_variable(name, expr.depth)

            case AssignExpression(name, value):
                value = self.for_expression(value)

                if expr.depth is None:
                    self.globals.assign(name, value)
                else:
                    self.environment.assign_at(expr.depth, name.lexeme, value)

                return value

            case CallExpression(_, _, _):
                return self.for_call(expr)

            case GetExpression(object_, name):
                object_ = self.for_expression(object_)
                if not isinstance(object_, LoxInstance):
                    raise LoxTypeError(name, 'Only instances have properties.')
                return object_.get(name)

            case SetExpression(object_, name, value):
                object_ = self.for_expression(object_)
                if not isinstance(object_, LoxInstance):
                    raise LoxTypeError(name, 'Only instances have fields.')

                value = self.for_expression(value)
                object_.set(name, value)
                return value

            case ThisExpression(keyword):
                return self.lookup_variable(keyword, expr.depth)

            case SuperExpression(_, method):
                # `super` sits one frame above the `this` frame of the
                # method being executed
                superclass = self.environment.get_at(expr.depth, 'super')
                instance   = self.environment.get_at(expr.depth - 1, 'this')

                function = superclass.find_method(method.lexeme)
                if function is None:
                    raise UndefinedProperty(method)
                return function.bind(instance)

            case FunExpression(_, _):
                return LoxFunction(expr, self.environment)

            case SequenceExpression(expressions):
                value = None
                for e in expressions:
                    value = self.for_expression(e)
                return value

            case _:
                assert(False)

# ====================================================================
# Pipeline

def run(source: str, interpreter: Interpreter) -> bool:
    """
    scan, parse, resolve and execute `source`; returns False, without
    executing anything, when a static error was reported
    """
    reporter = interpreter.reporter

    with reporter.checkpoint() as checkpoint:
        tokens = Lexer(reporter).tokenize(source)
        prgm   = Parser(reporter).parse(tokens)

        if not checkpoint or not resolve(prgm, reporter):
            return False

    interpreter.interpret(prgm)
    return True
