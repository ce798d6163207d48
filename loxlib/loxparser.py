# --------------------------------------------------------------------
import contextlib as cl

from typing import Callable, Optional as Opt

from .loxast    import *
from .loxerrors import BreakOutsideLoop, InvalidAssignmentTarget, ParseError, Reporter
from .loxlexer  import Lexer, Token, TokenKind as TK

# ====================================================================
# Recursive-descent parser

class Parser:
    MAX_ARGUMENTS = 255

    SYNC_KINDS = frozenset((
        TK.CLASS, TK.FUN , TK.VAR  , TK.FOR   ,
        TK.IF   , TK.WHILE, TK.PRINT, TK.RETURN,
    ))

    def __init__(self, reporter: Reporter):
        self.reporter = reporter
        self.tokens   = []
        self.current  = 0
        self.loops    = 0

    def parse(self, tokens: list[Token]) -> Program:
        """
        parse a token list into a program; erroneous statements are
        reported and left out, as are statements nested too deeply for
        the host stack
        """
        self.tokens  = tokens
        self.current = 0
        self.loops   = 0

        prgm = []
        while not self.at_end():
            try:
                stmt = self.declaration()
            except RecursionError:
                self.error(self.peek(), 'Nesting too deep.')
                self.synchronize()
                continue
            if stmt is not None:
                prgm.append(stmt)
        return prgm

    def parse_source(self, source: str) -> Program:
        return self.parse(Lexer(self.reporter).tokenize(source))

    # ----------------------------------------------------------------
    # Token stream helpers

    def peek(self) -> Token:
        return self.tokens[self.current]

    def previous(self) -> Token:
        return self.tokens[self.current - 1]

    def at_end(self) -> bool:
        return self.peek().kind == TK.EOF

    def advance(self) -> Token:
        if not self.at_end():
            self.current += 1
        return self.previous()

    def check(self, kind: TK) -> bool:
        return not self.at_end() and self.peek().kind == kind

    def check_next(self, kind: TK) -> bool:
        if self.at_end():
            return False
        return self.tokens[self.current + 1].kind == kind

    def match(self, *kinds: TK) -> bool:
        for kind in kinds:
            if self.check(kind):
                self.advance()
                return True
        return False

    def consume(self, kind: TK, msg: str) -> Token:
        if self.check(kind):
            return self.advance()
        raise self.error(self.peek(), msg)

    def error(self, token: Token, msg: str, cls = ParseError) -> ParseError:
        error = cls(token, msg)
        self.reporter.error(error)
        return error

    def synchronize(self):
        self.advance()

        while not self.at_end():
            if self.previous().kind == TK.SEMICOLON:
                return
            if self.peek().kind in self.SYNC_KINDS:
                return
            self.advance()

    @cl.contextmanager
    def in_loop(self):
        self.loops += 1
        try:
            yield self
        finally:
            self.loops -= 1

    @cl.contextmanager
    def in_function(self):
        loops, self.loops = self.loops, 0
        try:
            yield self
        finally:
            self.loops = loops

    # ----------------------------------------------------------------
    # Declarations

    def declaration(self) -> Opt[Statement]:
        try:
            if self.match(TK.CLASS):
                return self.class_declaration()
            if self.check(TK.FUN) and self.check_next(TK.IDENTIFIER):
                self.advance()
                return self.function('function')
            if self.match(TK.VAR):
                return self.var_declaration()
            return self.statement()

        except ParseError:
            self.synchronize()
            return None

    def class_declaration(self) -> ClassDecl:
        name = self.consume(TK.IDENTIFIER, 'Expect class name.')

        superclass = None
        if self.match(TK.LESS):
            self.consume(TK.IDENTIFIER, 'Expect superclass name.')
            superclass = VarExpression(self.previous())

        self.consume(TK.LEFT_BRACE, "Expect '{' before class body.")

        methods = []
        while not self.check(TK.RIGHT_BRACE) and not self.at_end():
            methods.append(self.function('method'))

        self.consume(TK.RIGHT_BRACE, "Expect '}' after class body.")
        return ClassDecl(name, superclass, methods)

    def function(self, kind: str) -> FunDecl:
        name = self.consume(TK.IDENTIFIER, f'Expect {kind} name.')
        return FunDecl(name, self.function_body(kind))

    def function_body(self, kind: str) -> FunExpression:
        self.consume(TK.LEFT_PAREN, f"Expect '(' after {kind} name.")

        params = []
        if not self.check(TK.RIGHT_PAREN):
            while True:
                if len(params) >= self.MAX_ARGUMENTS:
                    self.error(self.peek(), f"Can't have more than {self.MAX_ARGUMENTS} parameters.")
                params.append(self.consume(TK.IDENTIFIER, 'Expect parameter name.'))
                if not self.match(TK.COMMA):
                    break

        self.consume(TK.RIGHT_PAREN, "Expect ')' after parameters.")
        self.consume(TK.LEFT_BRACE, f"Expect '{{' before {kind} body.")

        with self.in_function():
            body = self.block()
        return FunExpression(params, body)

    def var_declaration(self) -> VarDeclStatement:
        name = self.consume(TK.IDENTIFIER, 'Expect variable name.')

        init = None
        if self.match(TK.EQUAL):
            init = self.expression()

        self.consume(TK.SEMICOLON, "Expect ';' after variable declaration.")
        return VarDeclStatement(name, init)

    # ----------------------------------------------------------------
    # Statements

    def statement(self) -> Statement:
        if self.match(TK.BREAK):
            return self.break_statement()
        if self.match(TK.IF):
            return self.if_statement()
        if self.match(TK.PRINT):
            return self.print_statement()
        if self.match(TK.RETURN):
            return self.return_statement()
        if self.match(TK.FOR):
            return self.for_statement()
        if self.match(TK.WHILE):
            return self.while_statement()
        if self.match(TK.LEFT_BRACE):
            return BlockStatement(self.block())
        return self.expression_statement()

    def block(self) -> Block:
        stmts = []
        while not self.check(TK.RIGHT_BRACE) and not self.at_end():
            stmt = self.declaration()
            if stmt is not None:
                stmts.append(stmt)

        self.consume(TK.RIGHT_BRACE, "Expect '}' after block.")
        return stmts

    def break_statement(self) -> BreakStatement:
        keyword = self.previous()
        if self.loops == 0:
            raise self.error(
                keyword,
                'break statement must be used inside a loop.',
                cls = BreakOutsideLoop,
            )
        self.consume(TK.SEMICOLON, "Expect ';' after 'break'.")
        return BreakStatement(keyword)

    def if_statement(self) -> IfStatement:
        self.consume(TK.LEFT_PAREN, "Expect '(' after 'if'.")
        condition = self.expression()
        self.consume(TK.RIGHT_PAREN, "Expect ')' after if condition.")

        iftrue  = self.statement()
        iffalse = None
        if self.match(TK.ELSE):
            iffalse = self.statement()

        return IfStatement(condition, iftrue, iffalse)

    def print_statement(self) -> PrintStatement:
        value = self.expression()
        self.consume(TK.SEMICOLON, "Expect ';' after value.")
        return PrintStatement(value)

    def return_statement(self) -> ReturnStatement:
        keyword = self.previous()
        value   = None
        if not self.check(TK.SEMICOLON):
            value = self.expression()
        self.consume(TK.SEMICOLON, "Expect ';' after return value.")
        return ReturnStatement(keyword, value)

    def for_statement(self) -> Statement:
        self.consume(TK.LEFT_PAREN, "Expect '(' after 'for'.")

        if self.match(TK.SEMICOLON):
            init = None
        elif self.match(TK.VAR):
            init = self.var_declaration()
        else:
            init = self.expression_statement()

        condition = None
        if not self.check(TK.SEMICOLON):
            condition = self.expression()
        self.consume(TK.SEMICOLON, "Expect ';' after loop condition.")

        increment = None
        if not self.check(TK.RIGHT_PAREN):
            increment = self.expression()
        self.consume(TK.RIGHT_PAREN, "Expect ')' after for clauses.")

        with self.in_loop():
            body = self.statement()

        # for (init; condition; increment) body
        #   ~> { init; while (condition) { body; increment; } }
        if increment is not None:
            body = BlockStatement([body, ExprStatement(increment)])

        if condition is None:
            condition = LiteralExpression(True)
        body = WhileStatement(condition, body)

        if init is not None:
            body = BlockStatement([init, body])

        return body

    def while_statement(self) -> WhileStatement:
        self.consume(TK.LEFT_PAREN, "Expect '(' after 'while'.")
        condition = self.expression()
        self.consume(TK.RIGHT_PAREN, "Expect ')' after condition.")

        with self.in_loop():
            body = self.statement()
        return WhileStatement(condition, body)

    def expression_statement(self) -> ExprStatement:
        expr = self.expression()
        self.consume(TK.SEMICOLON, "Expect ';' after expression.")
        return ExprStatement(expr)

    # ----------------------------------------------------------------
    # Expressions

    def expression(self) -> Expression:
        return self.sequence()

    def sequence(self) -> Expression:
        expr = self.assignment()

        if not self.check(TK.COMMA):
            return expr

        exprs = [expr]
        while self.match(TK.COMMA):
            exprs.append(self.assignment())
        return SequenceExpression(exprs)

    def assignment(self) -> Expression:
        expr = self.logic_or()

        if self.match(TK.EQUAL):
            equals = self.previous()
            value  = self.assignment()

            match expr:
                case VarExpression(name):
                    return AssignExpression(name, value)
                case GetExpression(object_, name):
                    return SetExpression(object_, name, value)

            self.error(equals, 'Invalid assignment target.', cls = InvalidAssignmentTarget)

        return expr

    def logical(self, operand: Callable[[], Expression], kind: TK) -> Expression:
        left = operand()

        while self.match(kind):
            operator = self.previous()
            right    = operand()
            left     = LogicalExpression(left, operator, right)

        return left

    def binary(self, operand: Callable[[], Expression], *kinds: TK) -> Expression:
        left = operand()

        while self.match(*kinds):
            operator = self.previous()
            right    = operand()
            left     = BinaryExpression(left, operator, right)

        return left

    def logic_or(self) -> Expression:
        return self.logical(self.logic_and, TK.OR)

    def logic_and(self) -> Expression:
        return self.logical(self.equality, TK.AND)

    def equality(self) -> Expression:
        return self.binary(self.comparison, TK.BANG_EQUAL, TK.EQUAL_EQUAL)

    def comparison(self) -> Expression:
        return self.binary(
            self.term,
            TK.GREATER, TK.GREATER_EQUAL, TK.LESS, TK.LESS_EQUAL,
        )

    def term(self) -> Expression:
        return self.binary(self.factor, TK.MINUS, TK.PLUS)

    def factor(self) -> Expression:
        return self.binary(self.unary, TK.SLASH, TK.STAR)

    def unary(self) -> Expression:
        if self.match(TK.BANG, TK.MINUS):
            operator = self.previous()
            right    = self.unary()
            return UnaryExpression(operator, right)

        return self.call()

    def call(self) -> Expression:
        expr = self.primary()

        while True:
            if self.match(TK.LEFT_PAREN):
                expr = self.finish_call(expr)
            elif self.match(TK.DOT):
                name = self.consume(TK.IDENTIFIER, "Expect property name after '.'.")
                expr = GetExpression(expr, name)
            else:
                break

        return expr

    def finish_call(self, callee: Expression) -> CallExpression:
        arguments = []
        if not self.check(TK.RIGHT_PAREN):
            while True:
                if len(arguments) >= self.MAX_ARGUMENTS:
                    self.error(self.peek(), f"Can't have more than {self.MAX_ARGUMENTS} arguments.")
                arguments.append(self.assignment())
                if not self.match(TK.COMMA):
                    break

        paren = self.consume(TK.RIGHT_PAREN, "Expect ')' after arguments.")
        return CallExpression(callee, paren, arguments)

    def primary(self) -> Expression:
        if self.match(TK.FALSE):
            return LiteralExpression(False)
        if self.match(TK.TRUE):
            return LiteralExpression(True)
        if self.match(TK.NIL):
            return LiteralExpression(None)

        if self.match(TK.NUMBER, TK.STRING):
            return LiteralExpression(self.previous().literal)

        if self.match(TK.SUPER):
            keyword = self.previous()
            self.consume(TK.DOT, "Expect '.' after 'super'.")
            method = self.consume(TK.IDENTIFIER, 'Expect superclass method name.')
            return SuperExpression(keyword, method)

        if self.match(TK.THIS):
            return ThisExpression(self.previous())

        if self.match(TK.IDENTIFIER):
            return VarExpression(self.previous())

        if self.match(TK.FUN):
            return self.function_body('function')

        if self.match(TK.LEFT_PAREN):
            expr = self.expression()
            self.consume(TK.RIGHT_PAREN, "Expect ')' after expression.")
            return GroupingExpression(expr)

        raise self.error(self.peek(), 'Expect expression.')
