# --------------------------------------------------------------------
import dataclasses as dc

from typing import Optional as Opt

from .loxlexer import Token

# ====================================================================
# Abstract Syntax Tree

# --------------------------------------------------------------------
@dc.dataclass
class AST:
    pass

# --------------------------------------------------------------------
@dc.dataclass
class Expression(AST):
    pass

# --------------------------------------------------------------------
@dc.dataclass
class LiteralExpression(Expression):
    value: None | bool | float | str

# --------------------------------------------------------------------
@dc.dataclass
class GroupingExpression(Expression):
    expression: Expression

# --------------------------------------------------------------------
@dc.dataclass
class UnaryExpression(Expression):
    operator: Token
    right: Expression

# --------------------------------------------------------------------
@dc.dataclass
class BinaryExpression(Expression):
    left: Expression
    operator: Token
    right: Expression

# --------------------------------------------------------------------
@dc.dataclass
class LogicalExpression(Expression):
    left: Expression
    operator: Token
    right: Expression

# --------------------------------------------------------------------
# `depth` is the number of scopes between the reference and its
# binding, filled in by the resolver. None means global.

@dc.dataclass
class VarExpression(Expression):
    name: Token
    depth: Opt[int] = dc.field(kw_only = True, default = None, compare = False)

# --------------------------------------------------------------------
@dc.dataclass
class AssignExpression(Expression):
    name: Token
    value: Expression
    depth: Opt[int] = dc.field(kw_only = True, default = None, compare = False)

# --------------------------------------------------------------------
@dc.dataclass
class CallExpression(Expression):
    callee: Expression
    paren: Token
    arguments: list[Expression]

# --------------------------------------------------------------------
@dc.dataclass
class GetExpression(Expression):
    object_: Expression
    name: Token

# --------------------------------------------------------------------
@dc.dataclass
class SetExpression(Expression):
    object_: Expression
    name: Token
    value: Expression

# --------------------------------------------------------------------
@dc.dataclass
class ThisExpression(Expression):
    keyword: Token
    depth: Opt[int] = dc.field(kw_only = True, default = None, compare = False)

# --------------------------------------------------------------------
@dc.dataclass
class SuperExpression(Expression):
    keyword: Token
    method: Token
    depth: Opt[int] = dc.field(kw_only = True, default = None, compare = False)

# --------------------------------------------------------------------
@dc.dataclass
class FunExpression(Expression):
    params: list[Token]
    body: 'Block'

# --------------------------------------------------------------------
@dc.dataclass
class SequenceExpression(Expression):
    expressions: list[Expression]

# --------------------------------------------------------------------
@dc.dataclass
class Statement(AST):
    pass

# --------------------------------------------------------------------
@dc.dataclass
class ExprStatement(Statement):
    expression: Expression

# --------------------------------------------------------------------
@dc.dataclass
class PrintStatement(Statement):
    value: Expression

# --------------------------------------------------------------------
@dc.dataclass
class VarDeclStatement(Statement):
    name: Token
    init: Opt[Expression]

# --------------------------------------------------------------------
@dc.dataclass
class BlockStatement(Statement):
    body: 'Block'

# --------------------------------------------------------------------
@dc.dataclass
class IfStatement(Statement):
    condition: Expression
    iftrue: Statement
    iffalse: Opt[Statement]

# --------------------------------------------------------------------
@dc.dataclass
class WhileStatement(Statement):
    condition: Expression
    body: Statement

# --------------------------------------------------------------------
@dc.dataclass
class ReturnStatement(Statement):
    keyword: Token
    value: Opt[Expression]

# --------------------------------------------------------------------
@dc.dataclass
class BreakStatement(Statement):
    keyword: Token

# --------------------------------------------------------------------
@dc.dataclass
class FunDecl(Statement):
    name: Token
    function: FunExpression

# --------------------------------------------------------------------
@dc.dataclass
class ClassDecl(Statement):
    name: Token
    superclass: Opt[VarExpression]
    methods: list[FunDecl]

# --------------------------------------------------------------------
Block   = list[Statement]
Program = Block
