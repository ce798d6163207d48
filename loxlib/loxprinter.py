# --------------------------------------------------------------------
import decimal
import math

from .loxast     import *
from .loxruntime import stringify

# ====================================================================
# Debug printers
#
# sexpr()  -> (* (- 50) (group 23.133))
# rpn()    -> 50 - 23.133 group *
# source() -> (((-50)) * 23.133), parseable again

def sexpr(expr: Expression) -> str:
    def parenthesize(name: str, *exprs: Expression) -> str:
        return f"({' '.join([name, *map(sexpr, exprs)])})"

    match expr:
        case LiteralExpression(value):
            return stringify(value)
        case GroupingExpression(inner):
            return parenthesize('group', inner)
        case UnaryExpression(operator, right):
            return parenthesize(operator.lexeme, right)
        case BinaryExpression(left, operator, right) | LogicalExpression(left, operator, right):
            return parenthesize(operator.lexeme, left, right)
        case VarExpression(name):
            return name.lexeme
        case AssignExpression(name, value):
            return parenthesize(f'= {name.lexeme}', value)
        case CallExpression(callee, _, arguments):
            return parenthesize('call', callee, *arguments)
        case GetExpression(object_, name):
            return parenthesize(f'. {name.lexeme}', object_)
        case SetExpression(object_, name, value):
            return parenthesize(f'.= {name.lexeme}', object_, value)
        case ThisExpression(_):
            return 'this'
        case SuperExpression(_, method):
            return f'(super {method.lexeme})'
        case FunExpression(params, _):
            return f"(fun ({' '.join(p.lexeme for p in params)}))"
        case SequenceExpression(expressions):
            return parenthesize(',', *expressions)

    assert(False)

# --------------------------------------------------------------------
def rpn(expr: Expression) -> str:
    def node(name: str, *exprs: Expression) -> str:
        return ' '.join([*map(rpn, exprs), name])

    match expr:
        case LiteralExpression(value):
            return stringify(value)
        case GroupingExpression(inner):
            return node('group', inner)
        case UnaryExpression(operator, right):
            return node(operator.lexeme, right)
        case BinaryExpression(left, operator, right) | LogicalExpression(left, operator, right):
            return node(operator.lexeme, left, right)
        case VarExpression(name):
            return name.lexeme
        case AssignExpression(name, value):
            return node(f'{name.lexeme} =', value)
        case CallExpression(callee, _, arguments):
            return node(f'call/{len(arguments)}', callee, *arguments)
        case GetExpression(object_, name):
            return node(f'.{name.lexeme}', object_)
        case SetExpression(object_, name, value):
            return node(f'.{name.lexeme} =', object_, value)
        case ThisExpression(_):
            return 'this'
        case SuperExpression(_, method):
            return f'super.{method.lexeme}'
        case FunExpression(params, _):
            return f'fun/{len(params)}'
        case SequenceExpression(expressions):
            return node(f',/{len(expressions)}', *expressions)

    assert(False)

# --------------------------------------------------------------------
def number(value: float) -> str:
    if not math.isfinite(value):
        raise ValueError(f'{value} has no source form')

    text = format(decimal.Decimal(repr(abs(value))), 'f')
    if text.endswith('.0'):
        text = text[:-2]
    return f'(-{text})' if value < 0 or repr(value) == '-0.0' else text

def source(node: AST, indent: int = 0) -> str:
    """
    render an expression or a statement back to (fully parenthesized)
    source text
    """
    pad = '    ' * indent

    def body(stmts: Block) -> str:
        return block(stmts, indent)

    match node:
        # Expressions
        case LiteralExpression(None):
            return 'nil'
        case LiteralExpression(bool(value)):
            return 'true' if value else 'false'
        case LiteralExpression(float(value)):
            return number(value)
        case LiteralExpression(str(value)):
            return f'"{value}"'
        case GroupingExpression(inner):
            return f'({source(inner, indent)})'
        case UnaryExpression(operator, right):
            return f'({operator.lexeme}{source(right, indent)})'
        case BinaryExpression(left, operator, right) | LogicalExpression(left, operator, right):
            return f'({source(left, indent)} {operator.lexeme} {source(right, indent)})'
        case VarExpression(name):
            return name.lexeme
        case AssignExpression(name, value):
            return f'({name.lexeme} = {source(value, indent)})'
        case CallExpression(callee, _, arguments):
            arguments = ', '.join(source(a, indent) for a in arguments)
            return f'{source(callee, indent)}({arguments})'
        case GetExpression(object_, name):
            return f'{source(object_, indent)}.{name.lexeme}'
        case SetExpression(object_, name, value):
            return f'({source(object_, indent)}.{name.lexeme} = {source(value, indent)})'
        case ThisExpression(_):
            return 'this'
        case SuperExpression(_, method):
            return f'super.{method.lexeme}'
        case FunExpression(params, stmts):
            return f"(fun ({', '.join(p.lexeme for p in params)}) {body(stmts)})"
        case SequenceExpression(expressions):
            return f"({', '.join(source(e, indent) for e in expressions)})"

        # Statements
        case ExprStatement(expr):
            return f'{pad}{source(expr, indent)};'
        case PrintStatement(value):
            return f'{pad}print {source(value, indent)};'
        case VarDeclStatement(name, None):
            return f'{pad}var {name.lexeme};'
        case VarDeclStatement(name, init):
            return f'{pad}var {name.lexeme} = {source(init, indent)};'
        case BlockStatement(stmts):
            return pad + body(stmts)
        case IfStatement(condition, iftrue, iffalse):
            aout = f'{pad}if ({source(condition, indent)})\n{source(iftrue, indent + 1)}'
            if iffalse is not None:
                aout += f'\n{pad}else\n{source(iffalse, indent + 1)}'
            return aout
        case WhileStatement(condition, stmt):
            return f'{pad}while ({source(condition, indent)})\n{source(stmt, indent + 1)}'
        case ReturnStatement(_, None):
            return f'{pad}return;'
        case ReturnStatement(_, value):
            return f'{pad}return {source(value, indent)};'
        case BreakStatement(_):
            return f'{pad}break;'
        case FunDecl(name, FunExpression(params, stmts)):
            return f"{pad}fun {name.lexeme}({', '.join(p.lexeme for p in params)}) {body(stmts)}"
        case ClassDecl(name, superclass, methods):
            header = f'{pad}class {name.lexeme}'
            if superclass is not None:
                header += f' < {superclass.name.lexeme}'
            inner = ''.join(
                f"{pad}    {m.name.lexeme}({', '.join(p.lexeme for p in m.function.params)}) "
                f"{block(m.function.body, indent + 1)}\n"
                for m in methods
            )
            return header + ' {\n' + inner + pad + '}'

    assert(False)

def block(stmts: Block, indent: int) -> str:
    inner = ''.join(source(s, indent + 1) + '\n' for s in stmts)
    return '{\n' + inner + '    ' * indent + '}'
