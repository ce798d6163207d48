# --------------------------------------------------------------------
import dataclasses as dc
import enum
import re

import ply.lex

from .loxerrors import Position, Reporter

# ====================================================================
# Tokens

class TokenKind(enum.Enum):
    # Punctuation
    LEFT_PAREN    = enum.auto()
    RIGHT_PAREN   = enum.auto()
    LEFT_BRACE    = enum.auto()
    RIGHT_BRACE   = enum.auto()
    COMMA         = enum.auto()
    DOT           = enum.auto()
    MINUS         = enum.auto()
    PLUS          = enum.auto()
    SEMICOLON     = enum.auto()
    SLASH         = enum.auto()
    STAR          = enum.auto()

    BANG          = enum.auto()
    BANG_EQUAL    = enum.auto()
    EQUAL         = enum.auto()
    EQUAL_EQUAL   = enum.auto()
    GREATER       = enum.auto()
    GREATER_EQUAL = enum.auto()
    LESS          = enum.auto()
    LESS_EQUAL    = enum.auto()

    # Literals
    IDENTIFIER    = enum.auto()
    STRING        = enum.auto()
    NUMBER        = enum.auto()

    # Keywords
    AND           = enum.auto()
    BREAK         = enum.auto()
    CLASS         = enum.auto()
    ELSE          = enum.auto()
    FALSE         = enum.auto()
    FOR           = enum.auto()
    FUN           = enum.auto()
    IF            = enum.auto()
    NIL           = enum.auto()
    OR            = enum.auto()
    PRINT         = enum.auto()
    RETURN        = enum.auto()
    SUPER         = enum.auto()
    THIS          = enum.auto()
    TRUE          = enum.auto()
    VAR           = enum.auto()
    WHILE         = enum.auto()

    EOF           = enum.auto()

# --------------------------------------------------------------------
@dc.dataclass(frozen = True)
class Token:
    kind    : TokenKind
    lexeme  : str
    literal : object = None
    line    : int    = 1

    def __str__(self):
        return f'{self.kind.name} {self.lexeme} {self.literal}'

# ====================================================================
# Lexer

class Lexer:
    keywords = {
        x: x.upper() for x in (
            'and'    ,
            'break'  ,
            'class'  ,
            'else'   ,
            'false'  ,
            'for'    ,
            'fun'    ,
            'if'     ,
            'nil'    ,
            'or'     ,
            'print'  ,
            'return' ,
            'super'  ,
            'this'   ,
            'true'   ,
            'var'    ,
            'while'  ,
        )
    }

    tokens = (
        'IDENTIFIER'    ,       # : str
        'STRING'        ,       # : str
        'NUMBER'        ,       # : float

        # Punctuation
        'LEFT_PAREN'    ,
        'RIGHT_PAREN'   ,
        'LEFT_BRACE'    ,
        'RIGHT_BRACE'   ,
        'COMMA'         ,
        'DOT'           ,
        'MINUS'         ,
        'PLUS'          ,
        'SEMICOLON'     ,
        'SLASH'         ,
        'STAR'          ,

        'BANG'          ,
        'BANG_EQUAL'    ,
        'EQUAL'         ,
        'EQUAL_EQUAL'   ,
        'GREATER'       ,
        'GREATER_EQUAL' ,
        'LESS'          ,
        'LESS_EQUAL'    ,
    ) + tuple(keywords.values())

    t_LEFT_PAREN    = re.escape('(')
    t_RIGHT_PAREN   = re.escape(')')
    t_LEFT_BRACE    = re.escape('{')
    t_RIGHT_BRACE   = re.escape('}')
    t_COMMA         = re.escape(',')
    t_DOT           = re.escape('.')
    t_MINUS         = re.escape('-')
    t_PLUS          = re.escape('+')
    t_SEMICOLON     = re.escape(';')
    t_SLASH         = re.escape('/')
    t_STAR          = re.escape('*')

    t_BANG          = re.escape('!')
    t_BANG_EQUAL    = re.escape('!=')
    t_EQUAL         = re.escape('=')
    t_EQUAL_EQUAL   = re.escape('==')
    t_GREATER       = re.escape('>')
    t_GREATER_EQUAL = re.escape('>=')
    t_LESS          = re.escape('<')
    t_LESS_EQUAL    = re.escape('<=')

    t_ignore = ' \t\r'          # Ignore all whitespaces
    t_ignore_comment = r'//.*'

    def __init__(self, reporter: Reporter):
        self.reporter = reporter
        self.lexer    = ply.lex.lex(module = self)

    def tokenize(self, source: str) -> list[Token]:
        """
        scan `source` into a list of tokens terminated by EOF
        """
        self.lexer.lineno = 1
        self.lexer.input(source)

        aout = []
        for tok in iter(self.lexer.token, None):
            kind = TokenKind[tok.type]

            match kind:
                case TokenKind.NUMBER:
                    literal = float(tok.value)
                case TokenKind.STRING:
                    literal = tok.value[1:-1]
                case _:
                    literal = None

            aout.append(Token(kind, tok.value, literal, tok.lineno))

        aout.append(Token(TokenKind.EOF, '', None, self.lexer.lineno))
        return aout

    def t_newline(self, t):
        r'\n+'
        t.lexer.lineno += len(t.value)

    def t_STRING(self, t):
        r'"[^"]*"'
        t.lexer.lineno += t.value.count('\n')
        return t

    def t_unterminated(self, t):
        r'"[^"]*\Z'
        self.reporter('Unterminated string.', position = Position(t.lexer.lineno))
        t.lexer.lineno += t.value.count('\n')

    def t_NUMBER(self, t):
        r'\d+(?:\.\d+)?'
        return t

    def t_IDENTIFIER(self, t):
        r'[a-zA-Z_][a-zA-Z0-9_]*'
        if t.value in self.keywords:
            t.type = self.keywords[t.value]
        return t

    def t_error(self, t):
        self.reporter(
            f"Unexpected character '{t.value[0]}'.",
            position = Position(t.lexer.lineno),
        )
        t.lexer.skip(1)
