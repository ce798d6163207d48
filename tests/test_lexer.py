"""Scanner tests."""

from loxlib.loxlexer import Lexer, TokenKind as TK


def kinds(tokens):
    return [t.kind for t in tokens]


def test_punctuation_and_operators(reporter):
    tokens = Lexer(reporter).tokenize("(){},.-+;/* ! != = == > >= < <=")
    assert kinds(tokens) == [
        TK.LEFT_PAREN, TK.RIGHT_PAREN, TK.LEFT_BRACE, TK.RIGHT_BRACE,
        TK.COMMA, TK.DOT, TK.MINUS, TK.PLUS, TK.SEMICOLON, TK.SLASH,
        TK.STAR, TK.BANG, TK.BANG_EQUAL, TK.EQUAL, TK.EQUAL_EQUAL,
        TK.GREATER, TK.GREATER_EQUAL, TK.LESS, TK.LESS_EQUAL, TK.EOF,
    ]
    assert reporter.messages == []


def test_literals(reporter):
    tokens = Lexer(reporter).tokenize('123 4.5 "hello" name')
    assert kinds(tokens) == [TK.NUMBER, TK.NUMBER, TK.STRING, TK.IDENTIFIER, TK.EOF]
    assert tokens[0].literal == 123.0
    assert isinstance(tokens[0].literal, float)
    assert tokens[1].literal == 4.5
    assert tokens[2].lexeme == '"hello"'
    assert tokens[2].literal == "hello"
    assert tokens[3].lexeme == "name"
    assert tokens[3].literal is None


def test_keywords_and_identifiers(reporter):
    tokens = Lexer(reporter).tokenize("class classy fun var orchid or nil break")
    assert kinds(tokens) == [
        TK.CLASS, TK.IDENTIFIER, TK.FUN, TK.VAR, TK.IDENTIFIER, TK.OR,
        TK.NIL, TK.BREAK, TK.EOF,
    ]


def test_trailing_dot_is_not_part_of_number(reporter):
    tokens = Lexer(reporter).tokenize("12.")
    assert kinds(tokens) == [TK.NUMBER, TK.DOT, TK.EOF]


def test_comments_and_lines(reporter):
    source = "var a = 1; // comment\n\nprint a;\n"
    tokens = Lexer(reporter).tokenize(source)
    assert kinds(tokens) == [
        TK.VAR, TK.IDENTIFIER, TK.EQUAL, TK.NUMBER, TK.SEMICOLON,
        TK.PRINT, TK.IDENTIFIER, TK.SEMICOLON, TK.EOF,
    ]
    assert [t.line for t in tokens] == [1, 1, 1, 1, 1, 3, 3, 3, 4]


def test_multiline_string_counts_lines(reporter):
    tokens = Lexer(reporter).tokenize('"a\nb"\nx')
    assert tokens[0].literal == "a\nb"
    assert tokens[0].line == 1
    assert tokens[1].line == 3


def test_unexpected_character_is_reported_and_skipped(reporter):
    tokens = Lexer(reporter).tokenize("a @ b")
    assert kinds(tokens) == [TK.IDENTIFIER, TK.IDENTIFIER, TK.EOF]
    assert reporter.messages == ["[line 1] Error: Unexpected character '@'."]


def test_unterminated_string(reporter):
    tokens = Lexer(reporter).tokenize('print "oops')
    assert kinds(tokens) == [TK.PRINT, TK.EOF]
    assert reporter.messages == ["[line 1] Error: Unterminated string."]


def test_lexer_is_reusable(reporter):
    lexer = Lexer(reporter)
    lexer.tokenize("a\nb\nc")
    tokens = lexer.tokenize("d")
    assert tokens[0].line == 1
