from auralib import KEYWORDS, Lexer, TokenType


def token_types(text):
    return [tok.type for tok in Lexer('<test>', text).make_tokens()]


def test_let_statement():
    tokens = Lexer('<test>', 'var x = 5;').make_tokens()
    assert [tok.type for tok in tokens] == [
        TokenType.LET, TokenType.IDENT, TokenType.ASSIGN,
        TokenType.INT, TokenType.SEMICOLON, TokenType.EOF,
    ]
    assert tokens[1].value == 'x'
    assert tokens[3].value == 5


def test_operators_prefer_two_characters():
    text = '+ - * / % ** ++ -- += -= *= /= == != < <= > >= && || ! = := : . -> | , ; ( ) [ ] { }'
    types = token_types(text)
    assert types == [
        TokenType.PLUS, TokenType.MINUS, TokenType.TIMES, TokenType.DIVISION,
        TokenType.MOD, TokenType.EXPONENT, TokenType.PLUS2, TokenType.MINUS2,
        TokenType.PLUSASSIGN, TokenType.MINUSASSIGN, TokenType.TIMESASSIGN,
        TokenType.DIVASSIGN, TokenType.EQ, TokenType.NOT_EQ, TokenType.LT,
        TokenType.LTE, TokenType.GT, TokenType.GTE, TokenType.AND, TokenType.OR,
        TokenType.NOT, TokenType.ASSIGN, TokenType.COLONASSIGN, TokenType.COLON,
        TokenType.DOT, TokenType.ARROW, TokenType.BAR, TokenType.COMMA,
        TokenType.SEMICOLON, TokenType.LPAREN, TokenType.RPAREN,
        TokenType.LBRACKET, TokenType.RBRACKET, TokenType.LBRACE,
        TokenType.RBRACE, TokenType.EOF,
    ]


def test_keywords():
    for word, tok_type in KEYWORDS.items():
        assert token_types(word) == [tok_type, TokenType.EOF]
    assert token_types('variable') == [TokenType.IDENT, TokenType.EOF]


def test_numbers():
    tokens = Lexer('<test>', '42 3.14').make_tokens()
    assert tokens[0].type == TokenType.INT and tokens[0].value == 42
    assert tokens[1].type == TokenType.FLOAT and tokens[1].value == 3.14


def test_string_escapes():
    tokens = Lexer('<test>', '"a\\nb\\"c"').make_tokens()
    assert tokens[0].type == TokenType.STRING
    assert tokens[0].value == 'a\nb"c'


def test_unterminated_string_is_illegal():
    tok = Lexer('<test>', '"abc').next_token()
    assert tok.type == TokenType.ILLEGAL


def test_malformed_escape_is_illegal():
    for text in ('"C:\\x"', '"\\N"', '"\\u12"'):
        lexer = Lexer('<test>', text + ' 1')
        tok = lexer.next_token()
        assert tok.type == TokenType.ILLEGAL
        assert lexer.next_token().type == TokenType.INT


def test_illegal_character():
    tok = Lexer('<test>', '@').next_token()
    assert tok.type == TokenType.ILLEGAL
    assert tok.value == '@'


def test_comments_are_skipped():
    assert token_types('// comentario\n5 // otro') == [TokenType.INT, TokenType.EOF]


def test_accented_identifiers():
    tokens = Lexer('<test>', 'año').make_tokens()
    assert tokens[0].type == TokenType.IDENT
    assert tokens[0].value == 'año'


def test_eof_is_terminal():
    lexer = Lexer('<test>', 'x')
    assert lexer.next_token().type == TokenType.IDENT
    for _ in range(3):
        assert lexer.next_token().type == TokenType.EOF


def test_positions_track_lines():
    tokens = Lexer('<test>', 'a\n  b').make_tokens()
    assert tokens[0].pos_start.ln == 0
    assert tokens[1].pos_start.ln == 1
    assert tokens[1].pos_start.col == 2
