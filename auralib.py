#######################################
# IMPORTS
#######################################

from strings_with_arrows import *

import string
import os
import math
import operator
from enum import Enum, IntEnum
from typing import Dict, Optional

#######################################
# CONSTANTS
#######################################

IMPORT_PATH_NAME = ".path"
DIGITS = '0123456789'
LETTERS = string.ascii_letters + 'áéíóúüñÁÉÍÓÚÜÑ'
IDENTIFIER_START = LETTERS + '_'
VALID_IDENTIFIERS = LETTERS + DIGITS + '_'
ANONYMOUS = '<funcion anonima>'


def load_import_paths():
    if not os.path.isfile(IMPORT_PATH_NAME):
        return ["."]
    with open(IMPORT_PATH_NAME, "r") as f:
        return [line.strip() for line in f if line.strip()]

#######################################
# ERRORS
#######################################

class Error:
    __slots__ = ['pos_start', 'pos_end', 'error_name', 'details']

    def __init__(self, pos_start, pos_end, error_name, details):
        self.pos_start = pos_start
        self.pos_end = pos_end
        self.error_name = error_name
        self.details = details

    def set_pos(self, pos_start=None, pos_end=None):
        # values without a source span (the null singleton) get the span of the node being evaluated
        if self.pos_start is None:
            self.pos_start = pos_start
        if self.pos_end is None:
            self.pos_end = pos_end
        return self

    def __repr__(self) -> str:
        return f'{self.error_name}: {self.details}'

    def as_string(self):
        result = f'{self.error_name}: {self.details}\n'
        result += f'File {self.pos_start.fn}, line {self.pos_start.ln + 1}'
        result += '\n\n' + \
            string_with_arrows(self.pos_start.ftxt,
                               self.pos_start, self.pos_end)
        return result

class IllegalCharError(Error):
    def __init__(self, pos_start, pos_end, details):
        super().__init__(pos_start, pos_end, 'Illegal Character', details)

class InvalidSyntaxError(Error):
    def __init__(self, pos_start, pos_end, details=''):
        super().__init__(pos_start, pos_end, 'Invalid Syntax', details)

class RTError(Error):
    __slots__ = ['context']

    def __init__(self, pos_start, pos_end, details, context):
        super().__init__(pos_start, pos_end, 'Runtime Error', details)
        self.context = context

    def set_context(self, context=None):
        if self.context is None:
            self.context = context
        return self

    def as_string(self):
        result = self.generate_traceback()
        result += f'{self.error_name}: {self.details}'
        result += '\n\n' + \
            string_with_arrows(self.pos_start.ftxt,
                               self.pos_start, self.pos_end)
        return result

    def generate_traceback(self):
        result = ''
        pos = self.pos_start
        ctx = self.context

        while ctx:
            result = f'  File {pos.fn}, line {str(pos.ln + 1)}, in {ctx.display_name}\n' + result
            pos = ctx.parent_entry_pos
            ctx = ctx.parent

        return 'Traceback (most recent call last):\n' + result

#######################################
# POSITION
#######################################

class Position:
    __slots__ = ['idx', 'ln', 'col', 'fn', 'ftxt']

    def __init__(self, idx, ln, col, fn, ftxt):
        self.idx = idx
        self.ln = ln
        self.col = col
        self.fn = fn
        self.ftxt = ftxt

    def advance(self, current_char=None):
        self.idx += 1
        self.col += 1

        if current_char == '\n':
            self.ln += 1
            self.col = 0

        return self

    def copy(self):
        return Position(self.idx, self.ln, self.col, self.fn, self.ftxt)

#######################################
# TOKENS
#######################################

class TokenType(Enum):
    INT = 'INT'
    FLOAT = 'FLOAT'
    STRING = 'STRING'
    IDENT = 'identificador'
    LET = 'var'
    FUNCTION = 'funcion'
    IF = 'si'
    ELSE = 'si_no'
    WHILE = 'mientras'
    FOR = 'por'
    IN = 'en'
    RETURN = 'regresa'
    CLASS = 'clase'
    NEW = 'nuevo'
    IMPORT = 'importar'
    TRUE = 'verdadero'
    FALSE = 'falso'
    NULL = 'nulo'
    MAP = 'mapa'
    LIST = 'lista'
    PLUS = '+'
    MINUS = '-'
    TIMES = '*'
    DIVISION = '/'
    MOD = '%'
    EXPONENT = '**'
    PLUS2 = '++'
    MINUS2 = '--'
    PLUSASSIGN = '+='
    MINUSASSIGN = '-='
    TIMESASSIGN = '*='
    DIVASSIGN = '/='
    EQ = '=='
    NOT_EQ = '!='
    LT = '<'
    LTE = '<='
    GT = '>'
    GTE = '>='
    AND = '&&'
    OR = '||'
    NOT = '!'
    ASSIGN = '='
    COLONASSIGN = ':='
    COLON = ':'
    DOT = '.'
    ARROW = '->'
    BAR = '|'
    COMMA = ','
    SEMICOLON = ';'
    LPAREN = '('
    RPAREN = ')'
    LBRACKET = '['
    RBRACKET = ']'
    LBRACE = '{'
    RBRACE = '}'
    EOF = 'final del archivo'
    ILLEGAL = 'ilegal'

KEYWORDS: Dict[str, TokenType] = {tt.value: tt for tt in (
    TokenType.LET,
    TokenType.FUNCTION,
    TokenType.IF,
    TokenType.ELSE,
    TokenType.WHILE,
    TokenType.FOR,
    TokenType.IN,
    TokenType.RETURN,
    TokenType.CLASS,
    TokenType.NEW,
    TokenType.IMPORT,
    TokenType.TRUE,
    TokenType.FALSE,
    TokenType.NULL,
    TokenType.MAP,
    TokenType.LIST,
)}

OPERATOR_TOKS: Dict[str, TokenType] = {
    tt.value: tt for tt in TokenType
    if not any(char.isalpha() for char in tt.value)
}

class Token:
    __slots__ = ['type', 'value', 'pos_start', 'pos_end']

    def __init__(self, type_, value=None, pos_start=None, pos_end=None):
        self.type = type_
        self.value = value

        if pos_start:
            self.pos_start = pos_start.copy()
            self.pos_end = pos_start.copy()
            self.pos_end.advance()

        if pos_end:
            self.pos_end = pos_end.copy()

    def describe(self):
        if self.type == TokenType.STRING:
            return f'"{self.value}"'
        if self.type in (TokenType.IDENT, TokenType.INT, TokenType.FLOAT, TokenType.ILLEGAL):
            return str(self.value)
        return self.type.value

    def __repr__(self):
        if self.value not in (None, ''):
            return f'{self.type.name}:{self.value}'
        return f'{self.type.name}'

#######################################
# LEXER
#######################################

class Lexer:
    def __init__(self, fn, text):
        self.fn = fn
        self.text = text
        self.pos = Position(-1, 0, -1, fn, text)
        self.current_char = None
        self.advance()

    def advance(self):
        self.pos.advance(self.current_char)
        self.current_char = self.text[self.pos.idx] if self.pos.idx < len(
            self.text) else None

    def peek_char(self):
        idx = self.pos.idx + 1
        return self.text[idx] if idx < len(self.text) else None

    def next_token(self):
        self.skip_whitespace()

        if self.current_char is None:
            return Token(TokenType.EOF, '', pos_start=self.pos)
        if self.current_char in DIGITS:
            return self.make_number()
        if self.current_char in IDENTIFIER_START:
            return self.make_identifier()
        if self.current_char == '"':
            return self.make_string()
        if self.current_char in OPERATOR_TOKS:
            return self.make_operator()

        pos_start = self.pos.copy()
        char = self.current_char
        self.advance()
        return Token(TokenType.ILLEGAL, char, pos_start, self.pos)

    def make_tokens(self):
        tokens = [self.next_token()]
        while tokens[-1].type != TokenType.EOF:
            tokens.append(self.next_token())
        return tokens

    def skip_whitespace(self):
        while self.current_char is not None:
            if self.current_char.isspace():
                self.advance()
            elif self.current_char == '/' and self.peek_char() == '/':
                self.skip_comment()
            else:
                break

    def skip_comment(self):
        while self.current_char is not None and self.current_char != '\n':
            self.advance()

    def make_number(self):
        num_str = ''
        dot_count = 0
        pos_start = self.pos.copy()

        while self.current_char != None and self.current_char in DIGITS + '.':
            if self.current_char == '.':
                if dot_count == 1:
                    break
                dot_count += 1
            num_str += self.current_char
            self.advance()

        if dot_count == 0:
            return Token(TokenType.INT, int(num_str), pos_start, self.pos)
        else:
            return Token(TokenType.FLOAT, float(num_str), pos_start, self.pos)

    def make_string(self):
        string = ''
        pos_start = self.pos.copy()
        escape_character = False
        self.advance()

        while self.current_char != None and (self.current_char != '"' or escape_character):
            if escape_character:
                escape_character = False
            elif self.current_char == '\\':
                escape_character = True
            string += self.current_char
            self.advance()

        if self.current_char is None:
            return Token(TokenType.ILLEGAL, '"' + string, pos_start, self.pos)

        self.advance()
        try:
            value = string.encode('raw_unicode_escape').decode('unicode_escape')
        except UnicodeDecodeError:
            return Token(TokenType.ILLEGAL, '"' + string + '"', pos_start, self.pos)
        return Token(TokenType.STRING, value, pos_start, self.pos)

    def make_identifier(self):
        id_str = ''
        pos_start = self.pos.copy()

        while self.current_char != None and self.current_char in VALID_IDENTIFIERS:
            id_str += self.current_char
            self.advance()

        tok_type = KEYWORDS.get(id_str, TokenType.IDENT)
        return Token(tok_type, id_str, pos_start, self.pos)

    def make_operator(self):
        pos_start = self.pos.copy()
        double = self.current_char + (self.peek_char() or '')

        if double in OPERATOR_TOKS:
            self.advance()
            self.advance()
            return Token(OPERATOR_TOKS[double], double, pos_start, self.pos)

        char = self.current_char
        self.advance()
        return Token(OPERATOR_TOKS[char], char, pos_start, self.pos)

#######################################
# NODES
#######################################

class Node:
    __slots__ = ['tok', 'pos_start', 'pos_end']

    def __init__(self, tok, pos_start=None, pos_end=None):
        self.tok = tok
        self.pos_start = pos_start or tok.pos_start
        self.pos_end = pos_end or tok.pos_end

class StatementNode(Node):
    __slots__ = []

class ExpressionNode(Node):
    __slots__ = []

class ProgramNode:
    __slots__ = ['statements', 'pos_start', 'pos_end']
    def __init__(self, statements, pos_start, pos_end=None):
        self.statements = statements
        self.pos_start = pos_start
        self.pos_end = pos_end
    def __repr__(self):
        return ' '.join(repr(statement) for statement in self.statements)

class IdentifierNode(ExpressionNode):
    __slots__ = ['value']
    def __init__(self, tok):
        super().__init__(tok)
        self.value = tok.value
    def __repr__(self):
        return self.value

class IntegerNode(ExpressionNode):
    __slots__ = ['value']
    def __init__(self, tok):
        super().__init__(tok)
        self.value = tok.value
    def __repr__(self):
        return f'{self.value}'

class FloatNode(ExpressionNode):
    __slots__ = ['value']
    def __init__(self, tok):
        super().__init__(tok)
        self.value = tok.value
    def __repr__(self):
        return f'{self.value}'

class StringNode(ExpressionNode):
    __slots__ = ['value']
    def __init__(self, tok):
        super().__init__(tok)
        self.value = tok.value
    def __repr__(self):
        return f'"{self.value}"'

class BooleanNode(ExpressionNode):
    __slots__ = ['value']
    def __init__(self, tok, value):
        super().__init__(tok)
        self.value = value
    def __repr__(self):
        return 'verdadero' if self.value else 'falso'

class NullNode(ExpressionNode):
    __slots__ = []
    def __repr__(self):
        return 'nulo'

class ArrayNode(ExpressionNode):
    __slots__ = ['element_nodes']
    def __init__(self, tok, element_nodes, pos_end):
        super().__init__(tok, pos_end=pos_end)
        self.element_nodes = element_nodes
    def __repr__(self):
        return f"lista[{', '.join(repr(element) for element in self.element_nodes)}]"

class KeyValueNode(ExpressionNode):
    __slots__ = ['key', 'value']
    def __init__(self, tok, key, value):
        super().__init__(tok, key.pos_start, value.pos_end)
        self.key = key
        self.value = value
    def __repr__(self):
        return f'{self.key!r} -> {self.value!r}'

class MapNode(ExpressionNode):
    __slots__ = ['pairs']
    def __init__(self, tok, pairs, pos_end):
        super().__init__(tok, pos_end=pos_end)
        self.pairs = pairs
    def __repr__(self):
        return f"mapa{{{', '.join(repr(pair) for pair in self.pairs)}}}"

class BlockNode(StatementNode):
    __slots__ = ['statements']
    def __init__(self, tok, statements, pos_end=None):
        super().__init__(tok, pos_end=pos_end)
        self.statements = statements
    def __repr__(self):
        return f"{{ {' '.join(repr(statement) for statement in self.statements)} }}"

class FunctionNode(ExpressionNode):
    __slots__ = ['params', 'body']
    def __init__(self, tok, params, body):
        super().__init__(tok, pos_end=body.pos_end)
        self.params = params
        self.body = body
    def __repr__(self):
        return f"funcion({', '.join(repr(param) for param in self.params)}) {self.body!r}"

class ArrowFunctionNode(ExpressionNode):
    __slots__ = ['params', 'body']
    def __init__(self, tok, params, body):
        super().__init__(tok, pos_end=body.pos_end)
        self.params = params
        self.body = body
    def __repr__(self):
        return f"|{', '.join(repr(param) for param in self.params)}| -> {self.body!r}"

class CallNode(ExpressionNode):
    __slots__ = ['function', 'arg_nodes']
    def __init__(self, tok, function, arg_nodes, pos_end):
        super().__init__(tok, function.pos_start, pos_end)
        self.function = function
        self.arg_nodes = arg_nodes
    def __repr__(self):
        return f"{self.function!r}({', '.join(repr(arg) for arg in self.arg_nodes)})"

class CallListNode(ExpressionNode):
    __slots__ = ['left', 'index']
    def __init__(self, tok, left, index, pos_end):
        super().__init__(tok, left.pos_start, pos_end)
        self.left = left
        self.index = index
    def __repr__(self):
        return f'({self.left!r}[{self.index!r}])'

class MethodNode(ExpressionNode):
    __slots__ = ['obj', 'call']
    def __init__(self, tok, obj, call):
        super().__init__(tok, obj.pos_start, call.pos_end)
        self.obj = obj
        self.call = call
    def __repr__(self):
        return f'{self.obj!r}:{self.call!r}'

class ClassFieldCallNode(ExpressionNode):
    __slots__ = ['obj', 'field']
    def __init__(self, tok, obj, field):
        super().__init__(tok, obj.pos_start, field.pos_end)
        self.obj = obj
        self.field = field
    def __repr__(self):
        return f'{self.obj!r}.{self.field!r}'

class ClassCallNode(ExpressionNode):
    __slots__ = ['name', 'arg_nodes']
    def __init__(self, tok, name, arg_nodes, pos_end):
        super().__init__(tok, pos_end=pos_end)
        self.name = name
        self.arg_nodes = arg_nodes
    def __repr__(self):
        return f"nuevo {self.name!r}({', '.join(repr(arg) for arg in self.arg_nodes)})"

class SuffixNode(ExpressionNode):
    __slots__ = ['left', 'operator']
    def __init__(self, tok, left, operator):
        super().__init__(tok, left.pos_start, tok.pos_end)
        self.left = left
        self.operator = operator
    def __repr__(self):
        return f'({self.left!r}{self.operator})'

class PrefixNode(ExpressionNode):
    __slots__ = ['operator', 'right']
    def __init__(self, tok, operator, right):
        super().__init__(tok, pos_end=right.pos_end)
        self.operator = operator
        self.right = right
    def __repr__(self):
        return f'({self.operator}{self.right!r})'

class InfixNode(ExpressionNode):
    __slots__ = ['left', 'operator', 'right']
    def __init__(self, tok, left, operator, right):
        super().__init__(tok, left.pos_start, right.pos_end)
        self.left = left
        self.operator = operator
        self.right = right
    def __repr__(self):
        return f'({self.left!r} {self.operator} {self.right!r})'

class ReassignmentNode(ExpressionNode):
    __slots__ = ['target', 'value']
    def __init__(self, tok, target, value):
        super().__init__(tok, target.pos_start, value.pos_end)
        self.target = target
        self.value = value
    def __repr__(self):
        return f'({self.target!r} = {self.value!r})'

class AssignmentNode(ExpressionNode):
    __slots__ = ['name', 'value']
    def __init__(self, tok, name, value):
        super().__init__(tok, name.pos_start, value.pos_end)
        self.name = name
        self.value = value
    def __repr__(self):
        return f'({self.name!r} := {self.value!r})'

class IfNode(ExpressionNode):
    __slots__ = ['condition', 'consequence', 'alternative']
    def __init__(self, tok, condition, consequence, alternative):
        super().__init__(tok, pos_end=(alternative or consequence).pos_end)
        self.condition = condition
        self.consequence = consequence
        self.alternative = alternative
    def __repr__(self):
        result = f'si {self.condition!r} {self.consequence!r}'
        if self.alternative is not None:
            result += f' si_no {self.alternative!r}'
        return result

class WhileNode(ExpressionNode):
    __slots__ = ['condition', 'body']
    def __init__(self, tok, condition, body):
        super().__init__(tok, pos_end=body.pos_end)
        self.condition = condition
        self.body = body
    def __repr__(self):
        return f'mientras {self.condition!r} {self.body!r}'

class RangeNode(ExpressionNode):
    __slots__ = ['variable', 'iterable']
    def __init__(self, tok, variable, iterable):
        super().__init__(tok, variable.pos_start, iterable.pos_end)
        self.variable = variable
        self.iterable = iterable
    def __repr__(self):
        return f'{self.variable!r} en {self.iterable!r}'

class ForNode(ExpressionNode):
    __slots__ = ['range', 'body']
    def __init__(self, tok, range_node, body):
        super().__init__(tok, pos_end=body.pos_end)
        self.range = range_node
        self.body = body
    def __repr__(self):
        return f'por ({self.range!r}) {self.body!r}'

class LetNode(StatementNode):
    __slots__ = ['name', 'value']
    def __init__(self, tok, name, value):
        super().__init__(tok, pos_end=value.pos_end)
        self.name = name
        self.value = value
    def __repr__(self):
        return f'var {self.name!r} = {self.value!r};'

class ReturnNode(StatementNode):
    __slots__ = ['return_value']
    def __init__(self, tok, return_value):
        super().__init__(tok, pos_end=return_value.pos_end if return_value else None)
        self.return_value = return_value
    def __repr__(self):
        if self.return_value is None:
            return 'regresa;'
        return f'regresa {self.return_value!r};'

class ExpressionStatementNode(StatementNode):
    __slots__ = ['expression']
    def __init__(self, tok, expression):
        super().__init__(tok, expression.pos_start, expression.pos_end)
        self.expression = expression
    def __repr__(self):
        return repr(self.expression)

class ClassMethodNode(ExpressionNode):
    __slots__ = ['name', 'params', 'body']
    def __init__(self, tok, name, params, body):
        super().__init__(tok, pos_end=body.pos_end)
        self.name = name
        self.params = params
        self.body = body
    def __repr__(self):
        return f"{self.name!r}({', '.join(repr(param) for param in self.params)}) {self.body!r}"

class ClassNode(StatementNode):
    __slots__ = ['name', 'params', 'methods']
    def __init__(self, tok, name, params, methods, pos_end):
        super().__init__(tok, pos_end=pos_end)
        self.name = name
        self.params = params
        self.methods = methods
    def __repr__(self):
        params = ', '.join(repr(param) for param in self.params)
        methods = ' '.join(repr(method) for method in self.methods)
        return f'clase {self.name!r}({params}) {{ {methods} }}'

class ImportNode(StatementNode):
    __slots__ = ['path']
    def __init__(self, tok, path):
        super().__init__(tok, pos_end=path.pos_end)
        self.path = path
    def __repr__(self):
        return f'importar {self.path!r}'

#######################################
# PARSER
#######################################

class Precedence(IntEnum):
    LOWEST = 1
    ANDOR = 2
    EQUALS = 3
    LESSGREATER = 4
    SUM = 5
    PRODUCT = 6
    PREFIX = 7
    CALL = 8

PRECEDENCES: Dict[TokenType, Precedence] = {
    TokenType.AND: Precedence.ANDOR,
    TokenType.OR: Precedence.ANDOR,
    TokenType.ASSIGN: Precedence.ANDOR,
    TokenType.EQ: Precedence.EQUALS,
    TokenType.NOT_EQ: Precedence.EQUALS,
    TokenType.LT: Precedence.LESSGREATER,
    TokenType.LTE: Precedence.LESSGREATER,
    TokenType.GT: Precedence.LESSGREATER,
    TokenType.GTE: Precedence.LESSGREATER,
    TokenType.PLUS: Precedence.SUM,
    TokenType.MINUS: Precedence.SUM,
    TokenType.TIMES: Precedence.PRODUCT,
    TokenType.DIVISION: Precedence.PRODUCT,
    TokenType.MOD: Precedence.PRODUCT,
    TokenType.EXPONENT: Precedence.PRODUCT,
    TokenType.PLUSASSIGN: Precedence.PRODUCT,
    TokenType.MINUSASSIGN: Precedence.PRODUCT,
    TokenType.TIMESASSIGN: Precedence.PRODUCT,
    TokenType.DIVASSIGN: Precedence.PRODUCT,
    TokenType.PLUS2: Precedence.PRODUCT,
    TokenType.MINUS2: Precedence.PRODUCT,
    TokenType.DOT: Precedence.PREFIX,
    TokenType.COLONASSIGN: Precedence.PREFIX,
    TokenType.LPAREN: Precedence.CALL,
    TokenType.LBRACKET: Precedence.CALL,
    TokenType.COLON: Precedence.CALL,
}

COMPOUND_ASSIGN_TOKS = (
    TokenType.PLUSASSIGN,
    TokenType.MINUSASSIGN,
    TokenType.TIMESASSIGN,
    TokenType.DIVASSIGN,
)

class Parser:
    def __init__(self, lexer):
        self.lexer = lexer
        self.current_tok: Optional[Token] = None
        self.peek_tok: Optional[Token] = None
        self.errors = []

        self.statement_parse_fns = {}
        self.prefix_parse_fns = {}
        self.infix_parse_fns = {}
        self.suffix_parse_fns = {}
        self.register_statement_fns()
        self.register_prefix_fns()
        self.register_infix_fns()
        self.register_suffix_fns()

        # fill both lookahead slots
        self.advance()
        self.advance()

    def advance(self):
        self.current_tok = self.peek_tok
        self.peek_tok = self.lexer.next_token()

    def current_precedence(self):
        return PRECEDENCES.get(self.current_tok.type, Precedence.LOWEST)

    def peek_precedence(self):
        return PRECEDENCES.get(self.peek_tok.type, Precedence.LOWEST)

    def error(self, tok, details):
        self.errors.append(InvalidSyntaxError(tok.pos_start, tok.pos_end, details))

    def expect_peek(self, tok_type):
        if self.peek_tok.type == tok_type:
            self.advance()
            return True

        self.error(self.peek_tok,
                   f"Expected '{tok_type.value}' but got '{self.peek_tok.describe()}'")
        return False

    def skip_semicolon(self):
        if self.peek_tok.type == TokenType.SEMICOLON:
            self.advance()

    ###################################

    def register_statement_fns(self):
        self.statement_parse_fns[TokenType.LET] = self.parse_let_statement
        self.statement_parse_fns[TokenType.RETURN] = self.parse_return_statement
        self.statement_parse_fns[TokenType.CLASS] = self.parse_class_statement
        self.statement_parse_fns[TokenType.IMPORT] = self.parse_import_statement

    def register_prefix_fns(self):
        self.prefix_parse_fns[TokenType.IDENT] = self.parse_identifier
        self.prefix_parse_fns[TokenType.INT] = self.parse_integer
        self.prefix_parse_fns[TokenType.FLOAT] = self.parse_float
        self.prefix_parse_fns[TokenType.STRING] = self.parse_string
        self.prefix_parse_fns[TokenType.TRUE] = self.parse_boolean
        self.prefix_parse_fns[TokenType.FALSE] = self.parse_boolean
        self.prefix_parse_fns[TokenType.NULL] = self.parse_null
        self.prefix_parse_fns[TokenType.MINUS] = self.parse_prefix_expression
        self.prefix_parse_fns[TokenType.NOT] = self.parse_prefix_expression
        self.prefix_parse_fns[TokenType.LPAREN] = self.parse_group_expression
        self.prefix_parse_fns[TokenType.IF] = self.parse_if
        self.prefix_parse_fns[TokenType.WHILE] = self.parse_while
        self.prefix_parse_fns[TokenType.FOR] = self.parse_for
        self.prefix_parse_fns[TokenType.FUNCTION] = self.parse_function
        self.prefix_parse_fns[TokenType.BAR] = self.parse_arrow_function
        self.prefix_parse_fns[TokenType.OR] = self.parse_arrow_function
        self.prefix_parse_fns[TokenType.LIST] = self.parse_array
        self.prefix_parse_fns[TokenType.MAP] = self.parse_map
        self.prefix_parse_fns[TokenType.NEW] = self.parse_class_call

    def register_infix_fns(self):
        for tok_type in (TokenType.PLUS, TokenType.MINUS, TokenType.TIMES, TokenType.DIVISION,
                         TokenType.MOD, TokenType.EQ, TokenType.NOT_EQ, TokenType.LT,
                         TokenType.LTE, TokenType.GT, TokenType.GTE, TokenType.AND,
                         TokenType.OR, TokenType.PLUSASSIGN, TokenType.MINUSASSIGN,
                         TokenType.TIMESASSIGN, TokenType.DIVASSIGN):
            self.infix_parse_fns[tok_type] = self.parse_infix_expression
        self.infix_parse_fns[TokenType.EXPONENT] = self.parse_exponent
        # 'a[0]++' and 'obj.campo--' reach the suffix through the infix loop
        self.infix_parse_fns[TokenType.PLUS2] = self.parse_suffix
        self.infix_parse_fns[TokenType.MINUS2] = self.parse_suffix
        self.infix_parse_fns[TokenType.LPAREN] = self.parse_call
        self.infix_parse_fns[TokenType.LBRACKET] = self.parse_call_list
        self.infix_parse_fns[TokenType.ASSIGN] = self.parse_reassignment
        self.infix_parse_fns[TokenType.COLONASSIGN] = self.parse_assignment_expression
        self.infix_parse_fns[TokenType.COLON] = self.parse_method
        self.infix_parse_fns[TokenType.DOT] = self.parse_class_field_call

    def register_suffix_fns(self):
        self.suffix_parse_fns[TokenType.PLUS2] = self.parse_suffix
        self.suffix_parse_fns[TokenType.MINUS2] = self.parse_suffix
        self.suffix_parse_fns[TokenType.EXPONENT] = self.parse_exponent

    ###################################

    def parse_program(self):
        program = ProgramNode([], self.current_tok.pos_start)

        while self.current_tok.type != TokenType.EOF:
            statement = self.parse_statement()
            if statement is not None:
                program.statements.append(statement)
            self.advance()

        program.pos_end = self.current_tok.pos_end
        return program

    def parse_statement(self):
        if self.current_tok.type == TokenType.SEMICOLON:
            return None

        parse_fn = self.statement_parse_fns.get(self.current_tok.type, self.parse_expression_statement)
        return parse_fn()

    def parse_let_statement(self):
        tok = self.current_tok
        if not self.expect_peek(TokenType.IDENT):
            return None

        name = IdentifierNode(self.current_tok)
        if not self.expect_peek(TokenType.ASSIGN):
            return None

        self.advance()
        value = self.parse_expression(Precedence.LOWEST)
        if value is None:
            return None

        self.skip_semicolon()
        return LetNode(tok, name, value)

    def parse_return_statement(self):
        tok = self.current_tok
        if self.peek_tok.type in (TokenType.SEMICOLON, TokenType.RBRACE, TokenType.EOF):
            self.skip_semicolon()
            return ReturnNode(tok, None)

        self.advance()
        value = self.parse_expression(Precedence.LOWEST)
        if value is None:
            return None

        self.skip_semicolon()
        return ReturnNode(tok, value)

    def parse_class_statement(self):
        tok = self.current_tok
        if not self.expect_peek(TokenType.IDENT):
            return None

        name = IdentifierNode(self.current_tok)
        if not self.expect_peek(TokenType.LPAREN):
            return None

        params = self.parse_function_parameters()
        if params is None:
            return None

        if not self.expect_peek(TokenType.LBRACE):
            return None

        self.advance()
        methods = []
        while self.current_tok.type not in (TokenType.RBRACE, TokenType.EOF):
            method = self.parse_class_method()
            if method is not None:
                methods.append(method)
            self.advance()

        if self.current_tok.type != TokenType.RBRACE:
            self.error(self.current_tok, "Expected '}' to close class body")
            return None

        return ClassNode(tok, name, params, methods, self.current_tok.pos_end)

    def parse_class_method(self):
        if self.current_tok.type == TokenType.FUNCTION and self.peek_tok.type == TokenType.IDENT:
            self.advance()

        if self.current_tok.type != TokenType.IDENT:
            self.error(self.current_tok,
                       f"Expected method definition but got '{self.current_tok.describe()}'")
            return None

        tok = self.current_tok
        name = IdentifierNode(tok)
        if not self.expect_peek(TokenType.LPAREN):
            return None

        params = self.parse_function_parameters()
        if params is None or not self.expect_peek(TokenType.LBRACE):
            return None

        body = self.parse_block()
        if body is None:
            return None

        return ClassMethodNode(tok, name, params, body)

    def parse_import_statement(self):
        tok = self.current_tok
        if not self.expect_peek(TokenType.STRING):
            return None

        path = StringNode(self.current_tok)
        self.skip_semicolon()
        return ImportNode(tok, path)

    def parse_expression_statement(self):
        tok = self.current_tok
        expression = self.parse_expression(Precedence.LOWEST)
        if expression is None:
            return None

        self.skip_semicolon()
        return ExpressionStatementNode(tok, expression)

    ###################################

    def parse_expression(self, precedence):
        prefix_fn = self.prefix_parse_fns.get(self.current_tok.type)
        if prefix_fn is None:
            self.no_prefix_parse_fn_error(self.current_tok)
            return None

        left = prefix_fn()
        if left is None:
            return None

        suffix_fn = self.suffix_parse_fns.get(self.peek_tok.type)
        if suffix_fn is not None:
            self.advance()
            left = suffix_fn(left)
            if left is None:
                return None

        # equal precedence re-enters with the same threshold, so operators associate left
        while self.peek_tok.type != TokenType.SEMICOLON and precedence < self.peek_precedence():
            infix_fn = self.infix_parse_fns.get(self.peek_tok.type)
            if infix_fn is None:
                return left

            self.advance()
            left = infix_fn(left)
            if left is None:
                return None

        return left

    def no_prefix_parse_fn_error(self, tok):
        if tok.type == TokenType.ILLEGAL:
            self.errors.append(IllegalCharError(tok.pos_start, tok.pos_end, f"'{tok.value}'"))
            return
        self.error(tok, f"No prefix parse function for '{tok.describe()}'")

    def parse_identifier(self):
        return IdentifierNode(self.current_tok)

    def parse_integer(self):
        return IntegerNode(self.current_tok)

    def parse_float(self):
        return FloatNode(self.current_tok)

    def parse_string(self):
        return StringNode(self.current_tok)

    def parse_boolean(self):
        return BooleanNode(self.current_tok, self.current_tok.type == TokenType.TRUE)

    def parse_null(self):
        return NullNode(self.current_tok)

    def parse_prefix_expression(self):
        tok = self.current_tok
        self.advance()

        right = self.parse_expression(Precedence.PREFIX)
        if right is None:
            return None

        return PrefixNode(tok, tok.value, right)

    def parse_group_expression(self):
        self.advance()

        expression = self.parse_expression(Precedence.LOWEST)
        if expression is None or not self.expect_peek(TokenType.RPAREN):
            return None

        return expression

    def parse_block(self):
        tok = self.current_tok
        statements = []
        self.advance()

        while self.current_tok.type not in (TokenType.RBRACE, TokenType.EOF):
            statement = self.parse_statement()
            if statement is not None:
                statements.append(statement)
            self.advance()

        if self.current_tok.type != TokenType.RBRACE:
            self.error(self.current_tok, "Expected '}' to close block")
            return None

        return BlockNode(tok, statements, self.current_tok.pos_end)

    def parse_if(self):
        tok = self.current_tok
        if not self.expect_peek(TokenType.LPAREN):
            return None

        self.advance()
        condition = self.parse_expression(Precedence.LOWEST)
        if condition is None:
            return None

        if not self.expect_peek(TokenType.RPAREN) or not self.expect_peek(TokenType.LBRACE):
            return None

        consequence = self.parse_block()
        if consequence is None:
            return None

        alternative = None
        if self.peek_tok.type == TokenType.ELSE:
            self.advance()

            if self.peek_tok.type == TokenType.IF:
                self.advance()
                chained = self.parse_if()
                if chained is None:
                    return None
                alternative = BlockNode(chained.tok, [ExpressionStatementNode(chained.tok, chained)],
                                        chained.pos_end)
            else:
                if not self.expect_peek(TokenType.LBRACE):
                    return None
                alternative = self.parse_block()
                if alternative is None:
                    return None

        return IfNode(tok, condition, consequence, alternative)

    def parse_while(self):
        tok = self.current_tok
        if not self.expect_peek(TokenType.LPAREN):
            return None

        self.advance()
        condition = self.parse_expression(Precedence.LOWEST)
        if condition is None:
            return None

        if not self.expect_peek(TokenType.RPAREN) or not self.expect_peek(TokenType.LBRACE):
            return None

        body = self.parse_block()
        if body is None:
            return None

        return WhileNode(tok, condition, body)

    def parse_for(self):
        tok = self.current_tok
        if not self.expect_peek(TokenType.LPAREN):
            return None

        range_node = self.parse_range()
        if range_node is None:
            return None

        if not self.expect_peek(TokenType.RPAREN) or not self.expect_peek(TokenType.LBRACE):
            return None

        body = self.parse_block()
        if body is None:
            return None

        return ForNode(tok, range_node, body)

    def parse_range(self):
        tok = self.current_tok
        if not self.expect_peek(TokenType.IDENT):
            return None

        variable = IdentifierNode(self.current_tok)
        if not self.expect_peek(TokenType.IN):
            return None

        self.advance()
        iterable = self.parse_expression(Precedence.LOWEST)
        if iterable is None:
            return None

        return RangeNode(tok, variable, iterable)

    def parse_function(self):
        tok = self.current_tok
        if not self.expect_peek(TokenType.LPAREN):
            return None

        params = self.parse_function_parameters()
        if params is None or not self.expect_peek(TokenType.LBRACE):
            return None

        body = self.parse_block()
        if body is None:
            return None

        return FunctionNode(tok, params, body)

    def parse_function_parameters(self):
        params = []

        if self.peek_tok.type == TokenType.RPAREN:
            self.advance()
            return params

        if not self.expect_peek(TokenType.IDENT):
            return None
        params.append(IdentifierNode(self.current_tok))

        while self.peek_tok.type == TokenType.COMMA:
            self.advance()
            if not self.expect_peek(TokenType.IDENT):
                return None
            params.append(IdentifierNode(self.current_tok))

        if not self.expect_peek(TokenType.RPAREN):
            return None

        return params

    def parse_arrow_function(self):
        tok = self.current_tok
        params = []

        # '||' lexes as a single token and opens an arrow function without parameters
        if tok.type == TokenType.BAR:
            params = self.parse_arrow_parameters()
            if params is None:
                return None

        if not self.expect_peek(TokenType.ARROW):
            return None

        if self.peek_tok.type == TokenType.LBRACE:
            self.advance()
            body = self.parse_block()
            if body is None:
                return None
        else:
            self.advance()
            expression = self.parse_expression(Precedence.LOWEST)
            if expression is None:
                return None
            body = BlockNode(expression.tok, [ExpressionStatementNode(expression.tok, expression)],
                             expression.pos_end)

        return ArrowFunctionNode(tok, params, body)

    def parse_arrow_parameters(self):
        params = []

        if self.peek_tok.type == TokenType.BAR:
            self.advance()
            return params

        if not self.expect_peek(TokenType.IDENT):
            return None
        params.append(IdentifierNode(self.current_tok))

        while self.peek_tok.type == TokenType.COMMA:
            self.advance()
            if not self.expect_peek(TokenType.IDENT):
                return None
            params.append(IdentifierNode(self.current_tok))

        if not self.expect_peek(TokenType.BAR):
            return None

        return params

    def parse_expression_list(self, end):
        values = []

        if self.peek_tok.type == end:
            self.advance()
            return values

        self.advance()
        value = self.parse_expression(Precedence.LOWEST)
        if value is None:
            return None
        values.append(value)

        while self.peek_tok.type == TokenType.COMMA:
            self.advance()
            self.advance()
            value = self.parse_expression(Precedence.LOWEST)
            if value is None:
                return None
            values.append(value)

        if not self.expect_peek(end):
            return None

        return values

    def parse_array(self):
        tok = self.current_tok
        if not self.expect_peek(TokenType.LBRACKET):
            return None

        values = self.parse_expression_list(TokenType.RBRACKET)
        if values is None:
            return None

        return ArrayNode(tok, values, self.current_tok.pos_end)

    def parse_map(self):
        tok = self.current_tok
        if not self.expect_peek(TokenType.LBRACE):
            return None

        pairs = []
        if self.peek_tok.type == TokenType.RBRACE:
            self.advance()
            return MapNode(tok, pairs, self.current_tok.pos_end)

        self.advance()
        pair = self.parse_key_value()
        if pair is None:
            return None
        pairs.append(pair)

        while self.peek_tok.type == TokenType.COMMA:
            self.advance()
            self.advance()
            pair = self.parse_key_value()
            if pair is None:
                return None
            pairs.append(pair)

        if not self.expect_peek(TokenType.RBRACE):
            return None

        return MapNode(tok, pairs, self.current_tok.pos_end)

    def parse_key_value(self):
        tok = self.current_tok
        key = self.parse_expression(Precedence.LOWEST)
        if key is None or not self.expect_peek(TokenType.ARROW):
            return None

        self.advance()
        value = self.parse_expression(Precedence.LOWEST)
        if value is None:
            return None

        return KeyValueNode(tok, key, value)

    def parse_class_call(self):
        tok = self.current_tok
        if not self.expect_peek(TokenType.IDENT):
            return None

        name = IdentifierNode(self.current_tok)
        if not self.expect_peek(TokenType.LPAREN):
            return None

        args = self.parse_expression_list(TokenType.RPAREN)
        if args is None:
            return None

        return ClassCallNode(tok, name, args, self.current_tok.pos_end)

    ###################################

    def parse_suffix(self, left):
        return SuffixNode(self.current_tok, left, self.current_tok.value)

    def parse_exponent(self, left):
        tok = self.current_tok

        # 'x ** y' when an operand follows, otherwise the squaring suffix 'x**'
        if self.peek_tok.type not in self.prefix_parse_fns:
            return SuffixNode(tok, left, tok.value)

        self.advance()
        right = self.parse_expression(Precedence.PRODUCT)
        if right is None:
            return None

        return InfixNode(tok, left, tok.value, right)

    def parse_infix_expression(self, left):
        tok = self.current_tok
        precedence = self.current_precedence()
        if tok.type in COMPOUND_ASSIGN_TOKS:
            # the whole right-hand side is the operand of 'x += ...'
            precedence = Precedence.LOWEST
        self.advance()

        right = self.parse_expression(precedence)
        if right is None:
            return None

        return InfixNode(tok, left, tok.value, right)

    def parse_call(self, function):
        tok = self.current_tok
        args = self.parse_expression_list(TokenType.RPAREN)
        if args is None:
            return None

        return CallNode(tok, function, args, self.current_tok.pos_end)

    def parse_call_list(self, left):
        tok = self.current_tok
        self.advance()

        index = self.parse_expression(Precedence.LOWEST)
        if index is None or not self.expect_peek(TokenType.RBRACKET):
            return None

        return CallListNode(tok, left, index, self.current_tok.pos_end)

    def parse_reassignment(self, target):
        tok = self.current_tok
        self.advance()

        value = self.parse_expression(Precedence.LOWEST)
        if value is None:
            return None

        return ReassignmentNode(tok, target, value)

    def parse_assignment_expression(self, left):
        tok = self.current_tok
        if not isinstance(left, IdentifierNode):
            self.error(tok, f"Cannot assign with ':=' to '{left!r}', expected identifier")
            return None

        self.advance()
        value = self.parse_expression(Precedence.LOWEST)
        if value is None:
            return None

        return AssignmentNode(tok, left, value)

    def parse_member_call(self):
        name = IdentifierNode(self.current_tok)
        if self.peek_tok.type != TokenType.LPAREN:
            return name

        self.advance()
        return self.parse_call(name)

    def parse_method(self, left):
        tok = self.current_tok
        if not self.expect_peek(TokenType.IDENT):
            return None

        if self.peek_tok.type != TokenType.LPAREN:
            self.expect_peek(TokenType.LPAREN)
            return None

        call = self.parse_member_call()
        if call is None:
            return None

        return MethodNode(tok, left, call)

    def parse_class_field_call(self, left):
        tok = self.current_tok
        if not self.expect_peek(TokenType.IDENT):
            return None

        field = self.parse_member_call()
        if field is None:
            return None

        return ClassFieldCallNode(tok, left, field)

#######################################
# RUNTIME RESULT
#######################################

class RTResult:
    __slots__ = ['value', 'error', 'func_return_value']

    def __init__(self):
        self.reset()

    def reset(self):
        self.value = None
        self.error = None
        self.func_return_value = None

    def register(self, res):
        self.error = res.error
        self.func_return_value = res.func_return_value
        return res.value

    def success(self, value):
        self.reset()
        self.value = value
        return self

    def success_return(self, value):
        self.reset()
        self.func_return_value = value
        return self

    def failure(self, error):
        self.reset()
        self.error = error
        return self

    def should_return(self):
        return self.error is not None or self.func_return_value is not None

#######################################
# ENVIRONMENT
#######################################

class Environment:
    __slots__ = ['symbols', 'parent']

    def __init__(self, parent=None):
        self.symbols = {}
        self.parent = parent

    def get(self, name):
        if name in self.symbols:
            return self.symbols[name]
        if self.parent:
            return self.parent.get(name)
        return None

    def set(self, name, value):
        self.symbols[name] = value

    def assign(self, name, value):
        if name in self.symbols:
            self.symbols[name] = value
            return True
        if self.parent:
            return self.parent.assign(name, value)
        return False

#######################################
# CONTEXT
#######################################

class Context:
    __slots__ = ['display_name', 'parent', 'parent_entry_pos', 'environment']

    def __init__(self, display_name, parent=None, parent_entry_pos=None):
        self.display_name = display_name
        self.parent = parent
        self.parent_entry_pos = parent_entry_pos
        self.environment = None

    def child(self):
        """Same traceback frame, nested scope."""
        new_context = Context(self.display_name, self.parent, self.parent_entry_pos)
        new_context.environment = Environment(self.environment)
        return new_context

#######################################
# VALUES
#######################################

COMPARISON_OPERATORS = {
    '==': operator.eq,
    '!=': operator.ne,
    '<': operator.lt,
    '>': operator.gt,
    '<=': operator.le,
    '>=': operator.ge,
}


def args(arg_names):
    def _args(f):
        f.arg_names = arg_names
        return f
    return _args


class MethodType(Enum):
    POP = 'pop'
    APPEND = 'append'
    REMOVE = 'remove'
    CONTAINS = 'contains'
    VALUES = 'values'

METHOD_KINDS: Dict[str, MethodType] = {kind.value: kind for kind in MethodType}


class Value:
    __slots__ = ['pos_start', 'pos_end', 'context']
    type_name = 'VALUE'
    method_table = {}

    def __init__(self):
        self.set_pos()
        self.set_context()

    def set_pos(self, pos_start=None, pos_end=None):
        self.pos_start = pos_start
        self.pos_end = pos_end
        return self

    def set_context(self, context=None):
        self.context = context
        return self

    def added_to(self, other):
        return None, self.illegal_operation('+', other)

    def subbed_by(self, other):
        return None, self.illegal_operation('-', other)

    def multed_by(self, other):
        return None, self.illegal_operation('*', other)

    def dived_by(self, other):
        return None, self.illegal_operation('/', other)

    def moded_by(self, other):
        return None, self.illegal_operation('%', other)

    def powed_by(self, other):
        return None, self.illegal_operation('**', other)

    def get_comparison_eq(self, other):
        return self.compare('==', other)

    def get_comparison_ne(self, other):
        return self.compare('!=', other)

    def get_comparison_lt(self, other):
        return self.compare('<', other)

    def get_comparison_gt(self, other):
        return self.compare('>', other)

    def get_comparison_lte(self, other):
        return self.compare('<=', other)

    def get_comparison_gte(self, other):
        return self.compare('>=', other)

    def compare(self, op, other):
        if op in ('==', '!=') and (isinstance(self, Null) or isinstance(other, Null)):
            both_null = isinstance(self, Null) and isinstance(other, Null)
            return Boolean(both_null == (op == '==')).set_context(self.context), None

        if not self.comparable(op, other):
            return None, self.illegal_operation(op, other)

        result = COMPARISON_OPERATORS[op](self.value, other.value)
        return Boolean(result).set_context(self.context), None

    def comparable(self, op, other):
        return False

    def notted(self):
        return None, self.illegal_operation('!')

    def negated(self):
        return None, self.illegal_operation('-')

    def gen(self):
        yield RTResult().failure(RTError(
            self.pos_start, self.pos_end,
            f"{self.type_name} is not iterable",
            self.context
        ))

    def get_index(self, index):
        return None, RTError(
            self.pos_start, index.pos_end,
            f"index operator not supported: {self.type_name}",
            self.context
        )

    def set_index(self, index, value):
        return None, RTError(
            self.pos_start, index.pos_end,
            f"index assignment not supported: {self.type_name}",
            self.context
        )

    def get_dot(self, verb):
        return None, RTError(
            self.pos_start, self.pos_end,
            f"{self.type_name} has no field '{verb}'",
            self.context
        )

    def set_dot(self, verb, value):
        return None, RTError(
            self.pos_start, self.pos_end,
            f"cannot set field '{verb}' on {self.type_name}",
            self.context
        )

    def call_method(self, method):
        handler = self.method_table.get(method.kind)
        if handler is None:
            return None, RTError(
                method.pos_start, method.pos_end,
                f"no such method '{method.name}' for {self.type_name}",
                self.context
            )

        if len(method.args) != len(handler.arg_names):
            return None, RTError(
                method.pos_start, method.pos_end,
                f"wrong number of arguments: expected {len(handler.arg_names)}, got {len(method.args)}",
                self.context
            )

        return handler(self, method)

    def execute(self, args):
        return RTResult().failure(RTError(
            self.pos_start, self.pos_end,
            f"not a function: {self.type_name}",
            self.context
        ))

    def serialize(self):
        return None

    def copy(self):
        raise Exception('No copy method defined')

    def illegal_operation(self, op, other=None):
        if other is None:
            return RTError(
                self.pos_start, self.pos_end,
                f'unknown operator: {op}{self.type_name}',
                self.context
            )

        if self.type_name != other.type_name:
            details = f'type mismatch: {self.type_name} {op} {other.type_name}'
        else:
            details = f'unknown operator: {self.type_name} {op} {other.type_name}'

        return RTError(self.pos_start, other.pos_end, details, self.context)


class BaseNumber(Value):
    __slots__ = ['value']

    def __init__(self, value):
        super().__init__()
        self.value = value

    def make(self, value, other):
        if isinstance(self, Float) or isinstance(other, Float) or isinstance(value, float):
            return Float(float(value)).set_context(self.context), None
        return Number(value).set_context(self.context), None

    def division_by_zero(self, other):
        return None, RTError(
            other.pos_start, other.pos_end,
            'division by zero',
            self.context
        )

    def overflow(self, op, other):
        return None, RTError(
            self.pos_start, other.pos_end,
            f'numeric overflow: {self.type_name} {op} {other.type_name}',
            self.context
        )

    def added_to(self, other):
        if not isinstance(other, BaseNumber):
            return None, Value.illegal_operation(self, '+', other)

        try:
            return self.make(self.value + other.value, other)
        except OverflowError:
            return self.overflow('+', other)

    def subbed_by(self, other):
        if not isinstance(other, BaseNumber):
            return None, Value.illegal_operation(self, '-', other)

        try:
            return self.make(self.value - other.value, other)
        except OverflowError:
            return self.overflow('-', other)

    def multed_by(self, other):
        if not isinstance(other, BaseNumber):
            return None, Value.illegal_operation(self, '*', other)

        try:
            return self.make(self.value * other.value, other)
        except OverflowError:
            return self.overflow('*', other)

    def dived_by(self, other):
        if not isinstance(other, BaseNumber):
            return None, Value.illegal_operation(self, '/', other)

        if other.value == 0:
            return self.division_by_zero(other)

        if isinstance(self, Number) and isinstance(other, Number):
            # integer division truncates toward zero
            quotient = abs(self.value) // abs(other.value)
            if (self.value < 0) != (other.value < 0):
                quotient = -quotient
            return Number(quotient).set_context(self.context), None

        try:
            return self.make(self.value / other.value, other)
        except OverflowError:
            return self.overflow('/', other)

    def moded_by(self, other):
        if not isinstance(other, BaseNumber):
            return None, Value.illegal_operation(self, '%', other)

        if other.value == 0:
            return self.division_by_zero(other)

        if isinstance(self, Number) and isinstance(other, Number):
            # the remainder keeps the sign of the dividend
            remainder = abs(self.value) % abs(other.value)
            if self.value < 0:
                remainder = -remainder
            return Number(remainder).set_context(self.context), None

        try:
            return self.make(math.fmod(self.value, other.value), other)
        except OverflowError:
            return self.overflow('%', other)

    def powed_by(self, other):
        if not isinstance(other, BaseNumber):
            return None, Value.illegal_operation(self, '**', other)

        if self.value == 0 and other.value < 0:
            return self.division_by_zero(other)

        try:
            result = self.value ** other.value
        except OverflowError:
            return self.overflow('**', other)

        if isinstance(result, complex):
            return None, RTError(
                self.pos_start, other.pos_end,
                f'math domain error: {self.type_name} ** {other.type_name}',
                self.context
            )

        try:
            return self.make(result, other)
        except OverflowError:
            return self.overflow('**', other)

    def comparable(self, op, other):
        return isinstance(other, BaseNumber)

    def negated(self):
        return type(self)(-self.value).set_context(self.context), None

    def serialize(self):
        return f'{self.type_name}:{self.value!r}'

    def copy(self):
        copy = type(self)(self.value)
        copy.set_pos(self.pos_start, self.pos_end)
        copy.set_context(self.context)
        return copy

    def __repr__(self):
        return str(self.value)


class Number(BaseNumber):
    __slots__ = []
    type_name = 'INTEGER'

    def gen(self):
        for i in range(self.value):
            yield RTResult().success(
                Number(i).set_pos(self.pos_start, self.pos_end).set_context(self.context))


class Float(BaseNumber):
    __slots__ = []
    type_name = 'FLOAT'


class Boolean(Value):
    __slots__ = ['value']
    type_name = 'BOOLEAN'

    def __init__(self, value):
        super().__init__()
        self.value = value

    def comparable(self, op, other):
        # ordered by value: falso < verdadero
        return isinstance(other, Boolean)

    def notted(self):
        return Boolean(not self.value).set_context(self.context), None

    def serialize(self):
        return f'{self.type_name}:{self.value!r}'

    def copy(self):
        copy = Boolean(self.value)
        copy.set_pos(self.pos_start, self.pos_end)
        copy.set_context(self.context)
        return copy

    def __repr__(self):
        return 'verdadero' if self.value else 'falso'


class Null(Value):
    __slots__ = []
    type_name = 'NULL'

    def set_pos(self, pos_start=None, pos_end=None):
        if not hasattr(self, 'pos_start'):
            return super().set_pos()
        return self

    def set_context(self, context=None):
        if not hasattr(self, 'context'):
            return super().set_context()
        return self

    def serialize(self):
        return self.type_name

    def copy(self):
        return self

    def __repr__(self):
        return 'nulo'


Null.null = Null()


class String(Value):
    __slots__ = ['value']
    type_name = 'STRING'

    def __init__(self, value):
        super().__init__()
        self.value = value

    def added_to(self, other):
        if isinstance(other, String):
            return String(self.value + other.value).set_context(self.context), None
        else:
            return None, Value.illegal_operation(self, '+', other)

    def multed_by(self, other):
        if isinstance(other, Number):
            return String(self.value * other.value).set_context(self.context), None
        else:
            return None, Value.illegal_operation(self, '*', other)

    def comparable(self, op, other):
        return isinstance(other, String)

    def gen(self):
        for char in self.value:
            yield RTResult().success(
                String(char).set_pos(self.pos_start, self.pos_end).set_context(self.context))

    def get_index(self, index):
        if not isinstance(index, Number):
            return None, index_type_error(self, index)
        if not 0 <= index.value < len(self.value):
            return None, index_out_of_range(self, index)
        return String(self.value[index.value]).set_context(self.context), None

    def serialize(self):
        return f'{self.type_name}:{self.value!r}'

    def copy(self):
        copy = String(self.value)
        copy.set_pos(self.pos_start, self.pos_end)
        copy.set_context(self.context)
        return copy

    def __str__(self):
        return self.value

    def __repr__(self):
        return f'"{self.value}"'


def index_type_error(indexee, index):
    return RTError(
        index.pos_start, index.pos_end,
        f"index must be INTEGER, got {index.type_name}",
        indexee.context
    )


def index_out_of_range(indexee, index):
    return RTError(
        index.pos_start, index.pos_end,
        f"index out of range: {index!r} (length {len(indexee.value)})",
        indexee.context
    )


class List(Value):
    __slots__ = ['elements']
    type_name = 'LIST'

    def __init__(self, elements):
        super().__init__()
        self.elements = elements

    @property
    def value(self):
        return self.elements

    def gen(self):
        for elt in list(self.elements):
            yield RTResult().success(elt)

    def get_index(self, index):
        if not isinstance(index, Number):
            return None, index_type_error(self, index)
        if not 0 <= index.value < len(self.elements):
            return None, index_out_of_range(self, index)
        return self.elements[index.value], None

    def set_index(self, index, value):
        if not isinstance(index, Number):
            return None, index_type_error(self, index)
        if not 0 <= index.value < len(self.elements):
            return None, index_out_of_range(self, index)

        self.elements[index.value] = value
        return self, None

    @args([])
    def method_pop(self, method):
        if not self.elements:
            return None, RTError(
                method.pos_start, method.pos_end,
                'pop from empty list',
                self.context
            )
        return self.elements.pop(), None

    @args(['value'])
    def method_append(self, method):
        self.elements.append(method.args[0])
        return Null.null, None

    @args(['index'])
    def method_remove(self, method):
        index = method.args[0]
        if not isinstance(index, Number):
            return None, index_type_error(self, index)
        if not 0 <= index.value < len(self.elements):
            return None, index_out_of_range(self, index)
        return self.elements.pop(index.value), None

    def copy(self):
        copy = List(self.elements)
        copy.set_pos(self.pos_start, self.pos_end)
        copy.set_context(self.context)
        return copy

    def __repr__(self):
        return f'[{", ".join([repr(x) for x in self.elements])}]'


List.method_table = {
    MethodType.POP: List.method_pop,
    MethodType.APPEND: List.method_append,
    MethodType.REMOVE: List.method_remove,
}


class Map(Value):
    __slots__ = ['pairs']
    type_name = 'MAP'

    def __init__(self, pairs=None):
        super().__init__()
        # serialized key -> (key, value)
        self.pairs = pairs if pairs is not None else {}

    @property
    def value(self):
        return self.pairs

    def hash_key(self, key):
        hashed = key.serialize()
        if hashed is None:
            return None, RTError(
                key.pos_start, key.pos_end,
                f"unusable as map key: {key.type_name}",
                self.context
            )
        return hashed, None

    def insert(self, key, value):
        hashed, error = self.hash_key(key)
        if error:
            return None, error

        if hashed in self.pairs:
            return None, RTError(
                key.pos_start, key.pos_end,
                'duplicate keys not allowed',
                self.context
            )

        self.pairs[hashed] = (key, value)
        return self, None

    def gen(self):
        for key, _ in list(self.pairs.values()):
            yield RTResult().success(key)

    def get_index(self, index):
        hashed, error = self.hash_key(index)
        if error:
            return None, error

        pair = self.pairs.get(hashed)
        if pair is None:
            return Null.null, None
        return pair[1], None

    def set_index(self, index, value):
        hashed, error = self.hash_key(index)
        if error:
            return None, error

        self.pairs[hashed] = (index, value)
        return self, None

    @args(['key'])
    def method_contains(self, method):
        hashed = method.args[0].serialize()
        return Boolean(hashed is not None and hashed in self.pairs).set_context(self.context), None

    @args([])
    def method_values(self, method):
        values = [value for _, value in self.pairs.values()]
        return List(values).set_context(self.context), None

    def copy(self):
        copy = Map(self.pairs)
        copy.set_pos(self.pos_start, self.pos_end)
        copy.set_context(self.context)
        return copy

    def __repr__(self):
        return '{' + ', '.join(f'{key!r}: {value!r}' for key, value in self.pairs.values()) + '}'


Map.method_table = {
    MethodType.CONTAINS: Map.method_contains,
    MethodType.VALUES: Map.method_values,
}


class Method(Value):
    __slots__ = ['name', 'kind', 'args']
    type_name = 'METHOD'

    def __init__(self, name, kind, args):
        super().__init__()
        self.name = name
        self.kind = kind
        self.args = args

    def copy(self):
        copy = Method(self.name, self.kind, self.args)
        copy.set_pos(self.pos_start, self.pos_end)
        copy.set_context(self.context)
        return copy

    def __repr__(self):
        return f'<metodo {self.name}>'


class BaseFunction(Value):
    __slots__ = ['name', 'closure']
    type_name = 'FUNCTION'

    def __init__(self, name, closure=None):
        super().__init__()
        self.name = name or ANONYMOUS
        self.closure = closure

    def generate_new_context(self):
        new_context = Context(self.name, self.context, self.pos_start)
        new_context.environment = Environment(self.closure)
        return new_context

    def check_args(self, arg_names, args):
        res = RTResult()

        if len(args) != len(arg_names):
            return res.failure(RTError(
                self.pos_start, self.pos_end,
                f"wrong number of arguments: expected {len(arg_names)}, got {len(args)}",
                self.context
            ))

        return res.success(None)

    def populate_args(self, arg_names, args, exec_ctx):
        for arg_name, arg_value in zip(arg_names, args):
            exec_ctx.environment.set(arg_name, arg_value)

    def check_and_populate_args(self, arg_names, args, exec_ctx):
        res = RTResult()
        res.register(self.check_args(arg_names, args))
        if res.should_return():
            return res
        self.populate_args(arg_names, args, exec_ctx)
        return res.success(None)


class Function(BaseFunction):
    __slots__ = ['body_node', 'arg_names', 'instance']

    def __init__(self, name, body_node, arg_names, closure, instance=None):
        super().__init__(name, closure)
        self.body_node = body_node
        self.arg_names = arg_names
        self.instance = instance

    def execute(self, args):
        res = RTResult()
        interpreter = Interpreter()
        exec_ctx = self.generate_new_context()

        res.register(self.check_and_populate_args(self.arg_names, args, exec_ctx))
        if res.should_return():
            return res

        if self.instance is not None:
            exec_ctx.environment.set('yo', self.instance)

        value = res.register(interpreter.visit(self.body_node, exec_ctx))
        if res.should_return() and res.func_return_value is None:
            return res

        if res.func_return_value is not None:
            value = res.func_return_value
        return res.success(value)

    def copy(self):
        copy = Function(self.name, self.body_node, self.arg_names, self.closure, self.instance)
        copy.set_context(self.context)
        copy.set_pos(self.pos_start, self.pos_end)
        return copy

    def __repr__(self):
        return f"<funcion {self.name}>"


class BuiltInFunction(BaseFunction):
    __slots__ = []
    type_name = 'BUILTIN'

    def __init__(self, name):
        super().__init__(name)

    def execute(self, args):
        res = RTResult()
        exec_ctx = self.generate_new_context()

        method = getattr(self, f'execute_{self.name}', None)
        if method is None:
            raise Exception(f'No execute_{self.name} method defined')

        res.register(self.check_and_populate_args(method.arg_names, args, exec_ctx))
        if res.should_return():
            return res

        return_value = res.register(method(exec_ctx))
        if res.should_return():
            return res
        return res.success(return_value.set_pos(self.pos_start, self.pos_end))

    def copy(self):
        copy = BuiltInFunction(self.name)
        copy.set_context(self.context)
        copy.set_pos(self.pos_start, self.pos_end)
        return copy

    def __repr__(self):
        return f"<funcion integrada {self.name}>"

    #####################################

    @args(['valor'])
    def execute_imprimir(self, exec_ctx):
        print(str(exec_ctx.environment.get('valor')))
        return RTResult().success(Null.null)

    @args(['valor'])
    def execute_longitud(self, exec_ctx):
        value = exec_ctx.environment.get('valor')

        if isinstance(value, String):
            length = len(value.value)
        elif isinstance(value, List):
            length = len(value.elements)
        elif isinstance(value, Map):
            length = len(value.pairs)
        else:
            return RTResult().failure(RTError(
                self.pos_start, self.pos_end,
                f"argument to 'longitud' not supported, got {value.type_name}",
                exec_ctx
            ))

        return RTResult().success(Number(length).set_context(exec_ctx))

    @args(['valor'])
    def execute_tipo(self, exec_ctx):
        value = exec_ctx.environment.get('valor')
        return RTResult().success(String(value.type_name).set_context(exec_ctx))

    @args(['fin'])
    def execute_rango(self, exec_ctx):
        end = exec_ctx.environment.get('fin')

        if not isinstance(end, Number):
            return RTResult().failure(RTError(
                self.pos_start, self.pos_end,
                f"argument to 'rango' must be INTEGER, got {end.type_name}",
                exec_ctx
            ))

        elements = [res.value for res in end.gen()]
        return RTResult().success(List(elements).set_context(exec_ctx))

    @args(['valor'])
    def execute_texto(self, exec_ctx):
        value = exec_ctx.environment.get('valor')
        return RTResult().success(String(str(value)).set_context(exec_ctx))


BuiltInFunction.imprimir = BuiltInFunction("imprimir")
BuiltInFunction.longitud = BuiltInFunction("longitud")
BuiltInFunction.tipo = BuiltInFunction("tipo")
BuiltInFunction.rango = BuiltInFunction("rango")
BuiltInFunction.texto = BuiltInFunction("texto")


class Class(Value):
    __slots__ = ['name', 'params', 'methods', 'closure']
    type_name = 'CLASS'

    def __init__(self, name, params, methods, closure):
        super().__init__()
        self.name = name
        self.params = params
        self.methods = methods
        self.closure = closure

    def instantiate(self, args):
        res = RTResult()

        if len(args) != len(self.params):
            return res.failure(RTError(
                self.pos_start, self.pos_end,
                f"wrong number of arguments: expected {len(self.params)}, got {len(args)}",
                self.context
            ))

        fields = Environment(self.closure)
        for param, arg in zip(self.params, args):
            fields.set(param, arg)

        instance = ClassInstance(self, fields)
        return res.success(instance.set_pos(self.pos_start, self.pos_end).set_context(self.context))

    def copy(self):
        copy = Class(self.name, self.params, self.methods, self.closure)
        copy.set_pos(self.pos_start, self.pos_end)
        copy.set_context(self.context)
        return copy

    def __repr__(self):
        return f'<clase {self.name}>'


class ClassInstance(Value):
    __slots__ = ['cls', 'fields']
    type_name = 'INSTANCE'

    def __init__(self, cls, fields):
        super().__init__()
        self.cls = cls
        self.fields = fields

    def get_dot(self, verb):
        if verb in self.fields.symbols:
            return self.fields.symbols[verb], None

        method_node = self.cls.methods.get(verb)
        if method_node is not None:
            method = Function(
                f'{self.cls.name}.{verb}', method_node.body,
                [param.value for param in method_node.params],
                self.fields, self
            )
            return method.set_pos(self.pos_start, self.pos_end).set_context(self.context), None

        return None, RTError(
            self.pos_start, self.pos_end,
            f"instance of {self.cls.name} has no field or method '{verb}'",
            self.context
        )

    def set_dot(self, verb, value):
        self.fields.set(verb, value)
        return self, None

    def copy(self):
        copy = ClassInstance(self.cls, self.fields)
        copy.set_pos(self.pos_start, self.pos_end)
        copy.set_context(self.context)
        return copy

    def __repr__(self):
        fields = ', '.join(f'{name}: {value!r}' for name, value in self.fields.symbols.items())
        return f'{self.cls.name}({fields})'

#######################################
# INTERPRETER
#######################################

BINARY_OPERATIONS: Dict[str, str] = {
    '+': 'added_to',
    '-': 'subbed_by',
    '*': 'multed_by',
    '/': 'dived_by',
    '%': 'moded_by',
    '**': 'powed_by',
    '==': 'get_comparison_eq',
    '!=': 'get_comparison_ne',
    '<': 'get_comparison_lt',
    '>': 'get_comparison_gt',
    '<=': 'get_comparison_lte',
    '>=': 'get_comparison_gte',
}

COMPOUND_OPERATORS: Dict[str, str] = {
    '+=': '+',
    '-=': '-',
    '*=': '*',
    '/=': '/',
}


class Interpreter:
    def evaluate(self, program, environment):
        context = Context('<program>')
        context.environment = environment
        return self.visit(program, context)

    def visit(self, node, context):
        method_name = f'visit_{type(node).__name__}'
        method = getattr(self, method_name, self.no_visit_method)
        return method(node, context)

    def no_visit_method(self, node, context):
        raise Exception(f'No visit_{type(node).__name__} method defined')

    def locate(self, error, node, context):
        return error.set_pos(node.pos_start, node.pos_end).set_context(context)

    ###################################

    def visit_ProgramNode(self, node, context):
        res = RTResult()
        value = Null.null

        for statement in node.statements:
            value = res.register(self.visit(statement, context))
            if res.error:
                return res
            if res.func_return_value is not None:
                return res.success(res.func_return_value)

        return res.success(value)

    def visit_BlockNode(self, node, context):
        res = RTResult()
        value = Null.null

        for statement in node.statements:
            value = res.register(self.visit(statement, context))
            if res.should_return():
                return res

        return res.success(value)

    def visit_ExpressionStatementNode(self, node, context):
        return self.visit(node.expression, context)

    def visit_LetNode(self, node, context):
        res = RTResult()
        value = res.register(self.visit(node.value, context))
        if res.should_return():
            return res

        if isinstance(value, Function) and value.name == ANONYMOUS:
            value.name = node.name.value

        context.environment.set(node.name.value, value)
        return res.success(Null.null)

    def visit_ReturnNode(self, node, context):
        res = RTResult()

        if node.return_value:
            value = res.register(self.visit(node.return_value, context))
            if res.should_return():
                return res
        else:
            value = Null.null

        return res.success_return(value)

    def visit_ImportNode(self, node, context):
        res = RTResult()
        filename = node.path.value
        import_paths = load_import_paths()
        code = None

        for path in import_paths:
            filepath = os.path.join(path, filename)
            try:
                with open(filepath, "r", encoding="utf-8") as f:
                    code = f.read()
                break
            except FileNotFoundError:
                continue

        if code is None:
            return res.failure(RTError(
                node.path.pos_start, node.path.pos_end,
                f"Can't find file '{filename}' in {import_paths}. Add its directory to '{IMPORT_PATH_NAME}'",
                context
            ))

        _, errors = run(filepath, code, context.environment, context, node.pos_start.copy())
        if errors:
            return res.failure(errors[0])

        return res.success(Null.null)

    ###################################

    def visit_IdentifierNode(self, node, context):
        res = RTResult()
        value = context.environment.get(node.value)

        if value is None:
            return res.failure(RTError(
                node.pos_start, node.pos_end,
                f"identifier not found: {node.value}",
                context
            ))

        value = value.copy().set_pos(node.pos_start, node.pos_end).set_context(context)
        return res.success(value)

    def visit_IntegerNode(self, node, context):
        return RTResult().success(
            Number(node.value).set_context(context).set_pos(node.pos_start, node.pos_end)
        )

    def visit_FloatNode(self, node, context):
        return RTResult().success(
            Float(node.value).set_context(context).set_pos(node.pos_start, node.pos_end)
        )

    def visit_StringNode(self, node, context):
        return RTResult().success(
            String(node.value).set_context(context).set_pos(node.pos_start, node.pos_end)
        )

    def visit_BooleanNode(self, node, context):
        return RTResult().success(
            Boolean(node.value).set_context(context).set_pos(node.pos_start, node.pos_end)
        )

    def visit_NullNode(self, node, context):
        return RTResult().success(Null.null)

    def visit_ArrayNode(self, node, context):
        res = RTResult()
        elements = []

        for element_node in node.element_nodes:
            elements.append(res.register(self.visit(element_node, context)))
            if res.should_return():
                return res

        return res.success(
            List(elements).set_context(context).set_pos(node.pos_start, node.pos_end)
        )

    def visit_MapNode(self, node, context):
        res = RTResult()
        map_value = Map().set_context(context).set_pos(node.pos_start, node.pos_end)

        for pair in node.pairs:
            key = res.register(self.visit(pair.key, context))
            if res.should_return():
                return res

            value = res.register(self.visit(pair.value, context))
            if res.should_return():
                return res

            _, error = map_value.insert(key, value)
            if error:
                return res.failure(self.locate(error, pair.key, context))

        return res.success(map_value)

    def visit_FunctionNode(self, node, context):
        arg_names = [param.value for param in node.params]
        func_value = Function(None, node.body, arg_names, context.environment)
        return RTResult().success(
            func_value.set_context(context).set_pos(node.pos_start, node.pos_end)
        )

    def visit_ArrowFunctionNode(self, node, context):
        return self.visit_FunctionNode(node, context)

    ###################################

    def visit_PrefixNode(self, node, context):
        res = RTResult()
        right = res.register(self.visit(node.right, context))
        if res.should_return():
            return res

        if node.operator == '-':
            result, error = right.negated()
        elif node.operator == '!':
            result, error = right.notted()
        else:
            raise Exception(f'Unknown prefix operator {node.operator}')

        if error:
            return res.failure(self.locate(error, node, context))
        return res.success(result.set_pos(node.pos_start, node.pos_end))

    def visit_InfixNode(self, node, context):
        if node.operator in ('&&', '||'):
            return self.visit_logical(node, context)
        if node.operator in COMPOUND_OPERATORS:
            return self.visit_compound_assignment(node, context)

        res = RTResult()
        left = res.register(self.visit(node.left, context))
        if res.should_return():
            return res
        right = res.register(self.visit(node.right, context))
        if res.should_return():
            return res

        return self.apply_operator(node.operator, left, right, node, context)

    def apply_operator(self, op, left, right, node, context):
        res = RTResult()
        result, error = getattr(left, BINARY_OPERATIONS[op])(right)
        if error:
            return res.failure(self.locate(error, node, context))
        return res.success(result.set_pos(node.pos_start, node.pos_end))

    def visit_logical(self, node, context):
        res = RTResult()
        left = res.register(self.visit(node.left, context))
        if res.should_return():
            return res

        if not isinstance(left, Boolean):
            return res.failure(self.logical_type_error(node.operator, left, node.left, context))

        # short circuit
        if node.operator == '&&' and not left.value:
            return res.success(Boolean(False).set_context(context).set_pos(node.pos_start, node.pos_end))
        if node.operator == '||' and left.value:
            return res.success(Boolean(True).set_context(context).set_pos(node.pos_start, node.pos_end))

        right = res.register(self.visit(node.right, context))
        if res.should_return():
            return res

        if not isinstance(right, Boolean):
            return res.failure(self.logical_type_error(node.operator, right, node.right, context))

        return res.success(Boolean(right.value).set_context(context).set_pos(node.pos_start, node.pos_end))

    def logical_type_error(self, op, value, node, context):
        return RTError(
            node.pos_start, node.pos_end,
            f"type mismatch: '{op}' requires BOOLEAN operands, got {value.type_name}",
            context
        )

    ###################################

    def resolve_target(self, target, context):
        """Evaluate the container part of an assignment target.

        Succeeds with a (getter, setter) pair; both return (value, error).
        """
        res = RTResult()

        if isinstance(target, IdentifierNode):
            name = target.value

            def get_value():
                value = context.environment.get(name)
                if value is None:
                    return None, RTError(target.pos_start, target.pos_end,
                                         f"identifier not found: {name}", context)
                return value, None

            def set_value(value):
                if not context.environment.assign(name, value):
                    return None, RTError(target.pos_start, target.pos_end,
                                         f"identifier not found: {name}", context)
                return value, None

            return res.success((get_value, set_value))

        if isinstance(target, CallListNode):
            indexee = res.register(self.visit(target.left, context))
            if res.should_return():
                return res
            index = res.register(self.visit(target.index, context))
            if res.should_return():
                return res

            return res.success((
                lambda: indexee.get_index(index),
                lambda value: indexee.set_index(index, value),
            ))

        if isinstance(target, ClassFieldCallNode) and isinstance(target.field, IdentifierNode):
            noun = res.register(self.visit(target.obj, context))
            if res.should_return():
                return res
            verb = target.field.value

            return res.success((
                lambda: noun.get_dot(verb),
                lambda value: noun.set_dot(verb, value),
            ))

        return res.failure(RTError(
            target.pos_start, target.pos_end,
            f"cannot assign to '{target!r}'",
            context
        ))

    def visit_ReassignmentNode(self, node, context):
        res = RTResult()
        target = res.register(self.resolve_target(node.target, context))
        if res.should_return():
            return res
        _, set_value = target

        value = res.register(self.visit(node.value, context))
        if res.should_return():
            return res

        _, error = set_value(value)
        if error:
            return res.failure(self.locate(error, node, context))
        return res.success(value)

    def visit_AssignmentNode(self, node, context):
        res = RTResult()
        value = res.register(self.visit(node.value, context))
        if res.should_return():
            return res

        context.environment.set(node.name.value, value)
        return res.success(value)

    def visit_compound_assignment(self, node, context):
        res = RTResult()
        target = res.register(self.resolve_target(node.left, context))
        if res.should_return():
            return res
        get_value, set_value = target

        current, error = get_value()
        if error:
            return res.failure(self.locate(error, node.left, context))
        current = current.copy().set_pos(node.left.pos_start, node.left.pos_end)

        right = res.register(self.visit(node.right, context))
        if res.should_return():
            return res

        result = res.register(self.apply_operator(
            COMPOUND_OPERATORS[node.operator], current, right, node, context))
        if res.should_return():
            return res

        _, error = set_value(result)
        if error:
            return res.failure(self.locate(error, node, context))
        return res.success(result)

    def visit_SuffixNode(self, node, context):
        res = RTResult()

        if node.operator == '**':
            value = res.register(self.visit(node.left, context))
            if res.should_return():
                return res
            return self.apply_operator('*', value, value, node, context)

        target = res.register(self.resolve_target(node.left, context))
        if res.should_return():
            return res
        get_value, set_value = target

        current, error = get_value()
        if error:
            return res.failure(self.locate(error, node.left, context))
        current = current.copy().set_pos(node.left.pos_start, node.left.pos_end)

        step = Number(1).set_context(context).set_pos(node.tok.pos_start, node.tok.pos_end)
        op = '+' if node.operator == '++' else '-'
        result = res.register(self.apply_operator(op, current, step, node, context))
        if res.should_return():
            return res

        _, error = set_value(result)
        if error:
            return res.failure(self.locate(error, node, context))
        return res.success(result)

    ###################################

    def visit_CallNode(self, node, context):
        res = RTResult()

        value_to_call = res.register(self.visit(node.function, context))
        if res.should_return():
            return res

        return self.call_value(value_to_call, node, context)

    def call_value(self, value_to_call, node, context):
        res = RTResult()
        args = []
        value_to_call = value_to_call.copy().set_pos(node.pos_start, node.pos_end).set_context(context)

        for arg_node in node.arg_nodes:
            args.append(res.register(self.visit(arg_node, context)))
            if res.should_return():
                return res

        return_value = res.register(value_to_call.execute(args))
        if res.should_return():
            return res
        return_value = return_value.copy().set_pos(
            node.pos_start, node.pos_end).set_context(context)
        return res.success(return_value)

    def visit_CallListNode(self, node, context):
        res = RTResult()
        indexee = res.register(self.visit(node.left, context))
        if res.should_return():
            return res

        index = res.register(self.visit(node.index, context))
        if res.should_return():
            return res

        result, error = indexee.get_index(index)
        if error:
            return res.failure(self.locate(error, node, context))
        return res.success(result)

    def visit_MethodNode(self, node, context):
        res = RTResult()
        receiver = res.register(self.visit(node.obj, context))
        if res.should_return():
            return res

        method = res.register(self.visit_method_call(node.call, receiver, context))
        if res.should_return():
            return res

        result, error = receiver.call_method(method)
        if error:
            return res.failure(self.locate(error, node, context))
        return res.success(result.copy().set_pos(node.pos_start, node.pos_end))

    def visit_method_call(self, node, receiver, context):
        res = RTResult()
        name = node.function.value
        kind = METHOD_KINDS.get(name)

        if kind is None:
            return res.failure(RTError(
                node.pos_start, node.pos_end,
                f"no such method '{name}' for {receiver.type_name}",
                context
            ))

        args = []
        for arg_node in node.arg_nodes:
            args.append(res.register(self.visit(arg_node, context)))
            if res.should_return():
                return res

        return res.success(
            Method(name, kind, args).set_pos(node.pos_start, node.pos_end).set_context(context)
        )

    ###################################

    def visit_ClassNode(self, node, context):
        methods = {method.name.value: method for method in node.methods}
        cls = Class(node.name.value, [param.value for param in node.params],
                    methods, context.environment)
        context.environment.set(node.name.value, cls.set_context(context).set_pos(node.pos_start, node.pos_end))
        return RTResult().success(Null.null)

    def visit_ClassCallNode(self, node, context):
        res = RTResult()
        name = node.name.value
        cls = context.environment.get(name)

        if not isinstance(cls, Class):
            return res.failure(RTError(
                node.name.pos_start, node.name.pos_end,
                f"not a class: {name}",
                context
            ))
        cls = cls.copy().set_pos(node.pos_start, node.pos_end).set_context(context)

        args = []
        for arg_node in node.arg_nodes:
            args.append(res.register(self.visit(arg_node, context)))
            if res.should_return():
                return res

        return cls.instantiate(args)

    def visit_ClassFieldCallNode(self, node, context):
        res = RTResult()
        noun = res.register(self.visit(node.obj, context))
        if res.should_return():
            return res

        if isinstance(node.field, IdentifierNode):
            result, error = noun.get_dot(node.field.value)
            if error:
                return res.failure(self.locate(error, node, context))
            return res.success(result.copy().set_pos(node.pos_start, node.pos_end))

        call = node.field
        method, error = noun.get_dot(call.function.value)
        if error:
            return res.failure(self.locate(error, node, context))
        return self.call_value(method, call, context)

    ###################################

    def check_condition(self, condition, node, context):
        if isinstance(condition, Boolean):
            return None
        return RTError(
            node.pos_start, node.pos_end,
            f"condition must be BOOLEAN, got {condition.type_name}",
            context
        )

    def visit_IfNode(self, node, context):
        res = RTResult()
        condition = res.register(self.visit(node.condition, context))
        if res.should_return():
            return res

        error = self.check_condition(condition, node.condition, context)
        if error:
            return res.failure(error)

        branch = node.consequence if condition.value else node.alternative
        if branch is None:
            return res.success(Null.null)

        value = res.register(self.visit(branch, context.child()))
        if res.should_return():
            return res
        return res.success(value)

    def visit_WhileNode(self, node, context):
        res = RTResult()

        while True:
            condition = res.register(self.visit(node.condition, context))
            if res.should_return():
                return res

            error = self.check_condition(condition, node.condition, context)
            if error:
                return res.failure(error)

            if not condition.value:
                break

            res.register(self.visit(node.body, context))
            if res.should_return():
                return res

        return res.success(Null.null)

    def visit_ForNode(self, node, context):
        res = RTResult()
        var_name = node.range.variable.value

        iterable = res.register(self.visit(node.range.iterable, context))
        if res.should_return():
            return res

        for it_res in iterable.gen():
            elt = res.register(it_res)
            if res.should_return():
                return res

            # one binding per iteration so closures keep their own element
            iteration_ctx = context.child()
            iteration_ctx.environment.set(var_name, elt)

            res.register(self.visit(node.body, iteration_ctx))
            if res.should_return():
                return res

        return res.success(Null.null)

#######################################
# RUN
#######################################

def make_global_environment():
    environment = Environment()
    environment.set("imprimir", BuiltInFunction.imprimir)
    environment.set("longitud", BuiltInFunction.longitud)
    environment.set("tipo", BuiltInFunction.tipo)
    environment.set("rango", BuiltInFunction.rango)
    environment.set("texto", BuiltInFunction.texto)
    return environment

global_environment = make_global_environment()


def parse(fn, text):
    parser = Parser(Lexer(fn, text))
    program = parser.parse_program()
    return program, parser.errors


def run(fn, text, environment=None, context=None, entry_pos=None):
    # Generate AST
    program, errors = parse(fn, text)
    if errors:
        return None, errors

    # Run program
    interpreter = Interpreter()
    new_context = Context('<program>', context, entry_pos)
    new_context.environment = environment if environment is not None else global_environment
    result = interpreter.visit(program, new_context)

    if result.error:
        return None, [result.error]
    return result.value, []
