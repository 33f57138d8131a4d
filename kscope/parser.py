import logging
from typing import Dict, List, Optional

from .exceptions import ParserError, ErrorCode
from .lexer import Location, Token, TokenType, Lexer

logger = logging.getLogger(__name__)

ANONYMOUS_FUNCTION_NAME = '__anon_expr'

# 数值越大结合越紧
DEFAULT_BINARY_PRECEDENCE: Dict[str, int] = {
    '<': 10,
    '+': 20,
    '-': 20,
    '*': 40,
}


class ASTNode:
    # 参与结构相等比较的字段，不包含位置信息
    _fields = ()

    def __init__(self, start: Location = None, end: Location = None):
        self.start: Location = start
        self.end: Location = end

    def __eq__(self, other):
        if type(self) is not type(other):
            return NotImplemented
        return all(getattr(self, name) == getattr(other, name) for name in self._fields)

    def __hash__(self):
        return hash((type(self),) + tuple(repr(getattr(self, name)) for name in self._fields))


class Expression(ASTNode):
    pass


class NumberLiteral(Expression):
    _fields = ('value',)

    def __init__(self, value: float = None,
                 start: Location = None, end: Location = None):
        super().__init__(start=start, end=end)
        self.value: float = value

    def __repr__(self):
        return repr(self.value)


class VariableRef(Expression):
    _fields = ('name',)

    def __init__(self, name: str = None,
                 start: Location = None, end: Location = None):
        super().__init__(start=start, end=end)
        self.name: str = name

    def __repr__(self):
        return self.name


class BinaryOp(Expression):
    _fields = ('operator', 'left', 'right')

    def __init__(self, operator: str = None, left: Expression = None, right: Expression = None,
                 start: Location = None, end: Location = None):
        super().__init__(start=start, end=end)
        self.operator: str = operator
        self.left: Expression = left
        self.right: Expression = right

    def __repr__(self):
        return f'({self.left!r}{self.operator}{self.right!r})'


class Call(Expression):
    _fields = ('callee', 'arguments')

    def __init__(self, callee: str = None, arguments: List[Expression] = None,
                 start: Location = None, end: Location = None):
        super().__init__(start=start, end=end)
        self.callee: str = callee
        if arguments is None:
            arguments = list()
        self.arguments: List[Expression] = arguments

    def __repr__(self):
        return f'{self.callee}({", ".join(map(lambda x: repr(x), self.arguments))})'


class Signature(ASTNode):
    _fields = ('name', 'params')

    def __init__(self, name: str = None, params: List[str] = None,
                 start: Location = None, end: Location = None):
        super().__init__(start=start, end=end)
        self.name: str = name
        if params is None:
            params = list()
        self.params: List[str] = params

    @property
    def arity(self) -> int:
        return len(self.params)

    def __repr__(self):
        return f'{self.name}({" ".join(self.params)})'


class FunctionDecl(ASTNode):
    _fields = ('signature', 'body')

    def __init__(self, signature: Signature = None, body: Optional[Expression] = None,
                 start: Location = None, end: Location = None):
        super().__init__(start=start, end=end)
        self.signature: Signature = signature
        self.body: Optional[Expression] = body

    @property
    def is_declaration(self) -> bool:
        return self.body is None

    def __repr__(self):
        if self.body is None:
            return f'extern {self.signature!r}'
        return f'def {self.signature!r} {self.body!r}'


class Parser:
    def __init__(self, lexer: Lexer, binary_precedence: Dict[str, int] = None):
        self.lexer: Lexer = lexer
        if binary_precedence is None:
            binary_precedence = DEFAULT_BINARY_PRECEDENCE
        self.binary_precedence: Dict[str, int] = dict(binary_precedence)
        self.previous_token: Optional[Token] = None
        self.current_token: Token = self.lexer.get_next_token()
        # 被丢弃的调用参数个数
        self.error_count: int = 0

    def error(self,
              message: str,
              error_code: ErrorCode = ErrorCode.EXPECTED_TOKEN,
              token: Token = None):
        if token is None:
            token = self.current_token
        raise ParserError(error_code=error_code, message=f'{message}, but {token!r} was given')

    def advance_token(self):
        self.previous_token = self.current_token
        self.current_token = self.lexer.get_next_token()
        return self.current_token

    def is_char(self, char: str) -> bool:
        return self.current_token.type == TokenType.CHAR and self.current_token.value == char

    def get_token_precedence(self) -> int:
        if self.current_token.type != TokenType.CHAR:
            return -1
        precedence = self.binary_precedence.get(self.current_token.value, 0)
        if precedence <= 0:
            return -1
        return precedence

    def parse_number_expression(self):
        token = self.current_token
        self.advance_token()
        return NumberLiteral(token.value, start=token.start, end=token.end)

    def parse_paren_expression(self):
        self.advance_token()
        ast_node = self.parse_expression()
        if not self.is_char(')'):
            self.error("expected ')'")
        self.advance_token()
        return ast_node

    def parse_identifier_expression(self):
        token = self.current_token
        self.advance_token()
        if not self.is_char('('):
            # 变量引用
            return VariableRef(token.value, start=token.start, end=token.end)

        # 函数调用
        ast_node = Call(token.value, start=token.start)
        self.advance_token()
        if not self.is_char(')'):
            while True:
                try:
                    ast_node.arguments.append(self.parse_expression())
                except ParserError as e:
                    # 丢弃错误的参数，但仍要求后面是 ',' 或 ')'
                    self.error_count += 1
                    logger.error('Error: %s', e.message)
                if self.is_char(')'):
                    break
                if not self.is_char(','):
                    self.error("expected ')' or ',' in argument list")
                self.advance_token()
        ast_node.end = self.current_token.end
        self.advance_token()
        return ast_node

    def parse_primary(self):
        if self.current_token.type == TokenType.IDENTIFIER:
            return self.parse_identifier_expression()
        elif self.current_token.type == TokenType.NUMBER:
            return self.parse_number_expression()
        elif self.is_char('('):
            return self.parse_paren_expression()
        self.error('unknown token when expecting an expression', error_code=ErrorCode.UNEXPECTED_TOKEN)

    def parse_bin_op_rhs(self, min_precedence: int, left: Expression):
        while True:
            precedence = self.get_token_precedence()
            if precedence < min_precedence:
                return left

            operator = self.current_token.value
            self.advance_token()
            right = self.parse_primary()

            # 后面的运算符结合更紧时，先与右侧结合
            if precedence < self.get_token_precedence():
                right = self.parse_bin_op_rhs(precedence + 1, right)

            left = BinaryOp(operator, left, right, start=left.start, end=self.previous_token.end)

    def parse_expression(self):
        left = self.parse_primary()
        return self.parse_bin_op_rhs(0, left)

    def parse_signature(self):
        if self.current_token.type != TokenType.IDENTIFIER:
            self.error('expected function name in signature')
        ast_node = Signature(self.current_token.value, start=self.current_token.start)
        self.advance_token()

        if not self.is_char('('):
            self.error("expected '(' in signature")
        while self.advance_token().type == TokenType.IDENTIFIER:
            ast_node.params.append(self.current_token.value)
        if not self.is_char(')'):
            self.error("expected ')' in signature")
        ast_node.end = self.current_token.end
        self.advance_token()
        return ast_node

    def parse_definition(self):
        start = self.current_token.start
        self.advance_token()
        signature = self.parse_signature()
        body = self.parse_expression()
        return FunctionDecl(signature, body, start=start, end=self.previous_token.end)

    def parse_extern(self):
        start = self.current_token.start
        self.advance_token()
        signature = self.parse_signature()
        return FunctionDecl(signature, start=start, end=signature.end)

    def parse_top_level_expression(self):
        start = self.current_token.start
        body = self.parse_expression()
        signature = Signature(ANONYMOUS_FUNCTION_NAME, start=start, end=start)
        return FunctionDecl(signature, body, start=start, end=self.previous_token.end)
