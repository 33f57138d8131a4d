import io
import string
from enum import Enum
from typing import Any, List, TextIO, Union

IDENTIFIER_START = string.ascii_letters
IDENTIFIER_CHARS = string.ascii_letters + string.digits
NUMBER_CHARS = string.digits + '.'


class Location:
    def __init__(self, lineno: int, column: int, offset: int):
        self.lineno = lineno
        self.column = column
        self.offset = offset

    def __repr__(self):
        return f'{self.lineno}:{self.column}'


class TokenType(Enum):
    # reserved word
    DEF = 'def'
    EXTERN = 'extern'

    # other
    IDENTIFIER = 'IDENTIFIER'
    NUMBER = 'NUMBER'
    CHAR = 'CHAR'
    EOF = 'EOF'

    @classmethod
    def reserved_word(cls):
        return {
            cls.DEF.value: cls.DEF,
            cls.EXTERN.value: cls.EXTERN,
        }


class Token:
    def __init__(self, token_type: TokenType, value: Any, start: Location, end: Location):
        self.type = token_type
        self.value = value
        self.start = start
        self.end = end

    def __eq__(self, other):
        if not isinstance(other, Token):
            return NotImplemented
        return self.type == other.type and self.value == other.value

    def __hash__(self):
        return hash((self.type, self.value))

    def __repr__(self):
        return f'Token({self.type}, {repr(self.value)}, ' \
               f'position={self.start.lineno}:{self.start.column} to {self.end.lineno}:{self.end.column})'


class Lexer:
    """Pulls characters one at a time from ``source`` and groups them into tokens.

    ``source`` is either a string or a text stream; streams are never seeked,
    so stdin works as well as a file.
    """

    def __init__(self, source: Union[str, TextIO]):
        if isinstance(source, str):
            source = io.StringIO(source)
        self.source: TextIO = source
        self.position = 0
        self.lineno = 1
        self.column = 1
        self.current_char = self._read_char()
        self.next_char = self._read_char()

    def _read_char(self):
        char = self.source.read(1)
        return char if char else None

    def location(self):
        return Location(self.lineno, self.column, self.position)

    def advance_position(self):
        if self.current_char is None:
            return
        if self.current_char == '\n':
            self.lineno += 1
            self.column = 0
        self.position += 1
        self.column += 1
        self.current_char = self.next_char
        if self.current_char is not None:
            self.next_char = self._read_char()

    def get_next_token(self):
        while self.current_char is not None:
            start = self.location()
            if self.current_char.isspace():
                # 跳过空白
                while self.current_char is not None and self.current_char.isspace():
                    self.advance_position()
                continue
            elif self.current_char == '#':
                # 跳过注释
                while self.current_char is not None and self.current_char not in '\n\r':
                    self.advance_position()
                continue
            elif self.current_char in IDENTIFIER_START:
                # 处理为关键字或ID
                value = ''
                while self.current_char is not None and self.current_char in IDENTIFIER_CHARS:
                    value += self.current_char
                    self.advance_position()
                token_type = TokenType.reserved_word().get(value)
                if token_type is not None:
                    return Token(token_type, value, start, self.location())
                return Token(TokenType.IDENTIFIER, value, start, self.location())
            elif self.current_char in NUMBER_CHARS:
                # 处理数字，至多一个小数点
                value = ''
                while self.current_char is not None and self.current_char in NUMBER_CHARS:
                    if self.current_char == '.' and '.' in value:
                        break
                    value += self.current_char
                    self.advance_position()
                # 单独的 '.' 没有可转换的数字，按 0 处理
                number = float(value) if value != '.' else 0.0
                return Token(TokenType.NUMBER, number, start, self.location())
            else:
                # 其余单字符原样返回
                value = self.current_char
                self.advance_position()
                return Token(TokenType.CHAR, value, start, self.location())

        return Token(TokenType.EOF, None, self.location(), self.location())

    def tokenize(self) -> List[Token]:
        token_list = list()
        while True:
            token = self.get_next_token()
            token_list.append(token)
            if token.type == TokenType.EOF:
                return token_list
