from enum import Enum


class ErrorCode(Enum):
    # LexerError
    LEXER_ERROR = 'Lexer Error'

    # ParserError
    UNEXPECTED_TOKEN = 'Unexpected token'
    EXPECTED_TOKEN = 'Expected token'

    # CodeGeneratorError
    UNEXPECTED_AST_NODE = 'Unexpected ast node'
    UNKNOWN_VARIABLE = 'Unknown variable'
    UNKNOWN_FUNCTION = 'Unknown function'
    ARGUMENT_COUNT_MISMATCH = 'Argument count mismatch'
    INVALID_BINARY_OPERATOR = 'Invalid binary operator'
    SIGNATURE_MISMATCH = 'Signature mismatch'
    FUNCTION_REDEFINITION = 'Function redefinition'
    VERIFICATION_FAILED = 'Verification failed'

    # VMError
    CALL_ERROR = 'Call Error'
    EXTERN_FUNCTION_ERROR = 'Extern Function Error'


class CompilerError(Exception):
    def __init__(self, error_code: ErrorCode, message: str = ''):
        # 在message前添加异常类名
        super().__init__(f'{self.__class__.__name__}: {error_code.value}: {message}')
        self.error_code: ErrorCode = error_code
        self.message: str = message


class LexerError(CompilerError):
    """Reserved: the lexer accepts every input and never raises this."""


class ParserError(CompilerError):
    pass


class CodeGeneratorError(CompilerError):
    pass


class VMError(CompilerError):
    pass
