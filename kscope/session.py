import logging
from typing import Dict, List, Optional, TextIO, Union

from .codegen import CodeGenerator
from .dump import dump_function, dump_module
from .exceptions import CodeGeneratorError, CompilerError, ParserError, VMError
from .ir import Function, Module
from .lexer import Lexer, TokenType
from .libs import ExternFunction
from .parser import Parser
from .vm import VM

logger = logging.getLogger(__name__)
result_logger = logging.getLogger(__name__ + '.result')


class Session:
    """One compilation session: a token cursor, a precedence table and a module.

    Units (a definition, an extern or a top-level expression) are handled one
    at a time; a failing unit is reported once and abandoned without touching
    the units around it.
    """

    def __init__(self,
                 source: Union[str, TextIO],
                 binary_precedence: Dict[str, int] = None,
                 module_name: str = 'kscope',
                 evaluate: bool = False,
                 extern_table: Dict[str, ExternFunction] = None):
        self.module: Module = Module(module_name)
        self.lexer: Lexer = Lexer(source)
        self.parser: Parser = Parser(self.lexer, binary_precedence)
        self.code_generator: CodeGenerator = CodeGenerator(self.module)
        self.vm: Optional[VM] = VM(self.module, extern_table) if evaluate else None
        self.evaluated: List[float] = list()
        self.failed_unit_count: int = 0

    @property
    def error_count(self) -> int:
        return self.failed_unit_count + self.parser.error_count

    def report(self, error: CompilerError):
        self.failed_unit_count += 1
        logger.error('Error: %s', error.message)

    def skip_token(self):
        # 出错后丢弃一个 token 重新同步
        self.parser.advance_token()

    def handle_definition(self) -> Optional[Function]:
        try:
            ast_node = self.parser.parse_definition()
        except ParserError as e:
            self.report(e)
            self.skip_token()
            return None
        logger.info('Parsed a function definition.')
        try:
            function = self.code_generator.generate(ast_node)
        except CodeGeneratorError as e:
            self.report(e)
            return None
        logger.info('Read function definition:\n%s', dump_function(function))
        return function

    def handle_extern(self) -> Optional[Function]:
        try:
            ast_node = self.parser.parse_extern()
        except ParserError as e:
            self.report(e)
            self.skip_token()
            return None
        logger.info('Parsed an extern.')
        try:
            function = self.code_generator.generate(ast_node)
        except CodeGeneratorError as e:
            self.report(e)
            return None
        logger.info('Read extern: %s', dump_function(function))
        return function

    def handle_top_level_expression(self) -> Optional[Function]:
        try:
            ast_node = self.parser.parse_top_level_expression()
        except ParserError as e:
            self.report(e)
            self.skip_token()
            return None
        logger.info('Parsed a top-level expression.')
        try:
            function = self.code_generator.generate(ast_node)
        except CodeGeneratorError as e:
            self.report(e)
            return None
        logger.info('Read top-level expression:\n%s', dump_function(function))
        try:
            if self.vm is not None:
                value = self.vm.evaluate(function)
                self.evaluated.append(value)
                result_logger.info('Evaluated to %f', value)
        except VMError as e:
            self.report(e)
        finally:
            # 匿名函数只用一次
            self.module.erase_function(function)
        return function

    def run(self) -> Module:
        while True:
            token = self.parser.current_token
            if token.type == TokenType.EOF:
                return self.module
            elif token.type == TokenType.CHAR and token.value == ';':
                self.parser.advance_token()
            elif token.type == TokenType.DEF:
                self.handle_definition()
            elif token.type == TokenType.EXTERN:
                self.handle_extern()
            else:
                self.handle_top_level_expression()

    def dump(self) -> str:
        return dump_module(self.module)
