from .lexer import Lexer
from .parser import Parser
from .codegen import CodeGenerator
from .ir import Module, IRBuilder, verify_function
from .dump import dump_module
from .session import Session
from .vm import VM
