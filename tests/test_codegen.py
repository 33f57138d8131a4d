"""
Code generator tests
====================

Usage:
    python -m pytest tests/test_codegen.py -v
"""
import pytest

from kscope.codegen import CodeGenerator
from kscope.dump import dump_function
from kscope.exceptions import CodeGeneratorError, ErrorCode
from kscope.ir import Module, OPCodes
from kscope.lexer import Lexer, TokenType
from kscope.parser import BinaryOp, FunctionDecl, NumberLiteral, Parser, Signature, VariableRef


def parse_units(text):
    parser = Parser(Lexer(text))
    units = list()
    while parser.current_token.type != TokenType.EOF:
        if parser.current_token.type == TokenType.DEF:
            units.append(parser.parse_definition())
        elif parser.current_token.type == TokenType.EXTERN:
            units.append(parser.parse_extern())
        elif parser.is_char(';'):
            parser.advance_token()
        else:
            units.append(parser.parse_top_level_expression())
    return units


def generate(code_generator, text):
    return [code_generator.generate(unit) for unit in parse_units(text)]


@pytest.fixture
def code_generator():
    return CodeGenerator(Module())


def opcodes(function):
    return [instruction.opcode for instruction in function.instructions()]


class TestExpressions:

    def test_arithmetic(self, code_generator):
        function, = generate(code_generator, 'def f(a b) a + b * 2 - 1')
        assert opcodes(function) == [OPCodes.FMUL, OPCodes.FADD, OPCodes.FSUB, OPCodes.RET]

    def test_less_than_widens_to_double(self, code_generator):
        function, = generate(code_generator, 'def lt(a b) a < b')
        assert opcodes(function) == [OPCodes.FCMP_ULT, OPCodes.UITOFP, OPCodes.RET]

    def test_constant_only_body(self, code_generator):
        function, = generate(code_generator, 'def one() 1')
        assert opcodes(function) == [OPCodes.RET]

    def test_unknown_variable(self, code_generator):
        with pytest.raises(CodeGeneratorError) as e:
            generate(code_generator, 'def f(y) x')
        assert e.value.error_code == ErrorCode.UNKNOWN_VARIABLE
        assert 'f' not in code_generator.module

    def test_bare_variable_without_function(self, code_generator):
        with pytest.raises(CodeGeneratorError) as e:
            code_generator.gen_code(VariableRef('x'))
        assert e.value.error_code == ErrorCode.UNKNOWN_VARIABLE
        assert len(code_generator.module) == 0

    def test_invalid_operator(self, code_generator):
        body = BinaryOp('/', NumberLiteral(1.0), NumberLiteral(2.0))
        with pytest.raises(CodeGeneratorError) as e:
            code_generator.generate(FunctionDecl(Signature('div', []), body))
        assert e.value.error_code == ErrorCode.INVALID_BINARY_OPERATOR
        assert 'div' not in code_generator.module

    def test_unexpected_node(self, code_generator):
        with pytest.raises(CodeGeneratorError) as e:
            code_generator.generate(FunctionDecl(Signature('f', []), Signature('g', [])))
        assert e.value.error_code == ErrorCode.UNEXPECTED_AST_NODE

    def test_locals_do_not_leak_between_functions(self, code_generator):
        generate(code_generator, 'def f(x) x')
        with pytest.raises(CodeGeneratorError) as e:
            generate(code_generator, 'def g(y) x')
        assert e.value.error_code == ErrorCode.UNKNOWN_VARIABLE


class TestCalls:

    def test_arity_mismatch(self, code_generator):
        generate(code_generator, 'extern foo(a b)')
        with pytest.raises(CodeGeneratorError) as e:
            generate(code_generator, 'foo(1)')
        assert e.value.error_code == ErrorCode.ARGUMENT_COUNT_MISMATCH
        assert '2' in e.value.message and '1' in e.value.message

    def test_matching_arity(self, code_generator):
        generate(code_generator, 'extern foo(a b)')
        function, = generate(code_generator, 'foo(1, 2)')
        call = next(function.instructions())
        assert call.opcode == OPCodes.CALL
        assert call.callee is code_generator.module.get_function('foo')

    def test_unknown_function(self, code_generator):
        with pytest.raises(CodeGeneratorError) as e:
            generate(code_generator, 'bar(1)')
        assert e.value.error_code == ErrorCode.UNKNOWN_FUNCTION

    def test_failing_argument_short_circuits(self, code_generator):
        generate(code_generator, 'extern foo(a b)')
        with pytest.raises(CodeGeneratorError) as e:
            generate(code_generator, 'def g(x) foo(x, y)')
        assert e.value.error_code == ErrorCode.UNKNOWN_VARIABLE
        assert 'g' not in code_generator.module

    def test_recursive_reference(self, code_generator):
        function, = generate(code_generator, 'def f(x) f(x - 1)')
        assert opcodes(function) == [OPCodes.FSUB, OPCodes.CALL, OPCodes.RET]


class TestDeclarations:

    def test_forward_declaration_reused(self, code_generator):
        declared, = generate(code_generator, 'extern foo(a)')
        assert declared.is_declaration
        defined, = generate(code_generator, 'def foo(a) a + 1')
        assert defined is declared
        assert not defined.is_declaration
        assert len(code_generator.module) == 1

    def test_definition_renames_parameters(self, code_generator):
        generate(code_generator, 'extern foo(a)')
        function, = generate(code_generator, 'def foo(n) n * 2')
        assert [param.name for param in function.params] == ['n']

    def test_failed_definition_keeps_forward_declaration(self, code_generator):
        declared, = generate(code_generator, 'extern foo(a)')
        with pytest.raises(CodeGeneratorError):
            generate(code_generator, 'def foo(b) c')
        assert code_generator.module.get_function('foo') is declared
        assert declared.is_declaration
        assert [param.name for param in declared.params] == ['a']

    def test_redeclaring_with_different_arity(self, code_generator):
        generate(code_generator, 'extern foo(a)')
        with pytest.raises(CodeGeneratorError) as e:
            generate(code_generator, 'extern foo(a b)')
        assert e.value.error_code == ErrorCode.SIGNATURE_MISMATCH
        with pytest.raises(CodeGeneratorError) as e:
            generate(code_generator, 'def foo(a b) a')
        assert e.value.error_code == ErrorCode.SIGNATURE_MISMATCH
        assert code_generator.module.get_function('foo').arity == 1

    def test_redeclaring_with_same_arity(self, code_generator):
        first, = generate(code_generator, 'extern foo(a)')
        second, = generate(code_generator, 'extern foo(b)')
        assert first is second

    def test_extern_after_definition(self, code_generator):
        defined, = generate(code_generator, 'def foo(x) x + 1')
        before = dump_function(defined)
        declared, = generate(code_generator, 'extern foo(addtmp)')
        assert declared is defined
        assert not declared.is_declaration
        assert [param.name for param in declared.params] == ['x']
        assert dump_function(declared) == before

    def test_duplicate_parameters_bind_in_order(self, code_generator):
        function, = generate(code_generator, 'def f(a a) a1 - a')
        first, second = function.params
        assert (first.name, second.name) == ('a', 'a1')
        subtract = next(function.instructions())
        assert subtract.operands == [second, first]

    def test_redefinition_rejected(self, code_generator):
        function, = generate(code_generator, 'def f(x) x')
        with pytest.raises(CodeGeneratorError) as e:
            generate(code_generator, 'def f(x) x + 1')
        assert e.value.error_code == ErrorCode.FUNCTION_REDEFINITION
        assert opcodes(function) == [OPCodes.RET]
