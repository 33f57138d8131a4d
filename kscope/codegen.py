from typing import Dict

from .exceptions import CodeGeneratorError, ErrorCode
from .ir import Function, IRBuilder, Module, Value, binary_operator_to_opcodes, find_verification_errors
from .parser import ASTNode, BinaryOp, Call, FunctionDecl, NumberLiteral, Signature, VariableRef


class CodeGenerator:
    def __init__(self, module: Module):
        self.module: Module = module
        self.builder: IRBuilder = IRBuilder()
        # 当前函数的参数表，每个函数重新建立
        self.named_values: Dict[str, Value] = dict()

    def generate(self, ast_node: FunctionDecl) -> Function:
        if ast_node.is_declaration:
            return self.gen_signature(ast_node.signature)
        return self.gen_function(ast_node)

    def gen_signature(self, signature: Signature) -> Function:
        function = self.module.get_function(signature.name)
        if function is None:
            return self.module.declare_function(signature.name, signature.params)
        if function.arity != signature.arity:
            raise CodeGeneratorError(
                ErrorCode.SIGNATURE_MISMATCH,
                f'{signature.name} was declared with {function.arity} parameters, '
                f'but {signature.arity} were given'
            )
        # 已有函数体的函数保持原样，只检查参数个数
        if function.is_declaration:
            function.set_param_names(signature.params)
        return function

    def gen_function(self, ast_node: FunctionDecl) -> Function:
        signature = ast_node.signature
        existing = self.module.get_function(signature.name)
        if existing is not None and not existing.is_declaration:
            raise CodeGeneratorError(ErrorCode.FUNCTION_REDEFINITION, f'{signature.name} cannot be redefined')
        old_param_names = [param.name for param in existing.params] if existing is not None else None
        function = self.gen_signature(signature)

        try:
            self.builder.begin_function(function)
            # 重名参数已被改写为 a, a1 ...，按改写后的名字绑定
            self.named_values = {param.name: param for param in function.params}
            return_value = self.gen_code(ast_node.body)
            self.builder.emit_return(return_value)

            errors = find_verification_errors(function)
            if errors:
                raise CodeGeneratorError(ErrorCode.VERIFICATION_FAILED, '; '.join(errors))
        except CodeGeneratorError:
            # 回滚: 本次新建的声明删除，沿用的 extern 声明恢复为无函数体
            if existing is None:
                self.module.erase_function(function)
            else:
                function.clear_body()
                function.set_param_names(old_param_names)
            raise
        finally:
            self.builder.block = None
            self.named_values = dict()
        return function

    def gen_code(self, ast_node: ASTNode) -> Value:
        if isinstance(ast_node, NumberLiteral):
            # 数字
            return self.builder.emit_constant(ast_node.value)
        elif isinstance(ast_node, VariableRef):
            # 变量，只能是当前函数的参数
            value = self.named_values.get(ast_node.name)
            if value is None:
                raise CodeGeneratorError(ErrorCode.UNKNOWN_VARIABLE, f'unknown variable name {ast_node.name}')
            return value
        elif isinstance(ast_node, BinaryOp):
            # 二元运算
            left = self.gen_code(ast_node.left)
            right = self.gen_code(ast_node.right)
            if ast_node.operator in binary_operator_to_opcodes:
                return self.builder.emit_binary_arith(ast_node.operator, left, right)
            elif ast_node.operator == '<':
                # 比较结果为 i1，需转换回 double
                result = self.builder.emit_compare_less(left, right)
                return self.builder.emit_widen_bool_to_numeric(result)
            raise CodeGeneratorError(ErrorCode.INVALID_BINARY_OPERATOR,
                                     f'invalid binary operator {ast_node.operator!r}')
        elif isinstance(ast_node, Call):
            # 函数调用
            callee = self.module.get_function(ast_node.callee)
            if callee is None:
                raise CodeGeneratorError(ErrorCode.UNKNOWN_FUNCTION,
                                         f'unknown function referenced {ast_node.callee}')
            if callee.arity != len(ast_node.arguments):
                raise CodeGeneratorError(
                    ErrorCode.ARGUMENT_COUNT_MISMATCH,
                    f'{ast_node.callee} expects {callee.arity} arguments, '
                    f'but {len(ast_node.arguments)} were given'
                )
            arguments = [self.gen_code(argument) for argument in ast_node.arguments]
            return self.builder.emit_call(callee, arguments)
        raise CodeGeneratorError(ErrorCode.UNEXPECTED_AST_NODE, repr(ast_node))
