from typing import Dict, List

from .exceptions import VMError, ErrorCode
from .ir import Argument, Constant, Function, Module, OPCodes, Value
from .libs import ExternFunction, lib_table

BINARY_OPCODES = {
    OPCodes.FADD: lambda x, y: x + y,
    OPCodes.FSUB: lambda x, y: x - y,
    OPCodes.FMUL: lambda x, y: x * y,
}


class StackFrame:
    def __init__(self, function: Function, arguments: List[float]):
        self.function: Function = function
        self.values: Dict[int, float] = {
            id(param): argument
            for param, argument in zip(function.params, arguments)
        }

    def load(self, value: Value) -> float:
        if isinstance(value, Constant):
            return value.value
        try:
            return self.values[id(value)]
        except KeyError:
            kind = 'argument' if isinstance(value, Argument) else 'value'
            raise VMError(ErrorCode.CALL_ERROR,
                          f'{kind} {value.ref()} is not available in @{self.function.name}') from None


class VM:
    """Evaluates committed functions of a module.

    Declarations without a body are resolved by name against ``extern_table``,
    which defaults to the host functions in :mod:`kscope.libs`.
    """

    def __init__(self, module: Module, extern_table: Dict[str, ExternFunction] = None):
        self.module: Module = module
        if extern_table is None:
            extern_table = lib_table
        self.extern_table: Dict[str, ExternFunction] = extern_table
        self.call_stack: List[StackFrame] = list()

    def call(self, name: str, *arguments: float) -> float:
        function = self.module.get_function(name)
        if function is None:
            raise VMError(ErrorCode.CALL_ERROR, f'unknown function {name}')
        return self.call_function(function, [float(argument) for argument in arguments])

    def evaluate(self, function: Function) -> float:
        try:
            return self.call_function(function, [])
        except RecursionError:
            self.call_stack.clear()
            raise VMError(ErrorCode.CALL_ERROR, f'maximum recursion depth exceeded in @{function.name}') from None

    def call_function(self, function: Function, arguments: List[float]) -> float:
        if function.arity != len(arguments):
            raise VMError(ErrorCode.CALL_ERROR,
                          f'{function.name} expects {function.arity} arguments, but {len(arguments)} were given')
        if function.is_declaration:
            return self.call_extern(function, arguments)

        frame = StackFrame(function, arguments)
        self.call_stack.append(frame)
        try:
            return self.run_frame(frame)
        finally:
            self.call_stack.pop()

    def call_extern(self, function: Function, arguments: List[float]) -> float:
        extern_function = self.extern_table.get(function.name)
        if extern_function is None:
            raise VMError(ErrorCode.EXTERN_FUNCTION_ERROR, f'no implementation for extern {function.name}')
        if extern_function.params_num != len(arguments):
            raise VMError(ErrorCode.EXTERN_FUNCTION_ERROR,
                          f'extern {function.name} takes {extern_function.params_num} arguments, '
                          f'but was declared with {len(arguments)}')
        try:
            return extern_function(*arguments)
        except (ArithmeticError, ValueError) as e:
            raise VMError(ErrorCode.EXTERN_FUNCTION_ERROR, f'{function.name}: {e}') from None

    def run_frame(self, frame: StackFrame) -> float:
        for instruction in frame.function.instructions():
            opcode = instruction.opcode
            if opcode in BINARY_OPCODES:
                lhs, rhs = instruction.operands
                result = BINARY_OPCODES[opcode](frame.load(lhs), frame.load(rhs))
            elif opcode == OPCodes.FCMP_ULT:
                lhs, rhs = instruction.operands
                x, y = frame.load(lhs), frame.load(rhs)
                # unordered or less than: NaN 参与比较时结果为真
                result = 1.0 if (x != x or y != y or x < y) else 0.0
            elif opcode == OPCodes.UITOFP:
                result = frame.load(instruction.operands[0])
            elif opcode == OPCodes.CALL:
                arguments = [frame.load(operand) for operand in instruction.operands]
                result = self.call_function(instruction.callee, arguments)
            elif opcode == OPCodes.RET:
                return frame.load(instruction.operands[0])
            else:
                raise VMError(ErrorCode.CALL_ERROR, f'unsupported instruction {instruction!r}')
            frame.values[id(instruction)] = result
        raise VMError(ErrorCode.CALL_ERROR, f'@{frame.function.name} ended without ret')
