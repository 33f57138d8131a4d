from enum import Enum
from typing import Dict, Iterator, List, Optional


class Type(Enum):
    DOUBLE = 'double'
    BOOL = 'i1'

    def __repr__(self):
        return self.value


class Value:
    def __init__(self, value_type: Type, name: str = ''):
        self.type: Type = value_type
        self.name: str = name

    def ref(self) -> str:
        return f'%{self.name}'

    def typed_ref(self) -> str:
        return f'{self.type.value} {self.ref()}'


class Constant(Value):
    def __init__(self, value: float):
        super().__init__(Type.DOUBLE)
        self.value: float = float(value)

    def ref(self) -> str:
        return f'{self.value:e}'

    def __repr__(self):
        return f'constant({self.value!r})'


class Argument(Value):
    def __init__(self, function: 'Function', index: int, name: str):
        super().__init__(Type.DOUBLE, name)
        self.function: 'Function' = function
        self.index: int = index

    def __repr__(self):
        return f'argument({self.index}, {self.name!r})'


class OPCode:
    def __init__(self, name: str, operand_types: Optional[List[Type]], result_type: Optional[Type],
                 default_name: str = '', is_terminator: bool = False):
        self.name: str = name
        # None 表示操作数个数由被调用函数决定
        self.operand_types: Optional[List[Type]] = operand_types
        self.result_type: Optional[Type] = result_type
        self.default_name: str = default_name
        self.is_terminator: bool = is_terminator

    def __repr__(self):
        return self.name


class OPCodes(Enum):
    FADD = OPCode('fadd', [Type.DOUBLE, Type.DOUBLE], Type.DOUBLE, 'addtmp')  # lhs + rhs
    FSUB = OPCode('fsub', [Type.DOUBLE, Type.DOUBLE], Type.DOUBLE, 'subtmp')  # lhs - rhs
    FMUL = OPCode('fmul', [Type.DOUBLE, Type.DOUBLE], Type.DOUBLE, 'multmp')  # lhs * rhs
    FCMP_ULT = OPCode('fcmp ult', [Type.DOUBLE, Type.DOUBLE], Type.BOOL, 'cmptmp')  # lhs < rhs，结果为 i1
    UITOFP = OPCode('uitofp', [Type.BOOL], Type.DOUBLE, 'booltmp')  # i1 -> double
    CALL = OPCode('call', None, Type.DOUBLE, 'calltmp')  # callee(args...)
    RET = OPCode('ret', [Type.DOUBLE], None, is_terminator=True)

    def __repr__(self):
        return repr(self.value)


binary_operator_to_opcodes = {
    '+': OPCodes.FADD,
    '-': OPCodes.FSUB,
    '*': OPCodes.FMUL,
}


class Instruction(Value):
    def __init__(self, opcode: OPCodes, operands: List[Value], name: str = '',
                 callee: 'Function' = None):
        result_type = opcode.value.result_type
        super().__init__(result_type if result_type is not None else Type.DOUBLE, name)
        self.opcode: OPCodes = opcode
        self.operands: List[Value] = operands
        self.callee: Optional['Function'] = callee
        self.block: Optional['BasicBlock'] = None

    @property
    def has_result(self) -> bool:
        return self.opcode.value.result_type is not None

    def __repr__(self):
        if self.opcode == OPCodes.RET:
            return f'ret {self.operands[0].typed_ref()}'
        elif self.opcode == OPCodes.CALL:
            arguments = ', '.join(map(lambda x: x.typed_ref(), self.operands))
            return f'{self.ref()} = call double @{self.callee.name}({arguments})'
        elif self.opcode == OPCodes.UITOFP:
            return f'{self.ref()} = uitofp {self.operands[0].typed_ref()} to double'
        else:
            lhs, rhs = self.operands
            return f'{self.ref()} = {self.opcode.value.name} double {lhs.ref()}, {rhs.ref()}'


class BasicBlock:
    def __init__(self, name: str, function: 'Function'):
        self.name: str = name
        self.function: 'Function' = function
        self.instruction_list: List[Instruction] = list()

    @property
    def terminator(self) -> Optional[Instruction]:
        if self.instruction_list and self.instruction_list[-1].opcode.value.is_terminator:
            return self.instruction_list[-1]
        return None

    def __repr__(self):
        return f'block({self.name!r})'


class Function:
    def __init__(self, name: str, param_names: List[str], module: 'Module' = None):
        self.name: str = name
        self.module: Optional['Module'] = module
        self.block_list: List[BasicBlock] = list()
        self.used_names: Dict[str, int] = dict()
        self.params: List[Argument] = [Argument(self, index, '') for index in range(len(param_names))]
        self.set_param_names(param_names)

    @property
    def arity(self) -> int:
        return len(self.params)

    @property
    def is_declaration(self) -> bool:
        return len(self.block_list) == 0

    def set_param_names(self, param_names: List[str]):
        assert len(param_names) == len(self.params)
        self.used_names.clear()
        for param, name in zip(self.params, param_names):
            param.name = self.unique_name(name)

    def unique_name(self, name: str) -> str:
        # 同名值依次追加数字后缀: addtmp, addtmp1, addtmp2 ...
        if name not in self.used_names:
            self.used_names[name] = 0
            return name
        while True:
            self.used_names[name] += 1
            candidate = f'{name}{self.used_names[name]}'
            if candidate not in self.used_names:
                self.used_names[candidate] = 0
                return candidate

    def append_block(self, name: str) -> BasicBlock:
        block = BasicBlock(name, self)
        self.block_list.append(block)
        return block

    def clear_body(self):
        self.block_list.clear()
        self.set_param_names([param.name for param in self.params])

    def instructions(self) -> Iterator[Instruction]:
        for block in self.block_list:
            yield from block.instruction_list

    def __repr__(self):
        return f'function({self.name!r})'


class Module:
    def __init__(self, name: str = 'kscope'):
        self.name: str = name
        self.function_table: Dict[str, Function] = dict()

    def get_function(self, name: str) -> Optional[Function]:
        return self.function_table.get(name)

    def declare_function(self, name: str, param_names: List[str]) -> Function:
        assert name not in self.function_table, f'{name} already declared'
        function = Function(name, param_names, module=self)
        self.function_table[name] = function
        return function

    def erase_function(self, function: Function):
        if self.function_table.get(function.name) is function:
            del self.function_table[function.name]
        function.module = None

    def __contains__(self, name: str) -> bool:
        return name in self.function_table

    def __iter__(self) -> Iterator[Function]:
        return iter(list(self.function_table.values()))

    def __len__(self) -> int:
        return len(self.function_table)

    def __repr__(self):
        return f'module({self.name!r})'


class IRBuilder:
    """Appends instructions at the end of the current block."""

    def __init__(self):
        self.block: Optional[BasicBlock] = None

    @property
    def function(self) -> Optional[Function]:
        return self.block.function if self.block is not None else None

    def begin_function(self, function: Function, block_name: str = 'entry') -> BasicBlock:
        self.block = function.append_block(block_name)
        return self.block

    def _append(self, opcode: OPCodes, operands: List[Value], callee: Function = None) -> Instruction:
        assert self.block is not None, 'no insertion block'
        name = ''
        if opcode.value.result_type is not None:
            name = self.function.unique_name(opcode.value.default_name)
        instruction = Instruction(opcode, operands, name, callee=callee)
        instruction.block = self.block
        self.block.instruction_list.append(instruction)
        return instruction

    @staticmethod
    def emit_constant(value: float) -> Constant:
        return Constant(value)

    def emit_binary_arith(self, operator: str, lhs: Value, rhs: Value) -> Instruction:
        return self._append(binary_operator_to_opcodes[operator], [lhs, rhs])

    def emit_compare_less(self, lhs: Value, rhs: Value) -> Instruction:
        return self._append(OPCodes.FCMP_ULT, [lhs, rhs])

    def emit_widen_bool_to_numeric(self, value: Value) -> Instruction:
        return self._append(OPCodes.UITOFP, [value])

    def emit_call(self, callee: Function, arguments: List[Value]) -> Instruction:
        return self._append(OPCodes.CALL, list(arguments), callee=callee)

    def emit_return(self, value: Value) -> Instruction:
        instruction = self._append(OPCodes.RET, [value])
        self.block = None
        return instruction


def find_verification_errors(function: Function) -> List[str]:
    errors = list()
    if function.is_declaration:
        return errors
    defined = set(map(id, function.params))
    for block in function.block_list:
        if block.terminator is None:
            errors.append(f'block {block.name} in @{function.name} has no terminator')
        for index, instruction in enumerate(block.instruction_list):
            if instruction.opcode.value.is_terminator and index != len(block.instruction_list) - 1:
                errors.append(f'terminator in the middle of block {block.name} in @{function.name}')
            if instruction.opcode == OPCodes.CALL:
                callee = instruction.callee
                if callee is None or callee.module is not function.module \
                        or function.module.get_function(callee.name) is not callee:
                    errors.append(f'call to function outside the module in @{function.name}')
                elif callee.arity != len(instruction.operands):
                    errors.append(f'call to @{callee.name} with {len(instruction.operands)} arguments, '
                                  f'expected {callee.arity}')
                expected_types = [Type.DOUBLE] * len(instruction.operands)
            else:
                expected_types = instruction.opcode.value.operand_types
                if len(expected_types) != len(instruction.operands):
                    errors.append(f'{instruction.opcode!r} expects {len(expected_types)} operands')
            for operand, expected_type in zip(instruction.operands, expected_types):
                if operand.type != expected_type:
                    errors.append(f'operand {operand.ref()} of {instruction.opcode!r} has type '
                                  f'{operand.type.value}, expected {expected_type.value}')
                if isinstance(operand, Constant):
                    continue
                if id(operand) not in defined:
                    errors.append(f'operand {operand.ref()} of {instruction.opcode!r} '
                                  f'is not defined before use in @{function.name}')
            defined.add(id(instruction))
    return errors


def verify_function(function: Function) -> bool:
    return len(find_verification_errors(function)) == 0
