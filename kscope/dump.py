from .ir import Function, Module


def dump_signature(function: Function) -> str:
    params = ', '.join(map(lambda x: x.typed_ref(), function.params))
    return f'double @{function.name}({params})'


def dump_function(function: Function) -> str:
    if function.is_declaration:
        return f'declare {dump_signature(function)}\n'
    lines = [f'define {dump_signature(function)} {{']
    for index, block in enumerate(function.block_list):
        if index > 0:
            lines.append('')
        lines.append(f'{block.name}:')
        for instruction in block.instruction_list:
            lines.append(f'  {instruction!r}')
    lines.append('}')
    return '\n'.join(lines) + '\n'


def dump_module(module: Module) -> str:
    parts = [f"; ModuleID = '{module.name}'\nsource_filename = \"{module.name}\"\n"]
    for function in module:
        parts.append(dump_function(function))
    return '\n'.join(parts)
