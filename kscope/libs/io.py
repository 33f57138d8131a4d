import sys

from .base import ExternFunction


def putchard(x: float) -> float:
    sys.stderr.write(chr(int(x)))
    return 0.0


def printd(x: float) -> float:
    sys.stderr.write(f'{x:f}\n')
    return 0.0


lib_table = {
    'putchard': ExternFunction(func=putchard, params_num=1),
    'printd': ExternFunction(func=printd, params_num=1),
}
