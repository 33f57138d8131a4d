import math

from .base import ExternFunction

lib_table = {
    'sin': ExternFunction(func=math.sin, params_num=1),
    'cos': ExternFunction(func=math.cos, params_num=1),
    'sqrt': ExternFunction(func=math.sqrt, params_num=1),
    'exp': ExternFunction(func=math.exp, params_num=1),
    'log': ExternFunction(func=math.log, params_num=1),
}
