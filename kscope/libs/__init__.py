from .base import ExternFunction
from .numeric import lib_table as numeric_lib_table
from .io import lib_table as io_lib_table

lib_table = {
    **numeric_lib_table,
    **io_lib_table,
}
