import sys

from kscope.cli import main

# 词法解析 -> 语法解析 -> 代码生成 -> 指令列表
# lexer -> parser -> codegen -> module


if __name__ == '__main__':
    sys.exit(main())
