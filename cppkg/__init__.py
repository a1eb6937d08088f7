"""cppkg - 基于 Git 仓库的 C/C++ 依赖包管理器"""

__version__ = "0.3.0"
