"""依赖解析引擎

拆分说明:
- versions.py: 语义化版本 / 范围工具
- version.py: 单个 (url, constraint) 的版本解析
- discovery.py: 广度优先依赖发现
- conflicts.py: 多约束冲突仲裁（可替换策略）
"""

from cppkg.core.resolver.conflicts import (
    ConflictResolver,
    HighestIndependentMatch,
    StrictIntersection,
    make_strategy,
)
from cppkg.core.resolver.discovery import DependencyDiscoverer
from cppkg.core.resolver.version import VersionResolver

__all__ = [
    "ConflictResolver",
    "DependencyDiscoverer",
    "HighestIndependentMatch",
    "StrictIntersection",
    "VersionResolver",
    "make_strategy",
]
