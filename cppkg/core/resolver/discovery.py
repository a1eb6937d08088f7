"""依赖发现

从根清单出发，对包名做广度优先遍历，汇总每个包名收到的全部约束。

要点:
  - 遍历对象是包名而非 commit；包名入队时即标记 seen，
    因此每个包名最多被探测一次，环形依赖也能终止
  - 探测一个包只使用它收到的第一条约束；其他约束可能对应
    不同 commit 和不同子依赖，这些子图不会被发现
  - 任一包探测失败即中止整个发现过程，不产出部分图
  - 显式工作队列 + seen 集合，不递归
"""

from __future__ import annotations

import logging
from collections import deque

from cppkg.core.exceptions import CppkgError, ResolutionError
from cppkg.core.manifest import MANIFEST_FILE, load_manifest_from_path
from cppkg.core.models import Declaration, DiscoveryGraph, PackageManifest
from cppkg.core.protocols import ProgressSink
from cppkg.core.resolver.version import VersionResolver

logger = logging.getLogger(__name__)


class DependencyDiscoverer:
    """广度优先依赖发现"""

    def __init__(
        self,
        resolver: VersionResolver,
        *,
        manifest_file: str = MANIFEST_FILE,
        progress: ProgressSink | None = None,
    ) -> None:
        self.resolver = resolver
        self.manifest_file = manifest_file
        self._progress = progress or (lambda msg: None)

    def discover(self, root: PackageManifest) -> DiscoveryGraph:
        graph = DiscoveryGraph()
        queue: deque[str] = deque()
        seen: set[str] = set()

        try:
            root_decls = root.declarations()
        except CppkgError as e:
            raise ResolutionError(root.name, "discover", e) from e
        for name, decl in root_decls.items():
            self._record(graph, name, decl, requester=root.name)
            if name not in seen:
                seen.add(name)
                queue.append(name)

        while queue:
            name = queue.popleft()
            try:
                self._expand(graph, name, queue, seen)
            except CppkgError as e:
                raise ResolutionError(name, "discover", e) from e

        logger.info("依赖发现完成: %d 个包", len(graph.constraints))
        return graph

    def _expand(
        self, graph: DiscoveryGraph, name: str, queue: deque[str], seen: set[str],
    ) -> None:
        url = graph.urls[name]
        constraint = graph.constraints[name][0]
        with self.resolver.probe(url, constraint) as probed:
            manifest_path = probed.checkout / self.manifest_file
            if not manifest_path.exists():
                logger.debug("%s@%s 没有 %s，视为叶子节点", name, probed.label, self.manifest_file)
                return
            dep_manifest = load_manifest_from_path(manifest_path)
            self._progress(f"  - Discovered dependencies in {name} @ {probed.label}...")
            for child, decl in dep_manifest.declarations().items():
                self._record(graph, child, decl, requester=name)
                if child not in seen:
                    seen.add(child)
                    queue.append(child)

    @staticmethod
    def _record(graph: DiscoveryGraph, name: str, decl: Declaration, requester: str) -> None:
        if not graph.record(name, decl):
            logger.warning(
                "%s 对 %s 声明了不同的来源 %s，沿用首个来源 %s",
                requester, name, decl.url, graph.urls[name],
            )
