"""版本冲突仲裁

把每个包名收到的多条约束归约为一个 (版本, commit)。策略为具名对象，可替换:

  HighestIndependentMatch（默认，"highest"）:
    每条约束独立解析，取其中语义化版本最高的标签，再按该标签的
    原始字符串重新解析一次得到最终 commit。
    注意这是近似算法: 选出的版本只保证被 *某一条* 约束接受，
    并不保证同时满足所有约束。

  StrictIntersection（"strict"）:
    只列一次 tag，取同时满足全部范围约束（且等于全部字面约束）的最大版本；
    交集为空时报错。
"""

from __future__ import annotations

import logging
from typing import Protocol

import semantic_version

from cppkg.core.exceptions import (
    ConfigError,
    CppkgError,
    InvalidResolvedVersionError,
    NoSatisfyingVersionError,
    ResolutionError,
)
from cppkg.core.models import DiscoveryGraph, LockEntry
from cppkg.core.protocols import ProgressSink
from cppkg.core.resolver.version import VersionResolver
from cppkg.core.resolver.versions import parse_range, parse_tag

logger = logging.getLogger(__name__)


class ConflictStrategy(Protocol):
    """冲突仲裁策略协议"""

    name: str

    def select(self, name: str, url: str, constraints: list[str]) -> LockEntry:
        ...


class HighestIndependentMatch:
    """逐条约束独立解析，取最高版本"""

    name = "highest"

    def __init__(self, resolver: VersionResolver) -> None:
        self.resolver = resolver

    def select(self, name: str, url: str, constraints: list[str]) -> LockEntry:
        labels: list[str] = []
        for constraint in constraints:
            with self.resolver.probe(url, constraint) as probed:
                labels.append(probed.label)

        winner = self._highest(name, labels)
        with self.resolver.probe(url, winner, exact=True) as final:
            commit = final.commit
        return LockEntry(url=url, version=winner, commit=commit)

    @staticmethod
    def _highest(name: str, labels: list[str]) -> str:
        # 所有约束解析到同一标签时无需比较（字面引用也可安装）
        if len(set(labels)) == 1:
            return labels[0]

        best_label = ""
        best: semantic_version.Version | None = None
        for label in labels:
            v = parse_tag(label)
            if v is None:
                raise InvalidResolvedVersionError(
                    f"{name} 解析出的版本 '{label}' 不是合法的语义化版本，无法与 {labels} 比较"
                )
            if best is None or v > best:
                best, best_label = v, label
        return best_label


class StrictIntersection:
    """取同时满足全部约束的最大版本"""

    name = "strict"

    def __init__(self, resolver: VersionResolver) -> None:
        self.resolver = resolver

    def select(self, name: str, url: str, constraints: list[str]) -> LockEntry:
        distinct = list(dict.fromkeys(constraints))
        specs = [s for c in distinct if (s := parse_range(c)) is not None]
        literals = [c for c in distinct if parse_range(c) is None]

        if len(literals) == 1 and not specs:
            # 唯一的字面引用（例如分支名）直接解析
            with self.resolver.probe(url, literals[0]) as probed:
                return LockEntry(url=url, version=probed.label, commit=probed.commit)

        best_label = ""
        best: semantic_version.Version | None = None
        for tag in self.resolver.list_versions(url):
            v = parse_tag(tag)
            if v is None or any(tag != lit for lit in literals):
                continue
            if all(spec.match(v) for spec in specs) and (best is None or v > best):
                best, best_label = v, tag

        if best is None:
            raise NoSatisfyingVersionError(
                f"{name} 没有同时满足全部约束 {distinct} 的版本: {url}"
            )
        with self.resolver.probe(url, best_label, exact=True) as final:
            return LockEntry(url=url, version=best_label, commit=final.commit)


STRATEGIES: dict[str, type[HighestIndependentMatch] | type[StrictIntersection]] = {
    HighestIndependentMatch.name: HighestIndependentMatch,
    StrictIntersection.name: StrictIntersection,
}


def make_strategy(name: str, resolver: VersionResolver) -> ConflictStrategy:
    """按名称构造冲突策略"""
    cls = STRATEGIES.get(name)
    if cls is None:
        raise ConfigError(f"未知的冲突策略: {name}，可选: {', '.join(STRATEGIES)}")
    return cls(resolver)


class ConflictResolver:
    """对发现图中的每个包名执行冲突仲裁"""

    def __init__(
        self,
        strategy: ConflictStrategy,
        *,
        progress: ProgressSink | None = None,
    ) -> None:
        self.strategy = strategy
        self._progress = progress or (lambda msg: None)

    def resolve_conflicts(self, graph: DiscoveryGraph) -> dict[str, LockEntry]:
        """任一包失败即整体失败，不返回部分结果"""
        final: dict[str, LockEntry] = {}
        for name in graph.names():
            constraints = graph.constraints[name]
            self._progress(f"  - Resolving constraints for {name}: {constraints}")
            try:
                entry = self.strategy.select(name, graph.urls[name], constraints)
            except CppkgError as e:
                raise ResolutionError(name, "resolve", e) from e
            logger.info(
                "%s -> %s (%s) [%s]", name, entry.version, entry.short_commit, self.strategy.name,
                extra={"package": name, "commit": entry.commit, "url": entry.url},
            )
            final[name] = entry
        return final
