"""核心数据模型

清单、锁文件、依赖声明、发现图、缓存条目等数据类集中定义，
解析器 / 安装器 / 服务层统一从此处导入。
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from cppkg.core.exceptions import InvalidDeclarationError, ManifestError

DECLARATION_SEPARATOR = "#"


# =========================================================================
# 依赖声明
# =========================================================================


@dataclass(frozen=True)
class Declaration:
    """依赖声明 url#constraint

    constraint 可以是语义化版本范围（^1.0.0、~2.1、>=1.2 <2），
    也可以是字面引用（tag / 分支 / commit）。
    """

    url: str
    constraint: str

    @classmethod
    def parse(cls, text: str) -> Declaration:
        parts = text.split(DECLARATION_SEPARATOR)
        if len(parts) != 2 or not parts[0].strip() or not parts[1].strip():
            raise InvalidDeclarationError(
                f"无效的依赖声明 '{text}'，格式应为 'url#version'，"
                "例如 'https://github.com/user/repo.git#^1.0.0'"
            )
        return cls(url=parts[0].strip(), constraint=parts[1].strip())

    @property
    def package_name(self) -> str:
        """从 URL 推导包名：最后一段路径去掉 .git 后缀"""
        tail = self.url.rstrip("/").replace(":", "/").split("/")[-1]
        name = tail[:-4] if tail.endswith(".git") else tail
        if not name:
            raise InvalidDeclarationError(f"无法从 URL 推导包名: {self.url}")
        return name

    def __str__(self) -> str:
        return f"{self.url}{DECLARATION_SEPARATOR}{self.constraint}"


# =========================================================================
# 清单 cppkg.json
# =========================================================================


@dataclass
class PackageManifest:
    """项目或依赖包的清单"""

    name: str
    version: str = "0.1.0"
    dependencies: dict[str, str] = field(default_factory=dict)  # name -> "url#constraint"
    scripts: dict[str, str] = field(default_factory=dict)       # hook -> shell 命令

    @classmethod
    def from_dict(cls, data: Any, source: str = "") -> PackageManifest:
        if not isinstance(data, dict):
            raise ManifestError(f"清单内容必须是对象: {source}")
        deps = data.get("dependencies") or {}
        scripts = data.get("scripts") or {}
        if not isinstance(deps, dict) or not all(
            isinstance(k, str) and isinstance(v, str) for k, v in deps.items()
        ):
            raise ManifestError(f"dependencies 必须是 name -> 'url#constraint' 映射: {source}")
        if not isinstance(scripts, dict):
            raise ManifestError(f"scripts 必须是 hook -> 命令 映射: {source}")
        return cls(
            name=str(data.get("name", "")),
            version=str(data.get("version", "")),
            dependencies=dict(deps),
            scripts={str(k): str(v) for k, v in scripts.items()},
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "name": self.name,
            "version": self.version,
            "dependencies": dict(self.dependencies),
        }
        if self.scripts:
            data["scripts"] = dict(self.scripts)
        return data

    def declarations(self) -> dict[str, Declaration]:
        """解析全部依赖声明，按包名排序"""
        return {name: Declaration.parse(self.dependencies[name]) for name in sorted(self.dependencies)}


# =========================================================================
# 锁文件 cppkg.lock
# =========================================================================


@dataclass(frozen=True)
class LockEntry:
    """单个依赖的锁定信息

    commit 始终是完整 SHA；version 为 tag 名或调用方给出的字面引用。
    """

    url: str
    version: str
    commit: str

    @property
    def short_commit(self) -> str:
        return self.commit[:12]

    def to_dict(self) -> dict[str, str]:
        return {"url": self.url, "version": self.version, "commit": self.commit}


@dataclass
class Lockfile:
    """锁文件：包名 -> LockEntry，每次安装整体重写"""

    dependencies: dict[str, LockEntry] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Any, source: str = "") -> Lockfile:
        if not isinstance(data, dict):
            raise ManifestError(f"锁文件内容必须是对象: {source}")
        deps = data.get("dependencies") or {}
        if not isinstance(deps, dict):
            raise ManifestError(f"锁文件 dependencies 必须是 name -> 条目 映射: {source}")
        entries: dict[str, LockEntry] = {}
        for name, info in deps.items():
            try:
                entries[name] = LockEntry(
                    url=info["url"], version=info["version"], commit=info["commit"],
                )
            except (KeyError, TypeError) as e:
                raise ManifestError(f"锁文件条目 '{name}' 无效: {e}") from e
        return cls(dependencies=entries)

    def to_dict(self) -> dict[str, Any]:
        return {
            "dependencies": {
                name: self.dependencies[name].to_dict() for name in sorted(self.dependencies)
            },
        }


# =========================================================================
# 解析过程中的临时数据
# =========================================================================


@dataclass(frozen=True)
class ResolvedVersion:
    """单次版本解析结果；checkout 为临时检出目录"""

    label: str
    commit: str
    checkout: Path


@dataclass
class DiscoveryGraph:
    """一次安装内的依赖发现结果

    urls: 包名 -> 来源 URL（先写者胜）
    constraints: 包名 -> 约束列表，每条请求边一项，保留重复
    """

    urls: dict[str, str] = field(default_factory=dict)
    constraints: dict[str, list[str]] = field(default_factory=dict)

    def record(self, name: str, decl: Declaration) -> bool:
        """记录一条请求边；URL 与已记录不同返回 False（仍保留首个 URL）"""
        first = self.urls.setdefault(name, decl.url)
        self.constraints.setdefault(name, []).append(decl.constraint)
        return first == decl.url

    def names(self) -> list[str]:
        return sorted(self.constraints)


# =========================================================================
# 缓存条目
# =========================================================================


@dataclass(frozen=True)
class CacheEntry:
    """缓存目录 <name>-<commit 前 12 位>"""

    name: str
    short_commit: str
    path: Path

    @property
    def key(self) -> str:
        return f"{self.name}-{self.short_commit}"
