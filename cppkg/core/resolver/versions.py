"""语义化版本工具

tag 与版本范围的解析、匹配、取最大值，基于 semantic_version:
  - 版本范围采用 npm 语法（NpmSpec）：^1.2.0、~1.2、1.x、>=1.0.0 <2.0.0、a || b
  - tag 允许带 v 前缀（v1.2.3），也接受 1 / 1.2 这样的短写法
  - 取最大值时只有严格更大才替换，同版本的多个 tag 保留先出现的
"""

from __future__ import annotations

import re
from typing import Iterable

import semantic_version

_V_PREFIX_RE = re.compile(r"(?<![0-9A-Za-z])[vV](?=\d)")
_SHORT_VERSION_RE = re.compile(r"^\d+(\.\d+)?$")


def parse_tag(tag: str) -> semantic_version.Version | None:
    """把 tag 解析为语义化版本，不是版本号时返回 None"""
    text = tag.strip()
    if text[:1] in ("v", "V"):
        text = text[1:]
    try:
        return semantic_version.Version(text)
    except ValueError:
        pass
    if _SHORT_VERSION_RE.match(text):
        return semantic_version.Version.coerce(text)
    return None


def parse_range(constraint: str) -> semantic_version.NpmSpec | None:
    """把约束解析为版本范围，解析失败（字面引用）返回 None"""
    text = _V_PREFIX_RE.sub("", constraint.strip())
    if not text:
        return None
    try:
        return semantic_version.NpmSpec(text)
    except ValueError:
        return None


def highest_matching(
    tags: Iterable[str], spec: semantic_version.NpmSpec,
) -> str | None:
    """返回满足范围的最大 tag（原始字符串），没有则返回 None"""
    best_tag: str | None = None
    best: semantic_version.Version | None = None
    for tag in tags:
        v = parse_tag(tag)
        if v is None or not spec.match(v):
            continue
        if best is None or v > best:
            best, best_tag = v, tag
    return best_tag


def sorted_versions(tags: Iterable[str]) -> list[str]:
    """过滤出语义化版本 tag 并按版本升序排列"""
    parsed = [(v, t) for t in tags if (v := parse_tag(t)) is not None]
    return [t for _, t in sorted(parsed, key=lambda p: p[0])]
