"""语义化版本工具单元测试"""

from __future__ import annotations

import pytest

from cppkg.core.resolver.versions import highest_matching, parse_range, parse_tag, sorted_versions

TAGS = ["1.0.0", "1.2.0", "1.2.3", "2.0.0"]


class TestParseTag:
    @pytest.mark.parametrize("tag,expected", [
        ("1.2.3", "1.2.3"),
        ("v1.2.3", "1.2.3"),
        ("V2.0.0", "2.0.0"),
        ("1.2", "1.2.0"),
        ("3", "3.0.0"),
        ("1.0.0-rc.1", "1.0.0-rc.1"),
    ])
    def test_valid(self, tag: str, expected: str) -> None:
        v = parse_tag(tag)
        assert v is not None
        assert str(v) == expected

    @pytest.mark.parametrize("tag", ["nightly", "release-2024", "", "v"])
    def test_invalid(self, tag: str) -> None:
        assert parse_tag(tag) is None


class TestParseRange:
    @pytest.mark.parametrize("constraint", ["^1.0.0", "~1.2", "1.x", ">=1.0.0 <2.0.0", "*", "^v1.0.0", "1.2.3"])
    def test_ranges(self, constraint: str) -> None:
        assert parse_range(constraint) is not None

    @pytest.mark.parametrize("constraint", ["main", "develop", "feature/x", ""])
    def test_literal_refs(self, constraint: str) -> None:
        assert parse_range(constraint) is None


class TestHighestMatching:
    def test_caret_selects_highest_minor_patch(self) -> None:
        """^1.0.0 在 {1.0.0, 1.2.0, 1.2.3, 2.0.0} 中总是选 1.2.3"""
        spec = parse_range("^1.0.0")
        assert spec is not None
        assert highest_matching(TAGS, spec) == "1.2.3"
        assert highest_matching(list(reversed(TAGS)), spec) == "1.2.3"

    def test_returns_original_tag_string(self) -> None:
        spec = parse_range("^1.0.0")
        assert spec is not None
        assert highest_matching(["v1.0.0", "v1.4.0", "v2.0.0"], spec) == "v1.4.0"

    def test_ignores_non_semver_tags(self) -> None:
        spec = parse_range("*")
        assert spec is not None
        assert highest_matching(["nightly", "0.9.0", "latest"], spec) == "0.9.0"

    def test_prerelease_ordered_before_release(self) -> None:
        spec = parse_range(">=1.0.0-rc.1")
        assert spec is not None
        assert highest_matching(["1.0.0-rc.1", "1.0.0"], spec) == "1.0.0"

    def test_equal_versions_first_seen_wins(self) -> None:
        """两个 tag 归一化后版本相同，保留先出现的"""
        spec = parse_range("1.2.0")
        assert spec is not None
        assert highest_matching(["v1.2.0", "1.2.0"], spec) == "v1.2.0"
        assert highest_matching(["1.2.0", "v1.2.0"], spec) == "1.2.0"

    def test_no_match(self) -> None:
        spec = parse_range("^3.0.0")
        assert spec is not None
        assert highest_matching(TAGS, spec) is None


def test_sorted_versions() -> None:
    assert sorted_versions(["2.0.0", "nightly", "v1.10.0", "1.9.0"]) == ["1.9.0", "v1.10.0", "2.0.0"]
