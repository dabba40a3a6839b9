from __future__ import annotations

from pathlib import Path

from committy.config import DEFAULT_EXCLUDES, build_excludes
from committy.git import build_pathspec


class TestBuildPathspec:
    def test_root_defaults_to_dot(self) -> None:
        assert build_pathspec(None, []) == ["."]
        assert build_pathspec("", []) == ["."]
        assert build_pathspec("   ", []) == ["."]

    def test_directory_is_root_scope(self) -> None:
        assert build_pathspec(Path("/work/repo/src"), []) == ["/work/repo/src"]

    def test_excludes_follow_root_in_order(self) -> None:
        spec = build_pathspec("src", ["*.lock", "dist/**"])
        assert spec == ["src", ":(exclude)*.lock", ":(exclude)dist/**"]

    def test_patterns_are_passed_through_unvalidated(self) -> None:
        assert build_pathspec(".", ["[unclosed"]) == [".", ":(exclude)[unclosed"]

    def test_same_inputs_same_tokens(self) -> None:
        first = build_pathspec("src", DEFAULT_EXCLUDES)
        second = build_pathspec("src", DEFAULT_EXCLUDES)
        assert first == second
        assert first is not second


class TestBuildExcludes:
    def test_defaults_then_extra(self) -> None:
        excludes = build_excludes(["docs/**"])
        assert excludes[: len(DEFAULT_EXCLUDES)] == DEFAULT_EXCLUDES
        assert excludes[-1] == "docs/**"

    def test_opt_out_of_defaults(self) -> None:
        assert build_excludes(["docs/**"], use_defaults=False) == ["docs/**"]
        assert build_excludes(None, use_defaults=False) == []

    def test_defaults_cover_lockfiles_and_build_output(self) -> None:
        for pattern in ("package-lock.json", "yarn.lock", "pnpm-lock.yaml", "*.lock", "node_modules/**", "coverage/**", "*.map", "*.snap", ".env*"):
            assert pattern in DEFAULT_EXCLUDES

    def test_defaults_not_mutated(self) -> None:
        before = list(DEFAULT_EXCLUDES)
        build_excludes(["extra"]).append("more")
        assert DEFAULT_EXCLUDES == before
