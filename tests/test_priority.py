"""Tests for boost-pattern classification."""

from __future__ import annotations

from tokenpack.models import Origin
from tokenpack.priority import classify, compile_patterns


class TestCompilePatterns:
    """Tests for compile_patterns."""

    def test_skips_blank_and_duplicate(self) -> None:
        patterns = compile_patterns(["*.json", "", "  ", "*.json", "README*"])
        assert [p.pattern for p in patterns] == ["*.json", "README*"]

    def test_matches_basename(self, make_candidate) -> None:
        (pattern,) = compile_patterns(["config.json"])
        assert pattern.matches(make_candidate("app/settings/config.json"))

    def test_matches_relative_path(self, make_candidate) -> None:
        (pattern,) = compile_patterns(["src/api/*"])
        assert pattern.matches(make_candidate("src/api/routes.ts"))
        assert not pattern.matches(make_candidate("lib/api/routes.ts"))

    def test_case_sensitive(self, make_candidate) -> None:
        (pattern,) = compile_patterns(["readme.md"])
        assert not pattern.matches(make_candidate("README.md"))


class TestClassify:
    """Tests for classify."""

    def test_boosted_file_moves_first(self, make_candidate) -> None:
        names = [f"f{i}.ts" for i in range(10)]
        names[4] = "config.json"
        files = [make_candidate(n) for n in names]

        result = classify(files, compile_patterns(["config.json"]))

        assert result[0].rel_path.name == "config.json"
        assert result[0].origin is Origin.BOOSTED
        rest = [c.rel_path.name for c in result[1:]]
        assert rest == [n for n in names if n != "config.json"]
        assert all(c.origin is Origin.DIRECT for c in result[1:])

    def test_stable_within_groups(self, make_candidate) -> None:
        files = [
            make_candidate("a.ts"),
            make_candidate("b.json"),
            make_candidate("c.ts"),
            make_candidate("d.json"),
        ]
        result = classify(files, compile_patterns(["*.json"]))
        assert [c.rel_path.name for c in result] == ["b.json", "d.json", "a.ts", "c.ts"]

    def test_no_patterns_keeps_order(self, make_candidate) -> None:
        files = [make_candidate("b"), make_candidate("a")]
        assert classify(files, ()) == files

    def test_does_not_mutate_input(self, make_candidate) -> None:
        files = [make_candidate("x.json")]
        classify(files, compile_patterns(["*.json"]))
        assert files[0].origin is Origin.DIRECT

    def test_no_duplicates_or_drops(self, make_candidate) -> None:
        files = [make_candidate(f"m{i}.{'md' if i % 3 else 'py'}") for i in range(12)]
        result = classify(files, compile_patterns(["*.py", "m1*"]))
        assert sorted(c.rel_path.name for c in result) == sorted(
            c.rel_path.name for c in files
        )
        assert len(result) == len(files)
