"""Tests for gitignore-style pattern translation and layered ignore files."""

from pathlib import Path

import pytest

from craft_translations.errors import ConfigurationError
from craft_translations.ignore import IgnoreFilter, IgnoreRuleSet, gitignore_to_regex


def touch(root: Path, relative: str, content: str = "") -> Path:
    path = root / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


# =============================================================================
# Pattern translation
# =============================================================================


class TestGitignoreToRegex:
    """Tests for translating gitignore content into regexes."""

    def test_wildcard_matches_at_any_depth(self) -> None:
        """Unanchored patterns match in every directory."""
        regex = gitignore_to_regex("*.js")
        assert regex.match("app.js")
        assert regex.match("web/js/app.js")
        assert not regex.match("app.jsx")

    def test_leading_slash_anchors(self) -> None:
        """A leading slash only matches relative to the ignore file."""
        regex = gitignore_to_regex("/build")
        assert regex.match("build")
        assert regex.match("build/")
        assert not regex.match("src/build")

    def test_middle_slash_anchors(self) -> None:
        """A slash inside the pattern anchors it as well."""
        regex = gitignore_to_regex("web/dist")
        assert regex.match("web/dist/")
        assert not regex.match("other/web/dist/")

    def test_trailing_slash_matches_directories_only(self) -> None:
        """Directory patterns need the trailing slash directories carry."""
        regex = gitignore_to_regex("vendor/")
        assert regex.match("vendor/")
        assert regex.match("lib/vendor/")
        assert not regex.match("vendor")

    def test_double_star(self) -> None:
        """** spans any number of directories."""
        regex = gitignore_to_regex("templates/**/draft.twig")
        assert regex.match("templates/draft.twig")
        assert regex.match("templates/a/b/draft.twig")
        assert not regex.match("other/draft.twig")

    def test_question_mark_and_brackets(self) -> None:
        """? matches one character and [...] a character class."""
        assert gitignore_to_regex("file?.php").match("file1.php")
        assert not gitignore_to_regex("file?.php").match("file10.php")
        assert gitignore_to_regex("[ab].twig").match("a.twig")
        assert not gitignore_to_regex("[ab].twig").match("c.twig")
        assert gitignore_to_regex("[!ab].twig").match("c.twig")

    def test_comments_and_blank_lines(self) -> None:
        """Comments and blank lines never match."""
        regex = gitignore_to_regex("# just a comment\n\n   \n")
        assert not regex.match("anything")
        assert not regex.match("# just a comment")

    def test_later_negation_wins(self) -> None:
        """A negation after an exclusion re-includes the path."""
        regex = gitignore_to_regex("*.js\n!keep.js")
        assert regex.match("drop.js")
        assert not regex.match("keep.js")

    def test_inverted_matches_negated_patterns(self) -> None:
        """The inverted regex matches what ! patterns re-include."""
        regex = gitignore_to_regex("*.js\n!keep.js", inverted=True)
        assert regex.match("keep.js")
        assert not regex.match("drop.js")

    def test_rule_set(self) -> None:
        """IgnoreRuleSet bundles both regexes."""
        rules = IgnoreRuleSet.parse("*.php\n!Keep.php\n")
        assert rules.excludes("Other.php")
        assert not rules.excludes("Keep.php")
        assert rules.includes("Keep.php")
        assert not rules.includes("Other.php")


# =============================================================================
# Layered filter
# =============================================================================


class TestIgnoreFilter:
    """Tests for per-directory ignore files."""

    def test_no_ignore_files(self, tmp_path: Path) -> None:
        """Without ignore files nothing is ignored."""
        file = touch(tmp_path, "a/b.php")
        assert not IgnoreFilter(tmp_path).is_ignored(file)

    def test_deeper_file_reincludes(self, tmp_path: Path) -> None:
        """A deeper ignore file can re-include what a shallower one excluded."""
        touch(tmp_path, "a/.translateignore", "*.js\n")
        touch(tmp_path, "a/sub/.translateignore", "!keep.js\n")
        keep = touch(tmp_path, "a/sub/keep.js")
        other = touch(tmp_path, "a/sub/other.js")
        shallow = touch(tmp_path, "a/top.js")

        ignore_filter = IgnoreFilter(tmp_path)
        assert not ignore_filter.is_ignored(keep)
        assert ignore_filter.is_ignored(other)
        assert ignore_filter.is_ignored(shallow)

    def test_ignored_directory_cannot_be_reincluded(self, tmp_path: Path) -> None:
        """Nothing below an ignored directory comes back."""
        touch(tmp_path, ".translateignore", "vendor/\n")
        touch(tmp_path, "vendor/.translateignore", "!*.php\n")
        file = touch(tmp_path, "vendor/lib/Lib.php")

        ignore_filter = IgnoreFilter(tmp_path)
        assert ignore_filter.is_ignored(tmp_path / "vendor")
        assert ignore_filter.is_ignored(file)

    def test_patterns_are_relative_to_ignore_file(self, tmp_path: Path) -> None:
        """Anchored patterns apply to the directory holding the ignore file."""
        touch(tmp_path, "templates/.translateignore", "/drafts\n")
        nested = touch(tmp_path, "templates/drafts/a.twig")
        elsewhere = touch(tmp_path, "templates/blog/drafts/a.twig")

        ignore_filter = IgnoreFilter(tmp_path)
        assert ignore_filter.is_ignored(nested)
        assert not ignore_filter.is_ignored(elsewhere)

    def test_custom_ignore_filename(self, tmp_path: Path) -> None:
        """The ignore file name is configurable."""
        touch(tmp_path, ".extractignore", "*.twig\n")
        file = touch(tmp_path, "index.twig")
        assert IgnoreFilter(tmp_path, ".extractignore").is_ignored(file)
        assert not IgnoreFilter(tmp_path).is_ignored(file)

    def test_results_are_cached(self, tmp_path: Path) -> None:
        """Ignore files are read once per filter."""
        touch(tmp_path, ".translateignore", "*.js\n")
        file = touch(tmp_path, "app.js")

        ignore_filter = IgnoreFilter(tmp_path)
        assert ignore_filter.is_ignored(file)
        (tmp_path / ".translateignore").write_text("", encoding="utf-8")
        assert ignore_filter.is_ignored(file)
        assert not IgnoreFilter(tmp_path).is_ignored(file)

    def test_unreadable_ignore_file_raises(self, tmp_path: Path) -> None:
        """An ignore file that is not a regular file is a configuration error."""
        (tmp_path / ".translateignore").mkdir()
        file = touch(tmp_path, "index.twig")

        with pytest.raises(ConfigurationError, match="is not readable"):
            IgnoreFilter(tmp_path).is_ignored(file)
