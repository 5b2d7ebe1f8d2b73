"""Tests for the PHP extractor."""

import pytest

from craft_translations.errors import ExtractionParseError
from craft_translations.extractors import PhpExtractor
from craft_translations.extractors.php import decode_double_quoted, decode_single_quoted


def extract(source: str, category: str | None = None, default_category: str = "site"):
    return PhpExtractor(default_category).extract(source, "Module.php", category)


class TestMarkerCalls:
    """Tests for the recognized marker calls."""

    def test_craft_t(self) -> None:
        """Craft::t(category, message) yields the message."""
        catalog = extract("<?php\necho Craft::t('app', 'Save');\n")
        assert catalog.originals() == ["Save"]
        assert list(catalog.find("Save").references) == [("Module.php", 2)]

    def test_all_markers(self) -> None:
        """Craft::translate and Translation::prep are markers too."""
        catalog = extract(
            "<?php\n"
            "Craft::t('site', 'One');\n"
            "Craft::translate('site', 'Two');\n"
            "Translation::prep('site', 'Three');\n"
            "\\Craft::t('site', 'Four');\n"
        )
        assert catalog.originals() == ["One", "Two", "Three", "Four"]

    def test_other_calls_are_ignored(self) -> None:
        """Look-alike calls are not call-sites."""
        catalog = extract(
            "<?php\n"
            "Yii::t('site', 'A');\n"
            "Craft::other('site', 'B');\n"
            "$craft->t('site', 'C');\n"
            "t('site', 'D');\n"
        )
        assert len(catalog) == 0

    def test_concatenated_literals(self) -> None:
        """Concatenations of literals resolve statically."""
        catalog = extract("<?php\nCraft::t('app', 'foo' . 'bar');\n")
        assert catalog.originals() == ["foobar"]

    def test_parenthesized_concatenation(self) -> None:
        """Parentheses around concatenations are allowed."""
        catalog = extract("<?php\nCraft::t('app', ('a' . ('b' . \"c\")));\n")
        assert catalog.originals() == ["abc"]

    def test_non_literal_message_is_skipped(self) -> None:
        """Variables, calls and interpolation make the call-site unresolvable."""
        catalog = extract(
            "<?php\n"
            "Craft::t('app', $message);\n"
            "Craft::t('app', 'a' . $b);\n"
            "Craft::t('app', \"Hi $name\");\n"
            "Craft::t('app', strtoupper('x'));\n"
        )
        assert len(catalog) == 0

    def test_single_argument_is_message(self) -> None:
        """A lone argument is the message in the default category."""
        catalog = extract("<?php\nTranslation::prep('Lonely');\n", category="site")
        assert catalog.originals() == ["Lonely"]

    def test_named_arguments(self) -> None:
        """category: and message: named arguments are honored."""
        catalog = extract(
            "<?php\nCraft::t(message: 'Named', category: 'app');\n", category="app"
        )
        assert catalog.originals() == ["Named"]

    def test_non_literal_category_uses_default(self) -> None:
        """An unresolvable category falls back to the default category."""
        catalog = extract("<?php\nCraft::t($category, 'Fallback');\n", category="site")
        assert catalog.originals() == ["Fallback"]

    def test_empty_message_is_not_recorded(self) -> None:
        """Empty strings are never messages."""
        assert len(extract("<?php\nCraft::t('app', '');\n")) == 0

    def test_line_of_multiline_call(self) -> None:
        """The reference line is where the call starts."""
        catalog = extract("<?php\n\n$x = Craft::t(\n    'app',\n    'Spread'\n);\n")
        assert list(catalog.find("Spread").references) == [("Module.php", 3)]

    def test_duplicates_share_one_entry(self) -> None:
        """The same message twice gives one entry with two references."""
        catalog = extract("<?php\nCraft::t('app', 'Twice');\nCraft::t('app', 'Twice');\n")
        assert len(catalog) == 1
        assert list(catalog.find("Twice").references) == [("Module.php", 2), ("Module.php", 3)]


class TestCategoryFilter:
    """Tests for the category filter."""

    def test_filter_keeps_matching_category(self) -> None:
        """Only messages of the filtered category are kept."""
        source = "<?php\nCraft::t('app', 'App');\nCraft::t('site', 'Site');\n"
        assert extract(source, category="app").originals() == ["App"]
        assert extract(source, category="site").originals() == ["Site"]
        assert extract(source).originals() == ["App", "Site"]

    def test_catalog_domain_is_filter(self) -> None:
        """The returned catalog is tagged with the category filter."""
        assert extract("<?php\n", category="app").domain == "app"


class TestParsing:
    """Tests for parse failures and literal decoding."""

    def test_syntax_error_raises(self) -> None:
        """Unparseable PHP is a parse error naming the file."""
        with pytest.raises(ExtractionParseError, match="Module.php"):
            extract("<?php\nCraft::t('app', \n")

    def test_extraction_is_idempotent(self) -> None:
        """Extracting the same content twice gives equal catalogs."""
        source = "<?php\nCraft::t('app', 'A');\nCraft::t('site', 'B');\n"
        first, second = extract(source), extract(source)
        assert first.originals() == second.originals()
        assert [list(t.references) for t in first] == [list(t.references) for t in second]

    def test_decode_single_quoted(self) -> None:
        """Single-quoted strings only unescape quotes and backslashes."""
        assert decode_single_quoted(r"'It\'s a \\ and \n'") == "It's a \\ and \\n"

    def test_decode_double_quoted(self) -> None:
        """Double-quoted strings decode PHP escape sequences."""
        assert decode_double_quoted(r'"Tab\there \"q\" \x41\101 \u{1F600} \$"') == 'Tab\there "q" AA \U0001F600 $'

    def test_escapes_in_messages(self) -> None:
        """Messages are stored decoded."""
        catalog = extract("<?php\nCraft::t('app', 'It\\'s');\nCraft::t('app', \"Line\\nBreak\");\n")
        assert catalog.originals() == ["It's", "Line\nBreak"]

    def test_invalid_code_point_escape_raises(self) -> None:
        """Escapes naming code points past U+10FFFF or surrogates are parse errors."""
        with pytest.raises(ExtractionParseError, match="invalid code point escape U\\+110000"):
            extract('<?php\nCraft::t(\'app\', "\\u{110000}");\n')
        with pytest.raises(ExtractionParseError, match="U\\+D800"):
            extract('<?php\nCraft::t(\'app\', "\\u{D800}");\n')

    def test_deep_concatenation(self) -> None:
        """Long left-nested concatenation chains resolve without recursing per operand."""
        source = "<?php\nCraft::t('app', " + " . ".join(["'a'"] * 1500) + ");\n"
        assert extract(source).originals() == ["a" * 1500]


class TestHeredoc:
    """Tests for heredoc and nowdoc literals."""

    def test_heredoc_without_interpolation(self) -> None:
        """A plain heredoc is a literal with the closing indentation removed."""
        catalog = extract("<?php\nCraft::t('app', <<<EOT\n    Hello\n      World\\tTab\n    EOT);\n")
        assert catalog.originals() == ["Hello\n  World\tTab"]

    def test_quoted_heredoc_opener(self) -> None:
        """<<<"EOT" is the same as <<<EOT."""
        catalog = extract('<?php\nCraft::t(\'app\', <<<"EOT"\nQuoted\nEOT);\n')
        assert catalog.originals() == ["Quoted"]

    def test_interpolated_heredoc_is_skipped(self) -> None:
        """Variables inside a heredoc make the message unresolvable."""
        catalog = extract("<?php\nCraft::t('app', <<<EOT\nHi $name\nEOT);\n")
        assert len(catalog) == 0

    def test_nowdoc_is_verbatim(self) -> None:
        """Nowdocs decode nothing and never interpolate."""
        catalog = extract("<?php\nCraft::t('app', <<<'EOT'\nRaw \\n $x\nEOT);\n")
        assert catalog.originals() == ["Raw \\n $x"]
