"""Twig template extractor.

Two idioms are recognized:

- ``{% do view.registerTranslations('app', ['Save', 'Cancel']) %}`` - found by
  tokenizing the Twig tags that mention the marker with the Jinja2 lexer,
  whose token grammar Twig shares.
- ``{{ 'Hello'|t }}``, ``{{ "Hello"|translate('app') }}`` and
  ``Craft.t('app', 'Hello')`` - found with regular expressions over the raw
  template text.
"""

from __future__ import annotations

import re

import structlog
from jinja2 import Environment, TemplateSyntaxError
from jinja2.lexer import Token

from craft_translations.catalog.models import TranslationCatalog
from craft_translations.errors import ExtractionParseError
from craft_translations.extractors.base import ExtractionContext, Extractor

log = structlog.get_logger()

REGISTER_MARKER = "registerTranslations"

# A quoted string (either quote style, escaped quotes allowed) followed by the
# |t or |translate filter with an optional quoted category argument.
FILTER_RE = re.compile(
    r"""(?P<q1>(?<!\\)['"])(?P<message>(?:.(?!(?<!\\)(?P=q1)))*.?)(?P=q1)"""
    r"""\s*\|\s*(?:translate|t)\b"""
    r"""(?:\s*\(\s*(?P<q2>(?<!\\)['"])(?P<category>(?:.(?!(?<!\\)(?P=q2)))*.?)(?P=q2))?"""
)

# Craft.t('category', 'message') written inside template text
CRAFT_T_RE = re.compile(
    r"""Craft\.t\(\s*(?P<q1>(?<!\\)['"])(?P<category>(?:.(?!(?<!\\)(?P=q1)))*.?)(?P=q1)"""
    r"""\s*,\s*(?P<q2>(?<!\\)['"])(?P<message>(?:.(?!(?<!\\)(?P=q2)))*.?)(?P=q2)"""
)

# Twig tags: {% ... %} and {{ ... }}
TAG_RE = re.compile(r"\{%.*?%\}|\{\{.*?\}\}", re.DOTALL)
TAG_OPEN_RE = re.compile(r"\{[%{]")

_CSLASH_RE = re.compile(r"\\(x[0-9A-Fa-f]{1,2}|[0-7]{1,3}|.)", re.DOTALL)
_CSLASH_ESCAPES = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "a": "\a",
    "v": "\v",
    "b": "\b",
    "f": "\f",
}

_environment = Environment(autoescape=False)

# Token types that end the tag a marker call lives in
_TAG_END_TOKENS = frozenset({"block_end", "variable_end", "eof"})


def unescape(value: str) -> str:
    """Decode C-style backslash escapes; an unknown escape yields the bare character."""

    def replace(match: re.Match[str]) -> str:
        escape = match.group(1)
        if escape[0] == "x" and len(escape) > 1:
            return chr(int(escape[1:], 16))
        if escape[0] in "01234567":
            return chr(int(escape, 8) & 0xFF)
        return _CSLASH_ESCAPES.get(escape, escape)

    return _CSLASH_RE.sub(replace, value)


def line_number(content: str, offset: int) -> int:
    return content.count("\n", 0, offset) + 1


class TwigExtractor(Extractor):
    """Extracts messages from Twig templates."""

    name = "twig"
    extensions = frozenset({"twig", "html"})

    def _extract(self, context: ExtractionContext, catalog: TranslationCatalog) -> None:
        if REGISTER_MARKER in context.content:
            self._extract_registered(context, catalog)
        self._extract_patterns(context, catalog)

    def _extract_registered(self, context: ExtractionContext, catalog: TranslationCatalog) -> None:
        """Collect the inline arrays passed to ``registerTranslations()``."""
        position = 0
        for tag in TAG_RE.finditer(context.content):
            self._check_unclosed(context, position, tag.start())
            position = tag.end()
            if REGISTER_MARKER not in tag.group():
                continue

            first_line = line_number(context.content, tag.start())
            try:
                tokens = list(_environment.lexer.tokenize(tag.group()))
            except TemplateSyntaxError as e:
                raise ExtractionParseError(
                    context.file_path, f"Twig syntax error on line {first_line + e.lineno - 1}: {e.message}"
                ) from e

            for index, token in enumerate(tokens):
                if token.type == "name" and token.value == REGISTER_MARKER:
                    self._register_call(context, catalog, tokens, index, first_line - 1)

        self._check_unclosed(context, position, len(context.content))

    def _check_unclosed(self, context: ExtractionContext, start: int, end: int) -> None:
        """Reject a marker call inside a tag opened between two closed tags and never closed."""
        for opener in TAG_OPEN_RE.finditer(context.content, start, end):
            if REGISTER_MARKER in context.content[opener.start():end]:
                raise ExtractionParseError(
                    context.file_path,
                    f"Unclosed tag around {REGISTER_MARKER}() starting on line "
                    f"{line_number(context.content, opener.start())}",
                )

    def _register_call(
        self,
        context: ExtractionContext,
        catalog: TranslationCatalog,
        tokens: list[Token],
        index: int,
        line_offset: int,
    ) -> None:
        def token_type(position: int) -> str:
            return tokens[position].type if position < len(tokens) else "eof"

        if token_type(index + 1) != "lparen" or token_type(index + 2) != "string":
            return
        if token_type(index + 3) != "comma" or token_type(index + 4) != "lbracket":
            return

        category = tokens[index + 2].value
        messages: list[Token] = []
        position = index + 5
        while token_type(position) != "rbracket":
            if token_type(position) in _TAG_END_TOKENS:
                raise ExtractionParseError(
                    context.file_path,
                    f"Unclosed array in {REGISTER_MARKER}() on line "
                    f"{tokens[index].lineno + line_offset}",
                )
            if token_type(position) == "string":
                messages.append(tokens[position])
            position += 1

        if not context.accepts(category):
            return
        for token in messages:
            context.record(catalog, token.value, token.lineno + line_offset)

    def _extract_patterns(self, context: ExtractionContext, catalog: TranslationCatalog) -> None:
        matches = [*FILTER_RE.finditer(context.content), *CRAFT_T_RE.finditer(context.content)]
        for match in matches:
            category = match.group("category")
            if category is None:
                category = context.default_category
            if not context.accepts(category):
                continue

            line = line_number(context.content, match.start("message"))
            log.debug("Found message", file=context.file_path, line=line, category=category)
            context.record(catalog, unescape(match.group("message")), line)
