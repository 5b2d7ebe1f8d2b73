"""PHP extractor.

Finds ``Craft::t()``, ``Craft::translate()`` and ``Translation::prep()``
calls in PHP source using the tree-sitter PHP grammar.
"""

from __future__ import annotations

import re

import structlog
import tree_sitter_php
from tree_sitter import Language, Node, Parser

from craft_translations.catalog.models import TranslationCatalog
from craft_translations.errors import ExtractionParseError
from craft_translations.extractors.base import ExtractionContext, Extractor
from craft_translations.extractors.syntax import (
    Argument,
    Concat,
    Expr,
    Opaque,
    StaticCall,
    StringLiteral,
    code_point,
    node_text,
    positional,
    resolve_string,
    start_line,
    walk,
)

log = structlog.get_logger()

PHP_LANGUAGE = Language(tree_sitter_php.language_php())

# Parameter order shared by all marker calls
MARKER_PARAMETERS = ("category", "message")

_SINGLE_QUOTED_ESCAPE_RE = re.compile(r"\\([\\'])")
_DOUBLE_QUOTED_ESCAPE_RE = re.compile(
    r"\\(?:([nrtvef\\$\"])|([0-7]{1,3})|x([0-9A-Fa-f]{1,2})|u\{([0-9A-Fa-f]+)\})"
)
# Heredocs share the escapes of double-quoted strings except \"
_HEREDOC_ESCAPE_RE = re.compile(
    r"\\(?:([nrtvef\\$])|([0-7]{1,3})|x([0-9A-Fa-f]{1,2})|u\{([0-9A-Fa-f]+)\})"
)
_SIMPLE_ESCAPES = {
    "n": "\n",
    "r": "\r",
    "t": "\t",
    "v": "\v",
    "e": "\x1b",
    "f": "\f",
    "\\": "\\",
    "$": "$",
    '"': '"',
}
# Children an interpolation-free double-quoted string may contain
_PLAIN_STRING_PARTS = frozenset({"string_content", "string_value", "escape_sequence"})
_HEREDOC_PARTS = _PLAIN_STRING_PARTS | {"heredoc", "heredoc_start", "heredoc_body", "heredoc_end"}


def parse_php(content: str, file_path: str) -> Node:
    """Parse PHP source and return the root node.

    Raises:
        ExtractionParseError: The grammar rejected the source.
    """
    tree = Parser(PHP_LANGUAGE).parse(content.encode("utf-8"))
    root = tree.root_node
    if root.has_error:
        line = next(
            (start_line(node) for node in walk(root) if node.type == "ERROR" or node.is_missing),
            None,
        )
        raise ExtractionParseError(file_path, f"PHP syntax error on line {line}")
    return root


def _string_body(text: str) -> str:
    # Drop the binary-string prefix (b'...') and the surrounding quotes
    return text.lstrip("bB")[1:-1]


def decode_single_quoted(text: str) -> str:
    return _SINGLE_QUOTED_ESCAPE_RE.sub(r"\1", _string_body(text))


def _decode_escapes(body: str, pattern: re.Pattern[str]) -> str:
    def replace(match: re.Match[str]) -> str:
        simple, octal, hexadecimal, codepoint = match.groups()
        if simple:
            return _SIMPLE_ESCAPES[simple]
        if octal:
            return chr(int(octal, 8) & 0xFF)
        if hexadecimal:
            return chr(int(hexadecimal, 16))
        return code_point(int(codepoint, 16))

    return pattern.sub(replace, body)


def decode_double_quoted(text: str) -> str:
    """Decode a double-quoted literal.

    Raises:
        InvalidEscapeError: A ``\\u{...}`` escape names a surrogate or a code
            point past U+10FFFF.
    """
    return _decode_escapes(_string_body(text), _DOUBLE_QUOTED_ESCAPE_RE)


def heredoc_body(text: str) -> str:
    """Return the lines between a heredoc/nowdoc opener and its closing marker.

    The closing marker's indentation is removed from every line.
    """
    lines = text.splitlines()
    if len(lines) < 2:
        return ""
    closing = lines[-1]
    indent = closing[: len(closing) - len(closing.lstrip())]
    return "\n".join(
        line[len(indent):] if line.startswith(indent) else line.lstrip() for line in lines[1:-1]
    )


def _operator(node: Node) -> str:
    operator = node.child_by_field_name("operator")
    if operator is None:
        operator = next((child for child in node.children if not child.is_named), None)
    return node_text(operator) if operator is not None else ""


def _is_concat(node: Node) -> bool:
    return node.type == "binary_expression" and _operator(node) == "."


def _concat(node: Node) -> Expr:
    """Flatten a left-nested ``.`` chain into one Concat."""
    parts: list[Expr] = []
    while _is_concat(node):
        left = node.child_by_field_name("left")
        right = node.child_by_field_name("right")
        if left is None or right is None:
            return Opaque(node.type)
        parts.append(php_expression(right))
        node = left
    parts.append(php_expression(node))
    return Concat(tuple(reversed(parts)))


def php_expression(node: Node) -> Expr:
    """Convert a PHP expression node into the marker-call expression grammar."""
    match node.type:
        case "string":
            return StringLiteral(decode_single_quoted(node_text(node)))
        case "encapsed_string":
            if any(child.type not in _PLAIN_STRING_PARTS for child in node.named_children):
                return Opaque("interpolated_string")
            return StringLiteral(decode_double_quoted(node_text(node)))
        case "heredoc":
            if any(child.type not in _HEREDOC_PARTS for child in walk(node) if child.is_named):
                return Opaque("interpolated_string")
            return StringLiteral(_decode_escapes(heredoc_body(node_text(node)), _HEREDOC_ESCAPE_RE))
        case "nowdoc":
            return StringLiteral(heredoc_body(node_text(node)))
        case "binary_expression" if _is_concat(node):
            return _concat(node)
        case "parenthesized_expression" if node.named_children:
            return php_expression(node.named_children[-1])
        case _:
            return Opaque(node.type)


def _arguments(node: Node) -> tuple[Argument, ...]:
    args: list[Argument] = []
    for child in node.named_children:
        if child.type != "argument" or not child.named_children:
            continue
        name = child.child_by_field_name("name")
        args.append(
            Argument(
                value=php_expression(child.named_children[-1]),
                name=node_text(name) if name is not None else None,
            )
        )
    return tuple(args)


def static_call(node: Node) -> StaticCall | None:
    """Convert a ``scoped_call_expression`` node, or None if it has no class name scope."""
    scope = node.child_by_field_name("scope")
    name = node.child_by_field_name("name")
    arguments = node.child_by_field_name("arguments")
    if scope is None or name is None or arguments is None:
        return None
    if scope.type not in ("name", "qualified_name"):
        return None
    return StaticCall(
        scope=node_text(scope).lstrip("\\"),
        method=node_text(name),
        args=_arguments(arguments),
        line=start_line(scope),
    )


class PhpExtractor(Extractor):
    """Extracts messages from PHP marker calls."""

    name = "php"
    extensions = frozenset({"php"})

    def _extract(self, context: ExtractionContext, catalog: TranslationCatalog) -> None:
        root = parse_php(context.content, context.file_path)

        for node in walk(root):
            if node.type != "scoped_call_expression":
                continue
            call = static_call(node)
            match call:
                case StaticCall(scope="Craft", method="t" | "translate") | StaticCall(
                    scope="Translation", method="prep"
                ):
                    self._record_call(context, catalog, call)
                case _:
                    continue

    def _record_call(
        self, context: ExtractionContext, catalog: TranslationCatalog, call: StaticCall
    ) -> None:
        slots = _bind_arguments(call.args)

        message = resolve_string(slots.get("message", Opaque("missing")))
        if message is None:
            return

        category = context.default_category
        if "category" in slots:
            category = resolve_string(slots["category"]) or context.default_category

        if not context.accepts(category):
            return

        log.debug("Found message", file=context.file_path, line=call.line, category=category)
        context.record(catalog, message, call.line)


def _bind_arguments(args: tuple[Argument, ...]) -> dict[str, Expr]:
    """Map call arguments onto the (category, message) parameters.

    A lone positional argument is the message in the default category.
    """
    values = positional(args)
    named = {arg.name: arg.value for arg in args if arg.name in MARKER_PARAMETERS}

    if not named and len(values) == 1:
        return {"message": values[0]}

    slots = dict(zip(MARKER_PARAMETERS, values, strict=False))
    slots.update(named)
    return slots
