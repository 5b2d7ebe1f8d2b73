"""JavaScript extractor for ``Craft.t(category, message)`` calls."""

from __future__ import annotations

import re

import structlog
import tree_sitter_javascript
from tree_sitter import Language, Node, Parser

from craft_translations.catalog.models import TranslationCatalog
from craft_translations.errors import ExtractionParseError
from craft_translations.extractors.base import ExtractionContext, Extractor
from craft_translations.extractors.syntax import (
    Argument,
    Expr,
    MemberCall,
    Opaque,
    StringLiteral,
    code_point,
    node_text,
    resolve_string,
    start_line,
    walk,
)

log = structlog.get_logger()

JS_LANGUAGE = Language(tree_sitter_javascript.language())

_ESCAPE_RE = re.compile(
    r"\\u([dD][89abAB][0-9A-Fa-f]{2})\\u([dD][c-fC-F][0-9A-Fa-f]{2})"
    r"|\\(?:u\{([0-9A-Fa-f]+)\}|u([0-9A-Fa-f]{4})|x([0-9A-Fa-f]{2})|(\r\n|[\n\r\u2028\u2029])|(.))",
    re.DOTALL,
)
_SIMPLE_ESCAPES = {
    "n": "\n",
    "r": "\r",
    "t": "\t",
    "b": "\b",
    "f": "\f",
    "v": "\v",
    "0": "\0",
}


def decode_js_string(body: str) -> str:
    """Decode the escape sequences of a string literal body (no quotes).

    Raises:
        InvalidEscapeError: An escape names a lone surrogate or a code point
            past U+10FFFF.
    """

    def replace(match: re.Match[str]) -> str:
        high, low, codepoint, unicode, hexadecimal, continuation, char = match.groups()
        if high:
            # UTF-16 surrogate pair
            return chr(0x10000 + ((int(high, 16) - 0xD800) << 10) + int(low, 16) - 0xDC00)
        if codepoint or unicode or hexadecimal:
            return code_point(int(codepoint or unicode or hexadecimal, 16))
        if continuation:
            return ""
        return _SIMPLE_ESCAPES.get(char, char)

    return _ESCAPE_RE.sub(replace, body)


def js_expression(node: Node) -> Expr:
    match node.type:
        case "string":
            return StringLiteral(decode_js_string(node_text(node)[1:-1]))
        case "template_string":
            if any(child.type == "template_substitution" for child in node.named_children):
                return Opaque("template_substitution")
            return StringLiteral(decode_js_string(node_text(node)[1:-1]))
        case "parenthesized_expression" if node.named_children:
            return js_expression(node.named_children[-1])
        case _:
            return Opaque(node.type)


def member_call(node: Node) -> MemberCall | None:
    """Convert a ``call_expression`` whose callee is ``identifier.property``."""
    callee = node.child_by_field_name("function")
    arguments = node.child_by_field_name("arguments")
    if callee is None or arguments is None or callee.type != "member_expression":
        return None

    obj = callee.child_by_field_name("object")
    prop = callee.child_by_field_name("property")
    if obj is None or prop is None or obj.type != "identifier":
        return None

    return MemberCall(
        object=node_text(obj),
        method=node_text(prop),
        args=tuple(
            Argument(js_expression(child))
            for child in arguments.named_children
            if child.type != "comment"
        ),
        line=start_line(callee),
    )


class JavaScriptExtractor(Extractor):
    """Extracts messages from ``Craft.t()`` calls in JavaScript and JSX."""

    name = "js"
    extensions = frozenset({"js", "jsx"})

    def _extract(self, context: ExtractionContext, catalog: TranslationCatalog) -> None:
        tree = Parser(JS_LANGUAGE).parse(context.content.encode("utf-8"))
        if tree.root_node.has_error:
            raise ExtractionParseError(context.file_path, "JavaScript syntax error")

        for node in walk(tree.root_node):
            if node.type != "call_expression":
                continue
            match member_call(node):
                case MemberCall(object="Craft", method="t", args=args, line=line) if len(args) >= 2:
                    message = resolve_string(args[1].value)
                    if message is None:
                        continue
                    category = resolve_string(args[0].value) or context.default_category
                    if not context.accepts(category):
                        continue
                    log.debug("Found message", file=context.file_path, line=line, category=category)
                    context.record(catalog, message, line)
                case _:
                    continue
