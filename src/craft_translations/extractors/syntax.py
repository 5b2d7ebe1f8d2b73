"""Tagged variants for the small call grammar the extractors recognize.

Parser nodes are converted into these shapes first; extractors then
pattern-match on them. Anything the converters do not understand becomes
`Opaque`, which never resolves to a message.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass

from tree_sitter import Node


@dataclass(frozen=True)
class StringLiteral:
    value: str


@dataclass(frozen=True)
class Concat:
    parts: tuple[Expr, ...]


@dataclass(frozen=True)
class Opaque:
    kind: str


Expr = StringLiteral | Concat | Opaque


@dataclass(frozen=True)
class Argument:
    value: Expr
    name: str | None = None  # PHP named argument


@dataclass(frozen=True)
class StaticCall:
    """``Scope::method(...)``"""

    scope: str
    method: str
    args: tuple[Argument, ...]
    line: int


@dataclass(frozen=True)
class MemberCall:
    """``object.method(...)``"""

    object: str
    method: str
    args: tuple[Argument, ...]
    line: int


CallShape = StaticCall | MemberCall


class InvalidEscapeError(ValueError):
    """A string escape names a code point no source file may contain."""


def code_point(value: int) -> str:
    """Return the character for an escaped code point.

    Surrogates and values past U+10FFFF are rejected.
    """
    if value > 0x10FFFF or 0xD800 <= value <= 0xDFFF:
        raise InvalidEscapeError(f"invalid code point escape U+{value:X}")
    return chr(value)


def resolve_string(expr: Expr) -> str | None:
    """Statically resolve an expression to a string, or None if it can't be."""
    match expr:
        case StringLiteral(value=value):
            return value
        case Concat(parts=parts):
            resolved = [resolve_string(part) for part in parts]
            if any(part is None for part in resolved):
                return None
            return "".join(part for part in resolved if part is not None)
        case _:
            return None


def positional(args: tuple[Argument, ...]) -> list[Expr]:
    return [arg.value for arg in args if arg.name is None]


def walk(root: Node) -> Iterator[Node]:
    """Yield every node below root in document (pre-)order."""
    stack = [root]
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(node.children))


def node_text(node: Node) -> str:
    return node.text.decode("utf-8") if node.text is not None else ""


def start_line(node: Node) -> int:
    return node.start_point[0] + 1
