"""Catalog loaders and generators, keyed by file extension.

PO/POT and MO go through Babel. PHP array files are written as
``<?php return [...];`` and read back with a literal-only parser: file
content is never executed. CSV files hold ``original,translation`` rows.
"""

from __future__ import annotations

import csv
import io
from abc import ABC, abstractmethod
from pathlib import Path

import structlog
from babel.core import UnknownLocaleError
from babel.messages.catalog import Catalog
from babel.messages.mofile import read_mo, write_mo
from babel.messages.pofile import read_po, write_po
from tree_sitter import Node

from craft_translations.catalog.models import References, Translation, TranslationCatalog
from craft_translations.errors import CatalogFormatError, ExtractionParseError
from craft_translations.extractors.php import parse_php, php_expression
from craft_translations.extractors.syntax import InvalidEscapeError, node_text, resolve_string, walk

log = structlog.get_logger()

FORMATS = ("po", "mo", "php", "csv")


def get_format(filename: str | Path, fallback: str = "po") -> str:
    """Map a file name to its catalog format (``.pot`` is PO)."""
    extension = Path(filename).suffix.lstrip(".").lower()
    if extension == "pot":
        return "po"
    if extension in FORMATS:
        return extension
    return fallback


class Loader(ABC):
    """Reads a catalog file."""

    def load_file(self, filename: str | Path) -> TranslationCatalog:
        try:
            data = Path(filename).read_bytes()
        except OSError as e:
            raise CatalogFormatError(f"{filename} couldn't be read: {e}") from e
        return self.load_bytes(data)

    @abstractmethod
    def load_bytes(self, data: bytes) -> TranslationCatalog: ...


class Generator(ABC):
    """Writes a catalog file, leaving out disabled entries."""

    def generate_file(self, catalog: TranslationCatalog, filename: str | Path) -> bool:
        Path(filename).write_bytes(self.generate_bytes(catalog))
        log.debug("Wrote catalog", file=str(filename), messages=len(catalog))
        return True

    def generate_string(self, catalog: TranslationCatalog) -> str:
        return self.generate_bytes(catalog).decode("utf-8")

    @abstractmethod
    def generate_bytes(self, catalog: TranslationCatalog) -> bytes: ...


# =============================================================================
# Gettext (Babel)
# =============================================================================


def to_babel(catalog: TranslationCatalog) -> Catalog:
    locale = catalog.language.replace("-", "_") if catalog.language else None
    try:
        babel_catalog = Catalog(locale=locale, domain=catalog.domain)
    except (UnknownLocaleError, ValueError):
        log.warning("Unknown catalog language, writing without locale", language=catalog.language)
        babel_catalog = Catalog(domain=catalog.domain)

    for translation in catalog:
        # An empty msgid is the gettext header
        if translation.disabled or not translation.original:
            continue
        babel_catalog.add(
            translation.original,
            string=translation.translation,
            locations=list(translation.references),
        )
    return babel_catalog


def from_babel(babel_catalog: Catalog) -> TranslationCatalog:
    catalog = TranslationCatalog(
        domain=babel_catalog.domain,
        language=str(babel_catalog.locale) if babel_catalog.locale else None,
    )
    messages = [(message, False) for message in babel_catalog]
    messages += [(message, True) for message in babel_catalog.obsolete.values()]

    for message, obsolete in messages:
        original = message.id[0] if isinstance(message.id, (list, tuple)) else message.id
        if not original:
            continue
        string = message.string[0] if isinstance(message.string, (list, tuple)) else message.string
        catalog.add(
            Translation(
                original=original,
                translation=string or "",
                references=References((filename, lineno) for filename, lineno in message.locations),
                disabled=obsolete,
            )
        )
    return catalog


class PoLoader(Loader):
    def load_bytes(self, data: bytes) -> TranslationCatalog:
        try:
            return from_babel(read_po(io.BytesIO(data)))
        except Exception as e:
            raise CatalogFormatError(f"Not a PO translation file: {e}") from e


class MoLoader(Loader):
    def load_bytes(self, data: bytes) -> TranslationCatalog:
        try:
            return from_babel(read_mo(io.BytesIO(data)))
        except Exception as e:
            raise CatalogFormatError(f"Not a MO translation file: {e}") from e


class PoGenerator(Generator):
    def generate_bytes(self, catalog: TranslationCatalog) -> bytes:
        buffer = io.BytesIO()
        write_po(buffer, to_babel(catalog), width=76)
        return buffer.getvalue()


class MoGenerator(Generator):
    def generate_bytes(self, catalog: TranslationCatalog) -> bytes:
        buffer = io.BytesIO()
        write_mo(buffer, to_babel(catalog))
        return buffer.getvalue()

    def generate_string(self, catalog: TranslationCatalog) -> str:
        raise CatalogFormatError("MO catalogs are binary and have no string form")


# =============================================================================
# PHP array
# =============================================================================


def php_string(value: str) -> str:
    """Quote a string as a PHP literal, single-quoted unless it holds a quote."""
    if "'" not in value:
        return "'" + value.replace("\\", "\\\\") + "'"

    escaped = value.replace("\\", "\\\\").replace('"', '\\"').replace("$", "\\$")
    for char, escape in (("\n", "\\n"), ("\r", "\\r"), ("\t", "\\t"), ("\v", "\\v"), ("\f", "\\f"), ("\x1b", "\\e")):
        escaped = escaped.replace(char, escape)
    return '"' + escaped + '"'


class PhpArrayGenerator(Generator):
    """Writes ``<?php return ['original' => 'translation', ...];``.

    References become ``#: file:line`` comments above each entry and
    untranslated entries map to ``null``.
    """

    def generate_bytes(self, catalog: TranslationCatalog) -> bytes:
        lines = ["<?php", ""]
        entries = [translation for translation in catalog if not translation.disabled]
        if not entries:
            lines.append("return [];")
            return ("\n".join(lines) + "\n").encode("utf-8")

        lines.append("return [")
        for translation in entries:
            for filename, line in translation.references:
                lines.append(f"    #: {filename}" if line is None else f"    #: {filename}:{line}")
            value = php_string(translation.translation) if translation.translation else "null"
            lines.append(f"    {php_string(translation.original)} => {value},")
        lines.append("];")
        return ("\n".join(lines) + "\n").encode("utf-8")


class PhpArrayLoader(Loader):
    """Reads the array returned by a PHP translation file.

    Only string literals (and ``.`` concatenations of them) and ``null`` are
    accepted; anything else is rejected rather than evaluated.
    """

    def load_bytes(self, data: bytes) -> TranslationCatalog:
        try:
            root = parse_php(data.decode("utf-8"), "<php array>")
        except (ExtractionParseError, UnicodeDecodeError) as e:
            raise CatalogFormatError(f"Not a PHP array translation file: {e}") from e

        catalog = TranslationCatalog()
        statement = next((node for node in walk(root) if node.type == "return_statement"), None)
        array = next(
            (child for child in statement.named_children if child.type == "array_creation_expression"),
            None,
        ) if statement is not None else None
        if array is None:
            return catalog

        try:
            for element in array.named_children:
                if element.type == "array_element_initializer":
                    catalog.add(_array_entry(element))
        except (InvalidEscapeError, RecursionError) as e:
            raise CatalogFormatError(f"Not a PHP array translation file: {e}") from e
        return catalog


def _array_entry(element: Node) -> Translation:
    """Read one ``'original' => 'translation'|null`` array element."""
    parts = [child for child in element.named_children if child.type != "comment"]
    if len(parts) != 2:
        raise CatalogFormatError(f"Unsupported array element: {node_text(element)}")

    key_node, value_node = parts
    original = resolve_string(php_expression(key_node))
    if original is None:
        raise CatalogFormatError(f"Array keys must be string literals: {node_text(key_node)}")

    if value_node.type == "null":
        return Translation(original=original)
    value = resolve_string(php_expression(value_node))
    if value is None:
        raise CatalogFormatError(f"Array values must be string literals or null: {node_text(value_node)}")
    return Translation(original=original, translation=value)


# =============================================================================
# CSV
# =============================================================================


class CsvGenerator(Generator):
    def generate_bytes(self, catalog: TranslationCatalog) -> bytes:
        buffer = io.StringIO()
        writer = csv.writer(buffer, lineterminator="\n")
        for translation in catalog:
            if translation.disabled:
                continue
            writer.writerow([translation.original, translation.translation])
        return buffer.getvalue().encode("utf-8")


class CsvLoader(Loader):
    def load_bytes(self, data: bytes) -> TranslationCatalog:
        catalog = TranslationCatalog()
        try:
            rows = list(csv.reader(io.StringIO(data.decode("utf-8-sig"))))
        except (csv.Error, UnicodeDecodeError) as e:
            raise CatalogFormatError(f"Not a CSV translation file: {e}") from e

        for row in rows:
            if not row or not row[0]:
                continue
            catalog.add(Translation(original=row[0], translation=row[1] if len(row) > 1 else ""))
        return catalog


_LOADERS: dict[str, type[Loader]] = {
    "po": PoLoader,
    "mo": MoLoader,
    "php": PhpArrayLoader,
    "csv": CsvLoader,
}

_GENERATORS: dict[str, type[Generator]] = {
    "po": PoGenerator,
    "mo": MoGenerator,
    "php": PhpArrayGenerator,
    "csv": CsvGenerator,
}


def get_loader(fmt: str) -> Loader:
    """Return the loader for a format.

    Raises:
        CatalogFormatError: The format is unknown.
    """
    loader = _LOADERS.get("po" if fmt == "pot" else fmt)
    if loader is None:
        raise CatalogFormatError(f"{fmt} is an invalid format", details={"format": fmt})
    return loader()


def get_generator(fmt: str) -> Generator:
    """Return the generator for a format.

    Raises:
        CatalogFormatError: The format is unknown.
    """
    generator = _GENERATORS.get("po" if fmt == "pot" else fmt)
    if generator is None:
        raise CatalogFormatError(f"{fmt} is an invalid format", details={"format": fmt})
    return generator()
