"""Shared extractor contract and per-call extraction context."""

from __future__ import annotations

import os
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import ClassVar

from craft_translations.catalog.models import TranslationCatalog
from craft_translations.errors import ExtractionParseError
from craft_translations.extractors.syntax import InvalidEscapeError


def reference_path(file_path: str, base_reference_path: str | None) -> str:
    """Path written into references: relative to the base, forward slashes."""
    if base_reference_path:
        file_path = os.path.relpath(file_path, base_reference_path)
    return file_path.replace(os.sep, "/")


@dataclass
class ExtractionContext:
    """Everything one extractor call needs to know about its input."""

    file_path: str
    content: str
    category: str | None
    default_category: str
    base_reference_path: str | None = None

    @property
    def reference_path(self) -> str:
        return reference_path(self.file_path, self.base_reference_path)

    def accepts(self, category: str) -> bool:
        """True unless a category filter is active and differs."""
        return not self.category or self.category == category

    def record(self, catalog: TranslationCatalog, message: str, line: int | None) -> None:
        if not message:
            return
        catalog.find_or_create(message).references.add(self.reference_path, line)


class Extractor(ABC):
    """Finds marker calls in one source grammar.

    Subclasses declare the file extensions they handle and implement
    `_extract`; they must not keep state between calls.
    """

    name: ClassVar[str]
    extensions: ClassVar[frozenset[str]]

    def __init__(self, default_category: str = "site", base_reference_path: str | None = None) -> None:
        self.default_category = default_category
        self.base_reference_path = base_reference_path

    def extract(self, content: str, file_path: str | Path, category: str | None = None) -> TranslationCatalog:
        """Extract every translation in ``content``.

        Args:
            content: Raw file content.
            file_path: Path the content was read from (used for references).
            category: Only keep messages of this category when given.

        Returns:
            Fresh catalog with the file's translations.

        Raises:
            ExtractionParseError: The content could not be parsed, holds an
                invalid escape, or nests expressions too deeply.
        """
        context = ExtractionContext(
            file_path=str(file_path),
            content=content,
            category=category,
            default_category=self.default_category,
            base_reference_path=self.base_reference_path,
        )
        catalog = TranslationCatalog(domain=category)
        try:
            self._extract(context, catalog)
        except InvalidEscapeError as e:
            raise ExtractionParseError(context.file_path, str(e)) from e
        except RecursionError as e:
            raise ExtractionParseError(context.file_path, "expressions nested too deeply") from e
        return catalog

    @abstractmethod
    def _extract(self, context: ExtractionContext, catalog: TranslationCatalog) -> None: ...
