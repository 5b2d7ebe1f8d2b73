"""Translation catalog data structures.

A catalog maps each distinct message (its ``original`` text) to one
Translation that accumulates every place the message was found.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from enum import StrEnum

Reference = tuple[str, int | None]


class MergeStrategy(StrEnum):
    """How `TranslationCatalog.merge_with` reconciles overlapping entries."""

    ADDITIVE = "additive"  # Fold per-file extraction results together
    OVERRIDE = "override"  # Refresh references, keep existing translations


class References:
    """Ordered set of (path, line) pairs.

    The line is None when the grammar cannot tell where a message sits.
    """

    def __init__(self, references: Iterable[Reference] = ()) -> None:
        self._items: dict[Reference, None] = {}
        self.update(references)

    def add(self, path: str, line: int | None = None) -> None:
        self._items.setdefault((path, line), None)

    def update(self, references: Iterable[Reference]) -> None:
        for path, line in references:
            self.add(path, line)

    def merged(self, other: References) -> References:
        """Return a new set with this set's references first, then the other's."""
        return References([*self, *other])

    def paths(self) -> list[str]:
        """Distinct paths in first-seen order."""
        return list(dict.fromkeys(path for path, _ in self._items))

    def __iter__(self) -> Iterator[Reference]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, item: object) -> bool:
        return item in self._items

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, References):
            return NotImplemented
        return list(self) == list(other)

    def __repr__(self) -> str:
        return f"References({list(self)!r})"


@dataclass
class Translation:
    """One distinct message within a catalog."""

    original: str
    translation: str = ""
    references: References = field(default_factory=References)
    disabled: bool = False

    def is_translated(self) -> bool:
        return bool(self.translation)

    def copy(self) -> Translation:
        return Translation(
            original=self.original,
            translation=self.translation,
            references=References(self.references),
            disabled=self.disabled,
        )


class TranslationCatalog:
    """Insertion-ordered, de-duplicated collection of translations.

    Entries are keyed by their ``original`` text. The catalog may be tagged
    with the domain (translation category) and language it holds.
    """

    def __init__(
        self,
        translations: Iterable[Translation] = (),
        *,
        domain: str | None = None,
        language: str | None = None,
    ) -> None:
        self.domain = domain
        self.language = language
        self._translations: dict[str, Translation] = {}
        for translation in translations:
            self.add(translation)

    def find(self, original: str) -> Translation | None:
        return self._translations.get(original)

    def add(self, translation: Translation) -> Translation:
        """Insert a translation unless its original is already present.

        Returns:
            The entry stored in the catalog under that original.
        """
        return self._translations.setdefault(translation.original, translation)

    def find_or_create(self, original: str) -> Translation:
        return self.find(original) or self.add(Translation(original))

    def merge_with(
        self,
        other: TranslationCatalog,
        strategy: MergeStrategy = MergeStrategy.ADDITIVE,
    ) -> TranslationCatalog:
        """Combine this catalog with another into a new catalog.

        ADDITIVE keeps every entry of both catalogs. For shared originals the
        references are concatenated (ours first) and a non-empty translation
        is taken from whichever side has one, ours preferred.

        OVERRIDE keeps only our entries. For shared originals the other
        catalog's translation and disabled flag win while the references stay
        ours, so entries the other catalog knows but we no longer reference
        are dropped.

        Args:
            other: Catalog to merge in.
            strategy: Merge strategy.

        Returns:
            A new catalog; neither operand is modified.
        """
        if strategy is MergeStrategy.OVERRIDE:
            merged = TranslationCatalog(
                domain=self.domain or other.domain,
                language=self.language or other.language,
            )
            for ours in self:
                entry = ours.copy()
                theirs = other.find(ours.original)
                if theirs is not None:
                    if theirs.translation:
                        entry.translation = theirs.translation
                    entry.disabled = theirs.disabled
                merged.add(entry)
            return merged

        merged = TranslationCatalog(
            (translation.copy() for translation in self),
            domain=self.domain,
            language=self.language,
        )
        merged.absorb(other)
        return merged

    def absorb(self, other: TranslationCatalog) -> None:
        """Additively merge ``other`` into this catalog in place.

        Same rules as an ADDITIVE `merge_with`; ``other`` is not modified.
        """
        self.domain = self.domain or other.domain
        self.language = self.language or other.language
        for theirs in other:
            entry = self.find(theirs.original)
            if entry is None:
                self.add(theirs.copy())
                continue
            entry.references.update(theirs.references)
            entry.translation = entry.translation or theirs.translation
            entry.disabled = entry.disabled or theirs.disabled

    def sort(self) -> None:
        """Order entries case-insensitively by original text.

        Only affects output order; entries comparing equal keep their order.
        """
        self._translations = dict(
            sorted(self._translations.items(), key=lambda item: item[0].lower())
        )

    def originals(self) -> list[str]:
        return list(self._translations)

    def __iter__(self) -> Iterator[Translation]:
        return iter(list(self._translations.values()))

    def __len__(self) -> int:
        return len(self._translations)

    def __contains__(self, original: object) -> bool:
        return original in self._translations

    def __repr__(self) -> str:
        return (
            f"TranslationCatalog(domain={self.domain!r}, language={self.language!r}, "
            f"entries={len(self)})"
        )
