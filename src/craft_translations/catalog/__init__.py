"""Translation catalogs and their file formats."""

from craft_translations.catalog.models import (
    MergeStrategy,
    Reference,
    References,
    Translation,
    TranslationCatalog,
)

__all__ = [
    "MergeStrategy",
    "Reference",
    "References",
    "Translation",
    "TranslationCatalog",
]
