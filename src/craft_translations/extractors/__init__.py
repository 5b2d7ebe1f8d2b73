"""Per-grammar message extractors."""

from craft_translations.extractors.base import ExtractionContext, Extractor
from craft_translations.extractors.javascript import JavaScriptExtractor
from craft_translations.extractors.php import PhpExtractor
from craft_translations.extractors.project_config import (
    ProjectConfigExtractor,
    find_project_config_path,
)
from craft_translations.extractors.twig import TwigExtractor

__all__ = [
    "ExtractionContext",
    "Extractor",
    "JavaScriptExtractor",
    "PhpExtractor",
    "ProjectConfigExtractor",
    "TwigExtractor",
    "find_project_config_path",
]
