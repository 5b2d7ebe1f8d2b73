"""Project config extractor.

Craft stores its project config as a tree of YAML files below
``config/project``. Each file is flattened into dot-joined paths, prefixed
with the file's location in the tree, and a fixed set of path rules decides
which values are translatable:

    fields/myField--0a1b2c3d-....yaml  ->  fields.0a1b2c3d-....name
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from pathlib import Path

import structlog
import yaml

from craft_translations.catalog.models import TranslationCatalog
from craft_translations.errors import ExtractionParseError
from craft_translations.extractors.base import ExtractionContext, Extractor
from craft_translations.extractors.twig import TwigExtractor

log = structlog.get_logger()

UUID = r"[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}"
UUID_RE = re.compile(UUID)

_STR_TAG = "tag:yaml.org,2002:str"


def _rule(pattern: str) -> re.Pattern[str]:
    return re.compile(pattern.replace("{uuid}", UUID))


# Values extracted as-is
MESSAGE_PATHS = [
    _rule(r"^fields\.{uuid}\.(name|instructions)$"),
    _rule(r"^fields\.{uuid}\.settings\.(placeholder|selectionLabel)$"),
    _rule(r"^(sections|entryTypes|categoryGroups|tagGroups|globalSets|volumes|fs|sites|siteGroups|userGroups|matrixBlockTypes)\.{uuid}\.name$"),
    _rule(r"^userGroups\.{uuid}\.description$"),
    _rule(r"^.+\.fieldLayouts\.{uuid}\.tabs\.\d+\.name$"),
    _rule(r"^.+\.fieldLayouts\.{uuid}\.tabs\.\d+\.elements\.\d+\.(label|instructions|tip|warning|heading)$"),
]

# (pattern, keys): the matched leaf holds a key name, its sibling "….1" the value
KEYED_SIBLING_PATHS = [
    (_rule(r"^fields\.{uuid}\.settings\.options\.\d+\.__assoc__\.\d+\.0$"), frozenset({"label"})),
    (
        _rule(r"^fields\.{uuid}\.settings\.columns\.__assoc__\.\d+\.1\.__assoc__\.\d+\.0$"),
        frozenset({"heading"}),
    ),
    (_rule(r"^sections\.{uuid}\.previewTargets\.\d+\.__assoc__\.\d+\.0$"), frozenset({"label"})),
]
_SIBLING_RE = re.compile(r"\.0$")

# Values that are themselves inline Twig templates
TEMPLATE_PATHS = [
    _rule(r"^entryTypes\.{uuid}\.titleFormat$"),
    _rule(r"^(sections|categoryGroups)\.{uuid}\.siteSettings\.{uuid}\.uriFormat$"),
]


@dataclass(frozen=True)
class Leaf:
    """A scalar string value of the flattened document."""

    value: str
    line: int


def find_project_config_path(
    base_path: str | Path,
    *,
    marker: str = "project.yaml",
    dirname: str = "project",
    max_depth: int = 4,
) -> str | None:
    """Locate the project config root below ``base_path``.

    Looks for ``marker`` inside a directory named ``dirname``, at most
    ``max_depth`` directory levels deep, skipping dot-directories.

    Returns:
        The directory holding the marker, or None when there is none.
    """
    base = os.path.abspath(base_path)
    if not os.path.isdir(base):
        return None

    base_depth = base.rstrip(os.sep).count(os.sep)
    for dirpath, dirnames, filenames in os.walk(base):
        depth = dirpath.rstrip(os.sep).count(os.sep) - base_depth
        dirnames[:] = sorted(d for d in dirnames if not d.startswith("."))
        if depth >= max_depth:
            dirnames[:] = []
        if marker in filenames and os.path.basename(dirpath) == dirname:
            return dirpath
    return None


def config_path_prefix(file_path: str, config_root: str, marker: str = "project.yaml") -> list[str] | None:
    """Path segments a config file contributes, or None if it's outside the root.

    The root marker file contributes no segments.
    """
    relative = os.path.relpath(os.path.abspath(file_path), os.path.abspath(config_root))
    if relative == os.pardir or relative.startswith(os.pardir + os.sep):
        return None
    if relative == marker:
        return []

    prefix: list[str] = []
    for segment in Path(relative).with_suffix("").parts:
        uuid = UUID_RE.search(segment)
        prefix.append(uuid.group() if uuid else segment)
    return prefix


def flatten(node: yaml.Node, prefix: list[str], into: dict[str, Leaf]) -> dict[str, Leaf]:
    """Flatten a composed YAML node into ``dot.joined.path -> Leaf``.

    Only string scalars become leaves; sequences use their indexes as keys.
    """
    if isinstance(node, yaml.MappingNode):
        for key_node, value_node in node.value:
            flatten(value_node, [*prefix, str(key_node.value)], into)
    elif isinstance(node, yaml.SequenceNode):
        for index, value_node in enumerate(node.value):
            flatten(value_node, [*prefix, str(index)], into)
    elif isinstance(node, yaml.ScalarNode) and node.tag == _STR_TAG:
        into[".".join(prefix)] = Leaf(node.value, node.start_mark.line + 1)
    return into


class ProjectConfigExtractor(Extractor):
    """Extracts messages from project config YAML files.

    Files outside ``project_config_path`` (or every file, when no project
    config root was found) produce an empty catalog.
    """

    name = "project-config"
    extensions = frozenset({"yaml", "yml"})

    def __init__(
        self,
        default_category: str = "site",
        base_reference_path: str | None = None,
        project_config_path: str | None = None,
        marker: str = "project.yaml",
    ) -> None:
        super().__init__(default_category, base_reference_path)
        self.project_config_path = project_config_path
        self.marker = marker
        self.template_extractor = TwigExtractor(default_category, base_reference_path)

    def _extract(self, context: ExtractionContext, catalog: TranslationCatalog) -> None:
        if not self.project_config_path:
            return

        prefix = config_path_prefix(context.file_path, self.project_config_path, self.marker)
        if prefix is None:
            log.debug("Skipping config outside project config root", file=context.file_path)
            return

        try:
            document = yaml.compose(context.content, Loader=yaml.SafeLoader)
        except yaml.YAMLError as e:
            raise ExtractionParseError(context.file_path, f"Invalid YAML: {e}") from e
        if document is None:
            return

        leaves = flatten(document, prefix, {})
        # Verbatim and sibling values always belong to the default category
        plain = context.accepts(context.default_category)

        for path, leaf in leaves.items():
            if any(pattern.match(path) for pattern in TEMPLATE_PATHS):
                self._extract_template(context, catalog, leaf)
                continue
            if not plain:
                continue

            if any(pattern.match(path) for pattern in MESSAGE_PATHS):
                context.record(catalog, leaf.value, leaf.line)
                continue

            sibling = self._keyed_sibling(path, leaf, leaves)
            if sibling is not None:
                context.record(catalog, sibling.value, sibling.line)

    @staticmethod
    def _keyed_sibling(path: str, leaf: Leaf, leaves: dict[str, Leaf]) -> Leaf | None:
        for pattern, keys in KEYED_SIBLING_PATHS:
            if pattern.match(path) and leaf.value in keys:
                return leaves.get(_SIBLING_RE.sub(".1", path))
        return None

    def _extract_template(self, context: ExtractionContext, catalog: TranslationCatalog, leaf: Leaf) -> None:
        inline = self.template_extractor.extract(leaf.value, context.file_path, context.category)
        for translation in inline:
            context.record(catalog, translation.original, leaf.line)
