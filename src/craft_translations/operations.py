"""Catalog operations behind the CLI commands.

Each operation wires the extractor and the catalog formats together and
returns an `OperationResult`; none of them print anything.
"""

from __future__ import annotations

import os
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

import structlog

from craft_translations.catalog.formats import get_format, get_generator, get_loader
from craft_translations.catalog.models import MergeStrategy, TranslationCatalog
from craft_translations.config import settings
from craft_translations.errors import ScanRootError
from craft_translations.extractors import find_project_config_path
from craft_translations.pipeline import ExtractionResult, FileFailure, TranslationExtractor

log = structlog.get_logger()


@dataclass
class OperationResult:
    """Outcome of a catalog operation."""

    catalog: TranslationCatalog
    output: str | None = None
    content: bytes | None = None  # Generated catalog when no output file was given
    failures: list[FileFailure] = field(default_factory=list)

    @property
    def messages(self) -> int:
        return len(self.catalog)

    @property
    def success(self) -> bool:
        return not self.failures


def _base_reference_path(source: str | Path) -> str:
    if os.path.isdir(source):
        return str(source)
    if os.path.isfile(source):
        return os.path.dirname(os.path.abspath(source))
    raise ScanRootError(f"{source} doesn't exist.", details={"path": str(source)})


def build_extractor(source: str | Path) -> TranslationExtractor:
    """Create an extractor whose references are relative to ``source``."""
    base = _base_reference_path(source)
    project_config_path = find_project_config_path(
        base,
        marker=settings.project_config_marker,
        dirname=settings.project_config_dirname,
        max_depth=settings.project_config_max_depth,
    )
    if project_config_path:
        log.debug("Found project config", path=project_config_path)
    return TranslationExtractor(base_reference_path=base, project_config_path=project_config_path)


def _extract(
    source: str | Path,
    category: str | None,
    exclude: Iterable[str | Path] = (),
) -> ExtractionResult:
    result = build_extractor(source).extract(source, category, exclude)
    if category:
        result.catalog.domain = category
    return result


def extract(
    source: str | Path,
    output: str | Path | None = None,
    category: str | None = None,
) -> OperationResult:
    """Extract translations from ``source`` and write them to ``output``.

    The output format follows the output file's extension.
    """
    output = str(output or settings.default_output)
    generator = get_generator(get_format(output))

    result = _extract(source, category)
    result.catalog.sort()
    generator.generate_file(result.catalog, output)

    log.info("Extracted catalog", source=str(source), output=output, messages=len(result.catalog))
    return OperationResult(catalog=result.catalog, output=output, failures=result.failures)


def update(
    catalog_file: str | Path,
    source: str | Path,
    category: str | None = None,
) -> OperationResult:
    """Refresh an existing catalog against the current sources.

    Messages no longer found are dropped; translations of the remaining ones
    are kept. The catalog file itself is never scanned.
    """
    catalog_file = str(catalog_file)
    fmt = get_format(catalog_file)
    existing = get_loader(fmt).load_file(catalog_file)

    result = _extract(source, category, exclude=[catalog_file])
    catalog = result.catalog.merge_with(existing, MergeStrategy.OVERRIDE)
    catalog.sort()
    get_generator(fmt).generate_file(catalog, catalog_file)

    log.info(
        "Updated catalog",
        catalog=catalog_file,
        messages=len(catalog),
        previous=len(existing),
    )
    return OperationResult(catalog=catalog, output=catalog_file, failures=result.failures)


def convert(input_file: str | Path, output_file: str | Path) -> OperationResult:
    """Re-write a catalog in the format of ``output_file``."""
    catalog = get_loader(get_format(input_file)).load_file(input_file)
    get_generator(get_format(output_file)).generate_file(catalog, output_file)

    log.info("Converted catalog", input=str(input_file), output=str(output_file), messages=len(catalog))
    return OperationResult(catalog=catalog, output=str(output_file))


def merge(
    input_files: Iterable[str | Path],
    output: str | Path | None = None,
    fmt: str = "po",
    category: str | None = None,
) -> OperationResult:
    """Merge catalogs into one.

    Input files that don't exist are skipped. Without ``output`` the merged
    catalog is generated in ``fmt`` and returned as bytes.
    """
    catalog = TranslationCatalog(domain=category)
    for input_file in input_files:
        if not os.path.isfile(input_file):
            log.warning("Skipping missing catalog", file=str(input_file))
            continue
        loaded = get_loader(get_format(input_file)).load_file(input_file)
        catalog.absorb(loaded)

    generator = get_generator(get_format(output, fmt) if output else fmt)
    catalog.sort()

    if output:
        generator.generate_file(catalog, output)
        log.info("Merged catalogs", output=str(output), messages=len(catalog))
        return OperationResult(catalog=catalog, output=str(output))
    return OperationResult(catalog=catalog, content=generator.generate_bytes(catalog))
