"""Extraction orchestrator.

Walks a source tree (or takes a single file), filters it through the ignore
files, hands every file to the extractor registered for its extension and
folds the per-file catalogs into one.
"""

from __future__ import annotations

import os
import re
import time
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from pathlib import Path

import structlog

from craft_translations.catalog.models import TranslationCatalog
from craft_translations.config import settings
from craft_translations.errors import (
    ExtractionError,
    ScanRootError,
    UnsupportedFileError,
)
from craft_translations.extractors import (
    Extractor,
    JavaScriptExtractor,
    PhpExtractor,
    ProjectConfigExtractor,
    TwigExtractor,
)
from craft_translations.ignore import IgnoreFilter

log = structlog.get_logger()

VCS_DIRECTORIES = frozenset({".git", ".svn", ".hg", "_darcs", ".arch-ids", ".bzr", "CVS"})


@dataclass
class FileFailure:
    """A file whose extraction failed; the rest of the scan went on."""

    path: str
    error: str


@dataclass
class ExtractionStats:
    """Statistics from an extraction run."""

    files_scanned: int = 0
    files_failed: int = 0
    messages: int = 0
    references: int = 0
    duration_seconds: float = 0.0


@dataclass
class ExtractionResult:
    """Complete result of an extraction run."""

    catalog: TranslationCatalog
    stats: ExtractionStats = field(default_factory=ExtractionStats)
    failures: list[FileFailure] = field(default_factory=list)

    @property
    def success(self) -> bool:
        """Return True if every file was extracted."""
        return not self.failures


class TranslationExtractor:
    """Extracts translations from files and folders.

    Args:
        default_category: Category for call-sites that name none.
        base_reference_path: References are written relative to this path.
        project_config_path: Project config root; config extraction is
            disabled without one.
        ignore_filename: Name of the per-directory ignore file.
        ignore_dot_files: Skip dot files and dot directories while walking.
        ignore_vcs: Skip version control directories while walking.
    """

    def __init__(
        self,
        *,
        default_category: str | None = None,
        base_reference_path: str | Path | None = None,
        project_config_path: str | Path | None = None,
        ignore_filename: str | None = None,
        ignore_dot_files: bool | None = None,
        ignore_vcs: bool | None = None,
    ) -> None:
        self.default_category = default_category or settings.default_category
        self.base_reference_path = os.path.realpath(base_reference_path) if base_reference_path else None
        self.project_config_path = os.path.realpath(project_config_path) if project_config_path else None
        self.ignore_filename = ignore_filename or settings.ignore_filename
        self.ignore_dot_files = settings.ignore_dot_files if ignore_dot_files is None else ignore_dot_files
        self.ignore_vcs = settings.ignore_vcs if ignore_vcs is None else ignore_vcs

        extractors: list[Extractor] = [
            TwigExtractor(self.default_category, self.base_reference_path),
            JavaScriptExtractor(self.default_category, self.base_reference_path),
            PhpExtractor(self.default_category, self.base_reference_path),
            ProjectConfigExtractor(
                self.default_category,
                self.base_reference_path,
                self.project_config_path,
                marker=settings.project_config_marker,
            ),
        ]
        self.extractors: dict[str, Extractor] = {
            extension: extractor for extractor in extractors for extension in extractor.extensions
        }

    @property
    def extensions(self) -> list[str]:
        """Extensions a folder walk picks up."""
        return sorted(
            extension
            for extension, extractor in self.extractors.items()
            if self.project_config_path or not isinstance(extractor, ProjectConfigExtractor)
        )

    def extractor_for(self, file: str | Path) -> Extractor:
        """Return the extractor registered for a file's extension.

        Raises:
            UnsupportedFileError: No extractor handles the extension.
        """
        extension = Path(file).suffix.lstrip(".").lower()
        extractor = self.extractors.get(extension)
        if extractor is None:
            raise UnsupportedFileError(str(file), extension)
        return extractor

    def extract_from_file(self, file: str | Path, category: str | None = None) -> TranslationCatalog:
        """Extract translations from one file.

        Raises:
            ScanRootError: The file does not exist or is a folder.
            UnsupportedFileError: No extractor handles the file.
            ExtractionError: The file could not be read or parsed.
        """
        path = os.path.realpath(file)
        if not os.path.isfile(path):
            raise ScanRootError(f"{file} doesn't exist or is a folder.", details={"path": str(file)})

        extractor = self.extractor_for(path)
        try:
            content = Path(path).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise ExtractionError(path, f"couldn't be opened: {e}") from e

        catalog = extractor.extract(content, path, category)
        log.debug("Extracted file", file=path, extractor=extractor.name, messages=len(catalog))
        return catalog

    def extract_from_files(self, files: Iterable[str | Path], category: str | None = None) -> ExtractionResult:
        """Extract and merge translations from many files.

        A file that fails to extract is logged and recorded in the result's
        failures; it contributes nothing and the remaining files still run.
        """
        start_time = time.perf_counter()
        result = ExtractionResult(catalog=TranslationCatalog(domain=category))

        for file in files:
            result.stats.files_scanned += 1
            try:
                catalog = self.extract_from_file(file, category)
            except ExtractionError as e:
                log.warning("Extraction failed", file=str(file), error=e.reason)
                result.failures.append(FileFailure(path=str(file), error=e.reason))
                result.stats.files_failed += 1
                continue
            result.catalog.absorb(catalog)

        result.stats.messages = len(result.catalog)
        result.stats.references = sum(len(t.references) for t in result.catalog)
        result.stats.duration_seconds = time.perf_counter() - start_time

        log.info(
            "Extraction complete",
            files=result.stats.files_scanned,
            messages=result.stats.messages,
            failed=result.stats.files_failed,
            duration=f"{result.stats.duration_seconds:.2f}s",
        )
        return result

    def extract_from_folder(
        self,
        path: str | Path,
        category: str | None = None,
        exclude: Iterable[str | Path] = (),
    ) -> ExtractionResult:
        """Walk a folder and extract translations from every supported file.

        Args:
            path: Folder to scan.
            category: Only keep messages of this category when given.
            exclude: Files to leave out (e.g. the catalog being updated).

        Raises:
            ScanRootError: ``path`` is not a folder.
            ConfigurationError: An ignore file cannot be read.
        """
        if not os.path.isdir(path):
            raise ScanRootError(f"{path} is not a folder.", details={"path": str(path)})

        files = list(self.find_files(path, exclude))
        log.info("Scanning folder", path=str(path), files=len(files))
        return self.extract_from_files(files, category)

    def extract(
        self,
        source: str | Path,
        category: str | None = None,
        exclude: Iterable[str | Path] = (),
    ) -> ExtractionResult:
        """Extract from a folder, or from a single file without ignore rules."""
        if os.path.isdir(source):
            return self.extract_from_folder(source, category, exclude)
        if os.path.isfile(source):
            return self.extract_from_files([source], category)
        raise ScanRootError(f"{source} doesn't exist.", details={"path": str(source)})

    def find_files(self, path: str | Path, exclude: Iterable[str | Path] = ()) -> Iterator[str]:
        """Yield the supported, non-ignored files below ``path`` in sorted order.

        Ignored directories are never descended into.
        """
        root = os.path.realpath(path)
        excluded = {os.path.realpath(file) for file in exclude}
        name_re = re.compile(r"^.+\.(" + "|".join(map(re.escape, self.extensions)) + r")$", re.IGNORECASE)
        ignore_filter = IgnoreFilter(root, self.ignore_filename)

        for dirpath, dirnames, filenames in os.walk(root):
            dirnames[:] = [
                name
                for name in sorted(dirnames)
                if not self._skip_name(name, directory=True)
                and not ignore_filter.is_ignored(os.path.join(dirpath, name))
            ]
            for name in sorted(filenames):
                file = os.path.join(dirpath, name)
                if self._skip_name(name, directory=False) or not name_re.match(name):
                    continue
                if file in excluded or ignore_filter.is_ignored(file):
                    log.debug("Skipping file", file=file)
                    continue
                yield file

    def _skip_name(self, name: str, *, directory: bool) -> bool:
        if self.ignore_vcs and directory and name in VCS_DIRECTORIES:
            return True
        return self.ignore_dot_files and name.startswith(".")
