"""Custom exceptions for craft-translations."""


class CraftTranslationsError(Exception):
    """Base exception for all craft-translations errors."""

    def __init__(self, message: str, *, details: dict[str, object] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigurationError(CraftTranslationsError):
    """Raised when scan configuration (an ignore file) cannot be read."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(
            f'The ignore file "{path}" is not readable: {reason}',
            details={"path": path, "reason": reason},
        )


class ScanRootError(CraftTranslationsError):
    """Raised when a source path does not exist or has the wrong type."""


class UnsupportedFileError(CraftTranslationsError):
    """Raised when no extractor is registered for a file extension."""

    def __init__(self, path: str, extension: str) -> None:
        super().__init__(
            f"No matching extractor for {extension or '(no extension)'} found.",
            details={"path": path, "extension": extension},
        )


class ExtractionError(CraftTranslationsError):
    """Raised when a single file cannot be extracted.

    File-scoped: the orchestrator records it and moves on to the next file.
    """

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"{path}: {reason}", details={"path": path, "reason": reason})
        self.path = path
        self.reason = reason


class ExtractionParseError(ExtractionError):
    """Raised when a parser or tokenizer rejects a file's content."""


class CatalogFormatError(CraftTranslationsError):
    """Raised for unknown catalog formats or unreadable catalog files."""
