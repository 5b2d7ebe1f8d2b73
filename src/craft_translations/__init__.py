"""Translation string extraction for Craft CMS projects.

Scans PHP, JavaScript, Twig and project-config sources for translatable
messages and collects them into de-duplicated, sortable catalogs.
"""

import structlog

# Configure logging FIRST before any other modules use structlog
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="%H:%M:%S"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.dev.ConsoleRenderer(colors=False, pad_event=30),
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=False,
)

from craft_translations.catalog import MergeStrategy, Translation, TranslationCatalog  # noqa: E402
from craft_translations.config import Settings  # noqa: E402
from craft_translations.pipeline import ExtractionResult, TranslationExtractor  # noqa: E402

__version__ = "0.1.0"
__all__ = [
    "ExtractionResult",
    "MergeStrategy",
    "Settings",
    "Translation",
    "TranslationCatalog",
    "TranslationExtractor",
    "__version__",
]
