"""Service bootstrap entrypoint.

Runs the bootstrap sequence for the variant named by SERVICE_VARIANT (or the
first argument) without serving, so deploy pipelines can fail before
traffic is shifted. Exits non-zero on any fatal startup error.
"""
from __future__ import annotations

import sys
from pathlib import Path

# Add src directory to python path if running as script
if __name__ == "__main__":
    src_path = Path(__file__).parent
    if str(src_path) not in sys.path:
        sys.path.insert(0, str(src_path))

from core.bootstrap import bootstrap_or_exit
from core.config import get_settings
from core.exceptions import ConfigurationError
from core.logging_config import get_logger, setup_logging
from core.variants import get_variant

LOGGER = get_logger(__name__)


def main(argv: list[str] | None = None) -> None:
    """Run the bootstrap process."""
    argv = sys.argv[1:] if argv is None else argv
    try:
        settings = get_settings()
    except ConfigurationError:
        # Each malformed value was already logged at CRITICAL
        sys.exit(1)
    setup_logging(level=settings.log_level, json_format=settings.log_format == "json")

    try:
        capabilities = get_variant(argv[0] if argv else settings.service_variant)
    except ConfigurationError as exc:
        LOGGER.critical("%s", exc)
        sys.exit(1)

    LOGGER.info("Starting %s service bootstrap...", capabilities.name)
    result = bootstrap_or_exit(capabilities, settings)
    result.registry.database.dispose()
    LOGGER.info("Bootstrap completed: %s", result.outcome.status.value)


if __name__ == "__main__":
    main()
