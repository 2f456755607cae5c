"""
Centralized logging configuration for the reviews service.
"""
import logging
import sys
from typing import Optional

# Logger used by core.utils.logging.StructuredLogger; its records are already JSON
STRUCTURED_LOGGER_NAME = "reviews"


def setup_logging(
    level: str = "INFO",
    log_format: Optional[str] = None
) -> None:
    """
    Configure application-wide logging.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: Custom format for plain (non-structured) loggers
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    logging.basicConfig(
        level=numeric_level,
        format=log_format or '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[logging.StreamHandler(sys.stdout)]
    )

    # Structured entries carry their own timestamp and level, print them bare
    structured = logging.getLogger(STRUCTURED_LOGGER_NAME)
    structured.setLevel(numeric_level)
    if not structured.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter('%(message)s'))
        structured.addHandler(handler)
    structured.propagate = False

    # SQL echo is controlled by the engine, not the root logger
    logging.getLogger('sqlalchemy').setLevel(logging.WARNING)
