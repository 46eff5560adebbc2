"""
Logging configuration and utilities
"""

import logging
import sys
from typing import Optional
import structlog

from ..core.config import config


def configure_logging(
    level: Optional[str] = None,
    format_json: bool = True
) -> None:
    """Configure application logging

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR)
        format_json: Whether to use JSON formatting
    """
    log_level = level or config.log_level

    # Configure stdlib logging
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        stream=sys.stdout,
        format="%(message)s" if format_json else "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    # Configure structlog
    processors = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if format_json:
        processors.extend([
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.JSONRenderer()
        ])
    else:
        processors.extend([
            structlog.processors.TimeStamper(fmt="%Y-%m-%d %H:%M:%S"),
            structlog.dev.ConsoleRenderer()
        ])

    structlog.configure(
        processors=processors,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def mask_secret(
    value: Optional[str],
    visible_start: int = 6,
    visible_end: int = 4
) -> Optional[str]:
    """Mask a secret for logs, keeping only its first and last characters

    Args:
        value: Secret value
        visible_start: Leading characters to keep
        visible_end: Trailing characters to keep

    Returns:
        Masked value, or None when no value was given
    """
    if not value:
        return None
    trimmed = value.strip()
    if len(trimmed) <= visible_start + visible_end:
        return "*" * len(trimmed)
    return f"{trimmed[:visible_start]}...{trimmed[-visible_end:]}"
