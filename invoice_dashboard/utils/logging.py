"""
Logging utilities for the invoice dashboard backend.

Provides standardized logger configuration following the privacy rules below.

RULES:
- NEVER log passwords, access tokens, refresh tokens or API keys
- NEVER log whole form submissions (they may carry credentials)
- NEVER log database error details back to the user, only to the log

Acceptable logging:
- High-level events (e.g., "Invoice created", "Page revalidated")
- Identifiers (invoice_id, customer_id) and field names that failed validation
- Auth failure categories (e.g., "invalid_credentials"), never the password
"""

import logging
from typing import Optional


def get_logger(name: str, level: Optional[int] = None) -> logging.Logger:
    """
    Get a configured logger for the specified module.

    Args:
        name: Module name (typically __name__)
        level: Optional logging level (defaults to INFO)

    Returns:
        Configured logger instance

    Usage:
        >>> from invoice_dashboard.utils.logging import get_logger
        >>> logger = get_logger(__name__)
        >>> logger.info("High-level event occurred")
    """
    logger = logging.getLogger(name)

    if level is None:
        level = logging.INFO

    logger.setLevel(level)

    # Add handler if not already configured (avoid duplicate handlers)
    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter(
            fmt='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    return logger
