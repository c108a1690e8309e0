"""Logging infrastructure.

Basic usage:
    import logging

    from happy_tree.infra.logging import configure_logging, get_lazy_logger

    configure_logging(level="DEBUG", json=False)

    logger = logging.getLogger(__name__)
    lazy_logger = get_lazy_logger(__name__)
    lazy_logger.debug(lambda: f"Expensive: {compute()}")  # Only runs if DEBUG enabled
"""

from happy_tree.infra.logging.config import configure_logging
from happy_tree.infra.logging.formatters import JSONFormatter
from happy_tree.infra.logging.lazy import LazyLoggerAdapter, get_lazy_logger

__all__ = [
    "JSONFormatter",
    "LazyLoggerAdapter",
    "configure_logging",
    "get_lazy_logger",
]
