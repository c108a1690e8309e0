"""Logging configuration setup.

Installs a single console handler on the root logger via dictConfig.
Library loggers (``repository.*``, ``hierarchy.*``, ``happy_tree.*``)
propagate to it. Applications that already configure logging should
simply not call ``configure_logging``.
"""

from __future__ import annotations

import logging
import logging.config
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from happy_tree.core.settings.logs import LoggingSettings

logger = logging.getLogger(__name__)
_LOGGING_INITIALIZED = False


def configure_logging(
    settings: LoggingSettings | None = None,
    *,
    level: str | None = None,
    json: bool | None = None,
    force: bool = False,
) -> None:
    """Configure root logging once.

    Args:
        settings: Logging settings. Loaded via get_logging_settings() if omitted.
        level: Override for ``settings.level``.
        json: Override for ``settings.json_logs``.
        force: Reconfigure even if logging was already initialized.

    Example:
        from happy_tree.infra.logging import configure_logging

        configure_logging(level="DEBUG", json=False)
    """
    global _LOGGING_INITIALIZED

    if _LOGGING_INITIALIZED and not force:
        return

    if settings is None:
        from happy_tree.core.settings import get_logging_settings

        settings = get_logging_settings()

    log_level = (level or settings.level).upper()
    use_json = settings.json_logs if json is None else json

    logging.config.dictConfig(
        _build_config(
            log_level=log_level,
            json_logs=use_json,
            console_enabled=settings.console_enabled,
        ),
    )
    _LOGGING_INITIALIZED = True
    logger.debug("Logging configured: level=%s json=%s", log_level, use_json)


def _build_config(
    *,
    log_level: str,
    json_logs: bool,
    console_enabled: bool,
) -> dict[str, Any]:
    formatters: dict[str, Any] = {
        "json": {"()": "happy_tree.infra.logging.formatters.JSONFormatter"},
        "plain": {
            "format": "%(asctime)s %(levelname)-8s %(name)s: %(message)s",
        },
    }
    handlers: dict[str, Any] = {}
    if console_enabled:
        handlers["console"] = {
            "class": "logging.StreamHandler",
            "stream": "ext://sys.stderr",
            "formatter": "json" if json_logs else "plain",
            "level": log_level,
        }

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": formatters,
        "handlers": handlers,
        "root": {"level": log_level, "handlers": list(handlers)},
    }


__all__ = ["configure_logging"]
