"""Process-wide logging setup."""

from __future__ import annotations

import logging
from logging.config import dictConfig

from planbee.core.config import Settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(settings: Settings) -> None:
    level = "DEBUG" if settings.debug else settings.logging.level.upper()
    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "default": {"format": LOG_FORMAT},
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "default",
                },
            },
            "loggers": {
                "planbee": {"handlers": ["console"], "level": level, "propagate": False},
            },
        }
    )

    if settings.uses_fallback_secret:
        logging.getLogger("planbee.core").warning(
            "SECURITY__SECRET_KEY is not set; using the development fallback secret (environment=%s)",
            settings.environment,
        )


__all__ = ["configure_logging"]
