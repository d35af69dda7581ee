from __future__ import annotations

import logging

from medstock.core.config import get_settings

_configured = False


def configure_logging(level: str | None = None) -> None:
    global _configured
    settings = get_settings()
    resolved = (level or settings.log_level).upper()
    if _configured:
        logging.getLogger().setLevel(resolved)
        return
    logging.basicConfig(level=resolved, format=settings.log_format)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    _configured = True
