from __future__ import annotations

import logging

from app.core.settings import Settings


def configure_logging(settings: Settings) -> None:
    level_name = (settings.log_level or "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)

    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )

    for name in ("uvicorn.error", "uvicorn.access", "app"):
        logging.getLogger(name).setLevel(level)

    # The SDK logs every HTTP round trip at INFO.
    logging.getLogger("httpx").setLevel(max(level, logging.WARNING))
