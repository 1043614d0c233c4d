from __future__ import annotations

import logging

from smart_pos.core.config import get_settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str | None = None) -> None:
    settings = get_settings()
    resolved = (level or settings.log_level).upper()
    logging.basicConfig(level=resolved, format=LOG_FORMAT)
    logging.getLogger("smart_pos").setLevel(resolved)
    # urllib3 (pulled in by minio) is chatty at debug level
    logging.getLogger("urllib3").setLevel(max(logging.getLevelName(resolved), logging.INFO))
