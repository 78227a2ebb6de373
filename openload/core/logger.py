from __future__ import annotations

import logging
from pathlib import Path

from openload.core.paths.global_paths import LOG_FILE

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

logger = logging.getLogger("openload")


def setup_logging(level: int = logging.INFO, log_file: Path | None = None) -> Path | None:
    """Send the ``openload`` logger to a file. Returns the file used, if any."""
    target = log_file if log_file is not None else LOG_FILE.path
    logger.setLevel(level)

    for handler in list(logger.handlers):
        if isinstance(handler, logging.FileHandler):
            logger.removeHandler(handler)
            handler.close()

    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(target, encoding="utf-8")
    except OSError:
        logger.addHandler(logging.NullHandler())
        return None

    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    return target
