from __future__ import annotations

import os
import sys

from loguru import logger

LOG_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level} | {extra[tool]} | {message}"

_sink_ids: list[int] = []


def setup_logger(level: str = "INFO", log_path: str | None = None, tool: str = "business-tools"):
    """Replace loguru's default sink with a stderr sink and an optional rotating file sink."""
    global _sink_ids

    for sink_id in _sink_ids:
        logger.remove(sink_id)
    if not _sink_ids:
        logger.remove()
    _sink_ids = []

    logger.configure(extra={"tool": tool})
    _sink_ids.append(logger.add(sys.stderr, level=level.upper(), format=LOG_FORMAT, colorize=True))
    if log_path:
        directory = os.path.dirname(log_path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        _sink_ids.append(
            logger.add(log_path, rotation="10 MB", retention="7 days", level=level.upper(), format=LOG_FORMAT)
        )
    return logger.bind(tool=tool)
