# pamstream - Logging setup

import logging
from typing import Optional, Union

from pamstream.core.config import Config

logger = logging.getLogger(__name__)


def configure_logging(level: Optional[Union[int, str]] = None) -> None:
    """Configure root logging once, from Config unless a level is given."""
    if level is None:
        level = Config.LOG_LEVEL
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.WARNING
    logging.basicConfig(level=level, format=Config.LOG_FORMAT)
    logging.getLogger('pamstream').setLevel(level)
    logger.debug(f"Logging configured at {logging.getLevelName(level)}")
