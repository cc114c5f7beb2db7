"""Logging setup for litstage."""

import logging
from typing import Optional, Union

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def configure_logging(level: Union[int, str, None] = None, fmt: Optional[str] = None) -> logging.Logger:
    """
    Attach a stream handler to the package logger.
    
    Calling this more than once only updates the level.
    
    Args:
        level: Level name or number (defaults to WARNING)
        fmt: Optional log format string
        
    Returns:
        The ``litstage`` logger
    """
    if level is None:
        level = logging.WARNING
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.WARNING
    
    logger = logging.getLogger('litstage')
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(fmt or LOG_FORMAT))
        logger.addHandler(handler)
    logger.setLevel(level)
    return logger
