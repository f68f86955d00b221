"""
Logging setup

The package logs through loguru's global ``logger``. ``configure_logging``
replaces the default sink once, with a stderr sink and an optional daily
log file.
"""

import os
import sys
from typing import Optional

from loguru import logger

_LOGGER_CONFIGURED = False


def configure_logging(
    level: str = "INFO",
    log_dir: Optional[str] = None,
    rotation: str = "1 day",
    retention: str = "30 days",
    force: bool = False,
) -> None:
    """
    Configure loguru sinks for training runs

    Parameters:
    -----------
    level : str, default="INFO"
        Minimum level of both sinks
    log_dir : str, optional
        Directory of the ``{time:YYYY-MM-DD}.log`` files; no file sink if None
    rotation : str, default="1 day"
        loguru rotation policy of the file sink
    retention : str, default="30 days"
        loguru retention policy of the file sink
    force : bool, default=False
        Reconfigure even if logging was already configured
    """
    global _LOGGER_CONFIGURED
    if _LOGGER_CONFIGURED and not force:
        return

    logger.remove()
    logger.add(
        sys.stderr,
        level=level,
        format="{time:YYYY-MM-DD HH:mm:ss} | {level} | {message}",
    )

    if log_dir is not None:
        os.makedirs(log_dir, exist_ok=True)
        logger.add(
            sink=os.path.join(log_dir, "{time:YYYY-MM-DD}.log"),
            rotation=rotation,
            retention=retention,
            level=level,
            format="{time:YYYY-MM-DD HH:mm:ss} | {level} | {name}:{function} | {message}",
            enqueue=True,  # safe with worker threads
            backtrace=True,
            diagnose=False,
        )

    _LOGGER_CONFIGURED = True
    logger.debug("Logging configured")
