"""
Logging setup for the bot process.

Call setup_logger('ladder_bot') once at startup; modules log through
logging.getLogger(__name__) and inherit its handlers.
"""

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

from ladder_bot.config import Config

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

# Third-party loggers that are chatty at INFO
_QUIET_LOGGERS = ('discord.http', 'discord.gateway', 'aiohttp.access', 'sqlalchemy.engine')


def setup_logger(name: str, log_dir: Optional[Union[str, Path]] = 'logs') -> logging.Logger:
    """
    Configure a logger with a stdout handler and a daily log file.

    Args:
        name: Logger name, usually the package name so every module logger
            below it is captured
        log_dir: Directory for ladder_bot_YYYYMMDD.log; None logs to stdout only

    Returns:
        The configured logger (unchanged if it already has handlers)
    """
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger

    level = logging.DEBUG if Config.DEBUG else logging.INFO
    logger.setLevel(level)
    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(level)
    console.setFormatter(formatter)
    logger.addHandler(console)

    if log_dir is not None:
        path = Path(log_dir)
        path.mkdir(parents=True, exist_ok=True)
        logfile = logging.FileHandler(
            path / f"ladder_bot_{datetime.now():%Y%m%d}.log",
            encoding='utf-8'
        )
        logfile.setLevel(logging.DEBUG)
        logfile.setFormatter(formatter)
        logger.addHandler(logfile)

    if not Config.DEBUG:
        for noisy in _QUIET_LOGGERS:
            logging.getLogger(noisy).setLevel(logging.WARNING)

    return logger
