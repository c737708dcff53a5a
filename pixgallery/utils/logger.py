"""
Logging setup
"""
import logging
import sys
from typing import Optional, Union
import colorlog

def setup_logging(level: Union[int, str] = logging.INFO, log_file: Optional[str] = None):
    """
    Configure root logging with coloured console output

    Args:
        level: Logging level (int or name such as "DEBUG")
        log_file: Optional path of a plain-text log file
    """
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)

    console_formatter = colorlog.ColoredFormatter(
        '%(log_color)s%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S',
        log_colors={
            'DEBUG': 'cyan',
            'INFO': 'green',
            'WARNING': 'yellow',
            'ERROR': 'red',
            'CRITICAL': 'red,bg_white',
        }
    )

    # No colours in files
    file_formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(console_formatter)
    console_handler.setLevel(level)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setFormatter(file_formatter)
        file_handler.setLevel(level)
        root_logger.addHandler(file_handler)

    # Third-party libraries are noisy at INFO
    for noisy in ('aiohttp', 'asyncio', 'httpx', 'hpack'):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    logging.info(f"Logging configured (level: {logging.getLevelName(level)})")

def get_logger(name: str) -> logging.Logger:
    """
    Return a named logger

    Args:
        name: Logger name

    Returns:
        The logger
    """
    return logging.getLogger(name)

class LoggerMixin:
    """
    Per-class logger named after the defining module and class
    (e.g. "pixgallery.providers.rapidapi_image.RapidApiImageAdapter"),
    so it follows the level set on the "pixgallery" hierarchy
    """

    @property
    def logger(self) -> logging.Logger:
        if not hasattr(self, '_logger'):
            cls = self.__class__
            self._logger = logging.getLogger(f"{cls.__module__}.{cls.__name__}")
        return self._logger
