"""
Module-level structured logging.
"""

import logging
import sys

from backend.config import settings


def get_logger(name: str) -> logging.Logger:
    logger = logging.getLogger(name)

    if not logger.handlers:
        logger.setLevel(settings.LOG_LEVEL)

        fmt = logging.Formatter(
            "[%(asctime)s] %(levelname)-8s %(name)-25s  %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

        stream = sys.stderr if settings.LOG_STREAM == "stderr" else sys.stdout
        console = logging.StreamHandler(stream)
        console.setLevel(settings.LOG_LEVEL)
        console.setFormatter(fmt)
        logger.addHandler(console)

        if settings.LOG_FILE:
            file_handler = logging.FileHandler(settings.LOG_FILE, encoding="utf-8")
            file_handler.setLevel(logging.INFO)
            file_handler.setFormatter(fmt)
            logger.addHandler(file_handler)

    return logger
