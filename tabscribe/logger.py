"""Root logger setup shared by the tabscribe CLI and library callers."""

import logging
import sys
from typing import TextIO


def setup_logger(level: int = logging.INFO, stream: TextIO = sys.stderr) -> None:
    """
    Replace the root handlers with one stream handler at ``level``.

    Logs go to stderr unless ``stream`` says otherwise, so command output
    on stdout stays clean.
    """
    logger = logging.getLogger()

    if logger.hasHandlers():
        logger.handlers.clear()

    logger.setLevel(level)

    handler = logging.StreamHandler(stream)
    handler.setLevel(level)

    # Debug output carries module name and line number
    if level == logging.DEBUG:
        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s (%(filename)s:%(lineno)d)"
        )
    else:
        formatter = logging.Formatter("%(message)s")

    handler.setFormatter(formatter)
    logger.addHandler(handler)
