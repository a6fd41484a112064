from __future__ import annotations

import logging
import sys

LOGGER_NAME = "src.api"

_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


# PUBLIC_INTERFACE
def setup_logging(level: str = "INFO") -> logging.Logger:
    """
    Attach a single stderr handler to the api logger tree.

    Safe to call more than once: existing handlers installed here are replaced,
    so reloading the app does not duplicate output.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    for h in list(logger.handlers):
        if getattr(h, "_task_api_handler", False):
            logger.removeHandler(h)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(fmt=_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    handler._task_api_handler = True  # type: ignore[attr-defined]
    logger.addHandler(handler)
    return logger
