"""Logging configuration helpers."""

import logging

_PACKAGE_LOGGER = "nutrition_goals"


def configure_logging(level: int | str = logging.INFO) -> None:
    """Configure package logging with a single stream handler.

    Safe to call repeatedly; later calls only adjust the level.
    """
    logger = logging.getLogger(_PACKAGE_LOGGER)
    logger.setLevel(level.upper() if isinstance(level, str) else level)
    if logger.handlers:
        return
    handler = logging.StreamHandler()
    handler.setFormatter(
        logging.Formatter("%(asctime)s %(levelname)s: %(name)s: %(message)s")
    )
    logger.addHandler(handler)
    logger.propagate = False
