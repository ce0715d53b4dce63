import logging
import os

DEFAULT_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


def configure_logging(level: str | int | None = None) -> None:
    """Root logging setup for the command line entry point.

    ``TUMBLE_LOG_LEVEL`` is used when no level is given.
    """
    if level is None:
        level = os.environ.get("TUMBLE_LOG_LEVEL", "INFO")
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO
    logging.basicConfig(level=level, format=DEFAULT_FORMAT)
