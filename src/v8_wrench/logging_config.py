import logging
import os

from rich.console import Console
from rich.logging import RichHandler


def setup_logging(quiet: bool = False, debug: bool | None = None) -> logging.Logger:
    """Send the ``v8_wrench`` trace and diagnostics to stderr through rich.

    ``debug`` defaults to the ``WRENCH_DEBUG`` environment variable.
    """
    if debug is None:
        debug = os.environ.get("WRENCH_DEBUG", "").lower() in ("true", "1", "yes")

    level = logging.DEBUG if debug else logging.WARNING if quiet else logging.INFO

    logger = logging.getLogger("v8_wrench")
    logger.setLevel(level)
    logger.handlers.clear()
    handler = RichHandler(
        console=Console(stderr=True),
        show_time=False,
        show_path=debug,
        markup=False,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    return logger
