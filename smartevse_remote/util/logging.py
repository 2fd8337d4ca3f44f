import logging
import sys


def setup_logging(debug: bool = False, quiet: bool = False):
    """Root logger setup for the test suite."""
    level = logging.DEBUG if debug else logging.INFO
    if quiet:
        level = logging.WARNING

    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        stream=sys.stdout,
        force=True,
    )
    return logging.getLogger("smartevse")


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(f"smartevse.{name}")
