# lotbook/utils/logging.py

import logging
import sys

ROOT_LOGGER = "lotbook"
_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str = "INFO") -> logging.Logger:
    """
    Single stream handler on the package root logger.
    Safe to call more than once (create_app in tests); later calls only set the level.
    """
    root = logging.getLogger(ROOT_LOGGER)
    root.setLevel(str(level or "INFO").upper())

    if not root.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        root.addHandler(handler)

    return root


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")
