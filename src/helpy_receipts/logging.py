"""Package logging.

Every module logs through a child of the ``helpy_receipts`` logger. Handlers
are attached once, to that package logger, so redirecting or silencing the
library means touching a single logger.
"""

import logging
import os
from typing import Optional

ROOT_NAME = "helpy_receipts"
FORMAT = "%(asctime)s [%(name)s] %(levelname)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_LEVELS = {
    "CRITICAL": logging.CRITICAL,
    "ERROR": logging.ERROR,
    "WARN": logging.WARNING,
    "WARNING": logging.WARNING,
    "INFO": logging.INFO,
    "DEBUG": logging.DEBUG,
}


def _coerce_level(value: Optional[str]) -> int:
    if isinstance(value, str):
        return _LEVELS.get(value.upper().strip(), logging.INFO)
    return logging.INFO


def configured_level() -> int:
    """HELPY_LOG_LEVEL wins over the generic LOG_LEVEL; INFO otherwise."""
    return _coerce_level(os.environ.get("HELPY_LOG_LEVEL") or os.environ.get("LOG_LEVEL"))


def _configure_root() -> logging.Logger:
    root = logging.getLogger(ROOT_NAME)
    if getattr(root, "_helpy_configured", False):
        return root

    level = configured_level()
    root.setLevel(level)
    formatter = logging.Formatter(fmt=FORMAT, datefmt=DATE_FORMAT)

    sh = logging.StreamHandler()
    sh.setFormatter(formatter)
    root.addHandler(sh)

    log_file = os.environ.get("LOG_FILE")
    if log_file:
        try:
            fh = logging.FileHandler(log_file, encoding="utf-8")
            fh.setFormatter(formatter)
            root.addHandler(fh)
        except OSError:
            root.warning(f"LOG_FILE {log_file!r} could not be opened; logging to stderr only")

    root.propagate = False
    setattr(root, "_helpy_configured", True)
    return root


def get_logger(name: str) -> logging.Logger:
    """Return the ``helpy_receipts.<name>`` logger; records go to the package root's handlers."""
    _configure_root()
    return logging.getLogger(f"{ROOT_NAME}.{name}")
