from __future__ import annotations

import logging
import sys

PROJECT_LOGGER = "bl808svd"


def setup_logging(level: str = "INFO", quiet: bool = False) -> logging.Logger:
    """Attach one stderr handler to the package logger and return it.

    Only the ``bl808svd`` logger is touched, so handlers installed on the
    root logger by an embedding application stay in place. Calling this
    again replaces the handler instead of adding a second one.
    """
    log = logging.getLogger(PROJECT_LOGGER)
    for h in list(log.handlers):
        log.removeHandler(h)

    lvl = getattr(logging, level.upper(), logging.INFO)
    log.setLevel(lvl)

    # stdout carries the extent report
    ch = logging.StreamHandler(sys.stderr)
    ch.setLevel(lvl)
    fmt = "[%(levelname)s] %(name)s: %(message)s" if not quiet else "%(message)s"
    ch.setFormatter(logging.Formatter(fmt))
    log.addHandler(ch)
    return log


def get_logger(name: str) -> logging.Logger:
    if name != PROJECT_LOGGER and not name.startswith(PROJECT_LOGGER + "."):
        name = f"{PROJECT_LOGGER}.{name}"
    return logging.getLogger(name)
