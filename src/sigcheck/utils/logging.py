import logging
import os
import sys

ROOT_LOGGER = "sigcheck"


def get_logger(name: str = ROOT_LOGGER):
    """Return a logger under the "sigcheck" tree; the root gets a stdout handler once."""
    root = logging.getLogger(ROOT_LOGGER)
    if not root.handlers:
        h = logging.StreamHandler(sys.stdout)
        fmt = logging.Formatter("[%(asctime)s] %(levelname)s %(name)s %(message)s")
        h.setFormatter(fmt)
        root.addHandler(h)
        level = os.getenv("SIGCHECK_LOG_LEVEL", "INFO").upper()
        root.setLevel(getattr(logging, level, logging.INFO))
    if name == ROOT_LOGGER or name.startswith(ROOT_LOGGER + "."):
        return logging.getLogger(name)
    return root.getChild(name)
