import logging
import sys
from typing import Optional

from v20.config.settings import settings

# Library logger: records propagate to whatever the host application set up
logger = logging.getLogger("v20")
logger.addHandler(logging.NullHandler())


def setup_logging(name: str = "v20", level: Optional[str] = None) -> logging.Logger:
    """
    Opt-in console logging for scripts and notebooks.
    Attaches one stdout handler to `name`; LOG_LEVEL from settings unless `level` is given.
    """
    target = logging.getLogger(name)

    if any(not isinstance(h, logging.NullHandler) for h in target.handlers):
        return target

    if level is None:
        level = settings.LOG_LEVEL if settings else "INFO"
    numeric = getattr(logging, level.upper(), logging.INFO)
    target.setLevel(numeric)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(numeric)
    handler.setFormatter(logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    ))

    target.addHandler(handler)
    return target
