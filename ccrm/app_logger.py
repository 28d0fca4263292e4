import logging
import os
from typing import Optional

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
_DEFAULT_LEVEL = os.getenv("CCRM_LOG_LEVEL", "INFO").upper()


def setup_logging(level: Optional[str] = None) -> logging.Logger:
    level_name = (level or _DEFAULT_LEVEL).upper()
    resolved = getattr(logging, level_name, logging.INFO)

    logger = logging.getLogger("ccrm")
    logger.setLevel(resolved)

    # Avoid duplicate console handlers
    if not any(isinstance(h, logging.StreamHandler) for h in logger.handlers):
        ch = logging.StreamHandler()
        ch.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(ch)
    for handler in logger.handlers:
        handler.setLevel(resolved)

    logger.propagate = False
    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    base = logging.getLogger("ccrm")
    return base.getChild(name) if name else base
