"""Application logger.

Modules log through ``logging.getLogger(__name__)``; everything sits under
the ``paymesh`` namespace so one handler covers the package.
"""

import logging

logger = logging.getLogger("paymesh")

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = "INFO") -> logging.Logger:
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
    logger.setLevel(level.upper())
    return logger
