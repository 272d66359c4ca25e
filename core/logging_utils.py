"""
Simple logging helper shared by the engine and the drivers.
"""

import logging

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s: %(message)s"

ENGINE_LOGGERS = ("core.online_optimizer", "evaluation.batch_vs_online")


def resolve_level(level: str) -> int:
    """Map a level name such as 'debug' to its numeric value; unknown names give INFO."""
    value = getattr(logging, str(level).upper(), None)
    return value if isinstance(value, int) else logging.INFO


def get_logger(name: str, level: str = "INFO") -> logging.Logger:
    """Create a logger with a uniform format.

    Parameters
    ----------
    name : str
        Logger name, usually ``__name__`` of the calling module.
    level : str, default='INFO'
        Logging level name (e.g. 'DEBUG', 'INFO').  Unknown names fall
        back to INFO.

    Returns
    -------
    logging.Logger
    """
    logger = logging.getLogger(name)
    if not logger.handlers:
        logger.setLevel(resolve_level(level))
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
    return logger


def set_level(level: str, *names: str) -> int:
    """Apply one level to the named loggers and every engine logger.

    Returns the numeric level that was applied.
    """
    value = resolve_level(level)
    for name in (*names, *ENGINE_LOGGERS):
        logging.getLogger(name).setLevel(value)
    return value
