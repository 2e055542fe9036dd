import logging
from logging.handlers import RotatingFileHandler

from .. import config

_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def get_logger(name="sales_orders"):
    logger = logging.getLogger(name)
    if not logger.handlers:
        logger.setLevel(getattr(logging, config.LOG_LEVEL, logging.INFO))
        ch = logging.StreamHandler()
        ch.setFormatter(logging.Formatter(_FORMAT))
        logger.addHandler(ch)
    return logger


def enable_file_logging(name="sales_orders", log_dir=None):
    """
    Attach a rotating file handler under `log_dir` (defaults to config.LOG_DIR).
    Safe to call repeatedly; falls back to stream-only logging when the
    directory cannot be created.
    """
    logger = get_logger(name)
    if any(isinstance(h, RotatingFileHandler) for h in logger.handlers):
        return logger
    target = log_dir or config.LOG_DIR
    try:
        target.mkdir(parents=True, exist_ok=True)
        fh = RotatingFileHandler(
            str(target / config.LOG_FILE), maxBytes=1_000_000, backupCount=3,
            encoding="utf-8", delay=True,
        )
    except OSError as e:
        logger.warning("File logging disabled (%s): %s", target, e)
        return logger
    fh.setFormatter(logging.Formatter(_FORMAT))
    logger.addHandler(fh)
    return logger
