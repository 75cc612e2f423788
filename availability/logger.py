import logging
import sys

from availability.settings import settings


logging_formatter = logging.Formatter("[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s")


def setup_logging() -> None:
    """Attach a stdout handler to the package logger. Called once by the host at startup."""

    logger = logging.getLogger("availability")
    logger.setLevel(settings.log_level.upper())
    if not any(getattr(h, "_availability", False) for h in logger.handlers):
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging_formatter)
        handler._availability = True  # type: ignore[attr-defined]
        logger.addHandler(handler)


def get_logger(name: str) -> logging.Logger:
    logger = logging.getLogger(name)
    logger.setLevel(settings.log_level.upper())
    return logger
