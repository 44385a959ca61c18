"""
logging.py — Console logging for the Air Monitor backend

One line per record: `timestamp | level | logger | message`, on stderr, so
uvicorn and container log collectors pick it up unchanged.

Modules log ingestion failures, profile / password / settings changes and
retention pruning counts. Passwords, tokens and API keys are never logged.
"""

import logging

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

# Third-party loggers that are too chatty at the app's level
_NOISY_LOGGERS = {
    # passlib warns on every start when it cannot read the bcrypt build version
    "passlib": logging.ERROR,
}


def configure_logging(level: str = "INFO") -> None:
    """
    Install the root handler at `level` (settings.LOG_LEVEL). Called once by
    airmon.main at import; unknown level names fall back to INFO.
    """
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT
    )
    for name, noisy_level in _NOISY_LOGGERS.items():
        logging.getLogger(name).setLevel(noisy_level)

    logging.getLogger(__name__).info("Logging initialized with level %s", level)


def get_logger(name: str) -> logging.Logger:
    """Logger for an airmon module; pass `__name__`."""
    return logging.getLogger(name)
