"""
Logging setup for the voice order service.

`main.py` calls `setup_logging()` once, right after loading `.env`. The level
comes from LOG_LEVEL (DEBUG/INFO/WARNING/ERROR/CRITICAL, default INFO).
Utterances and delivery details are only logged at DEBUG.
"""
import logging
import os
import sys

VALID_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

# Chatty third-party loggers that are only useful when debugging
NOISY_LOGGERS = ["httpx", "httpcore", "openai", "urllib3", "sqlalchemy.engine"]


def setup_logging(level: str = None) -> None:
    """
    Configure the root handler and the `voice_order` logger.

    Args:
        level: Explicit level name. Falls back to LOG_LEVEL, then INFO;
               an unknown name also means INFO.
    """
    if level is None:
        level = os.getenv("LOG_LEVEL", "INFO")
    level = level.upper()

    if level not in VALID_LEVELS:
        level = "INFO"

    numeric_level = getattr(logging, level)

    logging.basicConfig(
        level=numeric_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stdout,
    )

    logging.getLogger("voice_order").setLevel(numeric_level)

    if level != "DEBUG":
        for name in NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger(__name__).debug("Logging configured at %s level", level)
