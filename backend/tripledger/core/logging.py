"""
Logging configuration.
"""
import logging
from typing import Optional

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(level: Optional[str] = None, debug: bool = False) -> None:
    """Configure the root logger with a single stream handler."""
    if debug:
        level = "DEBUG"
    level = level or "INFO"

    root = logging.getLogger()
    root.setLevel(level.upper())

    # Avoid stacking handlers when the app is created more than once (tests, reload)
    if not any(getattr(h, "_tripledger", False) for h in root.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._tripledger = True
        root.addHandler(handler)

    # SQLAlchemy engine logging is driven by DB_ECHO
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
