"""
Database initialization script.
"""
import logging

from tripledger.core.config import settings
from tripledger.core.logging import setup_logging
from tripledger.db.session import init_db

logger = logging.getLogger(__name__)


if __name__ == "__main__":
    setup_logging(settings.LOG_LEVEL, debug=settings.DEBUG)
    logger.info(f"Initializing database at {settings.DATABASE_URL}...")
    init_db()
    logger.info("Database initialized successfully!")
