import logging

from fitness_gh.db.session import engine
from fitness_gh.db.base import Base
import fitness_gh.db.models  # noqa: F401  registers every table on Base.metadata

logger = logging.getLogger(__name__)


def init_db(bind=engine):
    """Create any missing tables. Used when migrations are not run at startup."""
    Base.metadata.create_all(bind=bind)
    logger.info("Database tables ensured")
