"""Create all tables. Run on app startup."""
import logging

from pharmatrace.db.base import Base
from pharmatrace.db.session import engine
from pharmatrace.models import profile, medicine, batch, batch_status_history  # noqa: F401 - register models

logger = logging.getLogger(__name__)


def init_db(bind=None):
    Base.metadata.create_all(bind=bind or engine)
    logger.info("Database tables ensured")
