"""Initialize database tables."""
from typing import Optional
from sqlmodel import SQLModel
from sqlalchemy.engine import Engine
import logging

from taskboard.models.task import Task  # noqa: F401  registers the table
from taskboard.db import config

logger = logging.getLogger(__name__)


def init_db(engine: Optional[Engine] = None) -> None:
    """Create all tables in the database."""
    logger.info("[DB INIT] Creating all tables...")
    SQLModel.metadata.create_all(engine or config.engine)
    logger.info("[DB INIT] Tables created successfully.")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    init_db()
