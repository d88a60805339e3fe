# =======================================================================================
# doorcheck/database.py - Database Management
# =======================================================================================
import logging
from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Connection, Engine, make_url
from sqlalchemy.pool import QueuePool

from .config import Config
from .models.tables import metadata

logger = logging.getLogger(__name__)


class DatabaseManager:
    """Manages database connections and transactions."""

    def __init__(self, config: Config, engine: Optional[Engine] = None):
        if engine is None:
            engine = create_engine(config.DB_URL, **self._engine_options(config))
        self.engine: Engine = engine

    @staticmethod
    def _engine_options(config: Config) -> dict:
        """Pool and isolation settings apply to server databases only."""
        options = {"pool_pre_ping": True, "future": True}
        if make_url(config.DB_URL).get_backend_name() != "sqlite":
            options.update(
                poolclass=QueuePool,
                pool_size=config.DB_POOL_SIZE,
                max_overflow=config.DB_MAX_OVERFLOW,
                isolation_level="READ COMMITTED",
            )
        return options

    @contextmanager
    def get_connection(self) -> Iterator[Connection]:
        """Connection inside a transaction; commits on exit, rolls back on error."""
        with self.engine.begin() as conn:
            yield conn

    def fetch_one(self, query: str, params: dict = None):
        """Fetch a single result."""
        with self.get_connection() as conn:
            result = conn.execute(text(query), params or {})
            return result.mappings().first()

    def create_tables(self) -> None:
        """Create any missing tables and indexes."""
        logger.info("Creating missing tables")
        metadata.create_all(self.engine)

    def dispose(self) -> None:
        self.engine.dispose()
