"""
Base Repository

Provides the foundation for all repository classes: read_df(), fetch_one()
and write() over the shared SQLAlchemy engine, all recovering from a
missing schema.

Design Principles:
1. Dependency Injection - Receives DatabaseConfig, doesn't create it
2. Missing-schema Recovery - Creates the tables and retries once
3. Consistent interface - All repositories inherit this pattern
"""

from typing import Any, Callable, Mapping, Optional, TypeVar
import logging
import pandas as pd
from sqlalchemy import text

from config import DatabaseConfig
from logging_config import setup_logging

logger = setup_logging(__name__)

T = TypeVar("T")


def _as_clause(query: Any):
    return text(query) if isinstance(query, str) else query


class BaseRepository:
    """
    Base class for all repository implementations.

    Every query runs through _with_schema_recovery():
    1. Run the statement
    2. On "no such table" -> db.init_schema() + retry once
    3. Any other error is re-raised

    Attributes:
        db: DatabaseConfig instance for database access
    """

    def __init__(self, db: DatabaseConfig, logger_instance: Optional[logging.Logger] = None):
        """
        Initialize repository with database configuration.

        Args:
            db: DatabaseConfig instance
            logger_instance: Optional logger (defaults to module logger)
        """
        self.db = db
        self._logger = logger_instance or logger

    def _with_schema_recovery(self, run: Callable[[], T]) -> T:
        try:
            return run()
        except Exception as e:
            if "no such table" not in str(e).lower():
                raise
            self._logger.warning(
                f"Schema missing on {self.db.alias} ('{e}'); creating tables and retrying"
            )
            self.db.init_schema()
            return run()

    def read_df(self, query: Any, params: Mapping[str, Any] | None = None) -> pd.DataFrame:
        """Execute a read-only SQL query and return a DataFrame.

        Args:
            query: SQL query string or SQLAlchemy TextClause
            params: Optional query parameters

        Returns:
            DataFrame with query results
        """
        clause = _as_clause(query)

        def _run() -> pd.DataFrame:
            with self.db.engine.connect() as conn:
                return pd.read_sql_query(clause, conn, params=params)

        return self._with_schema_recovery(_run)

    def fetch_one(self, query: Any, params: Mapping[str, Any] | None = None) -> Optional[dict]:
        """Execute a query and return the first row as a dict, or None."""
        clause = _as_clause(query)

        def _run() -> Optional[dict]:
            with self.db.engine.connect() as conn:
                row = conn.execute(clause, dict(params or {})).mappings().first()
                return dict(row) if row is not None else None

        return self._with_schema_recovery(_run)

    def write(self, statement: Any, params: Mapping[str, Any] | None = None) -> int:
        """Execute a write statement in its own transaction; returns the row count."""
        clause = _as_clause(statement)

        def _run() -> int:
            with self.db.engine.begin() as conn:
                return conn.execute(clause, dict(params or {})).rowcount

        return self._with_schema_recovery(_run)
