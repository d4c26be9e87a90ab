"""
Uniqueness collaborator used by `unique:table.column` rules.

The rule fails when the value is already stored: `exists()` answers True.
Store failures other than "no row" raise UniquenessCheckError, which fails
the whole validation call instead of a single field.
"""

import logging
import re
from typing import Any, Optional, Protocol, Union, runtime_checkable

from sqlalchemy import column, create_engine, literal_column, select, table
from sqlalchemy.engine import URL, Engine
from sqlalchemy.exc import SQLAlchemyError

from .config_loader import DRIVER_MYSQL, DRIVER_POSTGRES, DRIVER_SQLITE, DatabaseConfig
from .exceptions import ConfigurationError, UniquenessCheckError

logger = logging.getLogger(__name__)

_WORD_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")

DEFAULT_PORTS = {DRIVER_POSTGRES: 5432, DRIVER_MYSQL: 3306}


def snake_case(name: str) -> str:
    """
    Convert a camelCase or PascalCase identifier to snake_case.

    Example: "emailAddress" -> "email_address", "HTTPStatus" -> "http_status"
    """
    return _WORD_BOUNDARY.sub("_", name).lower()


@runtime_checkable
class UniquenessChecker(Protocol):
    def exists(self, table_column: str, value: Any) -> bool:
        """True when `value` is already stored in `table.column`."""
        ...


class SqlUniquenessChecker:
    """Answers uniqueness lookups with a SELECT against a SQL database."""

    def __init__(self, engine_or_url: Union[Engine, str, URL]):
        """
        Args:
            engine_or_url: SQLAlchemy Engine, or a database URL to create one
        """
        if isinstance(engine_or_url, Engine):
            self.engine = engine_or_url
        else:
            self.engine = create_engine(engine_or_url, pool_pre_ping=True)

    @classmethod
    def from_database_config(cls, db: DatabaseConfig) -> "SqlUniquenessChecker":
        """
        Build a checker from connection settings.

        Raises:
            ConfigurationError: If the driver is not supported
        """
        return cls(database_url(db))

    def exists(self, table_column: str, value: Any) -> bool:
        """
        Look a value up in `table.column`.

        The column name is converted to snake_case before querying.

        Raises:
            ValueError: If table_column is not a dotted pair
            UniquenessCheckError: If the query fails
        """
        if "." not in table_column:
            raise ValueError(f"Expected table.column, got '{table_column}'")
        table_name, column_name = table_column.split(".", 1)
        db_column = snake_case(column_name)

        query = (
            select(literal_column("1"))
            .select_from(table(table_name))
            .where(column(db_column) == value)
            .limit(1)
        )
        try:
            with self.engine.connect() as conn:
                row = conn.execute(query).first()
        except SQLAlchemyError as e:
            logger.error(
                "Uniqueness lookup failed",
                extra={"table": table_name, "column": db_column, "error": str(e)},
            )
            raise UniquenessCheckError(
                f"Uniqueness lookup on {table_name}.{db_column} failed: {e}"
            ) from e
        return row is not None

    def dispose(self) -> None:
        """Release pooled connections."""
        self.engine.dispose()


def database_url(db: DatabaseConfig) -> URL:
    """
    Build the SQLAlchemy URL for connection settings.

    postgres uses psycopg2 (sslmode defaults to "disable"), mysql uses
    PyMySQL, sqlite treats `name` as the database file path.

    Raises:
        ConfigurationError: If the driver is not supported
    """
    driver = (db.driver or "").lower()
    port: Optional[int] = db.port or DEFAULT_PORTS.get(driver)

    if driver == DRIVER_POSTGRES:
        return URL.create(
            "postgresql+psycopg2",
            username=db.username or None,
            password=db.password or None,
            host=db.host,
            port=port,
            database=db.name,
            query={"sslmode": db.ssl_mode or "disable"},
        )
    if driver == DRIVER_MYSQL:
        return URL.create(
            "mysql+pymysql",
            username=db.username or None,
            password=db.password or None,
            host=db.host,
            port=port,
            database=db.name,
        )
    if driver == DRIVER_SQLITE:
        return URL.create("sqlite", database=db.name or None)

    raise ConfigurationError(f"Unsupported database driver: {db.driver!r}")
