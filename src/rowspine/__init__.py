"""rowspine -- Active-record access to relational rows.

Manifesto:
    Application code should be able to say "the row of ``orders`` whose id
    is 42" and then read fields, stage changes and write them back, without
    building SQL by hand or caring whether MySQL or SQLite answers.

    - **Lazy reads:** A row is fetched the first time it is needed, once
    - **Buffered writes:** ``set()`` stages, ``create()``/``update()`` persist
    - **Named connections:** A registry maps names to open connections
    - **Schema-aware:** Field validation and key discovery come from the
      connection's cached schema metadata

Architecture::

    errors.py          Structured error hierarchy (RowSpineError, ...)
    logging.py         structlog configuration
    settings.py        pydantic-settings configuration + build_registry()
    dialect.py         Vendor syntax tag and literal quoting
    sql.py             Literal encoding and statement text
    result.py          QueryResult cursor over one query's rows
    adapters/          SQLite and MySQL connections, URL factory
    connections.py     ConnectionRegistry (name -> connection)
    record.py          ActiveRecord entity and factories
    cli/               ``rowspine`` command line

Examples:
    >>> from rowspine import ActiveRecord, ConnectionRegistry, connect_url
    >>> registry = ConnectionRegistry()
    >>> registry.add("default", connect_url("sqlite:///data/shop.db"))
    >>> order = ActiveRecord.build(registry, "orders", 42)
    >>> order.exists()
    True
    >>> order.set("status", "shipped")
    >>> order.update()

Tags:
    rowspine, active-record, database, sqlite, mysql
"""

from rowspine.adapters import (
    DatabaseConfig,
    DatabaseConnection,
    DatabaseType,
    MySQLConnection,
    SQLiteConnection,
    connect_url,
    get_adapter,
)
from rowspine.connections import DEFAULT_CONNECTION, ConnectionRegistry
from rowspine.errors import (
    CardinalityMismatchError,
    ConfigError,
    ConnectionNotFoundError,
    DatabaseError,
    DuplicateKeyViolationError,
    FieldNotAllowedError,
    InvalidStateError,
    MissingFieldsError,
    QueryError,
    RecordError,
    ResultExpiredError,
    RowSpineError,
    UndefinedFieldError,
)
from rowspine.record import ActiveRecord, ExistenceStatus, RecordState
from rowspine.result import QueryResult

__version__ = "0.1.0"

__all__ = [
    "__version__",
    # Records
    "ActiveRecord",
    "ExistenceStatus",
    "RecordState",
    # Connections
    "ConnectionRegistry",
    "DEFAULT_CONNECTION",
    "DatabaseConnection",
    "DatabaseConfig",
    "DatabaseType",
    "MySQLConnection",
    "SQLiteConnection",
    "QueryResult",
    "connect_url",
    "get_adapter",
    # Errors
    "RowSpineError",
    "ConfigError",
    "DatabaseError",
    "ConnectionNotFoundError",
    "QueryError",
    "ResultExpiredError",
    "DuplicateKeyViolationError",
    "RecordError",
    "CardinalityMismatchError",
    "FieldNotAllowedError",
    "MissingFieldsError",
    "UndefinedFieldError",
    "InvalidStateError",
]
