"""Database adapters -- one connection interface over vendor drivers.

Manifesto:
    Records and application code must not care which driver sits
    underneath. Each adapter pairs a :class:`DatabaseConnection` subclass
    (execution, escaping, schema introspection) with a
    :class:`~rowspine.result.QueryResult` subclass (cursor over rows).

    Driver imports are guarded: the MySQL driver is only required when a
    MySQL connection is actually opened. Install the extra::

        pip install rowspine[mysql]   # mysql-connector-python

Architecture::

    DatabaseConnection (base.py)    Abstract base: query/escape/schema cache
        |-- SQLiteConnection        stdlib sqlite3 (always available)
        |-- MySQLConnection         mysql.connector (optional)

    AdapterRegistry (registry.py)   driver tag -> connection class
    DatabaseConfig (types.py)       connection parameters, URL parsing
    DatabaseType (types.py)         Enum of supported backends

Guardrails:
    ❌ ``conn.query("... WHERE name = " + user_input)``
    ✅ ``conn.query(f"... WHERE {where_equals({'name': user_input}, conn)}")``
    ❌ Importing optional drivers at module scope
    ✅ Import-guarded at ``connect()`` time with clear ``ConfigError``

Tags:
    rowspine, database, adapters, multi-backend, import-guarded
"""

from rowspine.dialect import Dialect, get_dialect

from .base import DatabaseConnection, QueryOutcome
from .mysql import MySQLConnection, MySQLResult
from .registry import AdapterRegistry, adapter_registry, connect_url, get_adapter
from .sqlite import SQLiteConnection, SQLiteResult
from .types import DatabaseConfig, DatabaseType

__all__ = [
    # Types
    "DatabaseType",
    "DatabaseConfig",
    "QueryOutcome",
    # Dialects
    "Dialect",
    "get_dialect",
    # Base class
    "DatabaseConnection",
    # Implementations
    "SQLiteConnection",
    "SQLiteResult",
    "MySQLConnection",
    "MySQLResult",
    # Registry
    "AdapterRegistry",
    "adapter_registry",
    "connect_url",
    "get_adapter",
]
