"""
Oracle schema source using oracledb.

Lists tables and builds model definitions from Oracle data dictionary
views:
- ALL_TABLES
- ALL_TAB_COLUMNS
- ALL_CONSTRAINTS / ALL_CONS_COLUMNS
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Tuple

from model_discovery.errors import ConfigurationError, NotFoundError
from model_discovery.models import ModelDefinition, TableRef
from model_discovery.sources.base import ColumnInfo, SchemaSource, build_model_definition

logger = logging.getLogger(__name__)


def split_credentials(connection: str) -> Tuple[str, str, str]:
    """
    Split ``user/password@connect_string`` into its three parts.

    The connect string is passed to oracledb as-is, so any Easy Connect
    form (``host:port/service``) or TNS alias works.
    """
    credentials, sep, dsn = connection.rpartition("@")
    if not sep:
        raise ConfigurationError("Oracle connection must look like user/password@host:port/service")

    user, _, password = credentials.partition("/")
    if not user or not dsn:
        raise ConfigurationError("Oracle connection must look like user/password@host:port/service")
    return user, password, dsn


class OracleSchemaSource(SchemaSource):
    """
    Schema source reading the Oracle catalog.

    Settings:
        connection: Oracle connection string (user/pwd@host:port/service)
        database: Default schema/owner
    """

    dialect = "oracle"

    def __init__(self, name: str, settings: Optional[Dict[str, Any]] = None):
        super().__init__(name, settings)
        connection = self.settings.get("connection")
        if not connection:
            raise ConfigurationError(f"Data source {name} has no Oracle connection configured")
        self.user, self._password, self.dsn = split_credentials(connection)
        self._conn = None

    def connect(self) -> None:
        import oracledb

        self._conn = oracledb.connect(user=self.user, password=self._password, dsn=self.dsn)
        logger.info(f"Connected to {self.dsn} as {self.user} for data source {self.name}")

    def close(self) -> None:
        conn, self._conn = self._conn, None
        if conn is not None:
            conn.close()

    def _cursor(self):
        if self._conn is None:
            self.connect()
        return self._conn.cursor()

    def _owner(self, schema: Optional[str]) -> str:
        owner = schema or self.database
        if not owner:
            raise ConfigurationError(f"Data source {self.name} has no schema to discover")
        return owner.upper()

    def discover_tables(self, schema: Optional[str] = None) -> List[TableRef]:
        owner = self._owner(schema)
        cursor = self._cursor()
        try:
            cursor.execute("""
                SELECT table_name
                FROM all_tables
                WHERE owner = :owner
                ORDER BY table_name
            """, owner=owner)
            return [TableRef(name=row[0], schema=owner) for row in cursor]
        finally:
            cursor.close()

    def discover_and_build_model(
        self,
        table_name: str,
        schema: Optional[str] = None,
    ) -> ModelDefinition:
        owner = self._owner(schema)
        cursor = self._cursor()
        try:
            columns = self._get_columns(cursor, owner, table_name)
            if not columns:
                raise NotFoundError(f"Table not found: {owner}.{table_name}")
            pk_columns = self._get_primary_key(cursor, owner, table_name)
        finally:
            cursor.close()

        return build_model_definition(self.dialect, owner, table_name, columns, pk_columns)

    def _get_columns(self, cursor, owner: str, table_name: str) -> List[ColumnInfo]:
        """Get column metadata for a table."""
        cursor.execute("""
            SELECT
                column_name,
                data_type,
                nullable,
                data_length,
                data_precision,
                data_scale
            FROM all_tab_columns
            WHERE owner = :owner AND table_name = :table_name
            ORDER BY column_id
        """, owner=owner, table_name=table_name)

        columns = []
        for row in cursor:
            col_name, data_type, nullable, data_length, precision, scale = row
            columns.append(ColumnInfo(
                name=col_name,
                data_type=data_type,
                nullable=nullable == "Y",
                length=data_length,
                precision=precision,
                scale=scale,
            ))
        return columns

    def _get_primary_key(self, cursor, owner: str, table_name: str) -> List[str]:
        """Get primary key columns for a table."""
        cursor.execute("""
            SELECT cc.column_name
            FROM all_constraints c
            JOIN all_cons_columns cc
                ON c.owner = cc.owner
                AND c.constraint_name = cc.constraint_name
            WHERE c.owner = :owner
                AND c.table_name = :table_name
                AND c.constraint_type = 'P'
            ORDER BY cc.position
        """, owner=owner, table_name=table_name)

        return [row[0] for row in cursor]
