"""
Offline schema source backed by a YAML catalog snapshot.

Example snapshot::

    schemas:
      shop:
        tables:
          PaymentMethod:
            primary_key: [id]
            columns:
              - {name: id, type: INT, nullable: false}
              - {name: createdAt, type: DATETIME}
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from model_discovery.config import load_yaml
from model_discovery.errors import ConfigurationError, NotFoundError
from model_discovery.models import ModelDefinition, TableRef
from model_discovery.sources.base import ColumnInfo, SchemaSource, build_model_definition

logger = logging.getLogger(__name__)


class SnapshotSchemaSource(SchemaSource):
    """
    Schema source reading tables and columns from a YAML file.

    Settings:
        file: Path to the snapshot YAML file
        database: Default schema
        dialect: Key for database-specific metadata (default ``snapshot``)
    """

    dialect = "snapshot"

    def __init__(self, name: str, settings: Optional[Dict[str, Any]] = None):
        super().__init__(name, settings)
        if "dialect" in self.settings:
            self.dialect = self.settings["dialect"]

        file = self.settings.get("file")
        if not file:
            raise ConfigurationError(f"Data source {name} has no snapshot file configured")
        self.path = Path(file)
        self._schemas: Optional[Dict[str, Any]] = None

    def _load(self) -> Dict[str, Any]:
        if self._schemas is None:
            if not self.path.exists():
                raise ConfigurationError(f"Snapshot file not found: {self.path}")
            data = load_yaml(self.path) or {}
            if not isinstance(data, dict):
                raise ConfigurationError(f"Invalid snapshot in {self.path}")
            self._schemas = data.get("schemas") or {}
            logger.info(f"Loaded {len(self._schemas)} schemas from {self.path}")
        return self._schemas

    def _tables(self, schema: str) -> Dict[str, Any]:
        schemas = self._load()
        if schema not in schemas:
            raise NotFoundError(f"Schema not found in snapshot: {schema}")
        return (schemas[schema] or {}).get("tables") or {}

    def _resolve_schema(self, schema: Optional[str]) -> Optional[str]:
        return schema or self.database

    def discover_tables(self, schema: Optional[str] = None) -> List[TableRef]:
        schema = self._resolve_schema(schema)
        if schema is None:
            return [
                TableRef(name=table, schema=schema_name)
                for schema_name in self._load()
                for table in self._tables(schema_name)
            ]
        return [TableRef(name=table, schema=schema) for table in self._tables(schema)]

    def discover_and_build_model(
        self,
        table_name: str,
        schema: Optional[str] = None,
    ) -> ModelDefinition:
        schema = self._resolve_schema(schema)
        schema_names = [schema] if schema else list(self._load())

        for schema_name in schema_names:
            table = self._tables(schema_name).get(table_name)
            if table is None:
                continue

            columns = [
                ColumnInfo(
                    name=col["name"],
                    data_type=str(col.get("type", "VARCHAR")),
                    nullable=col.get("nullable", True),
                    length=col.get("length"),
                    precision=col.get("precision"),
                    scale=col.get("scale"),
                )
                for col in table.get("columns") or []
            ]
            return build_model_definition(
                self.dialect,
                schema_name,
                table_name,
                columns,
                table.get("primary_key") or [],
            )

        raise NotFoundError(f"Table not found in snapshot: {table_name}")
