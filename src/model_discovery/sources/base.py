"""
Schema source interface and the conventional table-to-model builder.

A schema source introspects a live (or snapshotted) database. The
pipeline only needs two calls from it: list the tables of a schema, and
build one model definition for one table.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from model_discovery.errors import AmbiguousModelError, DiscoveryError
from model_discovery.models import ModelDefinition, PropertyDef, TableRef

logger = logging.getLogger(__name__)


# SQL base type -> type tag as reported by the host framework (mixed case)
SQL_TYPE_MAP = {
    "CHAR": "String",
    "NCHAR": "String",
    "VARCHAR": "String",
    "VARCHAR2": "String",
    "NVARCHAR": "String",
    "NVARCHAR2": "String",
    "TEXT": "String",
    "TINYTEXT": "String",
    "MEDIUMTEXT": "String",
    "LONGTEXT": "String",
    "CLOB": "String",
    "NCLOB": "String",
    "LONG": "String",
    "ENUM": "String",
    "SET": "String",
    "INT": "Number",
    "INTEGER": "Number",
    "TINYINT": "Number",
    "SMALLINT": "Number",
    "MEDIUMINT": "Number",
    "BIGINT": "Number",
    "DECIMAL": "Number",
    "NUMERIC": "Number",
    "NUMBER": "Number",
    "FLOAT": "Number",
    "DOUBLE": "Number",
    "REAL": "Number",
    "BINARY_FLOAT": "Number",
    "BINARY_DOUBLE": "Number",
    "DATE": "Date",
    "DATETIME": "Date",
    "TIMESTAMP": "Date",
    "TIME": "Date",
    "YEAR": "Number",
    "BOOL": "Boolean",
    "BOOLEAN": "Boolean",
    "BIT": "Boolean",
    "BLOB": "Buffer",
    "TINYBLOB": "Buffer",
    "MEDIUMBLOB": "Buffer",
    "LONGBLOB": "Buffer",
    "BINARY": "Buffer",
    "VARBINARY": "Buffer",
    "RAW": "Buffer",
    "LONG RAW": "Buffer",
    "BYTEA": "Buffer",
    "JSON": "Object",
}


def map_sql_type(data_type: str) -> str:
    """Map a SQL column type (e.g. ``VARCHAR(64)``) to a type tag."""
    base = data_type.split("(")[0].strip().upper()
    if base.startswith("TIMESTAMP"):
        return "Date"
    return SQL_TYPE_MAP.get(base, "String")


def model_name_from_table(table_name: str) -> str:
    """``payment_method`` -> ``PaymentMethod``; ``PaymentMethod`` -> ``Paymentmethod``."""
    return "".join(part.capitalize() for part in table_name.lower().split("_") if part)


def property_name_from_column(column_name: str) -> str:
    """``created_at`` -> ``createdAt``; ``createdAt`` -> ``createdat``."""
    parts = [part for part in column_name.lower().split("_") if part]
    if not parts:
        return column_name
    return parts[0] + "".join(part.capitalize() for part in parts[1:])


@dataclass
class ColumnInfo:
    """A column as reported by a database catalog."""
    name: str
    data_type: str
    nullable: bool = True
    length: Optional[int] = None
    precision: Optional[int] = None
    scale: Optional[int] = None


def build_model_definition(
    dialect: str,
    schema: Optional[str],
    table_name: str,
    columns: Sequence[ColumnInfo],
    primary_key: Sequence[str] = (),
) -> ModelDefinition:
    """
    Build a model definition from catalog columns using the host
    framework's naming convention.

    Every property records its real column under ``options[dialect]`` and
    the model records its real table under ``settings[dialect]``.
    """
    properties: Dict[str, PropertyDef] = {}
    pk_positions = {name: i + 1 for i, name in enumerate(primary_key)}

    for col in columns:
        options: Dict[str, Any] = {}
        if not col.nullable:
            options["required"] = True
        if col.length is not None:
            options["length"] = col.length
        if col.precision is not None:
            options["precision"] = col.precision
        if col.scale is not None:
            options["scale"] = col.scale
        if col.name in pk_positions:
            options["id"] = pk_positions[col.name]
        options[dialect] = {
            "columnName": col.name,
            "dataType": col.data_type,
            "dataLength": col.length,
            "dataPrecision": col.precision,
            "dataScale": col.scale,
            "nullable": "Y" if col.nullable else "N",
        }
        properties[property_name_from_column(col.name)] = PropertyDef(
            type=map_sql_type(col.data_type),
            options=options,
        )

    return ModelDefinition(
        name=model_name_from_table(table_name),
        properties=properties,
        settings={
            "idInjection": False,
            dialect: {"schema": schema, "table": table_name},
        },
    )


def single_model(
    table_name: str,
    result: Union[ModelDefinition, Mapping[str, Any]],
) -> ModelDefinition:
    """
    Return the one model built for a table.

    Accepts either a ModelDefinition or a mapping of model name to
    definition (as ``ModelDefinition``, plain dict, or a dict wrapping
    the definition under ``"definition"``).

    Raises:
        AmbiguousModelError: if the mapping holds anything but one model
        DiscoveryError: if the definition cannot be read
    """
    if isinstance(result, ModelDefinition):
        return result

    if len(result) != 1:
        raise AmbiguousModelError(table_name, result.keys())

    ((model_name, definition),) = result.items()
    if isinstance(definition, ModelDefinition):
        return definition

    if not isinstance(definition, Mapping):
        raise DiscoveryError(f"Table {table_name} produced an unreadable model {model_name}")
    if isinstance(definition.get("definition"), Mapping):
        definition = definition["definition"]

    data = dict(definition)
    data.setdefault("name", model_name)
    return ModelDefinition.from_dict(data)


def supports_discovery(source: Any) -> bool:
    """Return True if ``source`` exposes both discovery calls."""
    return (
        callable(getattr(source, "discover_tables", None)) and
        callable(getattr(source, "discover_and_build_model", None))
    )


class SchemaSource(ABC):
    """
    Base class for schema sources.

    Args:
        name: Data source name in the application
        settings: Data source settings (``database`` is the default schema)
    """

    dialect = "sql"

    def __init__(self, name: str, settings: Optional[Dict[str, Any]] = None):
        self.name = name
        self.settings = dict(settings or {})

    @property
    def database(self) -> Optional[str]:
        """Default schema/database discovered when none is requested."""
        return self.settings.get("database")

    @abstractmethod
    def discover_tables(self, schema: Optional[str] = None) -> List[TableRef]:
        """List the tables of a schema, in a stable order."""

    @abstractmethod
    def discover_and_build_model(
        self,
        table_name: str,
        schema: Optional[str] = None,
    ) -> ModelDefinition:
        """Build the model definition of one table."""

    def close(self) -> None:
        """Release any connection held by the source."""

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
