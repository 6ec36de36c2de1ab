"""
Schema sources (connectors) able to discover tables and build models.

Connectors are looked up by the ``connector`` key of a data source entry.
"""

from typing import Any, Dict, Type

from model_discovery.errors import ConfigurationError
from model_discovery.sources.base import (
    ColumnInfo,
    SchemaSource,
    build_model_definition,
    single_model,
    supports_discovery,
)
from model_discovery.sources.oracle import OracleSchemaSource
from model_discovery.sources.snapshot import SnapshotSchemaSource

CONNECTORS: Dict[str, Type[SchemaSource]] = {
    "snapshot": SnapshotSchemaSource,
    "oracle": OracleSchemaSource,
}


def create_source(name: str, settings: Dict[str, Any]) -> Any:
    """Instantiate the connector named by ``settings["connector"]``."""
    connector = settings.get("connector")
    if not connector:
        raise ConfigurationError(f"Data source {name} has no connector")

    cls = CONNECTORS.get(str(connector).lower())
    if cls is None:
        raise ConfigurationError(
            f"Data source connector {connector} does not support discovery"
        )
    return cls(name, settings)


__all__ = [
    "CONNECTORS",
    "ColumnInfo",
    "OracleSchemaSource",
    "SchemaSource",
    "SnapshotSchemaSource",
    "build_model_definition",
    "create_source",
    "single_model",
    "supports_discovery",
]
