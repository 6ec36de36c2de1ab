"""
Exceptions raised by the discovery pipeline.

Every error carries a stable ``code`` so callers embedding the pipeline
can branch on the failure kind without parsing messages.
"""

from __future__ import annotations

from typing import Iterable, List, Optional


class DiscoveryError(Exception):
    """Base exception for the discovery pipeline."""
    code = "discovery"


class ConfigurationError(DiscoveryError):
    """Raised for a bad application path, data source or connector."""
    code = "configuration"


class NotFoundError(DiscoveryError):
    """Raised when something requested is absent from discovery."""
    code = "not_found"


class TablesNotFoundError(NotFoundError):
    """Raised when requested tables were not returned by the schema source."""
    code = "tables_not_found"

    def __init__(self, missing: Iterable[str]):
        self.missing: List[str] = list(missing)
        super().__init__(f"Tables not found: {', '.join(self.missing)}")


class SchemaIntegrityError(DiscoveryError):
    """Raised when a discovered property has no database column metadata."""
    code = "schema_integrity"

    def __init__(self, model: str, prop: str, reason: Optional[str] = None):
        self.model = model
        self.property = prop
        message = f"Property {model}.{prop} has no database column definition"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class AmbiguousModelError(DiscoveryError):
    """Raised when a connector builds more than one model for a table."""
    code = "ambiguous_model"

    def __init__(self, table: str, models: Iterable[str]):
        self.table = table
        self.models = list(models)
        super().__init__(
            f"Table {table} produced {len(self.models)} models "
            f"({', '.join(self.models)}); expected exactly one"
        )


class DefinitionIOError(DiscoveryError, OSError):
    """Raised when a definition or registry file cannot be read or written."""
    code = "io"
