"""
Model Discovery - Model definitions from relational database schemas

Discovers table schemas through a schema source (connector), converts each
table into a model definition, reconciles database and application
naming, and writes one ``<Model>.json`` file per model while keeping the
application's model registry up to date.

Features:
- Allow-list filtering of discovered tables
- Table/column name reconciliation against database identifiers
- Merge-on-write that preserves hand-edited settings
- Registry updates that preserve the ``_meta`` entry
- Offline YAML snapshot and Oracle schema sources
"""

__version__ = "0.1.0"

from model_discovery.config import DiscoveryConfig
from model_discovery.context import ApplicationContext
from model_discovery.discoverer import Discoverer, DiscoveryState, discover_models
from model_discovery.errors import (
    AmbiguousModelError,
    ConfigurationError,
    DefinitionIOError,
    DiscoveryError,
    NotFoundError,
    SchemaIntegrityError,
    TablesNotFoundError,
)
from model_discovery.filtering import filter_tables
from model_discovery.merger import DefinitionMerger, merge_definitions
from model_discovery.models import (
    ModelDefinition,
    PropertyDef,
    SaveResult,
    SaveStatus,
    TableRef,
    TypeTag,
    canonical_type,
)
from model_discovery.persister import ModelPersister
from model_discovery.reconciler import (
    NameReconciler,
    canonicalize_property_types,
    reconcile_column_name,
    reconcile_table_name,
)
from model_discovery.registry import ModelRegistry
from model_discovery.sources import SchemaSource, OracleSchemaSource, SnapshotSchemaSource

__all__ = [
    # Core models
    "ModelDefinition",
    "PropertyDef",
    "SaveResult",
    "SaveStatus",
    "TableRef",
    "TypeTag",
    "canonical_type",
    # Pipeline
    "filter_tables",
    "NameReconciler",
    "reconcile_table_name",
    "reconcile_column_name",
    "canonicalize_property_types",
    "DefinitionMerger",
    "merge_definitions",
    "ModelPersister",
    "ModelRegistry",
    "Discoverer",
    "DiscoveryState",
    "discover_models",
    # Configuration
    "ApplicationContext",
    "DiscoveryConfig",
    # Sources
    "SchemaSource",
    "SnapshotSchemaSource",
    "OracleSchemaSource",
    # Errors
    "DiscoveryError",
    "ConfigurationError",
    "NotFoundError",
    "TablesNotFoundError",
    "SchemaIntegrityError",
    "AmbiguousModelError",
    "DefinitionIOError",
]
