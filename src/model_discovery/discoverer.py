"""
Discovery orchestration.

Drives a run end to end: bind an application data source, list its
tables, filter them, build one model per table (serially, in discovery
order), reconcile names and persist each definition. The registry is
updated only on request.

Usage:
    discoverer = Discoverer()
    discoverer.set_app("./my-app")
    discoverer.set_data_source("db")
    models = discoverer.discover_models(tables=["PaymentMethod"], overwrite=True)
"""

from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path
from typing import Any, Iterable, List, Optional, Sequence, Union

from model_discovery.config import DiscoveryConfig, parse_table_list
from model_discovery.context import ApplicationContext
from model_discovery.errors import ConfigurationError, DiscoveryError
from model_discovery.filtering import filter_tables
from model_discovery.models import ModelDefinition, SaveResult, TableRef
from model_discovery.persister import ModelPersister
from model_discovery.reconciler import NameReconciler
from model_discovery.registry import ModelRegistry
from model_discovery.sources.base import single_model

logger = logging.getLogger(__name__)


class DiscoveryState(str, Enum):
    """Lifecycle of a Discoverer."""
    UNCONFIGURED = "unconfigured"
    SOURCE_BOUND = "source_bound"
    DISCOVERING = "discovering"
    PERSISTING = "persisting"
    DONE = "done"
    FAILED = "failed"


def _table_ref(table: Any) -> TableRef:
    if isinstance(table, TableRef):
        return table
    if isinstance(table, dict):
        return TableRef(name=table["name"], schema=table.get("schema") or table.get("owner"))
    return TableRef(name=str(table))


class Discoverer:
    """
    Discovers models from an application data source.

    Args:
        context: Optional application context; see set_app()
    """

    def __init__(self, context: Optional[ApplicationContext] = None):
        self.context = context
        self.ds_name: Optional[str] = None
        self.data_source: Any = None
        self.registry: Optional[ModelRegistry] = None
        self.results: List[SaveResult] = []
        self.state = DiscoveryState.UNCONFIGURED

    # Session setup

    def set_app(self, app: Union[str, Path, ApplicationContext]) -> ApplicationContext:
        """Bind an application by root path or ready-made context."""
        if isinstance(app, ApplicationContext):
            self.context = app
        else:
            self.context = ApplicationContext(app)

        self.ds_name = None
        self.data_source = None
        self.state = DiscoveryState.UNCONFIGURED
        return self.context

    def set_data_source(self, name: str) -> Any:
        """
        Bind the named data source.

        Raises:
            ConfigurationError: if no application is set, the name is
                missing or unknown, or the source cannot discover
        """
        if not name:
            raise ConfigurationError("Invalid data source.")
        if self.context is None:
            raise ConfigurationError("Application not set.")

        self.data_source = self.context.get_data_source(name)
        self.ds_name = self.context.canonical_name(name)
        self.state = DiscoveryState.SOURCE_BOUND
        logger.info(f"Using data source {self.ds_name}")
        return self.data_source

    # Registry

    def load_model_configuration(self) -> ModelRegistry:
        if self.context is None:
            raise ConfigurationError("Application not set.")

        self.registry = ModelRegistry.load(self.context.registry_path)
        return self.registry

    def save_model_configuration(self) -> Path:
        if self.context is None:
            raise ConfigurationError("Application not set.")
        if self.registry is None:
            raise ConfigurationError("Model configuration not loaded.")

        return self.registry.save(self.context.registry_path)

    def add_model(self, model: ModelDefinition) -> None:
        """Register a model on the bound data source."""
        if self.registry is None:
            raise ConfigurationError("Model configuration not loaded.")
        if self.ds_name is None:
            raise ConfigurationError("Data source not set.")

        self.registry.add_or_update(model.name, self.ds_name, model.public)

    def update_models(self, models: Iterable[ModelDefinition]) -> None:
        """Register every model on the bound data source."""
        if self.registry is None:
            raise ConfigurationError("Model configuration not loaded.")
        if self.ds_name is None:
            raise ConfigurationError("Data source not set.")

        self.registry.add_or_update_many(
            (model.name, self.ds_name, model.public) for model in models
        )

    def register_models(self, models: Iterable[ModelDefinition], public: bool = False) -> Path:
        """Load the registry, register models with the given visibility and save it."""
        models = list(models)
        for model in models:
            model.public = public
        self.load_model_configuration()
        self.update_models(models)
        return self.save_model_configuration()

    # Discovery

    @property
    def dialect(self) -> str:
        return getattr(self.data_source, "dialect", None) or "sql"

    def resolve_models_path(self, output_dir: Optional[Union[str, Path]] = None) -> Path:
        if self.context is None:
            raise ConfigurationError("Application not set.")
        return self.context.resolve_output_dir(output_dir)

    def save_model(
        self,
        persister: ModelPersister,
        model: ModelDefinition,
        overwrite: bool = False,
    ) -> SaveResult:
        """Reconcile a discovered model and persist it."""
        NameReconciler(self.dialect).reconcile(model)
        return persister.save(model, overwrite=overwrite)

    def discover_tables(self, schema: Optional[str] = None) -> List[TableRef]:
        """List the tables of the bound data source."""
        if self.data_source is None:
            raise ConfigurationError("Data source not set.")

        schema = schema or getattr(self.data_source, "database", None)
        try:
            tables = [_table_ref(t) for t in self.data_source.discover_tables(schema)]
        except DiscoveryError:
            raise
        except Exception as e:
            raise DiscoveryError(f"Unable to discover tables in {schema or 'all schemas'}: {e}") from e

        logger.info(f"Discovered {len(tables)} tables in {schema or 'all schemas'}")
        return tables

    def build_model(self, table: TableRef, schema: Optional[str] = None) -> ModelDefinition:
        """Build the single model definition of a table."""
        try:
            result = self.data_source.discover_and_build_model(table.name, table.schema or schema)
            return single_model(table.name, result)
        except DiscoveryError:
            raise
        except Exception as e:
            raise DiscoveryError(f"Unable to discover table {table.name}: {e}") from e

    def discover_models(
        self,
        config: Optional[DiscoveryConfig] = None,
        **options: Any,
    ) -> List[ModelDefinition]:
        """
        Discover, reconcile and persist models.

        Accepts a DiscoveryConfig or the same fields as keyword options
        (``app_path``, ``data_source``, ``tables``, ``output_dir``,
        ``overwrite``, ``schema``).

        Returns:
            Every discovered model, including those whose file was skipped
        """
        if config is None:
            config = DiscoveryConfig.from_dict(options)

        try:
            return self._run(config)
        except Exception:
            self.state = DiscoveryState.FAILED
            raise

    def _run(self, config: DiscoveryConfig) -> List[ModelDefinition]:
        if config.app_path:
            self.set_app(config.app_path)
        if config.data_source:
            self.set_data_source(config.data_source)
        if self.data_source is None:
            raise ConfigurationError("Data source not set.")

        self.state = DiscoveryState.DISCOVERING
        schema = config.schema or getattr(self.data_source, "database", None)
        tables = filter_tables(self.discover_tables(schema), parse_table_list(config.tables))

        # The source is a single session; build one table at a time
        models = []
        for table in tables:
            logger.info(f"Discover model for table: {table.full_name}")
            models.append(self.build_model(table, schema))

        self.state = DiscoveryState.PERSISTING
        persister = ModelPersister(self.resolve_models_path(config.output_dir))
        persister.ensure_directory()

        self.results = []
        for model in models:
            self.results.append(self.save_model(persister, model, overwrite=config.overwrite))

        self.state = DiscoveryState.DONE
        return models


def discover_models(
    config: DiscoveryConfig,
    context: Optional[ApplicationContext] = None,
) -> Sequence[ModelDefinition]:
    """
    Run a full discovery and, if configured, update the model registry.

    Discovered models take ``config.public`` as their registry visibility.
    """
    discoverer = Discoverer(context)
    models = discoverer.discover_models(config)

    if config.update_registry:
        discoverer.register_models(models, public=config.public)

    return models
