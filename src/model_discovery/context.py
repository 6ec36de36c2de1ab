"""
Application context: the application root and its data sources.

Layout expected under the application root::

    server/datasources.yaml     # data source name -> settings
    server/model-config.json    # model registry
    common/models/              # default definition directory
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from model_discovery.config import load_yaml
from model_discovery.errors import ConfigurationError
from model_discovery.sources import create_source, supports_discovery

logger = logging.getLogger(__name__)

DATASOURCES_FILE = Path("server") / "datasources.yaml"
REGISTRY_FILE = Path("server") / "model-config.json"
MODELS_DIR = Path("common") / "models"


class ApplicationContext:
    """
    Resolves named data sources for an application.

    Args:
        root_path: Application root directory
        data_sources: Data source settings or source objects by name.
            Loaded from ``server/datasources.yaml`` when omitted.
    """

    def __init__(
        self,
        root_path: Union[str, Path],
        data_sources: Optional[Dict[str, Any]] = None,
    ):
        self.root_path = Path(root_path)
        if not self.root_path.is_dir():
            raise ConfigurationError(f"No application found at: {self.root_path}")

        if data_sources is None:
            data_sources = self._load_data_sources()
        self._data_sources: Dict[str, Any] = dict(data_sources)
        self._instances: Dict[str, Any] = {}

    def _load_data_sources(self) -> Dict[str, Any]:
        path = self.root_path / DATASOURCES_FILE
        if not path.exists():
            raise ConfigurationError(f"No application found at: {self.root_path} (missing {DATASOURCES_FILE})")

        data = load_yaml(path) or {}
        if not isinstance(data, dict):
            raise ConfigurationError(f"Invalid data source configuration in {path}")

        logger.info(f"Loaded {len(data)} data sources from {path}")
        return data

    @property
    def data_source_names(self) -> List[str]:
        return list(self._data_sources.keys())

    @property
    def models_dir(self) -> Path:
        return self.root_path / MODELS_DIR

    @property
    def registry_path(self) -> Path:
        return self.root_path / REGISTRY_FILE

    def resolve_output_dir(self, output_dir: Optional[Union[str, Path]] = None) -> Path:
        """Return the definition directory, relative to the application root."""
        if output_dir:
            return self.root_path / output_dir
        return self.models_dir

    def register(self, name: str, source: Any) -> None:
        """Register a ready-made schema source under ``name``."""
        self._data_sources[name] = source
        self._instances.pop(name, None)

    def _match(self, name: str) -> Optional[str]:
        # Data source names are configuration keys; matched case-insensitively
        wanted = name.lower()
        for candidate in self._data_sources:
            if candidate.lower() == wanted:
                return candidate
        return None

    def canonical_name(self, name: str) -> str:
        """Return the configured spelling of a data source name."""
        if not name:
            raise ConfigurationError("Invalid data source.")

        key = self._match(name)
        if key is None:
            raise ConfigurationError(f"Data source {name} not found in application.")
        return key

    def get_data_source(self, name: str) -> Any:
        """
        Return the schema source configured under ``name``.

        Raises:
            ConfigurationError: if the name is missing, unknown, or the
                source cannot discover schemas
        """
        key = self.canonical_name(name)

        if key not in self._instances:
            entry = self._data_sources[key]
            if isinstance(entry, dict):
                entry = create_source(key, self._settings_for(entry))
            if not supports_discovery(entry):
                raise ConfigurationError(f"Data source {key} connector does not support discovery.")
            self._instances[key] = entry

        return self._instances[key]

    def _settings_for(self, entry: Dict[str, Any]) -> Dict[str, Any]:
        settings = dict(entry)
        file = settings.get("file")
        if file and not Path(file).is_absolute():
            settings["file"] = str(self.root_path / file)
        return settings
