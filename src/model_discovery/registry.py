"""
Central model registry (``model-config.json``).

Maps each model name to the data source backing it and its visibility.
The reserved ``_meta`` entry is not a model and is carried through
load/modify/save untouched.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, Optional, Tuple, Union

from model_discovery.errors import ConfigurationError
from model_discovery.persister import read_json, write_json

logger = logging.getLogger(__name__)

META_KEY = "_meta"


class ModelRegistry:
    """In-memory registry; persisted only when save() is called."""

    def __init__(
        self,
        entries: Optional[Dict[str, Any]] = None,
        path: Optional[Path] = None,
    ):
        self.entries: Dict[str, Any] = entries if entries is not None else {}
        self.path = Path(path) if path else None

    @classmethod
    def load(cls, path: Union[str, Path]) -> ModelRegistry:
        """Load a registry file, keeping key order and ``_meta``."""
        path = Path(path)
        if not path.exists():
            raise ConfigurationError(f"Model configuration not found: {path}")

        registry = cls(read_json(path), path=path)
        logger.info(f"Loaded {len(registry)} models from {path}")
        return registry

    def save(self, path: Optional[Union[str, Path]] = None) -> Path:
        """Write the registry, by default back to the file it was loaded from."""
        target = Path(path) if path else self.path
        if target is None:
            raise ConfigurationError("Model configuration has no file to save to")

        write_json(target, self.entries)
        logger.info(f"Saved model configuration to {target}")
        return target

    @property
    def meta(self) -> Optional[Dict[str, Any]]:
        return self.entries.get(META_KEY)

    def add_or_update(
        self,
        model_name: str,
        data_source: str,
        public: Optional[bool] = None,
    ) -> Dict[str, Any]:
        """Point a model at a data source, inserting it if absent."""
        if model_name == META_KEY:
            raise ConfigurationError(f"{META_KEY} is reserved and cannot be used as a model name")

        is_public = bool(public) if public is not None else False
        entry = self.entries.get(model_name)
        if entry is None:
            entry = {"dataSource": data_source, "public": is_public}
            self.entries[model_name] = entry
            logger.debug(f"Registered model {model_name} on {data_source}")
        else:
            entry["dataSource"] = data_source
            entry["public"] = is_public
            logger.debug(f"Updated model {model_name} on {data_source}")
        return entry

    def add_or_update_many(
        self,
        models: Iterable[Tuple[str, str, Optional[bool]]],
    ) -> None:
        """Apply add_or_update() for ``(model_name, data_source, public)`` entries."""
        for model_name, data_source, public in models:
            self.add_or_update(model_name, data_source, public)

    def get(self, model_name: str) -> Optional[Dict[str, Any]]:
        if model_name == META_KEY:
            return None
        return self.entries.get(model_name)

    def model_names(self) -> Iterator[str]:
        """Iterate registered model names, skipping ``_meta``."""
        return (name for name in self.entries if name != META_KEY)

    def __contains__(self, model_name: object) -> bool:
        return model_name != META_KEY and model_name in self.entries

    def __len__(self) -> int:
        return sum(1 for _ in self.model_names())

    def to_dict(self) -> Dict[str, Any]:
        return self.entries
