"""
Model definition files.

Each model is stored as ``<directory>/<ModelName>.json``, tab-indented so
that re-discovery produces readable diffs.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Optional, Union

from model_discovery.errors import DefinitionIOError
from model_discovery.merger import DefinitionMerger
from model_discovery.models import ModelDefinition, SaveResult, SaveStatus
from model_discovery.reconciler import canonicalize_property_types

logger = logging.getLogger(__name__)

INDENT = "\t"


def dump_json(data: Dict[str, Any]) -> str:
    """Serialize a definition or registry the way it is stored on disk."""
    return json.dumps(data, indent=INDENT, ensure_ascii=False) + "\n"


def read_json(path: Path) -> Dict[str, Any]:
    """Read a JSON object from disk, wrapping failures in DefinitionIOError."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except OSError as e:
        raise DefinitionIOError(f"Unable to read {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise DefinitionIOError(f"Invalid JSON in {path}: {e}") from e

    if not isinstance(data, dict):
        raise DefinitionIOError(f"Expected a JSON object in {path}")
    return data


def write_json(path: Path, data: Dict[str, Any]) -> None:
    """
    Write a JSON object to disk, wrapping failures in DefinitionIOError.

    The file is replaced only once the new content is fully written, so a
    failed write leaves any previous file intact.
    """
    try:
        text = dump_json(data)
    except (TypeError, ValueError) as e:
        raise DefinitionIOError(f"Unable to serialize {path}: {e}") from e

    path = Path(path)
    tmp_name = None
    try:
        with tempfile.NamedTemporaryFile(
            "w", encoding="utf-8", dir=path.parent, prefix=f".{path.name}.", delete=False
        ) as f:
            tmp_name = f.name
            f.write(text)
        os.chmod(tmp_name, path.stat().st_mode & 0o777 if path.exists() else 0o644)
        os.replace(tmp_name, path)
    except OSError as e:
        if tmp_name and os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise DefinitionIOError(f"Unable to write {path}: {e}") from e


class ModelPersister:
    """
    Reads and writes model definition files in a directory.

    Args:
        directory: Directory holding ``<ModelName>.json`` files
    """

    def __init__(self, directory: Union[str, Path]):
        self.directory = Path(directory)

    def path_for(self, model_name: str) -> Path:
        """Return the definition file path for a model."""
        return self.directory / f"{model_name}.json"

    @staticmethod
    def exists(path: Union[str, Path]) -> bool:
        """Return True if a file or directory exists at ``path``."""
        return Path(path).exists()

    def ensure_directory(self) -> Path:
        """Create the definition directory if needed."""
        if not self.directory.exists():
            try:
                self.directory.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise DefinitionIOError(
                    f"Unable to create models folder {self.directory}: {e}"
                ) from e
            logger.info(f"Created models folder {self.directory}")
        elif not self.directory.is_dir():
            raise DefinitionIOError(f"Models path {self.directory} is not a directory")
        return self.directory

    def load(self, model_name: str) -> Optional[Dict[str, Any]]:
        """Return the stored definition of a model, or None if there is none."""
        path = self.path_for(model_name)
        if not path.exists():
            return None
        return read_json(path)

    def save(self, model: ModelDefinition, overwrite: bool = False) -> SaveResult:
        """
        Persist a reconciled model definition.

        A new file is written as-is. An existing file is left untouched
        unless ``overwrite`` is set, in which case only its properties are
        replaced. Type tags are canonicalized on the final merged result.
        """
        path = self.path_for(model.name)
        exist = path.exists()

        if exist and not overwrite:
            logger.info(f"Skip definition for existing model: {model.name}")
            return SaveResult(status=SaveStatus.SKIPPED, path=path)

        self.ensure_directory()
        existing = read_json(path) if exist else None
        merged = DefinitionMerger(overwrite=overwrite).merge(model.to_dict(), existing)
        canonicalize_property_types(merged.get("properties", {}))

        logger.info(f"Save definition for model: {model.name}")
        write_json(path, merged)
        return SaveResult(status=SaveStatus.WRITTEN, path=path, model=merged)
