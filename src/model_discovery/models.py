"""
Core data models for the model_discovery package.

Defines model definitions as they are persisted to ``<Model>.json`` files,
along with table references and save outcomes shared by the pipeline.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Union


class TypeTag(str, Enum):
    """Canonical property type tags understood by the consuming runtime."""
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    DATE = "date"
    OBJECT = "object"
    ARRAY = "array"
    BUFFER = "buffer"
    GEOPOINT = "geopoint"
    ANY = "any"


# Python types reported by some connectors instead of tag names
PYTHON_TYPE_MAP = {
    str: TypeTag.STRING,
    int: TypeTag.NUMBER,
    float: TypeTag.NUMBER,
    bool: TypeTag.BOOLEAN,
    datetime: TypeTag.DATE,
    date: TypeTag.DATE,
    bytes: TypeTag.BUFFER,
    bytearray: TypeTag.BUFFER,
    dict: TypeTag.OBJECT,
    list: TypeTag.ARRAY,
}


def canonical_type(type_tag: Union[str, TypeTag, type]) -> str:
    """
    Return the lowercase canonical form of a discovered type tag.

    Accepts a tag name in any casing (``"String"``), a ``TypeTag`` or a
    Python type. Unknown names are lowercased and passed through.
    """
    if isinstance(type_tag, TypeTag):
        return type_tag.value
    if isinstance(type_tag, type):
        mapped = PYTHON_TYPE_MAP.get(type_tag)
        return mapped.value if mapped else type_tag.__name__.lower()
    return str(type_tag).lower()


@dataclass
class PropertyDef:
    """A single model property.

    ``options`` holds every key besides ``type``, including the
    database-specific sub-object keyed by dialect (e.g. ``"mysql"``).
    """
    type: Any
    options: Dict[str, Any] = field(default_factory=dict)

    def column_metadata(self, dialect: str) -> Optional[Dict[str, Any]]:
        """Return the database-specific sub-object for a dialect, if any."""
        meta = self.options.get(dialect)
        return meta if isinstance(meta, dict) else None

    def column_name(self, dialect: str) -> Optional[str]:
        """Return the authoritative database column name, if declared."""
        meta = self.column_metadata(dialect)
        return meta.get("columnName") if meta else None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        data: Dict[str, Any] = {"type": self.type}
        data.update(copy.deepcopy(self.options))
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> PropertyDef:
        """Create from dictionary."""
        options = {k: copy.deepcopy(v) for k, v in data.items() if k != "type"}
        return cls(type=data.get("type", TypeTag.ANY.value), options=options)


@dataclass
class ModelDefinition:
    """Declarative record of a model's name, properties and settings."""
    name: str
    properties: Dict[str, PropertyDef] = field(default_factory=dict)
    settings: Dict[str, Any] = field(default_factory=dict)

    # Top-level keys other than name/properties/settings, kept verbatim
    extra: Dict[str, Any] = field(default_factory=dict)

    # Registry visibility used by Discoverer.update_models()
    public: bool = False

    def table_override(self, dialect: str) -> Optional[str]:
        """Return the explicit database table name, if declared."""
        meta = self.settings.get(dialect)
        if isinstance(meta, dict):
            return meta.get("table")
        return None

    @property
    def property_names(self) -> List[str]:
        """Return property keys in definition order."""
        return list(self.properties.keys())

    def file_name(self) -> str:
        """Return the definition file name for this model."""
        return f"{self.name}.json"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        data: Dict[str, Any] = {
            "name": self.name,
            "properties": {k: p.to_dict() for k, p in self.properties.items()},
            "settings": copy.deepcopy(self.settings),
        }
        for key, value in self.extra.items():
            data[key] = copy.deepcopy(value)
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> ModelDefinition:
        """Create from dictionary."""
        extra = {
            k: copy.deepcopy(v) for k, v in data.items()
            if k not in ("name", "properties", "settings")
        }
        return cls(
            name=data["name"],
            properties={
                k: PropertyDef.from_dict(p)
                for k, p in (data.get("properties") or {}).items()
            },
            settings=copy.deepcopy(data.get("settings") or {}),
            extra=extra,
        )


@dataclass
class TableRef:
    """A table returned by schema discovery."""
    name: str
    schema: Optional[str] = None
    type: str = "table"

    @property
    def full_name(self) -> str:
        """Return schema-qualified table name."""
        return f"{self.schema}.{self.name}" if self.schema else self.name


class SaveStatus(str, Enum):
    """Outcome of persisting a single model definition."""
    WRITTEN = "written"
    SKIPPED = "skipped"


@dataclass
class SaveResult:
    """Result of ModelPersister.save()."""
    status: SaveStatus
    path: Path
    model: Optional[Dict[str, Any]] = None

    @property
    def written(self) -> bool:
        return self.status == SaveStatus.WRITTEN

    @property
    def skipped(self) -> bool:
        return self.status == SaveStatus.SKIPPED
