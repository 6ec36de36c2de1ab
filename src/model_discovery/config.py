"""Configuration for a discovery run."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from model_discovery.errors import ConfigurationError


def load_yaml(path: Path) -> Any:
    """Read a YAML file, reporting parse errors as ConfigurationError."""
    with open(path, "r") as f:
        try:
            return yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {path}: {e}") from e


def parse_table_list(tables: Union[None, str, List[str]]) -> Optional[List[str]]:
    """Accept ``"a, b"`` or ``["a", "b"]``; None means no allow-list."""
    if tables is None:
        return None
    if isinstance(tables, str):
        return [t.strip() for t in tables.split(",") if t.strip()]
    return [str(t) for t in tables]


@dataclass
class DiscoveryConfig:
    """Configuration for a discovery run."""
    app_path: Optional[Path] = None
    data_source: Optional[str] = None
    output_dir: Optional[Path] = None
    tables: Optional[List[str]] = None
    overwrite: bool = False

    # Schema/database to discover; defaults to the data source's database
    schema: Optional[str] = None

    # Registry handling after a successful run
    update_registry: bool = False
    public: bool = False

    extra: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if isinstance(self.app_path, str):
            self.app_path = Path(self.app_path)
        if isinstance(self.output_dir, str):
            self.output_dir = Path(self.output_dir)
        self.tables = parse_table_list(self.tables)

    @classmethod
    def from_dict(cls, data: Dict[str, Any], **overrides: Any) -> DiscoveryConfig:
        """Create from a mapping; non-None overrides win over mapping values."""
        known = {f.name for f in fields(cls)} - {"extra"}
        values = {k: v for k, v in data.items() if k in known}
        extra = {k: v for k, v in data.items() if k not in known}
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(extra=extra, **values)

    @classmethod
    def from_yaml(cls, path: Union[str, Path], **overrides: Any) -> DiscoveryConfig:
        """Load configuration from a YAML file."""
        path = Path(path)
        if not path.exists():
            raise ConfigurationError(f"Configuration file not found: {path}")

        data = load_yaml(path) or {}
        if not isinstance(data, dict):
            raise ConfigurationError(f"Invalid configuration in {path}")

        return cls.from_dict(data, **overrides)
