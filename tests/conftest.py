"""Shared fixtures: a small application with a snapshot data source."""

import json
from pathlib import Path

import pytest
import yaml


SNAPSHOT = {
    "schemas": {
        "shop": {
            "tables": {
                "PaymentMethod": {
                    "primary_key": ["id"],
                    "columns": [
                        {"name": "id", "type": "INT", "nullable": False},
                        {"name": "createdAt", "type": "DATETIME"},
                        {"name": "card_holder", "type": "VARCHAR(64)", "length": 64},
                    ],
                },
                "customer": {
                    "primary_key": ["customer_id"],
                    "columns": [
                        {"name": "customer_id", "type": "INT", "nullable": False},
                        {"name": "first_name", "type": "VARCHAR(100)", "length": 100},
                        {"name": "is_active", "type": "BOOLEAN"},
                    ],
                },
            },
        },
    },
}

REGISTRY = {
    "_meta": {"sources": ["../common/models", "./models"]},
    "User": {"dataSource": "db", "public": True},
}


@pytest.fixture
def app_dir(tmp_path: Path) -> Path:
    """Create an application root with datasources, snapshot and registry."""
    server = tmp_path / "server"
    server.mkdir()

    with open(tmp_path / "snapshot.yaml", "w") as f:
        yaml.safe_dump(SNAPSHOT, f, sort_keys=False)

    datasources = {
        "shopDB": {
            "connector": "snapshot",
            "dialect": "mysql",
            "database": "shop",
            "file": "snapshot.yaml",
        },
        "memory": {"connector": "memory"},
    }
    with open(server / "datasources.yaml", "w") as f:
        yaml.safe_dump(datasources, f, sort_keys=False)

    with open(server / "model-config.json", "w") as f:
        json.dump(REGISTRY, f, indent="\t")

    return tmp_path
