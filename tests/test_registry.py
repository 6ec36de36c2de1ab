"""Tests for the model registry."""

import json

import pytest

from model_discovery.errors import ConfigurationError, DefinitionIOError
from model_discovery.registry import ModelRegistry


class TestModelRegistry:
    """Tests for ModelRegistry."""

    def test_insert_defaults_private(self):
        registry = ModelRegistry({
            "_meta": {"x": 1},
            "Foo": {"dataSource": "db1", "public": True},
        })
        registry.add_or_update("Bar", "db2")

        assert registry.to_dict() == {
            "_meta": {"x": 1},
            "Foo": {"dataSource": "db1", "public": True},
            "Bar": {"dataSource": "db2", "public": False},
        }

    def test_update_in_place(self):
        registry = ModelRegistry({
            "Foo": {"dataSource": "db1", "public": True, "options": {"remoting": {}}},
            "Bar": {"dataSource": "db1", "public": True},
        })
        registry.add_or_update("Foo", "db2", public=False)

        assert registry.get("Foo") == {"dataSource": "db2", "public": False, "options": {"remoting": {}}}
        assert registry.get("Bar") == {"dataSource": "db1", "public": True}
        assert list(registry.model_names()) == ["Foo", "Bar"]

    def test_add_many(self):
        registry = ModelRegistry()
        registry.add_or_update_many([("A", "db", True), ("B", "db", None)])

        assert registry.get("A") == {"dataSource": "db", "public": True}
        assert registry.get("B") == {"dataSource": "db", "public": False}
        assert len(registry) == 2

    def test_meta_is_not_a_model(self):
        registry = ModelRegistry({"_meta": {"sources": []}})

        assert "_meta" not in registry
        assert registry.get("_meta") is None
        assert len(registry) == 0
        with pytest.raises(ConfigurationError):
            registry.add_or_update("_meta", "db")

    def test_round_trip_preserves_meta(self, tmp_path):
        path = tmp_path / "model-config.json"
        path.write_text(json.dumps({
            "_meta": {"sources": ["../common/models"], "mixins": ["../common/mixins"]},
            "User": {"dataSource": "db", "public": True},
        }))

        registry = ModelRegistry.load(path)
        registry.add_or_update("Customer", "shopDB", True)
        registry.save()

        data = json.loads(path.read_text())
        assert list(data.keys()) == ["_meta", "User", "Customer"]
        assert data["_meta"] == {"sources": ["../common/models"], "mixins": ["../common/mixins"]}
        assert path.read_text().splitlines()[1].startswith("\t\"_meta\"")

    def test_not_saved_until_asked(self, tmp_path):
        path = tmp_path / "model-config.json"
        path.write_text('{"_meta": {}}')

        registry = ModelRegistry.load(path)
        registry.add_or_update("Customer", "shopDB")

        assert path.read_text() == '{"_meta": {}}'

    def test_failed_save_keeps_existing_file(self, tmp_path):
        path = tmp_path / "model-config.json"
        path.write_text('{"_meta": {"x": 1}}')

        registry = ModelRegistry.load(path)
        registry.entries["Broken"] = {"dataSource": object()}

        with pytest.raises(DefinitionIOError):
            registry.save()
        assert path.read_text() == '{"_meta": {"x": 1}}'

    def test_load_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError):
            ModelRegistry.load(tmp_path / "missing.json")

    def test_save_without_path(self):
        with pytest.raises(ConfigurationError):
            ModelRegistry().save()
