"""
Tests for schema sources.

Tests the naming convention, snapshot source, Oracle source (with a
mocked connection) and connector lookup.
"""

from unittest.mock import MagicMock

import pytest

from model_discovery.errors import AmbiguousModelError, ConfigurationError, DiscoveryError, NotFoundError
from model_discovery.models import ModelDefinition
from model_discovery.sources import (
    ColumnInfo,
    OracleSchemaSource,
    SnapshotSchemaSource,
    build_model_definition,
    create_source,
    single_model,
    supports_discovery,
)
from model_discovery.sources.base import map_sql_type, model_name_from_table, property_name_from_column
from model_discovery.sources.oracle import split_credentials


class TestNamingConvention:
    """Tests for the table/column naming convention."""

    def test_model_names(self):
        assert model_name_from_table("payment_method") == "PaymentMethod"
        assert model_name_from_table("PaymentMethod") == "Paymentmethod"
        assert model_name_from_table("CUSTOMERS") == "Customers"

    def test_property_names(self):
        assert property_name_from_column("created_at") == "createdAt"
        assert property_name_from_column("createdAt") == "createdat"
        assert property_name_from_column("CUSTOMER_ID") == "customerId"

    def test_sql_types(self):
        assert map_sql_type("VARCHAR(64)") == "String"
        assert map_sql_type("int") == "Number"
        assert map_sql_type("TIMESTAMP(6) WITH TIME ZONE") == "Date"
        assert map_sql_type("blob") == "Buffer"
        assert map_sql_type("GEOMETRY") == "String"

    def test_build_model_definition(self):
        model = build_model_definition(
            "mysql",
            "shop",
            "order_line",
            [
                ColumnInfo(name="line_id", data_type="INT", nullable=False),
                ColumnInfo(name="note", data_type="TEXT"),
            ],
            ["line_id"],
        )

        assert model.name == "OrderLine"
        assert model.settings["mysql"] == {"schema": "shop", "table": "order_line"}
        assert model.property_names == ["lineId", "note"]

        line_id = model.properties["lineId"]
        assert line_id.type == "Number"
        assert line_id.options["id"] == 1
        assert line_id.options["required"] is True
        assert line_id.column_name("mysql") == "line_id"
        assert "required" not in model.properties["note"].options


class TestSingleModel:
    """Tests for the one-model-per-table rule."""

    def test_definition_passes_through(self):
        model = ModelDefinition(name="A")
        assert single_model("a", model) is model

    def test_mapping_with_one_model(self):
        model = single_model("a", {"A": {"name": "A", "properties": {}}})
        assert isinstance(model, ModelDefinition)
        assert model.name == "A"

    def test_mapping_with_wrapped_definition(self):
        model = single_model("payment", {"Payment": {"definition": {"properties": {"id": {"type": "Number"}}}}})
        assert model.name == "Payment"
        assert model.property_names == ["id"]

    def test_unreadable_mapping_value(self):
        with pytest.raises(DiscoveryError, match="Table payment produced an unreadable model Payment"):
            single_model("payment", {"Payment": 42})

    def test_mapping_with_many_models(self):
        with pytest.raises(AmbiguousModelError) as exc_info:
            single_model("a", {"A": ModelDefinition(name="A"), "B": ModelDefinition(name="B")})
        assert exc_info.value.models == ["A", "B"]


class TestSnapshotSchemaSource:
    """Tests for SnapshotSchemaSource."""

    @pytest.fixture
    def source(self, app_dir):
        return SnapshotSchemaSource("shopDB", {
            "file": str(app_dir / "snapshot.yaml"),
            "database": "shop",
            "dialect": "mysql",
        })

    def test_discover_tables(self, source):
        tables = source.discover_tables()
        assert [t.name for t in tables] == ["PaymentMethod", "customer"]
        assert all(t.schema == "shop" for t in tables)

    def test_build_model(self, source):
        model = source.discover_and_build_model("PaymentMethod")

        assert model.name == "Paymentmethod"
        assert model.table_override("mysql") == "PaymentMethod"
        assert model.property_names == ["id", "createdat", "cardHolder"]
        assert model.properties["createdat"].column_name("mysql") == "createdAt"
        assert model.properties["cardHolder"].options["length"] == 64

    def test_unknown_table(self, source):
        with pytest.raises(NotFoundError):
            source.discover_and_build_model("refund")

    def test_unknown_schema(self, source):
        with pytest.raises(NotFoundError):
            source.discover_tables("warehouse")

    def test_malformed_snapshot(self, tmp_path):
        path = tmp_path / "snapshot.yaml"
        path.write_text("schemas: {shop: [\n")
        source = SnapshotSchemaSource("s", {"file": str(path), "database": "shop"})

        with pytest.raises(ConfigurationError, match="Invalid YAML"):
            source.discover_tables()

    def test_requires_file(self):
        with pytest.raises(ConfigurationError):
            SnapshotSchemaSource("s", {})


class TestOracleSchemaSource:
    """Tests for OracleSchemaSource with a mocked connection."""

    @pytest.fixture
    def source(self):
        source = OracleSchemaSource("core", {
            "connection": "scott/tiger@localhost:1521/ORCL",
            "database": "core",
        })
        source._conn = MagicMock()
        return source

    def test_discover_tables(self, source):
        cursor = source._conn.cursor.return_value
        cursor.__iter__.return_value = iter([("ACCOUNTS",), ("CUSTOMERS",)])

        tables = source.discover_tables()

        assert [t.name for t in tables] == ["ACCOUNTS", "CUSTOMERS"]
        assert tables[0].schema == "CORE"
        assert cursor.execute.call_args.kwargs["owner"] == "CORE"

    def test_build_model(self, source):
        cursor = source._conn.cursor.return_value
        cursor.__iter__.side_effect = [
            iter([
                ("CUSTOMER_ID", "NUMBER", "N", 22, 10, 0),
                ("FIRST_NAME", "VARCHAR2", "Y", 100, None, None),
            ]),
            iter([("CUSTOMER_ID",)]),
        ]

        model = source.discover_and_build_model("CUSTOMERS")

        assert model.name == "Customers"
        assert model.table_override("oracle") == "CUSTOMERS"
        assert model.property_names == ["customerId", "firstName"]
        assert model.properties["customerId"].options["id"] == 1
        assert model.properties["customerId"].options["required"] is True
        assert model.properties["firstName"].column_name("oracle") == "FIRST_NAME"

    def test_missing_table(self, source):
        cursor = source._conn.cursor.return_value
        cursor.__iter__.return_value = iter([])

        with pytest.raises(NotFoundError):
            source.discover_and_build_model("NOPE")

    def test_cursor_closed_when_query_fails(self, source):
        cursor = source._conn.cursor.return_value
        cursor.execute.side_effect = RuntimeError("ORA-03113: end-of-file on communication channel")

        with pytest.raises(RuntimeError):
            source.discover_tables()
        cursor.close.assert_called_once()

        cursor.close.reset_mock()
        with pytest.raises(RuntimeError):
            source.discover_and_build_model("CUSTOMERS")
        cursor.close.assert_called_once()

    def test_missing_table_closes_cursor(self, source):
        cursor = source._conn.cursor.return_value
        cursor.__iter__.return_value = iter([])

        with pytest.raises(NotFoundError):
            source.discover_and_build_model("NOPE")
        cursor.close.assert_called_once()

    def test_connection_parts(self, source):
        assert source.user == "scott"
        assert source.dsn == "localhost:1521/ORCL"

    @pytest.mark.parametrize("connection,expected", [
        ("scott/tiger@localhost:1521/ORCL", ("scott", "tiger", "localhost:1521/ORCL")),
        ("scott/p@ss@db.example.com/svc", ("scott", "p@ss", "db.example.com/svc")),
        ("scott@CORE_TNS", ("scott", "", "CORE_TNS")),
    ])
    def test_split_credentials(self, connection, expected):
        assert split_credentials(connection) == expected

    def test_split_credentials_requires_dsn(self):
        with pytest.raises(ConfigurationError):
            split_credentials("scott/tiger")

    def test_requires_connection(self):
        with pytest.raises(ConfigurationError):
            OracleSchemaSource("core", {"database": "core"})

    def test_close(self, source):
        conn = source._conn
        source.close()
        conn.close.assert_called_once()
        assert source._conn is None


class TestCreateSource:
    """Tests for connector lookup."""

    def test_known_connector(self, app_dir):
        source = create_source("shopDB", {"connector": "Snapshot", "file": str(app_dir / "snapshot.yaml")})
        assert isinstance(source, SnapshotSchemaSource)
        assert supports_discovery(source)

    def test_unknown_connector(self):
        with pytest.raises(ConfigurationError, match="does not support discovery"):
            create_source("mem", {"connector": "memory"})

    def test_missing_connector(self):
        with pytest.raises(ConfigurationError):
            create_source("mem", {})

    def test_supports_discovery(self):
        assert supports_discovery(object()) is False
