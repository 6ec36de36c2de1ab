"""
Name reconciliation between database identifiers and model naming.

Connectors derive model and property names from tables and columns by
convention. That derivation is lossy: a ``PaymentMethod`` table comes back
as ``Paymentmethod`` and a ``createdAt`` column as ``createdat``. The
reconciler restores the authoritative database identifiers recorded in the
dialect sub-objects and canonicalizes type tags.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from model_discovery.errors import SchemaIntegrityError
from model_discovery.models import ModelDefinition, PropertyDef, canonical_type

logger = logging.getLogger(__name__)


def reconcile_table_name(discovered_name: str, table_override: Optional[str]) -> str:
    """Return the model name to persist: the explicit table name wins."""
    if table_override and table_override != discovered_name:
        return table_override
    return discovered_name


def reconcile_column_name(discovered_key: str, column_name: str) -> str:
    """Return the property key to persist: the database column name wins."""
    if discovered_key != column_name:
        return column_name
    return discovered_key


def _canonical(type_value: Any) -> Any:
    # Array properties are declared as a one-element list of the item type
    if isinstance(type_value, list):
        return [_canonical(t) for t in type_value]
    if isinstance(type_value, dict):
        return type_value
    return canonical_type(type_value)


def canonicalize_property_types(properties: Dict[str, Dict[str, Any]]) -> Dict[str, Dict[str, Any]]:
    """Lowercase every ``type`` in a serialized properties mapping, in place."""
    for prop in properties.values():
        if isinstance(prop, dict) and "type" in prop:
            prop["type"] = _canonical(prop["type"])
    return properties


class NameReconciler:
    """
    Reconciles a discovered model with its database identifiers.

    Args:
        dialect: Key of the database-specific sub-object (e.g. ``"mysql"``)
    """

    def __init__(self, dialect: str):
        self.dialect = dialect

    def reconcile(self, model: ModelDefinition) -> ModelDefinition:
        """
        Rename the model and re-key its properties in place.

        Raises:
            SchemaIntegrityError: if a property has no column metadata
        """
        table = model.table_override(self.dialect)
        name = reconcile_table_name(model.name, table)
        if name != model.name:
            logger.info(f"Force model name {model.name} to table name {name}")
            model.name = name

        model.properties = self._reconcile_properties(model)

        for prop in model.properties.values():
            prop.type = _canonical(prop.type)

        return model

    def _reconcile_properties(self, model: ModelDefinition) -> Dict[str, PropertyDef]:
        reconciled: Dict[str, PropertyDef] = {}

        for key, prop in model.properties.items():
            column = prop.column_name(self.dialect)
            if column is None:
                logger.error(
                    f"Property {model.name}.{key} has no {self.dialect} definition; "
                    f"table is missing a primary key"
                )
                raise SchemaIntegrityError(
                    model.name, key, "table is missing a primary key or the column is unsupported"
                )

            new_key = reconcile_column_name(key, column)
            if new_key in reconciled:
                raise SchemaIntegrityError(
                    model.name, key, f"column {new_key} is already mapped by another property"
                )
            if new_key != key:
                logger.debug(f"Rename property {model.name}.{key} to {new_key}")
            reconciled[new_key] = prop

        return reconciled
