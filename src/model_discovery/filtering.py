"""Restrict discovered tables to a requested allow-list."""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from model_discovery.errors import TablesNotFoundError
from model_discovery.models import TableRef

logger = logging.getLogger(__name__)


def filter_tables(
    tables: Sequence[TableRef],
    requested: Optional[Sequence[str]] = None,
) -> List[TableRef]:
    """
    Keep only the tables named in ``requested``, in discovery order.

    Names are compared exactly (case-sensitive). Each match consumes the
    name from a working copy of ``requested``; any name left over is an
    error even when other names matched.

    Raises:
        TablesNotFoundError: listing every requested name not discovered
    """
    if requested is None:
        return list(tables)

    remaining = list(requested)
    selected = []
    for table in tables:
        if table.name in remaining:
            remaining.remove(table.name)
            selected.append(table)

    if remaining:
        raise TablesNotFoundError(remaining)

    logger.info(f"Selected {len(selected)} of {len(tables)} discovered tables")
    return selected
