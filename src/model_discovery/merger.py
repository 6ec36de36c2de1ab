"""
Merge-on-write of discovered definitions into existing definition files.

Only ``properties`` is refreshed from discovery. Every other top-level
field of an existing file (settings, relations, validations, ACLs and any
custom keys) is hand-authored and kept verbatim.
"""

from __future__ import annotations

import copy
from typing import Any, Dict, Optional


def merge_definitions(
    discovered: Dict[str, Any],
    existing: Optional[Dict[str, Any]],
) -> Dict[str, Any]:
    """Return ``existing`` with its properties replaced by the discovered ones."""
    if existing is None:
        return copy.deepcopy(discovered)

    merged = copy.deepcopy(existing)
    merged["properties"] = copy.deepcopy(discovered.get("properties", {}))
    return merged


class DefinitionMerger:
    """Applies the overwrite policy on top of merge_definitions()."""

    def __init__(self, overwrite: bool = False):
        self.overwrite = overwrite

    def merge(
        self,
        discovered: Dict[str, Any],
        existing: Optional[Dict[str, Any]] = None,
    ) -> Optional[Dict[str, Any]]:
        """
        Merge a discovered definition with an existing one.

        Returns:
            The definition to write, or None when an existing definition
            must be left untouched because overwrite is not allowed.
        """
        if existing is not None and not self.overwrite:
            return None
        return merge_definitions(discovered, existing)
