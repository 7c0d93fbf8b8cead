"""Field merging used by update and set(merge=True)."""

import copy
from collections.abc import Mapping
from typing import Any


def _set_nested(target: dict[str, Any], keys: list[str], value: Any) -> None:
    for key in keys[:-1]:
        child = target.get(key)
        if not isinstance(child, dict):
            child = {}
            target[key] = child
        target = child
    target[keys[-1]] = value


def merge_update(existing: Mapping[str, Any], data: Mapping[str, Any]) -> dict[str, Any]:
    """Apply update data onto an existing document.

    Dotted keys such as ``"profile.age"`` set a nested field and leave its
    siblings alone, creating intermediate maps as needed. All other keys
    replace the top-level field.

    Args:
        existing: Current document fields.
        data: Update data.

    Returns:
        The merged document; neither argument is modified.
    """
    merged = copy.deepcopy(dict(existing))
    flat: dict[str, Any] = {}
    for key, value in data.items():
        if "." in key:
            _set_nested(merged, key.split("."), value)
        else:
            flat[key] = value
    merged.update(flat)
    return merged


def without_id(doc: Mapping[str, Any]) -> dict[str, Any]:
    """Drop the ``id`` key that decode_document adds."""
    return {k: v for k, v in doc.items() if k != "id"}
