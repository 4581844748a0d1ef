"""
Override merge: caller values win, field by field.

Both sides are wire-format dicts (camelCase keys). Every field is a scalar,
so replacement is whole-value; nothing is merged deeply.
"""

from typing import Any, Dict


def merge(generated: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    """
    Return a new record: generated values, replaced by every override that is present.

    None in overrides means "not supplied". Neither input is modified.
    """
    merged = dict(generated)
    for key, value in overrides.items():
        if value is not None:
            merged[key] = value
    return merged
