"""Logic for layering a user configuration over the defaults."""

from typing import Any

# List settings that extend the defaults instead of replacing them
ADDITIVE_KEYS = {"extensions"}


def deep_merge(base: dict[str, Any], update: dict[str, Any]) -> dict[str, Any]:
    """Return `base` overlaid with `update`, leaving both inputs untouched.

    Nested sections merge key by key. A list under one of ADDITIVE_KEYS keeps
    the default entries first and appends the new ones; any other value in
    `update` simply wins.
    """
    merged = dict(base)
    for key, value in update.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = deep_merge(current, value)
        elif key in ADDITIVE_KEYS and isinstance(current, list) and isinstance(value, list):
            merged[key] = current + [v for v in value if v not in current]
        else:
            merged[key] = value
    return merged
