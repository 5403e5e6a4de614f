"""Utility for reading optional JSON text fields."""


def as_text(value: object) -> str:
    """Return a JSON scalar as text; null and missing values become ""."""
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)
