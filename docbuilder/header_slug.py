"""Utility for generating ids for HTML headers."""

import re


def header_slug(s: str) -> str:
    """Lowercase, dash every character outside [a-z0-9-_], drop trailing noise.

    Returns "" when nothing usable is left, in which case no id is set.
    """
    s = re.sub(r"[^a-zA-Z0-9\-_]", "-", s.strip().lower())
    s = re.sub(r"-{2,}", "-", s)
    return re.sub(r"[^a-zA-Z0-9]+$", "", s)
