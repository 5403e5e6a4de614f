"""Utility for escaping text embedded into generated HTML."""

import html


def escape_html(text: str | None) -> str:
    """Escape &, <, > and double quotes; empty input yields an empty string."""
    if not text:
        return ""
    return html.escape(text, quote=True).replace("&#x27;", "'")
