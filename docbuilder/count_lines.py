"""Utility for counting lines of documentation text."""

import re

LINE_BREAK_RE = re.compile(r"\r\n|\r|\n")


def count_lines(text: str) -> int:
    """Count lines the way an editor would; the empty string is one line."""
    return len(LINE_BREAK_RE.split(text))
