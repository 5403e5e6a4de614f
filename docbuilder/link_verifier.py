"""Logic for finding links in rendered HTML and checking their targets."""

import re
from pathlib import Path

HREF_RE = re.compile(r'<a\s+(?:[^>]*?\s+)?href="([^"]*)"', re.IGNORECASE)
EXTERNAL_PREFIXES = ("#", "/", "file://", "http://", "https://", "mailto:")


def collect_links(html: str) -> list[str]:
    """Return every anchor href in `html`, in document order."""
    return HREF_RE.findall(html)


def verify_links(html: str, file_path: Path) -> list[str]:
    """Return the relative links of `html` that point at no existing file.

    Fragment-only links, absolute paths and absolute URIs are not checked.
    """
    return [href for href in collect_links(html) if not _is_valid(href, file_path)]


def _is_valid(href: str, file_path: Path) -> bool:
    if href.startswith(EXTERNAL_PREFIXES):
        return True
    target = href.split("#", 1)[0]
    return (file_path.parent / target).resolve().is_file()
