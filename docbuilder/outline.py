"""Logic for turning the tab-indented outline file into navigation HTML.

Each non-blank, non-`//` line of the outline reads `Title : link`, where the
number of leading tabs gives the nesting depth and the link points either at
an article (`articles/<path>.md`) or at an API document
(`api-docs/<path>.json`).
"""

import logging
from collections.abc import Callable, Iterable
from pathlib import Path

from docbuilder.errors import ConfigurationError, OutlineError
from docbuilder.escape_html import escape_html

logger = logging.getLogger(__name__)

OUTLINE_FILE = "outline"
NAVIGATION_FILE = "outline-navigation.html"
ENTRY_SEPARATOR = " : "

Emit = Callable[[int, str], None]


def generate_outline(root_path: Path, base_url: str) -> str:
    """Build the navigation from `<root>/outline` and store it beside it."""
    source = root_path / OUTLINE_FILE
    if not source.is_file():
        msg = f"Unable to find outline file at '{source}'"
        raise ConfigurationError(msg)

    logger.debug("Building outline file from '%s'", source)
    navigation = build_outline(
        source.read_text(encoding="utf-8").splitlines(), root_path, base_url
    )
    (root_path / NAVIGATION_FILE).write_text(navigation, encoding="utf-8")
    return navigation


def build_outline(lines: Iterable[str], root_path: Path, base_url: str) -> str:
    """Return nested `<ul>` navigation for the given outline lines."""
    output: list[str] = []

    def emit(indentation: int, text: str) -> None:
        output.append("\t" * indentation + text)

    seen: dict[str, int] = {}
    previous = 0
    for line_number, line in enumerate(lines, start=1):
        stripped = line.strip()
        if not stripped or stripped.startswith("//"):
            continue

        parts = line.split(ENTRY_SEPARATOR)
        if len(parts) != 2:  # noqa: PLR2004
            msg = f"Malformed entry in outline at line {line_number}: {line}"
            raise OutlineError(msg)
        title, link = parts[0].strip(), parts[1].strip()

        level = _indentation(line, line_number)
        _decorate(previous, level, emit)

        if not (root_path / link).is_file():
            msg = (
                f"Link referenced in outline on line {line_number} not found: "
                f"'{root_path / link}'"
            )
            raise OutlineError(msg)

        href = _parse_href(link, line_number)
        if href in seen:
            msg = (
                f"Duplicate link found in outline on line {line_number}: {href}. "
                f"Previously seen on line {seen[href]}."
            )
            raise OutlineError(msg)
        seen[href] = line_number

        # The API root page is written as root-ns.html and API pages live at
        # the top of the output tree
        if href == "api/index.html":
            href = "api/root-ns.html"
        if href.lower().startswith("api/") and href.lower().endswith(".html"):
            href = href[len("api/") :]

        emit(level + 1, f'<a href="{base_url}{escape_html(href)}">{escape_html(title)}</a>')
        previous = level

    _decorate(previous, 0, emit)
    return "\n".join(output) + "\n" if output else ""


def _parse_href(link: str, line_number: int) -> str:
    if link.startswith("articles/") and link.lower().endswith(".md"):
        return link[len("articles/") : -len(".md")] + ".html"
    if link.startswith("api-docs/") and link.lower().endswith(".json"):
        return link[len("api-docs/") : -len(".json")] + ".html"
    msg = f"Invalid outline link {link} on line {line_number}"
    raise OutlineError(msg)


def _indentation(line: str, line_number: int) -> int:
    """Return the nesting level of a line; top-level entries are level 1."""
    tabs = 0
    for char in line:
        if char == " ":
            msg = (
                f"Malformed entry in outline (mixed tabs and spaces) at line "
                f"{line_number}: {line}"
            )
            raise OutlineError(msg)
        if char != "\t":
            break
        tabs += 1
    return tabs + 1


def _decorate(previous: int, level: int, emit: Emit) -> None:
    """Close and open list markers to move from `previous` to `level`."""
    if previous != 0 and previous == level:
        emit(previous, "</li>")
        emit(level, "<li>")
        return

    if previous < level:
        # One nested list per level, so deep jumps stay balanced
        for i in range(previous, level):
            emit(i, f'<ul class="list-unstyled outline-nav outline-nav-level-{i}">')
            emit(i + 1, "<li>")
        return

    for i in range(previous, level - 1, -1):
        if i != 0:
            emit(i, "</li>")
        if i != level:
            emit(i - 1, "</ul>")
    if level != 0:
        emit(level, "<li>")
