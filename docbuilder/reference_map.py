"""Logic for resolving `@keyword` references into links between documents.

The reference map is a line-oriented file of `keyword target` pairs. Every
target is a site-relative path without extension that must exist either as an
article (`<articles>/<target>.md`) or as an API document
(`<api>/<target>.json`).

Three reference forms are recognised in rendered text:

- `@Keyword`
- `@(Keyword)` (legacy)
- `@(Keyword:custom title)` (legacy, aliased)

Known keywords become anchors, unknown ones are replaced by their display
title and recorded so they can be reported at the end of the run.
"""

import logging
import re
import threading
from collections.abc import Iterable
from pathlib import Path

from docbuilder.errors import (
    ConfigurationError,
    ReferenceMapError,
    ReferenceResolutionError,
)
from docbuilder.escape_html import escape_html
from docbuilder.relative_path import relative_path

logger = logging.getLogger(__name__)

KEY_VALUE_SPLIT_RE = re.compile(r"\s+")
CODE_TAG_RE = re.compile(r"<(/?)code\b[^>]*>", re.IGNORECASE)

# Stands in for the sigil of references found inside code spans while the
# rewrite loop runs, so the same match is never found twice.
CODE_SIGIL = "\ue000"

UNKNOWN_BARE = r"[A-Za-z0-9_]+"
UNKNOWN_PARENTHESIZED = r"\([A-Za-z0-9_]+(?::.+?)?\)"

DEFAULT_MAX_ITERATIONS = 10000


class ReferenceMap:
    """Keyword to document lookup used to hyperlink inline references."""

    def __init__(
        self,
        articles_root: Path,
        api_root: Path,
        max_iterations: int = DEFAULT_MAX_ITERATIONS,
    ) -> None:
        """Initialize an empty map validating targets against the two roots."""
        self.articles_root = Path(articles_root)
        self.api_root = Path(api_root)
        self.max_iterations = max_iterations
        self._lookups: dict[str, str] = {}
        self._pattern = _build_match_pattern([])
        self._failed_lookups: dict[str, set[str]] = {}
        self._failed_lock = threading.Lock()

    def parse(self, path: Path) -> None:
        """Load the reference map file at `path`."""
        if not path.is_file():
            msg = f"Unable to find reference map at '{path}'"
            raise ConfigurationError(msg)
        logger.debug("Parsing reference map at '%s'", path)
        self.load(path.read_text(encoding="utf-8").splitlines())

    def load(self, lines: Iterable[str]) -> None:
        """Load mappings, skipping blank lines and `//` comments."""
        lookups: dict[str, str] = {}
        for line_number, raw in enumerate(lines, start=1):
            line = raw.strip()
            if not line or line.startswith("//"):
                continue
            self._process_mapping(line, line_number, lookups)

        logger.debug("%d entries read from reference map", len(lookups))
        self._lookups = lookups
        self._pattern = _build_match_pattern(lookups)

    def target_for(self, keyword: str) -> str | None:
        """Return the target path mapped to `keyword`, if any."""
        return self._lookups.get(keyword)

    @property
    def keywords(self) -> list[str]:
        return list(self._lookups)

    def resolve(self, text: str, current_path: str) -> str:
        """Rewrite every reference in `text` as seen from `current_path`.

        Matches are handled one at a time, left to right, and the text is
        re-scanned from the start after each rewrite. References inside
        `<code>` spans keep their text; only their sigil is masked until the
        loop ends.
        """
        iterations = 0
        while True:
            match = self._pattern.search(text)
            if not match:
                break

            iterations += 1
            if iterations > self.max_iterations:
                msg = (
                    f"Problems resolving references in {current_path}: gave up "
                    f"after {self.max_iterations} rewrites"
                )
                raise ReferenceResolutionError(msg)

            start, end = match.span()
            if _within_code_span(start, text):
                text = text[:start] + CODE_SIGIL + text[start + 1 :]
                continue

            exact = match.group(0)
            keyword, title = _split_reference(exact)
            target = self._lookups.get(keyword)
            if target is None:
                self._record_failure(exact, current_path)
                replacement = escape_html(title)
            else:
                href = relative_path(current_path, target, "html")
                replacement = f'<a href="{escape_html(href)}">{escape_html(title)}</a>'
            text = text[:start] + replacement + text[end:]

        return text.replace(CODE_SIGIL, "@")

    def failed_lookups(self) -> dict[str, list[str]]:
        """Return every unresolved reference with the pages it occurred on."""
        with self._failed_lock:
            return {k: sorted(v) for k, v in sorted(self._failed_lookups.items())}

    def _record_failure(self, exact: str, current_path: str) -> None:
        with self._failed_lock:
            self._failed_lookups.setdefault(exact, set()).add(current_path)

    def _process_mapping(
        self, line: str, line_number: int, target: dict[str, str]
    ) -> None:
        parts = KEY_VALUE_SPLIT_RE.split(line)
        if len(parts) != 2:  # noqa: PLR2004
            msg = f"Malformed reference map entry on line {line_number}: {line}"
            raise ReferenceMapError(msg)

        keyword, path = parts
        if keyword in target:
            logger.warning(
                "Duplicate reference map entry on line %d: %s", line_number, line
            )
            return

        if (
            not (self.articles_root / f"{path}.md").is_file()
            and not (self.api_root / f"{path}.json").is_file()
        ):
            msg = (
                f"Unable to resolve path {path} in reference map entry on line "
                f"{line_number}: {line}"
            )
            raise ReferenceMapError(msg)

        target[keyword] = path


def _build_match_pattern(keywords: Iterable[str]) -> re.Pattern[str]:
    """Build one alternation over all keywords, longest first, then catch-alls."""
    alternatives: list[str] = []
    for kw in sorted(keywords, key=len, reverse=True):
        escaped = re.escape(kw)
        alternatives.append(rf"{escaped}(?!\w)")
        alternatives.append(rf"\({escaped}\)")
        alternatives.append(rf"\({escaped}:.+?\)")

    alternatives.append(UNKNOWN_BARE)
    alternatives.append(UNKNOWN_PARENTHESIZED)
    return re.compile(r"(?<!\w)@(?:" + "|".join(alternatives) + ")")


def _split_reference(exact: str) -> tuple[str, str]:
    """Return the lookup keyword and the display title of a matched reference."""
    keyword = exact[1:]
    if keyword.startswith("(") and keyword.endswith(")"):
        keyword = keyword[1:-1]
        if ":" in keyword:
            keyword, title = keyword.split(":", 1)
            return keyword, title
    return keyword, keyword


def _code_spans(text: str) -> list[tuple[int, int]]:
    """Return `[start, end)` intervals covered by `<code>` elements.

    An opener without a matching closer extends to the end of the text.
    """
    spans: list[tuple[int, int]] = []
    depth = 0
    opened_at = 0
    for tag in CODE_TAG_RE.finditer(text):
        if not tag.group(1):
            if depth == 0:
                opened_at = tag.start()
            depth += 1
        elif depth > 0:
            depth -= 1
            if depth == 0:
                spans.append((opened_at, tag.end()))
    if depth > 0:
        spans.append((opened_at, len(text)))
    return spans


def _within_code_span(index: int, text: str) -> bool:
    return any(start <= index < end for start, end in _code_spans(text))
