"""Logic for writing drafted pages and finishing them once Markdown is rendered.

Drafts are written to disk as soon as they are produced. After the deferred
Markdown queue has been flushed, `OutputPath.post_process` revisits every
written file: it splices in the rendered fragments, resolves references,
rewrites prefixed links, checks every link, adds header ids and wraps the
result in the layout.
"""

import logging
import os
import shutil
import threading
import time
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

from bs4 import BeautifulSoup

from docbuilder.deferred_markdown import RenderedMarkdown
from docbuilder.drafts import DocumentDraft
from docbuilder.errors import DeadLinkError
from docbuilder.header_slug import header_slug
from docbuilder.layout import Layout
from docbuilder.link_verifier import collect_links, verify_links
from docbuilder.reference_map import ReferenceMap
from docbuilder.relative_path import relative_path

logger = logging.getLogger(__name__)

LINK_PREFIXES = ("articles", "api")
LEGACY_EXAMPLES_PREFIX = "/examples/"
HEADER_TAGS = ["h1", "h2", "h3", "h4", "h5", "h6"]


@dataclass
class _Registration:
    deferred_ids: list[str] = field(default_factory=list)
    transform: Callable[[str], str] | None = None


@dataclass(frozen=True)
class PostProcessResult:
    """Outcome of finishing one output file."""

    path: str
    title: str
    dead_links: list[str]


class OutputPath:
    """The output directory and the files written to it during one run."""

    def __init__(
        self,
        root: Path,
        reference_map: ReferenceMap,
        layout: Layout,
        examples_url: str,
    ) -> None:
        """Remember where output goes; call `prepare` before writing."""
        self.root = root
        self.reference_map = reference_map
        self.layout = layout
        self.examples_url = examples_url
        self._written: dict[str, _Registration] = {}
        self._lock = threading.Lock()

    def prepare(self) -> None:
        """Recreate an empty output directory."""
        if self.root.exists():
            logger.debug("Output path %s already exists, deleting", self.root)
            shutil.rmtree(self.root)
        self.root.mkdir(parents=True)

    def write_draft(self, draft: DocumentDraft) -> Path:
        """Write a draft and remember how to finish it later."""
        path = self.write_content(draft.path, draft.html, draft.modified_at)
        with self._lock:
            self._written[draft.path] = _Registration(
                list(draft.deferred_ids), draft.transform
            )
        return path

    def write_content(
        self, relative: str, content: str, modified_at: datetime | None = None
    ) -> Path:
        full_path = self.root / relative
        full_path.parent.mkdir(parents=True, exist_ok=True)
        full_path.write_text(content, encoding="utf-8")
        if modified_at is not None:
            stamp = modified_at.timestamp()
            os.utime(full_path, (stamp, stamp))
        with self._lock:
            self._written.setdefault(relative, _Registration())
        return full_path

    @property
    def written_files(self) -> list[str]:
        with self._lock:
            return sorted(self._written)

    def post_process(
        self,
        rendered: RenderedMarkdown,
        navigation: str,
        max_workers: int | None = None,
    ) -> list[PostProcessResult]:
        """Finish every written file; fail afterwards if any link is dead."""
        with self._lock:
            registrations = dict(self._written)

        started = time.perf_counter()
        logger.debug("Applying post processing on %d output files", len(registrations))
        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            results = list(
                pool.map(
                    lambda item: self._post_process_file(
                        item[0], item[1], rendered, navigation
                    ),
                    sorted(registrations.items()),
                )
            )

        broken = [r for r in results if r.dead_links]
        if broken:
            total = sum(len(r.dead_links) for r in broken)
            logger.error(
                "%d files had in total %d invalid/dead links in them:",
                len(broken),
                total,
            )
            for result in broken:
                logger.error("Missing links in file %s:", result.path)
                for link in result.dead_links:
                    logger.error(" - %s", link)
            msg = "Missing links found, please correct before re-running"
            raise DeadLinkError(msg, {r.path: r.dead_links for r in broken})

        logger.debug(
            "Applied post processing on %d output files in %.1f ms",
            len(results),
            (time.perf_counter() - started) * 1000,
        )
        return results

    def _post_process_file(
        self,
        relative: str,
        registration: _Registration,
        rendered: RenderedMarkdown,
        navigation: str,
    ) -> PostProcessResult:
        full_path = self.root / relative
        modified = full_path.stat().st_mtime
        html = full_path.read_text(encoding="utf-8")

        html = rendered.splice(html, registration.deferred_ids)
        if registration.transform is not None:
            html = registration.transform(html)
        html = self.reference_map.resolve(html, relative)
        html = rewrite_prefixed_links(html, relative)
        dead_links = verify_links(html, full_path)

        soup = BeautifulSoup(html, "html.parser")
        title = page_title(soup)
        add_header_ids(soup)
        self._correct_legacy_links(soup)
        html = self.layout.apply(str(soup), navigation, title)

        full_path.write_text(html, encoding="utf-8")
        os.utime(full_path, (modified, modified))
        return PostProcessResult(relative, title, dead_links)

    def _correct_legacy_links(self, soup: BeautifulSoup) -> None:
        for anchor in soup.find_all("a", href=True):
            href = anchor["href"]
            if href.startswith(LEGACY_EXAMPLES_PREFIX):
                anchor["href"] = self.examples_url + href[len(LEGACY_EXAMPLES_PREFIX) :]


def rewrite_prefixed_links(html: str, current_path: str) -> str:
    """Turn `articles:<path>` and `api:<path>` hrefs into relative page links."""
    links = collect_links(html)
    for prefix in LINK_PREFIXES:
        marker = f"{prefix}:"
        prefixed = sorted(
            {link for link in links if link.startswith(marker)}, key=len, reverse=True
        )
        for link in prefixed:
            target = relative_path(current_path, link[len(marker) :], None)
            target, hash_sign, fragment = target.partition("#")
            if target.endswith(".md"):
                target = target[: -len(".md")] + ".html"
            elif target.endswith(".json"):
                target = target[: -len(".json")] + ".html"
            if not target.endswith(".html"):
                target += ".html"
            html = html.replace(link, target + hash_sign + fragment)
    return html


def page_title(soup: BeautifulSoup) -> str:
    """Return the text of the first h1 or h2, or "" when there is none."""
    header = soup.find(["h1", "h2"])
    return header.get_text().strip() if header is not None else ""


def add_header_ids(soup: BeautifulSoup) -> None:
    """Give every header an id, keeping ids that are already set."""
    for header in soup.find_all(HEADER_TAGS):
        header_id = header.get("id") or header_slug(header.get_text())
        if header_id:
            header["id"] = header_id
