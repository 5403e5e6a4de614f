"""Logic for converting Markdown fragments to HTML out of order.

Rendering a page happens in three phases:

1. Draft: `MarkdownQueue.enqueue` returns a placeholder token right away. The
   token is inert markup (`<markdown_<id>/>`) that can be embedded in HTML or
   in other Markdown fragments.
2. Flush: `MarkdownQueue.flush` converts every queued fragment once and
   returns a `RenderedMarkdown`. The queue accepts no new fragments after it.
3. Splice: `RenderedMarkdown.splice` replaces placeholder tokens in a host
   text with the rendered HTML.

Only `RenderedMarkdown` can splice, so substituting before the batch
conversion has run is impossible by construction.
"""

import logging
import re
import threading
import time
import uuid
from collections.abc import Callable, Iterable, Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass

import markdown

from docbuilder.errors import DeferredRenderError

logger = logging.getLogger(__name__)

PostProcessor = Callable[[str], str]

DEFAULT_EXTENSIONS = ("fenced_code", "tables")
PLACEHOLDER_RE = re.compile(r"<markdown_([0-9a-f]{32})/>")


def placeholder_token(fragment_id: str) -> str:
    """Return the inert tag standing in for a fragment's HTML."""
    return f"<markdown_{fragment_id}/>"


@dataclass(frozen=True)
class Placeholder:
    """The handle returned for an enqueued fragment."""

    id: str
    token: str


@dataclass
class DeferredFragment:
    """A queued Markdown text and, once flushed, its HTML."""

    id: str
    markdown: str
    post_processor: PostProcessor | None = None
    html: str | None = None


class MarkdownQueue:
    """Collects Markdown fragments while documents are being drafted."""

    def __init__(self, extensions: Sequence[str] = DEFAULT_EXTENSIONS) -> None:
        """Initialize an empty queue converting with the given extensions."""
        self.extensions = list(extensions)
        self._fragments: dict[str, DeferredFragment] = {}
        self._lock = threading.Lock()
        self._rendered: RenderedMarkdown | None = None

    def __len__(self) -> int:
        return len(self._fragments)

    def enqueue(
        self, text: str, post_processor: PostProcessor | None = None
    ) -> Placeholder:
        """Queue `text` for conversion and return its placeholder."""
        fragment_id = uuid.uuid4().hex
        with self._lock:
            if self._rendered is not None:
                msg = "Tried enqueueing Markdown after deferred rendering was done"
                raise DeferredRenderError(msg)
            self._fragments[fragment_id] = DeferredFragment(
                fragment_id, text, post_processor
            )
        return Placeholder(fragment_id, placeholder_token(fragment_id))

    def flush(self, max_workers: int | None = None) -> "RenderedMarkdown":
        """Convert every queued fragment and seal the queue.

        Fragments are independent, so they are converted in a thread pool.
        Calling `flush` again returns the same result without converting
        anything twice.
        """
        with self._lock:
            if self._rendered is not None:
                return self._rendered
            pending = [f for f in self._fragments.values() if f.html is None]

            started = time.perf_counter()
            logger.debug("Performing deferred rendering of %d fragments", len(pending))
            with ThreadPoolExecutor(max_workers=max_workers) as pool:
                for fragment, html in zip(
                    pending, pool.map(self._convert, pending), strict=True
                ):
                    fragment.html = html
            logger.debug(
                "Rendered %d Markdown fragments in %.1f ms",
                len(pending),
                (time.perf_counter() - started) * 1000,
            )

            self._rendered = RenderedMarkdown(self._fragments)
            return self._rendered

    def _convert(self, fragment: DeferredFragment) -> str:
        # markdown.markdown builds a fresh converter per call, which keeps
        # conversions thread safe
        html = markdown.markdown(fragment.markdown, extensions=self.extensions)
        if fragment.post_processor is not None:
            html = fragment.post_processor(html)
        return html


class RenderedMarkdown:
    """Read-only view of converted fragments; the only way to splice."""

    def __init__(self, fragments: dict[str, DeferredFragment]) -> None:
        """Wrap the fragments of a flushed queue."""
        self._fragments = fragments

    def html_for(self, fragment_id: str) -> str:
        """Return the converted HTML of one fragment."""
        fragment = self._fragments.get(fragment_id)
        if fragment is None:
            msg = (
                f"Tried applying deferred Markdown rendering payload with id "
                f"{fragment_id} - unknown id"
            )
            raise DeferredRenderError(msg)
        if fragment.html is None:
            msg = (
                f"Tried applying deferred Markdown rendering payload with id "
                f"{fragment_id} which has not yet been rendered"
            )
            raise DeferredRenderError(msg)
        return fragment.html

    def splice(self, text: str, ids: Iterable[str]) -> str:
        """Substitute the placeholders of `ids` in `text` with their HTML.

        `ids` are given in the order the fragments were produced and handled
        in reverse, so fragments embedded in later ones are dealt with after
        their host. Each fragment's own HTML has the placeholders of other
        listed fragments expanded before it is substituted, which leaves no
        dangling token whichever way the fragments were nested.
        """
        ordered = list(ids)
        scope = set(ordered)
        expanded: dict[str, str] = {}

        for fragment_id in reversed(ordered):
            html = self._expand(fragment_id, scope, expanded, ())
            text = text.replace(placeholder_token(fragment_id), html)
        return text

    def _expand(
        self,
        fragment_id: str,
        scope: set[str],
        expanded: dict[str, str],
        trail: tuple[str, ...],
    ) -> str:
        if fragment_id in expanded:
            return expanded[fragment_id]
        if fragment_id in trail:
            msg = f"Deferred Markdown fragment {fragment_id} contains itself"
            raise DeferredRenderError(msg)

        html = self.html_for(fragment_id)
        nested = [m for m in PLACEHOLDER_RE.findall(html) if m in scope]
        for child_id in dict.fromkeys(nested):
            child_html = self._expand(
                child_id, scope, expanded, (*trail, fragment_id)
            )
            html = html.replace(placeholder_token(child_id), child_html)

        expanded[fragment_id] = html
        return html
