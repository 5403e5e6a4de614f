"""Logic for expanding `[subclass Some.Type]` markers into descendant lists."""

import logging
import re
from collections.abc import Iterable

from docbuilder.api_models import ApiIndex
from docbuilder.deferred_markdown import MarkdownQueue
from docbuilder.rendering_helper import is_advanced
from docbuilder.toc_groups import sort_by_index_title
from docbuilder.toc_item_renderer import render_toc_item

logger = logging.getLogger(__name__)

SUBCLASS_RE = re.compile(r"\[subclass ([\w.]+)\]", re.IGNORECASE)


class SubclassIndex:
    """Descendant indices keyed by the href of the type they describe."""

    def __init__(self, indices: Iterable[ApiIndex] = ()) -> None:
        """Index the given descendant lists by root href."""
        self._by_href = {index.root.uri.href: index for index in indices}

    def __len__(self) -> int:
        return len(self._by_href)

    def embed(
        self, markdown: str, current_path: str, queue: MarkdownQueue
    ) -> tuple[str, list[str]]:
        """Replace every subclass marker in `markdown`.

        Returns the new text and the placeholder ids of the rendered rows, in
        the order they were produced.
        """
        deferred_ids: list[str] = []
        for match in SUBCLASS_RE.finditer(markdown):
            exact = match.group(0)
            rendered = self._render(match.group(1), current_path, queue)
            if rendered is None:
                markdown = markdown.replace(exact, "")
                continue
            html, ids = rendered
            deferred_ids.extend(ids)
            markdown = markdown.replace(exact, html)
        return markdown, deferred_ids

    def _render(
        self, type_name: str, current_path: str, queue: MarkdownQueue
    ) -> tuple[str, list[str]] | None:
        href = type_name.lower().replace(".", "/")
        index = self._by_href.get(href)
        if index is None:
            logger.warning("Unable to find API index for %s - ignoring", href)
            return None

        items = sort_by_index_title(
            d for d in index.descendants if "abstract" not in d.id.modifiers
        )
        ids: list[str] = []
        parts = [
            '<section class="table-of-contents">',
            '<section class="table-of-contents-section">',
        ]
        for item in items:
            row = render_toc_item(
                item, queue, {}, current_path, advanced=is_advanced(item, None)
            )
            ids.extend(row.deferred_ids)
            parts.append(row.html)
        parts += ["</section>", "</section>"]
        return "\n".join(parts) + "\n", ids
