"""Logic for drafting hand-written Markdown articles."""

import logging
from datetime import datetime, timezone
from pathlib import Path

from docbuilder.count_lines import count_lines
from docbuilder.deferred_markdown import MarkdownQueue
from docbuilder.drafts import ArticleQuality, DocumentDraft
from docbuilder.errors import ConfigurationError
from docbuilder.subclass_index import SubclassIndex

logger = logging.getLogger(__name__)

MARKDOWN_LINK_ENDINGS = {".md)": ".html)", '.md"': '.html"', ".md#": ".html#"}


def article_files(articles_root: Path) -> list[Path]:
    """Return every article source below `articles_root`."""
    if not articles_root.is_dir():
        msg = f"Unable to find article root directory '{articles_root}'"
        raise ConfigurationError(msg)
    files = sorted(articles_root.rglob("*.md"))
    logger.debug("%d article source files identified", len(files))
    return files


def draft_article(
    source: Path,
    articles_root: Path,
    queue: MarkdownQueue,
    subclass_index: SubclassIndex,
) -> tuple[DocumentDraft, ArticleQuality]:
    """Queue one article for conversion and return its draft."""
    output_path = source.relative_to(articles_root).with_suffix(".html").as_posix()
    raw = source.read_text(encoding="utf-8")

    markdown, deferred_ids = subclass_index.embed(raw, output_path, queue)
    placeholder = queue.enqueue(markdown)
    deferred_ids.append(placeholder.id)

    draft = DocumentDraft(
        path=output_path,
        html=placeholder.token,
        deferred_ids=deferred_ids,
        modified_at=datetime.fromtimestamp(source.stat().st_mtime, tz=timezone.utc),
        transform=rewrite_article_links,
    )
    return draft, ArticleQuality(output_path, count_lines(raw))


def rewrite_article_links(html: str) -> str:
    """Point links at the generated `.html` pages and fix image paths."""
    for old, new in MARKDOWN_LINK_ENDINGS.items():
        html = html.replace(old, new)
    # Articles sit one level shallower in the output than in the source tree
    return html.replace('<img src="../', '<img src="')
