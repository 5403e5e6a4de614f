"""Logic for rendering one row of a table-of-contents listing."""

from dataclasses import dataclass, field

from docbuilder.api_models import Entity, TocItem
from docbuilder.count_lines import count_lines
from docbuilder.deferred_markdown import MarkdownQueue
from docbuilder.errors import EntityRenderError
from docbuilder.escape_html import escape_html
from docbuilder.relative_path import relative_path
from docbuilder.rendering_helper import get_title, language_of, type_icon

LIST_TYPE_PREFIXES = ("List<", "IList<")


@dataclass
class TocItemRendering:
    """HTML of a listing row plus what its host page has to track."""

    html: str
    deferred_ids: list[str] = field(default_factory=list)
    comment_lines: int = 0


def render_toc_item(
    item: TocItem,
    queue: MarkdownQueue,
    entity_cache: dict[str, Entity],
    current_path: str,
    *,
    advanced: bool,
) -> TocItemRendering:
    """Render `item` as an `<article>` row linked relative to `current_path`."""
    classes = ["table-of-contents-item"]
    if advanced:
        classes.append("is-advanced")

    result = TocItemRendering(html="")
    parts = [f'<article class="{" ".join(classes)}">']
    parts.append(_render_type(item))
    parts += _render_link(item, entity_cache, current_path)
    parts += _render_comment(item, queue, current_path, result)
    parts.append("</article>")

    result.html = "\n".join(parts) + "\n"
    return result


def _render_type(item: TocItem) -> str:
    kind = item.id.type
    classes = [
        "table-of-contents-item-type",
        f"table-of-contents-item-type-{kind.lower()}",
        "fa",
        f"fa-{type_icon(item)}",
    ]
    return f'<span class="{" ".join(classes)}" title="{escape_html(kind)}"></span>'


def _render_link(
    item: TocItem, entity_cache: dict[str, Entity], current_path: str
) -> list[str]:
    title = get_title(
        item.id, item.titles, item.comment, (), (), {}, is_index=True
    )
    if not title.strip():
        msg = (
            f"No title could be generated for {item.id.id} in {current_path} "
            f"(type {item.id.type})"
        )
        raise EntityRenderError(msg)

    href = relative_path(current_path, item.uri.href, "html")
    parts = ["<h5>", f'<a href="{escape_html(href)}">', escape_html(title), "</a>"]
    parts += _render_attached_by(item, entity_cache, current_path)
    parts += _render_returns(item, current_path)
    language = language_of(item.id.type)
    parts.append(
        f'<span class="table-of-contents-item-language '
        f'table-of-contents-item-language-{language}">{escape_html(language)}</span>'
    )
    parts.append("</h5>")
    return parts


def _render_attached_by(
    item: TocItem, entity_cache: dict[str, Entity], current_path: str
) -> list[str]:
    if not item.id.type.startswith("AttachedUx"):
        return []

    underlying = entity_cache.get(item.id.id)
    if underlying is None:
        msg = f"TOC item {item.uri.href} was not found in entity cache"
        raise EntityRenderError(msg)
    attached_by = entity_cache.get(underlying.id.parent_id or "")
    if attached_by is None:
        msg = (
            f"Parent of TOC item {item.id.id} ({underlying.id.parent_id}) was "
            "not found in entity cache"
        )
        raise EntityRenderError(msg)

    href = relative_path(current_path, attached_by.uri.href, "html")
    return [
        '<span class="table-of-contents-item-inline-attached-by">',
        f'(attached by <a href="{escape_html(href)}">'
        f"{escape_html(attached_by.titles.index_title)}</a>)",
        "</span>",
    ]


def _render_returns(item: TocItem, current_path: str) -> list[str]:
    returns = item.returns
    if item.id.type == "JsMethod" or returns is None:
        return []

    title = returns.title
    if title.startswith(LIST_TYPE_PREFIXES):
        prefix, generics = title.split("<", 1)
        title = f"{prefix} of {generics.rstrip('>')}"

    linked = bool(returns.href.strip()) and not returns.is_virtual
    parts = ['<span class="table-of-contents-item-inline-returns"> : ']
    if linked:
        href = relative_path(current_path, returns.href, "html")
        parts.append(f'<a href="{escape_html(href)}">')
    parts.append(escape_html(title))
    if linked:
        parts.append("</a>")
    parts.append("</span>")
    return parts


def _render_comment(
    item: TocItem,
    queue: MarkdownQueue,
    current_path: str,
    result: TocItemRendering,
) -> list[str]:
    comment = item.comment
    if comment is None or not comment.brief.strip():
        return []
    result.comment_lines = count_lines(comment.full) if comment.full.strip() else 0

    brief = comment.brief
    if comment.brief != comment.full:
        href = relative_path(current_path, item.uri.href, "html")
        brief += (
            f' <a href="{escape_html(href)}" class="table-of-contents-item-has-more" '
            'title="There is more information available for this entry">'
            '<i class="fa fa-ellipsis-h"></i></a>'
        )

    placeholder = queue.enqueue(brief)
    result.deferred_ids.append(placeholder.id)
    return ['<div class="table-of-contents-item-brief">', placeholder.token, "</div>"]
