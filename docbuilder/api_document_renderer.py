"""Logic for drafting the HTML page of one API entity."""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from docbuilder.api_models import ApiDocument, Entity, TocItem
from docbuilder.count_lines import count_lines
from docbuilder.deferred_markdown import MarkdownQueue
from docbuilder.drafts import ApiDocumentQuality, DocumentDraft
from docbuilder.escape_html import escape_html
from docbuilder.reference_map import ReferenceMap
from docbuilder.relative_path import relative_path
from docbuilder.rendering_helper import (
    get_attached_attribute_info,
    get_title,
    has_only_advanced_items,
    is_advanced,
)
from docbuilder.shift_headings import shift_headings
from docbuilder.subclass_index import SubclassIndex
from docbuilder.toc_groups import DeclaredInGroup, TocTypeGroup
from docbuilder.toc_item_renderer import render_toc_item
from docbuilder.toc_organizer import split_by_declared_in, split_by_type

logger = logging.getLogger(__name__)

ROOT_DOCUMENT_ID = "__root__"
ROOT_DOCUMENT_PATH = "root-ns.html"
TYPE_LISTED_KINDS = {"Namespace", "Root"}

ADVANCED_ONLY_NOTICE = (
    "This page contains documentation for advanced Fuse features, so we have "
    'taken the liberty to tick the "Show advanced things" checkbox above for '
    "you in advance to be able to provide you with some additional information."
)


@dataclass
class _Parameter:
    name: str
    comment: str = ""
    type_hint: str = ""
    href: str = ""
    title: str = ""


@dataclass
class _Returns:
    comment: str = ""
    type_hint: str = ""
    href: str = ""
    title: str = ""


@dataclass
class _PageState:
    document: ApiDocument
    parts: list[str] = field(default_factory=list)
    deferred_ids: list[str] = field(default_factory=list)
    comment_lines: int = 0
    toc_comment_lines: dict[str, int] = field(default_factory=dict)

    @property
    def entity(self) -> Entity:
        return self.document.entity

    @property
    def path(self) -> str:
        return self.document.entity.uri.href


def output_path_for(entity: Entity) -> str:
    """Return the output file of an entity, relative to the output root."""
    if entity.id.type == "Root" and entity.id.id == ROOT_DOCUMENT_ID:
        return ROOT_DOCUMENT_PATH
    return f"{entity.uri.href}.html"


class ApiDocumentRenderer:
    """Drafts API pages; knows every entity so pages can link to each other."""

    def __init__(
        self,
        documents: Iterable[ApiDocument],
        queue: MarkdownQueue,
        subclass_index: SubclassIndex,
        reference_map: ReferenceMap,
    ) -> None:
        """Index the entities of `documents` for cross-page lookups."""
        self.queue = queue
        self.subclass_index = subclass_index
        self.reference_map = reference_map
        entities = [d.entity for d in documents]
        self.entity_cache = {e.id.id: e for e in entities}
        self._by_href = {e.uri.href: e for e in entities}

    def draft(
        self, document: ApiDocument
    ) -> tuple[DocumentDraft, ApiDocumentQuality] | None:
        """Draft the page of `document`; swizzler types have no page."""
        if document.entity.id.type == "SwizzlerType":
            return None

        state = _PageState(document)
        self._write_title(state)
        self._write_section_links(state)
        self._write_notifications(state)
        self._write_attached_attribute_details(state)
        self._write_comment(state)
        self._write_markdown_section(state, "ux", "UX", _comment_text(state, "ux"))
        self._write_location(state)
        self._write_parameters(state)
        self._write_returns(state)
        self._write_values(state)
        self._write_toc(state)
        self._write_interfaces(state)
        self._write_markdown_section(
            state, "remarks", "Remarks", _comment_text(state, "remarks")
        )
        self._write_markdown_section(
            state, "examples", "Examples", _comment_text(state, "examples")
        )
        self._write_see_also(state)

        draft = DocumentDraft(
            path=output_path_for(document.entity),
            html="\n".join(state.parts) + "\n",
            deferred_ids=state.deferred_ids,
            modified_at=document.source_modified_at,
        )
        quality = ApiDocumentQuality(
            document, state.comment_lines, state.toc_comment_lines
        )
        return draft, quality

    def _write_title(self, state: _PageState) -> None:
        entity = state.entity
        title = get_title(
            entity.id,
            entity.titles,
            entity.comment,
            entity.parameters,
            entity.attributes,
            self.entity_cache,
            is_index=False,
        )
        sub_title = ""
        topic = entity.comment.attributes.topic if entity.comment else ""
        if topic.strip():
            sub_title, title = title, topic

        toc = state.document.table_of_contents
        only_advanced = has_only_advanced_items(toc, entity.id)

        parts = state.parts
        parts += ['<header class="page-header">', '<h2 id="section-introduction">']
        parts.append(escape_html(title))
        if sub_title.strip():
            parts.append(f'<span class="sub-title">{escape_html(sub_title)}</span>')
        parts.append("</h2>")

        if toc:
            checked = " checked" if only_advanced else ""
            parts += [
                '<form class="advanced-toggle">',
                '<div class="form-check">',
                '<input class="form-check-input" type="checkbox" '
                f'id="showAdvancedCheckbox"{checked} />',
                '<label class="form-check-label" for="showAdvancedCheckbox">',
                "Show advanced things",
                "</label>",
                "</div>",
                "</form>",
            ]
        parts.append("</header>")

        if toc and only_advanced:
            parts += [
                '<div class="alert alert-info alert-api-advanced-only">',
                ADVANCED_ONLY_NOTICE,
                "</div>",
            ]

    def _write_section_links(self, state: _PageState) -> None:
        sections = []
        if _comment_text(state, "ux").strip():
            sections.append(("ux", "UX"))
        if state.document.table_of_contents:
            sections.append(("table-of-contents", "Table of Contents"))
        if _comment_text(state, "remarks").strip():
            sections.append(("remarks", "Remarks"))
        if _comment_text(state, "examples").strip():
            sections.append(("examples", "Examples"))
        if state.entity.comment and state.entity.comment.attributes.see_also:
            sections.append(("see-also", "See Also"))
        if not sections:
            return

        state.parts += [
            '<section class="section-jump">',
            '<ul class="nav nav-pills">',
            '<li class="nav-item"><a href="#" class="nav-link disabled">Jump to:</a></li>',
        ]
        for key, title in sections:
            state.parts.append(
                f'<li class="nav-item"><a href="#section-{escape_html(key)}" '
                f'class="nav-link">{escape_html(title)}</a></li>'
            )
        state.parts += ["</ul>", "</section>"]

    def _write_notifications(self, state: _PageState) -> None:
        attributes = state.entity.comment.attributes if state.entity.comment else None
        if attributes is None:
            return
        if attributes.deprecated:
            css = "alert-api-deprecated"
            text = "This entity is deprecated and will be removed in a future release."
        elif attributes.experimental:
            css = "alert-api-experimental"
            text = (
                "This entity is experimental and might be changed or removed in a "
                "future release."
            )
        else:
            return
        state.parts += [
            '<section class="notifications">',
            f'<div class="alert alert-warning {css}">',
            text,
            "</div>",
            "</section>",
        ]

    def _write_attached_attribute_details(self, state: _PageState) -> None:
        entity = state.entity
        info = get_attached_attribute_info(
            entity.id, entity.parameters, entity.attributes, self.entity_cache
        )
        if info is None:
            return
        href = relative_path(state.path, info.attached_by_href, "html")
        state.parts += [
            "<p><em>",
            f'Attached by <a href="{escape_html(href)}">'
            f"{escape_html(info.attached_by_type)}</a>.",
            f"Use full name <code>{escape_html(info.full_name)}</code> in UX "
            "markup if ambiguous.",
            "</em></p>",
        ]

    def _write_comment(self, state: _PageState) -> None:
        full = _comment_text(state, "full")
        if not full.strip():
            return
        state.comment_lines = count_lines(full)
        state.parts.append(self._enqueue_preformatted(state, full))

    def _write_markdown_section(
        self, state: _PageState, css: str, title: str, markdown: str
    ) -> None:
        if not markdown.strip():
            return
        token = self._enqueue_preformatted(state, markdown)
        state.parts += [
            f'<section class="documentation-{css}">',
            f'<h3 id="section-{css}">{escape_html(title)}</h3>',
            token,
            "</section>",
        ]

    def _write_location(self, state: _PageState) -> None:
        location = state.entity.location
        if location is None or not (
            location.namespace_uri.strip() or location.package_name.strip()
        ):
            return

        classes = ["type-location"]
        if not state.document.table_of_contents:
            classes.append("type-location-leaf")

        parts = state.parts
        parts += [
            f'<section class="{" ".join(classes)}">',
            '<h3 id="section-location">Location</h3>',
            "<dl>",
        ]
        if location.namespace_uri.strip():
            href = relative_path(state.path, location.namespace_uri, "html")
            parts += [
                "<dt>Namespace</dt>",
                "<dd>",
                f'<a href="{escape_html(href)}">',
                escape_html(location.namespace_title),
                "</a>",
                "</dd>",
            ]
        if location.package_name.strip():
            package = f"{location.package_name} {location.package_version}"
            parts += ["<dt>Package</dt>", f"<dd>{escape_html(package)}</dd>"]
        parts += ["</dl>", "</section>"]

    def _write_parameters(self, state: _PageState) -> None:
        parameters = _build_parameters(state.entity)
        if not parameters:
            return

        parts = state.parts
        parts += [
            '<section class="parameters">',
            '<h3 id="section-parameters">Parameters</h3>',
            "<dl>",
        ]
        for param in parameters:
            parts += [f"<dt>{escape_html(param.name)}</dt>", "<dd>"]
            if param.title.strip():
                parts.append("<p>")
                parts += _linked_title(state.path, param.href, param.title)
                parts.append("</p>")
            elif param.type_hint.strip():
                parts.append(f"<p>{escape_html(param.type_hint)}</p>")
            if param.comment.strip():
                parts.append(self._enqueue(state, param.comment))
            parts.append("</dd>")
        parts += ["</dl>", "</section>"]

    def _write_returns(self, state: _PageState) -> None:
        returns = _build_returns(state.entity)
        if returns is None:
            return

        parts = state.parts
        parts += [
            '<section class="returns">',
            '<h3 id="section-returns">Returns</h3>',
            "<p>",
        ]
        if returns.title.strip():
            parts += _linked_title(state.path, returns.href, returns.title)
        elif returns.type_hint.strip():
            parts.append(escape_html(returns.type_hint))
        parts.append("</p>")
        if returns.comment.strip():
            parts.append(self._enqueue(state, returns.comment))
        parts.append("</section>")

    def _write_values(self, state: _PageState) -> None:
        values = state.entity.values
        if not values:
            return

        parts = state.parts
        parts += [
            '<section class="values">',
            '<h3 id="section-values">Possible Values</h3>',
            "<dl>",
        ]
        for value in values:
            href = relative_path(state.path, value.uri, "html")
            parts += [
                "<dt>",
                f'<a href="{escape_html(href)}">',
                escape_html(value.title),
                "</a>",
                "</dt>",
                "<dd>",
            ]
            brief = value.comment.brief if value.comment else ""
            if brief.strip():
                parts.append(self._enqueue(state, brief))
            parts.append("</dd>")
        parts += ["</dl>", "</section>"]

    def _write_toc(self, state: _PageState) -> None:
        toc = state.document.table_of_contents
        if not toc:
            return

        state.parts.append('<section class="table-of-contents">')
        # Namespace level pages list everything by category instead of by
        # declaring type
        if state.entity.id.type in TYPE_LISTED_KINDS:
            self._write_toc_by_type(state, split_by_type(toc))
        else:
            self._write_toc_by_declared_in(state, split_by_declared_in(state.entity, toc))
        state.parts.append("</section>")

    def _write_toc_by_type(self, state: _PageState, groups: list[TocTypeGroup]) -> None:
        for group in groups:
            state.parts += [
                f'<h3 id="section-table-of-contents">{escape_html(group.title)}</h3>',
                '<section class="table-of-contents-section">',
            ]
            for item in group.items:
                self._write_toc_item(state, item)
            state.parts.append("</section>")

    def _write_toc_by_declared_in(
        self, state: _PageState, groups: list[DeclaredInGroup]
    ) -> None:
        entity = state.entity
        state.parts += [
            '<h3 id="section-table-of-contents">',
            f"Interface of {escape_html(entity.titles.index_title)}",
            "</h3>",
        ]
        for group in groups:
            advanced = [is_advanced(i, entity.id) for i in group.items]
            classes = ["table-of-contents-section"]
            if any(advanced):
                classes.append("has-advanced-items")
            if all(advanced):
                classes.append("only-advanced-items")
            declared_in = group.declared_in
            inherited = declared_in is not None and declared_in.id.id != entity.id.id
            if declared_in is not None and declared_in.uri.id_uri != entity.uri.id_uri:
                classes.append("inherited")
            if group.attached:
                classes.append("attached")

            state.parts.append(f'<section class="{" ".join(classes)}">')
            if inherited:
                anchor = declared_in.uri.href.replace("/", "-")
                href = relative_path(state.path, declared_in.uri.href, "html")
                state.parts += [
                    f'<h4 id="section-table-of-contents-inherited-from-{anchor}">',
                    "Inherited from",
                    f'<a href="{escape_html(href)}">',
                    escape_html(declared_in.titles.index_title),
                    "</a>",
                    "</h4>",
                ]
            elif group.attached:
                state.parts.append(
                    '<h4 id="section-table-of-contents-attached-ux-attributes">'
                    "Attached UX Attributes</h4>"
                )

            for item in group.items:
                self._write_toc_item(state, item)
            state.parts.append("</section>")

    def _write_toc_item(self, state: _PageState, item: TocItem) -> None:
        row = render_toc_item(
            item,
            self.queue,
            self.entity_cache,
            state.path,
            advanced=is_advanced(item, state.entity.id),
        )
        state.deferred_ids.extend(row.deferred_ids)
        state.parts.append(row.html)
        state.toc_comment_lines[item.uri.id_uri] = row.comment_lines

    def _write_interfaces(self, state: _PageState) -> None:
        interfaces = state.entity.implemented_interfaces
        if not interfaces:
            return

        state.parts += [
            '<section class="interfaces">',
            '<section class="table-of-contents">',
            '<section class="table-of-contents-section has-advanced-items '
            'only-advanced-items">',
            '<h4 id="section-table-of-contents-implemented-interfaces">'
            "Implemented Interfaces</h4>",
        ]
        for iface in interfaces:
            item = TocItem(iface.id, iface.uri, iface.titles, iface.comment)
            row = render_toc_item(
                item, self.queue, self.entity_cache, state.path, advanced=True
            )
            state.deferred_ids.extend(row.deferred_ids)
            state.parts.append(row.html)
        state.parts += ["</section>", "</section>", "</section>"]

    def _write_see_also(self, state: _PageState) -> None:
        comment = state.entity.comment
        if comment is None or not comment.attributes.see_also:
            return

        items = []
        for keyword in comment.attributes.see_also:
            entity = self._see_also_entity(keyword)
            if entity is None:
                logger.error(
                    "Unable to resolve seealso entry for %s - no match in file "
                    "system nor reference map: '%s'",
                    state.path,
                    keyword,
                )
                continue
            items.append(
                TocItem(entity.id, entity.uri, entity.titles, entity.comment)
            )
        if not items:
            return

        logger.debug("Adding see also section to %s", state.path)
        state.parts += [
            '<section class="see-also">',
            '<section class="table-of-contents">',
            '<section class="table-of-contents-section">',
            '<h4 id="section-see-also">See Also</h4>',
        ]
        for item in items:
            row = render_toc_item(
                item, self.queue, self.entity_cache, state.path, advanced=False
            )
            state.deferred_ids.extend(row.deferred_ids)
            state.parts.append(row.html)
        state.parts += ["</section>", "</section>", "</section>"]

    def _see_also_entity(self, keyword: str) -> Entity | None:
        if keyword in self.entity_cache:
            return self.entity_cache[keyword]
        target = self.reference_map.target_for(keyword)
        if target is None:
            return None
        return self.entity_cache.get(target) or self._by_href.get(target)

    def _enqueue(self, state: _PageState, markdown: str) -> str:
        placeholder = self.queue.enqueue(markdown, shift_headings)
        state.deferred_ids.append(placeholder.id)
        return placeholder.token

    def _enqueue_preformatted(self, state: _PageState, markdown: str) -> str:
        markdown, ids = self.subclass_index.embed(markdown, state.path, self.queue)
        state.deferred_ids.extend(ids)
        return self._enqueue(state, markdown)


def _comment_text(state: _PageState, name: str) -> str:
    comment = state.entity.comment
    return getattr(comment, name) if comment is not None else ""


def _linked_title(current_path: str, href: str, title: str) -> list[str]:
    if not href.strip():
        return [escape_html(title)]
    target = relative_path(current_path, href, "html")
    return [f'<a href="{escape_html(target)}">', escape_html(title), "</a>"]


def _build_parameters(entity: Entity) -> list[_Parameter]:
    """Return the parameter rows of an entity according to its kind."""
    comment = entity.comment
    attributes = comment.attributes if comment else None

    # Script methods document their parameters in the comment only
    if entity.id.type == "JsMethod":
        if attributes is None or attributes.script_method is None:
            return []
        rows = []
        for name in attributes.script_method.parameters:
            documented = attributes.parameter(name)
            rows.append(
                _Parameter(
                    name=name,
                    comment=documented.description if documented else "",
                    type_hint=documented.type_hint if documented else "",
                )
            )
        return rows

    if entity.id.type == "JsEvent":
        return []

    rows = []
    for param in entity.parameters:
        documented = attributes.parameter(param.name) if attributes else None
        rows.append(
            _Parameter(
                name=param.name,
                comment=documented.description if documented else "",
                href="" if param.is_virtual else param.href,
                title=param.title,
            )
        )
    return rows


def _build_returns(entity: Entity) -> _Returns | None:
    documented = entity.comment.attributes.returns if entity.comment else None

    if entity.id.type == "JsMethod":
        if documented is None or not (
            documented.type_hint.strip() or documented.text.strip()
        ):
            return None
        return _Returns(comment=documented.text, type_hint=documented.type_hint)

    if entity.returns is None:
        return None
    return _Returns(
        comment=documented.text if documented else "",
        href="" if entity.returns.is_virtual else entity.returns.href,
        title=entity.returns.title,
    )
