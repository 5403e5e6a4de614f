"""Logic for turning camelCase API metadata JSON into model objects."""

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from docbuilder.api_models import (
    ApiAttribute,
    ApiComment,
    ApiDocument,
    ApiFlags,
    ApiId,
    ApiIndex,
    ApiInterface,
    ApiLocation,
    ApiParameter,
    ApiReturns,
    ApiTitles,
    ApiUri,
    ApiValue,
    CommentAttributes,
    CommentParameter,
    CommentReturns,
    DeclaredIn,
    Entity,
    ScriptMethod,
    TocItem,
    TocSection,
)
from docbuilder.as_text import as_text
from docbuilder.errors import ApiJsonError
from docbuilder.inheritance_tree import InheritanceTree


def load_api_json(path: Path) -> dict[str, Any]:
    """Read one metadata file, failing with the file name on bad JSON."""
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        msg = f"Failed to parse '{path}': {exc}"
        raise ApiJsonError(msg) from exc
    if not isinstance(data, dict):
        msg = f"Failed to parse '{path}': top-level value is not an object"
        raise ApiJsonError(msg)
    return data


def parse_api_document(data: dict[str, Any], path: Path) -> ApiDocument:
    """Build an ApiDocument, dropping hidden items from every TOC section."""
    entity = _required_entity(data.get("entity"), path, "entity")
    toc: dict[str, list[TocSection]] = {}
    for category, sections in (data.get("tableOfContents") or {}).items():
        try:
            parsed = [parse_toc_section(s) for s in sections or []]
        except (KeyError, AttributeError, TypeError) as exc:
            msg = (
                f"Failed to parse '{path}': malformed table of contents "
                f"section '{category}' ({exc!r})"
            )
            raise ApiJsonError(msg) from exc
        for section in parsed:
            section.items = [i for i in section.items if not _is_hidden(i.comment)]
        toc[category] = parsed
    return ApiDocument(
        entity=entity,
        table_of_contents=toc,
        source_modified_at=_modified_at(path),
    )


def parse_api_index(data: dict[str, Any], path: Path) -> ApiIndex:
    """Build an ApiIndex from a descendant list document."""
    root = _required_entity(data.get("root"), path, "root")
    try:
        descendants = [parse_toc_item(d) for d in data.get("descendants") or []]
    except (KeyError, AttributeError, TypeError) as exc:
        msg = f"Failed to parse '{path}': malformed 'descendants' ({exc!r})"
        raise ApiJsonError(msg) from exc
    return ApiIndex(
        root=root,
        descendants=descendants,
        source_modified_at=_modified_at(path),
    )


def parse_entity(raw: dict[str, Any]) -> Entity:
    return Entity(
        id=parse_id(raw["id"]),
        uri=parse_uri(raw["uri"]),
        titles=parse_titles(raw["titles"]),
        comment=parse_comment(raw.get("comment")),
        location=_parse_location(raw.get("location")),
        inheritance=_parse_inheritance(raw.get("inheritance")),
        parameters=tuple(_parse_parameter(p) for p in raw.get("parameters") or []),
        returns=_parse_returns(raw.get("returns")),
        implemented_interfaces=tuple(
            _parse_interface(i) for i in raw.get("implementedInterfaces") or []
        ),
        values=tuple(_parse_value(v) for v in raw.get("values") or []),
        flags=_parse_flags(raw.get("flags")),
        attributes=tuple(_parse_attribute(a) for a in raw.get("attributes") or []),
    )


def parse_toc_item(raw: dict[str, Any]) -> TocItem:
    return TocItem(
        id=parse_id(raw["id"]),
        uri=parse_uri(raw["uri"]),
        titles=parse_titles(raw.get("titles") or {}),
        comment=parse_comment(raw.get("comment")),
        returns=_parse_returns(raw.get("returns")),
        parameters=tuple(_parse_parameter(p) for p in raw.get("parameters") or []),
        flags=_parse_flags(raw.get("flags")),
    )


def parse_toc_section(raw: dict[str, Any]) -> TocSection:
    declared_in = None
    raw_declared = raw.get("declaredIn")
    if raw_declared and raw_declared.get("id") and raw_declared.get("uri"):
        declared_in = DeclaredIn(
            id=parse_id(raw_declared["id"]),
            uri=parse_uri(raw_declared["uri"]),
            titles=parse_titles(raw_declared.get("titles") or {}),
        )
    return TocSection(
        declared_in=declared_in,
        items=[parse_toc_item(i) for i in raw.get("items") or []],
    )


def parse_id(raw: dict[str, Any]) -> ApiId:
    parent = raw.get("parentId")
    return ApiId(
        id=str(raw.get("id") or ""),
        parent_id=str(parent) if parent else None,
        type=str(raw.get("type") or ""),
        modifiers=tuple(str(m) for m in raw.get("modifiers") or []),
    )


def parse_uri(raw: dict[str, Any]) -> ApiUri:
    return ApiUri(href=str(raw.get("href") or ""), id_uri=str(raw.get("idUri") or ""))


def parse_titles(raw: dict[str, Any]) -> ApiTitles:
    return ApiTitles(
        page_title=as_text(raw.get("pageTitle")),
        index_title=as_text(raw.get("indexTitle")),
        fully_qualified_index_title=as_text(raw.get("fullyQualifiedIndexTitle")),
    )


def parse_comment(raw: dict[str, Any] | None) -> ApiComment | None:
    if not raw:
        return None
    return ApiComment(
        brief=as_text(raw.get("brief")),
        full=as_text(raw.get("full")),
        remarks=as_text(raw.get("remarks")),
        examples=as_text(raw.get("examples")),
        ux=as_text(raw.get("ux")),
        attributes=_parse_comment_attributes(raw.get("attributes") or {}),
    )


def _parse_comment_attributes(raw: dict[str, Any]) -> CommentAttributes:
    script_method = None
    if raw.get("scriptMethod"):
        sm = raw["scriptMethod"]
        script_method = ScriptMethod(
            name=as_text(sm.get("name")),
            parameters=tuple(str(p) for p in sm.get("parameters") or []),
        )

    returns = None
    if raw.get("returns"):
        returns = CommentReturns(
            type_hint=as_text(raw["returns"].get("typeHint")),
            text=as_text(raw["returns"].get("text")),
        )

    return CommentAttributes(
        advanced=bool(raw.get("advanced")),
        script_module=as_text(raw.get("scriptModule")),
        script_method=script_method,
        script_property=as_text(raw.get("scriptProperty")),
        script_event=as_text(raw.get("scriptEvent")),
        returns=returns,
        topic=as_text(raw.get("topic")),
        parameters=tuple(
            CommentParameter(
                name=str(p.get("name") or ""),
                type_hint=as_text(p.get("typeHint")),
                description=as_text(p.get("description")),
            )
            for p in raw.get("parameters") or []
        ),
        see_also=tuple(str(s) for s in raw.get("seeAlso") or []),
        deprecated=bool(raw.get("deprecated")),
        experimental=bool(raw.get("experimental")),
        hidden=bool(raw.get("hidden")),
    )


def _parse_location(raw: dict[str, Any] | None) -> ApiLocation | None:
    if not raw:
        return None
    return ApiLocation(
        namespace_title=as_text(raw.get("namespaceTitle")),
        namespace_uri=as_text(raw.get("namespaceUri")),
        package_name=as_text(raw.get("packageName")),
        package_version=as_text(raw.get("packageVersion")),
    )


def _parse_inheritance(raw: dict[str, Any] | None) -> InheritanceTree | None:
    if not raw or not raw.get("root"):
        return None
    return InheritanceTree.from_json(raw["root"])


def _parse_parameter(raw: dict[str, Any]) -> ApiParameter:
    return ApiParameter(
        name=str(raw.get("name") or ""),
        href=as_text(raw.get("href")),
        is_virtual=bool(raw.get("isVirtual")),
        title=as_text(raw.get("title")),
    )


def _parse_returns(raw: dict[str, Any] | None) -> ApiReturns | None:
    if not raw:
        return None
    return ApiReturns(
        href=as_text(raw.get("href")),
        is_virtual=bool(raw.get("isVirtual")),
        title=as_text(raw.get("title")),
    )


def _parse_interface(raw: dict[str, Any]) -> ApiInterface:
    return ApiInterface(
        id=parse_id(raw["id"]),
        uri=parse_uri(raw["uri"]),
        titles=parse_titles(raw.get("titles") or {}),
        comment=parse_comment(raw.get("comment")),
    )


def _parse_value(raw: dict[str, Any]) -> ApiValue:
    return ApiValue(
        uri=as_text(raw.get("uri")),
        title=as_text(raw.get("title")),
        comment=parse_comment(raw.get("comment")),
    )


def _parse_flags(raw: dict[str, Any] | None) -> ApiFlags | None:
    if not raw:
        return None
    return ApiFlags(
        ux_content=bool(raw.get("uxContent")),
        ux_primary=bool(raw.get("uxPrimary")),
        ux_components=bool(raw.get("uxComponents")),
    )


def _parse_attribute(raw: dict[str, Any]) -> ApiAttribute:
    return ApiAttribute(
        id=parse_id(raw.get("id") or {}),
        uri=parse_uri(raw.get("uri") or {}),
        titles=parse_titles(raw.get("titles") or {}),
        parameters=tuple(str(p) for p in raw.get("parameters") or []),
    )


def _required_entity(raw: Any, path: Path, key: str) -> Entity:
    if not isinstance(raw, dict):
        msg = f"Failed to parse '{path}': missing '{key}' object"
        raise ApiJsonError(msg)
    try:
        return parse_entity(raw)
    except (KeyError, AttributeError, TypeError) as exc:
        msg = f"Failed to parse '{path}': malformed '{key}' ({exc!r})"
        raise ApiJsonError(msg) from exc


def _is_hidden(comment: ApiComment | None) -> bool:
    return comment is not None and comment.attributes.hidden


def _modified_at(path: Path) -> datetime:
    return datetime.fromtimestamp(path.stat().st_mtime, tz=timezone.utc)
