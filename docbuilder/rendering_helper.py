"""Logic shared by the API document and TOC item renderers.

Titles for script-module style members come from their doc comment
attributes instead of the structural metadata; the rules live here so page
titles and listing titles always agree.
"""

from dataclasses import dataclass

from docbuilder.api_models import (
    ApiAttribute,
    ApiComment,
    ApiId,
    ApiParameter,
    ApiTitles,
    Entity,
    TocItem,
    TocSection,
)
from docbuilder.errors import EntityRenderError

UX_ATTACHED_PREFIX = "uno/ux/uxattached"

ATTACHED_ATTRIBUTE_TYPES = {
    "uxattachedproperty": "property",
    "uxattachedevent": "event",
    "uxattachedmethod": "method",
}

IMPLICITLY_ADVANCED_TYPES = {
    "class",
    "delegate",
    "enum",
    "interface",
    "struct",
    "constructor",
    "property",
    "method",
    "event",
    "field",
    "cast",
    "operator",
    "literal",
    "swizzlertype",
}

TYPE_ICONS = {
    "event": "bolt",
    "uxevent": "bolt",
    "jsevent": "bolt",
    "attacheduxevent": "bolt",
    "jsmethod": "square-o",
    "method": "square-o",
    "constructor": "check",
    "literal": "tag",
    "class": "cog",
    "uxclass": "cog",
    "jsmodule": "cog",
    "namespace": "gears",
    "enum": "tags",
    "struct": "th",
    "delegate": "arrow-circle-o-right",
    "interface": "file-o",
    "operator": "asterisk",
    "field": "circle-o",
    "cast": "repeat",
    "swizzlertype": "files-o",
}
PROPERTY_TYPES = {"property", "uxproperty", "jsproperty", "attacheduxproperty"}
LIST_HREF_PREFIXES = ("uno/collections/list_", "uno/collections/ilist_")

JS_TYPES = {"jsmodule", "jsproperty", "jsevent", "jsmethod"}
UX_TYPES = {"uxclass", "uxproperty", "uxevent", "attacheduxproperty", "attacheduxevent"}


@dataclass(frozen=True)
class AttachedAttributeInfo:
    """Describes a member that one type attaches to another in UX markup."""

    attribute_type: str
    attached_by_type: str
    attached_by_href: str
    attached_to_type: str
    attached_to_href: str
    name: str
    full_name: str


def get_attached_attribute_info(
    id: ApiId,
    parameters: tuple[ApiParameter, ...],
    attributes: tuple[ApiAttribute, ...],
    entity_cache: dict[str, Entity],
) -> AttachedAttributeInfo | None:
    """Return attachment details for methods carrying a UX attached attribute."""
    ux_attribute = next(
        (
            a
            for a in attributes
            if a.uri.href.startswith(UX_ATTACHED_PREFIX) and a.parameters
        ),
        None,
    )
    if id.type != "Method" or len(parameters) < 2 or ux_attribute is None:  # noqa: PLR2004
        return None

    attribute_type = ""
    for marker, kind in ATTACHED_ATTRIBUTE_TYPES.items():
        if marker in ux_attribute.uri.href:
            attribute_type = kind
            break

    parent = entity_cache.get(id.parent_id or "")
    if parent is None:
        msg = (
            f"Found attached UX attribute {id.id} where the parent id "
            f"{id.parent_id} was not found"
        )
        raise EntityRenderError(msg)

    # The attached-to type is the first method parameter, the attribute name
    # is the last segment of the attribute's first argument
    full_name = ux_attribute.parameters[0]
    return AttachedAttributeInfo(
        attribute_type=attribute_type,
        attached_by_type=parent.titles.index_title,
        attached_by_href=parent.uri.href,
        attached_to_type=parameters[0].title,
        attached_to_href=parameters[0].href,
        name=full_name.split(".")[-1],
        full_name=full_name,
    )


def get_title(
    id: ApiId,
    titles: ApiTitles,
    comment: ApiComment | None,
    parameters: tuple[ApiParameter, ...],
    attributes: tuple[ApiAttribute, ...],
    entity_cache: dict[str, Entity],
    *,
    is_index: bool,
) -> str:
    """Return the page title (or listing title when `is_index`) of an entity."""
    attached = get_attached_attribute_info(id, parameters, attributes, entity_cache)
    if not is_index and attached is not None:
        return (
            f"{attached.name} attached {attached.attribute_type} "
            f"on {attached.attached_to_type}"
        )

    type_name = _owner_type_name(titles.fully_qualified_index_title)
    attrs = comment.attributes if comment else None

    if id.type == "JsMethod":
        if attrs is None or attrs.script_method is None:
            msg = f"Found JsMethod without script method comment, unable to generate title: {id.id}"
            raise EntityRenderError(msg)
        method = attrs.script_method
        name = f"{method.name}({', '.join(method.parameters)})"
        return name if is_index else f"{type_name}.{name} Method (JS)"

    if id.type == "JsModule":
        if attrs is None or not attrs.script_module:
            msg = f"Found JsModule without script module comment, unable to generate title: {id.id}"
            raise EntityRenderError(msg)
        name = attrs.script_module
        return name if is_index else f"{name} Module (JS)"

    if id.type == "JsProperty":
        if attrs is None or not attrs.script_property:
            msg = f"Found JsProperty without script property comment, unable to generate title: {id.id}"
            raise EntityRenderError(msg)
        name = attrs.script_property
        return name if is_index else f"{type_name}.{name} Property (JS)"

    if id.type == "JsEvent":
        if attrs is None or not attrs.script_event:
            msg = f"Found JsEvent without script event comment, unable to generate title: {id.id}"
            raise EntityRenderError(msg)
        name = attrs.script_event
        return name if is_index else f"{type_name}.{name} Event (JS)"

    if is_index and id.type == "Constructor":
        return f"{titles.index_title} Constructor"

    if is_index and id.type.startswith("AttachedUx") and "." in titles.index_title:
        return titles.index_title.split(".")[1]

    return titles.index_title if is_index else titles.page_title


def is_advanced(item: TocItem, parent_id: ApiId | None) -> bool:
    """Return whether a listed item belongs behind the "advanced" toggle."""
    if item.id.type.lower() in IMPLICITLY_ADVANCED_TYPES:
        return True
    if item.comment is not None and item.comment.attributes.advanced:
        return True
    # Only Js* items are first-class on JS module pages
    if parent_id is not None and parent_id.type == "JsModule":
        return not item.id.type.startswith("Js")
    return False


def has_only_advanced_items(toc: dict[str, list[TocSection]], parent_id: ApiId) -> bool:
    return all(
        is_advanced(item, parent_id)
        for sections in toc.values()
        for section in sections
        for item in section.items
    )


def type_icon(item: TocItem) -> str:
    """Return the icon name for a listed item's kind."""
    kind = item.id.type.lower()
    if kind in PROPERTY_TYPES:
        if item.flags is not None and item.flags.is_ux_container:
            href = item.returns.href if item.returns else ""
            return "cubes" if href.startswith(LIST_HREF_PREFIXES) else "cube"
        return "wrench"
    if kind not in TYPE_ICONS:
        msg = f"Unable to identify TOC type icon for {item.id.id} with type {item.id.type}"
        raise EntityRenderError(msg)
    return TYPE_ICONS[kind]


def language_of(type_name: str) -> str:
    kind = type_name.lower()
    if kind in JS_TYPES:
        return "js"
    if kind in UX_TYPES:
        return "ux"
    return "uno"


def _owner_type_name(fully_qualified: str) -> str:
    """Turn `Fuse.Elements.Element.Equals(Fuse.Elements.Element other)` into `Element`."""
    name = fully_qualified.split("(", 1)[0]
    if "." in name:
        name = name.split(".")[-2]
    return name
