"""Data models for API reference metadata documents."""

from dataclasses import dataclass, field
from datetime import datetime

from docbuilder.inheritance_tree import InheritanceTree


@dataclass(frozen=True)
class ApiId:
    """Composite identifier of a documented entity."""

    id: str
    parent_id: str | None = None
    type: str = ""
    modifiers: tuple[str, ...] = ()


@dataclass(frozen=True)
class ApiUri:
    """Site-relative location of an entity; `href` doubles as identity key."""

    href: str
    id_uri: str = ""


@dataclass(frozen=True)
class ApiTitles:
    """The different titles an entity is shown under."""

    page_title: str = ""
    index_title: str = ""
    fully_qualified_index_title: str = ""


@dataclass(frozen=True)
class ScriptMethod:
    name: str
    parameters: tuple[str, ...] = ()


@dataclass(frozen=True)
class CommentReturns:
    type_hint: str = ""
    text: str = ""


@dataclass(frozen=True)
class CommentParameter:
    name: str
    type_hint: str = ""
    description: str = ""


@dataclass(frozen=True)
class CommentAttributes:
    """Structured attributes extracted from a doc comment."""

    advanced: bool = False
    script_module: str = ""
    script_method: ScriptMethod | None = None
    script_property: str = ""
    script_event: str = ""
    returns: CommentReturns | None = None
    topic: str = ""
    parameters: tuple[CommentParameter, ...] = ()
    see_also: tuple[str, ...] = ()
    deprecated: bool = False
    experimental: bool = False
    hidden: bool = False

    def parameter(self, name: str) -> CommentParameter | None:
        """Return the documented parameter with the given name, if any."""
        return next((p for p in self.parameters if p.name == name), None)


@dataclass(frozen=True)
class ApiComment:
    """Free-text comment bundle of an entity."""

    brief: str = ""
    full: str = ""
    remarks: str = ""
    examples: str = ""
    ux: str = ""
    attributes: CommentAttributes = field(default_factory=CommentAttributes)


@dataclass(frozen=True)
class ApiLocation:
    namespace_title: str = ""
    namespace_uri: str = ""
    package_name: str = ""
    package_version: str = ""


@dataclass(frozen=True)
class ApiParameter:
    name: str
    href: str = ""
    is_virtual: bool = False
    title: str = ""


@dataclass(frozen=True)
class ApiReturns:
    href: str = ""
    is_virtual: bool = False
    title: str = ""


@dataclass(frozen=True)
class ApiFlags:
    ux_content: bool = False
    ux_primary: bool = False
    ux_components: bool = False

    @property
    def is_ux_container(self) -> bool:
        return self.ux_content or self.ux_primary or self.ux_components


@dataclass(frozen=True)
class ApiValue:
    """One possible value of an enum-like entity."""

    uri: str
    title: str
    comment: ApiComment | None = None


@dataclass(frozen=True)
class ApiAttribute:
    """An annotation decorating an entity."""

    id: ApiId
    uri: ApiUri
    titles: ApiTitles
    parameters: tuple[str, ...] = ()


@dataclass(frozen=True)
class ApiInterface:
    id: ApiId
    uri: ApiUri
    titles: ApiTitles
    comment: ApiComment | None = None


@dataclass(frozen=True)
class Entity:
    """A documented program element (type, member, module)."""

    id: ApiId
    uri: ApiUri
    titles: ApiTitles
    comment: ApiComment | None = None
    location: ApiLocation | None = None
    inheritance: InheritanceTree | None = None
    parameters: tuple[ApiParameter, ...] = ()
    returns: ApiReturns | None = None
    implemented_interfaces: tuple[ApiInterface, ...] = ()
    values: tuple[ApiValue, ...] = ()
    flags: ApiFlags | None = None
    attributes: tuple[ApiAttribute, ...] = ()


@dataclass(frozen=True)
class TocItem:
    """A lightweight projection of an entity used for one listing row."""

    id: ApiId
    uri: ApiUri
    titles: ApiTitles
    comment: ApiComment | None = None
    returns: ApiReturns | None = None
    parameters: tuple[ApiParameter, ...] = ()
    flags: ApiFlags | None = None

    @classmethod
    def from_entity(cls, entity: Entity) -> "TocItem":
        return cls(
            id=entity.id,
            uri=entity.uri,
            titles=entity.titles,
            comment=entity.comment,
            returns=entity.returns,
            parameters=entity.parameters,
            flags=entity.flags,
        )


@dataclass(frozen=True)
class DeclaredIn:
    """The ancestor type a table-of-contents section was declared in."""

    id: ApiId
    uri: ApiUri
    titles: ApiTitles


@dataclass
class TocSection:
    """One declared-in bucket of a table-of-contents category."""

    declared_in: DeclaredIn | None = None
    items: list[TocItem] = field(default_factory=list)


@dataclass
class ApiDocument:
    """A parsed per-entity metadata document."""

    entity: Entity
    table_of_contents: dict[str, list[TocSection]] = field(default_factory=dict)
    source_modified_at: datetime | None = None


@dataclass
class ApiIndex:
    """A parsed descendant list of one type."""

    root: Entity
    descendants: list[TocItem] = field(default_factory=list)
    source_modified_at: datetime | None = None
