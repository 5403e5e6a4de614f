"""Logic for grouping table-of-contents members for listing."""

from dataclasses import dataclass, field

from docbuilder.api_models import DeclaredIn, Entity, TocItem, TocSection
from docbuilder.errors import TocOrganizationError
from docbuilder.toc_groups import DeclaredInGroup, TocTypeGroup, sort_by_index_title

ATTACHED_PREFIX = "Attached"

# Category name and display title, in listing order.
TOC_CATEGORIES: list[tuple[str, str]] = [
    ("attachedUxProperties", "Attached UX Properties"),
    ("attachedUxEvents", "Attached UX Events"),
    ("jsModules", "JavaScript Modules"),
    ("jsProperties", "JavaScript Properties"),
    ("jsEvents", "JavaScript Events"),
    ("namespaces", "Namespaces"),
    ("uxClasses", "UX Classes"),
    ("classes", "Classes"),
    ("delegates", "Delegates"),
    ("enums", "Enums"),
    ("interfaces", "Interfaces"),
    ("structs", "Structs"),
    ("constructors", "Constructors"),
    ("properties", "Properties"),
    ("methods", "Methods"),
    ("events", "Events"),
    ("fields", "Fields"),
    ("casts", "Casts"),
    ("operators", "Operators"),
    ("literals", "Literals"),
    ("swizzlerTypes", "Swizzler Types"),
]


@dataclass
class _Bucket:
    declared_in: DeclaredIn | None
    items: list[TocItem] = field(default_factory=list)


def split_by_declared_in(
    entity: Entity, toc: dict[str, list[TocSection]]
) -> list[DeclaredInGroup]:
    """Group members by the type that declared them.

    The subject's own members come first, then ancestors from the most derived
    to the least derived, then a synthetic group holding every attached member
    regardless of where it was declared. Empty groups are dropped and every
    group is sorted by index title.
    """
    self_key = entity.uri.href
    ancestors = entity.inheritance.flatten() if entity.inheritance else []

    buckets: dict[str, _Bucket] = {}
    for sections in toc.values():
        _bucket_by_declared_in(entity, sections, buckets)

    groups: list[DeclaredInGroup] = []
    if self_key in buckets:
        groups.append(DeclaredInGroup(None, list(buckets[self_key].items)))

    order = list(reversed([a for a in ancestors if a != self_key]))
    # Declaring types missing from the hierarchy still get listed, last
    order.extend(k for k in buckets if k != self_key and k not in order)

    for uri in order:
        bucket = buckets.get(uri)
        if bucket is None:
            continue
        if bucket.declared_in is None:
            msg = f"Got section without declared-in for parent {uri} inside {self_key}"
            raise TocOrganizationError(msg)
        groups.append(DeclaredInGroup(bucket.declared_in, list(bucket.items)))

    attached = DeclaredInGroup(None, [], attached=True)
    for group in groups:
        attached.items.extend(i for i in group.items if _is_attached(i))
        group.items = [i for i in group.items if not _is_attached(i)]
    groups.append(attached)

    groups = [g for g in groups if g.items]
    for group in groups:
        group.sort_items()
    return groups


def split_by_type(toc: dict[str, list[TocSection]]) -> list[TocTypeGroup]:
    """Group members by category in the fixed priority order of TOC_CATEGORIES."""
    groups = []
    for type_name, title in TOC_CATEGORIES:
        if type_name not in toc:
            continue
        items = [item for section in toc[type_name] for item in section.items]
        groups.append(TocTypeGroup(type_name, title, sort_by_index_title(items)))
    return groups


def _bucket_by_declared_in(
    entity: Entity, sections: list[TocSection], buckets: dict[str, _Bucket]
) -> None:
    for section in sections:
        key = entity.uri.href
        if section.declared_in is not None and section.declared_in.uri.href.strip():
            key = section.declared_in.uri.href

        if key not in buckets:
            declared_in = section.declared_in
            if declared_in is not None and declared_in.id.id == entity.id.id:
                declared_in = None
            buckets[key] = _Bucket(declared_in)
        buckets[key].items.extend(section.items)


def _is_attached(item: TocItem) -> bool:
    return item.id.type.startswith(ATTACHED_PREFIX)
