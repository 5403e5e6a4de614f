"""Shared fixtures: API metadata factories and a small documentation root."""

import json
from pathlib import Path
from typing import Any

import pytest

LAYOUT = (
    "<html><head><title>##TITLE##</title><base href=\"##BASE_URL##\"></head>"
    "<body><nav>##NAVIGATION##</nav><main>##BODY##</main></body></html>"
)


def entity_json(
    id: str,
    href: str,
    type: str = "Class",
    title: str | None = None,
    **extra: Any,
) -> dict[str, Any]:
    """Return the camelCase JSON of an entity."""
    title = title or id.split(".")[-1]
    raw: dict[str, Any] = {
        "id": {"id": id, "type": type, "parentId": extra.pop("parent_id", None)},
        "uri": {"href": href, "idUri": href},
        "titles": {
            "pageTitle": f"{title} {type}",
            "indexTitle": title,
            "fullyQualifiedIndexTitle": id,
        },
    }
    raw.update(extra)
    return raw


def write_json(path: Path, data: dict[str, Any]) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


@pytest.fixture
def make_entity_json():
    return entity_json


@pytest.fixture
def doc_root(tmp_path: Path) -> Path:
    """A documentation root with two articles and a handful of API pages."""
    root = tmp_path / "docs"
    articles = root / "articles"
    api = root / "api-docs" / "api"
    indices = root / "api-docs" / "indicies"
    articles.mkdir(parents=True)

    (articles / "index.md").write_text(
        "# Welcome\n\n"
        "Start with @Element and the [guide](guide.md).\n\n"
        "Inline `@Element` stays as written. Mail docs@example.com.\n",
        encoding="utf-8",
    )
    (articles / "guide.md").write_text(
        "# Guide\n\nBack to [home](index.md). Also @Missing.\n\n"
        "[subclass Fuse.Elements.Element]\n",
        encoding="utf-8",
    )

    element = entity_json(
        "Fuse.Elements.Element",
        "fuse/elements/element",
        comment={"brief": "Base of visuals.", "full": "Base of visuals.\n\nSee @Node."},
        inheritance={
            "root": {
                "uri": "fuse/node",
                "title": "Node",
                "isAncestor": True,
                "children": [
                    {"uri": "fuse/elements/element", "title": "Element", "isCurrent": True}
                ],
            }
        },
    )
    arrange = entity_json(
        "Fuse.Elements.Element.Arrange",
        "fuse/elements/element/arrange",
        type="Method",
        title="Arrange()",
        parent_id="Fuse.Elements.Element",
        comment={"brief": "Arranges.", "full": "Arranges.\nAlways."},
    )
    node = entity_json("Fuse.Node", "fuse/node")
    name = entity_json(
        "Fuse.Node.Name",
        "fuse/node/name",
        type="Property",
        title="Name",
        parent_id="Fuse.Node",
        returns={"href": "", "title": "string", "isVirtual": False},
    )
    panel = entity_json("Fuse.Controls.Panel", "fuse/controls/panel")
    root_doc = entity_json("__root__", "index", type="Root", title="API Reference")

    write_json(
        api / "fuse" / "elements" / "element.json",
        {
            "entity": element,
            "tableOfContents": {
                "methods": [{"items": [arrange]}],
                "properties": [
                    {
                        "declaredIn": {
                            "id": node["id"],
                            "uri": node["uri"],
                            "titles": node["titles"],
                        },
                        "items": [name],
                    }
                ],
            },
        },
    )
    write_json(api / "fuse" / "elements" / "element" / "arrange.json", {"entity": arrange})
    write_json(api / "fuse" / "node.json", {"entity": node})
    write_json(api / "fuse" / "node" / "name.json", {"entity": name})
    write_json(api / "fuse" / "controls" / "panel.json", {"entity": panel})
    write_json(
        api / "index.json",
        {
            "entity": root_doc,
            "tableOfContents": {"classes": [{"items": [element, node, panel]}]},
        },
    )

    abstract = entity_json("Fuse.Controls.Shape", "fuse/controls/shape")
    abstract["id"]["modifiers"] = ["abstract"]
    write_json(
        indices / "fuse" / "elements" / "element.json",
        {"root": element, "descendants": [panel, abstract]},
    )

    (root / "reference-map").write_text(
        "// keyword target\n"
        "Element fuse/elements/element\n"
        "Node    fuse/node\n"
        "\n"
        "Guide guide\n",
        encoding="utf-8",
    )
    (root / "outline").write_text(
        "Home : articles/index.md\n"
        "\tGuide : articles/guide.md\n"
        "API : api-docs/api/index.json\n"
        "\tElement : api-docs/api/fuse/elements/element.json\n",
        encoding="utf-8",
    )
    (root / "layout.html").write_text(LAYOUT, encoding="utf-8")
    return root
