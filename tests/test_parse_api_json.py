import pytest
from conftest import entity_json, write_json

from docbuilder.api_documents import read_api_documents, read_api_indices
from docbuilder.errors import ApiJsonError, ConfigurationError
from docbuilder.inheritance_tree import InheritanceTree
from docbuilder.parse_api_json import (
    load_api_json,
    parse_api_document,
    parse_api_index,
)


def test_parse_document_fields(tmp_path):
    raw = entity_json(
        "Fuse.Text.Length",
        "fuse/text/length",
        type="Method",
        parent_id="Fuse.Text",
        comment={
            "brief": "Counts.",
            "attributes": {
                "scriptMethod": {"name": "length", "parameters": ["text"]},
                "seeAlso": ["Fuse.Text"],
                "deprecated": True,
            },
        },
        parameters=[{"name": "text", "title": "string"}],
        returns={"title": "int"},
    )
    doc = parse_api_document({"entity": raw}, write_json(tmp_path / "a.json", {}))
    entity = doc.entity

    assert entity.id.parent_id == "Fuse.Text"
    assert entity.titles.index_title == "Length"
    assert entity.comment.attributes.script_method.parameters == ("text",)
    assert entity.comment.attributes.see_also == ("Fuse.Text",)
    assert entity.comment.attributes.deprecated
    assert entity.parameters[0].name == "text"
    assert entity.returns.title == "int"
    assert doc.table_of_contents == {}
    assert doc.source_modified_at is not None


def test_hidden_items_dropped_from_toc(tmp_path):
    visible = entity_json("A.B", "a/b", type="Method")
    hidden = entity_json("A.C", "a/c", type="Method", comment={"attributes": {"hidden": True}})
    data = {
        "entity": entity_json("A", "a"),
        "tableOfContents": {"methods": [{"items": [visible, hidden]}]},
    }
    doc = parse_api_document(data, write_json(tmp_path / "a.json", {}))
    items = doc.table_of_contents["methods"][0].items
    assert [i.id.id for i in items] == ["A.B"]


def test_declared_in_needs_id_and_uri(tmp_path):
    data = {
        "entity": entity_json("A", "a"),
        "tableOfContents": {
            "methods": [{"declaredIn": {"titles": {}}, "items": []}],
        },
    }
    doc = parse_api_document(data, write_json(tmp_path / "a.json", {}))
    assert doc.table_of_contents["methods"][0].declared_in is None


def test_missing_entity_fails(tmp_path):
    with pytest.raises(ApiJsonError, match="missing 'entity'"):
        parse_api_document({}, tmp_path / "a.json")


def test_malformed_entity_fails(tmp_path):
    with pytest.raises(ApiJsonError, match="malformed 'entity'"):
        parse_api_document({"entity": {"uri": {}}}, tmp_path / "a.json")


def test_malformed_toc_item_names_the_file(tmp_path):
    api = tmp_path / "api"
    write_json(
        api / "panel.json",
        {
            "entity": entity_json("Fuse.Panel", "fuse/panel"),
            "tableOfContents": {"methods": [{"items": [{"uri": {}}]}]},
        },
    )
    with pytest.raises(ApiJsonError, match=r"panel\.json.*'methods'"):
        read_api_documents(api)


def test_malformed_descendant_names_the_file(tmp_path):
    indices = tmp_path / "indicies"
    write_json(
        indices / "panel.json",
        {"root": entity_json("Fuse.Panel", "fuse/panel"), "descendants": ["Fuse.Node"]},
    )
    with pytest.raises(ApiJsonError, match=r"panel\.json.*malformed 'descendants'"):
        read_api_indices(indices)


def test_bad_json_names_the_file(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(ApiJsonError, match="broken.json"):
        load_api_json(path)


def test_top_level_array_rejected(tmp_path):
    path = tmp_path / "list.json"
    path.write_text("[]", encoding="utf-8")
    with pytest.raises(ApiJsonError, match="not an object"):
        load_api_json(path)


def test_parse_index(tmp_path):
    data = {
        "root": entity_json("A", "a"),
        "descendants": [entity_json("B", "b"), entity_json("C", "c")],
    }
    index = parse_api_index(data, write_json(tmp_path / "i.json", {}))
    assert index.root.uri.href == "a"
    assert [d.id.id for d in index.descendants] == ["B", "C"]


def test_inheritance_tree_preorder():
    tree = InheritanceTree.from_json(
        {
            "uri": "object",
            "children": [
                {"uri": "node", "children": [{"uri": "element"}]},
                {"uri": "other"},
            ],
        }
    )
    assert tree.flatten() == ["object", "node", "element", "other"]
    assert tree.root.uri == "object"
    assert tree.nodes[1].children == (2,)


def test_empty_inheritance_tree():
    tree = InheritanceTree.from_json(None)
    assert tree.root is None
    assert tree.flatten() == []


def test_read_documents_and_indices(doc_root):
    documents = read_api_documents(doc_root / "api-docs" / "api")
    hrefs = sorted(d.entity.uri.href for d in documents)
    assert hrefs == [
        "fuse/controls/panel",
        "fuse/elements/element",
        "fuse/elements/element/arrange",
        "fuse/node",
        "fuse/node/name",
        "index",
    ]

    indices = read_api_indices(doc_root / "api-docs" / "indicies")
    assert [i.root.uri.href for i in indices] == ["fuse/elements/element"]


def test_missing_api_directory(tmp_path):
    with pytest.raises(ConfigurationError, match="not found"):
        read_api_documents(tmp_path / "nope")
