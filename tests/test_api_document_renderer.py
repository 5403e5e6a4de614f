import logging

import pytest
from conftest import entity_json

from docbuilder.api_document_renderer import ApiDocumentRenderer, output_path_for
from docbuilder.api_models import ApiDocument
from docbuilder.deferred_markdown import MarkdownQueue
from docbuilder.parse_api_json import parse_entity, parse_toc_section
from docbuilder.reference_map import ReferenceMap
from docbuilder.subclass_index import SubclassIndex


def document(raw, toc=None):
    return ApiDocument(
        entity=parse_entity(raw),
        table_of_contents={
            k: [parse_toc_section(s) for s in v] for k, v in (toc or {}).items()
        },
    )


@pytest.fixture
def ref_map(tmp_path):
    (tmp_path / "api" / "fuse").mkdir(parents=True)
    (tmp_path / "api" / "fuse" / "node.json").write_text("{}", encoding="utf-8")
    m = ReferenceMap(tmp_path / "articles", tmp_path / "api")
    m.load(["NodeAlias fuse/node"])
    return m


NODE = entity_json("Fuse.Node", "fuse/node")


def render(documents, target, ref_map):
    queue = MarkdownQueue()
    renderer = ApiDocumentRenderer(documents, queue, SubclassIndex(), ref_map)
    result = renderer.draft(target)
    if result is None:
        return None, None
    draft, quality = result
    html = queue.flush().splice(draft.html, draft.deferred_ids)
    return html.replace("\n", ""), quality


def test_output_path_for_root_and_members():
    root = parse_entity(entity_json("__root__", "index", type="Root"))
    assert output_path_for(root) == "root-ns.html"
    assert output_path_for(parse_entity(NODE)) == "fuse/node.html"


def test_swizzler_types_have_no_page(ref_map):
    doc = document(entity_json("float2.XY", "float2/xy", type="SwizzlerType"))
    assert render([doc], doc, ref_map) == (None, None)


def test_page_sections(ref_map):
    raw = entity_json(
        "Fuse.Node.Find",
        "fuse/node/find",
        type="Method",
        parent_id="Fuse.Node",
        comment={
            "brief": "Finds.",
            "full": "# Finds\n\nA child by name.",
            "remarks": "Slow.",
            "attributes": {
                "deprecated": True,
                "experimental": True,
                "parameters": [{"name": "name", "description": "The *name*."}],
                "returns": {"text": "The node."},
            },
        },
        location={"namespaceTitle": "Fuse", "namespaceUri": "fuse", "packageName": "Fuse.Nodes", "packageVersion": "1.0"},
        parameters=[{"name": "name", "title": "string"}],
        returns={"href": "fuse/node", "title": "Node"},
    )
    doc = document(raw)
    html, quality = render([document(NODE), doc], doc, ref_map)

    assert '<h2 id="section-introduction">Find Method</h2>' in html
    assert "alert-api-deprecated" in html
    assert "alert-api-experimental" not in html
    # Comment headings are demoted under the page sections
    assert "<h3>Finds</h3>" in html
    assert '<a href="#section-remarks" class="nav-link">Remarks</a>' in html
    assert '<h3 id="section-remarks">Remarks</h3>' in html
    assert '<a href="../../fuse.html">Fuse</a>' in html
    assert "<dd>Fuse.Nodes 1.0</dd>" in html
    assert "<dt>name</dt>" in html
    assert "<em>name</em>" in html
    assert '<a href="../../fuse/node.html">Node</a>' in html
    assert "The node." in html
    assert "type-location-leaf" in html
    assert quality.comment_lines == 3


def test_declared_in_toc(ref_map):
    element = entity_json(
        "Fuse.Element",
        "fuse/element",
        inheritance={"root": {"uri": "fuse/node", "children": [{"uri": "fuse/element"}]}},
    )
    own = entity_json(
        "Fuse.Element.Width", "fuse/element/width", type="UxProperty", title="Width",
        comment={"brief": "How wide.", "full": "How wide."},
    )
    inherited = entity_json("Fuse.Node.Name", "fuse/node/name", type="Property", title="Name")
    toc = {
        "properties": [
            {"items": [own]},
            {
                "declaredIn": {"id": NODE["id"], "uri": NODE["uri"], "titles": NODE["titles"]},
                "items": [inherited],
            },
        ]
    }
    doc = document(element, toc)
    html, quality = render([document(NODE), doc], doc, ref_map)

    assert "Interface of Element" in html
    assert 'id="showAdvancedCheckbox" />' in html
    assert "alert-api-advanced-only" not in html
    assert '<section class="table-of-contents-section has-advanced-items only-advanced-items inherited">' in html
    assert 'id="section-table-of-contents-inherited-from-fuse-node"' in html
    assert html.index("Width") < html.index("Inherited from")
    assert "How wide." in html
    assert quality.toc_comment_lines == {"fuse/element/width": 1, "fuse/node/name": 0}


def test_only_advanced_members_tick_the_toggle(ref_map):
    method = entity_json("Fuse.Node.Clear", "fuse/node/clear", type="Method")
    doc = document(NODE, {"methods": [{"items": [method]}]})
    html, _ = render([doc], doc, ref_map)
    assert 'id="showAdvancedCheckbox" checked />' in html
    assert "alert-api-advanced-only" in html


def test_root_lists_by_type(ref_map):
    root = entity_json("__root__", "index", type="Root", title="API")
    toc = {
        "classes": [{"items": [NODE]}],
        "namespaces": [{"items": [entity_json("Fuse", "fuse", type="Namespace")]}],
    }
    doc = document(root, toc)
    html, _ = render([doc], doc, ref_map)
    assert html.index("<h3 id=\"section-table-of-contents\">Namespaces</h3>") < html.index(
        "<h3 id=\"section-table-of-contents\">Classes</h3>"
    )
    assert "Interface of" not in html


def test_see_also_resolution(ref_map, caplog):
    raw = entity_json(
        "Fuse.Other",
        "fuse/other",
        comment={"attributes": {"seeAlso": ["Fuse.Node", "NodeAlias", "Nowhere"]}},
    )
    doc = document(raw)
    with caplog.at_level(logging.ERROR, logger="docbuilder.api_document_renderer"):
        html, _ = render([document(NODE), doc], doc, ref_map)

    assert '<h4 id="section-see-also">See Also</h4>' in html
    assert html.count('<a href="../fuse/node.html">Node</a>') == 2
    assert "'Nowhere'" in caplog.text


def test_js_method_parameters_from_comment(ref_map):
    raw = entity_json(
        "FuseJS.Timer.create",
        "fusejs/timer/create",
        type="JsMethod",
        comment={
            "attributes": {
                "scriptMethod": {"name": "create", "parameters": ["fn", "delay"]},
                "parameters": [{"name": "delay", "typeHint": "number", "description": "Milliseconds."}],
                "returns": {"typeHint": "number"},
            }
        },
    )
    doc = document(raw)
    html, _ = render([doc], doc, ref_map)

    assert "Timer.create(fn, delay) Method (JS)" in html
    assert "<dt>fn</dt>" in html
    assert "<dt>delay</dt><dd><p>number</p>" in html
    assert "Milliseconds." in html
    assert '<h3 id="section-returns">Returns</h3><p>number</p>' in html


def test_enum_values_and_interfaces(ref_map):
    iface = entity_json("Uno.IDisposable", "uno/idisposable", type="Interface")
    raw = entity_json(
        "Fuse.Alignment",
        "fuse/alignment",
        type="Enum",
        values=[{"uri": "fuse/alignment/left", "title": "Left", "comment": {"brief": "To the left."}}],
        implementedInterfaces=[iface],
    )
    doc = document(raw)
    html, _ = render([doc], doc, ref_map)

    assert "Possible Values" in html
    assert '<a href="../fuse/alignment/left.html">Left</a>' in html
    assert "To the left." in html
    assert "Implemented Interfaces" in html
    assert "table-of-contents-item is-advanced" in html
