import logging

import pytest

from docbuilder.build_docs import LevelPrefixFormatter, configure_logging, main
from docbuilder.builder_settings import BuilderSettings
from docbuilder.doc_builder import DocBuilder
from docbuilder.errors import DeadLinkError, UnresolvedReferenceError
from docbuilder.load_config import load_config


def settings(doc_root, tmp_path, **kwargs):
    return BuilderSettings(
        root_path=doc_root,
        output_path=tmp_path / "out",
        base_url="/docs/",
        **kwargs,
    )


@pytest.fixture
def restore_logging():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers = handlers
    root.setLevel(level)


def test_generate_site(doc_root, tmp_path):
    result = DocBuilder(settings(doc_root, tmp_path), load_config()).generate()
    out = tmp_path / "out"

    assert result.pages == [
        "fuse/controls/panel.html",
        "fuse/elements/element.html",
        "fuse/elements/element/arrange.html",
        "fuse/node.html",
        "fuse/node/name.html",
        "guide.html",
        "index.html",
        "root-ns.html",
    ]
    assert (out / "sitemap.xml").is_file()
    assert (doc_root / "outline-navigation.html").is_file()
    assert result.failed_lookups == {"@Missing": ["guide.html"]}
    assert len(result.article_quality) == 2
    assert len(result.api_quality) == 6

    index = (out / "index.html").read_text(encoding="utf-8")
    assert "<title>Welcome - Fuse Documentation</title>" in index
    assert '<a href="fuse/elements/element.html">Element</a>' in index
    assert '<a href="guide.html">guide</a>' in index
    assert "<code>@Element</code>" in index
    assert '<a href="/docs/root-ns.html">API</a>' in index

    guide = (out / "guide.html").read_text(encoding="utf-8")
    assert "Also Missing." in guide
    assert "fuse/controls/panel.html" in guide

    element = (out / "fuse" / "elements" / "element.html").read_text(encoding="utf-8")
    assert '<a href="../../fuse/node.html">Node</a>' in element
    assert "Inherited from" in element

    assert not (doc_root / "generator-report.html").exists()


def test_report_is_optional(doc_root, tmp_path):
    DocBuilder(settings(doc_root, tmp_path, generate_report=True), load_config()).generate()
    report = (doc_root / "generator-report.html").read_text(encoding="utf-8")
    assert "@Missing" in report


def test_strict_mode_fails_on_unresolved_keywords(doc_root, tmp_path):
    with pytest.raises(UnresolvedReferenceError) as excinfo:
        DocBuilder(settings(doc_root, tmp_path, strict=True), load_config()).generate()
    assert list(excinfo.value.failed_lookups) == ["@Missing"]


def test_dead_link_fails_build(doc_root, tmp_path):
    (doc_root / "articles" / "broken.md").write_text("[x](nowhere.md)\n", encoding="utf-8")
    with pytest.raises(DeadLinkError) as excinfo:
        DocBuilder(settings(doc_root, tmp_path), load_config()).generate()
    assert excinfo.value.dead_links == {"broken.html": ["nowhere.html"]}


def test_cli_success(doc_root, tmp_path, restore_logging):
    assert main([str(doc_root), "/", str(tmp_path / "site")]) == 0
    assert (tmp_path / "site" / "index.html").is_file()


def test_cli_default_output_and_report(doc_root, restore_logging):
    assert main([str(doc_root), "/", "--report"]) == 0
    assert (doc_root / "generated" / "root-ns.html").is_file()
    assert (doc_root / "generator-report.html").is_file()


def test_cli_missing_root(tmp_path, restore_logging):
    assert main([str(tmp_path / "nope"), "/"]) == 1


def test_cli_build_error(doc_root, tmp_path, restore_logging, capsys):
    (doc_root / "layout.html").unlink()
    assert main([str(doc_root), "/", str(tmp_path / "site"), "--strict"]) == 1
    assert "[ERR] Generator failed:" in capsys.readouterr().err


def test_level_prefix_formatter():
    record = logging.LogRecord("x", logging.WARNING, __file__, 1, "Hi %s", ("there",), None)
    assert LevelPrefixFormatter().format(record) == "[WRN] Hi there"


def test_configure_logging_splits_streams(restore_logging, capsys):
    configure_logging(debug=True)
    log = logging.getLogger("docbuilder.test")
    log.debug("detail")
    log.warning("careful")
    captured = capsys.readouterr()
    assert "[DBG] detail" in captured.out
    assert "careful" not in captured.out
    assert "[WRN] careful" in captured.err
