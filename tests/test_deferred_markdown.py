"""Tests for the deferred Markdown queue and splicing."""

from concurrent.futures import ThreadPoolExecutor

import pytest

from docbuilder.deferred_markdown import PLACEHOLDER_RE, MarkdownQueue
from docbuilder.errors import DeferredRenderError
from docbuilder.shift_headings import shift_headings


def test_round_trip() -> None:
    """Verify a fragment is converted and spliced without leftovers."""
    queue = MarkdownQueue()
    placeholder = queue.enqueue("**bold**")
    rendered = queue.flush()
    out = rendered.splice(placeholder.token, [placeholder.id])
    assert "<strong>bold</strong>" in out
    assert not PLACEHOLDER_RE.search(out)


def test_placeholder_token_shape() -> None:
    """Verify tokens are inert tags carrying the fragment id."""
    placeholder = MarkdownQueue().enqueue("x")
    assert placeholder.token == f"<markdown_{placeholder.id}/>"
    assert len(placeholder.id) == 32


def test_nested_fragment_produced_after_host() -> None:
    """Verify a fragment embedded in an earlier one is fully resolved."""
    queue = MarkdownQueue()
    later: dict[str, str] = {}
    # The host only learns the inner token once it exists, at conversion time
    host = queue.enqueue("before", lambda html: html + later["token"])
    inner = queue.enqueue("*inner*")
    later["token"] = inner.token
    rendered = queue.flush()

    out = rendered.splice(f"<div>{host.token}</div>", [host.id, inner.id])
    assert "<em>inner</em>" in out
    assert not PLACEHOLDER_RE.search(out)


def test_nested_fragment_produced_before_host() -> None:
    """Verify the usual order, inner fragment first, resolves too."""
    queue = MarkdownQueue()
    inner = queue.enqueue("*inner*")
    host = queue.enqueue(f"Text with {inner.token} inline.")
    rendered = queue.flush()

    out = rendered.splice(host.token, [inner.id, host.id])
    assert "<em>inner</em>" in out
    assert not PLACEHOLDER_RE.search(out)


def test_post_processor_applied() -> None:
    """Verify a fragment's post processor runs on its converted HTML."""
    queue = MarkdownQueue()
    placeholder = queue.enqueue("# Title", shift_headings)
    html = queue.flush().html_for(placeholder.id)
    assert html.startswith("<h3>")
    assert html.endswith("</h3>")


def test_unknown_id() -> None:
    """Verify splicing an id the queue never produced is fatal."""
    rendered = MarkdownQueue().flush()
    with pytest.raises(DeferredRenderError, match="unknown id"):
        rendered.splice("text", ["0" * 32])


def test_enqueue_after_flush() -> None:
    """Verify the queue is sealed once it has been flushed."""
    queue = MarkdownQueue()
    queue.flush()
    with pytest.raises(DeferredRenderError):
        queue.enqueue("late")


def test_flush_is_idempotent() -> None:
    """Verify flushing twice hands back the same rendered set."""
    queue = MarkdownQueue()
    queue.enqueue("a")
    assert queue.flush() is queue.flush()
    assert len(queue) == 1


def test_self_containing_fragment() -> None:
    """Verify a fragment that embeds its own token is reported."""
    queue = MarkdownQueue()
    own: dict[str, str] = {}
    placeholder = queue.enqueue("x", lambda html: html + own["token"])
    own["token"] = placeholder.token
    rendered = queue.flush()
    with pytest.raises(DeferredRenderError, match="contains itself"):
        rendered.splice(placeholder.token, [placeholder.id])


def test_many_fragments_parallel() -> None:
    """Verify a batch converts every fragment exactly once."""
    queue = MarkdownQueue()
    placeholders = [queue.enqueue(f"item {i}") for i in range(50)]
    rendered = queue.flush(max_workers=4)
    host = "".join(p.token for p in placeholders)
    out = rendered.splice(host, [p.id for p in placeholders])
    assert all(f"<p>item {i}</p>" in out for i in range(50))


def test_concurrent_enqueue() -> None:
    """Verify drafting threads can share one queue without losing fragments."""
    queue = MarkdownQueue()
    with ThreadPoolExecutor(max_workers=8) as pool:
        placeholders = list(pool.map(lambda i: queue.enqueue(f"item {i}"), range(500)))

    assert len({p.id for p in placeholders}) == 500
    assert len(queue) == 500
    rendered = queue.flush(max_workers=4)
    assert rendered.html_for(placeholders[-1].id) == "<p>item 499</p>"
