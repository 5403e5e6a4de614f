"""Logic for writing the sitemap of a generated site."""

from collections.abc import Iterable
from datetime import datetime, timezone
from pathlib import Path

from docbuilder.escape_html import escape_html

SITEMAP_FILE = "sitemap.xml"


def render_sitemap(
    pages: Iterable[str], base_url: str, generated_at: datetime | None = None
) -> str:
    """Return sitemap XML listing every page path under `base_url`."""
    lastmod = (generated_at or datetime.now(timezone.utc)).strftime("%Y-%m-%d")
    lines = [
        '<?xml version="1.0" encoding="UTF-8"?>',
        '<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">',
    ]
    for page in pages:
        lines += [
            "\t<url>",
            f"\t\t<loc>{escape_html(base_url + page)}</loc>",
            f"\t\t<lastmod>{lastmod}</lastmod>",
            "\t\t<changefreq>daily</changefreq>",
            "\t</url>",
        ]
    lines.append("</urlset>")
    return "\n".join(lines) + "\n"


def write_sitemap(output_root: Path, pages: Iterable[str], base_url: str) -> Path:
    path = output_root / SITEMAP_FILE
    path.write_text(render_sitemap(sorted(pages), base_url), encoding="utf-8")
    return path
