"""Logic for writing the generator quality report."""

import logging
import os
from collections.abc import Sequence
from datetime import datetime
from pathlib import Path

from docbuilder.drafts import ApiDocumentQuality, ArticleQuality
from docbuilder.escape_html import escape_html

logger = logging.getLogger(__name__)

REPORT_FILE = "generator-report.html"
MAX_NAME_LENGTH = 100

# Plain members are reviewed through the listings of their owning types
EXCLUDED_API_TYPES = {
    "Constructor",
    "Property",
    "UxProperty",
    "Method",
    "Event",
    "UxEvent",
    "Field",
    "Cast",
    "Operator",
    "Literal",
}

BOOTSTRAP_CSS = (
    '<link rel="stylesheet" '
    'href="https://maxcdn.bootstrapcdn.com/bootstrap/3.3.7/css/bootstrap.min.css" '
    'integrity="sha384-BVYiiSIFeK1dGmJRAkycuHAHRg32OmUcww7on3RYdg4Va+PmSTsz/K68vbdEjh4u" '
    'crossorigin="anonymous">'
)
TABLE_OPEN = '<table class="table table-bordered table-striped table-condensed">'


class ReportGenerator:
    """Lists poorly documented entities and articles plus unresolved keywords."""

    def __init__(
        self,
        root_path: Path,
        output_path: Path,
        min_comment_lines: int = 4,
        min_article_lines: int = 4,
    ) -> None:
        self.path = root_path / REPORT_FILE
        self.link_prefix = Path(os.path.relpath(output_path, root_path)).as_posix()
        self.min_comment_lines = min_comment_lines
        self.min_article_lines = min_article_lines

    def build(
        self,
        api_quality: Sequence[ApiDocumentQuality],
        article_quality: Sequence[ArticleQuality],
        failed_lookups: dict[str, list[str]],
    ) -> Path:
        logger.info("Generating report at %s", self.path)
        self.path.write_text(
            self.render(api_quality, article_quality, failed_lookups), encoding="utf-8"
        )
        return self.path

    def render(
        self,
        api_quality: Sequence[ApiDocumentQuality],
        article_quality: Sequence[ArticleQuality],
        failed_lookups: dict[str, list[str]],
        generated_at: datetime | None = None,
    ) -> str:
        generated_at = generated_at or datetime.now()
        parts = [
            "<!DOCTYPE html>",
            '<html lang="en">',
            "<head>",
            '<meta charset="utf-8">',
            '<meta http-equiv="X-UA-Compatible" content="IE=edge">',
            '<meta name="viewport" content="width=device-width, initial-scale=1">',
            "<title>Generator report</title>",
            BOOTSTRAP_CSS,
            "</head>",
            "<body>",
            '<div class="container">',
            '<div class="jumbotron">',
            "<h1>Generator report</h1>",
            f'<p class="lead">Generated at {generated_at:%Y-%m-%d %H:%M:%S}</p>',
            "</div>",
        ]
        parts += self._low_quality_types(api_quality)
        parts += self._low_quality_articles(article_quality)
        parts += self._reference_map_lookups(failed_lookups)
        parts += ["</div>", "</body>", "</html>"]
        return "\n".join(parts) + "\n"

    def low_quality_documents(
        self, api_quality: Sequence[ApiDocumentQuality]
    ) -> list[ApiDocumentQuality]:
        threshold = self.min_comment_lines
        return [
            q
            for q in api_quality
            if q.document.entity.id.type not in EXCLUDED_API_TYPES
            and (
                q.comment_lines < threshold
                or any(v < threshold for v in q.toc_comment_lines.values())
            )
        ]

    def _low_quality_types(self, api_quality: Sequence[ApiDocumentQuality]) -> list[str]:
        parts = ["<h2>Low quality API documentation</h2>"]
        report = self.low_quality_documents(api_quality)
        if not report:
            parts.append(
                '<div class="alert alert-success">No low quality API documentation found.</div>'
            )
            return parts

        threshold = self.min_comment_lines
        parts += [
            f'<div class="alert alert-warning">{len(report)} data types had low '
            "quality documentation.</div>",
            TABLE_OPEN,
            "<thead>",
            "<tr>",
            "<th>Data Type</th>",
            "<th>Quality Info</th>",
            "</tr>",
            "</thead>",
            "<tbody>",
        ]
        for index, quality in enumerate(report):
            entity = quality.document.entity
            name = entity.titles.fully_qualified_index_title
            if len(name) > MAX_NAME_LENGTH:
                name = "..." + name[-MAX_NAME_LENGTH:]

            parts += [
                "<tr>",
                f"<td>{index}</td>",
                "<td>",
                f'<a href="{escape_html(self.link_prefix)}/'
                f'{escape_html(entity.uri.href)}.html">{escape_html(name)}</a>',
                f'<span class="label label-default">{escape_html(entity.id.type)}</span>',
                "</td>",
                "<td>",
                "<ul>",
            ]
            if quality.comment_lines == 0:
                parts.append("<li>No docs available.</li>")
            elif quality.comment_lines < threshold:
                parts.append(
                    f"<li>Only {quality.comment_lines} lines of docs available.</li>"
                )

            toc_lines = quality.toc_comment_lines.values()
            missing = sum(1 for v in toc_lines if v == 0)
            if missing:
                parts.append(f"<li>{missing} nested items had no docs available.</li>")
            poor = sum(1 for v in toc_lines if 0 < v < threshold)
            if poor:
                parts.append(
                    f"<li>{poor} nested items had less than {threshold} lines of docs.</li>"
                )
            parts += ["</ul>", "</td>", "</tr>"]
        parts += ["</tbody>", "</table>"]
        return parts

    def _low_quality_articles(self, article_quality: Sequence[ArticleQuality]) -> list[str]:
        parts = ["<h2>Low quality articles</h2>"]
        threshold = self.min_article_lines
        report = [q for q in article_quality if q.line_count < threshold]
        if not report:
            parts.append('<div class="alert alert-success">No low quality articles found.</div>')
            return parts

        parts += [
            f'<div class="alert alert-warning">{len(report)} articles had low quality '
            "content.</div>",
            TABLE_OPEN,
            "<thead>",
            "<tr>",
            "<th>Path</th>",
            "<th>Quality Info</th>",
            "</tr>",
            "</thead>",
            "<tbody>",
        ]
        for quality in sorted(report, key=lambda q: q.path):
            path = escape_html(quality.path)
            parts += [
                "<tr>",
                f'<td><a href="{escape_html(self.link_prefix)}/{path}">{path}</a></td>',
                "<td>",
                "<ul>",
            ]
            if quality.line_count == 0:
                parts.append("<li>No content available.</li>")
            else:
                parts.append(
                    f"<li>Only {quality.line_count} lines of content available.</li>"
                )
            parts += ["</ul>", "</td>", "</tr>"]
        parts += ["</tbody>", "</table>"]
        return parts

    def _reference_map_lookups(self, failed_lookups: dict[str, list[str]]) -> list[str]:
        parts = ["<h2>Reference map lookups</h2>"]
        if not failed_lookups:
            parts.append(
                '<div class="alert alert-success">No reference map lookup failures '
                "detected.</div>"
            )
            return parts

        total = sum(len(paths) for paths in failed_lookups.values())
        parts += [
            f'<div class="alert alert-warning">{total} reference map lookup failures '
            "detected.</div>",
            TABLE_OPEN,
            "<thead>",
            "<tr>",
            "<th>Keyword</th>",
            "<th>Referenced in</th>",
            "</tr>",
            "</thead>",
            "<tbody>",
        ]
        for keyword in sorted(failed_lookups, key=str.lower):
            parts += ["<tr>", f"<td>{escape_html(keyword)}</td>", "<td>", "<ul>"]
            for path in failed_lookups[keyword]:
                escaped = escape_html(path)
                parts.append(
                    f'<li><a href="{escape_html(self.link_prefix)}/{escaped}">'
                    f"{escaped}</a></li>"
                )
            parts += ["</ul>", "</td>", "</tr>"]
        parts += ["</tbody>", "</table>"]
        return parts
