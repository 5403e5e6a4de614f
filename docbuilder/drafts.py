"""Data models for drafted output files and their quality measurements."""

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime

from docbuilder.api_models import ApiDocument


@dataclass
class DocumentDraft:
    """An output page whose Markdown fragments are still placeholders.

    `path` is relative to the output root and always uses forward slashes.
    `transform` runs on the spliced HTML before references are resolved.
    """

    path: str
    html: str
    deferred_ids: list[str] = field(default_factory=list)
    modified_at: datetime | None = None
    transform: Callable[[str], str] | None = None


@dataclass(frozen=True)
class ApiDocumentQuality:
    document: ApiDocument
    comment_lines: int
    toc_comment_lines: dict[str, int]


@dataclass(frozen=True)
class ArticleQuality:
    path: str
    line_count: int
