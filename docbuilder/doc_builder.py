"""Orchestration of one complete documentation build."""

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any

from docbuilder.api_document_renderer import ApiDocumentRenderer
from docbuilder.api_documents import read_api_documents, read_api_indices
from docbuilder.article_renderer import article_files, draft_article
from docbuilder.builder_settings import BuilderSettings
from docbuilder.deferred_markdown import MarkdownQueue
from docbuilder.drafts import ApiDocumentQuality, ArticleQuality
from docbuilder.errors import UnresolvedReferenceError
from docbuilder.layout import Layout
from docbuilder.outline import generate_outline
from docbuilder.output_path import OutputPath
from docbuilder.reference_map import ReferenceMap
from docbuilder.report_generator import ReportGenerator
from docbuilder.sitemap import write_sitemap
from docbuilder.subclass_index import SubclassIndex

logger = logging.getLogger(__name__)

REFERENCE_MAP_FILE = "reference-map"


@dataclass
class BuildResult:
    """What a finished build produced."""

    pages: list[str] = field(default_factory=list)
    api_quality: list[ApiDocumentQuality] = field(default_factory=list)
    article_quality: list[ArticleQuality] = field(default_factory=list)
    failed_lookups: dict[str, list[str]] = field(default_factory=dict)


class DocBuilder:
    """Runs every stage of a build in order; any BuildError aborts it."""

    def __init__(self, settings: BuilderSettings, config: dict[str, Any]) -> None:
        """Bind the build to its settings and merged configuration."""
        self.settings = settings
        self.config = config
        self.workers = int(config["workers"])
        self.strict = settings.strict or bool(config["strict"])
        self.reference_map = ReferenceMap(
            settings.articles_root,
            settings.api_root,
            max_iterations=int(config["thresholds"]["max_resolve_iterations"]),
        )

    def generate(self) -> BuildResult:
        settings = self.settings
        started = time.perf_counter()
        logger.info("Starting generation of docs from root path %s", settings.root_path)

        self.reference_map.parse(settings.root_path / REFERENCE_MAP_FILE)
        navigation = generate_outline(settings.root_path, settings.base_url)
        subclass_index = SubclassIndex(read_api_indices(settings.indices_root))
        documents = read_api_documents(settings.api_root)
        articles = article_files(settings.articles_root)

        layout = Layout.from_root(
            settings.root_path, settings.base_url, self.config["site"]["title"]
        )
        output = OutputPath(
            settings.output_path,
            self.reference_map,
            layout,
            self.config["site"]["examples_url"],
        )
        output.prepare()

        queue = MarkdownQueue(self.config["markdown"]["extensions"])
        api_renderer = ApiDocumentRenderer(
            documents, queue, subclass_index, self.reference_map
        )
        result = BuildResult()

        logger.debug(
            "Rendering %d articles and %d API documents", len(articles), len(documents)
        )
        with ThreadPoolExecutor(max_workers=self.workers) as pool:
            article_futures = [
                pool.submit(
                    draft_article,
                    source,
                    settings.articles_root,
                    queue,
                    subclass_index,
                )
                for source in articles
            ]
            api_futures = [pool.submit(api_renderer.draft, d) for d in documents]

            for future in article_futures:
                draft, quality = future.result()
                output.write_draft(draft)
                result.article_quality.append(quality)
            for future in api_futures:
                drafted = future.result()
                if drafted is None:
                    continue
                draft, quality = drafted
                output.write_draft(draft)
                result.api_quality.append(quality)

        # Every page is drafted, so no fragment can be enqueued any more
        rendered = queue.flush(max_workers=self.workers)
        processed = output.post_process(rendered, navigation, max_workers=self.workers)
        result.pages = [p.path for p in processed]
        write_sitemap(settings.output_path, result.pages, settings.base_url)

        if settings.generate_report:
            thresholds = self.config["thresholds"]
            ReportGenerator(
                settings.root_path,
                settings.output_path,
                min_comment_lines=int(thresholds["min_comment_lines"]),
                min_article_lines=int(thresholds["min_article_lines"]),
            ).build(
                result.api_quality,
                result.article_quality,
                self.reference_map.failed_lookups(),
            )

        result.failed_lookups = self.reference_map.failed_lookups()
        self._report_failed_lookups(result.failed_lookups)

        logger.info(
            "Generated %d pages into %s in %.1f s",
            len(result.pages),
            settings.output_path,
            time.perf_counter() - started,
        )
        return result

    def _report_failed_lookups(self, failed: dict[str, list[str]]) -> None:
        if not failed:
            return
        logger.warning(
            "%d reference keywords could not be resolved: %s",
            len(failed),
            ", ".join(failed),
        )
        if self.strict:
            msg = f"{len(failed)} unresolved reference keywords"
            raise UnresolvedReferenceError(msg, failed)
