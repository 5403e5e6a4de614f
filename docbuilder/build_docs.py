"""Build a cross-referenced HTML documentation site.

Reads articles, API metadata JSON, the reference map, the outline and the
layout template from a documentation root directory and writes the finished
site to an output directory.
"""

import argparse
import logging
import sys
from collections.abc import Sequence
from pathlib import Path

from docbuilder.builder_settings import BuilderSettings
from docbuilder.doc_builder import DocBuilder
from docbuilder.errors import BuildError
from docbuilder.load_config import load_config

logger = logging.getLogger(__name__)

LEVEL_NAMES = {
    logging.CRITICAL: "CRT",
    logging.ERROR: "ERR",
    logging.WARNING: "WRN",
    logging.INFO: "INF",
    logging.DEBUG: "DBG",
}


class LevelPrefixFormatter(logging.Formatter):
    """Formats records as `[INF] message`."""

    def format(self, record: logging.LogRecord) -> str:
        prefix = LEVEL_NAMES.get(record.levelno, record.levelname)
        message = f"[{prefix}] {record.getMessage()}"
        if record.exc_info:
            message += f" {self.formatException(record.exc_info)}"
        return message


def configure_logging(*, debug: bool = False) -> None:
    """Send info and below to stdout, warnings and above to stderr."""
    formatter = LevelPrefixFormatter()

    stdout_handler = logging.StreamHandler(sys.stdout)
    stdout_handler.setFormatter(formatter)
    stdout_handler.addFilter(lambda record: record.levelno < logging.WARNING)

    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setFormatter(formatter)
    stderr_handler.setLevel(logging.WARNING)

    root = logging.getLogger()
    root.handlers = [stdout_handler, stderr_handler]
    root.setLevel(logging.DEBUG if debug else logging.INFO)
    # Python-Markdown logs every extension load at debug level
    logging.getLogger("MARKDOWN").setLevel(logging.WARNING)


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    ap = argparse.ArgumentParser(
        description="Generate the HTML documentation site from a documentation root.",
    )
    ap.add_argument(
        "root",
        type=Path,
        help="Documentation root holding articles/, api-docs/, outline and friends",
    )
    ap.add_argument(
        "base_url",
        help="Base URL the generated site is hosted under",
    )
    ap.add_argument(
        "output",
        type=Path,
        nargs="?",
        help="Output directory (default: <root>/generated)",
    )
    ap.add_argument(
        "--report",
        action="store_true",
        help="Write generator-report.html with documentation quality details",
    )
    ap.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )
    ap.add_argument(
        "--strict",
        action="store_true",
        help="Fail the build when reference keywords cannot be resolved",
    )
    ap.add_argument(
        "--config",
        help="Path to a YAML configuration file",
    )
    return ap.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    """Run the build and return the process exit code."""
    args = parse_args(argv)
    configure_logging(debug=args.debug)

    root = args.root.resolve()
    if not root.is_dir():
        logger.error("Root path '%s' does not exist", root)
        return 1

    try:
        config = load_config(args.config)
        settings = BuilderSettings(
            root_path=root,
            output_path=(args.output or root / "generated").resolve(),
            base_url=args.base_url,
            generate_report=args.report,
            strict=args.strict,
        )
        DocBuilder(settings, config).generate()
    except BuildError as exc:
        logger.error("Generator failed: %s", exc)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
