"""Logic for loading every API document and descendant index of a site."""

import logging
import time
from pathlib import Path

from docbuilder.api_models import ApiDocument, ApiIndex
from docbuilder.errors import ConfigurationError
from docbuilder.parse_api_json import load_api_json, parse_api_document, parse_api_index

logger = logging.getLogger(__name__)


def read_api_documents(api_root: Path) -> list[ApiDocument]:
    """Parse every `*.json` file below `api_root` as an entity document."""
    return [
        parse_api_document(load_api_json(f), f)
        for f in _json_files(api_root, "document")
    ]


def read_api_indices(indices_root: Path) -> list[ApiIndex]:
    """Parse every `*.json` file below `indices_root` as a descendant index."""
    return [
        parse_api_index(load_api_json(f), f)
        for f in _json_files(indices_root, "index")
    ]


def _json_files(source: Path, display_name: str) -> list[Path]:
    if not source.is_dir():
        msg = f"API {display_name} directory '{source}' not found"
        raise ConfigurationError(msg)

    started = time.perf_counter()
    files = sorted(source.rglob("*.json"))
    logger.debug(
        "%d API %s source files identified in '%s' (%.1f ms)",
        len(files),
        display_name,
        source,
        (time.perf_counter() - started) * 1000,
    )
    return files
