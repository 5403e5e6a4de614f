"""Logic for loading and merging configuration files."""

import copy
from pathlib import Path
from typing import Any

import yaml

from docbuilder.deep_merge import deep_merge
from docbuilder.errors import ConfigurationError

DEFAULT_CONFIG: dict[str, Any] = {
    "thresholds": {
        "min_comment_lines": 4,
        "min_article_lines": 4,
        "max_resolve_iterations": 10000,
    },
    "markdown": {
        "extensions": ["fenced_code", "tables"],
    },
    "site": {
        "title": "Fuse Documentation",
        "examples_url": "https://examples.fusetools.com/",
    },
    "workers": 8,
    "strict": False,
}


def load_config(path: str | None = None) -> dict[str, Any]:
    """Load configuration from a YAML file and merge it with defaults."""
    config = copy.deepcopy(DEFAULT_CONFIG)
    if path:
        p = Path(path)
        if not p.exists():
            msg = f"Configuration file '{p}' not found"
            raise ConfigurationError(msg)
        user_config = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
        config = deep_merge(config, user_config)
    return config
