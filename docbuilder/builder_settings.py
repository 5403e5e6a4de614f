"""Data model for the settings of a single documentation build."""

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class BuilderSettings:
    """Paths and switches that stay fixed for the whole run."""

    root_path: Path
    output_path: Path
    base_url: str
    generate_report: bool = False
    strict: bool = False

    @property
    def articles_root(self) -> Path:
        return self.root_path / "articles"

    @property
    def api_root(self) -> Path:
        return self.root_path / "api-docs" / "api"

    @property
    def indices_root(self) -> Path:
        return self.root_path / "api-docs" / "indicies"
