"""Exception hierarchy for documentation builds.

Every error below aborts the whole run. A partially generated site is worse
than a failed build, so callers propagate these up to the CLI instead of
skipping the offending document.
"""

__all__ = [
    "ApiJsonError",
    "BuildError",
    "ConfigurationError",
    "DeadLinkError",
    "DeferredRenderError",
    "EntityRenderError",
    "OutlineError",
    "ReferenceMapError",
    "ReferenceResolutionError",
    "TocOrganizationError",
    "UnresolvedReferenceError",
]


class BuildError(RuntimeError):
    """Base exception for all documentation build failures."""


class ConfigurationError(BuildError):
    """Raised when required input directories or files are missing."""


class ReferenceMapError(BuildError):
    """Raised for malformed or unresolvable reference map entries."""


class ReferenceResolutionError(BuildError):
    """Raised when rewriting references in a document does not terminate."""


class OutlineError(BuildError):
    """Raised for malformed, dangling or duplicate outline entries."""


class ApiJsonError(BuildError):
    """Raised when an API metadata file cannot be parsed."""


class EntityRenderError(BuildError):
    """Raised when an entity lacks data required to render it."""


class TocOrganizationError(BuildError):
    """Raised when table-of-contents grouping finds inconsistent data."""


class DeferredRenderError(BuildError):
    """Raised when deferred Markdown fragments are used out of order."""


class DeadLinkError(BuildError):
    """Raised after post-processing when rendered pages contain dead links."""

    def __init__(self, message: str, dead_links: dict[str, list[str]]) -> None:
        """Keep the per-file dead links alongside the message."""
        super().__init__(message)
        self.dead_links = dead_links


class UnresolvedReferenceError(BuildError):
    """Raised in strict mode when reference keywords could not be resolved."""

    def __init__(self, message: str, failed_lookups: dict[str, list[str]]) -> None:
        """Keep the unresolved keywords alongside the message."""
        super().__init__(message)
        self.failed_lookups = failed_lookups
