"""Build a cross-referenced HTML documentation site from API metadata and articles."""
