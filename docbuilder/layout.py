"""Logic for wrapping page bodies in the site layout template."""

import re
from pathlib import Path

from docbuilder.errors import ConfigurationError
from docbuilder.escape_html import escape_html

LAYOUT_FILE = "layout.html"
SLOT_RE = re.compile(r"##(TITLE|BASE_URL|NAVIGATION|BODY)##")


class Layout:
    """The page template with its `##BODY##` style slots."""

    def __init__(self, template: str, base_url: str, site_title: str) -> None:
        self.template = template
        self.base_url = base_url
        self.site_title = site_title

    @classmethod
    def from_root(cls, root_path: Path, base_url: str, site_title: str) -> "Layout":
        path = root_path / LAYOUT_FILE
        if not path.is_file():
            msg = f"Unable to find layout template at '{path}'"
            raise ConfigurationError(msg)
        return cls(path.read_text(encoding="utf-8"), base_url, site_title)

    def apply(self, html: str, navigation: str, title: str) -> str:
        full_title = f"{title} - {self.site_title}" if title else self.site_title
        slots = {
            "TITLE": escape_html(full_title),
            "BASE_URL": self.base_url,
            "NAVIGATION": navigation,
            "BODY": html,
        }
        # Single pass over the template; substituted text is never rescanned
        return SLOT_RE.sub(lambda m: slots[m.group(1)], self.template)
