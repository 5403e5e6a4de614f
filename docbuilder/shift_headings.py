"""Post processor demoting headings inside rendered API comments."""


def shift_headings(html: str, levels: int = 2) -> str:
    """Demote h1-h4 by `levels` so comment headings nest under page sections.

    Levels are rewritten from the deepest up so a heading is never moved twice.
    """
    for i in range(6 - levels, 0, -1):
        html = (
            html.replace(f"<h{i}", f"<h{i + levels}")
            .replace(f"</h{i}", f"</h{i + levels}")
        )
    return html
