"""Logic for computing relative links between generated pages."""


def relative_path(current_path: str, target_path: str, extension: str | None) -> str:
    """Return the link from `current_path` to `target_path`.

    Both paths are site-relative. One `../` is emitted per directory level of
    the current page, and `extension` (without dot) is appended when given.
    """
    depth = len(current_path.replace("\\", "/").split("/")) - 1
    target = "../" * depth + target_path.replace("\\", "/")
    if extension:
        target += "." + extension
    return target
