"""Extension families used to recover from near-miss file requests."""

from pathlib import PurePosixPath

SCRIPT_EXTENSIONS = (".ts", ".tsx", ".js", ".jsx", ".mjs", ".cjs")
STYLE_EXTENSIONS = (".css", ".scss", ".sass", ".less")

EXTENSION_FAMILIES: tuple[tuple[str, ...], ...] = (
    SCRIPT_EXTENSIONS,
    STYLE_EXTENSIONS,
)


def get_related_extensions(extension: str) -> list[str]:
    """Return the extension family containing ``extension``.

    Unknown extensions (and the empty extension) yield a singleton list of
    themselves so callers can iterate uniformly.
    """
    normalized = extension.lower()
    for family in EXTENSION_FAMILIES:
        if normalized in family:
            return list(family)
    return [extension]


def sibling_candidates(file_path: str) -> list[str]:
    """List alternative paths for ``file_path`` within its extension family.

    The original path is never included.

    Example:
        sibling_candidates("src/Button.ts")
        -> ["src/Button.tsx", "src/Button.js", "src/Button.jsx", ...]
    """
    extension = PurePosixPath(file_path).suffix
    base = file_path[: -len(extension)] if extension else file_path
    candidates = []
    for candidate_ext in get_related_extensions(extension):
        if candidate_ext == extension:
            continue
        candidates.append(base + candidate_ext)
    return candidates
