"""Output-path conventions and exclusion glob matching."""

import fnmatch
import re
from pathlib import PurePosixPath

COLOCATED_DIR_NAMES = frozenset({
    "__tests__", "__test__", "tests", "test", "__specs__", "__spec__",
    "specs", "spec", "__stories__", "stories",
})

DEFAULT_EXCLUDE_PATTERNS = (
    "**/node_modules/**",
    "**/dist/**",
    "**/build/**",
    "**/coverage/**",
    "**/*.d.ts",
)

BRACE_RE = re.compile(r"\{([^{}]*)\}")


def detect_output_strategy(output_dir: str) -> str:
    """Return "colocated" for "./x" or bare test-dir names, else "root".

    Example:
        detect_output_strategy("./__tests__")  -> "colocated"
        detect_output_strategy("__tests__")    -> "colocated"
        detect_output_strategy("tests/unit")   -> "root"
    """
    if output_dir.startswith("./"):
        return "colocated"
    if "/" not in output_dir and output_dir in COLOCATED_DIR_NAMES:
        return "colocated"
    return "root"


def insert_suffix(file_path: str, suffix: str) -> str:
    """Insert ``suffix`` before the file extension.

    Example:
        insert_suffix("src/Button.tsx", ".stories") -> "src/Button.stories.tsx"
    """
    path = PurePosixPath(file_path)
    if not path.suffix:
        return f"{file_path}{suffix}"
    return str(path.with_name(f"{path.stem}{suffix}{path.suffix}"))


def generate_artifact_path(
    source_path: str,
    suffix: str,
    output_dir: str | None = None,
    strategy: str | None = None,
) -> str:
    """Derive the artifact path for a project-relative source path.

    Without ``output_dir`` the artifact sits next to the source. A colocated
    ``output_dir`` is created beside each source file; a root ``output_dir``
    mirrors the source tree under that directory.
    """
    artifact_name = insert_suffix(source_path, suffix)
    if not output_dir:
        return artifact_name

    effective = strategy or detect_output_strategy(output_dir)
    clean_dir = output_dir[2:] if output_dir.startswith("./") else output_dir
    if effective == "colocated":
        source = PurePosixPath(source_path)
        return str(source.parent / clean_dir / PurePosixPath(artifact_name).name)
    return str(PurePosixPath(clean_dir) / artifact_name)


def expand_braces(pattern: str) -> list[str]:
    """Expand ``{a,b}`` alternatives, which fnmatch does not understand."""
    match = BRACE_RE.search(pattern)
    if not match:
        return [pattern]
    head, tail = pattern[: match.start()], pattern[match.end():]
    expanded: list[str] = []
    for option in match.group(1).split(","):
        expanded.extend(expand_braces(f"{head}{option}{tail}"))
    return expanded


def matches_pattern(file_path: str, patterns: list[str] | tuple[str, ...]) -> bool:
    """Return True if ``file_path`` matches any glob in ``patterns``.

    ``**/`` also matches zero directories, so ``**/*.test.ts`` matches a
    top-level ``a.test.ts``. Patterns without a slash are matched against the
    file name as well.
    """
    normalized = file_path.replace("\\", "/")
    if normalized.startswith("./"):
        normalized = normalized[2:]
    name = normalized.rsplit("/", 1)[-1]
    for raw_pattern in patterns:
        for pattern in expand_braces(raw_pattern):
            candidates = {pattern}
            if pattern.startswith("**/"):
                candidates.add(pattern[3:])
            for candidate in candidates:
                if fnmatch.fnmatchcase(normalized, candidate):
                    return True
                if "/" not in candidate and fnmatch.fnmatchcase(name, candidate):
                    return True
    return False
