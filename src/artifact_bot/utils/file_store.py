"""Sandboxed, sanitizing access to files inside one project root."""

import logging
from pathlib import Path

from artifact_bot.utils.exceptions import FileStoreError, PathTraversalError
from artifact_bot.utils.markdown import wrap_file_content
from artifact_bot.utils.secret_scanner import SecretScanner, default_scanner

logger = logging.getLogger(__name__)


class ProjectFileStore:
    """Reads and writes UTF-8 text files confined to ``project_root``.

    Every read passes through the sanitization gate, so callers never see
    raw credential values. Paths resolving outside the root are rejected,
    never clamped.
    """

    def __init__(self, project_root: str, scanner: SecretScanner | None = None) -> None:
        self.project_root: Path = Path(project_root).resolve()
        self.scanner: SecretScanner = scanner or default_scanner

    def resolve(self, file_path: str) -> Path:
        """Resolve ``file_path`` against the project root.

        Raises:
            PathTraversalError: If the resolved path escapes the root.
            FileStoreError: If the path cannot be resolved at all (NUL bytes,
                symlink loops).
        """
        candidate = Path(file_path)
        try:
            full_path = (candidate if candidate.is_absolute() else self.project_root / candidate).resolve()
        except (ValueError, OSError, RuntimeError) as exc:
            raise FileStoreError(f"Invalid path {file_path!r}: {exc}") from exc
        if not full_path.is_relative_to(self.project_root):
            raise PathTraversalError(
                f"Access denied for path outside project root: {file_path}"
            )
        return full_path

    def relative(self, file_path: str) -> str:
        """Return ``file_path`` relative to the root, in POSIX form."""
        return self.resolve(file_path).relative_to(self.project_root).as_posix()

    def exists(self, file_path: str) -> bool:
        try:
            return self.resolve(file_path).is_file()
        except FileStoreError:
            return False

    def read(self, file_path: str, wrap: bool = False) -> str:
        """Read a project file and return its sanitized text.

        Args:
            file_path: Path relative to the project root (or absolute inside it).
            wrap: Wrap the content in a fenced block with a path header.

        Raises:
            PathTraversalError: If the path escapes the project root.
            FileStoreError: If the file cannot be read.
        """
        full_path = self.resolve(file_path)
        try:
            raw = full_path.read_text(encoding="utf-8")
        except (OSError, ValueError) as exc:
            raise FileStoreError(f"Failed to read file {file_path}: {exc}") from exc

        result = self.scanner.sanitize(raw, file_path=file_path)
        if wrap:
            return wrap_file_content(file_path, result.sanitized_code)
        return result.sanitized_code

    def write(self, file_path: str, content: str) -> None:
        """Write ``content`` to a project file, creating parent directories.

        Raises:
            PathTraversalError: If the path escapes the project root.
            FileStoreError: If the file cannot be written.
        """
        full_path = self.resolve(file_path)
        try:
            full_path.parent.mkdir(parents=True, exist_ok=True)
            full_path.write_text(content, encoding="utf-8")
        except OSError as exc:
            raise FileStoreError(f"Failed to write file {file_path}: {exc}") from exc
        logger.debug("Wrote %d chars to %s", len(content), file_path)
