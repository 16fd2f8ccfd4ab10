"""Utilities for the artifact bot."""

from artifact_bot.utils.exceptions import FileStoreError, PathTraversalError
from artifact_bot.utils.extensions import get_related_extensions, sibling_candidates
from artifact_bot.utils.file_store import ProjectFileStore
from artifact_bot.utils.markdown import (
    clean_code_content,
    strip_llm_comments,
    strip_markdown_code_blocks,
    wrap_file_content,
)
from artifact_bot.utils.paths import generate_artifact_path, matches_pattern
from artifact_bot.utils.secret_scanner import SecretScanner

__all__ = [
    "FileStoreError",
    "PathTraversalError",
    "ProjectFileStore",
    "SecretScanner",
    "clean_code_content",
    "generate_artifact_path",
    "get_related_extensions",
    "matches_pattern",
    "sibling_candidates",
    "strip_llm_comments",
    "strip_markdown_code_blocks",
    "wrap_file_content",
]
