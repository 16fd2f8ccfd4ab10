"""Helpers for cleaning oracle output and wrapping file content for prompts."""

import re
from pathlib import PurePosixPath

FENCED_BLOCK_RE = re.compile(r"^```[\w+-]*\n?([\s\S]*?)\n?```$")

# Leading status lines emitted by agentic CLIs ("✔ Read file", "└ 33 files found")
STATUS_PREFIXES = ("✔", "✓", "✗", "└", "├", "│", "─", "●", "→")
PROSE_LINE_RE = re.compile(r"^[A-Z][a-z']+(?:\s+\S+)+$")
CODE_HINT_RE = re.compile(r"[;{}=]|=>|^\s*(?:@|#!|//|/\*|\*)")

LANGUAGE_BY_EXTENSION = {
    "ts": "typescript",
    "tsx": "tsx",
    "js": "javascript",
    "jsx": "jsx",
    "mjs": "javascript",
    "cjs": "javascript",
    "json": "json",
    "css": "css",
    "scss": "scss",
    "less": "less",
    "html": "html",
    "md": "markdown",
    "mdx": "mdx",
    "vue": "vue",
    "py": "python",
    "yml": "yaml",
    "yaml": "yaml",
}


def strip_markdown_code_blocks(content: str) -> str:
    """Remove a single surrounding markdown fence, if any, and trim whitespace.

    Args:
        content: Raw text, possibly wrapped in ```lang ... ```.

    Returns:
        The fenced body when the whole text is one fenced block, otherwise
        the trimmed input.
    """
    cleaned = content.strip()
    match = FENCED_BLOCK_RE.match(cleaned)
    if match:
        return match.group(1).strip()
    return cleaned


def _is_llm_chatter(line: str) -> bool:
    stripped = line.strip()
    if not stripped:
        return True
    if stripped.startswith(STATUS_PREFIXES):
        return True
    if stripped.startswith("```"):
        return False
    if CODE_HINT_RE.search(stripped):
        return False
    return bool(PROSE_LINE_RE.match(stripped))


def strip_llm_comments(content: str) -> str:
    """Drop leading narration lines an oracle sometimes prints before code.

    Only the prefix is touched: once the first code-looking line is found
    everything after it is kept verbatim, comments included.
    """
    lines = content.split("\n")
    start = 0
    while start < len(lines) and _is_llm_chatter(lines[start]):
        start += 1
    return "\n".join(lines[start:]).strip()


def clean_code_content(content: str) -> str:
    """Strip oracle narration and a surrounding markdown fence from code."""
    return strip_markdown_code_blocks(strip_llm_comments(content))


def infer_language(file_path: str) -> str:
    suffix = PurePosixPath(file_path).suffix.lstrip(".").lower()
    return LANGUAGE_BY_EXTENSION.get(suffix, "")


def wrap_file_content(file_path: str, content: str, language: str | None = None) -> str:
    """Wrap content in a language-tagged fence with a path header comment."""
    lang = language or infer_language(file_path)
    return f"```{lang}\n// {file_path}\n{content}\n```"
