"""Turn raw validator and test-runner output into readable verdict strings."""

import re

MAX_VERDICT_CHARS = 6000

ANSI_ESCAPE_RE = re.compile(r"\x1b\[[0-9;]*[A-Za-z]")
TSC_ERROR_RE = re.compile(r"^(?P<file>[^\s(]+)\((?P<line>\d+),(?P<col>\d+)\): error (?P<code>TS\d+): (?P<msg>.+)$")
FAILED_TEST_RE = re.compile(r"^\s*(?:FAIL|×|✕|x)\s+(?P<name>.+)$")
ERROR_LINE_RE = re.compile(r"^\s*(?:Error|AssertionError|TypeError|ReferenceError|SyntaxError)\b.*$")


def strip_ansi(text: str) -> str:
    return ANSI_ESCAPE_RE.sub("", text)


def truncate(text: str, limit: int = MAX_VERDICT_CHARS) -> str:
    if len(text) <= limit:
        return text
    return text[:limit] + f"\n... [truncated {len(text) - limit} chars]"


def format_process_failure(
    stdout: str | None = None,
    stderr: str | None = None,
    message: str | None = None,
) -> str:
    """Build a verdict from a failed process run.

    Compilers such as tsc report errors on stdout while stderr is mostly
    noise, so stdout wins whenever it has content.
    """
    for candidate in (stdout, stderr, message):
        if candidate and candidate.strip():
            return truncate(strip_ansi(candidate).strip())
    return "Validation failed with unknown error"


def format_tsc_errors(stdout: str) -> str:
    """Condense tsc output into one line per error, or pass it through."""
    lines = []
    for raw_line in strip_ansi(stdout).splitlines():
        match = TSC_ERROR_RE.match(raw_line.strip())
        if match:
            lines.append(
                f"{match['file']}:{match['line']}:{match['col']} {match['code']} {match['msg']}"
            )
    if not lines:
        return format_process_failure(stdout=stdout)
    return truncate("\n".join(lines))


def format_test_failures(stdout: str, stderr: str = "") -> str:
    """Summarize failing tests and their first error lines from runner output."""
    clean = strip_ansi(stdout)
    failed: list[str] = []
    errors: list[str] = []
    for line in clean.splitlines():
        test_match = FAILED_TEST_RE.match(line)
        if test_match:
            name = test_match["name"].strip()
            if name and name not in failed:
                failed.append(name)
            continue
        if ERROR_LINE_RE.match(line):
            errors.append(line.strip())

    if not failed and not errors:
        return format_process_failure(stdout=stdout, stderr=stderr)

    sections = []
    if failed:
        sections.append("Failing tests:\n" + "\n".join(f"- {name}" for name in failed))
    if errors:
        sections.append("Errors:\n" + "\n".join(f"- {err}" for err in errors[:20]))
    return truncate("\n\n".join(sections))
