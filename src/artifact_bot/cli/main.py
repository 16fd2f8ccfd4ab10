"""CLI entry point for the Artifact Bot."""
import argparse
from dotenv import load_dotenv
import json
import logging
import sys
import traceback
from pathlib import Path

from artifact_bot.agents.exceptions import AgentError
from artifact_bot.agents.handlers.base import ArtifactKind
from artifact_bot.agents.oracle_client import DEFAULT_MODEL
from artifact_bot.agents.agentic_runner import DEFAULT_MAX_ITERATIONS, DEFAULT_TEMPERATURE
from artifact_bot.config import (
    DEFAULT_MAX_ATTEMPTS,
    DEFAULT_TIMEOUT,
    AIConfig,
    BotConfig,
    HealingConfig,
    OutputConfig,
)
from artifact_bot.models import BatchReport, ProgressEvent
from artifact_bot.orchestrator.exceptions import OrchestratorError
from artifact_bot.utils.exceptions import FileStoreError

load_dotenv()

logger = logging.getLogger(__name__)

# Exit codes
EXIT_SUCCESS = 0
EXIT_INVALID_INPUT = 1
EXIT_AGENT_ERROR = 2
EXIT_ORCHESTRATOR_ERROR = 3
EXIT_PARTIAL_FAILURE = 4
EXIT_UNEXPECTED = 5
EXIT_KEYBOARD_INTERRUPT = 130

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

# Safe keys allowed in config output (no secrets)
_SAFE_CONFIG_KEYS = frozenset({
    "kind", "project_root", "files", "max_attempts", "max_iterations",
    "healing_enabled", "exclude", "output_dir", "model", "temperature",
    "llm_provider", "timeout", "allow_no_runner_pass", "verbose", "dry_run",
    "output_json",
})


def build_parser() -> argparse.ArgumentParser:
    """Build and return the argument parser."""
    parser = argparse.ArgumentParser(
        prog="artifact-bot",
        description="Generate, validate and self-heal Storybook stories and unit tests for JS/TS projects",
    )
    parser.add_argument(
        "kind",
        type=str,
        choices=[kind.value for kind in ArtifactKind],
        help="Artifact kind to produce",
    )
    parser.add_argument("project_root", type=str, help="Path to the project root")
    parser.add_argument(
        "files", nargs="+", help="Source files, relative to the project root"
    )
    parser.add_argument(
        "--max-attempts",
        type=int,
        default=DEFAULT_MAX_ATTEMPTS,
        help=f"Validation attempts per artifact, 1-10 (default: {DEFAULT_MAX_ATTEMPTS})",
    )
    parser.add_argument(
        "--max-iterations",
        type=int,
        default=DEFAULT_MAX_ITERATIONS,
        help=f"Oracle turns per conversation (default: {DEFAULT_MAX_ITERATIONS})",
    )
    parser.add_argument(
        "--no-healing", action="store_true", help="Do not attempt to fix invalid artifacts"
    )
    parser.add_argument(
        "--exclude",
        action="append",
        default=[],
        metavar="GLOB",
        help="Extra exclusion glob (repeatable)",
    )
    parser.add_argument(
        "--output-dir",
        type=str,
        default=None,
        help="Artifact directory: './x' or a test-dir name is colocated, anything else mirrors the tree",
    )
    parser.add_argument(
        "--model",
        type=str,
        default=DEFAULT_MODEL,
        help=f"Model ID to use (default: {DEFAULT_MODEL})",
    )
    parser.add_argument(
        "--temperature",
        type=float,
        default=DEFAULT_TEMPERATURE,
        help=f"Sampling temperature (default: {DEFAULT_TEMPERATURE})",
    )
    parser.add_argument(
        "--llm-provider",
        type=str,
        default="auto",
        choices=("auto", "anthropic", "openai"),
        help="LLM provider: auto (default), anthropic, or openai",
    )
    parser.add_argument(
        "--timeout",
        type=int,
        default=DEFAULT_TIMEOUT,
        help=f"Validator subprocess timeout in seconds (default: {DEFAULT_TIMEOUT})",
    )
    parser.add_argument(
        "--allow-no-runner-pass",
        action="store_true",
        help=(
            "Accept unit tests on static checks when no test runner is detected "
            "(low-trust, default fails validation)"
        ),
    )
    parser.add_argument("--verbose", action="store_true", help="Enable verbose output")
    parser.add_argument(
        "--dry-run", action="store_true", help="Print config and exit without running"
    )
    parser.add_argument(
        "--output-json", action="store_true", help="Output results as JSON"
    )
    return parser


def validate_project_root(raw_path: str) -> str:
    """Validate and resolve the project root.

    Raises:
        SystemExit: If path is not a valid directory.
    """
    resolved = Path(raw_path).resolve()
    if not resolved.is_dir():
        print(f"Error: '{raw_path}' is not a valid directory.", file=sys.stderr)
        raise SystemExit(EXIT_INVALID_INPUT)
    return str(resolved)


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=LOG_FORMAT,
        stream=sys.stderr,
    )


def build_config(args: argparse.Namespace) -> BotConfig:
    """Translate parsed arguments into a BotConfig."""
    return BotConfig(
        ai=AIConfig(
            provider=args.llm_provider,
            model=args.model,
            temperature=args.temperature,
            max_iterations=args.max_iterations,
        ),
        healing=HealingConfig(enabled=not args.no_healing, max_attempts=args.max_attempts),
        output=OutputConfig(output_dir=args.output_dir, exclude=list(args.exclude)),
        timeout_seconds=args.timeout,
        allow_no_runner_pass=args.allow_no_runner_pass,
    )


def create_writer(args: argparse.Namespace, project_root: str, config: BotConfig):
    """Create the oracle, handler and ArtifactWriter for this run.

    Oracle SDK imports are deferred so --help and --dry-run stay fast.
    """
    from artifact_bot.agents.handlers.registry import build_handlers, resolve_handler
    from artifact_bot.agents.oracle_client import build_oracle_client
    from artifact_bot.orchestrator.writer import ArtifactWriter
    from artifact_bot.utils.file_store import ProjectFileStore
    from artifact_bot.utils.project_detector import detect_project_context

    oracle = build_oracle_client(provider=config.ai.provider)
    file_store = ProjectFileStore(project_root)
    project_context = detect_project_context(project_root)
    handlers = build_handlers(oracle, file_store, config)
    handler = resolve_handler(handlers, args.kind)
    return ArtifactWriter(
        handler,
        file_store,
        project_context,
        healing=config.healing,
        output=config.output,
    )


def normalize_targets(project_root: str, files: list[str]) -> list[str]:
    """Return ``files`` as POSIX paths relative to ``project_root``.

    Raises:
        FileStoreError: If a path resolves outside the project root.
    """
    from artifact_bot.utils.file_store import ProjectFileStore

    store = ProjectFileStore(project_root)
    return [store.relative(path) for path in files]


def format_result_json(report: BatchReport) -> str:
    """Serialize a BatchReport to a JSON string."""
    payload = report.model_dump()
    payload["success_count"] = report.success_count
    payload["failure_count"] = report.failure_count
    return json.dumps(payload, indent=2, default=str)


def print_report_human(report: BatchReport) -> None:
    """Print a batch summary in human-readable format."""
    print(f"\n{'='*60}")
    print("Artifact Bot Results")
    print(f"{'='*60}")

    print(f"\nGenerated: {report.success_count}")
    for path in report.generated_files:
        print(f"  + {path}")

    if report.skipped_files:
        print(f"\nSkipped (excluded): {len(report.skipped_files)}")
        for path in report.skipped_files:
            print(f"  - {path}")

    if report.failures:
        print(f"\nFailed ({report.failure_count}):")
        for failure in report.failures:
            print(f"  ! {failure.file}: {failure.error.splitlines()[0] if failure.error else ''}")

    print(f"\n{'='*60}")


def print_progress(event: ProgressEvent) -> None:
    print(f"[{event.index}/{event.total}] {event.path}", file=sys.stderr)


def determine_exit_code(report: BatchReport) -> int:
    """Map a batch report to an exit code."""
    if not report.failures:
        return EXIT_SUCCESS
    return EXIT_PARTIAL_FAILURE


def print_config_human(config: dict) -> None:
    """Print configuration in human-readable format.

    Only prints keys in the safe allowlist to prevent secret leakage.
    """
    print("\nConfiguration:")
    print(f"{'='*40}")
    for key, value in config.items():
        if key in _SAFE_CONFIG_KEYS:
            print(f"  {key}: {value}")
    print(f"{'='*40}")


def _handle_error(label: str, exc: BaseException, verbose: bool, exit_code: int) -> int:
    """Print error message to stderr and return the exit code."""
    logger.debug("Exiting with code %d after %s", exit_code, type(exc).__name__)
    print(f"{label}: {exc}", file=sys.stderr)
    if verbose:
        traceback.print_exc(file=sys.stderr)
    return exit_code


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:]).

    Returns:
        Exit code integer.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        project_root = validate_project_root(args.project_root)
    except SystemExit as exc:
        return exc.code

    try:
        files = normalize_targets(project_root, args.files)
    except FileStoreError as exc:
        return _handle_error("Invalid input", exc, args.verbose, EXIT_INVALID_INPUT)

    config = build_config(args)
    summary = {
        "kind": args.kind,
        "project_root": project_root,
        "files": files,
        "max_attempts": config.healing.max_attempts,
        "max_iterations": config.ai.max_iterations,
        "healing_enabled": config.healing.enabled,
        "exclude": config.output.exclude,
        "output_dir": config.output.output_dir,
        "model": config.ai.model,
        "temperature": config.ai.temperature,
        "llm_provider": config.ai.provider,
        "timeout": config.timeout_seconds,
        "allow_no_runner_pass": config.allow_no_runner_pass,
        "verbose": args.verbose,
        "dry_run": args.dry_run,
        "output_json": args.output_json,
    }

    if args.dry_run:
        if args.output_json:
            print(json.dumps(summary, indent=2))
        else:
            print_config_human(summary)
        return EXIT_SUCCESS

    configure_logging(args.verbose)

    try:
        writer = create_writer(args, project_root, config)
        report = writer.process_batch(
            files,
            on_progress=None if args.output_json else print_progress,
        )

        if args.output_json:
            print(format_result_json(report))
        else:
            print_report_human(report)

        return determine_exit_code(report)

    except AgentError as exc:
        return _handle_error("Agent error", exc, args.verbose, EXIT_AGENT_ERROR)

    except OrchestratorError as exc:
        return _handle_error("Orchestrator error", exc, args.verbose, EXIT_ORCHESTRATOR_ERROR)

    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        return EXIT_KEYBOARD_INTERRUPT

    except Exception as exc:
        return _handle_error("Unexpected error", exc, args.verbose, EXIT_UNEXPECTED)


if __name__ == "__main__":
    sys.exit(main())
