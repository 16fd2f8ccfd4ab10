"""Per-artifact lifecycle driver and sequential batch runner."""

import logging
import time
from datetime import datetime
from typing import Callable

from artifact_bot.agents.exceptions import FatalProviderError
from artifact_bot.agents.handlers.base import ArtifactHandler
from artifact_bot.config import HealingConfig, OutputConfig
from artifact_bot.models import (
    ArtifactOutcome,
    BatchReport,
    FileFailure,
    ProgressEvent,
    ProjectContext,
)
from artifact_bot.orchestrator.graph import build_artifact_graph, recursion_limit_for
from artifact_bot.orchestrator.recovery import outcome_from_state
from artifact_bot.orchestrator.state import make_initial_state
from artifact_bot.utils.file_store import ProjectFileStore
from artifact_bot.utils.paths import generate_artifact_path, matches_pattern

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[ProgressEvent], None]


class ArtifactWriter:
    """Drives the generate/validate/heal lifecycle for one artifact kind.

    The compiled graph is built once and shared by every target; each
    target gets its own ArtifactState, so no transcript or verdict leaks
    from one artifact into another.
    """

    def __init__(
        self,
        handler: ArtifactHandler,
        file_store: ProjectFileStore,
        project_context: ProjectContext,
        healing: HealingConfig | None = None,
        output: OutputConfig | None = None,
    ) -> None:
        self.handler = handler
        self.file_store = file_store
        self.project_context = project_context
        self.healing = healing or HealingConfig()
        self.output = output or OutputConfig()
        self._graph = build_artifact_graph(handler, file_store, project_context)

    def artifact_path_for(self, source_path: str) -> str:
        """Project-relative artifact path for ``source_path``."""
        return generate_artifact_path(
            source_path,
            self.handler.output_suffix(),
            output_dir=self.output.output_dir,
        )

    def run_artifact(self, source_path: str) -> ArtifactOutcome:
        """Run the full lifecycle for one source file.

        Returns:
            ArtifactOutcome describing the final state.

        Raises:
            FatalProviderError: Rate-limit or authentication failure.
            PathTraversalError: If the source or artifact escapes the root.
        """
        artifact_path = self.artifact_path_for(source_path)
        state = make_initial_state(
            source_path=source_path,
            artifact_path=artifact_path,
            max_attempts=self.healing.max_attempts,
            healing_enabled=self.healing.enabled,
        )
        final_state = self._graph.invoke(
            state,
            config={"recursion_limit": recursion_limit_for(state["max_attempts"])},
        )
        return outcome_from_state(final_state)

    def process(self, source_path: str) -> bool:
        """Return True if a valid artifact exists for ``source_path`` afterwards."""
        return self.run_artifact(source_path).success

    def filter_targets(self, paths: list[str]) -> tuple[list[str], list[str]]:
        """Split ``paths`` into (targets, skipped) using the exclusion globs."""
        patterns = list(self.handler.exclusion_patterns()) + list(self.output.exclude)
        targets: list[str] = []
        skipped: list[str] = []
        for path in paths:
            if matches_pattern(path, patterns):
                skipped.append(path)
            else:
                targets.append(path)
        if skipped:
            logger.info("Skipping %d excluded file(s)", len(skipped))
        return targets, skipped

    def process_batch(
        self,
        paths: list[str],
        on_progress: ProgressCallback | None = None,
    ) -> BatchReport:
        """Process every non-excluded path in order.

        One artifact's failure never stops its siblings; fatal provider
        errors abort the whole batch.

        Raises:
            FatalProviderError: Rate-limit or authentication failure.
        """
        report = BatchReport(started_at=datetime.now())
        targets, report.skipped_files = self.filter_targets(paths)
        total = len(targets)
        started = time.monotonic()

        for index, source_path in enumerate(targets, start=1):
            if on_progress is not None:
                on_progress(
                    ProgressEvent(
                        index=index,
                        total=total,
                        path=source_path,
                        elapsed_seconds=time.monotonic() - started,
                    )
                )
            try:
                outcome = self.run_artifact(source_path)
            except FatalProviderError:
                raise
            except Exception as exc:
                logger.info("Error processing %s: %s", source_path, exc)
                report.failures.append(FileFailure(file=source_path, error=str(exc)))
                continue

            if outcome.success:
                report.generated_files.append(outcome.artifact_path)
            else:
                report.failures.append(
                    FileFailure(file=source_path, error=outcome.describe_failure())
                )

        report.finished_at = datetime.now()
        logger.info(
            "Batch complete: %d generated, %d failed, %d skipped",
            report.success_count,
            report.failure_count,
            len(report.skipped_files),
        )
        return report
