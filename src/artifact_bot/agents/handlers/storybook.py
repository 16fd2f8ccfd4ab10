"""Storybook stories handler: oracle generation, tsc validation, agentic healing."""

import logging
import subprocess
from typing import Optional

from artifact_bot.agents.exceptions import HandlerError
from artifact_bot.agents.handlers.base import OracleBackedHandler
from artifact_bot.agents.oracle_client import OracleClient
from artifact_bot.agents.prompts import build_story_fix_prompt, build_story_prompt
from artifact_bot.config import DEFAULT_TIMEOUT, AIConfig
from artifact_bot.models import ProjectContext
from artifact_bot.utils.diagnostics import format_process_failure, format_tsc_errors
from artifact_bot.utils.file_store import ProjectFileStore
from artifact_bot.utils.paths import DEFAULT_EXCLUDE_PATTERNS

logger = logging.getLogger(__name__)

STORYBOOK_EXCLUDE_PATTERNS = (
    "**/*.stories.{ts,tsx,js,jsx,mdx}",
    "**/*.test.{ts,tsx,js,jsx}",
    "**/*.spec.{ts,tsx,js,jsx}",
)


class StorybookHandler(OracleBackedHandler):
    """Writes `*.stories.*` files next to components."""

    def __init__(
        self,
        oracle: OracleClient,
        file_store: ProjectFileStore,
        ai_config: AIConfig | None = None,
        timeout_seconds: int = DEFAULT_TIMEOUT,
    ) -> None:
        super().__init__(oracle, file_store, ai_config)
        self.timeout_seconds = timeout_seconds

    def exclusion_patterns(self) -> list[str]:
        return list(dict.fromkeys([*DEFAULT_EXCLUDE_PATTERNS, *STORYBOOK_EXCLUDE_PATTERNS]))

    def output_suffix(self) -> str:
        return ".stories"

    def generate_document(
        self,
        source_path: str,
        source_content: str,
        target_path: str,
        project_context: ProjectContext,
    ) -> Optional[str]:
        prompt = build_story_prompt(source_path, source_content, target_path, project_context)
        return self._complete_once(prompt) or None

    def _tsc_command(self, absolute_path: str, project_context: ProjectContext) -> list[str]:
        command = ["npx", "tsc", "--noEmit", "--skipLibCheck", absolute_path]
        if project_context.framework in {"react", "nextjs"}:
            command.extend(["--jsx", "react-jsx"])
        elif project_context.framework == "angular":
            command.extend(["--experimentalDecorators", "--emitDecoratorMetadata"])
        return command

    def validate_document(
        self,
        content: str,
        target_path: str,
        project_context: ProjectContext,
    ) -> Optional[str]:
        """Check CSF structure, then type-check the file on disk with tsc.

        The orchestrator writes the artifact before validating, so tsc sees
        exactly ``content``.

        Raises:
            HandlerError: If npx is not installed.
        """
        if "export default" not in content:
            return 'Missing "export default"'
        if "component:" not in content:
            return 'Missing "component:" in default export'

        absolute_path = str(self.file_store.resolve(target_path))
        try:
            result = subprocess.run(
                self._tsc_command(absolute_path, project_context),
                capture_output=True,
                text=True,
                timeout=self.timeout_seconds,
                cwd=project_context.project_root,
            )
        except subprocess.TimeoutExpired:
            return f"Type check timed out after {self.timeout_seconds}s"
        except FileNotFoundError as exc:
            raise HandlerError(f"Cannot run tsc: {exc}") from exc

        if result.returncode == 0:
            return None
        if result.stdout.strip():
            verdict = format_tsc_errors(result.stdout)
        else:
            verdict = format_process_failure(stderr=result.stderr)
        logger.debug("Story validation failed for %s: %s", target_path, verdict)
        return verdict

    def fix_document(
        self,
        content: str,
        source_path: str,
        target_path: str,
        project_context: ProjectContext,
        verdict: Optional[str] = None,
    ) -> Optional[str]:
        errors = verdict
        if not errors:
            errors = self.validate_document(content, target_path, project_context)
        if not errors:
            return content

        source_content = self._read_source(source_path)
        prompt = build_story_fix_prompt(
            content, errors, source_path, source_content, target_path, project_context
        )
        return self._new_runner().run(prompt) or None
