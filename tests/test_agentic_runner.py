"""Tests for the bounded oracle conversation (AgenticRunner)."""
from unittest.mock import MagicMock

import pytest

from artifact_bot.agents.agentic_runner import (
    AgenticRunner,
    format_file_context,
    parse_oracle_response,
)
from artifact_bot.agents.exceptions import (
    EmptyOracleResponse,
    InvalidOracleResponse,
    IterationBudgetExceeded,
    MalformedProtocolResponse,
    ProtocolError,
    RateLimitExceededError,
)
from artifact_bot.models import ArtifactResult, ChatCompletion, FileRequest, ResolvedFile

from conftest import make_completion, request_files_turn, result_turn

STORY_CODE = "import { Button } from './Button';\nexport default { component: Button };"


def _runner(oracle, file_store, **kwargs) -> AgenticRunner:
    return AgenticRunner(oracle=oracle, file_store=file_store, **kwargs)


# ---------------------------------------------------------------------------
# parse_oracle_response
# ---------------------------------------------------------------------------
class TestParseOracleResponse:
    def test_parses_file_request(self):
        parsed = parse_oracle_response('{"action": "request_files", "files": ["a.ts"]}')
        assert isinstance(parsed, FileRequest)
        assert parsed.files == ["a.ts"]

    @pytest.mark.parametrize("action", ["generate", "fix", "success"])
    def test_parses_result_actions(self, action):
        parsed = parse_oracle_response(f'{{"action": "{action}", "code": "x = 1;"}}')
        assert isinstance(parsed, ArtifactResult)
        assert parsed.code == "x = 1;"

    def test_accepts_fenced_json(self):
        parsed = parse_oracle_response('```json\n{"action": "request_files", "files": []}\n```')
        assert isinstance(parsed, FileRequest)

    def test_rejects_plain_text(self):
        with pytest.raises(MalformedProtocolResponse):
            parse_oracle_response("Sure! Here is your story.")

    def test_rejects_unknown_action(self):
        with pytest.raises(MalformedProtocolResponse):
            parse_oracle_response('{"action": "delete_repo", "files": []}')

    def test_rejects_result_without_code(self):
        with pytest.raises(MalformedProtocolResponse):
            parse_oracle_response('{"action": "generate"}')


# ---------------------------------------------------------------------------
# format_file_context
# ---------------------------------------------------------------------------
class TestFormatFileContext:
    def test_plain_and_redirected_and_error_sections(self):
        text = format_file_context([
            ResolvedFile(requested_path="a.ts", resolved_path="a.ts", content="A"),
            ResolvedFile(requested_path="b.ts", resolved_path="b.tsx", content="B"),
            ResolvedFile(requested_path="c.ts", resolved_path="c.ts", error="boom"),
        ])
        assert text.startswith("Here are the requested files:")
        assert "--- FILE: a.ts ---\nA" in text
        assert "--- FILE: b.ts (Resolved to b.tsx) ---\nB" in text
        assert "--- FILE: c.ts ---\n[Error reading file: boom]" in text
        assert text.endswith("or request more files if absolutely necessary.")


# ---------------------------------------------------------------------------
# AgenticRunner.run
# ---------------------------------------------------------------------------
class TestAgenticRunner:
    def test_rejects_zero_iterations(self, mock_oracle, file_store):
        with pytest.raises(ValueError):
            _runner(mock_oracle, file_store, max_iterations=0)

    def test_immediate_result_returns_cleaned_code(self, mock_oracle, file_store):
        mock_oracle.create_chat_completion.return_value = result_turn(
            f"```tsx\n{STORY_CODE}\n```"
        )
        result = _runner(mock_oracle, file_store).run("write a story")
        assert result == STORY_CODE
        assert mock_oracle.create_chat_completion.call_count == 1

    def test_transcript_starts_with_system_prompt(self, mock_oracle, file_store):
        mock_oracle.create_chat_completion.return_value = result_turn(STORY_CODE)
        _runner(mock_oracle, file_store, model="m-1", temperature=0.7).run("the prompt")
        kwargs = mock_oracle.create_chat_completion.call_args.kwargs
        assert kwargs["model"] == "m-1"
        assert kwargs["temperature"] == 0.7
        assert [m.role for m in kwargs["messages"]] == ["system"]
        assert kwargs["messages"][0].content == "the prompt"

    def test_file_request_feeds_contents_back(self, mock_oracle, file_store):
        mock_oracle.create_chat_completion.side_effect = [
            request_files_turn("src/Button.tsx"),
            result_turn(STORY_CODE),
        ]
        result = _runner(mock_oracle, file_store).run("write a story")

        assert result == STORY_CODE
        second_messages = mock_oracle.create_chat_completion.call_args_list[1].kwargs["messages"]
        assert [m.role for m in second_messages] == ["system", "assistant", "user"]
        assert '"request_files"' in second_messages[1].content
        assert "--- FILE: src/Button.tsx ---" in second_messages[2].content
        assert "export const Button" in second_messages[2].content

    def test_sibling_extension_fallback_is_reported(self, mock_oracle, file_store, project_root):
        (project_root / "src" / "component.tsx").write_text("export const C = 1;\n")
        mock_oracle.create_chat_completion.side_effect = [
            request_files_turn("src/component.ts"),
            result_turn(STORY_CODE),
        ]
        _runner(mock_oracle, file_store).run("write a story")

        context = mock_oracle.create_chat_completion.call_args_list[1].kwargs["messages"][-1].content
        assert "--- FILE: src/component.ts (Resolved to src/component.tsx) ---" in context
        assert "export const C = 1;" in context

    def test_missing_file_is_reported_not_raised(self, mock_oracle, file_store):
        mock_oracle.create_chat_completion.side_effect = [
            request_files_turn("src/Nope.ts"),
            result_turn(STORY_CODE),
        ]
        assert _runner(mock_oracle, file_store).run("p") == STORY_CODE

        context = mock_oracle.create_chat_completion.call_args_list[1].kwargs["messages"][-1].content
        assert "--- FILE: src/Nope.ts ---\n[Error reading file:" in context
        assert "src/Nope.ts" in context.split("[Error reading file:")[1]

    def test_traversal_request_is_reported_as_error(self, mock_oracle, file_store):
        mock_oracle.create_chat_completion.side_effect = [
            request_files_turn("../../etc/passwd"),
            result_turn(STORY_CODE),
        ]
        _runner(mock_oracle, file_store).run("p")

        context = mock_oracle.create_chat_completion.call_args_list[1].kwargs["messages"][-1].content
        assert "[Error reading file: Access denied" in context

    def test_one_unreadable_path_does_not_drop_the_others(self, mock_oracle, file_store):
        mock_oracle.create_chat_completion.side_effect = [
            request_files_turn("src/Button.tsx", "src/bad\u0000.ts", "src/Nope.ts", "src/Card.tsx"),
            result_turn(STORY_CODE),
        ]
        assert _runner(mock_oracle, file_store).run("p") == STORY_CODE

        context = mock_oracle.create_chat_completion.call_args_list[1].kwargs["messages"][-1].content
        assert "--- FILE: src/Button.tsx ---\nimport React" in context
        assert "--- FILE: src/Card.tsx ---\nexport const Card" in context
        assert "--- FILE: src/Nope.ts ---\n[Error reading file:" in context
        assert context.count("[Error reading file:") == 2

    def test_requested_files_are_sanitized(self, mock_oracle, file_store, project_root):
        secret = "sk-abcdefghijklmnopqrstuvwx1234"
        (project_root / "src" / "api.ts").write_text(f'const key = "{secret}";\n')
        mock_oracle.create_chat_completion.side_effect = [
            request_files_turn("src/api.ts"),
            result_turn(STORY_CODE),
        ]
        _runner(mock_oracle, file_store).run("p")

        context = mock_oracle.create_chat_completion.call_args_list[1].kwargs["messages"][-1].content
        assert secret not in context
        assert "[REDACTED_API_KEY_" in context

    def test_iteration_budget_is_enforced(self, mock_oracle, file_store):
        mock_oracle.create_chat_completion.return_value = request_files_turn("src/Button.tsx")
        with pytest.raises(IterationBudgetExceeded) as exc_info:
            _runner(mock_oracle, file_store, max_iterations=3).run("p")
        assert mock_oracle.create_chat_completion.call_count == 3
        assert "after 3 iterations" in str(exc_info.value)

    def test_malformed_turn_aborts_immediately(self, mock_oracle, file_store):
        mock_oracle.create_chat_completion.return_value = make_completion("I think the answer is...")
        with pytest.raises(MalformedProtocolResponse):
            _runner(mock_oracle, file_store, max_iterations=5).run("p")
        assert mock_oracle.create_chat_completion.call_count == 1

    def test_no_choices_raises_empty_response(self, mock_oracle, file_store):
        mock_oracle.create_chat_completion.return_value = ChatCompletion(choices=[])
        with pytest.raises(EmptyOracleResponse, match="anthropic AI did not return any choices"):
            _runner(mock_oracle, file_store).run("p")

    @pytest.mark.parametrize("content", [None, "", "   \n"])
    def test_blank_content_raises_invalid_response(self, mock_oracle, file_store, content):
        mock_oracle.create_chat_completion.return_value = make_completion(content)
        with pytest.raises(InvalidOracleResponse):
            _runner(mock_oracle, file_store).run("p")

    def test_protocol_errors_share_base(self):
        for exc_type in (EmptyOracleResponse, InvalidOracleResponse, MalformedProtocolResponse):
            assert issubclass(exc_type, ProtocolError)

    def test_rate_limit_is_raised_as_fatal(self, mock_oracle, file_store):
        mock_oracle.create_chat_completion.side_effect = RuntimeError("Error code: 429 - slow down")
        with pytest.raises(RateLimitExceededError):
            _runner(mock_oracle, file_store).run("p")

    def test_other_oracle_errors_propagate_unchanged(self, mock_oracle, file_store):
        mock_oracle.create_chat_completion.side_effect = ConnectionError("network down")
        with pytest.raises(ConnectionError):
            _runner(mock_oracle, file_store).run("p")

    def test_on_success_hook_overrides_result(self, mock_oracle, file_store):
        mock_oracle.create_chat_completion.return_value = result_turn(STORY_CODE, action="fix")
        hook = MagicMock(return_value="hooked content")
        result = _runner(mock_oracle, file_store).run("p", on_success=hook)
        assert result == "hooked content"
        parsed = hook.call_args.args[0]
        assert isinstance(parsed, ArtifactResult)
        assert parsed.action == "fix"

    @pytest.mark.parametrize("hook_result", [None, ""])
    def test_on_success_hook_without_content_keeps_code(self, mock_oracle, file_store, hook_result):
        mock_oracle.create_chat_completion.return_value = result_turn(STORY_CODE)
        result = _runner(mock_oracle, file_store).run("p", on_success=lambda parsed: hook_result)
        assert result == STORY_CODE

    def test_each_run_starts_a_fresh_transcript(self, mock_oracle, file_store):
        mock_oracle.create_chat_completion.side_effect = [
            request_files_turn("src/Button.tsx"),
            result_turn(STORY_CODE),
            result_turn(STORY_CODE),
        ]
        runner = _runner(mock_oracle, file_store)
        runner.run("first")
        runner.run("second")
        third_messages = mock_oracle.create_chat_completion.call_args_list[2].kwargs["messages"]
        assert len(third_messages) == 1
        assert third_messages[0].content == "second"
