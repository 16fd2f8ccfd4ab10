"""Tests for verdict formatting of validator output."""
from artifact_bot.utils.diagnostics import (
    MAX_VERDICT_CHARS,
    format_process_failure,
    format_test_failures,
    format_tsc_errors,
    strip_ansi,
    truncate,
)


def test_strip_ansi():
    assert strip_ansi("\x1b[31mFAIL\x1b[0m test") == "FAIL test"


def test_truncate_long_text():
    text = "a" * (MAX_VERDICT_CHARS + 10)
    result = truncate(text)
    assert result.startswith("a" * MAX_VERDICT_CHARS)
    assert result.endswith("[truncated 10 chars]")


class TestFormatProcessFailure:
    def test_stdout_wins(self):
        assert format_process_failure("out", "err", "msg") == "out"

    def test_falls_back_to_stderr_then_message(self):
        assert format_process_failure("  ", "err", "msg") == "err"
        assert format_process_failure(None, "", "msg") == "msg"

    def test_default_message(self):
        assert format_process_failure() == "Validation failed with unknown error"


class TestFormatTscErrors:
    def test_condenses_errors(self):
        stdout = (
            "src/Button.stories.tsx(3,10): error TS2305: Module './Button' has no exported member 'Btn'.\n"
            "Found 1 error.\n"
        )
        assert format_tsc_errors(stdout) == (
            "src/Button.stories.tsx:3:10 TS2305 Module './Button' has no exported member 'Btn'."
        )

    def test_passes_through_unrecognized_output(self):
        assert format_tsc_errors("something odd happened") == "something odd happened"


class TestFormatTestFailures:
    def test_lists_failing_tests_and_errors(self):
        stdout = (
            "\x1b[31m FAIL \x1b[0m src/Button.test.tsx > renders label\n"
            "AssertionError: expected 'a' to be 'b'\n"
            " ✓ src/Card.test.tsx > ok\n"
        )
        verdict = format_test_failures(stdout)
        assert "Failing tests:\n- src/Button.test.tsx > renders label" in verdict
        assert "Errors:\n- AssertionError: expected 'a' to be 'b'" in verdict
        assert "Card" not in verdict

    def test_falls_back_to_raw_output(self):
        assert format_test_failures("", "npm ERR! missing script: test") == "npm ERR! missing script: test"
