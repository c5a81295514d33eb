"""
Unit tests for the colour debug logger.
"""

import io

from core.logger import DebugLogger, Timer


def _captured(**kwargs):
    stream = io.StringIO()
    return DebugLogger(enabled=True, stream=stream, **kwargs), stream


class TestDebugLogger:
    def test_lines_carry_category_tag(self):
        log, stream = _captured()

        log.env_success("API key loaded")
        log.json_recovered("stripped code fences")
        log.ui_transition("answering", "grading")

        lines = stream.getvalue().splitlines()
        assert "[ ENV]" in lines[0] and "✓ API key loaded" in lines[0]
        assert "[JSON]" in lines[1] and "stripped code fences" in lines[1]
        assert "[  UI]" in lines[2] and "answering → grading" in lines[2]

    def test_disabled_then_silent(self):
        log, stream = _captured()
        log.enabled = False

        log.error("should not appear")
        log.banner("Nor this")

        assert stream.getvalue() == ""

    def test_multiline_message_indents_continuation(self):
        log, stream = _captured()

        log.json_error("Reply is not valid JSON", raw="x" * 200)

        first, second = stream.getvalue().splitlines()
        assert "✗ Reply is not valid JSON" in first
        assert second.rstrip().endswith("...'")

    def test_task_complete_reports_duration(self):
        log, stream = _captured()
        log.task_complete("grade_answer_q1", duration_ms=1234.4)
        assert "Completed: grade_answer_q1 (1234ms)" in stream.getvalue()


class TestTimer:
    def test_timer_measures_elapsed(self):
        with Timer() as timer:
            sum(range(1000))
        assert timer.duration_ms >= 0
