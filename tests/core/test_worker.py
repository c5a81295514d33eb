"""
Unit tests for the background round-trip helper used by the window.
"""

import pytest

from core.errors import GeoBuddyError, GenerationError, GradingError
from core.worker import run_in_background


@pytest.fixture
def posted():
    """Collects callbacks instead of scheduling them on a Tk main loop."""
    return []


def _run(posted, work, unexpected=GeoBuddyError):
    done, failed = [], []
    thread = run_in_background(
        "test_task", work,
        on_done=done.append,
        on_error=failed.append,
        post=posted.append,
        unexpected=unexpected,
    )
    thread.join(timeout=5)
    assert not thread.is_alive()
    for callback in posted:
        callback()
    return done, failed


class TestRunInBackground:
    def test_success_then_result_posted_once(self, posted):
        done, failed = _run(posted, lambda: 42)

        assert len(posted) == 1
        assert done == [42]
        assert failed == []

    def test_typed_error_then_passed_through(self, posted):
        error = GradingError("provider down")

        def work():
            raise error

        done, failed = _run(posted, work, unexpected=GradingError)

        assert len(posted) == 1
        assert done == []
        assert failed == [error]

    @pytest.mark.parametrize("raised", [
        OverflowError("int too large to convert to float"),
        RecursionError("maximum recursion depth exceeded"),
        KeyError("choices"),
    ])
    def test_unexpected_error_then_wrapped_and_posted(self, posted, raised):
        """Any failure must reach on_error so the window can leave its busy state."""
        def work():
            raise raised

        done, failed = _run(posted, work, unexpected=GenerationError)

        assert len(posted) == 1
        assert done == []
        assert isinstance(failed[0], GenerationError)
        assert failed[0].__cause__ is raised
        assert "Unexpected error" in str(failed[0])

    def test_thread_is_daemon(self, posted):
        thread = run_in_background("daemon_check", lambda: None, lambda r: None, lambda e: None, posted.append)
        thread.join(timeout=5)
        assert thread.daemon
