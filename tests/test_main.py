"""
Window-level tests. Skipped where Tk cannot open a display.
"""

import time
from unittest.mock import Mock

import pytest

tk = pytest.importorskip("tkinter")

import main  # noqa: E402
from core.models import Feedback, GeographyTopic, HistoryItem  # noqa: E402
from core.session import Phase  # noqa: E402


@pytest.fixture
def app(fake_client, monkeypatch):
    monkeypatch.setattr(main, "messagebox", Mock())
    try:
        window = main.GeographyBuddyApp(fake_client)
    except tk.TclError as e:
        pytest.skip(f"Tk display unavailable: {e}")
    window.withdraw()
    yield window
    window.destroy()


def _pump_until(app, condition, timeout=5.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        app.update()
        if condition():
            return True
        time.sleep(0.01)
    return False


def _show_question(app):
    app.session.select_topic(GeographyTopic.RIVERS)
    app.request_question()
    assert _pump_until(app, lambda: app.session.phase is Phase.ANSWERING)


class TestAnswerBox:
    def test_inserted_text_syncs_draft_and_enables_submit(self, app, rivers_answer):
        """Text that arrives without a key press (paste, drop) still updates the draft."""
        _show_question(app)
        practice = app.cards["PracticeCard"]
        assert practice.submit_button.instate(["disabled"])

        practice.answer_text.insert("1.0", rivers_answer)
        assert _pump_until(app, lambda: app.session.draft_answer == rivers_answer)

        assert practice.submit_button.instate(["!disabled"])


class TestWorkerFailures:
    def test_unexpected_grading_failure_then_back_to_answering(self, app, fake_client):
        _show_question(app)
        fake_client.grading_error = OverflowError("int too large to convert to float")

        app.submit_answer("Rain increases discharge")

        assert _pump_until(app, lambda: app.session.phase is Phase.ANSWERING)
        assert app.session.draft_answer == "Rain increases discharge"
        main.messagebox.showerror.assert_called_once()

    def test_unexpected_question_failure_then_back_to_menu(self, app, fake_client):
        fake_client.question_error = RecursionError("maximum recursion depth exceeded")

        app.request_question()

        assert _pump_until(app, lambda: app.session.phase is Phase.SELECTING)
        assert app.cards["TopicCard"].start_button.instate(["!disabled"])


class TestHistoryPanel:
    def test_expanded_history_lists_every_attempt(self, app, sample_question):
        items = [
            HistoryItem(id=str(i), question=sample_question, user_answer=f"Attempt {i}",
                        feedback=Feedback(score=i % 4, comments="ok"))
            for i in range(12)
        ]
        panel = app.history_panel

        panel.refresh(items)
        panel._toggle()

        assert len(panel.rows) == 12
        assert "View History (12)" in panel.toggle_button.cget("text")
