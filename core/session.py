"""
Practice session state for Geography 3-Mark Buddy.

One PracticeSession owns everything the window shows: the selected topic,
the question in play, the draft answer, the feedback and the history of
graded attempts. The window never mutates these directly; it calls the
transition methods below and re-renders from the session.

Flow:
    SELECTING --request--> LOADING --ok--> ANSWERING --submit--> GRADING --ok--> GRADED
        ^                     |fail            ^  ^                 |fail          |
        |                     v                |  +-----------------+              |
        +------------------ SELECTING          +---------- retry ------------------+
    reset() returns to SELECTING from any phase; skip() requests a new question.

Each round trip is split into begin/complete/fail so the window can run the
network call on a worker thread. begin_* hands out a ticket; results carrying
an outdated ticket (after reset or a newer request) are dropped.
"""

import uuid
from enum import Enum
from typing import List, Optional, Tuple

from .errors import (
    ConfigurationError, GenerationError, GradingError,
    SessionStateError, ValidationError,
)
from .logger import logger
from .models import DEFAULT_TOPIC, Feedback, GeographyTopic, HistoryItem, Question


class Phase(Enum):
    SELECTING = "selecting"
    LOADING = "loading"
    ANSWERING = "answering"
    GRADING = "grading"
    GRADED = "graded"


class PracticeSession:
    def __init__(self, topic: GeographyTopic = DEFAULT_TOPIC) -> None:
        self.topic: GeographyTopic = topic
        self.phase: Phase = Phase.SELECTING
        self.question: Optional[Question] = None
        self.draft_answer: str = ""
        self.feedback: Optional[Feedback] = None
        self.error: Optional[str] = None
        self._history: List[HistoryItem] = []
        self._ticket: int = 0

    # Derived state ----------------------------------------------------------

    @property
    def history(self) -> Tuple[HistoryItem, ...]:
        """Graded attempts, most recent first."""
        return tuple(self._history)

    @property
    def is_busy(self) -> bool:
        return self.phase in (Phase.LOADING, Phase.GRADING)

    @property
    def answer_locked(self) -> bool:
        """The answer box is read-only while grading and once feedback is shown."""
        return self.phase in (Phase.GRADING, Phase.GRADED)

    @property
    def can_submit(self) -> bool:
        return self.phase == Phase.ANSWERING and bool(self.draft_answer.strip())

    def _move(self, phase: Phase) -> None:
        logger.ui_transition(self.phase.value, phase.value)
        self.phase = phase

    def _next_ticket(self) -> int:
        self._ticket += 1
        return self._ticket

    def _is_current(self, ticket: int, expected: Phase) -> bool:
        if ticket != self._ticket or self.phase != expected:
            logger.debug(f"Dropping outdated result (ticket {ticket}, current {self._ticket}, phase {self.phase.value})")
            return False
        return True

    # Topic selection --------------------------------------------------------

    def select_topic(self, topic: GeographyTopic) -> None:
        if self.phase != Phase.SELECTING:
            raise SessionStateError("Return to the topic menu before changing topic.")
        self.topic = GeographyTopic.from_value(topic)
        logger.ui(f"Topic selected: {self.topic.short_label}")

    # Question round trip ----------------------------------------------------

    def begin_question_request(self) -> int:
        """Enter LOADING and discard the current attempt. Returns the request ticket."""
        if self.is_busy:
            raise SessionStateError("A request is already in progress.")
        self.question = None
        self.draft_answer = ""
        self.feedback = None
        self.error = None
        self._move(Phase.LOADING)
        return self._next_ticket()

    def complete_question_request(self, ticket: int, question: Question) -> bool:
        if not self._is_current(ticket, Phase.LOADING):
            return False
        self.question = question
        self._move(Phase.ANSWERING)
        return True

    def fail_question_request(self, ticket: int, error: Exception) -> bool:
        if not self._is_current(ticket, Phase.LOADING):
            return False
        self.error = str(error)
        self._move(Phase.SELECTING)
        return True

    def request_question(self, client) -> Optional[Question]:
        """Fetch a question synchronously. Returns None (with self.error set) on failure."""
        ticket = self.begin_question_request()
        try:
            question = client.request_question(self.topic)
        except (ConfigurationError, GenerationError) as e:
            logger.error(f"Question request failed: {e}")
            self.fail_question_request(ticket, e)
            return None
        self.complete_question_request(ticket, question)
        return question

    def skip(self, client) -> Optional[Question]:
        """Replace the current question with a new one on the same topic."""
        if self.question is None:
            raise SessionStateError("There is no question to skip.")
        logger.ui("Skipping to a new question")
        return self.request_question(client)

    # Answer round trip ------------------------------------------------------

    def set_draft(self, text: str) -> None:
        if self.phase != Phase.ANSWERING:
            raise SessionStateError("The answer can only be edited while answering.")
        self.draft_answer = text

    def begin_grading(self, answer: Optional[str] = None) -> Tuple[int, Question, str]:
        """
        Enter GRADING for the current question.

        Returns (ticket, question, answer). Raises ValidationError for a blank
        answer and SessionStateError when there is no question to answer.
        """
        if self.phase != Phase.ANSWERING or self.question is None:
            raise SessionStateError("There is no question waiting for an answer.")
        if answer is not None:
            self.draft_answer = answer
        if not self.draft_answer.strip():
            self.error = "Please write an answer before submitting."
            raise ValidationError(self.error)
        self.error = None
        self._move(Phase.GRADING)
        return self._next_ticket(), self.question, self.draft_answer

    def complete_grading(self, ticket: int, feedback: Feedback) -> Optional[HistoryItem]:
        """Record the feedback and prepend exactly one history item."""
        if not self._is_current(ticket, Phase.GRADING):
            return None
        item = HistoryItem(
            id=uuid.uuid4().hex[:8],
            question=self.question,
            user_answer=self.draft_answer,
            feedback=feedback,
        )
        self._history.insert(0, item)
        self.feedback = feedback
        self._move(Phase.GRADED)
        logger.debug(f"History now has {len(self._history)} item(s)")
        return item

    def fail_grading(self, ticket: int, error: Exception) -> bool:
        """Return to ANSWERING with the draft kept so the student can resubmit."""
        if not self._is_current(ticket, Phase.GRADING):
            return False
        self.error = str(error)
        self._move(Phase.ANSWERING)
        return True

    def submit_answer(self, client, answer: Optional[str] = None) -> Optional[Feedback]:
        """Grade synchronously. Returns None (with self.error set) if grading fails."""
        ticket, question, text = self.begin_grading(answer)
        try:
            feedback = client.request_grading(question, text)
        except (ConfigurationError, GradingError) as e:
            logger.error(f"Grading request failed: {e}")
            self.fail_grading(ticket, e)
            return None
        self.complete_grading(ticket, feedback)
        return feedback

    # Navigation -------------------------------------------------------------

    def retry(self) -> None:
        """Clear the answer and feedback and try the same question again."""
        if self.phase not in (Phase.ANSWERING, Phase.GRADED) or self.question is None:
            raise SessionStateError("There is no question to retry.")
        self.draft_answer = ""
        self.feedback = None
        self.error = None
        if self.phase != Phase.ANSWERING:
            self._move(Phase.ANSWERING)

    def reset(self) -> None:
        """Back to the topic menu. Topic and history are kept; in-flight results are dropped."""
        self._ticket += 1
        self.question = None
        self.draft_answer = ""
        self.feedback = None
        if self.phase != Phase.SELECTING:
            self._move(Phase.SELECTING)

    def dismiss_error(self) -> None:
        self.error = None
