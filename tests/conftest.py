import json
import sys
from pathlib import Path
from types import SimpleNamespace
from unittest.mock import Mock

import pytest

# Add the repo root to sys.path so `core` imports without installing
ROOT_PATH = Path(__file__).resolve().parent.parent
if ROOT_PATH.as_posix() not in sys.path:
    sys.path.insert(0, ROOT_PATH.as_posix())

from core.logger import logger  # noqa: E402
from core.models import Feedback, GeographyTopic, Question  # noqa: E402


@pytest.fixture
def rivers_answer() -> str:
    return (
        "Flooding occurs because of heavy rainfall, which increases river discharge, "
        "leading to a greater risk of overtopping."
    )


@pytest.fixture(autouse=True)
def quiet_logger():
    """Keep the colour logger out of test output."""
    previous = logger.enabled
    logger.enabled = False
    yield
    logger.enabled = previous


def question_payload(**overrides):
    payload = {
        "id": "q1",
        "topic": GeographyTopic.RIVERS.value,
        "questionText": "Explain one reason why some rivers flood.",
        "markScheme": [
            "Heavy rainfall (1)",
            "which increases discharge (1)",
            "so the river overtops its banks (1)",
        ],
        "modelAnswer": (
            "Heavy rainfall increases surface runoff, meaning discharge rises quickly, "
            "so the channel capacity is exceeded and the river floods."
        ),
    }
    payload.update(overrides)
    return payload


def feedback_payload(**overrides):
    payload = {
        "score": 3,
        "comments": "A clear point developed twice.",
        "strengths": ["Valid point about rainfall", "Sequential development"],
        "improvements": [],
        "suggestedAnswer": "Heavy rainfall increases discharge, consequently the river overtops.",
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def sample_question() -> Question:
    return Question(
        id="q1",
        topic=GeographyTopic.RIVERS,
        question_text="Explain one reason why some rivers flood.",
        mark_scheme=("Heavy rainfall", "increases discharge", "river overtops its banks"),
        model_answer="Heavy rainfall increases discharge so the river overtops its banks.",
    )


@pytest.fixture
def sample_feedback() -> Feedback:
    return Feedback(
        score=2,
        comments="Good point with one development.",
        strengths=("Valid point",),
        improvements=("Add a second linked development step",),
        suggested_answer="...which means discharge exceeds channel capacity.",
    )


def make_completion(content, refusal=None):
    """Shape of an OpenAI chat completion, as far as the client reads it."""
    message = SimpleNamespace(content=content, refusal=refusal)
    return SimpleNamespace(choices=[SimpleNamespace(message=message)])


@pytest.fixture
def fake_openai():
    """A factory standing in for openai.OpenAI plus the transport it returns."""
    transport = Mock()
    factory = Mock(return_value=transport)
    return SimpleNamespace(factory=factory, transport=transport, reply=_replier(transport))


def _replier(transport):
    def reply(content=None, payload=None, refusal=None):
        if payload is not None:
            content = json.dumps(payload)
        transport.chat.completions.create.return_value = make_completion(content, refusal)
    return reply


class FakeAIClient:
    """In-memory AIClient double that records every call."""

    def __init__(self, question=None, feedback=None, question_error=None, grading_error=None):
        self.question = question
        self.feedback = feedback
        self.question_error = question_error
        self.grading_error = grading_error
        self.question_calls = []
        self.grading_calls = []

    def request_question(self, topic):
        self.question_calls.append(topic)
        if self.question_error is not None:
            raise self.question_error
        return self.question

    def request_grading(self, question, answer):
        self.grading_calls.append((question, answer))
        if self.grading_error is not None:
            raise self.grading_error
        return self.feedback


@pytest.fixture
def fake_client(sample_question, sample_feedback) -> FakeAIClient:
    return FakeAIClient(question=sample_question, feedback=sample_feedback)


@pytest.fixture
def payloads():
    """Builders for valid wire payloads; pass keyword overrides to break them."""
    return SimpleNamespace(question=question_payload, feedback=feedback_payload)


@pytest.fixture
def client_factory():
    return FakeAIClient
