"""
AI-backed services for Geography 3-Mark Buddy.

This module handles:
- Question generation (one Edexcel Spec A 3-mark question per topic)
- Grading of a student answer against the 3-mark rubric

AIClient holds everything that does not depend on the provider: prompt
building, reply parsing and error translation. A provider subclass only
implements _connect() and _complete(). OpenAIClient is the shipped provider
and uses chat completions with a strict JSON schema as response_format.

Usage:
    client = OpenAIClient(settings)
    client.configure(settings.api_key)      # ConfigurationError if missing
    question = client.request_question(GeographyTopic.RIVERS)
    feedback = client.request_grading(question, "Flooding occurs because...")
"""

import json
from typing import Any, Callable, Dict, Optional

from openai import AuthenticationError, OpenAI, OpenAIError

from .config import Settings, mask_key, validate_api_key
from .errors import (
    ConfigurationError, GenerationError, GradingError,
    MalformedResponseError, ProviderError, ValidationError,
)
from .logger import logger, Timer
from .models import Feedback, GeographyTopic, Question
from .parsing import parse_feedback, parse_question
from .schemas import (
    FEEDBACK_SCHEMA, FEEDBACK_SCHEMA_NAME, QUESTION_BRIEF,
    QUESTION_SCHEMA, QUESTION_SCHEMA_NAME,
)

QUESTION_TEMPERATURE = 0.8   # Variety between questions on the same topic
GRADING_TEMPERATURE = 0.2    # Marking should be repeatable

QUESTION_SYSTEM_PROMPT = (
    "You are an experienced Edexcel GCSE Geography Specification A examiner "
    "writing practice questions for Year 10 and 11 students. "
    "Return ONLY a JSON object matching the requested schema."
)

GRADING_SYSTEM_PROMPT = (
    "As an Edexcel GCSE Geography examiner, grade 3-mark student responses. "
    "Be fair and specific, quote the student's wording where it helps, and "
    "return ONLY a JSON object matching the requested schema."
)


class AIClient:
    """
    Provider-independent question/grading client.

    configure() must succeed before any request; until then every request
    raises ConfigurationError without touching the network.
    """

    provider_name = "generic"

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self.settings = settings or Settings()
        self._configured = False

    @property
    def is_configured(self) -> bool:
        return self._configured

    def configure(self, api_key: Optional[str]) -> None:
        """Validate the credential and build the provider connection."""
        self._configured = False
        key = validate_api_key(api_key)
        logger.env(f"Initializing {self.provider_name} client with key {mask_key(key)}...")
        self._connect(key)
        self._configured = True
        logger.env_success(f"{self.provider_name} client initialized successfully")

    def _require_configured(self) -> None:
        if not self._configured:
            raise ConfigurationError(
                "The AI service is not configured. Add OPENAI_API_KEY to your .env file and restart."
            )

    # Provider hooks ---------------------------------------------------------

    def _connect(self, api_key: str) -> None:
        raise NotImplementedError

    def _complete(
        self,
        model: str,
        system_prompt: str,
        user_prompt: str,
        schema_name: str,
        schema: Dict[str, Any],
        temperature: float,
    ) -> str:
        """Send one prompt and return the raw reply text. Raise ProviderError on failure."""
        raise NotImplementedError

    # Question generation ----------------------------------------------------

    def build_question_prompt(self, topic: GeographyTopic) -> str:
        return (
            "Generate a typical Edexcel GCSE Geography Specification A 3-mark question "
            f"for the topic: {topic.value}.\n"
            f"{QUESTION_BRIEF}\n"
            "Provide the response in strict JSON format."
        )

    def request_question(self, topic: GeographyTopic) -> Question:
        """
        Generate one 3-mark question for the topic.

        Raises ConfigurationError when not configured, GenerationError when
        the call fails or the reply does not validate.
        """
        topic = GeographyTopic.from_value(topic)
        logger.api(f"request_question() called for topic: {topic.short_label}")
        self._require_configured()

        try:
            raw = self._complete(
                model=self.settings.question_model,
                system_prompt=QUESTION_SYSTEM_PROMPT,
                user_prompt=self.build_question_prompt(topic),
                schema_name=QUESTION_SCHEMA_NAME,
                schema=QUESTION_SCHEMA,
                temperature=QUESTION_TEMPERATURE,
            )
            question = parse_question(raw, topic)
        except ProviderError as e:
            logger.api_error(f"Question generation failed: {e}")
            raise GenerationError(f"Failed to generate question: {e}") from e
        except MalformedResponseError as e:
            logger.api_error(f"Question reply rejected: {e}")
            raise GenerationError(f"Invalid response format from AI: {e}") from e

        logger.success(f"Question generated: {question.question_text[:60]}...")
        return question

    # Grading ----------------------------------------------------------------

    def build_grading_prompt(self, question: Question, answer: str) -> str:
        payload = json.dumps(
            {
                "question": question.question_text,
                "topic": question.topic.value,
                "mark_scheme": list(question.mark_scheme),
                "student_answer": answer,
            },
            ensure_ascii=False,
        )
        return (
            "Grade this 3-mark student response.\n"
            f"{self.settings.rubric.strip()}\n\n"
            f"{payload}\n\n"
            "Provide the response in strict JSON format."
        )

    def request_grading(self, question: Question, answer: str) -> Feedback:
        """
        Mark an answer out of 3.

        Raises ValidationError for a blank answer (no call is made),
        ConfigurationError when not configured and GradingError when the call
        fails or the reply does not validate.
        """
        if not answer or not answer.strip():
            raise ValidationError("Please write an answer before submitting.")
        logger.api(f"request_grading() called for question {question.id}")
        logger.debug(f"Answer length: {len(answer)} chars")
        self._require_configured()

        try:
            raw = self._complete(
                model=self.settings.grading_model,
                system_prompt=GRADING_SYSTEM_PROMPT,
                user_prompt=self.build_grading_prompt(question, answer.strip()),
                schema_name=FEEDBACK_SCHEMA_NAME,
                schema=FEEDBACK_SCHEMA,
                temperature=GRADING_TEMPERATURE,
            )
            feedback = parse_feedback(raw)
        except ProviderError as e:
            logger.api_error(f"Grading failed: {e}")
            raise GradingError(f"Grading failed: {e}") from e
        except MalformedResponseError as e:
            logger.api_error(f"Feedback reply rejected: {e}")
            raise GradingError(f"Invalid feedback format from AI: {e}") from e

        logger.success(f"Answer graded: {feedback.score}/3")
        return feedback


class OpenAIClient(AIClient):
    """AIClient backed by OpenAI chat completions with structured outputs."""

    provider_name = "OpenAI"

    def __init__(
        self,
        settings: Optional[Settings] = None,
        openai_factory: Callable[..., Any] = OpenAI,
    ) -> None:
        super().__init__(settings)
        self._openai_factory = openai_factory
        self._openai: Optional[Any] = None

    def _connect(self, api_key: str) -> None:
        # One round trip per request; failures surface to the user instead
        self._openai = self._openai_factory(
            api_key=api_key,
            timeout=self.settings.timeout,
            max_retries=0,
        )

    def _complete(
        self,
        model: str,
        system_prompt: str,
        user_prompt: str,
        schema_name: str,
        schema: Dict[str, Any],
        temperature: float,
    ) -> str:
        messages = [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_prompt},
        ]

        logger.api_call(f"chat.completions.create ({schema_name})", model=model)
        try:
            with Timer() as timer:
                completion = self._openai.chat.completions.create(
                    model=model,
                    messages=messages,
                    response_format={
                        "type": "json_schema",
                        "json_schema": {"name": schema_name, "strict": True, "schema": schema},
                    },
                    temperature=temperature,
                )
        except AuthenticationError as e:
            logger.api_error("OpenAI rejected the API key")
            raise ConfigurationError(
                "OpenAI rejected the API key. Check OPENAI_API_KEY in your .env file."
            ) from e
        except OpenAIError as e:
            raise ProviderError(str(e)) from e
        logger.api_response("chat.completions.create", duration_ms=timer.duration_ms)

        if not completion.choices:
            raise ProviderError("OpenAI returned no choices")
        message = completion.choices[0].message
        refusal = getattr(message, "refusal", None)
        if refusal:
            raise ProviderError(f"The model refused the request: {refusal}")
        if not message.content or not message.content.strip():
            raise ProviderError("OpenAI returned an empty response")
        return message.content
