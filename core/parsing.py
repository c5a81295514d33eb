"""
Turn raw model replies into validated Question / Feedback objects.

Models occasionally wrap JSON in ```json fences or add a sentence of prose
despite being asked for structured output. The reply is cleaned in two
steps: strip code fences, then (only if that still fails to parse) cut the
text down to the outermost JSON object or array. Anything that still does not
match the expected shape raises MalformedResponseError; no field is ever
defaulted silently.
"""

import json
import re
from typing import Any, Dict, List, Optional, Tuple

from .errors import MalformedResponseError
from .logger import logger
from .models import Feedback, GeographyTopic, Question

MARK_SCHEME_LENGTH = 3
MIN_SCORE = 0
MAX_SCORE = 3

_FENCE_RE = re.compile(r"```(?:json|JSON)?[ \t]*\n?")


def clean_json_response(text: Optional[str]) -> str:
    """Strip markdown code fences and surrounding whitespace."""
    if not text:
        return ""
    return _FENCE_RE.sub("", text).strip()


def _outermost_json(text: str) -> List[str]:
    """
    Candidate spans running from a '{' or '[' to the last matching closer.

    The opener that appears first is tried first, so prose such as
    "score [0-3]: {...}" still yields the object as the second candidate.
    """
    spans = []
    for opener, closer in (("{", "}"), ("[", "]")):
        start = text.find(opener)
        end = text.rfind(closer)
        if start != -1 and end > start:
            spans.append((start, text[start:end + 1]))
    return [span for _, span in sorted(spans)]


def _loads(text: str) -> Any:
    """
    json.loads, with every decoder failure reported as JSONDecodeError.

    Nesting too deep for the decoder raises RecursionError, and integers past
    the interpreter's digit limit raise a plain ValueError.
    """
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        raise
    except RecursionError:
        raise json.JSONDecodeError("JSON nested too deeply", text, 0) from None
    except ValueError as e:
        raise json.JSONDecodeError(f"Unreadable JSON value ({e})", text, 0) from None


def extract_json(text: Optional[str]) -> Any:
    """Parse a model reply into Python data, recovering from formatting noise."""
    if text is None or not text.strip():
        raise MalformedResponseError("The model returned an empty response")

    cleaned = clean_json_response(text)
    if cleaned != text.strip():
        logger.json_recovered("stripped code fences")

    try:
        return _loads(cleaned)
    except json.JSONDecodeError as e:
        last_error = e

    candidates = _outermost_json(cleaned)
    if not candidates:
        logger.json_error("No JSON object found in reply", raw=text)
        raise MalformedResponseError("The model reply did not contain JSON")
    for snippet in candidates:
        if snippet == cleaned:
            continue
        try:
            data = _loads(snippet)
        except json.JSONDecodeError as e:
            last_error = e
            continue
        logger.json_recovered("cut to outermost JSON value")
        return data

    logger.json_error(f"Reply is not valid JSON: {last_error}", raw=text)
    raise MalformedResponseError(f"The model reply is not valid JSON: {last_error}") from last_error


def _as_object(data: Any) -> Dict[str, Any]:
    if isinstance(data, dict):
        return data
    if isinstance(data, list) and len(data) == 1 and isinstance(data[0], dict):
        logger.json_recovered("unwrapped single-item array")
        return data[0]
    raise MalformedResponseError(f"Expected a JSON object, got {type(data).__name__}")


def _require_text(data: Dict[str, Any], key: str, allow_empty: bool = False) -> str:
    if key not in data:
        raise MalformedResponseError(f"Missing required field '{key}'")
    value = data[key]
    if not isinstance(value, str):
        raise MalformedResponseError(f"Field '{key}' must be a string")
    value = value.strip()
    if not value and not allow_empty:
        raise MalformedResponseError(f"Field '{key}' is empty")
    return value


def _require_text_list(data: Dict[str, Any], key: str) -> Tuple[str, ...]:
    if key not in data:
        raise MalformedResponseError(f"Missing required field '{key}'")
    value = data[key]
    if not isinstance(value, list):
        raise MalformedResponseError(f"Field '{key}' must be a list")
    items = []
    for item in value:
        if not isinstance(item, str):
            raise MalformedResponseError(f"Field '{key}' must only contain strings")
        if item.strip():
            items.append(item.strip())
    return tuple(items)


def _coerce_score(value: Any) -> int:
    """Accept 2, 2.0 or "2"; reject anything that is not a whole number in range."""
    if isinstance(value, bool):
        raise MalformedResponseError("Field 'score' must be a number")
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            raise MalformedResponseError(f"Field 'score' is not a number: {value!r}") from None
    if not isinstance(value, (int, float)):
        raise MalformedResponseError("Field 'score' must be a number")
    if isinstance(value, int) and not MIN_SCORE <= value <= MAX_SCORE:
        raise MalformedResponseError(f"Field 'score' must be between {MIN_SCORE} and {MAX_SCORE}, got {value}")
    if not float(value).is_integer():
        raise MalformedResponseError(f"Field 'score' must be a whole number, got {value}")
    score = int(value)
    if not MIN_SCORE <= score <= MAX_SCORE:
        raise MalformedResponseError(f"Field 'score' must be between {MIN_SCORE} and {MAX_SCORE}, got {score}")
    return score


def question_from_dict(data: Any, topic: GeographyTopic) -> Question:
    """
    Validate a decoded question payload.

    The payload's own "topic" must be present, but the requested topic is
    what the Question records.
    """
    data = _as_object(data)

    raw_id = data.get("id")
    if isinstance(raw_id, int) and not isinstance(raw_id, bool):
        data = {**data, "id": str(raw_id)}
    question_id = _require_text(data, "id")
    _require_text(data, "topic")

    mark_scheme = _require_text_list(data, "markScheme")
    if len(mark_scheme) != MARK_SCHEME_LENGTH:
        raise MalformedResponseError(
            f"Mark scheme must have {MARK_SCHEME_LENGTH} entries, got {len(mark_scheme)}"
        )

    return Question(
        id=question_id,
        topic=topic,
        question_text=_require_text(data, "questionText"),
        mark_scheme=mark_scheme,
        model_answer=_require_text(data, "modelAnswer"),
    )


def feedback_from_dict(data: Any) -> Feedback:
    """Validate a decoded feedback payload."""
    data = _as_object(data)
    if "score" not in data:
        raise MalformedResponseError("Missing required field 'score'")

    return Feedback(
        score=_coerce_score(data["score"]),
        comments=_require_text(data, "comments"),
        strengths=_require_text_list(data, "strengths"),
        improvements=_require_text_list(data, "improvements"),
        suggested_answer=_require_text(data, "suggestedAnswer", allow_empty=True),
    )


def parse_question(text: Optional[str], topic: GeographyTopic) -> Question:
    return question_from_dict(extract_json(text), topic)


def parse_feedback(text: Optional[str]) -> Feedback:
    return feedback_from_dict(extract_json(text))
