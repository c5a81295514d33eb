"""
Structured JSON schemas and examiner copy for 3-mark practice.

The schemas are sent to the model as the required output shape (OpenAI
structured outputs, strict mode). Strict mode needs every property listed in
"required" and additionalProperties disabled; range and length limits are
checked locally in core.parsing instead.

The rubric and question brief are plain copy. The rubric can be replaced at
runtime (see core.config), so nothing downstream may depend on its wording.
"""

QUESTION_SCHEMA_NAME = "geography_question"

QUESTION_SCHEMA = {
    "type": "object",
    "properties": {
        "id": {"type": "string"},
        "topic": {"type": "string"},
        "questionText": {"type": "string"},
        "markScheme": {
            "type": "array",
            "items": {"type": "string"},
            "description": (
                "A list of 3 bullet points showing how the 3 marks are awarded "
                "(Point + Dev 1 + Dev 2)"
            ),
        },
        "modelAnswer": {
            "type": "string",
            "description": "A perfect 3-mark response using connective words.",
        },
    },
    "required": ["id", "topic", "questionText", "markScheme", "modelAnswer"],
    "additionalProperties": False,
}

FEEDBACK_SCHEMA_NAME = "examiner_feedback"

FEEDBACK_SCHEMA = {
    "type": "object",
    "properties": {
        "score": {"type": "integer", "description": "Score out of 3 (0, 1, 2 or 3)"},
        "comments": {"type": "string", "description": "Overall summary of the response"},
        "strengths": {"type": "array", "items": {"type": "string"}},
        "improvements": {
            "type": "array",
            "items": {"type": "string"},
            "description": "Specific steps to reach the next mark",
        },
        "suggestedAnswer": {
            "type": "string",
            "description": (
                "How the student could have phrased their specific point "
                "better for full marks."
            ),
        },
    },
    "required": ["score", "comments", "strengths", "improvements", "suggestedAnswer"],
    "additionalProperties": False,
}

QUESTION_BRIEF = """
3-mark questions usually start with "Explain one reason why..." or "Explain one way that...".
The question must require a point followed by two development steps.
The mark scheme must contain exactly 3 entries: the point, the first development
and the second development.
"""

DEFAULT_RUBRIC = """
Criteria:
- 1 mark for a valid identified point/reason.
- 2 further marks for clear sequential development (connected explanation).
  Award the second mark for the first development step and the third mark only
  when the second step builds on the first.
- Award 0 if no valid point is made.

Always list at least one strength when any mark is awarded. List improvements
that would reach the next mark; leave the list empty only for a full-mark answer.
"""

# Shown beside the question before feedback arrives.
REASONING_STEPS = (
    ("Identify", "State your reason/point clearly."),
    ("Explain", '"This is because..." or "This means that..."'),
    ("Develop", '"Which leads to..." or "Consequently..."'),
)

CONNECTIVES = ("Consequently", "As a result", "Meaning that", "Therefore")
