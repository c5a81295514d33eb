from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Tuple, Union


class GeographyTopic(str, Enum):
    """The seven Edexcel Geography Spec A topic areas offered for practice."""
    COASTS = "The Changing Landscapes of the UK: Coasts"
    RIVERS = "The Changing Landscapes of the UK: Rivers"
    WEATHER = "Weather Hazards and Climate Change"
    ECOSYSTEMS = "Ecosystems, Biodiversity and Management"
    CITIES = "Changing Cities"
    DEVELOPMENT = "Global Development"
    WATER_RESOURCES = "Water Resource Management"

    @property
    def short_label(self) -> str:
        """Text before the first colon, used for the badge above a question."""
        return self.value.split(":")[0]

    @classmethod
    def from_value(cls, value: Union[str, "GeographyTopic"]) -> "GeographyTopic":
        """Resolve a topic from an enum member, its name, or its display value."""
        if isinstance(value, cls):
            return value
        for topic in cls:
            if value == topic.value or str(value).upper() == topic.name:
                return topic
        raise ValueError(f"Unknown geography topic: {value!r}")


DEFAULT_TOPIC = GeographyTopic.COASTS


@dataclass(frozen=True)
class Question:
    """A generated 3-mark practice question."""
    id: str
    topic: GeographyTopic
    question_text: str
    mark_scheme: Tuple[str, ...]       # Point, development 1, development 2
    model_answer: str                  # Full-mark exemplar using connectives


@dataclass(frozen=True)
class Feedback:
    """Examiner-style feedback for one graded answer."""
    score: int                         # 0-3
    comments: str
    strengths: Tuple[str, ...] = ()
    improvements: Tuple[str, ...] = ()  # Steps to reach the next mark; may be empty
    suggested_answer: str = ""

    @property
    def is_full_marks(self) -> bool:
        return self.score == 3

    @property
    def band(self) -> str:
        """Colour band for the score banner: full, partial or low."""
        if self.score == 3:
            return "full"
        if self.score >= 2:
            return "partial"
        return "low"


@dataclass(frozen=True)
class HistoryItem:
    """Snapshot of one graded attempt."""
    id: str
    question: Question
    user_answer: str
    feedback: Feedback
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
