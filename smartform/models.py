"""Plain data types shared across the engine, stores and CLI."""

from dataclasses import dataclass
from typing import Any, Dict, Optional

DEFAULT_THRESHOLD = 0.55

SOURCE_LEARNED = "learned"
SOURCE_PROFILE = "profile"
SOURCE_FALLBACK = "fallback"


def check_threshold(threshold: float) -> float:
    if isinstance(threshold, bool) or not isinstance(threshold, (int, float)):
        raise ValueError(f"threshold must be a number, got {threshold!r}")
    if not 0.0 <= threshold <= 1.0:
        raise ValueError(f"threshold must be within [0, 1], got {threshold}")
    return float(threshold)


@dataclass(frozen=True)
class LearnedPair:
    question: str
    answer: str
    timestamp: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {"question": self.question, "answer": self.answer, "timestamp": self.timestamp}


@dataclass(frozen=True)
class MatchResult:
    """A resolved answer.

    ``key`` is the profile key or learned question that matched. ``score`` is
    None for fallback matches, which are found by containment, not scoring.
    """

    key: str
    value: str
    score: Optional[float]
    source: str


@dataclass
class Settings:
    review_mode: bool = False
    learning_enabled: bool = False
    threshold: float = DEFAULT_THRESHOLD

    def __post_init__(self):
        self.threshold = check_threshold(self.threshold)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "Settings":
        data = data or {}
        threshold = data.get("threshold")
        return cls(
            review_mode=bool(data.get("reviewMode", False)),
            learning_enabled=bool(data.get("learningEnabled", False)),
            threshold=DEFAULT_THRESHOLD if threshold is None else threshold,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "reviewMode": self.review_mode,
            "learningEnabled": self.learning_enabled,
            "threshold": self.threshold,
        }
