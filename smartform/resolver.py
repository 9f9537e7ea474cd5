"""
Two-stage answer resolution.

Responsibilities:
- Score a question against learned pairs, then against profile keys.
- Apply the acceptance threshold.
- Fall back to plain key containment when the profile scorer fails.

Non-Responsibilities:
- No persistence; learning is the caller's job.
- No widget or document access.

Invariant:
The resolver never mutates the profile or the learned pool, and a scored
result is only returned when its score is at or above the threshold.
"""

from typing import Mapping, Optional, Sequence

from .errors import ScoringUnavailable
from .logger import get_logger
from .models import (
    DEFAULT_THRESHOLD,
    SOURCE_FALLBACK,
    SOURCE_LEARNED,
    SOURCE_PROFILE,
    LearnedPair,
    MatchResult,
    check_threshold,
)
from .scoring import Scorer, SimilarityScorer, best_match


class Resolver:
    """
    Picks an answer for a question from learned memory or a profile.

    Args:
        scorer: Object with ``score(question, candidate) -> float``
        threshold: Minimum score for a match, within [0, 1]
    """

    def __init__(self, scorer: Optional[Scorer] = None, threshold: float = DEFAULT_THRESHOLD):
        self.scorer = scorer or SimilarityScorer()
        self.threshold = check_threshold(threshold)

    def _best(self, question: str, candidates: Sequence[str]):
        try:
            return best_match(self.scorer, question, candidates)
        except Exception as e:
            raise ScoringUnavailable(f"Scorer failed: {e}") from e

    def match_learned(self, question: str, pairs: Sequence[LearnedPair]) -> Optional[MatchResult]:
        """Best learned pair at or above threshold, or None.

        Raises:
            ScoringUnavailable: If the scorer fails
        """
        if not pairs:
            return None
        index, score = self._best(question, [p.question for p in pairs])
        if index < 0 or score < self.threshold:
            return None
        pair = pairs[index]
        return MatchResult(key=pair.question, value=pair.answer, score=score, source=SOURCE_LEARNED)

    def match_profile(self, question: str, profile: Mapping[str, str]) -> Optional[MatchResult]:
        """Best profile key at or above threshold, or None.

        Raises:
            ScoringUnavailable: If the scorer fails
        """
        if not profile:
            return None
        keys = list(profile.keys())
        index, score = self._best(question, keys)
        if index < 0 or score < self.threshold:
            return None
        key = keys[index]
        return MatchResult(key=key, value=profile[key], score=score, source=SOURCE_PROFILE)

    @staticmethod
    def match_fallback(question: str, profile: Mapping[str, str]) -> Optional[MatchResult]:
        """First profile key (insertion order) contained in the question, case-insensitively."""
        lowered = (question or "").lower()
        for key, value in (profile or {}).items():
            if (key or "").lower() in lowered:
                return MatchResult(key=key, value=value, score=None, source=SOURCE_FALLBACK)
        return None

    def resolve(
        self,
        question: str,
        profile: Optional[Mapping[str, str]] = None,
        learned: Sequence[LearnedPair] = (),
    ) -> Optional[MatchResult]:
        """
        Resolve one question.

        Learned memory wins whenever it clears the threshold, even if a profile
        key would score higher. The fallback runs only when the profile
        scorer fails, never because scores were low. A match whose answer is
        blank is treated as no match: a blank learned answer moves on to the
        profile stage, and a blank profile value leaves the question
        unresolved.

        Raises:
            ScoringUnavailable: If the scorer fails during the learned stage
        """
        result = self.match_learned(question, learned)
        if _has_answer(result):
            return result

        if not profile:
            return None

        try:
            result = self.match_profile(question, profile)
        except ScoringUnavailable as e:
            get_logger().warning(
                "Profile scoring failed, falling back to key containment",
                question=question,
                error=str(e),
            )
            result = self.match_fallback(question, profile)
        return result if _has_answer(result) else None


def _has_answer(result: Optional[MatchResult]) -> bool:
    # A blank stored answer counts as no answer
    return result is not None and bool(result.value and result.value.strip())
