"""
Hybrid lexical similarity between a form question and a candidate label.

Responsibilities:
- Compute a deterministic score in [0, 1] for a (question, candidate) pair.
- Emit a per-signal breakdown for explanation.
- Pick the best candidate from an ordered collection.

Non-Responsibilities:
- No threshold decisions.
- No profile or learned-pair lookups.

Signals:
- J: Jaccard index of the synonym-expanded token sets (primary signal)
- L: 1 - Levenshtein distance / max length of the normalized strings
- C: 1 if either normalized string contains the other
- T: flat bonus when both texts share a type hint

Invariant:
Given identical inputs, the score is always the same, and
score(a, b) == score(b, a).
"""

from dataclasses import dataclass
from typing import Iterable, Optional, Protocol, Sequence, Set, Tuple

from rapidfuzz.distance import Levenshtein

from .hints import TypeHintDetector
from .normalize import STOP_WORDS, normalize, tokenize
from .synonyms import SynonymExpander

TOKEN_WEIGHT = 0.52
EDIT_WEIGHT = 0.33
CONTAINMENT_WEIGHT = 0.10
TYPE_HINT_BONUS = 0.10


class Scorer(Protocol):
    """Anything that can rate how well a candidate label fits a question."""

    def score(self, question: str, candidate: str) -> float:
        ...


@dataclass(frozen=True)
class ScoreBreakdown:
    jaccard: float
    edit: float
    containment: float
    type_bonus: float
    total: float

    def as_dict(self) -> dict:
        return {
            "jaccard": round(self.jaccard, 4),
            "edit": round(self.edit, 4),
            "containment": self.containment,
            "type_bonus": self.type_bonus,
            "total": round(self.total, 4),
        }


def jaccard(a: Iterable[str], b: Iterable[str]) -> float:
    """Jaccard index of two token collections.

    Two empty sets score 0.
    """
    set_a, set_b = set(a), set(b)
    inter = len(set_a & set_b)
    union = len(set_a) + len(set_b) - inter
    return 0.0 if union == 0 else inter / union


def edit_similarity(a: str, b: str) -> float:
    """1 - Levenshtein distance over the longer length; inputs already normalized."""
    if not a and not b:
        return 1.0
    dist = Levenshtein.distance(a, b)
    return 1.0 - dist / (max(len(a), len(b)) or 1)


def _clamp(value: float) -> float:
    return min(1.0, max(0.0, value))


class SimilarityScorer:
    """
    Default scorer combining token overlap, edit distance, containment and
    type-hint agreement.

    Args:
        expander: Synonym expander (default thesaurus if omitted)
        detector: Type-hint detector (default rules if omitted)
        stop_words: Stop words dropped during tokenization
    """

    def __init__(
        self,
        expander: Optional[SynonymExpander] = None,
        detector: Optional[TypeHintDetector] = None,
        stop_words=STOP_WORDS,
    ):
        self.expander = expander or SynonymExpander()
        self.detector = detector or TypeHintDetector()
        self.stop_words = stop_words

    def token_set(self, text: str) -> Set[str]:
        return self.expander.expand(tokenize(text, self.stop_words))

    def explain(self, question: str, candidate: str) -> ScoreBreakdown:
        q_norm = normalize(question)
        c_norm = normalize(candidate)
        q_tokens = self.token_set(question)
        c_tokens = self.token_set(candidate)

        j = jaccard(q_tokens, c_tokens)
        lev = edit_similarity(q_norm, c_norm)
        contains = 1.0 if (c_norm in q_norm or q_norm in c_norm) else 0.0

        shared_hints = self.detector.detect(question) & self.detector.detect(candidate)
        type_bonus = TYPE_HINT_BONUS if shared_hints else 0.0

        # Identical labels always match fully, whatever weights are in play
        if q_norm == c_norm and q_tokens:
            total = 1.0
        else:
            total = _clamp(
                TOKEN_WEIGHT * j
                + EDIT_WEIGHT * lev
                + CONTAINMENT_WEIGHT * contains
                + type_bonus
            )
        return ScoreBreakdown(
            jaccard=j,
            edit=lev,
            containment=contains,
            type_bonus=type_bonus,
            total=total,
        )

    def score(self, question: str, candidate: str) -> float:
        return self.explain(question, candidate).total


def best_match(scorer: Scorer, question: str, candidates: Sequence[str]) -> Tuple[int, float]:
    """
    Return (index, score) of the highest-scoring candidate.

    A later candidate replaces the current best only with a strictly greater
    score, so ties keep the earliest one. Returns (-1, 0.0) for no candidates.
    """
    best_index, best_score = -1, 0.0
    for i, candidate in enumerate(candidates):
        s = scorer.score(question, candidate)
        if best_index == -1 or s > best_score:
            best_index, best_score = i, s
    return best_index, best_score
