"""
Fill orchestration: the per-question resolve-and-act loop.

Questions are handled one at a time in document order. For each labelled
question the resolver picks an answer; the answer is then either applied
(and optionally learned) or, in review mode, only annotated. Failures stay
local to their question; only InitializationTimeout aborts the run.
"""

from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional

from .errors import InitializationTimeout
from .forms import FieldFiller, FormInspector, ReviewAnnotator
from .logger import get_logger
from .models import Settings
from .resolver import Resolver
from .retry import wait_for
from .scoring import Scorer, SimilarityScorer
from .storage import LearnedPairStore, now_ms

DEFAULT_INIT_TIMEOUT = 30.0
DEFAULT_QUESTION_TIMEOUT = 12.0


@dataclass
class FillReport:
    questions: int = 0
    skipped: int = 0
    matched_learned: int = 0
    matched_profile: int = 0
    matched_fallback: int = 0
    unresolved: int = 0
    applied: int = 0
    suggested: int = 0
    learned: int = 0
    failed: int = 0

    @property
    def matched(self) -> int:
        return self.matched_learned + self.matched_profile + self.matched_fallback

    def count_match(self, source: str) -> None:
        name = f"matched_{source}"
        setattr(self, name, getattr(self, name) + 1)


def run_fill(
    profile: Optional[Mapping[str, str]],
    settings: Settings,
    inspector: FormInspector,
    filler: FieldFiller,
    annotator: Optional[ReviewAnnotator] = None,
    learned_store: Optional[LearnedPairStore] = None,
    scorer: Optional[Scorer] = None,
    ready: Optional[Callable[[], bool]] = None,
    init_timeout: float = DEFAULT_INIT_TIMEOUT,
    question_timeout: float = DEFAULT_QUESTION_TIMEOUT,
    clock: Optional[Callable[[], float]] = None,
    sleep: Optional[Callable[[float], None]] = None,
) -> FillReport:
    """
    Resolve every question of a form and apply or suggest the answers.

    Args:
        profile: Field key -> value mapping for this run (not modified)
        settings: Review mode, learning and threshold for this run (not modified)
        inspector: Lists question handles and reads their labels
        filler: Writes a value into a question's widget
        annotator: Shows suggestions in review mode; also cleared before a normal run
        learned_store: Learned-pair pool, read for matching and appended to when learning
        scorer: Similarity scorer (default SimilarityScorer)
        ready: Readiness check for the scorer, polled until init_timeout
        init_timeout: Seconds to wait for ``ready``
        question_timeout: Seconds to wait for questions to appear
        clock, sleep: Injectable time functions for the waits

    Returns:
        FillReport with per-run counts

    Raises:
        InitializationTimeout: If ``ready`` never returns True in time
    """
    logger = get_logger()
    timing = {}
    if clock is not None:
        timing["clock"] = clock
    if sleep is not None:
        timing["sleep"] = sleep

    if ready is not None and not wait_for(ready, init_timeout, **timing):
        logger.error("Matcher not ready (timeout)", timeout=init_timeout)
        logger.record_error("InitializationTimeout")
        raise InitializationTimeout(f"Matcher not ready after {init_timeout}s")

    resolver = Resolver(scorer or SimilarityScorer(), settings.threshold)
    report = FillReport()

    questions = inspector.list_questions()
    if not questions and question_timeout > 0:
        questions = wait_for(inspector.list_questions, question_timeout, interval=0.2, **timing) or []

    logger.info(f"Detected {len(questions)} question nodes")
    if not questions:
        logger.warning("No questions detected. The page structure may have changed.")
        return report

    if not settings.review_mode and annotator is not None:
        annotator.clear()

    for handle in questions:
        question = inspector.question_label(handle)
        if not question:
            report.skipped += 1
            continue
        report.questions += 1
        logger.record_question()

        try:
            learned = learned_store.pairs() if learned_store is not None else []
            match = resolver.resolve(question, profile, learned)

            if match is None:
                report.unresolved += 1
                logger.record_unresolved()
                logger.debug("No match", question=question)
                continue

            report.count_match(match.source)
            logger.record_match(match.source)
            logger.debug("Matched", question=question, key=match.key, score=match.score, source=match.source)

            if settings.review_mode:
                if annotator is not None:
                    annotator.annotate(handle, match.value)
                report.suggested += 1
                logger.record_suggestion()
                continue

            if not filler.apply_answer(handle, match.value):
                logger.warning("No fillable widget for question", question=question)
                continue
            report.applied += 1
            logger.record_applied()

            if settings.learning_enabled and learned_store is not None:
                learned_store.append(question, match.value, now_ms())
                report.learned += 1
                logger.record_learned()
        except Exception as e:
            report.failed += 1
            logger.record_error(type(e).__name__)
            logger.error("Failed to handle question", question=question, error=str(e))

    logger.info(
        f"Fill complete: {report.matched}/{report.questions} matched",
        applied=report.applied,
        suggested=report.suggested,
        learned=report.learned,
        unresolved=report.unresolved,
        failed=report.failed,
    )
    return report
