"""Exceptions raised by the matching engine and fill orchestrator."""


class SmartFormError(Exception):
    """Base class for SmartForm errors."""
    pass


class InitializationTimeout(SmartFormError):
    """Raised when the scorer does not become ready before its deadline.

    This is the only error that aborts a whole fill operation.
    """
    pass


class NoQuestionsFound(SmartFormError):
    """Raised when a form yields no question elements."""
    pass


class ScoringUnavailable(SmartFormError):
    """Raised when the scorer fails while rating candidates."""
    pass
