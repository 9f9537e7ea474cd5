"""SmartForm: lexical question-to-answer matching for form filling."""

__version__ = "0.1.0"
