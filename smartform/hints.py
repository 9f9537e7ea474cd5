"""
Coarse field-type detection from label wording.

Each rule is a (tag, pattern) pair tested against normalized text. Rules are
independent, so one label may carry several tags ("github profile url" is
both ``github`` and ``url``).
"""

import re
from typing import Optional, Pattern, Sequence, Set, Tuple

from .normalize import normalize

HintRule = Tuple[str, Pattern]

DEFAULT_HINT_RULES: Tuple[HintRule, ...] = (
    ("email", re.compile(r"(email|e\s?mail)")),
    ("phone", re.compile(r"(phone|mobile|tel|whatsapp|contact)")),
    ("date", re.compile(r"(dob|birth|date)")),
    ("github", re.compile(r"(github|git)")),
    ("linkedin", re.compile(r"(linkedin)")),
    ("url", re.compile(r"(portfolio|website|site|url|link)")),
    ("postal", re.compile(r"(zip|zipcode|postcode|pincode)")),
)


class TypeHintDetector:
    """Applies an ordered, immutable set of regex rules to normalized text."""

    def __init__(self, rules: Optional[Sequence[HintRule]] = None):
        source = DEFAULT_HINT_RULES if rules is None else rules
        self.rules: Tuple[HintRule, ...] = tuple(
            (tag, re.compile(pattern) if isinstance(pattern, str) else pattern)
            for tag, pattern in source
        )

    @property
    def tags(self) -> Tuple[str, ...]:
        return tuple(tag for tag, _ in self.rules)

    def detect(self, text: Optional[str]) -> Set[str]:
        t = normalize(text)
        return {tag for tag, pattern in self.rules if pattern.search(t)}
