import re
from typing import FrozenSet, List, Optional

_NON_WORD = re.compile(r"[^a-z0-9\s]")
_WHITESPACE = re.compile(r"\s+")

STOP_WORDS: FrozenSet[str] = frozenset({
    "the", "a", "an", "and", "or", "of", "for", "to", "in", "on", "is", "are",
    "your", "you", "me", "my", "we", "us", "our", "with", "at", "as", "by",
    "please", "enter", "provide", "select", "choose", "from",
})


def normalize(text: Optional[str]) -> str:
    """Lower-case, blank out punctuation and collapse whitespace."""
    if not text:
        return ""
    t = _NON_WORD.sub(" ", text.lower())
    return _WHITESPACE.sub(" ", t).strip()


def _singularize(token: str) -> str:
    # naive: "addresses" -> "addresse", "skills" -> "skill"
    if len(token) > 4 and token.endswith("s"):
        return token[:-1]
    return token


def tokenize(text: Optional[str], stop_words: FrozenSet[str] = STOP_WORDS) -> List[str]:
    tokens = [t for t in normalize(text).split(" ") if t and t not in stop_words]
    return [_singularize(t) for t in tokens]
