from typing import Any, Dict, List, Optional

from .models import LearnedPair

SETTINGS_BOOL_FIELDS = ["reviewMode", "learningEnabled"]

# Older exports used short keys: {"q": ..., "a": ..., "ts": ...}
LEGACY_PAIR_KEYS = {"q": "question", "a": "answer", "ts": "timestamp"}


def _is_non_empty_str(v: Any) -> bool:
    return isinstance(v, str) and v.strip() != ""


def validate_learned_pair(data: Any) -> List[str]:
    """
    Returns a list of validation error messages. Empty list means valid.
    Accepts both the current and the legacy short-key shape.
    """
    if not isinstance(data, dict):
        return ["Learned pair must be an object"]
    errors: List[str] = []
    for short, name in LEGACY_PAIR_KEYS.items():
        value = data.get(name, data.get(short))
        if name == "timestamp":
            if value is not None and (isinstance(value, bool) or not isinstance(value, (int, float))):
                errors.append("Field 'timestamp' must be a number if provided")
        elif value is None:
            errors.append(f"Missing required field: {name}")
        elif not isinstance(value, str):
            errors.append(f"Field '{name}' must be a string")
    return errors


def coerce_learned_pair(data: Dict[str, Any]) -> Optional[LearnedPair]:
    """Build a LearnedPair from either shape, or None if the entry is invalid."""
    if validate_learned_pair(data):
        return None
    question = data.get("question", data.get("q"))
    answer = data.get("answer", data.get("a"))
    timestamp = data.get("timestamp", data.get("ts")) or 0
    return LearnedPair(question=question, answer=answer, timestamp=int(timestamp))


def validate_profile(data: Any) -> List[str]:
    if not isinstance(data, dict):
        return ["Profile must be an object mapping field keys to values"]
    errors: List[str] = []
    for key, value in data.items():
        if not _is_non_empty_str(key):
            errors.append("Profile keys must be non-empty strings")
        if not isinstance(value, str):
            errors.append(f"Value for '{key}' must be a string")
    return errors


def validate_settings(data: Any) -> List[str]:
    if not isinstance(data, dict):
        return ["Settings must be an object"]
    errors: List[str] = []
    for f in SETTINGS_BOOL_FIELDS:
        if f in data and not isinstance(data[f], bool):
            errors.append(f"Field '{f}' must be a boolean if provided")
    if "threshold" in data:
        t = data["threshold"]
        if isinstance(t, bool) or not isinstance(t, (int, float)):
            errors.append("Field 'threshold' must be a number")
        elif not 0.0 <= t <= 1.0:
            errors.append("Field 'threshold' must be within [0, 1]")
    return errors
