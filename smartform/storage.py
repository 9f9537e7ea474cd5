"""
JSON key-value store for profiles, learned pairs and settings.

Store layout:
    {
        "profiles": {"<profile name>": {"<field key>": "<value>", ...}},
        "learned": [{"question": ..., "answer": ..., "timestamp": ...}, ...],
        "settings": {"reviewMode": ..., "learningEnabled": ..., "threshold": ...}
    }

All access is load-then-save; a single writer is assumed.
"""

import json
import time
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol, Tuple

from .models import LearnedPair, Settings
from .schema import coerce_learned_pair, validate_profile, validate_settings


def _empty_store() -> Dict[str, Any]:
    return {"profiles": {}, "learned": [], "settings": {}}


def load_store(path: Path) -> Dict[str, Any]:
    if not path.exists():
        return _empty_store()
    try:
        with path.open("r", encoding="utf-8") as f:
            content = f.read().strip()
            if not content:
                return _empty_store()
            store = json.loads(content)
    except (json.JSONDecodeError, IOError):
        return _empty_store()
    if not isinstance(store, dict):
        return _empty_store()
    for key, default in _empty_store().items():
        store.setdefault(key, default)
    return store


def save_store(path: Path, store: Dict[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        json.dump(store, f, indent=2, ensure_ascii=False)


def now_ms() -> int:
    return int(time.time() * 1000)


# Profiles

def list_profiles(store: Dict[str, Any]) -> List[str]:
    return list(store.get("profiles", {}).keys())


def get_profile(store: Dict[str, Any], name: str) -> Optional[Dict[str, str]]:
    profile = store.get("profiles", {}).get(name)
    return dict(profile) if profile is not None else None


def save_profile(store: Dict[str, Any], name: str, fields: Dict[str, str]) -> None:
    if not name or not name.strip():
        raise ValueError("Profile name must not be empty")
    errors = validate_profile(fields)
    if errors:
        raise ValueError("; ".join(errors))
    store.setdefault("profiles", {})[name.strip()] = dict(fields)


def delete_profile(store: Dict[str, Any], name: str) -> bool:
    return store.setdefault("profiles", {}).pop(name, None) is not None


def set_profile_field(store: Dict[str, Any], name: str, key: str, value: str) -> None:
    """Add or replace one field; creates the profile if needed. Blank key or value is rejected."""
    key, value = key.strip(), value.strip()
    if not key or not value:
        raise ValueError("Field key and value must both be non-empty")
    fields = get_profile(store, name) or {}
    fields[key] = value
    save_profile(store, name, fields)


def remove_profile_field(store: Dict[str, Any], name: str, key: str) -> bool:
    fields = get_profile(store, name)
    if fields is None or key not in fields:
        return False
    del fields[key]
    save_profile(store, name, fields)
    return True


# Settings

def load_settings(store: Dict[str, Any]) -> Settings:
    data = store.get("settings") or {}
    errors = validate_settings(data)
    if errors:
        raise ValueError("; ".join(errors))
    return Settings.from_dict(data)


def save_settings(store: Dict[str, Any], settings: Settings) -> None:
    store["settings"] = settings.to_dict()


# Learned pairs

def learned_pairs(store: Dict[str, Any]) -> List[LearnedPair]:
    """Valid learned pairs in insertion order; malformed entries are skipped."""
    pairs = []
    for entry in store.get("learned", []):
        pair = coerce_learned_pair(entry)
        if pair is not None:
            pairs.append(pair)
    return pairs


def append_learned(store: Dict[str, Any], question: str, answer: str, timestamp: Optional[int] = None) -> None:
    """Append a pair. Duplicates are kept; nothing is de-duplicated."""
    ts = now_ms() if timestamp is None else int(timestamp)
    store.setdefault("learned", []).append(
        LearnedPair(question=question, answer=answer, timestamp=ts).to_dict()
    )


def filter_pairs(pairs: List[LearnedPair], query: str = "") -> List[Tuple[int, LearnedPair]]:
    """Return (index, pair) for pairs whose question or answer contains ``query``."""
    q = (query or "").lower()
    return [
        (i, pair) for i, pair in enumerate(pairs)
        if not q or q in pair.question.lower() or q in pair.answer.lower()
    ]


def delete_learned(store: Dict[str, Any], index: int) -> LearnedPair:
    """Remove the ``index``-th valid pair (as numbered by filter_pairs) and return it."""
    learned = store.setdefault("learned", [])
    positions = [i for i, entry in enumerate(learned) if coerce_learned_pair(entry) is not None]
    if not 0 <= index < len(positions):
        raise IndexError(f"No learned pair at index {index}")
    return coerce_learned_pair(learned.pop(positions[index]))


def clear_learned(store: Dict[str, Any]) -> int:
    count = len(store.get("learned", []))
    store["learned"] = []
    return count


def write_learned_file(path: Path, pairs: List[LearnedPair]) -> int:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        json.dump([p.to_dict() for p in pairs], f, indent=2, ensure_ascii=False)
    return len(pairs)


def read_learned_file(path: Path) -> List[LearnedPair]:
    """
    Read an exported list of learned pairs, keeping only valid entries.

    Raises:
        ValueError: If the file is not valid JSON or not a list
    """
    try:
        with path.open("r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON file: {path}") from e
    if not isinstance(data, list):
        raise ValueError(f"Expected a JSON list of learned pairs: {path}")
    pairs = []
    for entry in data:
        pair = coerce_learned_pair(entry)
        if pair is not None:
            pairs.append(pair)
    return pairs


class LearnedPairStore(Protocol):
    """Read side and append-only write side of a learned-pair pool."""

    def pairs(self) -> List[LearnedPair]:
        ...

    def append(self, question: str, answer: str, timestamp: int) -> None:
        ...


class JsonLearnedStore:
    """Learned pairs kept in the ``learned`` list of a JSON store file."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def pairs(self) -> List[LearnedPair]:
        return learned_pairs(load_store(self.path))

    def append(self, question: str, answer: str, timestamp: int) -> None:
        store = load_store(self.path)
        append_learned(store, question, answer, timestamp)
        save_store(self.path, store)

    def extend(self, pairs: List[LearnedPair]) -> int:
        store = load_store(self.path)
        store["learned"].extend(p.to_dict() for p in pairs)
        save_store(self.path, store)
        return len(pairs)

    def delete(self, index: int) -> LearnedPair:
        store = load_store(self.path)
        pair = delete_learned(store, index)
        save_store(self.path, store)
        return pair

    def clear(self) -> int:
        store = load_store(self.path)
        count = clear_learned(store)
        save_store(self.path, store)
        return count
