"""
Tests for schema validation and data models.
"""

import pytest
from smartform.models import LearnedPair, Settings, check_threshold
from smartform.schema import (
    coerce_learned_pair,
    validate_learned_pair,
    validate_profile,
    validate_settings,
)


class TestValidateLearnedPair:
    """Test learned-pair validation."""

    def test_valid_pair(self):
        assert validate_learned_pair({"question": "Email", "answer": "a@b.com", "timestamp": 1}) == []

    def test_valid_legacy_pair(self):
        assert validate_learned_pair({"q": "Email", "a": "a@b.com", "ts": 1}) == []

    def test_missing_answer(self):
        errors = validate_learned_pair({"question": "Email"})
        assert any("answer" in e for e in errors)

    def test_wrong_types(self):
        errors = validate_learned_pair({"question": 1, "answer": "x", "timestamp": "yesterday"})
        assert len(errors) == 2

    def test_not_an_object(self):
        assert validate_learned_pair(["Email", "a@b.com"]) != []

    def test_coerce(self):
        assert coerce_learned_pair({"q": "Email", "a": "x", "ts": 5.0}) == LearnedPair("Email", "x", 5)
        assert coerce_learned_pair({"question": "Email"}) is None


class TestValidateProfile:
    """Test profile validation."""

    def test_valid_profile(self, sample_profile):
        assert validate_profile(sample_profile) == []

    def test_blank_key_and_non_string_value(self):
        errors = validate_profile({" ": "x", "age": 30})
        assert len(errors) == 2

    def test_not_an_object(self):
        assert validate_profile([("name", "Jane")]) != []


class TestValidateSettings:
    """Test settings validation."""

    def test_valid_settings(self):
        assert validate_settings({"reviewMode": True, "learningEnabled": False, "threshold": 0.6}) == []

    def test_empty_is_valid(self):
        assert validate_settings({}) == []

    @pytest.mark.parametrize("data", [
        {"reviewMode": "yes"},
        {"threshold": 1.2},
        {"threshold": -0.1},
        {"threshold": "high"},
        {"threshold": True},
    ])
    def test_invalid(self, data):
        assert validate_settings(data) != []


class TestSettingsModel:
    """Test the Settings dataclass."""

    def test_defaults(self):
        s = Settings()
        assert (s.review_mode, s.learning_enabled, s.threshold) == (False, False, 0.55)

    def test_from_dict_uses_camel_case(self):
        s = Settings.from_dict({"reviewMode": True, "learningEnabled": True, "threshold": 0.4})
        assert s == Settings(review_mode=True, learning_enabled=True, threshold=0.4)
        assert s.to_dict() == {"reviewMode": True, "learningEnabled": True, "threshold": 0.4}

    def test_from_dict_missing_threshold(self):
        assert Settings.from_dict(None).threshold == 0.55

    def test_threshold_bounds(self):
        assert check_threshold(0) == 0.0
        assert check_threshold(1) == 1.0
        with pytest.raises(ValueError):
            Settings(threshold=1.01)
        with pytest.raises(ValueError):
            check_threshold("0.5")
