"""
Unit tests for settings loading and credential checks.
"""

import pytest

from core.config import (
    DEFAULT_GRADING_MODEL,
    DEFAULT_QUESTION_MODEL,
    load_settings,
    mask_key,
    validate_api_key,
)
from core.errors import ConfigurationError
from core.schemas import DEFAULT_RUBRIC


class TestLoadSettings:
    def test_defaults_when_only_key_set(self):
        settings = load_settings({"OPENAI_API_KEY": "sk-test-1234567890"})

        assert settings.api_key == "sk-test-1234567890"
        assert settings.question_model == DEFAULT_QUESTION_MODEL
        assert settings.grading_model == DEFAULT_GRADING_MODEL
        assert settings.rubric == DEFAULT_RUBRIC
        assert settings.debug is True

    def test_missing_key_is_not_fatal_here(self):
        """The client reports a missing key so the UI can show it."""
        assert load_settings({}).api_key is None

    def test_api_key_fallback_name(self):
        assert load_settings({"API_KEY": "sk-fallback-123456"}).api_key == "sk-fallback-123456"

    def test_openai_key_preferred_over_fallback(self):
        settings = load_settings({"OPENAI_API_KEY": "sk-primary-123456", "API_KEY": "sk-fallback-123456"})
        assert settings.api_key == "sk-primary-123456"

    def test_overrides(self):
        settings = load_settings({
            "GEO_BUDDY_QUESTION_MODEL": "fast",
            "GEO_BUDDY_GRADING_MODEL": "careful",
            "GEO_BUDDY_TIMEOUT": "12.5",
            "GEO_BUDDY_DEBUG": "0",
        })
        assert settings.question_model == "fast"
        assert settings.grading_model == "careful"
        assert settings.timeout == 12.5
        assert settings.debug is False

    @pytest.mark.parametrize("raw", ["soon", "0", "-3"])
    def test_bad_timeout_then_raises(self, raw):
        with pytest.raises(ConfigurationError, match="GEO_BUDDY_TIMEOUT"):
            load_settings({"GEO_BUDDY_TIMEOUT": raw})

    def test_rubric_file_replaces_default(self, tmp_path):
        rubric_path = tmp_path / "rubric.txt"
        rubric_path.write_text("Only award marks for named case studies.", encoding="utf-8")

        settings = load_settings({"GEO_BUDDY_RUBRIC_FILE": str(rubric_path)})

        assert settings.rubric == "Only award marks for named case studies."

    def test_missing_rubric_file_then_raises(self, tmp_path):
        with pytest.raises(ConfigurationError, match="Could not read rubric"):
            load_settings({"GEO_BUDDY_RUBRIC_FILE": str(tmp_path / "missing.txt")})

    def test_empty_rubric_file_then_raises(self, tmp_path):
        rubric_path = tmp_path / "rubric.txt"
        rubric_path.write_text("  \n", encoding="utf-8")
        with pytest.raises(ConfigurationError, match="empty"):
            load_settings({"GEO_BUDDY_RUBRIC_FILE": str(rubric_path)})


class TestApiKey:
    def test_validate_strips_whitespace(self):
        assert validate_api_key("  sk-test-1234567890\n") == "sk-test-1234567890"

    @pytest.mark.parametrize("key", [None, "", "   ", "sk-test 123", "your-api-key", "PLACEHOLDER_API_KEY"])
    def test_validate_rejects_missing_or_malformed(self, key):
        with pytest.raises(ConfigurationError):
            validate_api_key(key)

    def test_mask_key_hides_middle(self):
        assert mask_key("sk-proj-abcdefghijklmnop") == "sk-proj-...mnop"
        assert mask_key("short") == "***"
