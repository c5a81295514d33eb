"""
Unit tests for the data model.
"""

import dataclasses

import pytest

from core.models import Feedback, GeographyTopic


class TestGeographyTopic:
    def test_seven_topics(self):
        assert len(GeographyTopic) == 7

    @pytest.mark.parametrize("topic, label", [
        (GeographyTopic.COASTS, "The Changing Landscapes of the UK"),
        (GeographyTopic.CITIES, "Changing Cities"),
        (GeographyTopic.ECOSYSTEMS, "Ecosystems, Biodiversity and Management"),
    ])
    def test_short_label_is_text_before_colon(self, topic, label):
        assert topic.short_label == label

    @pytest.mark.parametrize("value", ["RIVERS", "rivers", "The Changing Landscapes of the UK: Rivers",
                                       GeographyTopic.RIVERS])
    def test_from_value_resolves_names_and_values(self, value):
        assert GeographyTopic.from_value(value) is GeographyTopic.RIVERS

    def test_from_value_unknown_then_raises(self):
        with pytest.raises(ValueError, match="Unknown geography topic"):
            GeographyTopic.from_value("Volcanoes")


class TestFeedback:
    @pytest.mark.parametrize("score, band", [(3, "full"), (2, "partial"), (1, "low"), (0, "low")])
    def test_band_follows_score(self, score, band):
        assert Feedback(score=score, comments="").band == band

    def test_full_marks(self):
        assert Feedback(score=3, comments="").is_full_marks
        assert not Feedback(score=2, comments="").is_full_marks

    def test_feedback_is_immutable(self, sample_feedback):
        with pytest.raises(dataclasses.FrozenInstanceError):
            sample_feedback.score = 3
