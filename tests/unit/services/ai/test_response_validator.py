"""
Response Validator Tests
========================
Required-field rejection and optional-field defaulting per task kind.
"""

import pytest

from plantcare.constants import DEFAULT_DIAGNOSIS_SOLUTION, DEFAULT_PREVENTION_TIPS
from plantcare.domain.exceptions import MalformedResult
from plantcare.services.ai.response_validator import TASK_SCHEMAS, ResponseValidator


@pytest.fixture
def validator():
    return ResponseValidator()


def test_every_task_kind_has_a_schema():
    from plantcare.enums.common import AdvisoryTaskKind

    assert set(TASK_SCHEMAS) == {kind.value for kind in AdvisoryTaskKind}


class TestIdentify:
    def test_fills_defaults(self, validator):
        result = validator.validate("identify", {"commonName": "Monstera", "careRecommendations": {}})

        assert result == {
            "commonName": "Monstera",
            "careRecommendations": {
                "waterFrequency": 7,
                "sunlightLevel": "medium",
                "fertilizerFrequency": 30,
                "additionalCare": "",
            },
            "plantType": "other",
            "scientificName": "",
            "confidence": "medium",
        }

    def test_out_of_domain_enum_is_replaced_not_corrected(self, validator):
        result = validator.validate(
            "identify",
            {
                "commonName": "Monstera",
                "careRecommendations": {"sunlightLevel": "High"},
                "plantType": "Tropical",
                "confidence": "very high",
            },
        )

        assert result["careRecommendations"]["sunlightLevel"] == "medium"
        assert result["plantType"] == "other"
        assert result["confidence"] == "medium"

    def test_keeps_valid_values_and_drops_unknown_keys(self, validator):
        result = validator.validate(
            "identify",
            {
                "commonName": "Snake plant",
                "scientificName": "Dracaena trifasciata",
                "plantType": "succulent",
                "confidence": "high",
                "careRecommendations": {"waterFrequency": 14, "fertilizerFrequency": 60.0},
                "funFact": "hard to kill",
            },
        )

        assert result["careRecommendations"]["waterFrequency"] == 14
        assert result["careRecommendations"]["fertilizerFrequency"] == 60
        assert result["plantType"] == "succulent"
        assert "funFact" not in result

    @pytest.mark.parametrize("bad_frequency", [0, -3, "weekly", True])
    def test_invalid_frequency_uses_default(self, validator, bad_frequency):
        result = validator.validate(
            "identify", {"commonName": "Fern", "careRecommendations": {"waterFrequency": bad_frequency}}
        )

        assert result["careRecommendations"]["waterFrequency"] == 7

    def test_missing_common_name(self, validator):
        with pytest.raises(MalformedResult) as excinfo:
            validator.validate("identify", {"careRecommendations": {}})

        assert excinfo.value.missing_fields == ["commonName"]

    def test_care_recommendations_must_be_object(self, validator):
        with pytest.raises(MalformedResult) as excinfo:
            validator.validate("identify", {"commonName": "Fern", "careRecommendations": "water weekly"})

        assert excinfo.value.missing_fields == ["careRecommendations"]


class TestDiagnose:
    def test_defaults(self, validator):
        result = validator.validate("diagnose", {"issue": "Root rot", "cause": "Overwatering"})

        assert result["solution"] == DEFAULT_DIAGNOSIS_SOLUTION
        assert result["preventionTips"] == list(DEFAULT_PREVENTION_TIPS)
        assert len(result["preventionTips"]) == 3
        assert result["severity"] == "medium"
        assert result["confidenceLevel"] == "medium"

    def test_default_list_is_not_shared(self, validator):
        first = validator.validate("diagnose", {"issue": "a", "cause": "b"})
        first["preventionTips"].append("mutated")

        second = validator.validate("diagnose", {"issue": "a", "cause": "b"})

        assert "mutated" not in second["preventionTips"]

    def test_reports_all_missing_required_fields(self, validator):
        with pytest.raises(MalformedResult) as excinfo:
            validator.validate("diagnose", {"issue": "  "})

        assert excinfo.value.missing_fields == ["issue", "cause"]
        assert excinfo.value.http_status == 502


class TestNestedStructures:
    def test_personalized_advice_drops_incomplete_problems(self, validator):
        result = validator.validate(
            "personalized_advice",
            {
                "careActions": {"immediate": ["Water"], "thisWeek": "rotate"},
                "commonProblems": [
                    {"issue": "Yellow leaves", "symptoms": "Yellowing", "solution": "Water less"},
                    {"symptoms": "no issue name"},
                    "not an object",
                ],
            },
        )

        assert result["careActions"] == {"immediate": ["Water"], "thisWeek": [], "thisMonth": []}
        assert [p["issue"] for p in result["commonProblems"]] == ["Yellow leaves"]
        assert result["observationTips"] == []
        assert result["growthExpectations"] == ""

    def test_personalized_advice_requires_care_actions(self, validator):
        with pytest.raises(MalformedResult):
            validator.validate("personalized_advice", {"observationTips": []})

    def test_optimized_schedule_validates_two_levels(self, validator):
        result = validator.validate(
            "optimized_schedule",
            {
                "schedule": [
                    {
                        "day": "Monday",
                        "tasks": [
                            {"plantName": "Fern", "careType": "water"},
                            {"careType": "water"},
                        ],
                    },
                    {"tasks": []},
                ]
            },
        )

        assert len(result["schedule"]) == 1
        assert result["schedule"][0]["tasks"] == [
            {"plantName": "Fern", "careType": "water", "estimatedTime": "", "instructions": ""}
        ]
        assert result["specialNotes"] == []

    def test_seasonal_guide_requires_plants_list(self, validator):
        with pytest.raises(MalformedResult) as excinfo:
            validator.validate("seasonal_guide", {"generalRecommendations": "Water less", "plants": "many"})

        assert excinfo.value.missing_fields == ["plants"]

    def test_community_insights(self, validator):
        result = validator.validate(
            "community_insights",
            {
                "bestPractices": {"watering": "Sparingly"},
                "commonIssues": [{"issue": "Rot", "frequency": "common", "solutions": ["Drain"]}],
            },
        )

        assert result["bestPractices"] == {"watering": "Sparingly", "light": "", "soil": "", "fertilizing": ""}
        assert result["commonIssues"][0]["solutions"] == ["Drain"]


class TestSmallTasks:
    def test_journal_entry_required(self, validator):
        with pytest.raises(MalformedResult) as excinfo:
            validator.validate("journal_entry", {"title": "Day 1", "observations": "looks fine"})

        assert excinfo.value.missing_fields == ["observations", "growthProgress"]

    def test_growth_rate_enum(self, validator):
        result = validator.validate("growth_analysis", {"growthAssessment": "Growing", "growthRate": "rapid"})

        assert result["growthRate"] == "moderate"

    def test_identity_verify_requires_boolean(self, validator):
        with pytest.raises(MalformedResult):
            validator.validate("identity_verify", {"matches": "yes"})

    def test_identity_verify_defaults(self, validator):
        result = validator.validate("identity_verify", {"matches": True})

        assert result == {"matches": True, "confidence": "low", "detectedPlant": None}

    def test_light_level_requires_valid_enum(self, validator):
        with pytest.raises(MalformedResult):
            validator.validate("light_level", {"sunlightLevel": "bright"})

    def test_non_object_payload(self, validator):
        with pytest.raises(MalformedResult) as excinfo:
            validator.validate("care_answer", ["answer"])

        assert excinfo.value.missing_fields == ["answer"]
