"""
Advisory Orchestrator Tests
===========================
End-to-end attempt handling against a scripted backend: prompt and image
assembly, parsing failures, rate-limit retries and growth-analysis
degradation.
"""

from datetime import datetime, timezone

import pytest

from plantcare.constants import Models, TokenBudgets
from plantcare.domain.exceptions import (
    EmptyContent,
    ImageFormatError,
    MalformedJson,
    MalformedResult,
    NoResponse,
    RateLimited,
    RateLimitExhausted,
    ServiceUnavailable,
    SizeLimitExceeded,
)
from plantcare.schemas.advisory import IdentifyTask, UserAvailability
from plantcare.services.ai.advisory_orchestrator import (
    AdvisoryRequestOrchestrator,
    parse_json_payload,
)
from plantcare.services.ai.retry_policy import RetryPolicy
from plantcare.utils.images import ImageIngestPipeline

IDENTIFY_REPLY = {"commonName": "Monstera", "careRecommendations": {"waterFrequency": 7}}


class TestParseJsonPayload:
    def test_plain_json(self):
        assert parse_json_payload('{"a": 1}') == {"a": 1}

    def test_strips_markdown_fences(self):
        assert parse_json_payload('```json\n{"a": 1}\n```') == {"a": 1}

    @pytest.mark.parametrize("text", ["", "   \n", None])
    def test_empty(self, text):
        with pytest.raises(EmptyContent):
            parse_json_payload(text)

    @pytest.mark.parametrize("text", ["not json", "[1, 2]", '"string"'])
    def test_malformed(self, text):
        with pytest.raises(MalformedJson):
            parse_json_payload(text)


class TestExecute:
    def test_identify_sends_image_and_budget(self, orchestrator, fake_backend, png_bytes):
        fake_backend.queue(IDENTIFY_REPLY)

        result = orchestrator.identify(png_bytes)

        assert result.kind == "identify"
        assert result.data["commonName"] == "Monstera"
        assert result.data["confidence"] == "medium"
        assert result.attempts == 1
        assert result.degraded is False
        request = fake_backend.requests[0]
        assert request.model == Models.PRIMARY
        assert request.max_tokens == TokenBudgets.IDENTIFY
        assert request.json_mode is True
        assert len(request.image_urls) == 1
        assert request.image_urls[0].startswith("data:image/png;base64,")

    def test_execute_accepts_task_model(self, orchestrator, fake_backend):
        fake_backend.queue(IDENTIFY_REPLY)

        result = orchestrator.execute(IdentifyTask(image="data:image/jpeg;base64,QUJD"))

        assert fake_backend.requests[0].image_urls == ["data:image/jpeg;base64,QUJD"]
        assert result.usage == {"total_tokens": 42}

    def test_text_only_task_sends_no_images(self, orchestrator, fake_backend):
        fake_backend.queue({"answer": "Water when the top inch is dry"})

        result = orchestrator.care_answer("How often should I water a fern?")

        assert result.data["answer"].startswith("Water")
        assert fake_backend.requests[0].image_urls == []
        assert "fern" in fake_backend.requests[0].user_text

    def test_size_limit_is_not_retried(self, fake_backend, sleeps):
        orchestrator = AdvisoryRequestOrchestrator(
            fake_backend, image_pipeline=ImageIngestPipeline(max_mb=0.00001), sleep=sleeps
        )

        with pytest.raises(SizeLimitExceeded):
            orchestrator.identify(b"\x89PNG" + b"\x00" * 1024)

        assert fake_backend.requests == []

    @pytest.mark.parametrize(
        "reply, error",
        [
            ("", EmptyContent),
            ("I think it is a fern", MalformedJson),
            ({"careRecommendations": {}}, MalformedResult),
            (NoResponse("no choices"), NoResponse),
            (ServiceUnavailable("down"), ServiceUnavailable),
        ],
    )
    def test_failures_surface_without_retry(self, orchestrator, fake_backend, sleeps, png_bytes, reply, error):
        fake_backend.queue(reply)

        with pytest.raises(error):
            orchestrator.identify(png_bytes)

        assert len(fake_backend.requests) == 1
        assert sleeps.calls == []


class TestRateLimitRetries:
    def test_backs_off_then_succeeds(self, orchestrator, fake_backend, sleeps, png_bytes):
        fake_backend.queue(RateLimited(), RateLimited(), IDENTIFY_REPLY)

        result = orchestrator.identify(png_bytes)

        assert result.attempts == 3
        assert sleeps.calls == [1.0, 2.0]
        assert all(r.model == Models.PRIMARY for r in fake_backend.requests)

    def test_server_hint_overrides_backoff(self, orchestrator, fake_backend, sleeps, png_bytes):
        fake_backend.queue(RateLimited(retry_after_s=5.0), IDENTIFY_REPLY)

        orchestrator.identify(png_bytes)

        assert sleeps.calls == [5.0]

    def test_exhausted_after_max_attempts(self, orchestrator, fake_backend, sleeps, png_bytes):
        fake_backend.queue(RateLimited(), RateLimited(), RateLimited())

        with pytest.raises(RateLimitExhausted):
            orchestrator.identify(png_bytes)

        assert len(fake_backend.requests) == 3
        assert sleeps.calls == [1.0, 2.0]

    def test_custom_policy(self, fake_backend, sleeps, png_bytes):
        orchestrator = AdvisoryRequestOrchestrator(
            fake_backend, policy=RetryPolicy(max_attempts=2, backoff_base_ms=250), sleep=sleeps
        )
        fake_backend.queue(RateLimited(), RateLimited())

        with pytest.raises(RateLimitExhausted):
            orchestrator.identify(png_bytes)

        assert sleeps.calls == [0.25]


class TestGrowthAnalysis:
    def test_sends_oldest_and_newest_only(self, orchestrator, fake_backend, make_plant, growth_payload):
        fake_backend.queue(growth_payload)
        images = ["data:image/jpeg;base64,AAAA", "data:image/jpeg;base64,BBBB", "data:image/jpeg;base64,CCCC"]

        result = orchestrator.growth_analysis(make_plant(), images)

        assert result.data["growthRate"] == "fast"
        assert fake_backend.requests[0].image_urls == [images[0], images[-1]]
        assert fake_backend.requests[0].max_tokens == TokenBudgets.GROWTH_ANALYSIS

    def test_unusable_images_degrade_to_text_only(self, orchestrator, fake_backend, sleeps, make_plant, growth_payload):
        fake_backend.queue(growth_payload)

        result = orchestrator.growth_analysis(make_plant(), ["https://a/1.jpg", "https://a/2.jpg"])

        assert result.degraded is True
        assert result.attempts == 2
        assert len(fake_backend.requests) == 1
        request = fake_backend.requests[0]
        assert request.image_urls == []
        assert request.model == Models.FALLBACK
        assert request.max_tokens == TokenBudgets.GROWTH_ANALYSIS_DEGRADED
        assert "could not be processed" in request.user_text
        assert sleeps.calls == []

    def test_backend_image_rejection_degrades(self, orchestrator, fake_backend, make_plant, growth_payload):
        fake_backend.queue(ImageFormatError("invalid image"), growth_payload)
        images = ["data:image/jpeg;base64,AAAA", "data:image/jpeg;base64,BBBB"]

        result = orchestrator.growth_analysis(make_plant(), images)

        assert result.degraded is True
        assert [r.model for r in fake_backend.requests] == [Models.PRIMARY, Models.FALLBACK]
        assert fake_backend.requests[1].image_urls == []

    def test_other_tasks_do_not_degrade(self, orchestrator, fake_backend):
        with pytest.raises(ImageFormatError):
            orchestrator.identify("https://example.com/plant.jpg")

        assert fake_backend.requests == []

    def test_requires_two_images(self, orchestrator, make_plant):
        from pydantic import ValidationError

        with pytest.raises(ValidationError):
            orchestrator.growth_analysis(make_plant(), ["data:image/jpeg;base64,AAAA"])

    def test_image_dates_appear_in_prompt(self, orchestrator, fake_backend, make_plant, growth_payload):
        fake_backend.queue(growth_payload)
        dates = [datetime(2024, 3, 1, tzinfo=timezone.utc), datetime(2024, 6, 1, tzinfo=timezone.utc)]

        orchestrator.growth_analysis(
            make_plant(), ["data:image/jpeg;base64,AAAA", "data:image/jpeg;base64,BBBB"], image_dates=dates
        )

        assert "2024-03-01" in fake_backend.requests[0].user_text
        assert "2024-06-01" in fake_backend.requests[0].user_text


class TestConvenienceOperations:
    def test_personalized_advice_includes_history_and_environment(self, orchestrator, fake_backend, make_plant, make_log):
        from plantcare.schemas.advisory import EnvironmentContext

        fake_backend.queue({"careActions": {"immediate": ["Water"]}})

        result = orchestrator.personalized_advice(
            make_plant(),
            history=[make_log(notes="Leaves drooping")],
            environment=EnvironmentContext(location="Lisbon", humidity=55),
        )

        assert result.data["careActions"]["immediate"] == ["Water"]
        text = fake_backend.requests[0].user_text
        assert "Monstera" in text
        assert "Leaves drooping" in text
        assert "Lisbon" in text
        assert "Next watering due: 2024-06-08" in text

    def test_seasonal_guide_is_one_aggregate_call(self, orchestrator, fake_backend, make_plant):
        fake_backend.queue({"generalRecommendations": "Water less", "plants": [{"name": "Monstera"}]})

        result = orchestrator.seasonal_guide([make_plant(), make_plant(id=2, name="Pothos")], "Oslo", "winter")

        assert len(fake_backend.requests) == 1
        assert "Pothos" in fake_backend.requests[0].user_text
        assert result.data["plants"][0]["watering"] == ""
        assert result.data["season"] == ""

    def test_optimized_schedule(self, orchestrator, fake_backend, make_plant):
        fake_backend.queue({"schedule": [{"day": "Monday", "tasks": [{"plantName": "Monstera"}]}]})

        result = orchestrator.optimized_schedule([make_plant()], UserAvailability(max_daily_minutes=15))

        assert result.data["schedule"][0]["day"] == "Monday"
        assert fake_backend.requests[0].max_tokens == TokenBudgets.OPTIMIZED_SCHEDULE

    def test_diagnose_with_symptoms(self, orchestrator, fake_backend, make_plant, jpeg_bytes):
        fake_backend.queue({"issue": "Spider mites", "cause": "Dry air", "severity": "high"})

        result = orchestrator.diagnose(jpeg_bytes, plant=make_plant(), symptoms="webbing under leaves")

        assert result.data["severity"] == "high"
        assert "webbing" in fake_backend.requests[0].user_text

    def test_arrangement_and_community_insights(self, orchestrator, fake_backend, make_plant):
        fake_backend.queue(
            {"recommendations": {"grouping": "By humidity"}},
            {"bestPractices": {"soil": "Chunky aroid mix"}},
        )

        arrangement = orchestrator.arrangement([make_plant()], "living room", "small")
        insights = orchestrator.community_insights("monstera")

        assert arrangement.data["plantGroups"] == []
        assert insights.data["bestPractices"]["soil"] == "Chunky aroid mix"
