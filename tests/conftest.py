"""
Shared test fixtures for the plant care core test suite.

Provides:
- A scripted fake inference backend (no network)
- A recording no-op sleep for retry tests
- An orchestrator wired to both
- Plant / care log factories and sample image payloads

Usage:
    def test_example(fake_backend, orchestrator, png_bytes):
        fake_backend.queue({"commonName": "Monstera", "careRecommendations": {}})
        result = orchestrator.identify(png_bytes)
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any

import pytest

from plantcare.domain.care_log import CareLogEntry
from plantcare.domain.plant_profile import PlantCareProfile
from plantcare.services.ai.advisory_orchestrator import AdvisoryRequestOrchestrator
from plantcare.services.ai.llm_backends import InferenceBackend, InferenceRequest, LLMResponse
from plantcare.services.ai.retry_policy import RetryPolicy

# ---------------------------------------------------------------------------
# Logging — keep test output clean
# ---------------------------------------------------------------------------
logging.getLogger("plantcare").setLevel(logging.WARNING)

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32
JPEG_BYTES = b"\xff\xd8\xff\xe0" + b"\x00" * 32
FIXED_NOW = datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc)


# ========================== Fake inference backend ==========================


class FakeBackend(InferenceBackend):
    """Returns queued replies in order and records every request.

    A queued item may be a dict (sent back as JSON text), a raw string,
    an :class:`LLMResponse`, or an exception instance to raise.
    """

    def __init__(self) -> None:
        self.requests: list[InferenceRequest] = []
        self._replies: list[Any] = []

    @property
    def name(self) -> str:
        return "fake"

    def queue(self, *replies: Any) -> "FakeBackend":
        self._replies.extend(replies)
        return self

    def complete(self, request: InferenceRequest) -> LLMResponse:
        self.requests.append(request)
        if not self._replies:
            raise AssertionError("FakeBackend called with no queued reply")
        reply = self._replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        if isinstance(reply, LLMResponse):
            return reply
        text = reply if isinstance(reply, str) else json.dumps(reply)
        return LLMResponse(text=text, model=request.model, usage={"total_tokens": 42})


class RecordingSleep:
    """Stands in for ``time.sleep``; remembers the requested delays."""

    def __init__(self) -> None:
        self.calls: list[float] = []

    def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


@pytest.fixture()
def fake_backend():
    return FakeBackend()


@pytest.fixture()
def sleeps():
    return RecordingSleep()


@pytest.fixture()
def orchestrator(fake_backend, sleeps):
    """Orchestrator on the fake backend with default retry policy and no real sleeping."""
    return AdvisoryRequestOrchestrator(fake_backend, policy=RetryPolicy(), sleep=sleeps)


# ========================== Domain factories ================================


@pytest.fixture()
def make_plant():
    """Factory for PlantCareProfile with sensible defaults."""

    def _make(**overrides: Any) -> PlantCareProfile:
        values: dict[str, Any] = {
            "id": 1,
            "name": "Monstera",
            "water_frequency_days": 7,
            "fertilizer_frequency_days": 30,
            "last_watered_at": "2024-06-01T09:00:00Z",
            "last_fertilized_at": "2024-05-20T09:00:00Z",
            "created_at": "2024-01-01T00:00:00Z",
            "plant_type": "tropical",
            "scientific_name": "Monstera deliciosa",
            "location": "Living room",
            "sunlight_level": "medium",
        }
        values.update(overrides)
        return PlantCareProfile(**values)

    return _make


@pytest.fixture()
def make_log():
    """Factory for CareLogEntry."""

    def _make(**overrides: Any) -> CareLogEntry:
        values: dict[str, Any] = {
            "id": 100,
            "plant_id": 1,
            "care_type": "water",
            "timestamp": FIXED_NOW,
            "notes": "Watered thoroughly",
            "photo": None,
        }
        values.update(overrides)
        return CareLogEntry(**values)

    return _make


# ========================== Sample payloads =================================


@pytest.fixture()
def png_bytes():
    return PNG_BYTES


@pytest.fixture()
def jpeg_bytes():
    return JPEG_BYTES


@pytest.fixture()
def fixed_now():
    return FIXED_NOW


@pytest.fixture()
def journal_payload():
    return {
        "title": "New leaf unfurling",
        "observations": ["A new leaf is unfurling", "Soil was dry two inches down"],
        "growthProgress": "Steady growth since last month",
        "narrative": "Today I watered my monstera.",
        "careDetails": "Deep watering",
        "nextSteps": ["Check soil in five days"],
    }


@pytest.fixture()
def growth_payload():
    return {
        "growthAssessment": "Noticeable new growth",
        "healthChanges": "Leaves look greener",
        "growthRate": "fast",
        "potentialIssues": [],
        "recommendations": ["Rotate weekly"],
        "comparisonNotes": "Two new leaves",
    }
