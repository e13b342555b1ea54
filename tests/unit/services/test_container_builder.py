"""Tests for wiring the advisory container from configuration."""

from unittest.mock import Mock, patch

import pytest

from plantcare.config import AppConfig
from plantcare.domain.exceptions import ConfigurationError
from plantcare.services.container_builder import ContainerBuilder


@pytest.fixture
def config():
    return AppConfig(
        environment="test",
        openai_api_key="sk-test",
        llm_model="gpt-4o",
        llm_fallback_model="gpt-4o-mini",
        advisory_max_attempts=2,
        advisory_backoff_base_ms=10,
        max_image_mb=5,
        care_history_limit=4,
    )


def test_missing_api_key_fails_at_build(config):
    config.openai_api_key = ""

    with pytest.raises(ConfigurationError):
        ContainerBuilder(config).build()


def test_backend_is_created_once_from_config(config):
    with patch("plantcare.services.ai.llm_backends.openai.OpenAI") as factory:
        container = ContainerBuilder(config).build()

    factory.assert_called_once()
    assert factory.call_args.kwargs["max_retries"] == 0
    assert container.backend.name == "openai"


def test_config_flows_into_services(config, fake_backend, sleeps):
    history_reader = Mock()
    container = ContainerBuilder(config, backend=fake_backend, history_reader=history_reader, sleep=sleeps).build()

    assert container.orchestrator._policy.max_attempts == 2
    assert container.orchestrator._images.max_mb == 5
    assert container.journal_enrichment.history_limit == 4
    assert container.journal_enrichment.history_reader is history_reader
    assert container.care_service is None


def test_shortcuts_delegate(config, fake_backend, sleeps, make_plant, png_bytes, fixed_now):
    plant_reader = Mock()
    plant_reader.get_plants.return_value = [make_plant()]
    container = ContainerBuilder(config, backend=fake_backend, plant_reader=plant_reader, sleep=sleeps).build()

    assert container.compute_next_dates(make_plant()).next_watering is not None
    assert container.partition_by_care_needed([make_plant()], now=fixed_now).to_dict()["needs_water"] == [1]
    assert container.care_service.plants_needing_care(7, now=fixed_now).to_dict()["needs_water"] == [1]

    fake_backend.queue({"matches": True}, {"sunlightLevel": "low"})
    assert container.verify_identity(png_bytes, "Monstera").matches is True
    assert container.analyze_light(png_bytes)["sunlightLevel"] == "low"
