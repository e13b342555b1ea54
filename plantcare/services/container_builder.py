"""
Container Builder
=================

Wires the care scheduler and the advisory services from an :class:`AppConfig`.

Each build_*() method constructs one subsystem. Persistence collaborators
(plant records, care history, metadata write-back) are passed in by the host
application; this package never talks to a store directly.

The inference backend is built exactly once. A missing API key raises
:class:`ConfigurationError` here, at startup, not on the first request.

Usage:
    config = load_config()
    setup_logging(config.log_level, config.log_file)
    container = ContainerBuilder(config, plant_reader=repo, history_reader=repo).build()
    result = container.orchestrator.identify(photo)
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from datetime import date, datetime
from typing import TYPE_CHECKING, Any, Callable

from plantcare.config import AppConfig
from plantcare.domain.care_schedule import CareScheduleCalculator
from plantcare.services.ai.advisory_orchestrator import AdvisoryRequestOrchestrator
from plantcare.services.ai.identity_verification import IdentityVerificationPipeline
from plantcare.services.ai.light_analyzer import LightLevelAnalyzer
from plantcare.services.ai.llm_backends import create_backend
from plantcare.services.ai.response_validator import ResponseValidator
from plantcare.services.ai.retry_policy import RetryPolicy
from plantcare.services.application.care_service import PlantCareService
from plantcare.services.application.journal_enrichment_service import JournalEnrichmentPipeline
from plantcare.utils.images import ImageIngestPipeline

if TYPE_CHECKING:
    from plantcare.domain.care_log import CareLogEntry, EnrichedJournalEntry, IdentityCheck
    from plantcare.domain.plant_profile import CareDates, CarePartition, PlantCareProfile
    from plantcare.schemas.advisory import ImagePayload
    from plantcare.services.ai.llm_backends import InferenceBackend
    from plantcare.services.protocols import CareHistoryReader, CareLogMetadataWriter, PlantRecordReader

logger = logging.getLogger(__name__)


@dataclass
class AdvisoryComponents:
    """Inference backend and the services built on it."""

    backend: "InferenceBackend"
    orchestrator: AdvisoryRequestOrchestrator
    identity_verifier: IdentityVerificationPipeline
    light_analyzer: LightLevelAnalyzer


@dataclass
class AdvisoryContainer:
    """Everything the host application needs, plus the core operations as shortcuts."""

    config: AppConfig
    calculator: CareScheduleCalculator
    backend: "InferenceBackend"
    orchestrator: AdvisoryRequestOrchestrator
    identity_verifier: IdentityVerificationPipeline
    light_analyzer: LightLevelAnalyzer
    journal_enrichment: JournalEnrichmentPipeline
    care_service: PlantCareService | None = None

    def compute_next_dates(self, profile: "PlantCareProfile") -> "CareDates":
        return self.calculator.compute_next_dates(profile)

    def partition_by_care_needed(
        self,
        profiles: list["PlantCareProfile"],
        now: datetime | date | str | None = None,
    ) -> "CarePartition":
        return self.calculator.partition_by_care_needed(profiles, now=now)

    def verify_identity(
        self,
        photo: "ImagePayload",
        expected_name: str,
        expected_scientific_name: str | None = None,
    ) -> "IdentityCheck":
        return self.identity_verifier.verify(photo, expected_name, expected_scientific_name)

    def enrich_journal(
        self,
        log: "CareLogEntry",
        plant: "PlantCareProfile",
        history: list["CareLogEntry"] | None = None,
    ) -> "EnrichedJournalEntry | None":
        return self.journal_enrichment.enrich(log, plant, history)

    def analyze_light(self, image: "ImagePayload") -> dict[str, Any]:
        return self.light_analyzer.analyze(image)


class ContainerBuilder:
    """
    Builder for the advisory container.

    Args:
        config: Loaded application configuration
        plant_reader: Plant store; enables :class:`PlantCareService`
        history_reader: Care log store used for journal history
        metadata_writer: Care log store used for identity-mismatch flags
        backend: Pre-built inference backend (tests, alternative providers)
        sleep: Backoff sleep used by the orchestrator
    """

    def __init__(
        self,
        config: AppConfig,
        *,
        plant_reader: "PlantRecordReader" | None = None,
        history_reader: "CareHistoryReader" | None = None,
        metadata_writer: "CareLogMetadataWriter" | None = None,
        backend: "InferenceBackend" | None = None,
        sleep: Callable[[float], Any] = time.sleep,
    ):
        self.config = config
        self.plant_reader = plant_reader
        self.history_reader = history_reader
        self.metadata_writer = metadata_writer
        self._backend = backend
        self._sleep = sleep

    def build_advisory(self) -> AdvisoryComponents:
        """
        Build the inference backend, orchestrator and advisory pipelines.

        Raises:
            ConfigurationError: no API key configured
        """
        logger.info("Building advisory components...")

        backend = self._backend
        if backend is None:
            backend = create_backend(
                "openai",
                api_key=self.config.openai_api_key,
                base_url=self.config.openai_base_url or None,
                timeout=self.config.llm_timeout,
            )

        orchestrator = AdvisoryRequestOrchestrator(
            backend,
            model=self.config.llm_model,
            fallback_model=self.config.llm_fallback_model,
            temperature=self.config.llm_temperature,
            image_pipeline=ImageIngestPipeline(max_mb=self.config.max_image_mb),
            validator=ResponseValidator(),
            policy=RetryPolicy(
                max_attempts=self.config.advisory_max_attempts,
                backoff_base_ms=self.config.advisory_backoff_base_ms,
            ),
            sleep=self._sleep,
        )

        logger.info(
            "✓ Advisory orchestrator ready (backend=%s, model=%s, fallback=%s)",
            backend.name,
            self.config.llm_model,
            self.config.llm_fallback_model,
        )
        return AdvisoryComponents(
            backend=backend,
            orchestrator=orchestrator,
            identity_verifier=IdentityVerificationPipeline(orchestrator),
            light_analyzer=LightLevelAnalyzer(orchestrator),
        )

    def build(self) -> AdvisoryContainer:
        calculator = CareScheduleCalculator()
        advisory = self.build_advisory()

        journal_enrichment = JournalEnrichmentPipeline(
            advisory.orchestrator,
            advisory.identity_verifier,
            history_reader=self.history_reader,
            metadata_writer=self.metadata_writer,
            history_limit=self.config.care_history_limit,
        )

        care_service = None
        if self.plant_reader is not None:
            care_service = PlantCareService(self.plant_reader, calculator=calculator)
        else:
            logger.info("No plant reader supplied; PlantCareService disabled")

        return AdvisoryContainer(
            config=self.config,
            calculator=calculator,
            backend=advisory.backend,
            orchestrator=advisory.orchestrator,
            identity_verifier=advisory.identity_verifier,
            light_analyzer=advisory.light_analyzer,
            journal_enrichment=journal_enrichment,
            care_service=care_service,
        )
