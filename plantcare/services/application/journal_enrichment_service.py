"""
Journal Enrichment Service
==========================
Turns a photo care log into a narrative journal entry.

Flow for one care log:
1. skip logs without a photo
2. verify the photo shows the logged plant (fails open)
3. load recent care history when the caller did not pass it
4. ask the advisor for a journal entry with a chronological history digest
5. attach the identity result, and flag mismatches on the care log metadata
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Iterable

from plantcare.constants import AdvisoryDefaults
from plantcare.domain.care_log import CareLogEntry, EnrichedJournalEntry, IdentityCheck
from plantcare.utils.time import format_date

if TYPE_CHECKING:
    from plantcare.domain.plant_profile import PlantCareProfile
    from plantcare.services.ai.advisory_orchestrator import AdvisoryRequestOrchestrator
    from plantcare.services.ai.identity_verification import IdentityVerificationPipeline
    from plantcare.services.protocols import CareHistoryReader, CareLogMetadataWriter

logger = logging.getLogger(__name__)


def build_history_digest(history: Iterable[CareLogEntry]) -> str:
    """One line per care event, oldest first."""
    lines = []
    for entry in sorted(history, key=lambda e: e.timestamp):
        line = f"- {format_date(entry.timestamp)}: {entry.care_type.value}"
        if entry.notes:
            line += f" ({entry.notes})"
        lines.append(line)
    return "\n".join(lines)


class JournalEnrichmentPipeline:
    """
    Service for generating journal entries from photo care logs.

    Dependencies:
        - orchestrator: runs the journal_entry advisory task
        - verifier: photo identity check
        - history_reader: optional source of recent care logs
        - metadata_writer: optional sink for identity-mismatch flags
    """

    def __init__(
        self,
        orchestrator: "AdvisoryRequestOrchestrator",
        verifier: "IdentityVerificationPipeline",
        history_reader: "CareHistoryReader" | None = None,
        metadata_writer: "CareLogMetadataWriter" | None = None,
        history_limit: int = AdvisoryDefaults.CARE_HISTORY_LIMIT,
    ):
        self.orchestrator = orchestrator
        self.verifier = verifier
        self.history_reader = history_reader
        self.metadata_writer = metadata_writer
        self.history_limit = history_limit

    def enrich(
        self,
        log: CareLogEntry,
        plant: "PlantCareProfile",
        history: list[CareLogEntry] | None = None,
    ) -> EnrichedJournalEntry | None:
        """
        Build an enriched journal entry for ``log``.

        Args:
            log: The care log being enriched
            plant: The plant the log belongs to
            history: Recent care logs; fetched from ``history_reader`` when ``None``

        Returns:
            The entry, or ``None`` when the log has no photo

        Raises:
            MalformedResult: the advisor omitted title, observations or growthProgress
            AdvisoryError: the journal_entry task failed
        """
        if not log.has_photo:
            logger.debug("Care log %s has no photo; skipping enrichment", log.id)
            return None

        identity = self.verifier.verify(log.photo, plant.name, plant.scientific_name)

        if history is None:
            history = self._recent_history(plant.id, exclude_log_id=log.id)

        result = self.orchestrator.journal_entry(plant, log, history_digest=build_history_digest(history))
        entry = EnrichedJournalEntry.from_result(result.data, identity=identity, care_log_id=log.id)

        if not identity.matches:
            self._flag_mismatch(log, identity)

        logger.info("Enriched care log %s for plant %s ('%s')", log.id, plant.id, entry.title)
        return entry

    # -- internal -----------------------------------------------------------

    def _recent_history(self, plant_id: int, exclude_log_id: int | None) -> list[CareLogEntry]:
        if self.history_reader is None:
            return []
        # One extra in case the current log is among the most recent
        logs = self.history_reader.get_recent_care_logs(plant_id, self.history_limit + 1)
        recent = [entry for entry in logs if exclude_log_id is None or entry.id != exclude_log_id]
        recent.sort(key=lambda e: e.timestamp, reverse=True)
        return recent[: self.history_limit]

    def _flag_mismatch(self, log: CareLogEntry, identity: IdentityCheck) -> None:
        metadata: dict[str, Any] = {
            **log.metadata,
            "plantIdentityMismatch": True,
            "detectedPlant": identity.detected_plant,
        }
        log.metadata = metadata

        if self.metadata_writer is None or log.id is None:
            return
        try:
            self.metadata_writer.update_care_log_metadata(log.id, metadata)
        except Exception as e:
            logger.error("Failed to store identity mismatch on care log %s: %s", log.id, e)
