"""
Care Log Domain Entities
========================
Care events recorded against a plant, plus the structures the advisory
pipeline attaches to them (identity checks and enriched journal entries).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from plantcare.enums.common import CareType, ConfidenceLevel
from plantcare.utils.time import coerce_datetime, utc_now


@dataclass
class CareLogEntry:
    """A single care event. Immutable once written except for ``metadata``."""

    plant_id: int
    care_type: CareType
    timestamp: datetime | None = None
    notes: str | None = None
    photo: str | None = None  # data URI, bare base64 or URL
    metadata: dict[str, Any] = field(default_factory=dict)
    id: int | None = None

    def __post_init__(self) -> None:
        if isinstance(self.care_type, str):
            self.care_type = CareType(self.care_type)
        parsed = coerce_datetime(self.timestamp) if self.timestamp is not None else utc_now()
        if parsed is None:
            raise ValueError("timestamp must be a valid ISO-8601 datetime")
        self.timestamp = parsed
        self.metadata = dict(self.metadata or {})

    @property
    def has_photo(self) -> bool:
        return bool(self.photo and self.photo.strip())


@dataclass(frozen=True)
class IdentityCheck:
    """Outcome of comparing a photo with the plant it is logged against."""

    matches: bool
    confidence: ConfidenceLevel
    detected_plant: str | None = None

    @classmethod
    def fail_open(cls) -> "IdentityCheck":
        """Optimistic result used when verification itself fails."""
        return cls(matches=True, confidence=ConfidenceLevel.LOW)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"matches": self.matches, "confidence": self.confidence.value}
        if self.detected_plant is not None:
            result["detectedPlant"] = self.detected_plant
        return result


@dataclass
class EnrichedJournalEntry:
    """Narrative journal entry generated for a photo care log."""

    title: str
    observations: list[str]
    growth_progress: str
    narrative: str = ""
    care_details: str = ""
    next_steps: list[str] = field(default_factory=list)
    identity: IdentityCheck | None = None
    care_log_id: int | None = None

    @classmethod
    def from_result(
        cls,
        data: dict[str, Any],
        identity: IdentityCheck | None = None,
        care_log_id: int | None = None,
    ) -> "EnrichedJournalEntry":
        return cls(
            title=data["title"],
            observations=list(data["observations"]),
            growth_progress=data["growthProgress"],
            narrative=data.get("narrative", ""),
            care_details=data.get("careDetails", ""),
            next_steps=list(data.get("nextSteps", [])),
            identity=identity,
            care_log_id=care_log_id,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "narrative": self.narrative,
            "observations": self.observations,
            "careDetails": self.care_details,
            "growthProgress": self.growth_progress,
            "nextSteps": self.next_steps,
            "plantIdentityMatch": self.identity.to_dict() if self.identity else None,
            "careLogId": self.care_log_id,
        }
