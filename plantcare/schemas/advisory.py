"""
Advisory Schemas
================

Pydantic models for advisory task requests. ``AdvisoryTaskRequest`` is a
discriminated union on ``kind``: every variant carries exactly the context
its prompt needs (plant snapshot, environment, history, images).
"""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator

from plantcare.domain.care_log import CareLogEntry
from plantcare.domain.plant_profile import CareDates, PlantCareProfile
from plantcare.utils.time import format_date

# Raw bytes, a data URI or a bare base64 string
ImagePayload = Union[bytes, str]


class PlantSnapshot(BaseModel):
    """Read-only view of a plant included in prompts."""

    model_config = ConfigDict(frozen=True)

    id: int | None = Field(default=None, description="Plant ID")
    name: str = Field(..., min_length=1, description="User-facing plant name")
    plant_type: str | None = Field(default=None, description="Plant type / category")
    scientific_name: str | None = Field(default=None, description="Scientific name if known")
    location: str | None = Field(default=None, description="Where the plant lives")
    sunlight_level: str | None = Field(default=None, description="low, medium or high")
    water_frequency_days: int | None = Field(default=None, gt=0, description="Days between waterings")
    fertilizer_frequency_days: int | None = Field(default=None, ge=0, description="Days between feedings (0 = none)")
    last_watered: str | None = Field(default=None, description="Last watering date")
    last_fertilized: str | None = Field(default=None, description="Last fertilizing date")
    next_watering: str | None = Field(default=None, description="Next watering due date")
    next_fertilizing: str | None = Field(default=None, description="Next fertilizing due date")
    status: str | None = Field(default=None, description="Current plant status")
    notes: str | None = Field(default=None, description="Owner notes")

    @classmethod
    def from_profile(cls, profile: PlantCareProfile, dates: CareDates | None = None) -> "PlantSnapshot":
        return cls(
            id=profile.id,
            name=profile.name,
            plant_type=profile.plant_type,
            scientific_name=profile.scientific_name,
            location=profile.location,
            sunlight_level=profile.sunlight_level,
            water_frequency_days=profile.water_frequency_days,
            fertilizer_frequency_days=profile.fertilizer_frequency_days,
            last_watered=format_date(profile.last_watered_at) if profile.last_watered_at else None,
            last_fertilized=format_date(profile.last_fertilized_at) if profile.last_fertilized_at else None,
            next_watering=format_date(dates.next_watering) if dates and dates.next_watering else None,
            next_fertilizing=format_date(dates.next_fertilizing) if dates and dates.next_fertilizing else None,
            status=profile.status,
            notes=profile.notes,
        )

    def describe(self) -> str:
        """One-line description used in prompts."""
        parts = [self.name]
        if self.scientific_name:
            parts.append(f"({self.scientific_name})")
        if self.plant_type:
            parts.append(f"- type: {self.plant_type}")
        return " ".join(parts)


class CareEventSummary(BaseModel):
    """Compact care history item."""

    care_type: str = Field(..., description="Care type, e.g. water, fertilize")
    timestamp: datetime = Field(..., description="When the care happened")
    notes: str | None = Field(default=None, description="Notes recorded with the event")

    @classmethod
    def from_entry(cls, entry: CareLogEntry) -> "CareEventSummary":
        return cls(care_type=entry.care_type.value, timestamp=entry.timestamp, notes=entry.notes)


class EnvironmentContext(BaseModel):
    """User's growing environment."""

    location: str | None = Field(default=None, description="City / region")
    indoor_temperature: float | None = Field(default=None, description="Indoor temperature")
    humidity: float | None = Field(default=None, ge=0, le=100, description="Relative humidity %")
    light_conditions: str | None = Field(default=None, description="Free-text light description")


class DayAvailability(BaseModel):
    day: str = Field(..., description="Weekday name")
    available_time_slots: list[str] = Field(default_factory=list, description="e.g. 'morning', '18:00-19:00'")


class UserAvailability(BaseModel):
    """When the user can do plant care."""

    weekdays: list[DayAvailability] = Field(default_factory=list)
    preferred_time: str | None = Field(default=None, description="Preferred time of day")
    max_daily_minutes: int | None = Field(default=None, gt=0, description="Care time budget per day")


# =============================================================================
# Task variants
# =============================================================================


class _TaskBase(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)


class IdentifyTask(_TaskBase):
    kind: Literal["identify"] = "identify"
    image: ImagePayload


class DiagnoseTask(_TaskBase):
    kind: Literal["diagnose"] = "diagnose"
    image: ImagePayload
    plant: PlantSnapshot | None = None
    symptoms: str | None = Field(default=None, description="Symptoms described by the user")


class PersonalizedAdviceTask(_TaskBase):
    kind: Literal["personalized_advice"] = "personalized_advice"
    plant: PlantSnapshot
    history: list[CareEventSummary] = Field(default_factory=list)
    environment: EnvironmentContext = Field(default_factory=EnvironmentContext)


class SeasonalGuideTask(_TaskBase):
    kind: Literal["seasonal_guide"] = "seasonal_guide"
    plants: list[PlantSnapshot] = Field(..., min_length=1)
    location: str = Field(..., min_length=1)
    season: str | None = None


class ArrangementTask(_TaskBase):
    kind: Literal["arrangement"] = "arrangement"
    plants: list[PlantSnapshot] = Field(..., min_length=1)
    space_type: str = Field(..., min_length=1, description="e.g. living room, balcony")
    space_size: str = Field(..., min_length=1, description="e.g. small, medium, large")
    additional_notes: str | None = None


class JournalEntryTask(_TaskBase):
    kind: Literal["journal_entry"] = "journal_entry"
    plant: PlantSnapshot
    care_type: str
    timestamp: datetime
    notes: str | None = None
    history_digest: str = ""
    image: ImagePayload | None = None


class GrowthAnalysisTask(_TaskBase):
    kind: Literal["growth_analysis"] = "growth_analysis"
    plant: PlantSnapshot
    images: list[ImagePayload] = Field(..., min_length=2, description="Photos ordered oldest to newest")
    image_dates: list[datetime] = Field(default_factory=list)

    @field_validator("image_dates")
    @classmethod
    def _dates_match_images(cls, v, info):
        images = info.data.get("images")
        if v and images is not None and len(v) != len(images):
            raise ValueError("image_dates must have one entry per image")
        return v


class CareAnswerTask(_TaskBase):
    kind: Literal["care_answer"] = "care_answer"
    question: str = Field(..., min_length=3)
    plants: list[PlantSnapshot] = Field(default_factory=list)


class OptimizedScheduleTask(_TaskBase):
    kind: Literal["optimized_schedule"] = "optimized_schedule"
    plants: list[PlantSnapshot] = Field(..., min_length=1)
    availability: UserAvailability


class CommunityInsightsTask(_TaskBase):
    kind: Literal["community_insights"] = "community_insights"
    plant_type: str = Field(..., min_length=3)


class IdentityVerifyTask(_TaskBase):
    kind: Literal["identity_verify"] = "identity_verify"
    image: ImagePayload
    expected_name: str = Field(..., min_length=1)
    expected_scientific_name: str | None = None


class LightLevelTask(_TaskBase):
    kind: Literal["light_level"] = "light_level"
    image: ImagePayload


AdvisoryTaskRequest = Annotated[
    Union[
        IdentifyTask,
        DiagnoseTask,
        PersonalizedAdviceTask,
        SeasonalGuideTask,
        ArrangementTask,
        JournalEntryTask,
        GrowthAnalysisTask,
        CareAnswerTask,
        OptimizedScheduleTask,
        CommunityInsightsTask,
        IdentityVerifyTask,
        LightLevelTask,
    ],
    Field(discriminator="kind"),
]

_task_adapter: TypeAdapter = TypeAdapter(AdvisoryTaskRequest)


def parse_task(payload: dict[str, Any]) -> AdvisoryTaskRequest:
    """Validate a raw dict into the matching task variant."""
    return _task_adapter.validate_python(payload)
