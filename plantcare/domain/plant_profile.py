"""
PlantCareProfile - Thin data model for a plant's care settings
==============================================================

Holds the care-relevant fields of a plant record as data only. The record is
owned by the persistence layer; this core only reads from it and derives the
next due-dates (see :mod:`plantcare.domain.care_schedule`).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Union

# Anchor dates arrive as whatever the store hands back and may be unparseable.
AnchorDate = Union[datetime, date, str, None]


@dataclass
class PlantCareProfile:
    """Care settings and anchor dates for one plant."""

    id: int
    name: str
    water_frequency_days: int
    fertilizer_frequency_days: int = 0  # 0 means "no fertilizer schedule"
    last_watered_at: AnchorDate = None
    last_fertilized_at: AnchorDate = None
    created_at: AnchorDate = None
    plant_type: str | None = None
    scientific_name: str | None = None
    location: str | None = None
    sunlight_level: str | None = None
    status: str | None = None
    notes: str | None = None
    user_id: int | None = None

    def __post_init__(self) -> None:
        self.water_frequency_days = int(self.water_frequency_days)
        self.fertilizer_frequency_days = int(self.fertilizer_frequency_days or 0)
        if self.water_frequency_days <= 0:
            raise ValueError("water_frequency_days must be greater than 0")
        if self.fertilizer_frequency_days < 0:
            raise ValueError("fertilizer_frequency_days cannot be negative")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PlantCareProfile":
        """Build a profile from a store row using either snake_case or camelCase keys."""

        def pick(*keys: str, default: Any = None) -> Any:
            for key in keys:
                if key in data and data[key] is not None:
                    return data[key]
            return default

        return cls(
            id=pick("id", "plant_id"),
            name=pick("name", default=""),
            water_frequency_days=pick("water_frequency_days", "waterFrequencyDays", "waterFrequency"),
            fertilizer_frequency_days=pick(
                "fertilizer_frequency_days", "fertilizerFrequencyDays", "fertilizerFrequency", default=0
            ),
            last_watered_at=pick("last_watered_at", "lastWateredAt", "lastWatered"),
            last_fertilized_at=pick("last_fertilized_at", "lastFertilizedAt", "lastFertilized"),
            created_at=pick("created_at", "createdAt"),
            plant_type=pick("plant_type", "type"),
            scientific_name=pick("scientific_name", "scientificName"),
            location=pick("location"),
            sunlight_level=pick("sunlight_level", "sunlightLevel"),
            status=pick("status"),
            notes=pick("notes"),
            user_id=pick("user_id", "userId"),
        )


@dataclass(frozen=True)
class CareDates:
    """Derived next due-dates for a plant. Never stored."""

    next_watering: datetime | None = None
    next_fertilizing: datetime | None = None

    def to_dict(self) -> dict[str, str | None]:
        return {
            "next_watering": self.next_watering.isoformat() if self.next_watering else None,
            "next_fertilizing": self.next_fertilizing.isoformat() if self.next_fertilizing else None,
        }


@dataclass
class CarePartition:
    """Plants grouped by the care they need right now."""

    needs_water: list[PlantCareProfile] = field(default_factory=list)
    needs_fertilizer: list[PlantCareProfile] = field(default_factory=list)

    def to_dict(self) -> dict[str, list[int]]:
        return {
            "needs_water": [p.id for p in self.needs_water],
            "needs_fertilizer": [p.id for p in self.needs_fertilizer],
        }
