"""
Plant Care Service
==================
Care-schedule views over the plant store: which plants need attention now,
plant records with their derived due-dates, and the reminder due-date after
a care event.
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import TYPE_CHECKING, Any

from plantcare.domain.care_schedule import CareScheduleCalculator
from plantcare.domain.exceptions import NotFoundError
from plantcare.utils.time import coerce_datetime

if TYPE_CHECKING:
    from plantcare.domain.care_log import CareLogEntry
    from plantcare.domain.plant_profile import CarePartition, PlantCareProfile
    from plantcare.services.protocols import PlantRecordReader

logger = logging.getLogger(__name__)


def _iso(value: Any) -> str | None:
    parsed = coerce_datetime(value)
    return parsed.isoformat() if parsed else None


class PlantCareService:
    def __init__(
        self,
        plant_reader: "PlantRecordReader",
        calculator: CareScheduleCalculator | None = None,
    ):
        self.plant_reader = plant_reader
        self.calculator = calculator or CareScheduleCalculator()

    def plants_needing_care(
        self,
        user_id: int,
        now: datetime | date | str | None = None,
    ) -> "CarePartition":
        """Partition a user's plants into those due for water / fertilizer."""
        plants = self.plant_reader.get_plants(user_id)
        partition = self.calculator.partition_by_care_needed(plants, now=now)
        logger.info(
            "User %s: %d of %d plants need water, %d need fertilizer",
            user_id,
            len(partition.needs_water),
            len(plants),
            len(partition.needs_fertilizer),
        )
        return partition

    def with_care_dates(self, plant: "PlantCareProfile") -> dict[str, Any]:
        """Plant record plus derived next watering / fertilizing dates."""
        dates = self.calculator.compute_next_dates(plant)
        return {
            "id": plant.id,
            "name": plant.name,
            "plantType": plant.plant_type,
            "scientificName": plant.scientific_name,
            "location": plant.location,
            "sunlightLevel": plant.sunlight_level,
            "waterFrequencyDays": plant.water_frequency_days,
            "fertilizerFrequencyDays": plant.fertilizer_frequency_days,
            "lastWatered": _iso(plant.last_watered_at),
            "lastFertilized": _iso(plant.last_fertilized_at),
            "nextWatering": dates.next_watering.isoformat() if dates.next_watering else None,
            "nextFertilizing": dates.next_fertilizing.isoformat() if dates.next_fertilizing else None,
            "status": plant.status,
            "notes": plant.notes,
        }

    def get_plant_with_care_dates(self, plant_id: int) -> dict[str, Any]:
        plant = self.plant_reader.get_plant(plant_id)
        if plant is None:
            raise NotFoundError(f"Plant {plant_id} not found", detail={"plant_id": plant_id})
        return self.with_care_dates(plant)

    def reminder_due_after_care(self, plant: "PlantCareProfile", log: "CareLogEntry") -> datetime | None:
        """Due date for the follow-up reminder once ``log`` is recorded."""
        due = self.calculator.next_due_after_care(plant, log.care_type, performed_at=log.timestamp)
        if due is not None:
            logger.debug("Next %s for plant %s due %s", log.care_type, plant.id, due.isoformat())
        return due
