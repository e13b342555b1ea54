"""
Care Schedule Domain Service
============================
Pure date arithmetic over plant care records: next watering/fertilizing
dates and which plants need care right now.

Bad input never raises. An anchor date that does not parse yields ``None``
for the derived date (best effort), so one broken record cannot break a
whole collection view.

Usage:
    calculator = CareScheduleCalculator()
    dates = calculator.compute_next_dates(profile)
    partition = calculator.partition_by_care_needed(profiles, now=utc_now())
"""

import logging
from datetime import date, datetime, timedelta
from typing import Any, Iterable

from plantcare.domain.plant_profile import CareDates, CarePartition, PlantCareProfile
from plantcare.enums.common import CareType
from plantcare.utils.time import coerce_datetime, utc_now

logger = logging.getLogger(__name__)


def _add_days(anchor: Any, days: int) -> datetime | None:
    parsed = coerce_datetime(anchor)
    if parsed is None:
        return None
    return parsed + timedelta(days=days)


class CareScheduleCalculator:
    """Computes care due-dates from plant care profiles."""

    def compute_next_dates(self, profile: PlantCareProfile) -> CareDates:
        """
        Derive the next watering and fertilizing dates.

        The anchor is the last care date when it parses, otherwise the plant's
        creation date. ``next_fertilizing`` is always ``None`` when the plant
        has no fertilizer schedule.
        """
        next_watering = self._next_from_anchors(
            profile.last_watered_at, profile.created_at, profile.water_frequency_days
        )

        next_fertilizing = None
        if profile.fertilizer_frequency_days > 0:
            next_fertilizing = self._next_from_anchors(
                profile.last_fertilized_at, profile.created_at, profile.fertilizer_frequency_days
            )

        if next_watering is None:
            logger.debug("Plant %s has no parseable watering anchor", profile.id)

        return CareDates(next_watering=next_watering, next_fertilizing=next_fertilizing)

    def partition_by_care_needed(
        self,
        profiles: Iterable[PlantCareProfile],
        now: datetime | date | str | None = None,
    ) -> CarePartition:
        """
        Split plants into those needing water and those needing fertilizer.

        Due exactly now and overdue are treated the same. A plant can appear
        in both lists.
        """
        reference = coerce_datetime(now) if now is not None else utc_now()
        if reference is None:
            raise ValueError(f"Invalid reference time: {now!r}")

        partition = CarePartition()
        for profile in profiles:
            dates = self.compute_next_dates(profile)
            if dates.next_watering is not None and dates.next_watering <= reference:
                partition.needs_water.append(profile)
            if dates.next_fertilizing is not None and dates.next_fertilizing <= reference:
                partition.needs_fertilizer.append(profile)

        logger.debug(
            "Care partition at %s: %d need water, %d need fertilizer",
            reference.isoformat(),
            len(partition.needs_water),
            len(partition.needs_fertilizer),
        )
        return partition

    def next_due_after_care(
        self,
        profile: PlantCareProfile,
        care_type: CareType | str,
        performed_at: datetime | date | str | None = None,
    ) -> datetime | None:
        """
        Reminder due date after a care event is logged.

        Only watering and fertilizing have schedules; other care types and a
        zero fertilizer frequency return ``None``.
        """
        care_type = CareType(care_type)
        if care_type == CareType.WATER:
            frequency = profile.water_frequency_days
        elif care_type == CareType.FERTILIZE:
            frequency = profile.fertilizer_frequency_days
        else:
            return None

        if frequency <= 0:
            return None
        return _add_days(performed_at if performed_at is not None else utc_now(), frequency)

    # -- internal -----------------------------------------------------------

    @staticmethod
    def _next_from_anchors(last_care: Any, created_at: Any, frequency_days: int) -> datetime | None:
        next_date = _add_days(last_care, frequency_days)
        if next_date is None:
            next_date = _add_days(created_at, frequency_days)
        return next_date
