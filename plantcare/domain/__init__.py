"""
Domain Package
==============
Plant care records, care log entities and the care schedule calculator.
"""

from .care_log import CareLogEntry, EnrichedJournalEntry, IdentityCheck
from .care_schedule import CareScheduleCalculator
from .plant_profile import CareDates, CarePartition, PlantCareProfile

__all__ = [
    "CareDates",
    "CareLogEntry",
    "CarePartition",
    "CareScheduleCalculator",
    "EnrichedJournalEntry",
    "IdentityCheck",
    "PlantCareProfile",
]
