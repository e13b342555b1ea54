"""
Enums Module
============

Enumeration types for the plant care core.
"""

from plantcare.enums.common import (
    AdvisoryTaskKind,
    CareType,
    ConfidenceLevel,
    GrowthRate,
    PlantCategory,
    Severity,
    SunlightLevel,
)

__all__ = [
    "AdvisoryTaskKind",
    "CareType",
    "ConfidenceLevel",
    "GrowthRate",
    "PlantCategory",
    "Severity",
    "SunlightLevel",
]
