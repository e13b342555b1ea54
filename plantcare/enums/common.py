"""
Common Enumerations
====================

Enums shared by the care scheduler and the advisory layer.
"""

from enum import Enum


class ConfidenceLevel(str, Enum):
    """
    Certainty expressed by the inference service.
    Used by: identification, diagnosis, identity verification, light analysis
    """
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    def __str__(self) -> str:
        return self.value


class Severity(str, Enum):
    """Severity of a diagnosed plant health issue."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    def __str__(self) -> str:
        return self.value


class SunlightLevel(str, Enum):
    """Light a plant needs or currently receives."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    def __str__(self) -> str:
        return self.value


class GrowthRate(str, Enum):
    """Growth rate reported by the growth analysis task."""
    SLOW = "slow"
    MODERATE = "moderate"
    FAST = "fast"

    def __str__(self) -> str:
        return self.value


class PlantCategory(str, Enum):
    """Broad plant categories returned by identification."""
    TROPICAL = "tropical"
    SUCCULENT = "succulent"
    HERB = "herb"
    FLOWERING = "flowering"
    FERN = "fern"
    OTHER = "other"

    def __str__(self) -> str:
        return self.value


class CareType(str, Enum):
    """
    Kinds of care events recorded in a plant's care log.
    Used by: care log entries, reminders, journal enrichment
    """
    WATER = "water"
    FERTILIZE = "fertilize"
    REPOT = "repot"
    PRUNE = "prune"
    HEALTH_CHECK = "health_check"
    OTHER = "other"

    def __str__(self) -> str:
        return self.value


class AdvisoryTaskKind(str, Enum):
    """
    AI-backed request kinds. Each has its own prompt and result schema.
    """
    IDENTIFY = "identify"
    DIAGNOSE = "diagnose"
    PERSONALIZED_ADVICE = "personalized_advice"
    SEASONAL_GUIDE = "seasonal_guide"
    ARRANGEMENT = "arrangement"
    JOURNAL_ENTRY = "journal_entry"
    GROWTH_ANALYSIS = "growth_analysis"
    CARE_ANSWER = "care_answer"
    OPTIMIZED_SCHEDULE = "optimized_schedule"
    COMMUNITY_INSIGHTS = "community_insights"
    IDENTITY_VERIFY = "identity_verify"
    LIGHT_LEVEL = "light_level"

    def __str__(self) -> str:
        return self.value
