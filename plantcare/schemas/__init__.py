"""
Schemas Package
===============

Pydantic models for advisory task requests.
"""

from plantcare.schemas.advisory import (
    AdvisoryTaskRequest,
    ArrangementTask,
    CareAnswerTask,
    CareEventSummary,
    CommunityInsightsTask,
    DayAvailability,
    DiagnoseTask,
    EnvironmentContext,
    GrowthAnalysisTask,
    IdentifyTask,
    IdentityVerifyTask,
    JournalEntryTask,
    LightLevelTask,
    OptimizedScheduleTask,
    PersonalizedAdviceTask,
    PlantSnapshot,
    SeasonalGuideTask,
    UserAvailability,
    parse_task,
)

__all__ = [
    "AdvisoryTaskRequest",
    "ArrangementTask",
    "CareAnswerTask",
    "CareEventSummary",
    "CommunityInsightsTask",
    "DayAvailability",
    "DiagnoseTask",
    "EnvironmentContext",
    "GrowthAnalysisTask",
    "IdentifyTask",
    "IdentityVerifyTask",
    "JournalEntryTask",
    "LightLevelTask",
    "OptimizedScheduleTask",
    "PersonalizedAdviceTask",
    "PlantSnapshot",
    "SeasonalGuideTask",
    "UserAvailability",
    "parse_task",
]
