"""
Advisory Prompts
================
System prompts and user-message builders for every advisory task.

Each system prompt pins the JSON shape the response validator expects;
the user message carries the request context (plant snapshot, environment,
history). Images are attached separately by the orchestrator.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Callable

from plantcare.schemas.advisory import (
    ArrangementTask,
    CareAnswerTask,
    CommunityInsightsTask,
    DiagnoseTask,
    GrowthAnalysisTask,
    IdentifyTask,
    IdentityVerifyTask,
    JournalEntryTask,
    LightLevelTask,
    OptimizedScheduleTask,
    PersonalizedAdviceTask,
    PlantSnapshot,
    SeasonalGuideTask,
)
from plantcare.utils.time import format_date


@dataclass(frozen=True)
class Prompt:
    system: str
    user: str


_JSON_ONLY = "Respond ONLY with valid JSON. No markdown fences."

# ---------------------------------------------------------------------------
# System prompts
# ---------------------------------------------------------------------------

IDENTIFY_SYSTEM_PROMPT = f"""\
You are a plant identification expert. Analyze the image and identify the plant.
Return a JSON object with the following fields:
- plantType: one of "tropical", "succulent", "herb", "flowering", "fern", "other"
- commonName: the common name of the plant
- scientificName: the scientific name of the plant
- careRecommendations: an object containing
  - waterFrequency: number of days between watering (e.g. 7 for weekly)
  - sunlightLevel: one of "low", "medium", "high"
  - fertilizerFrequency: number of days between fertilizing (e.g. 30 for monthly)
  - additionalCare: a short string with special care instructions
- confidence: "high", "medium" or "low" based on your confidence in the identification
{_JSON_ONLY}"""

DIAGNOSE_SYSTEM_PROMPT = f"""\
You are a plant pathologist. Examine the photo for signs of disease, pests,
nutrient problems or environmental stress.
Return a JSON object with:
- issue: short name of the main problem
- cause: the most likely cause
- solution: concrete treatment steps
- preventionTips: list of short prevention tips
- severity: "low", "medium" or "high"
- confidenceLevel: "low", "medium" or "high"
{_JSON_ONLY}"""

PERSONALIZED_ADVICE_SYSTEM_PROMPT = f"""\
You are a personal plant care coach. Use the plant details, care history and
environment to produce advice tailored to this specific plant.
Return a JSON object with:
- careActions: {{"immediate": [..], "thisWeek": [..], "thisMonth": [..]}}
- observationTips: list of things to watch for
- growthExpectations: what growth to expect in the coming weeks
- seasonalAdjustments: how care should change with the season
- commonProblems: list of {{"issue", "symptoms", "solution"}}
- successMetrics: list of signs the plant is thriving
{_JSON_ONLY}"""

SEASONAL_GUIDE_SYSTEM_PROMPT = f"""\
You are a horticulturist writing a seasonal care guide for a home plant
collection in a specific location.
Return a JSON object with:
- season: the season the guide applies to
- generalRecommendations: a short paragraph of collection-wide advice
- plants: list of {{"name", "scientificName", "watering", "light",
  "fertilizing", "pruning", "specialCare"}}, one per plant
{_JSON_ONLY}"""

ARRANGEMENT_SYSTEM_PROMPT = f"""\
You are an interior plant designer. Arrange the plants in the described space
so that they look good and get the conditions they need.
Return a JSON object with:
- recommendations: {{"grouping", "placement", "aesthetics", "careConsiderations"}},
  each a short paragraph
- plantGroups: list of {{"name", "plants", "location", "notes"}}
- visualDescription: a short description of the finished arrangement
{_JSON_ONLY}"""

JOURNAL_ENTRY_SYSTEM_PROMPT = f"""\
You are a plant journaling assistant. Write a journal entry for a care event
using the photo, the event details and the plant's recent care history.
Return a JSON object with:
- title: short entry title
- observations: list of observations about the plant in the photo
- growthProgress: assessment of growth since earlier entries
- narrative: a short first-person journal paragraph
- careDetails: what was done during this care event
- nextSteps: list of suggested next care steps
{_JSON_ONLY}"""

GROWTH_ANALYSIS_SYSTEM_PROMPT = f"""\
You are a plant growth analyst. Compare the plant photos, which are ordered
from oldest to newest, and assess how the plant has developed.
Return a JSON object with:
- growthAssessment: overall assessment of growth between the photos
- healthChanges: changes in health between the photos
- growthRate: "slow", "moderate" or "fast"
- potentialIssues: list of possible problems
- recommendations: list of care recommendations
- comparisonNotes: specific differences noticed between the photos
{_JSON_ONLY}"""

CARE_ANSWER_SYSTEM_PROMPT = f"""\
You are a friendly plant care expert answering a question from a home grower.
Return a JSON object with:
- answer: a direct, practical answer
- recommendations: list of follow-up recommendations
- relatedPlants: list of plant names the answer also applies to
- additionalResources: list of topics worth reading about
- confidenceLevel: "low", "medium" or "high"
{_JSON_ONLY}"""

OPTIMIZED_SCHEDULE_SYSTEM_PROMPT = f"""\
You are a plant care planner. Build a weekly care schedule for the plants that
fits the user's availability and groups tasks efficiently.
Return a JSON object with:
- schedule: list of {{"day", "tasks": [{{"plantName", "careType",
  "estimatedTime", "instructions"}}]}}
- specialNotes: list of notes about plants with unusual needs
- efficiencyTips: list of tips to save time
{_JSON_ONLY}"""

COMMUNITY_INSIGHTS_SYSTEM_PROMPT = f"""\
You are summarizing what experienced growers have learned about a plant type.
Return a JSON object with:
- plantType: the plant type discussed
- bestPractices: {{"watering", "light", "soil", "fertilizing"}}
- commonIssues: list of {{"issue", "frequency", "solutions"}}
- successPatterns: list of patterns shared by successful growers
- overallRecommendations: a short summary
{_JSON_ONLY}"""

IDENTITY_VERIFY_SYSTEM_PROMPT = f"""\
You check whether a photo shows the plant it is claimed to show.
Return a JSON object with:
- matches: true if the photo shows the expected plant, false otherwise
- confidence: "low", "medium" or "high"
- detectedPlant: the plant you see when it does not match, otherwise null
{_JSON_ONLY}"""

LIGHT_LEVEL_SYSTEM_PROMPT = f"""\
You are a plant lighting expert. Analyze the provided plant image to determine
the light level the plant is currently receiving.
Return a JSON object with:
- sunlightLevel: "low", "medium" or "high"
- confidence: "low", "medium" or "high"
{_JSON_ONLY}"""


# ---------------------------------------------------------------------------
# User message builders
# ---------------------------------------------------------------------------


def _plant_block(plant: PlantSnapshot) -> str:
    lines = [f"Plant: {plant.describe()}"]
    if plant.location:
        lines.append(f"Location: {plant.location}")
    if plant.sunlight_level:
        lines.append(f"Sunlight: {plant.sunlight_level}")
    if plant.water_frequency_days:
        lines.append(f"Watering every {plant.water_frequency_days} days")
    if plant.fertilizer_frequency_days:
        lines.append(f"Fertilizing every {plant.fertilizer_frequency_days} days")
    if plant.last_watered:
        lines.append(f"Last watered: {plant.last_watered}")
    if plant.next_watering:
        lines.append(f"Next watering due: {plant.next_watering}")
    if plant.status:
        lines.append(f"Status: {plant.status}")
    if plant.notes:
        lines.append(f"Notes: {plant.notes}")
    return "\n".join(lines)


def _identify(task: IdentifyTask, degraded: bool) -> str:
    return "Identify this plant and provide care recommendations."


def _diagnose(task: DiagnoseTask, degraded: bool) -> str:
    parts = ["Diagnose the health problem shown in this photo."]
    if task.plant:
        parts.append(_plant_block(task.plant))
    if task.symptoms:
        parts.append(f"Symptoms reported by the owner: {task.symptoms}")
    return "\n\n".join(parts)


def _personalized_advice(task: PersonalizedAdviceTask, degraded: bool) -> str:
    parts = [_plant_block(task.plant)]

    if task.history:
        history_lines = [
            f"- {format_date(event.timestamp)}: {event.care_type}" + (f" ({event.notes})" if event.notes else "")
            for event in task.history
        ]
        parts.append("Recent care history:\n" + "\n".join(history_lines))
    else:
        parts.append("No care history recorded yet.")

    env = task.environment
    env_lines = []
    if env.location:
        env_lines.append(f"Location: {env.location}")
    if env.indoor_temperature is not None:
        env_lines.append(f"Indoor temperature: {env.indoor_temperature}")
    if env.humidity is not None:
        env_lines.append(f"Humidity: {env.humidity}%")
    if env.light_conditions:
        env_lines.append(f"Light conditions: {env.light_conditions}")
    if env_lines:
        parts.append("Environment:\n" + "\n".join(env_lines))

    parts.append("Give personalized care advice for this plant.")
    return "\n\n".join(parts)


def _seasonal_guide(task: SeasonalGuideTask, degraded: bool) -> str:
    plant_lines = "\n".join(f"- {plant.describe()}" for plant in task.plants)
    season = task.season or "the current season"
    return f"Location: {task.location}\nSeason: {season}\n\nPlants:\n{plant_lines}\n\nWrite a care guide for {season}."


def _arrangement(task: ArrangementTask, degraded: bool) -> str:
    plant_lines = "\n".join(
        f"- {plant.describe()}" + (f", sunlight {plant.sunlight_level}" if plant.sunlight_level else "")
        for plant in task.plants
    )
    parts = [f"Space: {task.space_type} ({task.space_size})", f"Plants:\n{plant_lines}"]
    if task.additional_notes:
        parts.append(f"Additional notes: {task.additional_notes}")
    parts.append("Design an arrangement for these plants.")
    return "\n\n".join(parts)


def _journal_entry(task: JournalEntryTask, degraded: bool) -> str:
    parts = [
        _plant_block(task.plant),
        f"Care event: {task.care_type} on {format_date(task.timestamp)}",
    ]
    if task.notes:
        parts.append(f"Owner notes: {task.notes}")
    parts.append("Recent care history (oldest first):\n" + (task.history_digest or "none recorded"))
    parts.append("Write a journal entry for this care event.")
    return "\n\n".join(parts)


def _growth_analysis(task: GrowthAnalysisTask, degraded: bool) -> str:
    parts = [_plant_block(task.plant)]
    if task.image_dates:
        parts.append(
            f"Photos taken between {format_date(task.image_dates[0])} and {format_date(task.image_dates[-1])}."
        )
    if degraded:
        parts.append(
            "The photos could not be processed, so no images are attached. "
            "Base the analysis on the plant details above, say clearly that no "
            "visual comparison was possible, and keep growthRate at \"moderate\" "
            "unless the details strongly suggest otherwise."
        )
    else:
        parts.append("The first photo is the oldest and the second is the newest. Analyze the growth between them.")
    return "\n\n".join(parts)


def _care_answer(task: CareAnswerTask, degraded: bool) -> str:
    parts = [f"Question: {task.question}"]
    if task.plants:
        parts.append("The user owns:\n" + "\n".join(f"- {plant.describe()}" for plant in task.plants))
    return "\n\n".join(parts)


def _optimized_schedule(task: OptimizedScheduleTask, degraded: bool) -> str:
    plants = [
        {
            "name": plant.name,
            "waterFrequencyDays": plant.water_frequency_days,
            "fertilizerFrequencyDays": plant.fertilizer_frequency_days,
            "nextWatering": plant.next_watering,
            "nextFertilizing": plant.next_fertilizing,
        }
        for plant in task.plants
    ]
    availability = task.availability.model_dump(exclude_none=True)
    return (
        "Plants:\n"
        + json.dumps(plants, indent=2)
        + "\n\nAvailability:\n"
        + json.dumps(availability, indent=2)
        + "\n\nCreate an optimized weekly care schedule."
    )


def _community_insights(task: CommunityInsightsTask, degraded: bool) -> str:
    return f"Summarize community knowledge about growing {task.plant_type}."


def _identity_verify(task: IdentityVerifyTask, degraded: bool) -> str:
    expected = task.expected_name
    if task.expected_scientific_name:
        expected += f" ({task.expected_scientific_name})"
    return f"The owner says this photo shows: {expected}. Does it?"


def _light_level(task: LightLevelTask, degraded: bool) -> str:
    return "Analyze the light level this plant is receiving."


_SYSTEM_PROMPTS: dict[str, str] = {
    "identify": IDENTIFY_SYSTEM_PROMPT,
    "diagnose": DIAGNOSE_SYSTEM_PROMPT,
    "personalized_advice": PERSONALIZED_ADVICE_SYSTEM_PROMPT,
    "seasonal_guide": SEASONAL_GUIDE_SYSTEM_PROMPT,
    "arrangement": ARRANGEMENT_SYSTEM_PROMPT,
    "journal_entry": JOURNAL_ENTRY_SYSTEM_PROMPT,
    "growth_analysis": GROWTH_ANALYSIS_SYSTEM_PROMPT,
    "care_answer": CARE_ANSWER_SYSTEM_PROMPT,
    "optimized_schedule": OPTIMIZED_SCHEDULE_SYSTEM_PROMPT,
    "community_insights": COMMUNITY_INSIGHTS_SYSTEM_PROMPT,
    "identity_verify": IDENTITY_VERIFY_SYSTEM_PROMPT,
    "light_level": LIGHT_LEVEL_SYSTEM_PROMPT,
}

_USER_BUILDERS: dict[str, Callable] = {
    "identify": _identify,
    "diagnose": _diagnose,
    "personalized_advice": _personalized_advice,
    "seasonal_guide": _seasonal_guide,
    "arrangement": _arrangement,
    "journal_entry": _journal_entry,
    "growth_analysis": _growth_analysis,
    "care_answer": _care_answer,
    "optimized_schedule": _optimized_schedule,
    "community_insights": _community_insights,
    "identity_verify": _identity_verify,
    "light_level": _light_level,
}


def build_prompt(task, *, degraded: bool = False) -> Prompt:
    """Build the system prompt and user message for a task."""
    return Prompt(system=_SYSTEM_PROMPTS[task.kind], user=_USER_BUILDERS[task.kind](task, degraded))
