"""
Advisory Response Validator
===========================
Turns a parsed model payload into a complete, well-typed result for its task.

One declarative table, :data:`TASK_SCHEMAS`, lists the fields of every task
kind. :class:`ResponseValidator` walks it generically:

* a **required** field that is absent or of the wrong type makes the whole
  result unusable and raises :class:`MalformedResult`;
* an **optional** field that is absent or invalid is replaced wholesale by
  its default;
* enum values outside their domain are replaced, never corrected;
* nested objects are validated recursively, and items of object lists that
  miss their own required fields are dropped.

Unknown keys in the payload are discarded.
"""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass
from typing import Any

from plantcare.constants import DEFAULT_DIAGNOSIS_SOLUTION, DEFAULT_PREVENTION_TIPS
from plantcare.domain.exceptions import MalformedResult
from plantcare.enums.common import ConfidenceLevel, GrowthRate, PlantCategory, Severity, SunlightLevel

logger = logging.getLogger(__name__)

# Field kinds
TEXT = "text"  # non-blank string when required, any string when optional
NUMBER = "number"  # positive number, stored as int
BOOL = "bool"
ENUM = "enum"
TEXT_LIST = "text_list"  # list of strings
OBJECT = "object"
OBJECT_LIST = "object_list"

_MISSING = object()


@dataclass(frozen=True)
class FieldSpec:
    """One field of a task result."""

    name: str
    kind: str
    required: bool = False
    default: Any = None
    choices: tuple[str, ...] = ()
    fields: tuple["FieldSpec", ...] = ()

    def default_value(self) -> Any:
        return copy.deepcopy(self.default)


def _values(enum_cls) -> tuple[str, ...]:
    return tuple(member.value for member in enum_cls)


def _text(name: str, *, required: bool = False, default: Any = "") -> FieldSpec:
    return FieldSpec(name, TEXT, required=required, default=default)


def _text_list(name: str, *, required: bool = False, default: Any = ()) -> FieldSpec:
    return FieldSpec(name, TEXT_LIST, required=required, default=list(default))


def _enum(name: str, enum_cls, default: str | None = None, *, required: bool = False) -> FieldSpec:
    return FieldSpec(name, ENUM, required=required, default=default, choices=_values(enum_cls))


def _object(name: str, *fields: FieldSpec, required: bool = False) -> FieldSpec:
    return FieldSpec(name, OBJECT, required=required, default={}, fields=fields)


def _object_list(name: str, *fields: FieldSpec, required: bool = False) -> FieldSpec:
    return FieldSpec(name, OBJECT_LIST, required=required, default=[], fields=fields)


# ---------------------------------------------------------------------------
# Task schemas
# ---------------------------------------------------------------------------

TASK_SCHEMAS: dict[str, tuple[FieldSpec, ...]] = {
    "identify": (
        _text("commonName", required=True),
        _object(
            "careRecommendations",
            FieldSpec("waterFrequency", NUMBER, default=7),
            _enum("sunlightLevel", SunlightLevel, "medium"),
            FieldSpec("fertilizerFrequency", NUMBER, default=30),
            _text("additionalCare"),
            required=True,
        ),
        _enum("plantType", PlantCategory, "other"),
        _text("scientificName"),
        _enum("confidence", ConfidenceLevel, "medium"),
    ),
    "diagnose": (
        _text("issue", required=True),
        _text("cause", required=True),
        _text("solution", default=DEFAULT_DIAGNOSIS_SOLUTION),
        _text_list("preventionTips", default=DEFAULT_PREVENTION_TIPS),
        _enum("severity", Severity, "medium"),
        _enum("confidenceLevel", ConfidenceLevel, "medium"),
    ),
    "personalized_advice": (
        _object(
            "careActions",
            _text_list("immediate"),
            _text_list("thisWeek"),
            _text_list("thisMonth"),
            required=True,
        ),
        _text_list("observationTips"),
        _text("growthExpectations"),
        _text("seasonalAdjustments"),
        _object_list(
            "commonProblems",
            _text("issue", required=True),
            _text("symptoms"),
            _text("solution"),
        ),
        _text_list("successMetrics"),
    ),
    "seasonal_guide": (
        _text("generalRecommendations", required=True),
        _object_list(
            "plants",
            _text("name", required=True),
            _text("scientificName"),
            _text("watering"),
            _text("light"),
            _text("fertilizing"),
            _text("pruning"),
            _text("specialCare"),
            required=True,
        ),
        _text("season"),
    ),
    "arrangement": (
        _object(
            "recommendations",
            _text("grouping"),
            _text("placement"),
            _text("aesthetics"),
            _text("careConsiderations"),
            required=True,
        ),
        _object_list(
            "plantGroups",
            _text("name", required=True),
            _text_list("plants"),
            _text("location"),
            _text("notes"),
        ),
        _text("visualDescription"),
    ),
    "journal_entry": (
        _text("title", required=True),
        _text_list("observations", required=True),
        _text("growthProgress", required=True),
        _text("narrative"),
        _text("careDetails"),
        _text_list("nextSteps"),
    ),
    "growth_analysis": (
        _text("growthAssessment", required=True),
        _text("healthChanges"),
        _enum("growthRate", GrowthRate, "moderate"),
        _text_list("potentialIssues"),
        _text_list("recommendations"),
        _text("comparisonNotes"),
    ),
    "care_answer": (
        _text("answer", required=True),
        _text_list("recommendations"),
        _text_list("relatedPlants"),
        _text_list("additionalResources"),
        _enum("confidenceLevel", ConfidenceLevel, "medium"),
    ),
    "optimized_schedule": (
        _object_list(
            "schedule",
            _text("day", required=True),
            _object_list(
                "tasks",
                _text("plantName", required=True),
                _text("careType"),
                _text("estimatedTime"),
                _text("instructions"),
            ),
            required=True,
        ),
        _text_list("specialNotes"),
        _text_list("efficiencyTips"),
    ),
    "community_insights": (
        _object(
            "bestPractices",
            _text("watering"),
            _text("light"),
            _text("soil"),
            _text("fertilizing"),
            required=True,
        ),
        _text("plantType"),
        _object_list(
            "commonIssues",
            _text("issue", required=True),
            _text("frequency"),
            _text_list("solutions"),
        ),
        _text_list("successPatterns"),
        _text("overallRecommendations"),
    ),
    "identity_verify": (
        FieldSpec("matches", BOOL, required=True),
        _enum("confidence", ConfidenceLevel, "low"),
        _text("detectedPlant", default=None),
    ),
    "light_level": (
        _enum("sunlightLevel", SunlightLevel, required=True),
        _enum("confidence", ConfidenceLevel, "low"),
    ),
}


# ---------------------------------------------------------------------------
# Validator
# ---------------------------------------------------------------------------


class ResponseValidator:
    """Validates parsed payloads against :data:`TASK_SCHEMAS`."""

    def __init__(self, schemas: dict[str, tuple[FieldSpec, ...]] | None = None):
        self._schemas = schemas if schemas is not None else TASK_SCHEMAS

    def validate(self, kind: str, data: Any) -> dict[str, Any]:
        """
        Return a complete result for ``kind``.

        Raises
        ------
        MalformedResult
            A required field is absent or has the wrong type.
        KeyError
            ``kind`` has no schema.
        """
        specs = self._schemas[str(kind)]
        if not isinstance(data, dict):
            raise MalformedResult(str(kind), [spec.name for spec in specs if spec.required])

        result, missing = self._validate_object(specs, data)
        if missing:
            logger.warning("Rejecting %s result; missing or invalid: %s", kind, ", ".join(missing))
            raise MalformedResult(str(kind), missing)
        return result

    # -- internal -----------------------------------------------------------

    def _validate_object(self, specs: tuple[FieldSpec, ...], data: dict) -> tuple[dict[str, Any], list[str]]:
        result: dict[str, Any] = {}
        missing: list[str] = []

        for spec in specs:
            value, ok, nested_missing = self._check(spec, data.get(spec.name, _MISSING))
            if ok:
                result[spec.name] = value
            elif spec.required:
                missing.extend(nested_missing or [spec.name])
            else:
                if spec.name in data:
                    logger.debug("Replacing invalid %s=%r with default", spec.name, data[spec.name])
                result[spec.name] = spec.default_value()

        return result, missing

    def _check(self, spec: FieldSpec, value: Any) -> tuple[Any, bool, list[str]]:
        """Return ``(clean_value, ok, nested_missing)``."""
        if value is _MISSING or value is None:
            return None, False, []

        if spec.kind == TEXT:
            if not isinstance(value, str):
                return None, False, []
            if spec.required and not value.strip():
                return None, False, []
            return value, True, []

        if spec.kind == NUMBER:
            if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
                return None, False, []
            return int(round(value)), True, []

        if spec.kind == BOOL:
            return value, isinstance(value, bool), []

        if spec.kind == ENUM:
            return value, isinstance(value, str) and value in spec.choices, []

        if spec.kind == TEXT_LIST:
            if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
                return None, False, []
            return list(value), True, []

        if spec.kind == OBJECT:
            if not isinstance(value, dict):
                return None, False, []
            nested, nested_missing = self._validate_object(spec.fields, value)
            if nested_missing:
                return None, False, [f"{spec.name}.{name}" for name in nested_missing]
            return nested, True, []

        if spec.kind == OBJECT_LIST:
            if not isinstance(value, list):
                return None, False, []
            items = []
            for item in value:
                if not isinstance(item, dict):
                    continue
                nested, nested_missing = self._validate_object(spec.fields, item)
                if nested_missing:
                    logger.debug("Dropping %s item missing %s", spec.name, ", ".join(nested_missing))
                    continue
                items.append(nested)
            return items, True, []

        raise ValueError(f"Unknown field kind: {spec.kind}")
