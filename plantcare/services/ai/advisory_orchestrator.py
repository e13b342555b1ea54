"""
Advisory Request Orchestrator
=============================
Runs one advisory task against the inference backend and returns a
validated result.

Per attempt:

1. build the task prompt;
2. run attached images through :class:`ImageIngestPipeline`;
3. call the backend with the task's model and token budget;
4. parse the reply into a JSON object;
5. validate it against the task schema.

Rate limiting is retried with backoff (server hint first, then doubling
delays). A growth analysis whose images cannot be used is retried once in
degraded mode: text only, on the fallback model, with a smaller budget and a
prompt that says the photos were unavailable. Every other failure surfaces
immediately as a typed :class:`AdvisoryError` / :class:`ValidationError`.

Usage
-----
::

    orchestrator = AdvisoryRequestOrchestrator(backend)
    result = orchestrator.identify(photo_bytes)
    print(result.data["commonName"], result.attempts)
"""

from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Any, Callable, Iterable

from plantcare.constants import AdvisoryDefaults, ImageLimits, Models, TokenBudgets
from plantcare.domain.care_log import CareLogEntry
from plantcare.domain.care_schedule import CareScheduleCalculator
from plantcare.domain.exceptions import (
    EmptyContent,
    ImageFormatError,
    MalformedJson,
    PlantCareError,
    RateLimited,
)
from plantcare.domain.plant_profile import PlantCareProfile
from plantcare.schemas.advisory import (
    ArrangementTask,
    CareAnswerTask,
    CareEventSummary,
    CommunityInsightsTask,
    DiagnoseTask,
    EnvironmentContext,
    GrowthAnalysisTask,
    IdentifyTask,
    JournalEntryTask,
    OptimizedScheduleTask,
    PersonalizedAdviceTask,
    PlantSnapshot,
    SeasonalGuideTask,
    UserAvailability,
)
from plantcare.services.ai.llm_backends import InferenceRequest
from plantcare.services.ai.prompts import build_prompt
from plantcare.services.ai.response_validator import ResponseValidator
from plantcare.services.ai.retry_policy import (
    AttemptContext,
    FatalFailure,
    RetryableFailure,
    RetryPolicy,
    Success,
    run_with_retries,
)
from plantcare.utils.images import ImageIngestPipeline, validate_or_none

if TYPE_CHECKING:
    from plantcare.schemas.advisory import AdvisoryTaskRequest, ImagePayload
    from plantcare.services.ai.llm_backends import InferenceBackend

logger = logging.getLogger(__name__)

TOKEN_BUDGETS: dict[str, int] = {
    "identify": TokenBudgets.IDENTIFY,
    "diagnose": TokenBudgets.DIAGNOSE,
    "personalized_advice": TokenBudgets.PERSONALIZED_ADVICE,
    "seasonal_guide": TokenBudgets.SEASONAL_GUIDE,
    "arrangement": TokenBudgets.ARRANGEMENT,
    "journal_entry": TokenBudgets.JOURNAL_ENTRY,
    "growth_analysis": TokenBudgets.GROWTH_ANALYSIS,
    "care_answer": TokenBudgets.CARE_ANSWER,
    "optimized_schedule": TokenBudgets.OPTIMIZED_SCHEDULE,
    "community_insights": TokenBudgets.COMMUNITY_INSIGHTS,
    "identity_verify": TokenBudgets.IDENTITY_VERIFY,
    "light_level": TokenBudgets.LIGHT_LEVEL,
}

# Tasks that may fall back to a text-only request when their images are unusable
DEGRADABLE_TASKS = frozenset({"growth_analysis"})


@dataclass
class AdvisoryResult:
    """Validated outcome of one advisory task."""

    kind: str
    data: dict[str, Any]
    model: str
    attempts: int = 1
    degraded: bool = False
    usage: dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind,
            "data": self.data,
            "model": self.model,
            "attempts": self.attempts,
            "degraded": self.degraded,
        }


def parse_json_payload(text: str | None) -> dict[str, Any]:
    """
    Parse model text into a JSON object.

    Raises
    ------
    EmptyContent
        The text is empty or whitespace.
    MalformedJson
        The text is not a JSON object, even after stripping markdown fences.
    """
    cleaned = (text or "").strip()
    if not cleaned:
        raise EmptyContent("Inference service returned empty content")

    # Strip markdown fences if present
    if cleaned.startswith("```"):
        lines = [ln for ln in cleaned.split("\n") if not ln.strip().startswith("```")]
        cleaned = "\n".join(lines).strip()

    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as exc:
        logger.debug("Unparseable model content: %.500s", cleaned)
        raise MalformedJson(f"Model content is not valid JSON: {exc.msg}") from exc

    if not isinstance(data, dict):
        raise MalformedJson(f"Model content is a JSON {type(data).__name__}, expected an object")
    return data


def task_images(task: "AdvisoryTaskRequest") -> list["ImagePayload"]:
    """Images attached to a task, in the order they are sent."""
    if isinstance(task, GrowthAnalysisTask):
        # Oldest and newest photo only
        return [task.images[0], task.images[-1]][: ImageLimits.MAX_GROWTH_IMAGES]
    image = getattr(task, "image", None)
    return [image] if image is not None else []


class AdvisoryRequestOrchestrator:
    """
    Executes advisory tasks with retries, degradation and validation.

    Parameters
    ----------
    backend:
        The inference backend. Built once at startup.
    model / fallback_model:
        Primary model id and the model used for degraded attempts.
    image_pipeline / validator / policy:
        Collaborators; defaults are created when omitted.
    sleep:
        Called with the backoff delay in seconds between attempts.
    """

    def __init__(
        self,
        backend: "InferenceBackend",
        *,
        model: str = Models.PRIMARY,
        fallback_model: str = Models.FALLBACK,
        temperature: float = AdvisoryDefaults.TEMPERATURE,
        image_pipeline: ImageIngestPipeline | None = None,
        validator: ResponseValidator | None = None,
        policy: RetryPolicy | None = None,
        sleep: Callable[[float], Any] = time.sleep,
    ):
        self._backend = backend
        self._model = model
        self._fallback_model = fallback_model
        self._temperature = temperature
        self._images = image_pipeline or ImageIngestPipeline()
        self._validator = validator or ResponseValidator()
        self._policy = policy or RetryPolicy()
        self._sleep = sleep
        self._calculator = CareScheduleCalculator()

    # -- core ---------------------------------------------------------------

    def execute(self, task: "AdvisoryTaskRequest") -> AdvisoryResult:
        """Run ``task`` to a validated result or raise a typed error."""
        kind = task.kind
        logger.info("Executing %s advisory task", kind)

        def attempt(ctx: AttemptContext):
            try:
                return Success(self._attempt(task, ctx))
            except RateLimited as exc:
                return RetryableFailure(exc, self._policy.backoff_delay(ctx.number, exc.retry_after_s))
            except ImageFormatError as exc:
                if kind in DEGRADABLE_TASKS and not ctx.degraded:
                    return RetryableFailure(exc, 0.0, degrade=True)
                return FatalFailure(exc)
            except PlantCareError as exc:
                return FatalFailure(exc)

        run = run_with_retries(attempt, self._policy, sleep=self._sleep, label=kind)
        result: AdvisoryResult = run.value
        result.attempts = run.attempts
        if result.degraded:
            logger.warning("%s completed in degraded mode on %s", kind, result.model)
        return result

    def _attempt(self, task: "AdvisoryTaskRequest", ctx: AttemptContext) -> AdvisoryResult:
        kind = task.kind
        degraded = ctx.degraded
        prompt = build_prompt(task, degraded=degraded)

        image_urls = [] if degraded else self._images.prepare_many(task_images(task))
        request = InferenceRequest(
            system_prompt=prompt.system,
            user_text=prompt.user,
            model=self._fallback_model if degraded else self._model,
            max_tokens=TokenBudgets.GROWTH_ANALYSIS_DEGRADED if degraded else TOKEN_BUDGETS[kind],
            image_urls=image_urls,
            temperature=self._temperature,
        )
        logger.debug(
            "%s attempt %d: model=%s images=%d max_tokens=%d",
            kind,
            ctx.number,
            request.model,
            len(image_urls),
            request.max_tokens,
        )

        response = self._backend.complete(request)
        logger.debug("%s raw response: %.1000s", kind, response.text)

        payload = parse_json_payload(response.text)
        data = self._validator.validate(kind, payload)
        return AdvisoryResult(
            kind=kind,
            data=data,
            model=response.model or request.model,
            attempts=ctx.number,
            degraded=degraded,
            usage=response.usage,
        )

    # -- convenience operations ---------------------------------------------

    def identify(self, image: "ImagePayload") -> AdvisoryResult:
        return self.execute(IdentifyTask(image=image))

    def diagnose(
        self,
        image: "ImagePayload",
        plant: PlantCareProfile | PlantSnapshot | None = None,
        symptoms: str | None = None,
    ) -> AdvisoryResult:
        snapshot = self._snapshot(plant) if plant is not None else None
        return self.execute(DiagnoseTask(image=image, plant=snapshot, symptoms=symptoms))

    def personalized_advice(
        self,
        plant: PlantCareProfile | PlantSnapshot,
        history: Iterable[CareLogEntry | CareEventSummary] = (),
        environment: EnvironmentContext | None = None,
    ) -> AdvisoryResult:
        events = [CareEventSummary.from_entry(e) if isinstance(e, CareLogEntry) else e for e in history]
        return self.execute(
            PersonalizedAdviceTask(
                plant=self._snapshot(plant),
                history=events,
                environment=environment or EnvironmentContext(),
            )
        )

    def seasonal_guide(
        self,
        plants: Iterable[PlantCareProfile | PlantSnapshot],
        location: str,
        season: str | None = None,
    ) -> AdvisoryResult:
        return self.execute(
            SeasonalGuideTask(plants=[self._snapshot(p) for p in plants], location=location, season=season)
        )

    def arrangement(
        self,
        plants: Iterable[PlantCareProfile | PlantSnapshot],
        space_type: str,
        space_size: str,
        additional_notes: str | None = None,
    ) -> AdvisoryResult:
        return self.execute(
            ArrangementTask(
                plants=[self._snapshot(p) for p in plants],
                space_type=space_type,
                space_size=space_size,
                additional_notes=additional_notes,
            )
        )

    def optimized_schedule(
        self,
        plants: Iterable[PlantCareProfile | PlantSnapshot],
        availability: UserAvailability,
    ) -> AdvisoryResult:
        return self.execute(
            OptimizedScheduleTask(plants=[self._snapshot(p) for p in plants], availability=availability)
        )

    def growth_analysis(
        self,
        plant: PlantCareProfile | PlantSnapshot,
        images: list["ImagePayload"],
        image_dates: list[datetime] | None = None,
    ) -> AdvisoryResult:
        return self.execute(
            GrowthAnalysisTask(plant=self._snapshot(plant), images=images, image_dates=image_dates or [])
        )

    def care_answer(
        self,
        question: str,
        plants: Iterable[PlantCareProfile | PlantSnapshot] = (),
    ) -> AdvisoryResult:
        return self.execute(CareAnswerTask(question=question, plants=[self._snapshot(p) for p in plants]))

    def community_insights(self, plant_type: str) -> AdvisoryResult:
        return self.execute(CommunityInsightsTask(plant_type=plant_type))

    def journal_entry(
        self,
        plant: PlantCareProfile | PlantSnapshot,
        log: CareLogEntry,
        history_digest: str = "",
    ) -> AdvisoryResult:
        # An unusable photo reference (e.g. a URL) means a text-only entry
        image = validate_or_none(log.photo) if log.has_photo else None
        if log.has_photo and image is None:
            logger.warning("Care log %s photo is not an inline image; writing the entry from text only", log.id)
        return self.execute(
            JournalEntryTask(
                plant=self._snapshot(plant),
                care_type=log.care_type.value,
                timestamp=log.timestamp,
                notes=log.notes,
                history_digest=history_digest,
                image=image,
            )
        )

    # -- helpers ------------------------------------------------------------

    def _snapshot(self, plant: PlantCareProfile | PlantSnapshot) -> PlantSnapshot:
        if isinstance(plant, PlantSnapshot):
            return plant
        return PlantSnapshot.from_profile(plant, self._calculator.compute_next_dates(plant))
