"""
Light Level Analyzer
====================
Estimates how much light a plant receives from a photo.

Like identity verification this is advisory only: any failure falls back to
``{"sunlightLevel": "medium", "confidence": "low"}``.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from plantcare.enums.common import ConfidenceLevel, SunlightLevel
from plantcare.schemas.advisory import LightLevelTask

if TYPE_CHECKING:
    from plantcare.schemas.advisory import ImagePayload
    from plantcare.services.ai.advisory_orchestrator import AdvisoryRequestOrchestrator

logger = logging.getLogger(__name__)

FALLBACK_LIGHT_LEVEL: dict[str, Any] = {
    "sunlightLevel": SunlightLevel.MEDIUM.value,
    "confidence": ConfidenceLevel.LOW.value,
}


class LightLevelAnalyzer:
    def __init__(self, orchestrator: "AdvisoryRequestOrchestrator"):
        self._orchestrator = orchestrator

    def analyze(self, image: "ImagePayload") -> dict[str, Any]:
        """Return ``{"sunlightLevel", "confidence"}`` for the photo."""
        try:
            result = self._orchestrator.execute(LightLevelTask(image=image))
        except Exception as exc:
            logger.warning("Light level analysis failed, using fallback: %s", exc, exc_info=True)
            return dict(FALLBACK_LIGHT_LEVEL)

        logger.info(
            "Light level estimated as %s (%s confidence)",
            result.data["sunlightLevel"],
            result.data["confidence"],
        )
        return {"sunlightLevel": result.data["sunlightLevel"], "confidence": result.data["confidence"]}
