"""
Plant identity verification for care-log photos.

Checks whether a photo shows the plant it is logged against. The check never
blocks the caller: when verification itself fails the result is an
optimistic ``matches=True`` with low confidence.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from plantcare.domain.care_log import IdentityCheck
from plantcare.enums.common import ConfidenceLevel
from plantcare.schemas.advisory import IdentityVerifyTask

if TYPE_CHECKING:
    from plantcare.schemas.advisory import ImagePayload
    from plantcare.services.ai.advisory_orchestrator import AdvisoryRequestOrchestrator

logger = logging.getLogger(__name__)


class IdentityVerificationPipeline:
    def __init__(self, orchestrator: "AdvisoryRequestOrchestrator"):
        self._orchestrator = orchestrator

    def verify(
        self,
        photo: "ImagePayload",
        expected_name: str,
        expected_scientific_name: str | None = None,
    ) -> IdentityCheck:
        """Compare ``photo`` with the expected plant. Never raises."""
        try:
            result = self._orchestrator.execute(
                IdentityVerifyTask(
                    image=photo,
                    expected_name=expected_name,
                    expected_scientific_name=expected_scientific_name,
                )
            )
        except Exception as exc:
            logger.warning(
                "Identity verification for '%s' failed, assuming match: %s", expected_name, exc, exc_info=True
            )
            return IdentityCheck.fail_open()

        data = result.data
        matches = data["matches"]
        detected = data.get("detectedPlant") if not matches else None
        check = IdentityCheck(
            matches=matches,
            confidence=ConfidenceLevel(data.get("confidence", "low")),
            detected_plant=detected or None,
        )
        if not check.matches:
            logger.info(
                "Photo logged for '%s' looks like '%s' (%s confidence)",
                expected_name,
                check.detected_plant or "another plant",
                check.confidence,
            )
        return check
