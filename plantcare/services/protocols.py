"""
Service protocols (structural typing interfaces).

Protocols let consumer services declare the *minimal* surface they depend on
without importing a concrete storage class. Persistence lives outside this
package; anything with matching methods can be passed in.

Usage
-----
In a consumer service::

    from __future__ import annotations
    from typing import TYPE_CHECKING
    if TYPE_CHECKING:
        from plantcare.services.protocols import CareHistoryReader

    class JournalEnrichmentPipeline:
        def __init__(self, ..., history_reader: "CareHistoryReader | None" = None): ...
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from plantcare.domain.care_log import CareLogEntry
from plantcare.domain.plant_profile import PlantCareProfile


@runtime_checkable
class PlantRecordReader(Protocol):
    """Read-only view over the user's plant records."""

    def get_plant(self, plant_id: int) -> PlantCareProfile | None:
        """Return a single plant, or ``None`` if not found."""
        ...

    def get_plants(self, user_id: int) -> list[PlantCareProfile]:
        """Return every plant owned by a user."""
        ...


@runtime_checkable
class CareHistoryReader(Protocol):
    """Recent care history for a plant."""

    def get_recent_care_logs(self, plant_id: int, limit: int) -> list[CareLogEntry]:
        """Return at most ``limit`` care logs, newest first."""
        ...


@runtime_checkable
class CareLogMetadataWriter(Protocol):
    """Write-back of enrichment metadata onto an existing care log."""

    def update_care_log_metadata(self, log_id: int, metadata: dict[str, Any]) -> None:
        ...
