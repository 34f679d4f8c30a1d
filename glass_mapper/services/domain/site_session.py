"""
Domain service: one editing session over a single site.

A session binds the drawing machine and the progress ledger to a site.
It is the mutable draft; snapshot() produces the immutable Site that goes
to storage. Nothing is persisted until a snapshot is saved, so discarding
the session cancels the edit.
"""
from typing import Callable, Optional
import logging
import math
import uuid

from glass_mapper.config import settings
from glass_mapper.domain.exceptions import InvalidInput
from glass_mapper.domain.models import (
    Point,
    ProgressEntry,
    ProgressStatus,
    ProgressSummary,
    Site,
    SiteMetrics,
)
from glass_mapper.services.domain.geodesic_metrics import GeodesicMetrics
from glass_mapper.services.domain.path_capture import CapturePhase, PathCaptureMachine
from glass_mapper.services.domain.progress_ledger import ProgressLedger, current_time_ms
from glass_mapper.services.domain.snap_resolver import Projector, SnapResolver

logger = logging.getLogger(__name__)


class SiteSession:
    """Editing session for one site."""

    def __init__(
        self,
        site_id: str,
        name: str,
        created_at: int,
        machine: PathCaptureMachine,
        ledger: ProgressLedger,
        commitment_rate: Optional[float] = None,
        custom_tile_url: Optional[str] = None,
    ):
        self.site_id = site_id
        self.name = name
        self.created_at = created_at
        self.machine = machine
        self.ledger = ledger
        self._commitment_rate = commitment_rate
        self.custom_tile_url = custom_tile_url

    @classmethod
    def from_persisted(
        cls,
        site: Site,
        snap_resolver: Optional[SnapResolver] = None,
        metrics_engine: Optional[GeodesicMetrics] = None,
        clock: Callable[[], int] = current_time_ms,
    ) -> "SiteSession":
        """
        Rebuild a session from a stored site.

        The drawing phase follows from the stored vertices; ledger entries
        and commitment rate are taken as stored.
        """
        machine = PathCaptureMachine(
            points=site.points,
            closed=site.is_closed,
            snap_resolver=snap_resolver,
            metrics_engine=metrics_engine,
        )
        ledger = ProgressLedger(entries=site.daily_progress, clock=clock)
        logger.info(
            f"Opened site {site.id} with {len(site.points)} vertices "
            f"and {len(site.daily_progress)} progress entries"
        )
        return cls(
            site_id=site.id,
            name=site.name,
            created_at=site.created_at,
            machine=machine,
            ledger=ledger,
            commitment_rate=site.contractor_commitment_per_day,
            custom_tile_url=site.custom_tile_url,
        )

    @classmethod
    def new(
        cls,
        name: str,
        closed: Optional[bool] = None,
        clock: Callable[[], int] = current_time_ms,
    ) -> "SiteSession":
        """Start a session for a site that has not been drawn yet."""
        site = Site(
            id=str(uuid.uuid4()),
            name=name,
            created_at=clock(),
            is_closed=settings.default_is_closed if closed is None else closed,
        )
        return cls.from_persisted(site, clock=clock)

    # Read side

    @property
    def phase(self) -> CapturePhase:
        return self.machine.phase

    @property
    def metrics(self) -> SiteMetrics:
        return self.machine.metrics

    @property
    def commitment_rate(self) -> Optional[float]:
        """Stored commitment rate; None when the site never had one."""
        return self._commitment_rate

    @property
    def effective_commitment_rate(self) -> float:
        if self._commitment_rate is None:
            return settings.default_commitment_per_day
        return self._commitment_rate

    def summary(self) -> ProgressSummary:
        return self.ledger.summary(self.metrics.perimeter_meters, self.effective_commitment_rate)

    def snapshot(self) -> Site:
        """
        Materialize the current state as a persistable Site.

        Metrics are recomputed here so a snapshot never carries stale values.
        """
        points = list(self.machine.points)
        closed = self.machine.closed
        return Site(
            id=self.site_id,
            name=self.name,
            created_at=self.created_at,
            points=points,
            metrics=self.machine.metrics_engine.compute(points, closed),
            is_closed=closed,
            contractor_commitment_per_day=self._commitment_rate,
            daily_progress=list(self.ledger.entries),
            custom_tile_url=self.custom_tile_url,
        )

    # Drawing

    def add_vertex(
        self,
        point: Point,
        projector: Optional[Projector] = None,
        threshold_px: Optional[float] = None,
    ) -> bool:
        return self.machine.add_vertex(point, projector, threshold_px)

    def undo(self) -> bool:
        return self.machine.undo()

    def clear(self) -> bool:
        return self.machine.clear()

    def finish(self) -> bool:
        return self.machine.finish()

    def reopen(self) -> bool:
        return self.machine.reopen()

    def toggle_closed(self) -> bool:
        return self.machine.toggle_closed()

    # Progress

    def add_progress(self, meters_completed: float, notes: Optional[str] = None) -> ProgressEntry:
        return self.ledger.add_entry(meters_completed, notes)

    def review_progress(self, entry_id: str, status: ProgressStatus) -> ProgressEntry:
        return self.ledger.set_status(entry_id, status)

    # Settings

    def set_commitment_rate(self, rate: float) -> None:
        """
        Set the contractor commitment in meters/day.

        Raises:
            InvalidInput: If rate is negative or not finite
        """
        if not math.isfinite(rate) or rate < 0:
            raise InvalidInput(f"Commitment rate must be >= 0, got {rate}")
        self._commitment_rate = float(rate)

    def set_custom_tile_url(self, url: Optional[str]) -> None:
        # Empty string clears the custom layer
        self.custom_tile_url = url or None

    def set_snapping(self, enabled: bool) -> None:
        self.machine.snap_resolver.enabled = enabled

    @property
    def snapping_enabled(self) -> bool:
        return self.machine.snap_resolver.enabled
