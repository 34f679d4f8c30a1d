"""
Domain service: the interactive drawing state machine.

The machine owns the editable vertex draft. Phase and closure are
independent: closure can be toggled in any phase. Operations that are not
legal in the current phase are rejected by returning False and leave the
state untouched; callers can check the can_* predicates first.
"""
from enum import Enum
from typing import List, Optional, Sequence, Tuple
import logging

from glass_mapper.domain.models import Point, SiteMetrics
from glass_mapper.services.domain.geodesic_metrics import GeodesicMetrics
from glass_mapper.services.domain.snap_resolver import Projector, SnapResolver

logger = logging.getLogger(__name__)


class CapturePhase(str, Enum):
    """Drawing phase of a traced shape."""
    EMPTY = "empty"
    DRAWING = "drawing"
    FINISHED = "finished"


class PathCaptureMachine:
    """
    Accumulates vertices for one site and keeps its metrics current.

    Phases: EMPTY -> DRAWING -> FINISHED. A site reopened with vertices
    starts FINISHED.
    """

    def __init__(
        self,
        points: Sequence[Point] = (),
        closed: bool = True,
        snap_resolver: Optional[SnapResolver] = None,
        metrics_engine: Optional[GeodesicMetrics] = None,
    ):
        self._points: List[Point] = list(points)
        self._closed = closed
        self._phase = CapturePhase.FINISHED if self._points else CapturePhase.EMPTY
        self.snap_resolver = snap_resolver or SnapResolver()
        self.metrics_engine = metrics_engine or GeodesicMetrics()
        self._metrics = self.metrics_engine.compute(self._points, self._closed)

    @property
    def phase(self) -> CapturePhase:
        return self._phase

    @property
    def points(self) -> Tuple[Point, ...]:
        return tuple(self._points)

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def metrics(self) -> SiteMetrics:
        return self._metrics

    # Legality predicates

    def can_add_vertex(self) -> bool:
        return self._phase is not CapturePhase.FINISHED

    def can_undo(self) -> bool:
        return self._phase is not CapturePhase.FINISHED and len(self._points) > 0

    def can_clear(self) -> bool:
        return len(self._points) > 0

    def can_finish(self) -> bool:
        return self._phase is not CapturePhase.FINISHED and len(self._points) >= 2

    def can_reopen(self) -> bool:
        return self._phase is CapturePhase.FINISHED

    # Transitions

    def add_vertex(
        self,
        point: Point,
        projector: Optional[Projector] = None,
        threshold_px: Optional[float] = None,
    ) -> bool:
        """
        Append a vertex, snapping it onto an existing one when close on screen.

        Args:
            point: Clicked coordinate
            projector: Screen projector for the current viewport; without
                one no snapping is attempted
            threshold_px: Optional snap threshold override

        Returns:
            True if the vertex was added
        """
        if not self.can_add_vertex():
            logger.warning(f"Rejected add_vertex in phase {self._phase.value}")
            return False

        resolved = self.snap_resolver.resolve(self._points, point, projector, threshold_px)
        self._points.append(resolved)
        self._phase = CapturePhase.DRAWING
        self._recompute()
        logger.debug(f"Added vertex #{len(self._points)} at ({resolved.lat}, {resolved.lng})")
        return True

    def undo(self) -> bool:
        """Remove the last vertex. Returns True if one was removed."""
        if not self.can_undo():
            logger.warning(f"Rejected undo in phase {self._phase.value} with {len(self._points)} vertices")
            return False

        self._points.pop()
        self._phase = CapturePhase.DRAWING if self._points else CapturePhase.EMPTY
        self._recompute()
        return True

    def clear(self) -> bool:
        """Remove every vertex and return to EMPTY."""
        if not self.can_clear():
            logger.warning("Rejected clear with no vertices")
            return False

        self._points.clear()
        self._phase = CapturePhase.EMPTY
        self._recompute()
        return True

    def finish(self) -> bool:
        """Mark the shape finished. Needs at least two vertices."""
        if not self.can_finish():
            logger.warning(f"Rejected finish in phase {self._phase.value} with {len(self._points)} vertices")
            return False

        self._phase = CapturePhase.FINISHED
        self._recompute()
        return True

    def reopen(self) -> bool:
        """Go back from FINISHED to DRAWING so the shape can be extended."""
        if not self.can_reopen():
            logger.warning(f"Rejected reopen in phase {self._phase.value}")
            return False

        self._phase = CapturePhase.DRAWING
        return True

    def toggle_closed(self) -> bool:
        """Flip the closure flag. Always legal."""
        self._closed = not self._closed
        self._recompute()
        return True

    def _recompute(self) -> None:
        self._metrics = self.metrics_engine.compute(self._points, self._closed)
