"""
Domain service: snapping a clicked point onto an existing vertex.

Distances are measured in screen pixels so that snapping behaves the same
at every zoom level.
"""
from typing import Callable, Optional, Sequence
import logging

import numpy as np

from glass_mapper.config import settings
from glass_mapper.domain.models import Point, ScreenCoord

logger = logging.getLogger(__name__)

Projector = Callable[[Point], ScreenCoord]


class SnapResolver:
    """Resolves a candidate click to either itself or an existing vertex."""

    def __init__(self, threshold_px: Optional[float] = None, enabled: bool = True):
        self.threshold_px = settings.snap_threshold_px if threshold_px is None else threshold_px
        self.enabled = enabled

    def resolve(
        self,
        existing: Sequence[Point],
        candidate: Point,
        projector: Optional[Projector],
        threshold_px: Optional[float] = None,
    ) -> Point:
        """
        Snap the candidate onto the nearest vertex within the threshold.

        Args:
            existing: Vertices already placed, in drawing order
            candidate: Point where the user clicked
            projector: Maps a Point to screen pixels for the current viewport
            threshold_px: Override for the configured threshold

        Returns:
            A copy of the nearest vertex's coordinates if it lies within
            the threshold, otherwise the candidate unchanged
        """
        if not self.enabled or projector is None or not existing:
            return candidate

        threshold = self.threshold_px if threshold_px is None else threshold_px

        screen = np.array([projector(p) for p in existing], dtype=float)
        click = np.array(projector(candidate), dtype=float)
        distances = np.hypot(screen[:, 0] - click[0], screen[:, 1] - click[1])

        # argmin returns the first index among equal minima
        nearest = int(np.argmin(distances))
        if distances[nearest] <= threshold:
            target = existing[nearest]
            logger.debug(
                f"Snapped click to vertex {nearest} ({distances[nearest]:.1f}px <= {threshold}px)"
            )
            return Point(lat=target.lat, lng=target.lng)

        return candidate
