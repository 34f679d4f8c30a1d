"""
Domain service: length, vertex count and walk time of a traced shape.
"""
from typing import Optional, Sequence
import math

from glass_mapper.config import settings
from glass_mapper.domain.models import Point, SiteMetrics
from glass_mapper.utils.geo_projection import segment_lengths


def round_half_up(value: float, digits: int = 0) -> float:
    """Round with halves away from zero for non-negative values."""
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


class GeodesicMetrics:
    """
    Computes SiteMetrics for a vertex sequence.

    Segment lengths are summed at full precision; rounding happens only
    on the returned values.
    """

    def __init__(self, walk_speed_m_per_min: Optional[float] = None):
        self.walk_speed_m_per_min = walk_speed_m_per_min or settings.walk_speed_m_per_min

    def compute(self, points: Sequence[Point], closed: bool) -> SiteMetrics:
        """
        Compute metrics for a path or polygon.

        Args:
            points: Ordered vertices
            closed: Whether the last vertex connects back to the first

        Returns:
            SiteMetrics with perimeter rounded to 2 decimals and walk
            time rounded to 1 decimal
        """
        if len(points) < 2:
            return SiteMetrics(
                perimeter_meters=0.0,
                vertex_count=len(points),
                estimated_walk_time_minutes=0.0,
            )

        perimeter = float(segment_lengths(points, closed).sum())
        walk_time = perimeter / self.walk_speed_m_per_min

        return SiteMetrics(
            perimeter_meters=round_half_up(perimeter, 2),
            vertex_count=len(points),
            estimated_walk_time_minutes=round_half_up(walk_time, 1),
        )


def compute_metrics(points: Sequence[Point], closed: bool) -> SiteMetrics:
    """Compute metrics with the configured walk speed."""
    return GeodesicMetrics().compute(points, closed)
