"""
Unit tests for geodesic metrics and projection helpers.

Tests cover:
- Degenerate vertex lists
- Open vs closed perimeters
- Rounding at the boundary
- Monotonic growth of open paths
- Web Mercator screen projection
"""
import math
import pytest
from pydantic import ValidationError

from glass_mapper.domain.exceptions import InvalidInput
from glass_mapper.domain.models import Point, Viewport
from glass_mapper.services.domain.geodesic_metrics import (
    GeodesicMetrics,
    compute_metrics,
    round_half_up,
)
from glass_mapper.utils.geo_projection import (
    haversine_distance,
    make_screen_projector,
    project_to_world_pixels,
    segment_lengths,
)


# ============================================================
# Degenerate Input Tests
# ============================================================

class TestShortSequences:
    """Tests for sequences with fewer than two vertices."""

    @pytest.mark.parametrize("closed", [True, False])
    def test_empty_sequence(self, closed):
        """No vertices yields all-zero metrics."""
        metrics = compute_metrics([], closed)

        assert metrics.perimeter_meters == 0
        assert metrics.vertex_count == 0
        assert metrics.estimated_walk_time_minutes == 0

    @pytest.mark.parametrize("closed", [True, False])
    def test_single_vertex(self, closed):
        """A single vertex counts but has no length."""
        metrics = compute_metrics([Point(lat=10.0, lng=20.0)], closed)

        assert metrics.perimeter_meters == 0
        assert metrics.vertex_count == 1
        assert metrics.estimated_walk_time_minutes == 0

    def test_zero_length_segments(self):
        """Repeated vertices are legal and add nothing."""
        p = Point(lat=45.0, lng=7.0)
        metrics = compute_metrics([p, p, p], True)

        assert metrics.perimeter_meters == 0
        assert metrics.vertex_count == 3


# ============================================================
# Perimeter Tests
# ============================================================

class TestPerimeter:
    """Tests for path and polygon length."""

    def test_closed_square(self, square_points):
        """A closed 100 m square is about 400 m and 4.8 minutes long."""
        metrics = compute_metrics(square_points, True)

        assert metrics.perimeter_meters == pytest.approx(400.0, abs=0.05)
        assert metrics.vertex_count == 4
        assert metrics.estimated_walk_time_minutes == pytest.approx(4.8)

    def test_open_square(self, square_points):
        """The same vertices as an open path skip the closing side."""
        metrics = compute_metrics(square_points, False)

        assert metrics.perimeter_meters == pytest.approx(300.0, abs=0.05)
        assert metrics.vertex_count == 4
        assert metrics.estimated_walk_time_minutes == pytest.approx(3.6)

    def test_two_points_closed_counts_segment_twice(self, square_points):
        """A closed two-vertex shape goes there and back."""
        pair = square_points[:2]

        open_length = compute_metrics(pair, False).perimeter_meters
        closed_length = compute_metrics(pair, True).perimeter_meters

        assert closed_length == pytest.approx(2 * open_length, abs=0.01)

    def test_deterministic(self, square_points):
        """Identical input gives identical output."""
        assert compute_metrics(square_points, True) == compute_metrics(square_points, True)

    def test_open_path_grows_when_appending(self, square_points):
        """Appending to an open path never shortens it."""
        lengths = [
            compute_metrics(square_points[:n], False).perimeter_meters
            for n in range(len(square_points) + 1)
        ]

        assert lengths == sorted(lengths)

    def test_closed_path_wrap_segment_changes(self, square_points):
        """Appending to a closed path replaces the wrap segment."""
        triangle = compute_metrics(square_points[:3], True).perimeter_meters
        square = compute_metrics(square_points, True).perimeter_meters

        # 100 + 100 + diagonal vs 4 * 100
        assert triangle == pytest.approx(200 + 100 * math.sqrt(2), abs=0.05)
        assert square > triangle

    def test_matches_pairwise_haversine(self, square_points):
        """Vectorised segment lengths match the scalar formula."""
        lengths = segment_lengths(square_points, True)
        expected = [
            haversine_distance(square_points[i], square_points[(i + 1) % 4])
            for i in range(4)
        ]

        assert list(lengths) == pytest.approx(expected)

    def test_known_distance(self):
        """One degree of latitude is about 111.19 km on the sphere."""
        d = haversine_distance(Point(lat=0.0, lng=0.0), Point(lat=1.0, lng=0.0))

        assert d == pytest.approx(111_194.93, abs=0.01)


# ============================================================
# Rounding and Configuration Tests
# ============================================================

class TestRounding:
    """Tests for rounding and walk speed configuration."""

    def test_round_half_up(self):
        """Halves round up like the map client does."""
        assert round_half_up(2.5) == 3
        assert round_half_up(0.125, 2) == 0.13
        assert round_half_up(4.8001, 1) == 4.8

    def test_custom_walk_speed(self, square_points):
        """Walk time follows the configured speed."""
        metrics = GeodesicMetrics(walk_speed_m_per_min=100.0).compute(square_points, True)

        assert metrics.estimated_walk_time_minutes == pytest.approx(4.0)

    def test_perimeter_has_two_decimals(self, square_points):
        """Perimeter is rounded to centimeters."""
        metrics = compute_metrics(square_points, True)

        assert metrics.perimeter_meters == round(metrics.perimeter_meters, 2)


# ============================================================
# Point Validation Tests
# ============================================================

class TestPointValidation:
    """Tests for malformed coordinates."""

    @pytest.mark.parametrize("lat,lng", [(91.0, 0.0), (0.0, -181.0), (float("nan"), 0.0)])
    def test_malformed_point_rejected(self, lat, lng):
        """Out of range or NaN coordinates are invalid input."""
        with pytest.raises(InvalidInput, match="Malformed point"):
            Point.of(lat, lng)

    def test_valid_point(self):
        """In-range coordinates build a point."""
        assert Point.of(-33.9, 18.4) == Point(lat=-33.9, lng=18.4)

    def test_malformed_point_keeps_validation_cause(self):
        """The underlying validation error stays attached to InvalidInput."""
        with pytest.raises(InvalidInput) as exc_info:
            Point.of(95.0, 0.0)

        assert isinstance(exc_info.value.__cause__, ValidationError)


# ============================================================
# Screen Projection Tests
# ============================================================

class TestScreenProjection:
    """Tests for Web Mercator pixel projection."""

    def test_origin_maps_to_world_center(self):
        """(0, 0) sits in the middle of the world at zoom 0."""
        x, y = project_to_world_pixels(Point(lat=0.0, lng=0.0), zoom=0)

        assert x == pytest.approx(128.0)
        assert y == pytest.approx(128.0)

    def test_zoom_doubles_scale(self):
        """Each zoom level doubles world pixel coordinates."""
        p = Point(lat=10.0, lng=30.0)
        x0, y0 = project_to_world_pixels(p, zoom=3)
        x1, y1 = project_to_world_pixels(p, zoom=4)

        assert x1 == pytest.approx(2 * x0)
        assert y1 == pytest.approx(2 * y0)

    def test_north_is_up(self):
        """Higher latitudes have smaller y values."""
        _, y_south = project_to_world_pixels(Point(lat=10.0, lng=0.0), zoom=5)
        _, y_north = project_to_world_pixels(Point(lat=20.0, lng=0.0), zoom=5)

        assert y_north < y_south

    def test_viewport_origin_is_subtracted(self):
        """Container coordinates are relative to the viewport origin."""
        project = make_screen_projector(Viewport(zoom=0, origin_x=100.0, origin_y=28.0))

        x, y = project(Point(lat=0.0, lng=0.0))

        assert x == pytest.approx(28.0)
        assert y == pytest.approx(100.0)
