"""
Domain models for traced sites and their progress ledger.

These models represent the core domain entities and should be independent
of any infrastructure concerns (API clients, databases, etc.). Field aliases
follow the camelCase shape used by the site storage service.
"""
from enum import Enum
from typing import List, Optional, Tuple

from pydantic import BaseModel, Field, ValidationError

from glass_mapper.domain.exceptions import InvalidInput


# (x, y) position in screen pixels, as produced by a projector
ScreenCoord = Tuple[float, float]


class Point(BaseModel):
    """A WGS84 coordinate in decimal degrees."""
    lat: float = Field(ge=-90.0, le=90.0, allow_inf_nan=False)
    lng: float = Field(ge=-180.0, le=180.0, allow_inf_nan=False)

    class Config:
        frozen = True

    @classmethod
    def of(cls, lat: float, lng: float) -> "Point":
        """
        Build a point, reporting malformed coordinates as InvalidInput.

        Args:
            lat: Latitude in degrees
            lng: Longitude in degrees

        Returns:
            Point instance

        Raises:
            InvalidInput: If a coordinate is out of range or not finite
        """
        try:
            return cls(lat=lat, lng=lng)
        except ValidationError as e:
            raise InvalidInput(f"Malformed point ({lat}, {lng}): {e.errors()[0]['msg']}") from e


class SiteMetrics(BaseModel):
    """Metrics derived from a vertex sequence and its closure flag."""
    perimeter_meters: float = Field(default=0.0, ge=0.0, alias="perimeterMeters")
    vertex_count: int = Field(default=0, ge=0, alias="vertexCount")
    estimated_walk_time_minutes: float = Field(
        default=0.0, ge=0.0, alias="estimatedWalkTimeMinutes"
    )

    class Config:
        frozen = True
        populate_by_name = True


class ProgressStatus(str, Enum):
    """Review state of a progress entry."""
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class ProgressEntry(BaseModel):
    """A dated, reviewable claim of meters completed."""
    id: str
    date: int = Field(description="Creation time in epoch milliseconds")
    meters_completed: float = Field(gt=0.0, alias="metersCompleted")
    status: ProgressStatus = ProgressStatus.PENDING
    notes: Optional[str] = None

    class Config:
        frozen = True
        populate_by_name = True


class ProgressSummary(BaseModel):
    """Completion figures derived from approved entries."""
    total_completed: float = Field(alias="totalCompleted")
    completion_percentage: int = Field(alias="completionPercentage")
    estimated_days_remaining: Optional[int] = Field(
        default=None,
        alias="estimatedDaysRemaining",
        description="None when the commitment rate is zero",
    )

    class Config:
        frozen = True
        populate_by_name = True


class Site(BaseModel):
    """Persistable snapshot of a traced site."""
    id: str
    name: str
    created_at: int = Field(alias="createdAt", description="Epoch milliseconds")
    points: List[Point] = Field(default_factory=list)
    metrics: SiteMetrics = Field(default_factory=SiteMetrics)
    is_closed: bool = Field(default=True, alias="isClosed")
    contractor_commitment_per_day: Optional[float] = Field(
        default=None, ge=0.0, alias="contractorCommitmentPerDay"
    )
    daily_progress: List[ProgressEntry] = Field(
        default_factory=list, alias="dailyProgress"
    )
    custom_tile_url: Optional[str] = Field(default=None, alias="customTileUrl")

    class Config:
        frozen = True
        populate_by_name = True


class Viewport(BaseModel):
    """
    Map viewport used to project coordinates to container pixels.

    origin_x/origin_y locate the container's top-left corner in world
    pixel space at the given zoom level.
    """
    zoom: float = Field(ge=0.0, le=24.0)
    origin_x: float = Field(alias="originX")
    origin_y: float = Field(alias="originY")
    tile_size: int = Field(default=256, gt=0, alias="tileSize")

    class Config:
        frozen = True
        populate_by_name = True
