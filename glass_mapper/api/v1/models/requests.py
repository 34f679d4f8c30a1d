"""
API request models using Pydantic.
"""
from typing import Optional
from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

from glass_mapper.domain.models import ProgressStatus, Viewport


class CreateSiteRequest(BaseModel):
    """Body for creating a new site."""
    name: str = Field(min_length=1, examples=["North fence"])
    is_closed: Optional[bool] = Field(
        default=None,
        description="Initial closure flag; the configured default when omitted",
    )

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class AddVertexRequest(BaseModel):
    """A map click to append as a vertex."""
    lat: float = Field(description="Latitude in degrees", examples=[51.5])
    lng: float = Field(description="Longitude in degrees", examples=[-0.1])
    viewport: Optional[Viewport] = Field(
        default=None,
        description="Viewport at click time; required for snapping",
    )
    snap_threshold_px: Optional[float] = Field(default=None, ge=0.0)

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class SessionSettingsRequest(BaseModel):
    """Partial update of session settings; omitted fields stay unchanged."""
    contractor_commitment_per_day: Optional[float] = Field(
        default=None, description="Contractor commitment in meters/day"
    )
    custom_tile_url: Optional[str] = Field(
        default=None, description="Tile URL template; empty string removes it"
    )
    snap_to_points: Optional[bool] = None

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class AddProgressRequest(BaseModel):
    """A daily progress claim."""
    meters_completed: float = Field(examples=[120.5])
    notes: Optional[str] = None

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class ReviewProgressRequest(BaseModel):
    """Review outcome for a pending progress entry."""
    status: ProgressStatus = Field(examples=["approved"])


class CreateProjectRequest(BaseModel):
    """Body for creating a new project."""
    name: str = Field(min_length=1, examples=["Riverside fencing"])
    description: Optional[str] = None

    class Config:
        alias_generator = to_camel
        populate_by_name = True
