"""
API response models using Pydantic.
"""
from typing import List, Optional
from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

from glass_mapper.domain.models import Point, ProgressEntry, ProgressSummary, SiteMetrics
from glass_mapper.services.domain.path_capture import CapturePhase
from glass_mapper.services.domain.site_session import SiteSession


class AllowedActions(BaseModel):
    """Which drawing actions are legal in the current phase."""
    add_vertex: bool
    undo: bool
    clear: bool
    finish: bool
    reopen: bool

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class SessionStateResponse(BaseModel):
    """Current state of an editing session."""
    site_id: str = Field(description="Unique identifier for the site")
    name: str
    phase: CapturePhase = Field(description="Drawing phase: empty, drawing or finished")
    is_closed: bool
    snapping_enabled: bool
    points: List[Point] = Field(description="Vertices in drawing order")
    metrics: SiteMetrics
    contractor_commitment_per_day: Optional[float] = None
    custom_tile_url: Optional[str] = None
    daily_progress: List[ProgressEntry]
    summary: ProgressSummary
    allowed_actions: AllowedActions

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        json_schema_extra = {
            "example": {
                "siteId": "5f0c1c2e-8d1b-4a53-9a55-0d3f2b4b8a10",
                "name": "North fence",
                "phase": "drawing",
                "isClosed": True,
                "snappingEnabled": True,
                "points": [
                    {"lat": 51.5, "lng": -0.1},
                    {"lat": 51.5009, "lng": -0.1},
                ],
                "metrics": {
                    "perimeterMeters": 200.15,
                    "vertexCount": 2,
                    "estimatedWalkTimeMinutes": 2.4,
                },
                "contractorCommitmentPerDay": 50.0,
                "customTileUrl": None,
                "dailyProgress": [],
                "summary": {
                    "totalCompleted": 0.0,
                    "completionPercentage": 0,
                    "estimatedDaysRemaining": 5,
                },
                "allowedActions": {
                    "addVertex": True,
                    "undo": True,
                    "clear": True,
                    "finish": True,
                    "reopen": False,
                },
            }
        }

    @classmethod
    def from_session(cls, session: SiteSession) -> "SessionStateResponse":
        machine = session.machine
        return cls(
            site_id=session.site_id,
            name=session.name,
            phase=session.phase,
            is_closed=machine.closed,
            snapping_enabled=session.snapping_enabled,
            points=list(machine.points),
            metrics=session.metrics,
            contractor_commitment_per_day=session.commitment_rate,
            custom_tile_url=session.custom_tile_url,
            daily_progress=list(session.ledger.entries),
            summary=session.summary(),
            allowed_actions=AllowedActions(
                add_vertex=machine.can_add_vertex(),
                undo=machine.can_undo(),
                clear=machine.can_clear(),
                finish=machine.can_finish(),
                reopen=machine.can_reopen(),
            ),
        )
