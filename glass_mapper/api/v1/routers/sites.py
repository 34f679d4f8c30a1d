"""
API router for site editing endpoints.

Domain errors raised here are turned into HTTP responses by the error
handling middleware.
"""
from typing import Annotated, Callable

from fastapi import APIRouter, Path, Request, status

from glass_mapper.api.dependencies import SiteEditingServiceDep
from glass_mapper.api.limiter import EDIT_RATE_LIMIT, limiter
from glass_mapper.api.v1.models.requests import (
    AddProgressRequest,
    AddVertexRequest,
    CreateSiteRequest,
    ReviewProgressRequest,
    SessionSettingsRequest,
)
from glass_mapper.api.v1.models.responses import SessionStateResponse
from glass_mapper.domain.exceptions import IllegalTransition
from glass_mapper.domain.models import Point, ProgressEntry, ProgressSummary, Site
from glass_mapper.services.domain.site_session import SiteSession
from glass_mapper.utils.geo_projection import make_screen_projector


router = APIRouter(tags=["sites"])

SiteId = Annotated[str, Path(description="Unique identifier for the site")]

EDIT_RESPONSES = {
    400: {"description": "Invalid input"},
    404: {"description": "No open session for the site"},
    409: {"description": "Action not allowed in the current drawing phase"},
    429: {"description": "Rate limit exceeded"},
}


def _apply_transition(
    session: SiteSession,
    action: str,
    transition: Callable[[], bool],
) -> SessionStateResponse:
    """Run a drawing transition, reporting a rejected one as IllegalTransition."""
    if not transition():
        raise IllegalTransition(
            f"Cannot {action} site {session.site_id} in phase {session.phase.value} "
            f"with {session.metrics.vertex_count} vertices"
        )
    return SessionStateResponse.from_session(session)


# ============================================================
# Session lifecycle
# ============================================================

@router.post(
    "/projects/{project_id}/sites",
    response_model=SessionStateResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a site and open an editing session",
    responses={429: {"description": "Rate limit exceeded"}},
)
@limiter.limit(EDIT_RATE_LIMIT)
async def create_site(
    request: Request,
    project_id: Annotated[str, Path(description="Project the site belongs to")],
    body: CreateSiteRequest,
    service: SiteEditingServiceDep,
) -> SessionStateResponse:
    session = await service.create_site(project_id, body.name, body.is_closed)
    return SessionStateResponse.from_session(session)


@router.post(
    "/sites/{site_id}/session",
    response_model=SessionStateResponse,
    summary="Open an editing session on a stored site",
    description="""
    Loads the site from storage and opens an in-memory editing session.
    A site that already has vertices opens in the finished phase.
    If a session is already open for the site it is returned unchanged.
    """,
    responses={404: {"description": "Site not found"}, 429: {"description": "Rate limit exceeded"}},
)
@limiter.limit(EDIT_RATE_LIMIT)
async def open_session(
    request: Request,
    site_id: SiteId,
    service: SiteEditingServiceDep,
) -> SessionStateResponse:
    session = await service.open_site(site_id)
    return SessionStateResponse.from_session(session)


@router.get(
    "/sites/{site_id}/session",
    response_model=SessionStateResponse,
    summary="Get the state of an open editing session",
    responses={404: {"description": "No open session for the site"}},
)
async def get_session(site_id: SiteId, service: SiteEditingServiceDep) -> SessionStateResponse:
    return SessionStateResponse.from_session(service.get_session(site_id))


@router.delete(
    "/sites/{site_id}/session",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Discard an editing session without saving",
    responses={404: {"description": "No open session for the site"}},
)
async def discard_session(site_id: SiteId, service: SiteEditingServiceDep) -> None:
    service.discard(site_id)


@router.post(
    "/sites/{site_id}/session/save",
    response_model=Site,
    summary="Save the session snapshot to storage",
    responses=EDIT_RESPONSES,
)
@limiter.limit(EDIT_RATE_LIMIT)
async def save_session(
    request: Request,
    site_id: SiteId,
    service: SiteEditingServiceDep,
) -> Site:
    return await service.save(site_id)


# ============================================================
# Drawing
# ============================================================

@router.post(
    "/sites/{site_id}/session/vertices",
    response_model=SessionStateResponse,
    summary="Append a vertex",
    description="""
    Appends a clicked point. When a viewport is supplied and snapping is
    enabled, a click within the snap threshold (in screen pixels) of an
    existing vertex reuses that vertex's exact coordinates.
    """,
    responses=EDIT_RESPONSES,
)
@limiter.limit(EDIT_RATE_LIMIT)
async def add_vertex(
    request: Request,
    site_id: SiteId,
    body: AddVertexRequest,
    service: SiteEditingServiceDep,
) -> SessionStateResponse:
    session = service.get_session(site_id)
    point = Point.of(body.lat, body.lng)
    projector = make_screen_projector(body.viewport) if body.viewport else None
    return _apply_transition(
        session,
        "add a vertex to",
        lambda: session.add_vertex(point, projector, body.snap_threshold_px),
    )


@router.post(
    "/sites/{site_id}/session/undo",
    response_model=SessionStateResponse,
    summary="Remove the last vertex",
    responses=EDIT_RESPONSES,
)
@limiter.limit(EDIT_RATE_LIMIT)
async def undo(request: Request, site_id: SiteId, service: SiteEditingServiceDep) -> SessionStateResponse:
    session = service.get_session(site_id)
    return _apply_transition(session, "undo", session.undo)


@router.post(
    "/sites/{site_id}/session/clear",
    response_model=SessionStateResponse,
    summary="Remove all vertices",
    responses=EDIT_RESPONSES,
)
@limiter.limit(EDIT_RATE_LIMIT)
async def clear(request: Request, site_id: SiteId, service: SiteEditingServiceDep) -> SessionStateResponse:
    session = service.get_session(site_id)
    return _apply_transition(session, "clear", session.clear)


@router.post(
    "/sites/{site_id}/session/finish",
    response_model=SessionStateResponse,
    summary="Finish drawing",
    responses=EDIT_RESPONSES,
)
@limiter.limit(EDIT_RATE_LIMIT)
async def finish(request: Request, site_id: SiteId, service: SiteEditingServiceDep) -> SessionStateResponse:
    session = service.get_session(site_id)
    return _apply_transition(session, "finish", session.finish)


@router.post(
    "/sites/{site_id}/session/reopen",
    response_model=SessionStateResponse,
    summary="Resume drawing on a finished shape",
    responses=EDIT_RESPONSES,
)
@limiter.limit(EDIT_RATE_LIMIT)
async def reopen(request: Request, site_id: SiteId, service: SiteEditingServiceDep) -> SessionStateResponse:
    session = service.get_session(site_id)
    return _apply_transition(session, "reopen", session.reopen)


@router.post(
    "/sites/{site_id}/session/toggle-closed",
    response_model=SessionStateResponse,
    summary="Toggle between open path and closed polygon",
    responses=EDIT_RESPONSES,
)
@limiter.limit(EDIT_RATE_LIMIT)
async def toggle_closed(request: Request, site_id: SiteId, service: SiteEditingServiceDep) -> SessionStateResponse:
    session = service.get_session(site_id)
    return _apply_transition(session, "toggle closure of", session.toggle_closed)


@router.put(
    "/sites/{site_id}/session/settings",
    response_model=SessionStateResponse,
    summary="Update commitment rate, custom tiles or snapping",
    responses=EDIT_RESPONSES,
)
@limiter.limit(EDIT_RATE_LIMIT)
async def update_settings(
    request: Request,
    site_id: SiteId,
    body: SessionSettingsRequest,
    service: SiteEditingServiceDep,
) -> SessionStateResponse:
    session = service.get_session(site_id)
    if body.contractor_commitment_per_day is not None:
        session.set_commitment_rate(body.contractor_commitment_per_day)
    if body.custom_tile_url is not None:
        session.set_custom_tile_url(body.custom_tile_url)
    if body.snap_to_points is not None:
        session.set_snapping(body.snap_to_points)
    return SessionStateResponse.from_session(session)


# ============================================================
# Progress
# ============================================================

@router.post(
    "/sites/{site_id}/session/progress",
    response_model=ProgressEntry,
    status_code=status.HTTP_201_CREATED,
    summary="Log a daily progress claim",
    responses=EDIT_RESPONSES,
)
@limiter.limit(EDIT_RATE_LIMIT)
async def add_progress(
    request: Request,
    site_id: SiteId,
    body: AddProgressRequest,
    service: SiteEditingServiceDep,
) -> ProgressEntry:
    session = service.get_session(site_id)
    return session.add_progress(body.meters_completed, body.notes)


@router.patch(
    "/sites/{site_id}/session/progress/{entry_id}",
    response_model=ProgressEntry,
    summary="Approve or reject a pending progress claim",
    responses=EDIT_RESPONSES,
)
@limiter.limit(EDIT_RATE_LIMIT)
async def review_progress(
    request: Request,
    site_id: SiteId,
    entry_id: Annotated[str, Path(description="Progress entry id")],
    body: ReviewProgressRequest,
    service: SiteEditingServiceDep,
) -> ProgressEntry:
    session = service.get_session(site_id)
    return session.review_progress(entry_id, body.status)


@router.get(
    "/sites/{site_id}/session/summary",
    response_model=ProgressSummary,
    summary="Completion percentage and days remaining",
    responses={404: {"description": "No open session for the site"}},
)
async def get_summary(site_id: SiteId, service: SiteEditingServiceDep) -> ProgressSummary:
    return service.get_session(site_id).summary()
