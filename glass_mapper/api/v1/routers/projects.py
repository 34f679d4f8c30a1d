"""
API router for project endpoints.
"""
from typing import List

from fastapi import APIRouter, Request, status

from glass_mapper.api.dependencies import SiteEditingServiceDep
from glass_mapper.api.limiter import EDIT_RATE_LIMIT, limiter
from glass_mapper.api.v1.models.requests import CreateProjectRequest
from glass_mapper.infrastructure.site_store_client import ProjectData


router = APIRouter(
    prefix="/projects",
    tags=["projects"],
)


@router.get(
    "",
    response_model=List[ProjectData],
    summary="List projects with their sites",
    description="""
    Returns every stored project with its sites, so a client can pick a
    site id to open an editing session on.
    """,
    responses={502: {"description": "Site storage failure"}},
)
async def list_projects(service: SiteEditingServiceDep) -> List[ProjectData]:
    return await service.list_projects()


@router.post(
    "",
    response_model=ProjectData,
    status_code=status.HTTP_201_CREATED,
    summary="Create an empty project",
    responses={429: {"description": "Rate limit exceeded"}},
)
@limiter.limit(EDIT_RATE_LIMIT)
async def create_project(
    request: Request,
    body: CreateProjectRequest,
    service: SiteEditingServiceDep,
) -> ProjectData:
    return await service.create_project(body.name, body.description)
