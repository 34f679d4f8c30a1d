"""
Infrastructure layer: site storage client with retry logic.
"""
from typing import List, Dict, Any, Optional
import logging
import time

from pydantic import BaseModel, Field
import httpx
from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
)

from glass_mapper.config import settings
from glass_mapper.domain.models import Site
from glass_mapper.infrastructure.api_constants import APIConstants, SiteStoreEndpoints

logger = logging.getLogger(__name__)


class ProjectData(BaseModel):
    """Project as returned by the storage service."""
    id: str
    name: str
    description: Optional[str] = None
    created_at: int = Field(alias="createdAt")
    sites: List[Site] = Field(default_factory=list)

    class Config:
        populate_by_name = True


class SiteStoreError(Exception):
    """Raised when the storage service cannot fulfil a request."""

    def __init__(self, message: str, status_code: int = 502):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def parse_site(data: Dict[str, Any]) -> Site:
    """
    Build a Site from a stored row.

    Stored rows carry database column names next to the camelCase shape;
    the camelCase keys are read and nulls fall back to defaults, except
    for a zero commitment which only survives in its raw column.

    Args:
        data: Site dictionary from the storage service

    Returns:
        Site instance
    """
    fields = {
        key: data[key]
        for key in APIConstants.SITE_FIELDS
        if data.get(key) is not None
    }
    fields.setdefault("isClosed", settings.default_is_closed)
    # Storage drops a zero commitment from the camelCase key; the raw
    # NUMERIC column still holds it
    raw_commitment = data.get("contractor_commitment_per_day")
    if "contractorCommitmentPerDay" not in fields and raw_commitment is not None:
        fields["contractorCommitmentPerDay"] = float(raw_commitment)
    return Site.model_validate(fields)


def parse_project(data: Dict[str, Any]) -> ProjectData:
    """
    Build a ProjectData from a stored project with its nested sites.

    Args:
        data: Project dictionary from the storage service

    Returns:
        ProjectData instance
    """
    return ProjectData(
        id=data["id"],
        name=data["name"],
        description=data.get("description"),
        created_at=int(data.get("createdAt") or 0),
        sites=[parse_site(site) for site in data.get("sites") or []],
    )


def serialize_site(site: Site) -> Dict[str, Any]:
    """Dump a Site in the storage service's camelCase shape."""
    return site.model_dump(by_alias=True, mode="json")


class SiteStoreClient:
    """
    Client for the site storage service.
    Implements retry logic with exponential backoff.
    """

    def __init__(self):
        """Initialize the storage client with configuration."""
        self.base_url = settings.site_store_base_url
        self.api_key = settings.site_store_api_key
        headers = {"accept": APIConstants.CONTENT_TYPE_JSON}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        self.client = httpx.AsyncClient(
            base_url=self.base_url,
            headers=headers,
            timeout=APIConstants.DEFAULT_TIMEOUT,
        )

    async def __aenter__(self) -> "SiteStoreClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def close(self):
        """Close the HTTP client."""
        await self.client.aclose()

    @retry(
        stop=stop_after_attempt(settings.max_retry_attempts),
        wait=wait_exponential(
            multiplier=settings.retry_backoff_multiplier,
            min=settings.retry_min_wait,
            max=settings.retry_max_wait,
        ),
        retry=retry_if_exception_type((httpx.HTTPStatusError, httpx.RequestError)),
        reraise=True,
    )
    async def _send(self, method: str, endpoint: str, **kwargs) -> Any:
        """
        Send one request, raising retryable errors for 5xx and transport failures.

        Raises:
            SiteStoreError: On 4xx responses (not retried)
            httpx.HTTPStatusError: On 5xx responses
            httpx.RequestError: On transport failures
        """
        response = await self.client.request(method, endpoint, **kwargs)
        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            # Retry on server errors (5xx)
            if e.response.status_code >= 500:
                logger.warning(f"Storage returned {e.response.status_code} for {method} {endpoint}, retrying")
                raise
            # Don't retry on client errors (4xx)
            raise SiteStoreError(
                f"Storage request failed: {e.response.status_code} - {e.response.text}",
                status_code=e.response.status_code,
            ) from e
        return response.json()

    async def _make_request(self, method: str, endpoint: str, **kwargs) -> Any:
        """
        Make an HTTP request with retry logic.

        Args:
            method: HTTP method (GET, POST, etc.)
            endpoint: API endpoint path
            **kwargs: Additional arguments for the request

        Returns:
            Decoded JSON body

        Raises:
            SiteStoreError: If the request fails after retries
        """
        try:
            return await self._send(method, endpoint, **kwargs)
        except httpx.HTTPStatusError as e:
            raise SiteStoreError(
                f"Storage request failed: {e.response.status_code} - {e.response.text}",
                status_code=502,
            ) from e
        except httpx.RequestError as e:
            raise SiteStoreError(f"Storage request error: {str(e)}", status_code=503) from e

    async def get_projects(self) -> List[ProjectData]:
        """
        Fetch every project with its sites.

        Returns:
            List of ProjectData instances
        """
        data = await self._make_request("GET", SiteStoreEndpoints.PROJECTS)
        return [parse_project(project) for project in data]

    async def create_project(
        self,
        name: str,
        description: Optional[str] = None,
        created_at: Optional[int] = None,
    ) -> ProjectData:
        """
        Create an empty project.

        Args:
            name: Display name of the project
            description: Optional free text
            created_at: Creation time in epoch milliseconds, now when None

        Returns:
            The stored project, with the id assigned by storage
        """
        data = await self._make_request(
            "POST",
            SiteStoreEndpoints.PROJECTS,
            json={
                "name": name,
                "description": description,
                "createdAt": created_at if created_at is not None else int(time.time() * 1000),
            },
        )
        logger.info(f"Created project {data.get('id')}")
        return parse_project(data)

    async def get_site(self, site_id: str) -> Site:
        """
        Fetch a single site.

        The storage service only lists sites per project, so the site is
        looked up across all projects.

        Args:
            site_id: Unique identifier for the site

        Returns:
            Site instance

        Raises:
            SiteStoreError: If the request fails or the site does not exist
        """
        for project in await self.get_projects():
            for site in project.sites:
                if site.id == site_id:
                    return site
        raise SiteStoreError(f"Site {site_id} not found", status_code=404)

    async def create_site(self, project_id: str, site: Site) -> Site:
        """
        Store a new site under a project.

        The storage service assigns the id; the returned site carries it.

        Args:
            project_id: Project to attach the site to
            site: Site snapshot

        Returns:
            The stored site
        """
        data = await self._make_request(
            "POST",
            SiteStoreEndpoints.get_project_sites(project_id),
            json=serialize_site(site),
        )
        logger.info(f"Created site {data.get('id')} in project {project_id}")
        return parse_site(data)

    async def update_site(self, site: Site) -> Site:
        """
        Replace the stored state of a site with a snapshot.

        Args:
            site: Site snapshot

        Returns:
            The stored site

        Raises:
            SiteStoreError: If the site does not exist or the request fails
        """
        data = await self._make_request(
            "PUT",
            SiteStoreEndpoints.get_site(site.id),
            json=serialize_site(site),
        )
        logger.info(f"Saved site {site.id}")
        return parse_site(data)


# Singleton instance
_store_client: Optional[SiteStoreClient] = None


def get_store_client() -> SiteStoreClient:
    """
    Get or create the singleton storage client instance.

    Returns:
        SiteStoreClient instance
    """
    global _store_client
    if _store_client is None:
        _store_client = SiteStoreClient()
    return _store_client
