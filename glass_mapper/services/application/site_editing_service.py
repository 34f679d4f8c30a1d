"""
Application service: Orchestration layer for site editing sessions.
"""
from typing import Dict, List, Optional
import logging

from glass_mapper.domain.exceptions import NotFound
from glass_mapper.domain.models import Site
from glass_mapper.infrastructure.site_store_client import ProjectData, SiteStoreClient
from glass_mapper.services.domain.site_session import SiteSession

logger = logging.getLogger(__name__)


class SessionRegistry:
    """
    In-memory registry of open editing sessions, keyed by site id.

    Each site has at most one open session per process.
    """

    def __init__(self):
        self._sessions: Dict[str, SiteSession] = {}

    def get(self, site_id: str) -> Optional[SiteSession]:
        return self._sessions.get(site_id)

    def put(self, session: SiteSession) -> None:
        self._sessions[session.site_id] = session

    def pop(self, site_id: str) -> Optional[SiteSession]:
        return self._sessions.pop(site_id, None)

    def __contains__(self, site_id: str) -> bool:
        return site_id in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)


class SiteEditingService:
    """
    Application service for site editing.

    Coordinates the storage client and the in-memory sessions; all
    editing rules live in SiteSession.
    """

    def __init__(self, store_client: SiteStoreClient, registry: SessionRegistry):
        """
        Initialize the service with dependencies.

        Args:
            store_client: Storage client for loading and saving sites
            registry: Registry of open sessions
        """
        self.store_client = store_client
        self.registry = registry

    async def open_site(self, site_id: str) -> SiteSession:
        """
        Open an editing session for a stored site, reusing an open one.

        Args:
            site_id: Unique identifier for the site

        Returns:
            The open SiteSession

        Raises:
            SiteStoreError: If the site cannot be loaded
        """
        session = self.registry.get(site_id)
        if session is not None:
            return session

        site = await self.store_client.get_site(site_id)

        # Another open may have registered a session while we were loading
        existing = self.registry.get(site_id)
        if existing is not None:
            return existing

        session = SiteSession.from_persisted(site)
        self.registry.put(session)
        return session

    async def list_projects(self) -> List[ProjectData]:
        """
        List stored projects with their sites.

        Returns:
            List of ProjectData instances
        """
        return await self.store_client.get_projects()

    async def create_project(self, name: str, description: Optional[str] = None) -> ProjectData:
        """
        Create an empty project in storage.

        Args:
            name: Display name of the project
            description: Optional free text

        Returns:
            The stored project
        """
        return await self.store_client.create_project(name, description)

    async def create_site(
        self,
        project_id: str,
        name: str,
        is_closed: Optional[bool] = None,
    ) -> SiteSession:
        """
        Create an empty site in storage and open a session on it.

        Args:
            project_id: Project the site belongs to
            name: Display name of the site
            is_closed: Initial closure flag, settings default when None

        Returns:
            The open SiteSession, keyed by the id assigned by storage
        """
        draft = SiteSession.new(name, closed=is_closed)
        stored = await self.store_client.create_site(project_id, draft.snapshot())
        session = SiteSession.from_persisted(stored)
        self.registry.put(session)
        return session

    def get_session(self, site_id: str) -> SiteSession:
        """
        Return the open session of a site.

        Raises:
            NotFound: If no session is open for the site
        """
        session = self.registry.get(site_id)
        if session is None:
            raise NotFound(f"No open editing session for site {site_id}")
        return session

    async def save(self, site_id: str) -> Site:
        """
        Persist the current snapshot of an open session.

        The session stays open so editing can continue.

        Args:
            site_id: Unique identifier for the site

        Returns:
            The site as stored
        """
        session = self.get_session(site_id)
        snapshot = session.snapshot()
        stored = await self.store_client.update_site(snapshot)
        logger.info(
            f"Saved site {site_id}: {snapshot.metrics.vertex_count} vertices, "
            f"{snapshot.metrics.perimeter_meters}m"
        )
        return stored

    def discard(self, site_id: str) -> None:
        """
        Drop an open session without saving.

        Raises:
            NotFound: If no session is open for the site
        """
        if self.registry.pop(site_id) is None:
            raise NotFound(f"No open editing session for site {site_id}")
        logger.info(f"Discarded editing session for site {site_id}")


# Singleton instance
_registry: Optional[SessionRegistry] = None


def get_session_registry() -> SessionRegistry:
    """
    Get or create the process-wide session registry.

    Returns:
        SessionRegistry instance
    """
    global _registry
    if _registry is None:
        _registry = SessionRegistry()
    return _registry
