"""
Dependency injection for FastAPI.
"""
from typing import Annotated
from fastapi import Depends

from glass_mapper.infrastructure.site_store_client import (
    SiteStoreClient,
    get_store_client,
)
from glass_mapper.services.application.site_editing_service import (
    SessionRegistry,
    SiteEditingService,
    get_session_registry,
)


def get_site_editing_service(
    store_client: Annotated[SiteStoreClient, Depends(get_store_client)],
    registry: Annotated[SessionRegistry, Depends(get_session_registry)],
) -> SiteEditingService:
    """
    Dependency factory for SiteEditingService.

    Args:
        store_client: Site storage client (injected)
        registry: Open session registry (injected)

    Returns:
        SiteEditingService instance
    """
    return SiteEditingService(store_client=store_client, registry=registry)


# Type aliases for cleaner route signatures
SiteEditingServiceDep = Annotated[SiteEditingService, Depends(get_site_editing_service)]
