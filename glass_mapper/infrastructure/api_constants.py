"""
Site storage endpoint constants and configuration.

This module contains the storage service endpoint paths and related constants.
Centralizing these values makes it easy to swap out endpoints or update API versions.
"""


class SiteStoreEndpoints:
    """Site storage service endpoint paths."""

    API_BASE = "/api"

    PROJECTS = f"{API_BASE}/projects"
    PROJECT_SITES = f"{API_BASE}/projects/{{project_id}}/sites"
    SITE_BY_ID = f"{API_BASE}/sites/{{site_id}}"

    @classmethod
    def get_project_sites(cls, project_id: str) -> str:
        """
        Get the site collection endpoint of a project.

        Args:
            project_id: Project ID

        Returns:
            Formatted endpoint path
        """
        return cls.PROJECT_SITES.format(project_id=project_id)

    @classmethod
    def get_site(cls, site_id: str) -> str:
        """
        Get the endpoint of a single site.

        Args:
            site_id: Site ID

        Returns:
            Formatted endpoint path
        """
        return cls.SITE_BY_ID.format(site_id=site_id)


class APIConstants:
    """General API configuration constants."""

    # HTTP Headers
    CONTENT_TYPE_JSON = "application/json"

    # Timeouts (in seconds)
    DEFAULT_TIMEOUT = 30.0

    # Keys of the storage site shape; anything else in a stored row is ignored
    SITE_FIELDS = (
        "id",
        "name",
        "createdAt",
        "points",
        "metrics",
        "isClosed",
        "contractorCommitmentPerDay",
        "dailyProgress",
        "customTileUrl",
    )
