"""
Global error handling middleware.
"""
import logging
from fastapi import Request, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from typing import Callable

from glass_mapper.domain.exceptions import (
    IllegalTransition,
    InvalidInput,
    NotFound,
    SiteCoreError,
)
from glass_mapper.infrastructure.site_store_client import SiteStoreError


logger = logging.getLogger(__name__)

DOMAIN_ERROR_STATUS = {
    InvalidInput: (status.HTTP_400_BAD_REQUEST, "Invalid request"),
    NotFound: (status.HTTP_404_NOT_FOUND, "Not found"),
    IllegalTransition: (status.HTTP_409_CONFLICT, "Action not allowed"),
}


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """
    Global error handling middleware.

    Catches unhandled exceptions and returns consistent error responses.
    """

    async def dispatch(self, request: Request, call_next: Callable):
        """
        Process the request and handle any exceptions.

        Args:
            request: The incoming request
            call_next: The next middleware or route handler

        Returns:
            Response object
        """
        try:
            response = await call_next(request)
            return response

        except SiteStoreError as e:
            logger.error(
                f"Site storage error: {str(e)}",
                extra={
                    "path": request.url.path,
                    "method": request.method,
                    "status_code": e.status_code,
                }
            )
            # Pass through the status code chosen by the storage client
            return JSONResponse(
                status_code=e.status_code,
                content={
                    "error": "Site storage error",
                    "detail": e.message,
                }
            )

        except SiteCoreError as e:
            status_code, error = DOMAIN_ERROR_STATUS.get(
                type(e), (status.HTTP_400_BAD_REQUEST, "Invalid request")
            )
            logger.warning(
                f"{type(e).__name__}: {e.message}",
                extra={
                    "path": request.url.path,
                    "method": request.method,
                }
            )
            return JSONResponse(
                status_code=status_code,
                content={
                    "error": error,
                    "detail": e.message,
                }
            )

        except Exception as e:
            # Log unexpected errors
            logger.exception(
                f"Unhandled exception: {str(e)}",
                extra={
                    "path": request.url.path,
                    "method": request.method,
                }
            )
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content={
                    "error": "Internal server error",
                    "detail": "An unexpected error occurred",
                }
            )
