from typing import Optional

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.platform.logger import get_logger
from app.platform.response import api_response

logger = get_logger(__name__)


class ComplianceError(Exception):
    """Base class for scanner errors."""


class FetchError(ComplianceError):
    """A page could not be fetched (transport failure or non-2xx status)."""

    def __init__(self, url: str, message: str, status_code: Optional[int] = None):
        self.url = url
        self.message = message
        self.status_code = status_code
        super().__init__(f"Failed to fetch {url}: {message}")


class RuleCatalogueError(ComplianceError):
    """The rule catalogue is malformed or inconsistent with the registered checks."""


def add_exception_handlers(app):
    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return api_response(message=str(exc.detail) or "Error", status_code=exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return api_response(
            message="Validation failed",
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            data={"errors": exc.errors()},
        )

    @app.exception_handler(FetchError)
    async def fetch_exception_handler(request: Request, exc: FetchError):
        logger.warning(str(exc))
        return api_response(
            message=str(exc),
            status_code=status.HTTP_502_BAD_GATEWAY,
            data={"url": exc.url, "upstream_status": exc.status_code},
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled exception: {exc}")
        return api_response(
            message="Internal server error",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )
