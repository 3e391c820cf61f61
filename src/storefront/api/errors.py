"""HTTP error mapping for the Storefront API.

Protean's handlers cover validation (400) and missing aggregates (404). The
storefront adds access denial (403) and catalogue failures (502/503).
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from protean.integrations.fastapi import register_exception_handlers

from storefront.errors import CatalogueError, CatalogueUnavailableError, OrderAccessDeniedError

logger = structlog.get_logger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    register_exception_handlers(app)

    @app.exception_handler(OrderAccessDeniedError)
    async def _access_denied(request: Request, exc: OrderAccessDeniedError):
        return JSONResponse(status_code=403, content={"error": str(exc)})

    @app.exception_handler(CatalogueUnavailableError)
    async def _catalogue_unavailable(request: Request, exc: CatalogueUnavailableError):
        logger.warning("Catalogue unavailable", path=request.url.path, error=str(exc))
        return JSONResponse(status_code=503, content={"error": str(exc)})

    @app.exception_handler(CatalogueError)
    async def _catalogue_error(request: Request, exc: CatalogueError):
        logger.warning("Catalogue error", path=request.url.path, status_code=exc.status_code, error=str(exc))
        return JSONResponse(status_code=502, content={"error": str(exc)})
