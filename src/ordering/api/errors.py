"""HTTP mapping of the Ordering error taxonomy.

Protean's own handlers cover ValidationError (400) and ObjectNotFoundError
(404), and with them EmptyCartError, InvalidCouponError and
ProductNotFoundError. The handlers below add the errors that live outside
protean's hierarchy.
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from protean.integrations.fastapi import register_exception_handlers

from ordering.errors import ConflictError, ForbiddenError, NegativeResultError, UnauthenticatedError

logger = structlog.get_logger(__name__)

_STATUS_CODES = {
    UnauthenticatedError: 401,
    ForbiddenError: 403,
    ConflictError: 409,
    NegativeResultError: 500,
}


def _error_handler(status_code: int):
    async def handler(request: Request, exc: Exception) -> JSONResponse:
        log = logger.error if status_code >= 500 else logger.warning
        log(
            "Request failed",
            path=request.url.path,
            status_code=status_code,
            error_type=exc.__class__.__name__,
            error=str(exc),
        )
        return JSONResponse(status_code=status_code, content={"error": str(exc)})

    return handler


def register_error_handlers(app: FastAPI) -> None:
    """Install protean's exception handlers plus the Ordering-specific ones."""
    register_exception_handlers(app)
    for exc_class, status_code in _STATUS_CODES.items():
        app.add_exception_handler(exc_class, _error_handler(status_code))
