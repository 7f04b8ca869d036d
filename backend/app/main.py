from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from backend.app.api.v1.router import router as v1_router
from backend.app.core.config import settings
from backend.app.utils.logger import setup_logger
from backend.services.errors import (
    AuthorizationError,
    ConflictError,
    DomainError,
    EmptyReceiptError,
    InsufficientStockError,
    InvalidStateTransitionError,
    NotFoundError,
    OverReceiptError,
)

logger = setup_logger("acmv_spares.api")

# first match wins, subclasses before their bases
ERROR_STATUS: list[tuple[type[DomainError], int]] = [
    (NotFoundError, 404),
    (AuthorizationError, 403),
    (InsufficientStockError, 400),
    (OverReceiptError, 400),
    (EmptyReceiptError, 400),
    (InvalidStateTransitionError, 409),
    (ConflictError, 409),
]


def status_for(exc: DomainError) -> int:
    for exc_type, code in ERROR_STATUS:
        if isinstance(exc, exc_type):
            return code
    return 400


app = FastAPI(title=settings.app_title, version="0.1.0")


@app.exception_handler(DomainError)
async def domain_error_handler(request: Request, exc: DomainError):
    code = status_for(exc)
    logger.warning(f"{request.method} {request.url.path} -> {code} {type(exc).__name__}: {exc.message}")
    return JSONResponse(status_code=code, content={"detail": exc.message, "error": type(exc).__name__})


app.include_router(v1_router, prefix="/v1")
