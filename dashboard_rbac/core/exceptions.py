from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from loguru import logger
from sqlalchemy.exc import IntegrityError, SQLAlchemyError


async def integrity_error_handler(_request: Request, exc: IntegrityError) -> JSONResponse:
    logger.warning(f"Database constraint violation: {exc.orig!r}")
    return JSONResponse(status_code=409, content={"detail": "Database constraint violation"})


async def store_error_handler(_request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.opt(exception=exc).error("Store unavailable")
    return JSONResponse(
        status_code=503,
        content={"detail": "Store temporarily unavailable, please retry"},
        headers={"Retry-After": "1"},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Map store failures to client responses without leaking internals."""
    app.add_exception_handler(IntegrityError, integrity_error_handler)
    app.add_exception_handler(SQLAlchemyError, store_error_handler)
