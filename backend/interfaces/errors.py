"""Map domain errors to HTTP responses without leaking internals."""
from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from domain.errors import DomainError, ErrorCode

STATUS_BY_CODE = {
    ErrorCode.INVALID_REQUEST: 400,
    ErrorCode.DEVICE_NOT_FOUND: 404,
    ErrorCode.NO_ACTIVE_SESSION: 404,
    ErrorCode.DEVICE_UNAVAILABLE: 409,
    ErrorCode.DEVICE_BUSY: 409,
    ErrorCode.CONFIGURATION: 500,
}


async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    return JSONResponse(
        status_code=STATUS_BY_CODE.get(exc.code, 400),
        content={"code": exc.code.value, "detail": exc.message},
    )


def install_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DomainError, domain_error_handler)
