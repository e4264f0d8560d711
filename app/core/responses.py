# app/core/responses.py

from typing import Any, List, Optional
from fastapi import Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.core.errors import BookingError
from app.core.logger import logger


def ok(data: Any = None, message: str = "OK", status_code: int = 200) -> dict:
    return {
        "success": True,
        "status": status_code,
        "message": message,
        "data": data,
    }


def error_response(status_code: int, message: str, errors: Optional[List[str]] = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder({
            "success": False,
            "status": status_code,
            "message": message,
            "errors": errors or [],
        }),
    )


async def booking_error_handler(request: Request, exc: BookingError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message} {exc.errors}")
        # Server faults only expose the short message
        return error_response(exc.status_code, exc.message)
    return error_response(exc.status_code, exc.message, exc.errors)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = []
    for err in exc.errors():
        field = ".".join(str(part) for part in err.get("loc", []) if part != "body")
        errors.append(f"{field}: {err.get('msg')}" if field else err.get("msg"))
    return error_response(400, "Validation failed", errors)


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {str(exc)}")
    return error_response(500, "Internal server error")
