# maintenix/exception.py
import logging

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class MaintenixError(HTTPException):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "Internal server error"

    def __init__(self, detail: str | None = None):
        super().__init__(
            status_code=self.status_code, detail=detail or self.default_detail
        )


class ValidationError(MaintenixError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Invalid request"


class WeakPasswordError(ValidationError):
    default_detail = "Password does not meet the strength policy"


class NotFoundError(MaintenixError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Not found"


class InvalidCodeError(MaintenixError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Invalid OTP"


class ExpiredError(MaintenixError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "OTP has expired. Please request a new one."


class RateLimitError(MaintenixError):
    status_code = status.HTTP_429_TOO_MANY_REQUESTS
    default_detail = "Rate limit exceeded. Try again later."


class DeliveryError(MaintenixError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "Failed to send OTP email. Please try again."


class InternalError(MaintenixError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "Internal server error"


def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code, content={"success": False, "error": message}
    )


async def maintenix_error_handler(request: Request, exc: HTTPException):
    return _error_response(exc.status_code, str(exc.detail))


async def request_validation_handler(request: Request, exc: RequestValidationError):
    missing = [
        str(err["loc"][-1]) for err in exc.errors() if err.get("type") == "missing"
    ]
    if missing:
        message = f"{', '.join(missing)} {'is' if len(missing) == 1 else 'are'} required"
    elif any(err.get("type") == "json_invalid" for err in exc.errors()):
        message = "Invalid JSON body"
    else:
        first = exc.errors()[0] if exc.errors() else {}
        field = first.get("loc", ["body"])[-1]
        message = f"Invalid {field}: {first.get('msg', 'malformed value')}"
    return _error_response(status.HTTP_400_BAD_REQUEST, message)


async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return _error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR, InternalError.default_detail
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(MaintenixError, maintenix_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
