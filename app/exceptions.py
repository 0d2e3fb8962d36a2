from enum import Enum
from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse
from typing import Optional


class ErrorKind(str, Enum):
    INVALID_TYPE = "invalid_type"
    TOO_LARGE = "too_large"
    DECODE_ERROR = "decode_error"
    MALFORMED_ENCODING = "malformed_encoding"
    STORE_UNAVAILABLE = "store_unavailable"
    NOT_FOUND = "not_found"


class UploadError(Exception):
    """Base class for every failure of the image-upload pipeline."""

    kind: ErrorKind
    status_code: int = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidType(UploadError):
    kind = ErrorKind.INVALID_TYPE
    status_code = 415


class TooLarge(UploadError):
    kind = ErrorKind.TOO_LARGE
    status_code = 413


class DecodeError(UploadError):
    kind = ErrorKind.DECODE_ERROR
    status_code = 422


class MalformedEncoding(UploadError):
    kind = ErrorKind.MALFORMED_ENCODING
    status_code = 400


class StoreUnavailable(UploadError):
    kind = ErrorKind.STORE_UNAVAILABLE
    status_code = 503


class NotFound(UploadError):
    kind = ErrorKind.NOT_FOUND
    status_code = 404


def create_error_response(error_message: str, kind: Optional[str] = None) -> dict:
    """Create a standardized error response"""
    response = {
        "success": False,
        "data": None,
        "error": error_message
    }
    if kind is not None:
        response["kind"] = kind
    return response

def create_success_response(data: dict) -> dict:
    """Create a standardized success response"""
    return {
        "success": True,
        "data": data,
        "error": None
    }

async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Custom exception handler for HTTPException"""
    return JSONResponse(
        status_code=exc.status_code,
        content=create_error_response(exc.detail)
    )

async def upload_error_handler(request: Request, exc: UploadError) -> JSONResponse:
    """Render pipeline errors with their kind so the dashboard can pick a notification"""
    return JSONResponse(
        status_code=exc.status_code,
        content=create_error_response(exc.message, exc.kind.value)
    )
