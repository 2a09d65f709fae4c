# app/core/exceptions.py
from typing import Any, Optional

from fastapi import HTTPException


class AppError(HTTPException):
    """Base error; `detail` becomes the `error` field of the JSON body."""

    status_code = 500
    error = "Internal Server Error"

    def __init__(self, error: Optional[str] = None, details: Any = None):
        super().__init__(status_code=self.status_code, detail=error or self.error)
        self.details = details


class ClientError(AppError):
    status_code = 400
    error = "Bad Request"


class NotFound(AppError):
    status_code = 404
    error = "Not Found"


class Conflict(AppError):
    status_code = 409
    error = "Conflict"


class UpstreamFailure(AppError):
    status_code = 502
    error = "Upstream service failure"


class TimedOut(AppError):
    status_code = 504
    error = "Operation timed out"


class InternalError(AppError):
    status_code = 500
    error = "Internal Server Error"
