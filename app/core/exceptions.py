"""Typed HTTP errors raised by the service layer.

Each class fixes the status code and the machine-readable ``error_code`` that
the global exception handler puts into the error envelope.
"""
from typing import Any, Dict, Optional

from fastapi import HTTPException, status


class ServiceError(HTTPException):
    status_code: int = status.HTTP_400_BAD_REQUEST
    error_code: str = "BAD_REQUEST"

    def __init__(self, detail: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(status_code=self.status_code, detail=detail)
        self.details = details


class NotFoundError(ServiceError):
    status_code = status.HTTP_404_NOT_FOUND
    error_code = "NOT_FOUND"


class NotAuthorizedError(ServiceError):
    status_code = status.HTTP_403_FORBIDDEN
    error_code = "FORBIDDEN"


class InvalidStateError(ServiceError):
    status_code = status.HTTP_400_BAD_REQUEST
    error_code = "INVALID_STATE"


class PreconditionFailedError(ServiceError):
    status_code = status.HTTP_400_BAD_REQUEST
    error_code = "PRECONDITION_FAILED"


class ConflictError(ServiceError):
    status_code = status.HTTP_409_CONFLICT
    error_code = "CONFLICT"
