"""
Custom exception classes for the application.
"""

from typing import Optional

from fastapi import HTTPException, status


class APIException(HTTPException):
    """Base API exception."""

    def __init__(
        self,
        status_code: int,
        detail: str,
        error_code: str = None,
        headers: dict = None
    ):
        super().__init__(status_code=status_code, detail=detail, headers=headers)
        self.error_code = error_code or f"ERR_{status_code}"


class ContentLoadError(APIException):
    """Upstream content (document or sheet) could not be loaded.

    ``error`` is the message shown to clients; ``detail`` carries the
    technical reason.
    """

    def __init__(self, error: str, detail: Optional[str] = None, headers: dict = None):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=detail or error,
            error_code="CONTENT_LOAD_ERROR",
            headers=headers,
        )
        self.error = error
