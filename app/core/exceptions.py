from typing import Optional

from fastapi import status


class ServiceError(Exception):
    """Base exception for service layer errors.

    ``error`` carries low-level detail (e.g. the text of an unexpected exception).
    It is only rendered to clients outside production.
    """

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        error: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.error = error


def unexpected_error(message: str, exc: Exception) -> ServiceError:
    """Wrap an uncaught exception as a generic 500 ServiceError."""
    return ServiceError(message, status.HTTP_500_INTERNAL_SERVER_ERROR, error=str(exc))
