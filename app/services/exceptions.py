"""
Domain exceptions raised by the service layer.

Services never build HTTP responses; each error carries the status code the
API layer should answer with plus any extra payload keys.
"""
from typing import Any, Dict, Optional


class ServiceError(Exception):
    """Base exception for service errors"""

    status_code = 400

    def __init__(self, error: str, status_code: Optional[int] = None, **extra: Any):
        super().__init__(error)
        self.message = error
        if status_code is not None:
            self.status_code = status_code
        self.extra: Dict[str, Any] = extra


class NotFoundError(ServiceError):
    status_code = 404


class ForbiddenError(ServiceError):
    status_code = 403
