from typing import Any, Optional

from vintage_admin.core.exceptions import TransientNetworkError

__all__ = [
    "ApiError",
    "NotFoundError",
    "ConflictError",
    "UnauthorizedError",
    "ReadOnlyFlagError",
    "TransientNetworkError",
]


class ApiError(Exception):
    """The admin API answered with an error status."""

    def __init__(self, message: str, status_code: Optional[int] = None, payload: Any = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.payload = payload


class NotFoundError(ApiError):
    pass


class ConflictError(ApiError):
    @property
    def matched_id(self) -> Optional[str]:
        """Id of the existing record a duplicate collided with, when the API reports one."""
        detail = self.payload.get("detail") if isinstance(self.payload, dict) else None
        if isinstance(detail, dict):
            return detail.get("matchedId")
        return None

    @property
    def dependencies(self) -> dict:
        detail = self.payload.get("detail") if isinstance(self.payload, dict) else None
        if isinstance(detail, dict):
            return detail.get("dependencies") or {}
        return {}


class UnauthorizedError(ApiError):
    pass


class ReadOnlyFlagError(ApiError):
    """The screen is not allowed to change this entity's featured flag."""
