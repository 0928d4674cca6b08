from fastapi import HTTPException
from typing import Any, Dict, Optional


class VintageException(HTTPException):
    """Base exception for the Vintage admin API"""
    def __init__(
        self,
        status_code: int,
        detail: Any,
        headers: Optional[Dict[str, Any]] = None
    ):
        super().__init__(status_code=status_code, detail=detail, headers=headers)


class NotFoundException(VintageException):
    """Resource not found"""
    def __init__(self, resource: str, resource_id: Any):
        super().__init__(
            status_code=404,
            detail=f"{resource} with id {resource_id} not found"
        )
        self.resource = resource
        self.resource_id = resource_id


class ConflictError(VintageException):
    """Request conflicts with a uniqueness rule or a dependent record"""
    def __init__(self, detail: Any):
        super().__init__(status_code=409, detail=detail)


class DuplicateError(ConflictError):
    """Resource already exists"""
    def __init__(self, field: str, value: str, matched_id: Any = None):
        detail: Dict[str, Any] = {"message": f"{field} '{value}' already exists"}
        if matched_id is not None:
            detail["matchedId"] = str(matched_id)
        super().__init__(detail=detail)
        self.field = field
        self.value = value
        self.matched_id = matched_id


class DependencyConflictError(ConflictError):
    """Deletion blocked because other records still reference the resource"""
    def __init__(self, resource: str, resource_id: Any, dependencies: Dict[str, int]):
        blocking = {name: count for name, count in dependencies.items() if count}
        described = ", ".join(f"{count} {name}" for name, count in blocking.items())
        super().__init__(
            detail={
                "message": f"{resource} {resource_id} is still referenced by {described}",
                "dependencies": blocking,
            }
        )
        self.dependencies = blocking


class ValidationFailedError(VintageException):
    """Request is well-formed but breaks a business rule"""
    def __init__(self, message: str):
        super().__init__(status_code=422, detail=message)


class UnauthorizedError(VintageException):
    """User is not authorized"""
    def __init__(self, message: str = "Not authorized"):
        super().__init__(
            status_code=401,
            detail=message,
            headers={"WWW-Authenticate": "Bearer"}
        )


class ForbiddenError(VintageException):
    """Authenticated, but the role does not allow the operation"""
    def __init__(self, message: str = "Admin privileges required"):
        super().__init__(status_code=403, detail=message)


class TransientNetworkError(Exception):
    """A read against the persistence/API boundary failed in a way worth one retry."""


class NameLoadError(Exception):
    """Reading the existing names for a duplicate check failed; the check reports no match."""
