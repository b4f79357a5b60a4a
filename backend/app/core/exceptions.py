"""
Domain exceptions for Request Desk.

Services raise these instead of ``HTTPException`` so they stay usable outside
a request. ``main.py`` renders every subclass as
``{"detail": message, "code": code}`` with the class's ``status_code``.

Usage:
    from app.core.exceptions import NotFoundError

    if not request:
        raise NotFoundError("Request", request_id)
"""
from typing import Any, Dict, Optional


class RequestDeskError(Exception):
    """Base exception for all Request Desk errors"""

    status_code: int = 500

    def __init__(
        self,
        message: str,
        code: str = "INTERNAL_ERROR",
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"detail": self.message, "code": self.code}
        if self.details:
            body["details"] = self.details
        return body


# ============================================
# Input errors (400)
# ============================================

class ValidationError(RequestDeskError):
    """Malformed or missing input"""

    status_code = 400

    def __init__(self, message: str = "Invalid input", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="VALIDATION_ERROR", details=details)


class InvalidStateTransitionError(RequestDeskError):
    """Request status does not allow the attempted operation"""

    status_code = 400

    def __init__(self, message: str, current_status: Optional[str] = None, target_status: Optional[str] = None):
        details = {}
        if current_status is not None:
            details["current_status"] = current_status
        if target_status is not None:
            details["target_status"] = target_status
        super().__init__(message, code="INVALID_STATE_TRANSITION", details=details)


class InvalidCredentialsError(RequestDeskError):
    """Login failed. Deliberately says nothing about which part was wrong."""

    status_code = 400

    def __init__(self):
        super().__init__("Invalid credentials", code="INVALID_CREDENTIALS")


# ============================================
# Authentication & Authorization Errors
# ============================================

class AuthenticationRequired(RequestDeskError):
    """No bearer token on a protected route"""

    status_code = 401

    def __init__(self, message: str = "No token provided"):
        super().__init__(message, code="AUTHENTICATION_REQUIRED")


class InvalidTokenError(RequestDeskError):
    """Token signature, expiry or payload is not acceptable"""

    status_code = 401

    def __init__(self, message: str = "Invalid token"):
        super().__init__(message, code="INVALID_TOKEN")


class ForbiddenError(RequestDeskError):
    """Authenticated, but not allowed to act on this resource"""

    status_code = 403

    def __init__(self, message: str = "Not authorized"):
        super().__init__(message, code="FORBIDDEN")


# ============================================
# Resource Errors
# ============================================

class NotFoundError(RequestDeskError):
    status_code = 404

    def __init__(self, resource_type: str, resource_id: Any):
        super().__init__(
            f"{resource_type} not found",
            code=f"{resource_type.upper()}_NOT_FOUND",
            details={"resource_type": resource_type, "resource_id": resource_id},
        )


class ConflictError(RequestDeskError):
    """Write lost against a concurrent change or a unique key"""

    status_code = 409

    def __init__(self, message: str = "Conflict", code: str = "CONFLICT"):
        super().__init__(message, code=code)


class EmailAlreadyRegisteredError(ConflictError):
    # The client treats a duplicate email like any other registration error.
    status_code = 400

    def __init__(self):
        super().__init__("User already exists", code="EMAIL_ALREADY_REGISTERED")
