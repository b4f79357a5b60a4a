from .user import User, UserRole
from .request import Request, RequestStatus

__all__ = [
    "User",
    "UserRole",
    "Request",
    "RequestStatus",
]
