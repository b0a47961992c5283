"""
Failure types raised by the user service and turned into HTTP responses
by the handlers in ``api.middleware``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List


@dataclass
class FieldError:
    """One field-scoped error: which field, what is wrong, what was sent."""

    field: str
    message: str
    value: Any = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "value": self.value,
            "msg": self.message,
            "param": self.field,
            "location": "body",
        }


class UserServiceError(Exception):
    """Base class for failures the API reports to the client."""


class RequestValidationFailed(UserServiceError):
    def __init__(self, errors: List[FieldError]):
        self.errors = errors
        super().__init__(f"{len(errors)} invalid field(s)")


class UserNotRegistered(UserServiceError):
    def __init__(self, email: str):
        self.email = email
        self.error = FieldError("email", f"The email {email} is not registered!", email)
        super().__init__(self.error.message)


class IncorrectPassword(UserServiceError):
    def __init__(self):
        self.error = FieldError("senha", "The password entered is incorrect", "senha")
        super().__init__(self.error.message)


class StoreError(UserServiceError):
    """The store rejected a write; the underlying exception is kept as-is."""

    def __init__(self, cause: Exception):
        self.cause = cause
        super().__init__(str(cause))

    def to_dict(self) -> Dict[str, Any]:
        return {"error": str(self.cause), "type": type(self.cause).__name__}


class UserListingFailed(UserServiceError):
    def __init__(self, cause: Exception):
        self.cause = cause
        super().__init__(str(cause))


class LoginFailed(UserServiceError):
    """Anything unexpected during login (store outage, signing failure...)."""

    def __init__(self, cause: Exception):
        self.cause = cause
        super().__init__(str(cause))


class TokenSigningError(Exception):
    pass
