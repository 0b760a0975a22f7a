"""
Exception classes for Users Service.

Errors derive from PlannerError and are rendered as a plain-text body with the
status from ERROR_STATUS_CODES. Identity provider failures keep the status the
provider answered with.
"""
from typing import Dict, Type


class PlannerError(Exception):
    """Base exception for errors reported back to the client"""

    status_code: int = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)


class MissingParamError(PlannerError):
    """A required field is absent or blank"""

    def __init__(self, param: str):
        super().__init__(f"missed param: {param}")


class ConflictError(PlannerError):
    """The user already exists in the identity provider"""


class UpstreamUnavailableError(PlannerError):
    """The identity provider could not be reached"""


class IdentityProviderError(PlannerError):
    """Keycloak answered with a non-success status"""

    def __init__(self, status_code: int, message: str):
        self.status_code = status_code
        super().__init__(message)


ERROR_STATUS_CODES: Dict[Type[PlannerError], int] = {
    MissingParamError: 406,
    ConflictError: 409,
    UpstreamUnavailableError: 503,
}


def status_code_for(exc: PlannerError) -> int:
    """Resolve the HTTP status for an error, walking its class hierarchy."""
    for cls in type(exc).__mro__:
        if cls in ERROR_STATUS_CODES:
            return ERROR_STATUS_CODES[cls]
    return exc.status_code
