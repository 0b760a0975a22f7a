"""
Exception classes for Todo Service.

Every error a handler reports to the caller derives from PlannerError and is
rendered as a plain-text body with the status from ERROR_STATUS_CODES.
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


class RedundantParamError(PlannerError):
    """A field was supplied that must be left empty"""

    def __init__(self, param: str):
        super().__init__(f"redundant param: {param}")


class NotFoundError(PlannerError):
    """The requested entity does not exist"""


class InvalidParamError(PlannerError):
    """A field is present but its value is not acceptable"""

    def __init__(self, param: str, reason: str):
        super().__init__(f"invalid param: {param} {reason}")


class UpstreamUnavailableError(PlannerError):
    """A downstream service could not be reached"""


ERROR_STATUS_CODES: Dict[Type[PlannerError], int] = {
    MissingParamError: 406,
    RedundantParamError: 406,
    NotFoundError: 406,
    InvalidParamError: 406,
    UpstreamUnavailableError: 503,
}


def status_code_for(exc: PlannerError) -> int:
    """Resolve the HTTP status for an error, walking its class hierarchy."""
    for cls in type(exc).__mro__:
        if cls in ERROR_STATUS_CODES:
            return ERROR_STATUS_CODES[cls]
    return exc.status_code
