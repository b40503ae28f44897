"""Typed failures raised by the LCMP core."""

from enum import Enum
from typing import Iterable


class ErrorKind(str, Enum):
    """Category of a failure, mapped to a transport status by the caller."""

    CAPACITY = "capacity"
    VALIDATION = "validation"
    RESOLUTION = "resolution"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    CATALOG_UNAVAILABLE = "catalog_unavailable"


_HTTP_STATUS = {
    ErrorKind.CAPACITY: 403,
    ErrorKind.VALIDATION: 400,
    ErrorKind.RESOLUTION: 403,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.CONFLICT: 403,
    ErrorKind.CATALOG_UNAVAILABLE: 500,
}


class LcmpError(Exception):
    """Base class for all failures reported by the context store and catalog."""

    kind: ErrorKind = ErrorKind.VALIDATION

    def __init__(self, message: str, *, reasons: Iterable[str] = ()) -> None:
        super().__init__(message)
        self.message = message
        self.reasons = tuple(reasons)

    @property
    def http_status(self) -> int:
        return _HTTP_STATUS[self.kind]


class CapacityExceeded(LcmpError):
    kind = ErrorKind.CAPACITY

    def __init__(self, max_contexts: int) -> None:
        super().__init__(f"maximum number of active contexts reached ({max_contexts})")
        self.max_contexts = max_contexts


class ValidationFailed(LcmpError):
    """One or more structural problems; ``reasons`` keeps each one separately."""

    kind = ErrorKind.VALIDATION

    def __init__(self, reasons: Iterable[str]) -> None:
        reasons = tuple(reasons)
        super().__init__(";".join(reasons), reasons=reasons)


class ResolutionFailed(LcmpError):
    kind = ErrorKind.RESOLUTION

    def __init__(self, app_d_id: str | None) -> None:
        super().__init__(f"no matching reference URI for {app_d_id or 'unspecified'}")
        self.app_d_id = app_d_id


class NotFound(LcmpError):
    kind = ErrorKind.NOT_FOUND

    def __init__(self, context_id: str) -> None:
        super().__init__(f"context ID not found: {context_id}")
        self.context_id = context_id


class Conflict(LcmpError):
    kind = ErrorKind.CONFLICT

    def __init__(self, context_id: str) -> None:
        super().__init__("request does not match stored context")
        self.context_id = context_id


class CatalogUnavailable(LcmpError):
    """The catalog could not be loaded; raised on every query afterwards."""

    kind = ErrorKind.CATALOG_UNAVAILABLE
