"""Base exceptions for the VPN IP tracker."""

from enum import Enum


class TrackerError(Exception):
    """Base exception for all tracker errors."""

    pass


class ConfigInvalidError(TrackerError):
    """Token or report URL missing or malformed."""

    pass


class EnumerationError(TrackerError):
    """Network interfaces could not be queried."""

    pass


class ReportErrorKind(Enum):
    """Why a report did not reach the endpoint."""

    TRANSPORT = "transport"
    STATUS = "status"
    TLS = "tls"


class ReportError(TrackerError):
    """Report was not acknowledged by the remote endpoint."""

    def __init__(
        self,
        kind: ReportErrorKind,
        message: str,
        status: int | None = None,
    ):
        self.kind = kind
        self.status = status
        super().__init__(message)


class ServiceError(TrackerError):
    """Service install/uninstall failed."""

    pass
