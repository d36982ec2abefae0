from __future__ import annotations


class ServiceError(Exception):
    """Base error for chat service failures."""


class ConfigurationError(ServiceError):
    pass


class RemoteServiceError(ServiceError):
    """Any failure while invoking the remote completion endpoint."""


class TransportError(RemoteServiceError):
    """Network-level failure (connection refused, DNS, reset...)."""


class RequestTimeoutError(RemoteServiceError):
    """Upstream request exceeded the transport timeout."""


class AuthenticationError(RemoteServiceError):
    pass


class RateLimitError(RemoteServiceError):
    def __init__(self, retry_after_seconds: int | None = None, message: str = "Rate limited"):
        super().__init__(message)
        self.retry_after_seconds = retry_after_seconds


class UpstreamProtocolError(RemoteServiceError):
    """Unexpected upstream status or response shape."""
