"""
Custom exceptions for pdsync.
"""

from typing import Any, Optional


class PipedriveSyncError(Exception):
    """Base class for every error raised while syncing a person"""

    pass


class ConfigurationError(PipedriveSyncError):
    """Raised when credentials, the mappings file or the input data are missing or unusable"""

    pass


class ValidationError(PipedriveSyncError):
    """Raised when the person can't be identified from the input data"""

    pass


class TransportError(PipedriveSyncError):
    """
    Raised by the Pipedrive client when a request fails.

    status_code is the HTTP status Pipedrive replied with (None if no response was received), error_code is set for
    network failures (eg 'connect_error') and response_data holds the decoded response body when there was one.
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        error_code: Optional[str] = None,
        response_data: Any = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.error_code = error_code
        self.response_data = response_data


class ClassifiedTransportError(TransportError):
    """A TransportError we recognise, with a message the user can act on"""

    message = 'Pipedrive request failed'

    @classmethod
    def from_transport_error(cls, exc: TransportError) -> 'ClassifiedTransportError':
        return cls(
            cls.message, status_code=exc.status_code, error_code=exc.error_code, response_data=exc.response_data
        )


class AuthenticationError(ClassifiedTransportError):
    message = 'Authentication failed - please check your API key'


class PermissionDeniedError(ClassifiedTransportError):
    message = 'Access forbidden - please check your API permissions'


class RateLimitError(ClassifiedTransportError):
    message = 'Rate limit exceeded - please try again later'


class RemoteServerError(ClassifiedTransportError):
    message = 'Pipedrive server error - please try again later'


class ConnectivityError(ClassifiedTransportError):
    message = 'Network error - please check your internet connection'
