"""
Error taxonomy for the gateway client.

Two families:
- ApiError: raised by ApiClient for every failed call. Callers branch on
  `status` (0 means no response was received).
- AuthError: raised by SessionBridge and AuthController for flow-level
  failures.
"""

from typing import Any, Optional


class ApiError(Exception):
    """A failed call against one of the backend services."""

    def __init__(self, message: str, status: int, details: Any = None):
        super().__init__(message)
        self.message = message
        self.status = status
        self.details = details

    def server_message(self) -> Optional[str]:
        """Return the `message` field of a JSON error body, if the server sent one."""
        if isinstance(self.details, dict):
            message = self.details.get('message')
            if isinstance(message, str) and message.strip():
                return message
        return None


class HttpError(ApiError):
    """The server responded with a non-2xx status."""


class NetworkFailure(ApiError):
    """No response: connection refused, DNS failure, timeout, protocol error."""

    def __init__(self, message: str, details: Any = None):
        super().__init__(message, status=0, details=details)


class AuthError(Exception):
    """Base class for sign-in flow failures."""

    default_message = 'Authentication error'

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message


class NoCredential(AuthError):
    """A bridge exchange was requested without a primary bearer value."""

    default_message = 'No primary credential available for the session bridge'


class InvalidCredentials(AuthError):
    """The primary identity service rejected the login."""

    default_message = 'Login failed'


class RegistrationFailed(AuthError):
    """The primary identity service rejected the registration."""

    default_message = 'Registration failed'


class ProfileUnavailable(AuthError):
    """The primary session is valid but the profile could not be fetched."""

    default_message = 'Profile unavailable'


class SessionNotBridged(AuthError):
    """A resource call was attempted before a resource session was established."""

    default_message = 'Resource session not established'


class BootstrapError(Exception):
    """The runtime bootstrap script could not be fetched or parsed."""
