"""Errors raised by OAuth-style credential providers."""

from typing import Optional


class OAuthError(Exception):
    """Base class for provider login and discovery failures."""


class LoginCancelledError(OAuthError):
    """The shared abort signal was set while a login was in progress."""

    def __init__(self, message: str = "Login cancelled"):
        super().__init__(message)


class CredentialValidationError(OAuthError):
    """User-entered credential data was rejected (empty key, bad URL)."""


class UpstreamHTTPError(OAuthError):
    """The provider's REST endpoint answered with a non-2xx status."""

    def __init__(self, provider_name: str, status: int, status_text: str, body: Optional[str] = None):
        self.status = status
        self.status_text = status_text
        self.body = body
        super().__init__(f"Failed to fetch models from {provider_name}: {status} {status_text}")


class ModelListParseError(OAuthError):
    """The model listing body was not the expected `{object, data: [...]}` shape."""


class UpstreamConnectionError(OAuthError):
    """The provider's REST endpoint could not be reached (DNS, refused, timeout)."""

    def __init__(self, provider_name: str, reason: str):
        self.reason = reason
        super().__init__(f"Could not reach {provider_name}: {reason}")
